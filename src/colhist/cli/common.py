"""Shared CLI utilities and constants."""

from __future__ import annotations

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from colhist.core.logging import configure_logging

# Load .env file from current directory (COLHIST_* defaults)
load_dotenv()

# Shared console instance; stdout is reserved for histogram output
console = Console(stderr=True)

# Common type aliases for typer options
VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v=INFO, -vv=DEBUG)",
    ),
]

LogFormatOption = Annotated[
    str | None,
    typer.Option(
        "--log-format",
        help="Log output format (console or json)",
    ),
]

QuietFlag = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Suppress the skipped-row summary",
    ),
]


def setup_logging(
    verbosity: int = 0,
    log_format: str = "console",
    base_level: str = "WARNING",
) -> None:
    """Configure structured logging based on verbosity level.

    Args:
        verbosity: 0=base_level, 1=INFO, 2+=DEBUG
        log_format: "console" for interactive use, "json" for scripting
        base_level: Level used without -v (from settings)
    """
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity >= 1:
        level = "INFO"
    else:
        level = base_level

    configure_logging(
        log_level=level,
        log_format=log_format,
        show_timestamps=verbosity >= 1,
        color=log_format == "console",
    )
