"""Histogram command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from colhist.cli.common import (
    LogFormatOption,
    QuietFlag,
    VerboseOption,
    console,
    setup_logging,
)
from colhist.core.config import get_settings
from colhist.core.models import ErrorPolicy, MissingPolicy, Precision


def histogram(
    source: Annotated[
        Path | None,
        typer.Argument(
            help="Delimited text file to read (default: standard input)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="File to write histogram data to (default: standard output)",
            dir_okay=False,
        ),
    ] = None,
    column: Annotated[
        int | None,
        typer.Option(
            "--column",
            "-c",
            min=0,
            help="The zero indexed column to read",
        ),
    ] = None,
    expr: Annotated[
        str | None,
        typer.Option(
            "--expr",
            "-e",
            help=(
                "Expression over columns used to compute each value. "
                "'?' prefixes a zero indexed column, e.g. '?0 / (?1 + ?2)'"
            ),
        ),
    ] = None,
    delim: Annotated[
        str | None,
        typer.Option(
            "--delim",
            "-d",
            help="String separating columns in the input [default: ,]",
        ),
    ] = None,
    skip_header: Annotated[
        bool,
        typer.Option(
            "--skip-header",
            "-s",
            help="Ignore the first line of the input",
        ),
    ] = False,
    num_bins: Annotated[
        int | None,
        typer.Option(
            "--num-bins",
            "-n",
            min=1,
            help="Number of bins in the histogram [default: 10]",
        ),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Abort on the first row that cannot be read or parsed",
        ),
    ] = False,
    skip_missing: Annotated[
        bool,
        typer.Option(
            "--skip-missing",
            help="Skip rows that lack a requested column instead of reporting an error",
        ),
    ] = False,
    precision: Annotated[
        Precision | None,
        typer.Option(
            "--precision",
            help="Floating point width for parsing and binning [default: float64]",
        ),
    ] = None,
    header: Annotated[
        bool,
        typer.Option(
            "--header",
            help="Write a bin_label/bin_value header line",
        ),
    ] = False,
    label_decimals: Annotated[
        int | None,
        typer.Option("--label-decimals", min=0, help="Decimals for bin labels [default: 2]"),
    ] = None,
    count_decimals: Annotated[
        int | None,
        typer.Option("--count-decimals", min=0, help="Decimals for bin counts [default: 2]"),
    ] = None,
    quiet: QuietFlag = False,
    verbose: VerboseOption = 0,
    log_format: LogFormatOption = None,
) -> None:
    """Compute a histogram of one column, or of an expression over columns.

    Each output line is a bin's midpoint and its count, separated by the
    delimiter.

    Examples:

        colhist data.csv -c 2

        colhist data.csv -c 0 -n 20 -o hist.csv

        cat data.tsv | colhist -d $'\\t' -e '?1 / ?0' --skip-header

        colhist data.csv -c 3 --strict -vv
    """
    settings = get_settings()
    setup_logging(
        verbosity=verbose,
        log_format=log_format or settings.log_format,
        base_level=settings.log_level,
    )

    if (column is None) == (expr is None):
        console.print("[red]Error: exactly one of --column or --expr is required[/red]")
        raise typer.Exit(2)

    from colhist.pipeline.runner import RunConfig
    from colhist.pipeline.runner import run as run_histogram

    config = RunConfig.from_settings(
        settings,
        input_path=source,
        output_path=output,
        column=column,
        expression=expr,
        delimiter=delim,
        skip_header=skip_header,
        num_bins=num_bins,
        error_policy=ErrorPolicy.STRICT if strict else None,
        on_missing=MissingPolicy.SKIP if skip_missing else None,
        precision=precision,
        write_header=True if header else None,
        label_decimals=label_decimals,
        count_decimals=count_decimals,
    )

    result = run_histogram(config)
    if not result.success:
        console.print(f"[red]Error: {escape(result.error or 'run failed')}[/red]")
        raise typer.Exit(1)

    run_result = result.unwrap()

    if run_result.rows_skipped and not quiet:
        console.print(
            f"[yellow]Skipped {run_result.rows_skipped:,} of "
            f"{run_result.rows_read:,} rows[/yellow]"
        )
        for kind, count in sorted(run_result.skipped_by_kind.items()):
            console.print(f"  {kind}: {count:,}")
        if verbose:
            for warning in result.warnings:
                console.print(f"  - {escape(warning)}")

    if run_result.output_path and not quiet:
        console.print(
            f"Wrote {run_result.histogram.num_bins} bins "
            f"({run_result.rows_binned:,} values) to {run_result.output_path}"
        )
