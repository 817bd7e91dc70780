"""Main CLI application entry point."""

from __future__ import annotations

import typer

from colhist.cli.commands import histogram

app = typer.Typer(
    name="colhist",
    help="Histograms of columns in delimited numeric text.",
    add_completion=False,
)

# A single registered command runs without a subcommand name
app.command()(histogram.histogram)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
