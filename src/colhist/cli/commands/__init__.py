"""CLI command implementations."""

from colhist.cli.commands import histogram

__all__ = ["histogram"]
