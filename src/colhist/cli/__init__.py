"""CLI for colhist.

Usage:
    colhist data.csv -c 2
    colhist data.csv -e '?0 * ?1' -n 20 -o hist.csv
    cat data.csv | colhist -c 0 --skip-header

Environment:
    Loads .env file from current directory if present.
    COLHIST_* variables set defaults (delimiter, bins, policy, precision).
"""

from colhist.cli.main import app, main

__all__ = ["app", "main"]
