"""Delimited text output for histograms."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TextIO

from colhist.histogram import Histogram

HEADER_FIELDS = ("bin_label", "bin_value")


def format_bins(
    histogram: Histogram,
    delimiter: str = ",",
    label_decimals: int = 2,
    count_decimals: int = 2,
    header: bool = False,
) -> Iterator[str]:
    """Yield one ``label<delim>count`` line per bin, without line terminators.

    Counts use the same fixed-point formatting as labels (``5.00``) unless
    ``count_decimals`` is 0.
    """
    if header:
        yield delimiter.join(HEADER_FIELDS)
    for b in histogram.bins:
        yield f"{b.label:.{label_decimals}f}{delimiter}{float(b.count):.{count_decimals}f}"


def write_histogram(
    histogram: Histogram,
    stream: TextIO,
    delimiter: str = ",",
    label_decimals: int = 2,
    count_decimals: int = 2,
    header: bool = False,
) -> int:
    """Write a histogram to a text stream. Returns the number of lines written."""
    written = 0
    for line in format_bins(histogram, delimiter, label_decimals, count_decimals, header):
        stream.write(line + "\n")
        written += 1
    stream.flush()
    return written
