"""Histogram construction from a set of numeric values."""

from colhist.histogram.engine import Bin, Histogram, get_bin_index, get_bin_label
from colhist.histogram.values import ValueSet

__all__ = [
    "Bin",
    "Histogram",
    "ValueSet",
    "get_bin_index",
    "get_bin_label",
]
