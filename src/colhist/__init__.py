"""colhist - histograms of columns in delimited numeric text.

Example:
    from colhist import ColumnParser, Histogram

    parser = ColumnParser.single(1)
    values = [parser.parse_value(row).unwrap() for row in ["1.0,2.0", "3.0,4.0"]]
    histogram = Histogram.from_values(values, num_bins=4)
    histogram.labels, histogram.counts
"""

__version__ = "0.1.0"

from colhist.core.models import Result, RowResult
from colhist.expression import ExpressionEvaluator
from colhist.histogram import Bin, Histogram, ValueSet
from colhist.parsing import ColumnParser

__all__ = [
    "Bin",
    "ColumnParser",
    "ExpressionEvaluator",
    "Histogram",
    "Result",
    "RowResult",
    "ValueSet",
    "__version__",
]
