"""Row-to-histogram driver: reading, value collection, rendering."""

from colhist.pipeline.collect import (
    Collection,
    Extractor,
    build_extractor,
    collect_values,
)
from colhist.pipeline.render import HEADER_FIELDS, format_bins, write_histogram
from colhist.pipeline.rows import read_rows
from colhist.pipeline.runner import RunConfig, RunResult, run

__all__ = [
    "Collection",
    "Extractor",
    "HEADER_FIELDS",
    "RunConfig",
    "RunResult",
    "build_extractor",
    "collect_values",
    "format_bins",
    "read_rows",
    "run",
    "write_histogram",
]
