"""Histogram run driver.

Reads rows from a file or standard input, extracts one value per row, bins
the values and writes the histogram to a file or standard output.

Usage:
    from colhist.pipeline import RunConfig, run

    result = run(RunConfig(input_path=Path("data.csv"), column=2, num_bins=20))
    if result.success:
        print(result.unwrap().histogram.counts)
"""

from __future__ import annotations

import sys
import time
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, BinaryIO, TextIO

from colhist.core.config import Settings
from colhist.core.logging import (
    end_run_metrics,
    get_logger,
    log_context,
    record_operation_timing,
    start_run_metrics,
)
from colhist.core.models import ErrorPolicy, MissingPolicy, Precision, Result, RowError
from colhist.expression import DEFAULT_MARKER
from colhist.histogram import Histogram
from colhist.pipeline.collect import build_extractor, collect_values
from colhist.pipeline.render import write_histogram
from colhist.pipeline.rows import read_rows

logger = get_logger(__name__)


@dataclass
class RunConfig:
    """Configuration for a histogram run.

    ``column`` and ``expression`` are mutually exclusive; exactly one is
    required. Columns are 0-indexed. A missing ``input_path`` reads standard
    input and a missing ``output_path`` writes standard output.
    """

    input_path: Path | None = None
    output_path: Path | None = None
    column: int | None = None
    expression: str | None = None
    delimiter: str = ","
    skip_header: bool = False
    num_bins: int = 10
    error_policy: ErrorPolicy = ErrorPolicy.LENIENT
    precision: Precision = Precision.FLOAT64
    on_missing: MissingPolicy = MissingPolicy.ERROR
    placeholder_marker: str = DEFAULT_MARKER
    encoding: str = "utf-8"
    write_header: bool = False
    label_decimals: int = 2
    count_decimals: int = 2

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> RunConfig:
        """Build a config from settings; overrides that are None are ignored."""
        names = {f.name for f in fields(cls)}
        values: dict[str, Any] = {
            "delimiter": settings.delimiter,
            "num_bins": settings.num_bins,
            "error_policy": settings.error_policy,
            "on_missing": settings.missing_policy,
            "precision": settings.precision,
            "placeholder_marker": settings.placeholder_marker,
            "encoding": settings.encoding,
            "write_header": settings.write_header,
            "label_decimals": settings.label_decimals,
            "count_decimals": settings.count_decimals,
        }
        for key, value in overrides.items():
            if key not in names:
                raise TypeError(f"unknown run option: {key}")
            if value is not None:
                values[key] = value
        return cls(**values)


@dataclass
class RunResult:
    """Result of a histogram run.

    Contains all information needed for CLI display:
    - The histogram itself
    - Row accounting (read, binned, skipped per error kind)
    - A sample of the row errors that were skipped
    """

    histogram: Histogram
    rows_read: int
    rows_binned: int
    rows_skipped: int = 0
    skipped_by_kind: Counter[str] = field(default_factory=Counter)
    errors: list[RowError] = field(default_factory=list)
    duration_seconds: float = 0.0
    output_path: Path | None = None


def run(
    config: RunConfig,
    stdin: BinaryIO | None = None,
    stdout: TextIO | None = None,
) -> Result[RunResult]:
    """Run a histogram end to end.

    Args:
        config: Run configuration
        stdin: Binary stream read when ``config.input_path`` is None
            (defaults to ``sys.stdin.buffer``)
        stdout: Text stream written when ``config.output_path`` is None
            (defaults to ``sys.stdout``)

    Returns:
        Result containing the RunResult, or a failure for setup errors and,
        in strict mode, for the first bad row
    """
    if config.num_bins < 1:
        return Result.fail(f"num_bins must be at least 1, got {config.num_bins}")

    try:
        extractor = build_extractor(
            column=config.column,
            expression=config.expression,
            delimiter=config.delimiter,
            precision=config.precision,
            on_missing=config.on_missing,
            marker=config.placeholder_marker,
        )
    except ValueError as e:
        return Result.fail(str(e))

    start_time = time.time()
    metrics = start_run_metrics()
    source = str(config.input_path) if config.input_path else "<stdin>"

    try:
        with log_context(input=source), ExitStack() as stack:
            logger.info(
                "run_started",
                column=config.column,
                expression=config.expression,
                num_bins=config.num_bins,
                policy=ErrorPolicy(config.error_policy).value,
            )

            if config.input_path is not None:
                try:
                    stream: BinaryIO = stack.enter_context(open(config.input_path, "rb"))
                except OSError as e:
                    return Result.fail(f"Failed to open input {config.input_path}: {e}")
            else:
                stream = stdin if stdin is not None else sys.stdin.buffer

            # Output errors are setup errors: report them before any row is read
            if config.output_path is not None:
                try:
                    sink: TextIO = stack.enter_context(
                        open(config.output_path, "w", encoding="utf-8")
                    )
                except OSError as e:
                    return Result.fail(f"Failed to open output {config.output_path}: {e}")
            else:
                sink = stdout if stdout is not None else sys.stdout

            t0 = time.time()
            rows = read_rows(stream, config.encoding, config.skip_header)
            try:
                collected = collect_values(rows, extractor, config.error_policy)
            except OSError as e:
                return Result.fail(f"Failed to read input {source}: {e}")
            record_operation_timing("collect", time.time() - t0)
            if not collected.success:
                return Result.fail(collected.error or "Failed to collect values")
            collection = collected.unwrap()

            t0 = time.time()
            histogram = Histogram.from_values(
                collection.values, config.num_bins, config.precision
            )
            record_operation_timing("bin", time.time() - t0)

            destination = str(config.output_path) if config.output_path else "<stdout>"
            try:
                write_histogram(
                    histogram,
                    sink,
                    delimiter=config.delimiter,
                    label_decimals=config.label_decimals,
                    count_decimals=config.count_decimals,
                    header=config.write_header,
                )
            except OSError as e:
                return Result.fail(f"Failed to write output {destination}: {e}")
    finally:
        end_run_metrics()

    logger.info("run_completed", **metrics.to_dict())

    warnings = [str(error) for error in collection.errors]
    return Result.ok(
        RunResult(
            histogram=histogram,
            rows_read=collection.rows_read,
            rows_binned=collection.rows_binned,
            rows_skipped=collection.rows_skipped,
            skipped_by_kind=collection.skipped_by_kind,
            errors=collection.errors,
            duration_seconds=time.time() - start_time,
            output_path=config.output_path,
        ),
        warnings=warnings,
    )
