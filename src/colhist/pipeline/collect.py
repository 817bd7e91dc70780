"""Turning rows into a value set."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from colhist.core.logging import (
    get_logger,
    record_row_binned,
    record_row_read,
    record_row_skipped,
)
from colhist.core.models import (
    ErrorPolicy,
    MissingPolicy,
    Precision,
    Result,
    RowError,
    RowResult,
)
from colhist.expression import DEFAULT_MARKER, ExpressionEvaluator
from colhist.histogram import ValueSet
from colhist.parsing import ColumnParser

logger = get_logger(__name__)

# Rows skipped without an error (MissingPolicy.SKIP) are counted under this kind
NO_VALUE = "no_value"

# How many row errors a lenient run keeps for reporting
MAX_REPORTED_ERRORS = 10

Extractor = Callable[[str, int | None], RowResult[float]]


def build_extractor(
    *,
    column: int | None = None,
    expression: str | None = None,
    delimiter: str = ",",
    precision: Precision = Precision.FLOAT64,
    on_missing: MissingPolicy = MissingPolicy.ERROR,
    marker: str = DEFAULT_MARKER,
) -> Extractor:
    """Build the per-row value extractor for a run.

    Exactly one of ``column`` and ``expression`` must be given.

    Raises:
        ValueError: on an invalid column, delimiter or expression. These are
            setup errors; nothing has been read yet.
    """
    if (column is None) == (expression is None):
        raise ValueError("exactly one of a column or an expression is required")

    if column is not None:
        parser = ColumnParser.single(column, delimiter, precision, on_missing)
        return parser.parse_value

    assert expression is not None
    evaluator = ExpressionEvaluator(expression, marker)
    expression_parser = evaluator.parser(delimiter, precision, on_missing)

    def extract(row: str, line_number: int | None = None) -> RowResult[float]:
        return evaluator.evaluate_row(row, expression_parser, line_number)

    return extract


@dataclass
class Collection:
    """Values gathered from the rows of one run, with skip accounting."""

    values: ValueSet = field(default_factory=ValueSet)
    rows_read: int = 0
    rows_skipped: int = 0
    skipped_by_kind: Counter[str] = field(default_factory=Counter)
    errors: list[RowError] = field(default_factory=list)

    @property
    def rows_binned(self) -> int:
        return len(self.values)

    def skip(self, kind: str, error: RowError | None = None) -> None:
        self.rows_skipped += 1
        self.skipped_by_kind[kind] += 1
        if error is not None and len(self.errors) < MAX_REPORTED_ERRORS:
            self.errors.append(error)


def collect_values(
    rows: Iterable[tuple[int, RowResult[str]]],
    extractor: Extractor,
    policy: ErrorPolicy = ErrorPolicy.LENIENT,
) -> Result[Collection]:
    """Extract one value per row into a ValueSet.

    Args:
        rows: ``(line_number, row)`` pairs, e.g. from ``read_rows``
        extractor: Per-row extractor from ``build_extractor``
        policy: LENIENT skips failing rows; STRICT stops at the first one

    Returns:
        Result containing the Collection, or a failure naming the first bad
        row in strict mode
    """
    collection = Collection()
    strict = ErrorPolicy(policy) is ErrorPolicy.STRICT

    for line_number, row in rows:
        collection.rows_read += 1
        record_row_read()

        if row.value is None:
            outcome: RowResult[float] = RowResult(error=row.error)
        else:
            outcome = extractor(row.value, line_number)

        if outcome.error is not None:
            error = outcome.error
            if strict:
                logger.warning("row_rejected", line=line_number, kind=error.kind.value)
                return Result.fail(str(error))
            logger.debug(
                "row_skipped",
                line=line_number,
                kind=error.kind.value,
                reason=error.message,
            )
            collection.skip(error.kind.value, error)
            record_row_skipped(error.kind.value)
            continue

        if outcome.value is None:
            logger.debug("row_skipped", line=line_number, kind=NO_VALUE)
            collection.skip(NO_VALUE)
            record_row_skipped(NO_VALUE)
            continue

        collection.values.append(outcome.value)
        record_row_binned()

    logger.info(
        "values_collected",
        rows_read=collection.rows_read,
        rows_binned=collection.rows_binned,
        rows_skipped=collection.rows_skipped,
    )
    return Result.ok(collection)
