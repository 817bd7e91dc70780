"""Column extraction from delimited rows.

Columns are 0-indexed: the first field of a row is column 0.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from colhist.core.models import MissingPolicy, Precision, RowError, RowResult


class ColumnParser:
    """Extracts and parses a fixed set of columns from delimited rows.

    The parser holds no mutable state and can be reused across any number of
    rows (and shared between workers).

    The mapping returned by ``parse_row`` is keyed by column index. Callers
    that need a particular column must look it up by index; the iteration
    order of the mapping carries no meaning.
    """

    def __init__(
        self,
        columns: int | Iterable[int],
        delimiter: str = ",",
        precision: Precision = Precision.FLOAT64,
        on_missing: MissingPolicy = MissingPolicy.ERROR,
    ):
        if isinstance(columns, int):
            columns = (columns,)
        unique = tuple(dict.fromkeys(columns))
        if not unique:
            raise ValueError("at least one column is required")
        for column in unique:
            if column < 0:
                raise ValueError(f"column index must be non-negative, got {column}")
        if not delimiter:
            raise ValueError("delimiter must be a non-empty string")

        self._columns = unique
        self._delimiter = delimiter
        self._precision = Precision(precision)
        self._on_missing = MissingPolicy(on_missing)
        self._dtype = self._precision.dtype

    @classmethod
    def single(
        cls,
        column: int,
        delimiter: str = ",",
        precision: Precision = Precision.FLOAT64,
        on_missing: MissingPolicy = MissingPolicy.ERROR,
    ) -> ColumnParser:
        """Create a parser for one column."""
        return cls((column,), delimiter, precision, on_missing)

    @property
    def columns(self) -> tuple[int, ...]:
        return self._columns

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def precision(self) -> Precision:
        return self._precision

    @property
    def on_missing(self) -> MissingPolicy:
        return self._on_missing

    def parse_token(self, token: str) -> float | None:
        """Parse a single field into the target precision.

        Returns None when the token is not a finite number representable in
        the target precision.
        """
        try:
            parsed = float(token)
        except ValueError:
            return None
        with np.errstate(over="ignore"):
            value = self._dtype.type(parsed)
        if not np.isfinite(value):
            return None
        return float(value)

    def parse_row(self, row: str, line_number: int | None = None) -> RowResult[dict[int, float]]:
        """Extract every requested column from a row.

        Args:
            row: One line of text, without its line terminator
            line_number: Position of the row in its input, for error reports

        Returns:
            RowResult with a column -> value mapping, a missing_column or
            failed_parse error, or a skipped result when a column is absent
            and the parser was built with ``MissingPolicy.SKIP``.
        """
        tokens = row.split(self._delimiter)
        values: dict[int, float] = {}
        for column in self._columns:
            if column >= len(tokens):
                if self._on_missing is MissingPolicy.SKIP:
                    return RowResult.skip()
                return RowResult.fail(RowError.missing_column(row, column, line_number))

            token = tokens[column]
            value = self.parse_token(token)
            if value is None:
                return RowResult.fail(
                    RowError.failed_parse(token, self._precision.value, column, line_number)
                )
            values[column] = value

        return RowResult.ok(values)

    def parse_value(self, row: str, line_number: int | None = None) -> RowResult[float]:
        """Extract the single requested column from a row."""
        if len(self._columns) != 1:
            raise ValueError(
                f"parse_value needs a single-column parser, this one has {len(self._columns)}"
            )
        result = self.parse_row(row, line_number)
        if result.value is None:
            return RowResult(error=result.error)
        return RowResult.ok(result.value[self._columns[0]])

    def __repr__(self) -> str:
        return (
            f"ColumnParser(columns={list(self._columns)}, delimiter={self._delimiter!r}, "
            f"precision={self._precision.value}, on_missing={self._on_missing.value})"
        )
