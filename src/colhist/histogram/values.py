"""Value accumulation for a single histogram run."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator

import numpy as np

from colhist.core.models import Precision


class ValueSet:
    """Append-only collection of finite values with a running min/max.

    Tracking the bounds while appending means the range is known as soon as
    accumulation ends. Partial sets built independently (for example one per
    input shard) can be combined with ``merge``; binning must only start once
    every partial set has been merged.
    """

    def __init__(self, values: Iterable[float] = ()):
        self._values: list[float] = []
        self._min: float | None = None
        self._max: float | None = None
        self.extend(values)

    def append(self, value: float) -> None:
        if not math.isfinite(value):
            raise ValueError(f"histogram values must be finite, got {value}")
        self._values.append(value)
        if self._min is None or value < self._min:
            self._min = value
        if self._max is None or value > self._max:
            self._max = value

    def extend(self, values: Iterable[float]) -> None:
        for value in values:
            self.append(value)

    def merge(self, other: ValueSet) -> None:
        """Fold another partial set into this one."""
        if not other._values:
            return
        self._values.extend(other._values)
        assert other._min is not None and other._max is not None
        if self._min is None or other._min < self._min:
            self._min = other._min
        if self._max is None or other._max > self._max:
            self._max = other._max

    @property
    def min(self) -> float | None:
        return self._min

    @property
    def max(self) -> float | None:
        return self._max

    def to_array(self, precision: Precision = Precision.FLOAT64) -> np.ndarray:
        return np.asarray(self._values, dtype=Precision(precision).dtype)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __bool__(self) -> bool:
        return bool(self._values)

    def __repr__(self) -> str:
        return f"ValueSet(size={len(self._values)}, min={self._min}, max={self._max})"
