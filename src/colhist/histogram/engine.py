"""Equal-width histogram over the observed value range.

Binning happens in two strictly ordered phases: the full value set is scanned
for its minimum and maximum, then every value is assigned to a bin. A value's
bin is::

    floor((x - min) / (next_up(max) - min) * num_bins)

Scaling against the next representable float above ``max`` keeps ``x == max``
inside the last bin instead of one past it. The product can still round up to
``num_bins`` when ``num_bins`` is not a power of two, so the index is also
clamped to ``num_bins - 1``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from colhist.core.logging import get_logger
from colhist.core.models import Precision
from colhist.histogram.values import ValueSet

logger = get_logger(__name__)


def _next_up(value: np.floating) -> np.floating:
    """Smallest float of the same dtype strictly greater than ``value``."""
    return np.nextafter(value, value.dtype.type(np.inf))


def _bin_positions(x: Any, lo: np.floating, hi: np.floating, num_bins: int) -> Any:
    """Unclamped, floored bin positions for a scalar or array ``x``."""
    dtype = lo.dtype.type
    with np.errstate(over="ignore", invalid="ignore"):
        upper = _next_up(hi)
        if not np.isfinite(upper):
            # max is the largest finite float; x == max then lands on num_bins
            # and the caller's clamp moves it into the last bin
            upper = hi
        span = upper - lo
        if span == 0:
            # Only possible when lo == hi == max float, so every x is lo
            return np.zeros_like(x - lo)
        offset = x - lo
        if not np.isfinite(span):
            # Range wider than the largest float: halve both terms
            span = upper / dtype(2) - lo / dtype(2)
            offset = x / dtype(2) - lo / dtype(2)
        return np.floor(offset / span * dtype(num_bins))


def _bin_width(lo: np.floating, hi: np.floating, num_bins: int) -> np.floating:
    dtype = lo.dtype.type
    with np.errstate(over="ignore"):
        width = (hi - lo) / dtype(num_bins)
        if not np.isfinite(width):
            width = hi / dtype(num_bins) - lo / dtype(num_bins)
    return width


def _check_num_bins(num_bins: int) -> None:
    if num_bins < 1:
        raise ValueError(f"num_bins must be at least 1, got {num_bins}")


def get_bin_index(
    x: float,
    min_value: float,
    max_value: float,
    num_bins: int,
    precision: Precision = Precision.FLOAT64,
) -> int:
    """Return the index of the bin holding ``x``, for ``min <= x <= max`` inclusive."""
    _check_num_bins(num_bins)
    if not min_value <= x <= max_value:
        raise ValueError(f"{x} is outside the histogram range [{min_value}, {max_value}]")

    dtype = Precision(precision).dtype.type
    position = _bin_positions(dtype(x), dtype(min_value), dtype(max_value), num_bins)
    return min(int(position), num_bins - 1)


def get_bin_label(
    index: int,
    min_value: float,
    max_value: float,
    num_bins: int,
    precision: Precision = Precision.FLOAT64,
) -> float:
    """Return the midpoint of the bin at ``index``."""
    _check_num_bins(num_bins)
    dtype = Precision(precision).dtype.type
    lo = dtype(min_value)
    width = _bin_width(lo, dtype(max_value), num_bins)
    return float(dtype(index) * width + lo + width / dtype(2))


class Bin(BaseModel):
    """A histogram bin: the midpoint of its interval and how many values fell in it."""

    model_config = ConfigDict(frozen=True)

    label: float
    count: int = Field(ge=0)


class Histogram(BaseModel):
    """An ordered run of equal-width bins covering ``[min_value, max_value]``.

    Bin ``i`` covers ``[min + i * width, min + (i + 1) * width)``, except the
    last bin, which also holds ``max``. An empty histogram has no bins and no
    range.
    """

    model_config = ConfigDict(frozen=True)

    bins: tuple[Bin, ...] = ()
    min_value: float | None = None
    max_value: float | None = None
    bin_width: float = 0.0
    precision: Precision = Precision.FLOAT64

    @classmethod
    def from_values(
        cls,
        values: ValueSet | Iterable[float],
        num_bins: int,
        precision: Precision = Precision.FLOAT64,
    ) -> Histogram:
        """Bin a set of values into ``num_bins`` equal-width bins.

        Args:
            values: Finite values; order does not matter
            num_bins: Number of bins, at least 1
            precision: Floating point width for the range and bin arithmetic

        Returns:
            Histogram with exactly ``num_bins`` bins, or no bins if
            ``values`` is empty
        """
        _check_num_bins(num_bins)
        precision = Precision(precision)
        dtype = precision.dtype

        bounds: tuple[float, float] | None = None
        if isinstance(values, ValueSet):
            data = values.to_array(precision)
            if values:
                assert values.min is not None and values.max is not None
                bounds = (values.min, values.max)
        else:
            data = np.fromiter(values, dtype=dtype)

        if data.size == 0:
            logger.debug("histogram_empty", num_bins=num_bins)
            return cls(precision=precision)
        if not np.all(np.isfinite(data)):
            raise ValueError("histogram values must be finite")

        # Scan phase: the range must be complete before any value is assigned.
        # A ValueSet tracked it while accumulating; rounding to the target
        # precision preserves order, so its bounds stay the array's bounds.
        if bounds is not None:
            lo, hi = dtype.type(bounds[0]), dtype.type(bounds[1])
        else:
            lo = data.min()
            hi = data.max()

        # Assign phase
        positions = _bin_positions(data, lo, hi, num_bins)
        indices = np.minimum(positions.astype(np.int64), num_bins - 1)
        counts = np.bincount(indices, minlength=num_bins)

        width = _bin_width(lo, hi, num_bins)
        labels = np.arange(num_bins, dtype=dtype) * width + lo + width / dtype.type(2)

        histogram = cls(
            bins=tuple(
                Bin(label=float(label), count=int(count))
                for label, count in zip(labels, counts, strict=True)
            ),
            min_value=float(lo),
            max_value=float(hi),
            bin_width=float(width),
            precision=precision,
        )
        logger.debug(
            "histogram_built",
            num_bins=num_bins,
            values=int(data.size),
            min_value=histogram.min_value,
            max_value=histogram.max_value,
        )
        return histogram

    @property
    def num_bins(self) -> int:
        return len(self.bins)

    @property
    def is_empty(self) -> bool:
        return not self.bins

    @property
    def labels(self) -> list[float]:
        """Bin midpoints, in bin order."""
        return [b.label for b in self.bins]

    @property
    def counts(self) -> list[int]:
        """Bin counts, in bin order."""
        return [b.count for b in self.bins]

    @property
    def total(self) -> int:
        """Number of values binned."""
        return sum(b.count for b in self.bins)

    def into_parts(self) -> tuple[list[float], list[int]]:
        """Split into parallel label and count sequences."""
        return self.labels, self.counts

    def bin_index(self, x: float) -> int:
        """Index of the bin that holds ``x``."""
        if self.min_value is None or self.max_value is None:
            raise ValueError("an empty histogram has no bins")
        return get_bin_index(x, self.min_value, self.max_value, self.num_bins, self.precision)

    def __len__(self) -> int:
        return len(self.bins)
