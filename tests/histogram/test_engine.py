"""Tests for bin assignment and histogram construction."""

import numpy as np
import pytest

from colhist.core.models import Precision
from colhist.histogram import Bin, Histogram, ValueSet, get_bin_index, get_bin_label


class TestGetBinIndex:
    """Tests for mapping a value to its bin."""

    def test_known_indices(self):
        assert get_bin_index(0.0, 0.0, 10.0, 10) == 0
        assert get_bin_index(9.9, 0.0, 10.0, 10) == 9
        assert get_bin_index(5.0, 0.0, 10.0, 10) == 4
        assert get_bin_index(-1.0, -1.0, 1.0, 20) == 0

    def test_single_precision(self):
        assert get_bin_index(0.9, -1.0, 1.0, 20, Precision.FLOAT32) == 19

    @pytest.mark.parametrize("num_bins", [1, 2, 3, 7, 10, 49, 100, 1000])
    @pytest.mark.parametrize(
        ("lo", "hi"),
        [(0.0, 1.0), (0.1, 0.7), (-3.0, 3.0), (1e-9, 2e-9), (-1e12, 5e11)],
    )
    def test_max_lands_in_last_bin(self, num_bins, lo, hi):
        assert get_bin_index(hi, lo, hi, num_bins) == num_bins - 1
        assert get_bin_index(hi, lo, hi, num_bins, Precision.FLOAT32) == num_bins - 1

    @pytest.mark.parametrize("num_bins", [1, 3, 10])
    def test_min_lands_in_first_bin(self, num_bins):
        assert get_bin_index(-2.0, -2.0, 8.0, num_bins) == 0

    def test_every_value_in_range(self):
        lo, hi, num_bins = -5.0, 17.0, 13
        for x in np.linspace(lo, hi, 1001):
            assert 0 <= get_bin_index(float(x), lo, hi, num_bins) < num_bins

    def test_identical_bounds(self):
        assert get_bin_index(5.0, 5.0, 5.0, 4) == 0

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="outside"):
            get_bin_index(11.0, 0.0, 10.0, 10)
        with pytest.raises(ValueError, match="outside"):
            get_bin_index(-0.1, 0.0, 10.0, 10)

    def test_zero_bins(self):
        with pytest.raises(ValueError, match="num_bins"):
            get_bin_index(1.0, 0.0, 10.0, 0)


class TestGetBinLabel:
    """Tests for bin midpoints."""

    def test_known_labels(self):
        assert get_bin_label(0, 0.0, 10.0, 10) == 0.5
        assert get_bin_label(9, 0.0, 10.0, 10) == 9.5
        assert get_bin_label(5, 0.0, 10.0, 10) == 5.5

    def test_negative_range(self):
        assert get_bin_label(0, -1.0, 1.0, 20) == pytest.approx(-0.95)
        assert get_bin_label(19, -1.0, 1.0, 20) == pytest.approx(0.95)

    def test_formula(self):
        lo, hi, n = 2.0, 9.0, 7
        for i in range(n):
            expected = lo + i * (hi - lo) / n + (hi - lo) / (2 * n)
            assert get_bin_label(i, lo, hi, n) == pytest.approx(expected)

    @pytest.mark.parametrize("num_bins", [1, 4, 9])
    def test_first_and_last_are_symmetric(self, num_bins):
        lo, hi = -3.0, 11.0
        first = get_bin_label(0, lo, hi, num_bins)
        last = get_bin_label(num_bins - 1, lo, hi, num_bins)
        assert (first + last) / 2 == pytest.approx((lo + hi) / 2)


class TestFromValues:
    """Tests for Histogram.from_values."""

    def test_sample_histogram(self, sample_values):
        histogram = Histogram.from_values(sample_values, 3)
        assert histogram.counts == [5, 3, 2]
        assert histogram.labels == pytest.approx([0.5, 1.5, 2.5])
        assert histogram.min_value == 0.0
        assert histogram.max_value == 3.0
        assert histogram.bin_width == 1.0

    def test_empty_input(self):
        histogram = Histogram.from_values([], 5)
        assert histogram.is_empty
        assert histogram.num_bins == 0
        assert histogram.bins == ()
        assert histogram.total == 0
        assert histogram.min_value is None

    def test_identical_values(self):
        histogram = Histogram.from_values([5.0] * 10, 4)
        assert histogram.counts == [10, 0, 0, 0]
        assert histogram.bin_width == 0.0
        assert histogram.labels == [5.0, 5.0, 5.0, 5.0]

    def test_single_value(self):
        histogram = Histogram.from_values([3.25], 1)
        assert histogram.counts == [1]
        assert histogram.labels == [3.25]

    @pytest.mark.parametrize("num_bins", [1, 2, 3, 10, 64, 97])
    def test_counts_sum_to_input_size(self, num_bins):
        values = np.random.default_rng(7).normal(size=500).tolist()
        histogram = Histogram.from_values(values, num_bins)
        assert histogram.num_bins == num_bins
        assert histogram.total == len(values)

    def test_matches_scalar_bin_index(self):
        values = np.random.default_rng(11).uniform(-4.0, 9.0, size=300).tolist()
        num_bins = 7
        histogram = Histogram.from_values(values, num_bins)

        expected = [0] * num_bins
        for v in values:
            expected[histogram.bin_index(v)] += 1
        assert histogram.counts == expected

    def test_deterministic(self, sample_values):
        assert Histogram.from_values(sample_values, 4) == Histogram.from_values(sample_values, 4)

    def test_order_does_not_matter(self, sample_values):
        reversed_values = list(reversed(sample_values))
        assert (
            Histogram.from_values(sample_values, 3).counts
            == Histogram.from_values(reversed_values, 3).counts
        )

    def test_accepts_value_set(self, sample_values):
        histogram = Histogram.from_values(ValueSet(sample_values), 3)
        assert histogram.counts == [5, 3, 2]

    def test_accepts_numpy_array(self, sample_values):
        histogram = Histogram.from_values(np.array(sample_values), 3)
        assert histogram.counts == [5, 3, 2]

    def test_single_precision(self, sample_values):
        histogram = Histogram.from_values(sample_values, 3, Precision.FLOAT32)
        assert histogram.precision == Precision.FLOAT32
        assert histogram.counts == [5, 3, 2]

    def test_range_wider_than_float_max(self):
        histogram = Histogram.from_values([-1e308, 1e308], 2)
        assert histogram.counts == [1, 1]

    @pytest.mark.parametrize("precision", [Precision.FLOAT32, Precision.FLOAT64])
    def test_max_is_largest_float(self, precision):
        largest = float(np.finfo(precision.dtype).max)

        histogram = Histogram.from_values([0.0, largest], 2, precision)

        assert histogram.counts == [1, 1]
        assert get_bin_index(largest, 0.0, largest, 4, precision) == 3
        assert get_bin_index(0.0, 0.0, largest, 4, precision) == 0

    @pytest.mark.parametrize("precision", [Precision.FLOAT32, Precision.FLOAT64])
    def test_full_float_range(self, precision):
        largest = float(np.finfo(precision.dtype).max)
        histogram = Histogram.from_values([-largest, largest], 2, precision)
        assert histogram.counts == [1, 1]

    def test_single_value_at_largest_float(self):
        largest = float(np.finfo(np.float64).max)
        histogram = Histogram.from_values([largest, largest], 3)
        assert histogram.counts == [2, 0, 0]

    def test_value_set_bounds(self, sample_values):
        values = ValueSet(sample_values)
        histogram = Histogram.from_values(values, 3, Precision.FLOAT32)
        assert histogram.min_value == values.min
        assert histogram.max_value == values.max
        assert histogram.counts == [5, 3, 2]

    def test_zero_bins(self):
        with pytest.raises(ValueError, match="num_bins"):
            Histogram.from_values([1.0], 0)

    def test_non_finite_values(self):
        with pytest.raises(ValueError, match="finite"):
            Histogram.from_values([1.0, float("nan")], 3)


class TestHistogramViews:
    """Tests for the bin, label and count views."""

    def test_bins(self, sample_values):
        histogram = Histogram.from_values(sample_values, 3)
        assert histogram.bins[0] == Bin(label=0.5, count=5)
        assert len(histogram) == 3

    def test_into_parts(self, sample_values):
        labels, counts = Histogram.from_values(sample_values, 3).into_parts()
        assert labels == pytest.approx([0.5, 1.5, 2.5])
        assert counts == [5, 3, 2]

    def test_bin_index_on_empty_histogram(self):
        with pytest.raises(ValueError, match="empty"):
            Histogram.from_values([], 3).bin_index(1.0)

    def test_bins_are_immutable(self, sample_values):
        histogram = Histogram.from_values(sample_values, 3)
        with pytest.raises(Exception):
            histogram.bins[0].count = 99

    def test_negative_count_rejected(self):
        with pytest.raises(Exception):
            Bin(label=0.0, count=-1)

    def test_serializes(self, sample_values):
        dumped = Histogram.from_values(sample_values, 3).model_dump()
        assert [b["count"] for b in dumped["bins"]] == [5, 3, 2]
