"""
Tests for the slope analyzer (meaningful scale intervals).
"""

import numpy as np
import pytest

from scaleprofile.core.slopes import meaningful_scales, profile_slopes
from scaleprofile.validation import InvalidArgumentError


def _profile_from_slopes(slopes):
    """Unit-spaced x with the given consecutive slopes."""
    x = np.arange(len(slopes) + 1, dtype=float)
    y = np.concatenate([[0.0], np.cumsum(slopes)])
    return x, y


class TestProfileSlopes:
    """Finite-difference slopes."""

    def test_slopes(self):
        """Halving lengths at doubling scales gives slope -1."""
        x = np.log([1.0, 2.0, 4.0])
        y = np.log([1.0, 0.5, 0.25])
        np.testing.assert_allclose(profile_slopes(x, y), [-1.0, -1.0])

    def test_short_profile(self):
        """Fewer than two points have no slope."""
        assert len(profile_slopes([0.0], [1.0])) == 0
        assert len(profile_slopes([], [])) == 0

    def test_length_mismatch(self):
        """x and y must have the same length."""
        with pytest.raises(InvalidArgumentError):
            profile_slopes([0.0, 1.0], [0.0])


class TestMeaningfulScales:
    """Maximal in-band slope runs."""

    def test_single_run(self):
        """Three in-band slopes span four points."""
        x, y = _profile_from_slopes([-1.0, -1.0, -1.0])
        assert meaningful_scales(x, y) == [(0, 3)]

    def test_no_run(self):
        """Flat profile has no meaningful scales."""
        x, y = _profile_from_slopes([0.0, 0.0, 0.0])
        assert meaningful_scales(x, y) == []

    def test_multiple_runs(self):
        """Out-of-band slopes split runs."""
        x, y = _profile_from_slopes([-1.0, 0.0, -1.0, -1.0, 0.0])
        assert meaningful_scales(x, y) == [(0, 1), (2, 4)]

    def test_min_width_filters(self):
        """Runs shorter than min_width slopes are dropped."""
        x, y = _profile_from_slopes([-1.0, 0.0, -1.0, -1.0, 0.0])
        assert meaningful_scales(x, y, min_width=2) == [(2, 4)]
        assert meaningful_scales(x, y, min_width=3) == []

    def test_run_at_end(self):
        """A run reaching the last point is reported."""
        x, y = _profile_from_slopes([0.5, -0.5, -0.5])
        assert meaningful_scales(x, y) == [(1, 3)]

    def test_max_slope_inclusive(self):
        """A slope equal to max_slope is in band."""
        x, y = _profile_from_slopes([-0.25, -0.25])
        assert meaningful_scales(x, y, max_slope=-0.25) == [(0, 2)]
        assert meaningful_scales(x, y, max_slope=-0.3) == []

    def test_min_slope_inclusive(self):
        """A slope equal to min_slope is in band."""
        x, y = _profile_from_slopes([-3.0, -1.0])
        assert meaningful_scales(x, y, min_slope=-3.0) == [(0, 2)]
        assert meaningful_scales(x, y, min_slope=-2.0) == [(1, 2)]

    def test_nan_slope_breaks_run(self):
        """NaN slopes never qualify."""
        x, y = _profile_from_slopes([-1.0, -1.0, -1.0])
        y[2] = np.nan
        assert meaningful_scales(x, y) == [(0, 1)]

    def test_single_point(self):
        """A single point has no interval."""
        assert meaningful_scales([0.0], [0.0]) == []

    def test_invalid_min_width(self):
        """min_width must be at least 1."""
        x, y = _profile_from_slopes([-1.0])
        with pytest.raises(InvalidArgumentError):
            meaningful_scales(x, y, min_width=0)

    @pytest.mark.parametrize('seed', range(5))
    def test_intervals_ordered_disjoint_wide(self, seed):
        """Random profiles give ordered, disjoint, wide enough in-band runs."""
        rng = np.random.default_rng(seed)
        x, y = _profile_from_slopes(rng.uniform(-2.0, 1.0, 60))
        slopes = profile_slopes(x, y)

        for min_width in (1, 2, 3):
            intervals = meaningful_scales(x, y, min_width=min_width)
            for first, last in intervals:
                assert last - first >= min_width
                assert np.all(slopes[first:last] <= -0.2)
            for (_, last), (first, _) in zip(intervals, intervals[1:]):
                assert last < first
