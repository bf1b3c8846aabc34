"""
Tests for the inline Statistic accumulator.
"""

import math

import numpy as np
import pytest

from scaleprofile.core._stats import Statistic
from scaleprofile.validation import EmptyStatisticError, InvalidStateError


class TestAggregates:
    """Running aggregates."""

    def test_basic_aggregates(self):
        """Count, mean, min, max and total over four values."""
        stat = Statistic()
        stat.add_values([1.0, 2.0, 3.0, 4.0])

        assert stat.count() == 4
        assert len(stat) == 4
        assert stat.mean() == pytest.approx(2.5)
        assert stat.min() == 1.0
        assert stat.max() == 4.0
        assert stat.total() == pytest.approx(10.0)

    def test_variance(self):
        """Population and unbiased variance match numpy."""
        stat = Statistic()
        stat.add_values([1.0, 2.0, 3.0, 4.0])

        assert stat.variance() == pytest.approx(np.var([1, 2, 3, 4]))
        assert stat.variance(unbiased=True) == pytest.approx(np.var([1, 2, 3, 4], ddof=1))

    def test_unbiased_variance_single_sample_is_nan(self):
        """Unbiased variance of one sample is undefined."""
        stat = Statistic()
        stat.add(3.0)
        assert math.isnan(stat.variance(unbiased=True))

    @pytest.mark.parametrize('name', ['mean', 'min', 'max', 'median', 'variance'])
    def test_empty_statistic_raises(self, name):
        """Every aggregate of an empty statistic raises."""
        stat = Statistic(store_samples=True)
        with pytest.raises(EmptyStatisticError):
            getattr(stat, name)()

    def test_empty_error_is_value_error(self):
        """EmptyStatisticError can be caught as ValueError."""
        with pytest.raises(ValueError):
            Statistic().mean()

    def test_count_strictly_increases(self):
        """Each add() increments the count by one."""
        stat = Statistic()
        counts = []
        for v in np.linspace(0.5, 3.0, 10):
            stat.add(v)
            counts.append(stat.count())
        assert counts == list(range(1, 11))


class TestMedian:
    """Median needs stored samples or a frozen value."""

    def test_median_odd(self):
        """Median of an odd number of samples is the middle one."""
        stat = Statistic(store_samples=True)
        stat.add_values([5.0, 1.0, 3.0])
        assert stat.median() == 3.0

    def test_median_even(self):
        """Median of an even number of samples averages the middle pair."""
        stat = Statistic(store_samples=True)
        stat.add_values([4.0, 1.0, 3.0, 2.0])
        assert stat.median() == pytest.approx(2.5)

    def test_median_without_samples_raises(self):
        """Median is unavailable when samples were never stored."""
        stat = Statistic(store_samples=False)
        stat.add_values([1.0, 2.0])
        with pytest.raises(InvalidStateError):
            stat.median()

    def test_terminate_freezes_median(self):
        """terminate() caches the median and drops the samples."""
        stat = Statistic(store_samples=True)
        stat.add_values([1.0, 2.0, 10.0])
        before = stat.median()

        stat.terminate()

        assert stat.median() == before
        assert stat.samples() == ()
        assert not stat.store_samples

    def test_terminate_is_idempotent(self):
        """A second terminate() keeps the cached median."""
        stat = Statistic(store_samples=True)
        stat.add_values([1.0, 2.0, 10.0])
        stat.terminate()
        stat.terminate()
        assert stat.median() == 2.0

    def test_values_after_terminate_do_not_update_median(self):
        """Values added after terminate() update everything but the median."""
        stat = Statistic(store_samples=True)
        stat.add_values([1.0, 2.0, 3.0])
        stat.terminate()

        stat.add_values([100.0, 200.0, 300.0])

        assert stat.median() == 2.0
        assert stat.max() == 300.0
        assert stat.count() == 6

    def test_terminate_empty_keeps_median_unavailable(self):
        """Terminating an empty statistic caches nothing."""
        stat = Statistic(store_samples=True)
        stat.terminate()
        with pytest.raises(EmptyStatisticError):
            stat.median()


class TestMerge:
    """Merging statistics."""

    def test_merge_aggregates(self):
        """Merged aggregates cover both statistics."""
        a = Statistic()
        a.add_values([1.0, 2.0])
        b = Statistic()
        b.add_values([10.0, -1.0])

        a.merge(b)

        assert a.count() == 4
        assert a.mean() == pytest.approx(3.0)
        assert a.min() == -1.0
        assert a.max() == 10.0

    def test_merge_samples_when_both_store(self):
        """Samples are concatenated when both sides store them."""
        a = Statistic(store_samples=True)
        a.add_values([1.0, 2.0])
        b = Statistic(store_samples=True)
        b.add_values([3.0])

        a += b

        assert a.samples() == (1.0, 2.0, 3.0)
        assert a.median() == 2.0

    def test_merge_without_other_samples_drops_median(self):
        """Merging a sample-less statistic makes the median unavailable."""
        a = Statistic(store_samples=True)
        a.add(100.0)
        b = Statistic()
        b.add_values([1.0, 1.0, 1.0, 1.0])

        a.merge(b)

        assert a.count() == 5
        assert a.mean() == pytest.approx(20.8)
        assert not a.store_samples
        with pytest.raises(InvalidStateError):
            a.median()

    def test_merge_without_other_samples_terminate_caches_nothing(self):
        """terminate() after such a merge does not freeze a partial median."""
        a = Statistic(store_samples=True)
        a.add(100.0)
        b = Statistic()
        b.add_values([1.0, 1.0])

        a.merge(b)
        a.terminate()

        with pytest.raises(InvalidStateError):
            a.median()

    def test_merge_empty_is_noop(self):
        """Merging an empty statistic changes nothing."""
        a = Statistic(store_samples=True)
        a.add(2.0)
        a.merge(Statistic())
        assert a.count() == 1
        assert a.min() == 2.0
        assert a.median() == 2.0

    def test_merge_does_not_alias_other(self):
        """Later changes to the merged-in statistic are not seen."""
        a = Statistic(store_samples=True)
        b = Statistic(store_samples=True)
        b.add(1.0)
        a.merge(b)
        b.add(5.0)
        assert a.samples() == (1.0,)


class TestState:
    """Copy and dict round-trip."""

    def test_copy_is_independent(self):
        """A copy does not share samples with the original."""
        a = Statistic(store_samples=True)
        a.add_values([1.0, 2.0])
        b = a.copy()
        b.add(3.0)

        assert a.count() == 2
        assert a.samples() == (1.0, 2.0)
        assert b.samples() == (1.0, 2.0, 3.0)

    def test_dict_round_trip(self):
        """to_dict/from_dict keeps retained samples."""
        a = Statistic(store_samples=True)
        a.add_values([0.5, 1.5, 4.0])
        assert Statistic.from_dict(a.to_dict()) == a

    def test_dict_round_trip_frozen(self):
        """to_dict/from_dict keeps a frozen median."""
        a = Statistic(store_samples=True)
        a.add_values([0.5, 1.5, 4.0])
        a.terminate()
        b = Statistic.from_dict(a.to_dict())
        assert b == a
        assert b.median() == 1.5

    def test_dict_round_trip_empty(self):
        """to_dict/from_dict of an empty statistic."""
        a = Statistic()
        assert Statistic.from_dict(a.to_dict()) == a
