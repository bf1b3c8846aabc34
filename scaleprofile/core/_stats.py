"""Inline running statistic — too simple to warrant a dedicated dependency.

One Statistic accumulates the digital lengths measured at one scale.
Running aggregates (count, sum, sum of squares, min, max) are always kept.
Raw samples are kept only while ``store_samples`` is on; they are needed
for the median and nothing else.
"""

import math
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from scaleprofile.validation.errors import EmptyStatisticError, InvalidStateError


class Statistic:
    """
    Running statistic over float samples.

    Args:
        store_samples: Keep raw samples so that median() can be computed.

    Notes:
        terminate() computes the median once, caches it and drops the raw
        samples. Values added afterwards update mean/min/max/count but NOT
        the cached median.
    """

    def __init__(self, store_samples: bool = False):
        self._count = 0
        self._sum = 0.0
        self._sum_sq = 0.0
        self._min = math.inf
        self._max = -math.inf
        self._samples: Optional[List[float]] = [] if store_samples else None
        self._median: Optional[float] = None

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add(self, value: float) -> None:
        value = float(value)
        self._count += 1
        self._sum += value
        self._sum_sq += value * value
        if value < self._min:
            self._min = value
        if value > self._max:
            self._max = value
        if self._samples is not None:
            self._samples.append(value)

    def add_values(self, values: Iterable[float]) -> None:
        for value in values:
            self.add(value)

    def merge(self, other: "Statistic") -> "Statistic":
        """
        Fold other's samples into this statistic (in place).

        If this statistic stores samples but other does not, sample storage
        is dropped: median() then raises instead of covering part of the data.
        """
        if other._count == 0:
            return self

        self._count += other._count
        self._sum += other._sum
        self._sum_sq += other._sum_sq
        self._min = min(self._min, other._min)
        self._max = max(self._max, other._max)
        if self._samples is not None:
            if other._samples is not None:
                self._samples.extend(other._samples)
            else:
                # other's raw values are gone, so no median can cover them
                self._samples = None
                self._median = None
        return self

    def __iadd__(self, other: "Statistic") -> "Statistic":
        return self.merge(other)

    def terminate(self) -> None:
        """Freeze the median, release raw samples and stop storing new ones."""
        if self._samples is None:
            return
        if self._samples:
            self._median = float(np.median(self._samples))
        self._samples = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def store_samples(self) -> bool:
        return self._samples is not None

    def count(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count

    def samples(self) -> tuple:
        """Retained raw samples (empty once terminated or when not storing)."""
        return tuple(self._samples) if self._samples is not None else ()

    def total(self) -> float:
        return self._sum

    def mean(self) -> float:
        if self._count == 0:
            raise EmptyStatisticError('mean')
        return self._sum / self._count

    def variance(self, unbiased: bool = False) -> float:
        if self._count == 0:
            raise EmptyStatisticError('variance')
        if unbiased and self._count < 2:
            return math.nan
        mean = self._sum / self._count
        ss = max(self._sum_sq - self._count * mean * mean, 0.0)
        return ss / (self._count - 1 if unbiased else self._count)

    def min(self) -> float:
        if self._count == 0:
            raise EmptyStatisticError('min')
        return self._min

    def max(self) -> float:
        if self._count == 0:
            raise EmptyStatisticError('max')
        return self._max

    def median(self) -> float:
        if self._samples:
            return float(np.median(self._samples))
        if self._median is not None:
            return self._median
        if self._count == 0:
            raise EmptyStatisticError('median')
        raise InvalidStateError(
            "median unavailable: samples were not stored for this statistic"
        )

    # ------------------------------------------------------------------
    # Copy / state
    # ------------------------------------------------------------------

    def copy(self) -> "Statistic":
        other = Statistic.__new__(Statistic)
        other.__dict__.update(self.__dict__)
        if self._samples is not None:
            other._samples = list(self._samples)
        return other

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self._count,
            'sum': self._sum,
            'sum_sq': self._sum_sq,
            'min': self._min if self._count else None,
            'max': self._max if self._count else None,
            'median': self._median,
            'samples': list(self._samples) if self._samples is not None else None,
        }

    @classmethod
    def from_dict(cls, state: Dict[str, Any]) -> "Statistic":
        stat = cls(store_samples=state.get('samples') is not None)
        stat._count = int(state['count'])
        stat._sum = float(state['sum'])
        stat._sum_sq = float(state['sum_sq'])
        stat._min = float(state['min']) if state.get('min') is not None else math.inf
        stat._max = float(state['max']) if state.get('max') is not None else -math.inf
        stat._median = float(state['median']) if state.get('median') is not None else None
        if state.get('samples') is not None:
            stat._samples = [float(v) for v in state['samples']]
        return stat

    def __eq__(self, other):
        if not isinstance(other, Statistic):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self) -> str:
        if self._count == 0:
            return "Statistic(count=0)"
        return (
            f"Statistic(count={self._count}, mean={self.mean():.6g}, "
            f"min={self._min:.6g}, max={self._max:.6g}, "
            f"store_samples={self.store_samples})"
        )
