"""
Scale Profile.

One (multi)scale profile: a sequence of statistics on digital lengths,
parameterized by scale, at ONE place of a contour or surface. All further
computations are done in log-log space.

Lifecycle:
    ScaleProfile()          invalid, empty
    init(scales)            valid, one empty Statistic per scale
    add_value / add_statistic
    stop_stats_saving()     optional, freezes medians and frees samples
    get_profile / meaningful_scales / noise_level / ...   read-only
    clear()                 invalid again

Usage:
    from scaleprofile import ScaleProfile, ProfileMode

    sp = ScaleProfile(ProfileMode.MEDIAN)
    sp.init(10, store_values=True)
    for idx, length in measurements:
        sp.add_value(idx, length)
    sp.stop_stats_saving()
    level = sp.noise_level(min_width=2)
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import polars as pl

from scaleprofile.core._stats import Statistic
from scaleprofile.core import noise, slopes
from scaleprofile.validation.errors import (
    EmptyStatisticError,
    InvalidArgumentError,
    InvalidStateError,
    check_index,
)

logger = logging.getLogger(__name__)


class ProfileMode(Enum):
    """Which accumulator query produces a profile value."""
    MEAN = 'mean'
    MAX = 'max'
    MIN = 'min'
    MEDIAN = 'median'

    @classmethod
    def parse(cls, mode: Union["ProfileMode", str]) -> "ProfileMode":
        if isinstance(mode, cls):
            return mode
        try:
            return cls(str(mode).lower())
        except ValueError:
            raise InvalidArgumentError(
                f"unknown profile mode {mode!r}; expected one of "
                f"{[m.value for m in cls]}"
            ) from None


_AGGREGATORS: Dict[ProfileMode, Callable[[Statistic], float]] = {
    ProfileMode.MEAN: Statistic.mean,
    ProfileMode.MAX: Statistic.max,
    ProfileMode.MIN: Statistic.min,
    ProfileMode.MEDIAN: Statistic.median,
}


class ScaleProfile:
    """
    Statistics of digital lengths at a sequence of scales, for one site.

    Args:
        mode: Aggregation used to build profile values (default MEAN).

    The profile owns its scales and statistics exclusively. Copies are
    deep; assignment between two profiles is disabled (see assign()).
    """

    def __init__(self, mode: Union[ProfileMode, str] = ProfileMode.MEAN):
        self._mode = ProfileMode.parse(mode)
        self._scales: Optional[Tuple[float, ...]] = None
        self._stats: Optional[List[Statistic]] = None
        self._store_values = False

    @classmethod
    def from_scales(
        cls,
        scales: Union[int, Iterable[float]],
        store_values: bool = False,
        mode: Union[ProfileMode, str] = ProfileMode.MEAN,
    ) -> "ScaleProfile":
        """Construct and init in one step."""
        profile = cls(mode)
        profile.init(scales, store_values)
        return profile

    # ------------------------------------------------------------------
    # Standard services
    # ------------------------------------------------------------------

    def init(
        self,
        scales: Union[int, Iterable[float]],
        store_values: bool = False,
    ) -> None:
        """
        Specify the scales of the profile. Must be called before adding data.

        Args:
            scales: Any ordered iterable of positive float-convertible
                    scale values, or an int n meaning the scales 1..n.
            store_values: Keep raw samples in every statistic (needed for
                          MEDIAN profiles).
        """
        if isinstance(scales, (int, np.integer)) and not isinstance(scales, bool):
            if scales < 1:
                raise InvalidArgumentError(
                    f"number of scales must be strictly positive, got {scales}"
                )
            values = tuple(float(s) for s in range(1, int(scales) + 1))
        else:
            try:
                values = tuple(float(s) for s in scales)
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(f"scales must be float-convertible: {e}") from e

        if not values:
            raise InvalidArgumentError("a scale profile needs at least one scale")
        bad = [s for s in values if not np.isfinite(s) or s <= 0.0]
        if bad:
            raise InvalidArgumentError(
                f"scales must be finite and strictly positive, got {bad[:5]}"
            )

        self._scales = values
        self._stats = [Statistic(store_values) for _ in values]
        self._store_values = bool(store_values)
        logger.debug(f"ScaleProfile initialized with {len(values)} scales")

    def clear(self) -> None:
        """Return the profile to the freshly constructed (invalid) state."""
        self._scales = None
        self._stats = None
        self._store_values = False

    def is_valid(self) -> bool:
        return (
            self._scales is not None
            and self._stats is not None
            and len(self._scales) >= 1
            and len(self._scales) == len(self._stats)
        )

    def _require_valid(self) -> None:
        if not self.is_valid():
            raise InvalidStateError(
                "scale profile is not initialized; call init() first"
            )

    def add_value(self, idx: int, value: float) -> None:
        """Add one sample value at scale index idx."""
        self._require_valid()
        self._stats[check_index(idx, len(self._stats))].add(value)

    def add_values(self, idx: int, values: Iterable[float]) -> None:
        """Add several sample values at scale index idx."""
        self._require_valid()
        self._stats[check_index(idx, len(self._stats))].add_values(values)

    def add_statistic(self, idx: int, stat: Statistic) -> None:
        """Merge an externally built statistic into scale index idx."""
        self._require_valid()
        if not isinstance(stat, Statistic):
            raise InvalidArgumentError(
                f"expected a Statistic, got {type(stat).__name__}"
            )
        self._stats[check_index(idx, len(self._stats))].merge(stat)

    def stop_stats_saving(self) -> None:
        """
        Compute and cache every median, then drop the stored samples.

        Call once all values are added. Values added later still update
        mean/min/max but the cached medians are not recomputed.
        """
        self._require_valid()
        for stat in self._stats:
            stat.terminate()
        self._store_values = False

    def set_profile_mode(self, mode: Union[ProfileMode, str]) -> None:
        self._mode = ProfileMode.parse(mode)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def mode(self) -> ProfileMode:
        return self._mode

    @property
    def store_values(self) -> bool:
        return self._store_values

    @property
    def scales(self) -> Tuple[float, ...]:
        self._require_valid()
        return self._scales

    @property
    def stats(self) -> Tuple[Statistic, ...]:
        """Read-only view of the per-scale statistics (the objects are live)."""
        self._require_valid()
        return tuple(self._stats)

    def statistic(self, idx: int) -> Statistic:
        self._require_valid()
        return self._stats[check_index(idx, len(self._stats))]

    def __len__(self) -> int:
        return len(self._scales) if self.is_valid() else 0

    # ------------------------------------------------------------------
    # Copy / assignment
    # ------------------------------------------------------------------

    def copy(self) -> "ScaleProfile":
        """Deep copy: the copy never shares statistics with the original."""
        other = ScaleProfile(self._mode)
        other._store_values = self._store_values
        if self._scales is not None:
            other._scales = tuple(self._scales)
        if self._stats is not None:
            other._stats = [stat.copy() for stat in self._stats]
        return other

    def __copy__(self) -> "ScaleProfile":
        return self.copy()

    def __deepcopy__(self, memo) -> "ScaleProfile":
        return self.copy()

    def assign(self, other: "ScaleProfile") -> None:
        """Disabled. Use other.copy() to get an independent profile."""
        raise InvalidStateError(
            "assignment between scale profiles is disabled; use copy()"
        )

    def __eq__(self, other):
        if not isinstance(other, ScaleProfile):
            return NotImplemented
        return (
            self._mode == other._mode
            and self._scales == other._scales
            and self._stats == other._stats
        )

    __hash__ = None

    # ------------------------------------------------------------------
    # Profile services
    # ------------------------------------------------------------------

    def get_profile(
        self,
        x: Optional[List[float]] = None,
        y: Optional[List[float]] = None,
    ) -> Tuple[List[float], List[float]]:
        """
        Append the log-log profile points to x and y.

        Args:
            x: (modified) receives log(scale) at the back
            y: (modified) receives log(aggregate) at the back

        Returns:
            (x, y) — the same lists, or new ones if none were given.
        """
        self._require_valid()
        x = [] if x is None else x
        y = [] if y is None else y

        aggregate = _AGGREGATORS[self._mode]
        values = []
        for idx, stat in enumerate(self._stats):
            try:
                values.append(aggregate(stat))
            except EmptyStatisticError as e:
                raise EmptyStatisticError(e.aggregate, scale_idx=idx) from None

        with np.errstate(divide='ignore', invalid='ignore'):
            x.extend(np.log(np.asarray(self._scales, dtype=np.float64)).tolist())
            y.extend(np.log(np.asarray(values, dtype=np.float64)).tolist())
        return x, y

    def profile_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Profile points as numpy arrays."""
        x, y = self.get_profile()
        return np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)

    def meaningful_scales(
        self,
        min_width: int = 1,
        max_slope: float = -0.2,
        min_slope: float = -1e10,
    ) -> List[Tuple[int, int]]:
        """
        Meaningful scale intervals of this profile.

        A meaningful scale is an interval of scales of length no smaller
        than min_width in which the profile has slopes below max_slope and
        above min_slope.
        """
        x, y = self.profile_arrays()
        return slopes.meaningful_scales(x, y, min_width, max_slope, min_slope)

    def get_slope_from_meaningful_scales(
        self,
        max_slope: float = -0.2,
        min_slope: float = -1e10,
        min_size: int = 2,
    ) -> Tuple[bool, float]:
        """
        Regression slope over the first meaningful scale interval.

        Returns:
            (found, slope). If no interval was found, the slope is fitted
            over the whole profile and found is False.
        """
        x, y = self.profile_arrays()
        return noise.slope_from_meaningful_scales(x, y, max_slope, min_slope, min_size)

    def noise_level(
        self,
        min_width: int = 1,
        max_slope: float = -0.2,
        min_slope: float = -1e10,
    ) -> float:
        """First scale of the first meaningful interval, or 0 if none."""
        x, y = self.profile_arrays()
        return noise.noise_level(self._scales, x, y, min_width, max_slope, min_slope)

    def lower_bounded_noise_level(
        self,
        min_width: int = 1,
        max_slope: float = -0.2,
        min_slope: float = -1e10,
        lower_bound_at_scale_1: float = 1.0,
        lower_bound_slope: float = -2.0,
    ) -> float:
        """
        Noise level where the profile must also stay above the floor
        lower_bound_at_scale_1 * scale ** lower_bound_slope (for instance -1
        for digital contours, -3 for digital image graphs).
        """
        x, y = self.profile_arrays()
        return noise.lower_bounded_noise_level(
            self._scales, x, y, min_width, max_slope, min_slope,
            lower_bound_at_scale_1, lower_bound_slope,
        )

    def estimate(self, config: Optional[Dict[str, Any]] = None) -> "noise.NoiseEstimate":
        """All noise-level outputs at once, thresholds taken from config."""
        return noise.estimate(self, config)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        from scaleprofile.io.serialize import to_bytes
        return to_bytes(self)

    @classmethod
    def from_bytes(cls, blob: bytes) -> "ScaleProfile":
        from scaleprofile.io.serialize import from_bytes
        return from_bytes(blob)

    def __getstate__(self) -> Dict[str, Any]:
        from scaleprofile.io.serialize import to_state
        return to_state(self)

    def __setstate__(self, state: Dict[str, Any]) -> None:
        from scaleprofile.io.serialize import from_state
        restored = from_state(state)
        self.__dict__.update(restored.__dict__)

    def to_frame(self) -> pl.DataFrame:
        """One row per scale with the accumulator state."""
        self._require_valid()
        rows = []
        for idx, (scale, stat) in enumerate(zip(self._scales, self._stats)):
            state = stat.to_dict()
            rows.append({
                'scale_idx': idx,
                'scale': scale,
                'count': state['count'],
                'sum': state['sum'],
                'sum_sq': state['sum_sq'],
                'min': state['min'],
                'max': state['max'],
                'median': state['median'],
                'samples': state['samples'],
            })
        return pl.DataFrame(rows, schema=PROFILE_SCHEMA)

    # ------------------------------------------------------------------
    # Interface
    # ------------------------------------------------------------------

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [f"[ScaleProfile mode={self._mode.name}"]
        if not self.is_valid():
            lines.append("  (not initialized)")
        else:
            for idx, (scale, stat) in enumerate(zip(self._scales, self._stats)):
                lines.append(f"  {idx:>3}  scale={scale:<10.6g} {stat!r}")
        lines.append("]")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        if not self.is_valid():
            return f"ScaleProfile(mode={self._mode.name}, valid=False)"
        return (
            f"ScaleProfile(mode={self._mode.name}, n_scales={len(self._scales)}, "
            f"store_values={self._store_values})"
        )


PROFILE_SCHEMA = {
    'scale_idx': pl.Int64,
    'scale': pl.Float64,
    'count': pl.Int64,
    'sum': pl.Float64,
    'sum_sq': pl.Float64,
    'min': pl.Float64,
    'max': pl.Float64,
    'median': pl.Float64,
    'samples': pl.List(pl.Float64),
}
