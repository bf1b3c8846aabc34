"""
Regression & Noise Estimator.

Least-squares slope fitting over meaningful scale intervals and noise-level
derivation from a log-log profile.

The noise level is the first scale of the first meaningful interval: the
smallest scale at which measured lengths start behaving like a power law.
0 means "no noise level detected" (scales are always strictly positive).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import linregress

from scaleprofile.core.config import load_config, threshold_kwargs
from scaleprofile.core.slopes import Interval, interval_width, meaningful_scales
from scaleprofile.validation.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

NO_NOISE_LEVEL = 0.0


def linear_regression(x: Sequence[float], y: Sequence[float]) -> Dict[str, float]:
    """
    Ordinary least squares fit y = slope * x + intercept.

    Returns:
        dict with slope, intercept, r2. NaN values when fewer than two
        finite points are given or all x values are identical.
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    y = np.asarray(y, dtype=np.float64).ravel()
    mask = np.isfinite(x) & np.isfinite(y)
    x, y = x[mask], y[mask]

    if len(x) < 2 or np.ptp(x) == 0.0:
        return {'slope': np.nan, 'intercept': np.nan, 'r2': np.nan}

    result = linregress(x, y)
    return {
        'slope': float(result.slope),
        'intercept': float(result.intercept),
        'r2': float(result.rvalue ** 2),
    }


def slope_from_meaningful_scales(
    x: Sequence[float],
    y: Sequence[float],
    max_slope: float = -0.2,
    min_slope: float = -1e10,
    min_size: int = 2,
) -> Tuple[bool, float]:
    """
    Profile slope over the first meaningful interval of at least min_size
    slopes, fitted by linear regression.

    Returns:
        (True, slope) when such an interval exists, otherwise
        (False, slope fitted over the whole profile).
    """
    if int(min_size) < 1:
        raise InvalidArgumentError(f"min_size must be >= 1, got {min_size}")

    x = np.asarray(x, dtype=np.float64).ravel()
    y = np.asarray(y, dtype=np.float64).ravel()

    intervals = meaningful_scales(x, y, 1, max_slope, min_slope)
    for first, last in intervals:
        if interval_width((first, last)) >= min_size:
            fit = linear_regression(x[first:last + 1], y[first:last + 1])
            return True, fit['slope']

    logger.debug(
        f"No meaningful interval of {min_size} slopes among {len(intervals)}, "
        "regressing over the whole profile"
    )
    fit = linear_regression(x, y)
    return False, fit['slope']


def noise_level(
    scales: Sequence[float],
    x: Sequence[float],
    y: Sequence[float],
    min_width: int = 1,
    max_slope: float = -0.2,
    min_slope: float = -1e10,
) -> float:
    """
    First scale of the first meaningful interval, 0 if there is none.

    Args:
        scales: Scale values, index-aligned with the profile points
        x, y: Log-log profile
    """
    intervals = meaningful_scales(x, y, min_width, max_slope, min_slope)
    if not intervals:
        return NO_NOISE_LEVEL
    return float(scales[intervals[0][0]])


def above_lower_bound(
    x: Sequence[float],
    y: Sequence[float],
    interval: Interval,
    lower_bound_at_scale_1: float,
    lower_bound_slope: float,
) -> bool:
    """
    Whether the profile stays above the power-law floor on an interval.

    The floor is f(s) = lower_bound_at_scale_1 * s ** lower_bound_slope,
    compared in log space: y >= log(lower_bound_at_scale_1) + slope * x.
    Points exactly on the floor pass.
    """
    if lower_bound_at_scale_1 <= 0.0:
        raise InvalidArgumentError(
            f"lower_bound_at_scale_1 must be strictly positive, got {lower_bound_at_scale_1}"
        )
    first, last = interval
    xs = np.asarray(x, dtype=np.float64)[first:last + 1]
    ys = np.asarray(y, dtype=np.float64)[first:last + 1]
    floor = np.log(lower_bound_at_scale_1) + lower_bound_slope * xs
    return bool(np.all(ys >= floor))


def lower_bounded_noise_level(
    scales: Sequence[float],
    x: Sequence[float],
    y: Sequence[float],
    min_width: int = 1,
    max_slope: float = -0.2,
    min_slope: float = -1e10,
    lower_bound_at_scale_1: float = 1.0,
    lower_bound_slope: float = -2.0,
) -> float:
    """
    Noise level restricted to intervals lying above a power-law floor.

    Returns:
        First scale of the first surviving interval, 0 if none survives.
    """
    if lower_bound_at_scale_1 <= 0.0:
        raise InvalidArgumentError(
            f"lower_bound_at_scale_1 must be strictly positive, got {lower_bound_at_scale_1}"
        )

    intervals = meaningful_scales(x, y, min_width, max_slope, min_slope)
    for interval in intervals:
        if above_lower_bound(x, y, interval, lower_bound_at_scale_1, lower_bound_slope):
            return float(scales[interval[0]])
        logger.debug(f"Interval {interval} rejected: profile below lower bound")
    return NO_NOISE_LEVEL


@dataclass
class NoiseEstimate:
    """All noise-level outputs of one profile."""

    noise_level: float = NO_NOISE_LEVEL
    lower_bounded_noise_level: float = NO_NOISE_LEVEL
    slope_found: bool = False
    slope: float = np.nan
    intervals: List[Interval] = field(default_factory=list)
    thresholds: Dict[str, Any] = field(default_factory=dict)

    @property
    def detected(self) -> bool:
        return self.noise_level != NO_NOISE_LEVEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'noise_level': self.noise_level,
            'lower_bounded_noise_level': self.lower_bounded_noise_level,
            'slope_found': self.slope_found,
            'slope': self.slope,
            'n_intervals': len(self.intervals),
        }

    def summary(self) -> str:
        lines = [
            "=" * 60,
            "NOISE LEVEL ESTIMATE",
            "=" * 60,
            "",
            f"Noise level: {self.noise_level:g}"
            + ("" if self.detected else " (none detected)"),
            f"Lower-bounded noise level: {self.lower_bounded_noise_level:g}",
            f"Slope: {self.slope:.4f}"
            + (" (meaningful interval)" if self.slope_found else " (whole profile)"),
            f"Meaningful intervals: {self.intervals}",
        ]
        return "\n".join(lines)


def estimate(profile, config: Optional[Dict[str, Any]] = None) -> NoiseEstimate:
    """
    Run every noise-level computation on a ScaleProfile.

    Args:
        profile: Initialized ScaleProfile
        config: Thresholds (see scaleprofile.core.config). Missing keys take
                the load_config() defaults. The profile's own mode is used;
                config['mode'] is ignored.
    """
    config = {**load_config(), **(config or {})}
    scales = profile.scales
    x, y = profile.profile_arrays()

    band = threshold_kwargs(config, 'max_slope', 'min_slope')
    floor = threshold_kwargs(config, 'lower_bound_at_scale_1', 'lower_bound_slope')

    intervals = meaningful_scales(x, y, config['min_width'], **band)
    found, slope = slope_from_meaningful_scales(x, y, min_size=config['min_size'], **band)

    result = NoiseEstimate(
        noise_level=noise_level(scales, x, y, config['min_width'], **band),
        lower_bounded_noise_level=lower_bounded_noise_level(
            scales, x, y, config['min_width'], **band, **floor,
        ),
        slope_found=found,
        slope=slope,
        intervals=intervals,
        thresholds={k: v for k, v in config.items() if k != 'mode'},
    )
    logger.debug(f"Noise estimate: {result.to_dict()}")
    return result
