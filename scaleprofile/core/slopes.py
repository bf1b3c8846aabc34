"""
Slope Analyzer.

Finite-difference slopes of a log-log profile and detection of meaningful
scale intervals: maximal runs of consecutive slopes inside the band
[min_slope, max_slope].

Intervals are reported as profile-point index pairs (first, last), both
inclusive. A run of k in-band slopes starting at slope i spans points
i .. i + k.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from scaleprofile.validation.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

Interval = Tuple[int, int]


def profile_slopes(x: Sequence[float], y: Sequence[float]) -> np.ndarray:
    """
    Slopes between consecutive profile points.

    Args:
        x: log(scale) values
        y: log(aggregate) values, same length as x

    Returns:
        Array of len(x) - 1 slopes (empty for fewer than 2 points).
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    y = np.asarray(y, dtype=np.float64).ravel()
    if len(x) != len(y):
        raise InvalidArgumentError(
            f"profile length mismatch: {len(x)} x-values, {len(y)} y-values"
        )
    if len(x) < 2:
        return np.empty(0, dtype=np.float64)

    with np.errstate(divide='ignore', invalid='ignore'):
        return np.diff(y) / np.diff(x)


def meaningful_scales(
    x: Sequence[float],
    y: Sequence[float],
    min_width: int = 1,
    max_slope: float = -0.2,
    min_slope: float = -1e10,
) -> List[Interval]:
    """
    Find meaningful scale intervals of a profile.

    A meaningful interval is a maximal run of at least ``min_width``
    consecutive slopes, each within [min_slope, max_slope] (bounds
    inclusive). NaN slopes never qualify.

    Args:
        x: log(scale) values
        y: log(aggregate) values
        min_width: Minimum number of in-band slopes (>= 1)
        max_slope: Upper bound of the slope band
        min_slope: Lower bound of the slope band

    Returns:
        Ordered, non-overlapping list of (first_point, last_point) pairs.
    """
    if int(min_width) < 1:
        raise InvalidArgumentError(f"min_width must be >= 1, got {min_width}")
    min_width = int(min_width)

    slopes = profile_slopes(x, y)
    in_band = (slopes >= min_slope) & (slopes <= max_slope)

    intervals: List[Interval] = []
    start = None
    for i, ok in enumerate(in_band):
        if ok:
            if start is None:
                start = i
            continue
        if start is not None and i - start >= min_width:
            intervals.append((start, i))
        start = None

    n = len(in_band)
    if start is not None and n - start >= min_width:
        intervals.append((start, n))

    logger.debug(
        f"meaningful_scales: {len(intervals)} interval(s) "
        f"(min_width={min_width}, band=[{min_slope}, {max_slope}])"
    )
    return intervals


def interval_width(interval: Interval) -> int:
    """Number of slopes spanned by an interval."""
    return interval[1] - interval[0]
