"""
Scale profile errors.

Every failure here is a broken caller contract, not a transient fault.
Nothing is retried; errors surface immediately.

PRINCIPLE: "Check before compute, not after failure"
    Callers can guard with ScaleProfile.is_valid() instead of catching.
"""

from typing import Optional


class ScaleProfileError(Exception):
    """Base class for all scale profile errors."""


class InvalidStateError(ScaleProfileError):
    """Raised when an uninitialized or cleared profile is used."""


class IndexOutOfRangeError(ScaleProfileError, IndexError):
    """Raised when a scale index is outside [0, N)."""

    def __init__(self, idx: int, n_scales: int):
        self.idx = idx
        self.n_scales = n_scales
        super().__init__(
            f"scale index {idx} out of range for profile with {n_scales} scales"
        )


class InvalidArgumentError(ScaleProfileError, ValueError):
    """Raised for bad scales, thresholds, modes or serialized blobs."""


class EmptyStatisticError(ScaleProfileError, ValueError):
    """Raised when an aggregate is requested from an empty accumulator."""

    def __init__(self, aggregate: str, scale_idx: Optional[int] = None):
        self.aggregate = aggregate
        self.scale_idx = scale_idx

        message = f"cannot compute {aggregate} of an empty statistic"
        if scale_idx is not None:
            message += f" (scale index {scale_idx})"

        super().__init__(message)


def check_index(idx: int, n_scales: int) -> int:
    """Return idx as int if 0 <= idx < n_scales, else raise IndexOutOfRangeError."""
    if isinstance(idx, bool) or int(idx) != idx:
        raise IndexOutOfRangeError(idx, n_scales)
    idx = int(idx)
    if idx < 0 or idx >= n_scales:
        raise IndexOutOfRangeError(idx, n_scales)
    return idx
