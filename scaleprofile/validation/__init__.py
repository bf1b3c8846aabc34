"""
Scale Profile Validation Module

Exports:
    - ScaleProfileError: Base class for every error raised by the package
    - InvalidStateError: Profile used before init() or after clear()
    - IndexOutOfRangeError: Scale index outside [0, N)
    - InvalidArgumentError: Bad scales, thresholds, modes or blobs
    - EmptyStatisticError: Aggregate requested on an empty accumulator
    - check_index: Index guard shared by ingestion operations
"""

from .errors import (
    ScaleProfileError,
    InvalidStateError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    EmptyStatisticError,
    check_index,
)

__all__ = [
    'ScaleProfileError',
    'InvalidStateError',
    'IndexOutOfRangeError',
    'InvalidArgumentError',
    'EmptyStatisticError',
    'check_index',
]
