"""
Scale Profile — multiscale noise-level estimation at one measurement site.

Public API:
    from scaleprofile import ScaleProfile, ProfileMode

    sp = ScaleProfile(ProfileMode.MEAN)
    sp.init([1, 2, 3, 4])
    sp.add_value(0, 10.0)
    ...
    sp.noise_level()

Layers:
    scaleprofile.core        Statistic, ScaleProfile, slope analyzer, noise estimators
    scaleprofile.io          Versioned blob and parquet I/O
    scaleprofile.validation  Error hierarchy
    scaleprofile.run         CLI: samples parquet -> noise level report
"""

from scaleprofile.core import (
    Statistic,
    ScaleProfile,
    ProfileMode,
    NoiseEstimate,
    meaningful_scales,
    load_config,
)
from scaleprofile.validation import (
    ScaleProfileError,
    InvalidStateError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    EmptyStatisticError,
)

__all__ = [
    'Statistic',
    'ScaleProfile',
    'ProfileMode',
    'NoiseEstimate',
    'meaningful_scales',
    'load_config',
    'ScaleProfileError',
    'InvalidStateError',
    'IndexOutOfRangeError',
    'InvalidArgumentError',
    'EmptyStatisticError',
]
