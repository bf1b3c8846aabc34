"""
Scale Profile Core
==================

Structure:
    _stats.py   - Statistic: running aggregate of the lengths at one scale
    profile.py  - ScaleProfile: scales + statistics, log-log profile builder
    slopes.py   - Slope analyzer: finite-difference slopes, meaningful scales
    noise.py    - Regression and noise-level estimators
    config.py   - Default thresholds and YAML overrides
"""

from scaleprofile.core._stats import Statistic
from scaleprofile.core.profile import ScaleProfile, ProfileMode
from scaleprofile.core.slopes import meaningful_scales, profile_slopes
from scaleprofile.core.noise import (
    NoiseEstimate,
    linear_regression,
    noise_level,
    lower_bounded_noise_level,
    slope_from_meaningful_scales,
)
from scaleprofile.core.config import load_config, DEFAULT_THRESHOLDS
