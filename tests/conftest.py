"""Shared synthetic profiles."""

import pytest

from scaleprofile import ScaleProfile, ProfileMode


@pytest.fixture
def scales():
    """Scales 1..4 used by the reference scenarios."""
    return [1.0, 2.0, 3.0, 4.0]


@pytest.fixture
def make_power_law_profile(scales):
    """Factory: profile whose aggregate at scale s is s**exponent."""
    default_scales = scales

    def _make(scales=None, exponent=-1.0, mode=ProfileMode.MEAN,
              store_values=False, repeats=1):
        scales = default_scales if scales is None else scales
        profile = ScaleProfile(mode)
        profile.init(scales, store_values=store_values)
        for idx, scale in enumerate(scales):
            for _ in range(repeats):
                profile.add_value(idx, scale ** exponent)
        return profile

    return _make


@pytest.fixture
def make_flat_profile(scales):
    """Factory: profile whose aggregate is the same at every scale."""
    default_scales = scales

    def _make(scales=None, value=5.0):
        scales = default_scales if scales is None else scales
        profile = ScaleProfile()
        profile.init(scales)
        for idx in range(len(scales)):
            profile.add_value(idx, value)
        return profile

    return _make


@pytest.fixture
def power_law_profile(make_power_law_profile):
    """Perfect slope -1 over scales 1..4."""
    return make_power_law_profile()


@pytest.fixture
def flat_profile(make_flat_profile):
    """Constant aggregate over scales 1..4."""
    return make_flat_profile()
