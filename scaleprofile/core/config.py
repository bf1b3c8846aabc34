"""
Scale Profile Threshold Configuration

Single source of truth for the slope bands and lower-bound floors used by
meaningful-scale detection and noise-level estimation.

Built-in values can be overridden from a YAML file:

    defaults:
      min_width: 2
      max_slope: -0.3
    presets:
      contour:
        lower_bound_slope: -1.0

Usage:
    from scaleprofile.core.config import load_config

    config = load_config()                          # built-in defaults
    config = load_config('noise.yaml', 'surface')   # file defaults + preset
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from scaleprofile.validation.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


# ============================================================
# DEFAULT THRESHOLDS
# ============================================================

DEFAULT_THRESHOLDS: Dict[str, Any] = {
    # Minimum number of consecutive in-band slopes for a meaningful interval
    'min_width': 1,

    # Slope band: min_slope <= slope <= max_slope
    'max_slope': -0.2,
    'min_slope': -1e10,

    # Minimum interval size accepted by the slope regression
    'min_size': 2,

    # Floor: aggregate >= lower_bound_at_scale_1 * scale ** lower_bound_slope
    'lower_bound_at_scale_1': 1.0,
    'lower_bound_slope': -2.0,
}

DEFAULT_MODE: str = 'mean'

# Lengths at scale s shrink like s^-1 on digital contours and like s^-3 on
# digital image graphs (area values divided by s^3).
BUILTIN_PRESETS: Dict[str, Dict[str, Any]] = {
    'contour': {'lower_bound_slope': -1.0},
    'surface': {'lower_bound_slope': -3.0},
}

_INT_KEYS = {'min_width', 'min_size'}
_KNOWN_KEYS = set(DEFAULT_THRESHOLDS) | {'mode'}


def _coerce(section: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Validate keys and coerce values of one config section."""
    unknown = set(section) - _KNOWN_KEYS
    if unknown:
        raise InvalidArgumentError(
            f"unknown configuration keys in {source}: {sorted(unknown)}"
        )

    result = {}
    for key, value in section.items():
        if key == 'mode':
            result[key] = str(value).lower()
        elif key in _INT_KEYS:
            result[key] = int(value)
        else:
            result[key] = float(value)
    return result


def load_config(
    path: Optional[Union[str, Path]] = None,
    preset: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Load thresholds, merging preset over file defaults over built-ins.

    Args:
        path: Optional YAML file with ``defaults`` and ``presets`` maps.
              A missing file falls back to built-ins.
        preset: Optional preset name (file presets shadow built-in ones).

    Returns:
        Dict with every DEFAULT_THRESHOLDS key plus 'mode'.
    """
    config: Dict[str, Any] = {**DEFAULT_THRESHOLDS, 'mode': DEFAULT_MODE}
    presets: Dict[str, Dict[str, Any]] = dict(BUILTIN_PRESETS)

    if path is not None:
        path = Path(path)
        if not path.exists():
            logger.warning(f"No config found at {path}, using built-in thresholds")
        else:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
            if not isinstance(raw, dict):
                raise InvalidArgumentError(f"config file {path} is not a mapping")

            config.update(_coerce(raw.get('defaults') or {}, f"{path}:defaults"))
            for name, section in (raw.get('presets') or {}).items():
                presets[name] = section or {}

    if preset is not None:
        if preset not in presets:
            raise InvalidArgumentError(
                f"unknown preset {preset!r}; available: {sorted(presets)}"
            )
        config.update(_coerce(presets[preset], f"preset {preset}"))

    logger.debug(f"Loaded scale profile config: {config}")
    return config


def threshold_kwargs(config: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    """Pick the named thresholds out of a config dict."""
    return {key: config[key] for key in keys}
