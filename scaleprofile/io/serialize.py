"""
Versioned blob encoding of a ScaleProfile.

The blob is a UTF-8 JSON document. Its layout is not load-bearing; only the
round-trip is: from_bytes(to_bytes(p)) == p, retained samples and frozen
medians included.
"""

import json
from typing import Any, Dict

from scaleprofile.core._stats import Statistic
from scaleprofile.validation.errors import InvalidArgumentError

FORMAT_NAME = 'scaleprofile'
FORMAT_VERSION = 1


def to_state(profile) -> Dict[str, Any]:
    """Plain-dict state of a profile (valid or not)."""
    valid = profile.is_valid()
    return {
        'format': FORMAT_NAME,
        'version': FORMAT_VERSION,
        'mode': profile.mode.value,
        'store_values': profile.store_values,
        'scales': list(profile.scales) if valid else None,
        'stats': [stat.to_dict() for stat in profile.stats] if valid else None,
    }


def from_state(state: Dict[str, Any]):
    """Rebuild a ScaleProfile from to_state() output."""
    from scaleprofile.core.profile import ScaleProfile

    if not isinstance(state, dict) or state.get('format') != FORMAT_NAME:
        raise InvalidArgumentError("not a serialized scale profile")
    version = state.get('version')
    if version != FORMAT_VERSION:
        raise InvalidArgumentError(
            f"unsupported scale profile format version {version!r} "
            f"(this build reads version {FORMAT_VERSION})"
        )

    profile = ScaleProfile(state['mode'])
    if state['scales'] is None:
        return profile

    scales = state['scales']
    stats = state['stats']
    if stats is None or len(stats) != len(scales):
        raise InvalidArgumentError(
            "corrupted scale profile: scales and stats lengths differ"
        )

    profile.init(scales, state['store_values'])
    profile._stats = [Statistic.from_dict(s) for s in stats]
    return profile


def to_bytes(profile) -> bytes:
    # allow_nan keeps NaN/inf running aggregates intact
    return json.dumps(to_state(profile), allow_nan=True).encode('utf-8')


def from_bytes(blob: bytes):
    try:
        state = json.loads(bytes(blob).decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError, TypeError) as e:
        raise InvalidArgumentError(f"cannot decode scale profile blob: {e}") from e
    return from_state(state)
