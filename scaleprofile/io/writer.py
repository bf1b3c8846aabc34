"""
Writer — parquet export of a ScaleProfile.

One row per scale (see PROFILE_SCHEMA). Mode and format version go into
parquet file-level key-value metadata.
"""

import logging
from pathlib import Path
from typing import Union

import polars as pl

from scaleprofile.io.serialize import FORMAT_VERSION

logger = logging.getLogger(__name__)


def profile_metadata(profile) -> dict:
    return {
        'scaleprofile.version': str(FORMAT_VERSION),
        'scaleprofile.mode': profile.mode.value,
    }


def write_profile(profile, path: Union[str, Path]) -> Path:
    """
    Write a profile to parquet.

    Args:
        profile: Initialized ScaleProfile
        path: Output file (parent directories are created)

    Returns:
        Path to the written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = profile.to_frame()
    df.write_parquet(str(path), metadata=profile_metadata(profile))
    logger.info(f"  -> {path} ({len(df)} scales)")
    return path


def write_report(rows: list, path: Union[str, Path]) -> Path:
    """Write noise estimate rows (dicts) to parquet."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    pl.DataFrame(rows).write_parquet(str(path))
    logger.info(f"  -> {path} ({len(rows)} rows)")
    return path
