"""
Reader — parquet import of ScaleProfiles and raw per-scale samples.
"""

from pathlib import Path
from typing import Union

import polars as pl

from scaleprofile.core._stats import Statistic
from scaleprofile.io.serialize import FORMAT_VERSION
from scaleprofile.validation.errors import InvalidArgumentError

PROFILE_COLUMNS = ['scale_idx', 'scale', 'count', 'sum', 'sum_sq', 'min', 'max', 'median', 'samples']
SAMPLE_COLUMNS = ['scale', 'value']


def read_profile(path: Union[str, Path], mode: str = None):
    """
    Read a profile written by write_profile().

    Args:
        path: Parquet file
        mode: Profile mode override; defaults to the mode stored in the file
    """
    from scaleprofile.core.profile import ScaleProfile

    path = Path(path)
    metadata = pl.read_parquet_metadata(str(path))
    version = metadata.get('scaleprofile.version')
    if version is not None and int(version) != FORMAT_VERSION:
        raise InvalidArgumentError(
            f"{path}: unsupported scale profile format version {version}"
        )

    df = pl.read_parquet(str(path))
    missing = [c for c in PROFILE_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidArgumentError(f"{path}: missing columns {missing}")

    df = df.sort('scale_idx')
    profile = ScaleProfile(mode or metadata.get('scaleprofile.mode', 'mean'))
    profile.init(df['scale'].to_list())
    profile._stats = [Statistic.from_dict(row) for row in df.iter_rows(named=True)]
    profile._store_values = any(s.store_samples for s in profile._stats)
    return profile


def read_samples(path: Union[str, Path]) -> pl.DataFrame:
    """
    Read raw samples for one site: columns 'scale' and 'value'.

    Returns:
        DataFrame with float 'scale' and 'value' columns, nulls dropped.
    """
    path = Path(path)
    df = pl.read_parquet(str(path))
    missing = [c for c in SAMPLE_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidArgumentError(f"{path}: missing columns {missing}")

    return (
        df.select(
            pl.col('scale').cast(pl.Float64),
            pl.col('value').cast(pl.Float64),
        )
        .drop_nulls()
    )
