"""
Scale Profile Runner
====================

Noise level of ONE measurement site from a parquet of raw samples.
Pure orchestration — no computation here.

Input: parquet with columns
    scale   observation scale of the measurement (strictly positive)
    value   digital length measured at that scale

Usage:
    python -m scaleprofile samples.parquet
    python -m scaleprofile samples.parquet --mode median --preset contour
    python -m scaleprofile samples.parquet --config noise.yaml -o report.parquet
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

import polars as pl

from scaleprofile.core.config import load_config
from scaleprofile.core.noise import NoiseEstimate
from scaleprofile.core.profile import ProfileMode, ScaleProfile
from scaleprofile.io.reader import read_samples
from scaleprofile.io.writer import write_profile, write_report

logger = logging.getLogger(__name__)


def build_profile(samples: pl.DataFrame, mode: str = 'mean') -> ScaleProfile:
    """
    Build a ScaleProfile from a (scale, value) frame.

    Scales are the distinct values of the 'scale' column, ascending.
    """
    mode = ProfileMode.parse(mode)
    scales = samples['scale'].unique().sort().to_list()

    profile = ScaleProfile(mode)
    profile.init(scales, store_values=(mode is ProfileMode.MEDIAN))

    index = {scale: idx for idx, scale in enumerate(scales)}
    grouped = samples.group_by('scale', maintain_order=True).agg(pl.col('value'))
    for scale, values in grouped.iter_rows():
        profile.add_values(index[scale], values)

    profile.stop_stats_saving()
    return profile


def run(
    samples_path: str,
    config_path: Optional[str] = None,
    preset: Optional[str] = None,
    mode: Optional[str] = None,
    output_path: Optional[str] = None,
    profile_path: Optional[str] = None,
) -> NoiseEstimate:
    """
    Estimate the noise level of one site.

    Args:
        samples_path: Parquet of raw (scale, value) samples
        config_path: Optional YAML thresholds file
        preset: Optional threshold preset name ('contour', 'surface', ...)
        mode: Profile aggregation; overrides the config mode
        output_path: Optional parquet report (one row)
        profile_path: Optional parquet dump of the built profile

    Returns:
        NoiseEstimate
    """
    samples_path = Path(samples_path)
    if not samples_path.exists():
        raise FileNotFoundError(f"samples not found: {samples_path}")

    config = load_config(config_path, preset)
    mode = mode or config['mode']

    samples = read_samples(samples_path)
    logger.info(f"Read {len(samples)} samples from {samples_path}")

    profile = build_profile(samples, mode)
    logger.info(f"Built {profile!r}")

    result = profile.estimate(config)

    if profile_path:
        write_profile(profile, profile_path)
    if output_path:
        write_report([{'source': str(samples_path), 'mode': profile.mode.value, **result.to_dict()}], output_path)

    return result


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Scale profile noise level",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage:
  python -m scaleprofile samples.parquet
  python -m scaleprofile samples.parquet --mode median --preset contour
"""
    )
    parser.add_argument('samples', help='Parquet with scale and value columns (one site)')
    parser.add_argument('--config', help='YAML thresholds file')
    parser.add_argument('--preset', help='Threshold preset (contour, surface, or from --config)')
    parser.add_argument('--mode', choices=[m.value for m in ProfileMode], help='Profile aggregation')
    parser.add_argument('-o', '--output', help='Write a one-row parquet report')
    parser.add_argument('--profile-out', help='Write the built profile to parquet')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress output')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(message)s',
    )

    result = run(
        samples_path=args.samples,
        config_path=args.config,
        preset=args.preset,
        mode=args.mode,
        output_path=args.output,
        profile_path=args.profile_out,
    )

    if not args.quiet:
        print(result.summary())


if __name__ == '__main__':
    main()
