#!/usr/bin/env python3
"""
Build Station Features

Reads the survey station table, keeps the configured cast types with a
non-empty filter status, converts degrees-minutes positions to decimal
degrees and writes the resulting point features for the map renderer.

Output Artifacts:
- <output>.geojson: Station points (EPSG:4326 by default) with attributes
  and the tow_occurred / tow_label columns
- <output>.csv: Same table without geometry (when --output ends in .csv)

Usage:
    python scripts/build_station_features.py --source data/raw/stations.csv \
        --output data/processed/stations.geojson

    # Detect the separator from the first row and keep two cast types
    python scripts/build_station_features.py --source stations.csv \
        --separator auto --cast-type CTD --cast-type Bongo

Environment Variables (optional, see oceanmap.config):
    OCEANMAP_STATION_SOURCE: Default table path or URL
    OCEANMAP_LONGITUDE_HEMISPHERE / OCEANMAP_LATITUDE_HEMISPHERE
"""

import sys
import argparse
from dataclasses import replace
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import requests
from loguru import logger

# Configure logging
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    level="INFO",
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Build station point features from a survey station table"
    )
    parser.add_argument(
        "--source",
        type=str,
        default=None,
        help="Station table CSV path or URL (default: OCEANMAP_STATION_SOURCE)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="data/processed/station_features.geojson",
        help="Output file, .geojson or .csv (default: data/processed/station_features.geojson)",
    )
    parser.add_argument(
        "--separator",
        type=str,
        default=None,
        help="Degrees/minutes separator, or 'auto' to detect from the first row",
    )
    parser.add_argument(
        "--cast-type",
        action="append",
        dest="cast_types",
        default=None,
        help="Cast type to keep (repeatable, default: CTD)",
    )
    parser.add_argument(
        "--longitude-hemisphere",
        choices=["E", "W"],
        default=None,
        help="Hemisphere of the unsigned longitudes (default: W)",
    )
    parser.add_argument(
        "--latitude-hemisphere",
        choices=["N", "S"],
        default=None,
        help="Hemisphere of the unsigned latitudes (default: N)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write DEBUG logs to this file",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.log_file:
        Path(args.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(args.log_file, rotation="10 MB", level="DEBUG")

    from oceanmap.config import load_config
    from oceanmap.exceptions import OceanMapError
    from oceanmap.pipeline import run

    logger.info("=" * 60)
    logger.info("STATION FEATURES")
    logger.info("=" * 60)

    try:
        config = load_config().with_overrides(
            source=args.source,
            cast_types=tuple(args.cast_types) if args.cast_types else None,
            longitude_hemisphere=args.longitude_hemisphere,
            latitude_hemisphere=args.latitude_hemisphere,
        )
        if args.separator is not None:
            separator = None if args.separator.lower() == "auto" else args.separator
            config = replace(config, separator=separator)

        collection = run(config)
    except OceanMapError as e:
        logger.error(f"Station features failed: {e}")
        return 1
    except requests.RequestException as e:
        logger.error(f"Could not download station table: {e}")
        return 1

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    if output.suffix.lower() == ".csv":
        collection.to_dataframe().to_csv(output, index=False)
    else:
        collection.to_geodataframe().to_file(output, driver="GeoJSON")

    logger.info(f"Saved {len(collection)} station features to: {output}")
    logger.info(f"  Towed stations: {collection.tow_count}")
    logger.info(f"  CRS: {collection.crs}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
