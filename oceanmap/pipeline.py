"""
Station feature pipeline.

Single linear pass over the filtered station table:

    records -> parse coordinates -> build points -> derive tow flags -> assemble

Any error aborts the batch; nothing partial is returned.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

from loguru import logger

from .config import StationMapConfig
from .geo.coordinates import parse_station_coordinates
from .geo.features import FeatureCollection, assemble_features, derive_tow_flags
from .geo.geometry import build_points
from .ingestion.stations import RawStationRecord, StationTableClient


def build_station_features(
    records: Sequence[RawStationRecord],
    config: Optional[StationMapConfig] = None,
) -> FeatureCollection:
    """
    Turn filtered station records into a FeatureCollection.

    Args:
        records: RawStationRecords, already filtered by cast type and status
        config: Separator, hemisphere and CRS settings

    Returns:
        FeatureCollection aligned one-to-one with records
    """
    config = config or StationMapConfig()

    if not records:
        logger.warning("No station records to convert")
        return FeatureCollection(features=(), crs=config.crs)

    logger.info(f"Parsing coordinates for {len(records)} stations...")
    coordinates = parse_station_coordinates(records, config)

    lats = [c.latitude for c in coordinates]
    lons = [c.longitude for c in coordinates]
    logger.debug(f"Latitude range: [{min(lats):.4f}, {max(lats):.4f}]")
    logger.debug(f"Longitude range: [{min(lons):.4f}, {max(lons):.4f}]")

    geometries = build_points(
        coordinates, crs=config.crs, row_indices=[r.row_index for r in records]
    )
    tow_flags = derive_tow_flags(records)

    collection = assemble_features(records, geometries, tow_flags, crs=config.crs)
    logger.info(
        f"Assembled {len(collection)} station features "
        f"({collection.tow_count} towed, CRS {collection.crs})"
    )
    return collection


def run(
    config: Optional[StationMapConfig] = None,
    source: Optional[Union[str, Path]] = None,
    client: Optional[StationTableClient] = None,
) -> FeatureCollection:
    """Ingest the station table and build its FeatureCollection."""
    config = config or StationMapConfig()
    client = client or StationTableClient(config)
    records = client.fetch_records(source)
    return build_station_features(records, config)
