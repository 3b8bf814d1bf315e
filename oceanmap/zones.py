"""
Fishery-management zone subsets.

Zone polygons come from an external source (already loaded as a
GeoDataFrame, usually in a projected CRS). This module only splits them
into named subsets keyed by the zone label; reprojection to the station
datum is left to the renderer, which needs to reproject basemap layers
anyway.
"""

from typing import Dict, Iterable, Optional

import geopandas as gpd
from loguru import logger

from .exceptions import ZoneError


def split_zones(
    zones: gpd.GeoDataFrame,
    label_column: str,
    labels: Optional[Iterable[str]] = None,
) -> Dict[str, gpd.GeoDataFrame]:
    """
    Split zone polygons into one GeoDataFrame per label.

    Args:
        zones: Zone polygons with a categorical label column
        label_column: Column holding the zone label
        labels: Labels to extract, in order (default: every label present)

    Returns:
        {label: subset}; each subset keeps the source CRS

    Raises:
        ZoneError: If the label column or a requested label is missing
    """
    if label_column not in zones.columns:
        raise ZoneError(f"Zone table has no column {label_column!r}")

    present = zones[label_column].dropna().astype(str)
    if labels is None:
        wanted = list(dict.fromkeys(present))
    else:
        wanted = [str(label) for label in labels]
        missing = [label for label in wanted if label not in set(present)]
        if missing:
            raise ZoneError(f"Unknown zone labels: {missing}")

    subsets = {}
    for label in wanted:
        mask = zones[label_column].astype(str) == label
        subsets[label] = zones[mask].reset_index(drop=True)
        logger.debug(f"Zone {label!r}: {len(subsets[label])} polygons")

    logger.info(f"Selected {len(subsets)} zone subsets from {label_column!r}")
    return subsets
