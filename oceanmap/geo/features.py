"""
Feature table assembly.

Joins station records with their point geometries and the derived
"tow occurred" flag into an immutable, row-aligned FeatureCollection.
The collection is what the map renderer consumes, either directly or as
a GeoDataFrame via to_geodataframe().
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

import geopandas as gpd
import pandas as pd

from ..exceptions import AlignmentError
from ..ingestion.stations import RawStationRecord
from .geometry import DEFAULT_CRS, PointGeometry

RECORD_COLUMNS = [
    "row_index",
    "station",
    "latitude_dm",
    "longitude_dm",
    "cast_type",
    "filter_status",
    "tow_start_time",
]
DERIVED_COLUMNS = ["longitude", "latitude", "tow_occurred", "tow_label"]
RESERVED_COLUMNS = set(RECORD_COLUMNS + DERIVED_COLUMNS + ["geometry"])
ATTRIBUTE_PREFIX = "attr_"


def _attribute_column(name: str) -> str:
    """Output column for a source attribute; names clashing with ours get a prefix."""
    name = str(name)
    return ATTRIBUTE_PREFIX + name if name in RESERVED_COLUMNS else name


@dataclass(frozen=True)
class StationFeature:
    """A station record with its point and tow flag."""
    record: RawStationRecord
    geometry: PointGeometry
    tow_occurred: bool

    @property
    def tow_label(self) -> str:
        return "Y" if self.tow_occurred else "N"

    @property
    def row_index(self) -> int:
        return self.record.row_index


@dataclass(frozen=True)
class FeatureCollection:
    """
    Ordered station features, one per input row.

    features[i] always corresponds to input row i, so the collection can
    be traced back to the station table.
    """
    features: Tuple[StationFeature, ...] = ()
    crs: str = DEFAULT_CRS

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[StationFeature]:
        return iter(self.features)

    def __getitem__(self, index: int) -> StationFeature:
        return self.features[index]

    @property
    def tow_count(self) -> int:
        return sum(1 for f in self.features if f.tow_occurred)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Flat attribute table with decimal longitude/latitude columns.

        The record and derived columns are always present, even with no
        features. Source attributes whose names clash with them are written
        as attr_<name>.
        """
        attribute_columns = []
        rows = []
        for f in self.features:
            r = f.record
            rows.append({
                "row_index": r.row_index,
                "station": r.station,
                "latitude_dm": r.latitude,
                "longitude_dm": r.longitude,
                "cast_type": r.cast_type,
                "filter_status": r.filter_status,
                "tow_start_time": r.tow_start_time,
                **{_attribute_column(k): v for k, v in r.attributes},
                "longitude": f.geometry.longitude,
                "latitude": f.geometry.latitude,
                "tow_occurred": f.tow_occurred,
                "tow_label": f.tow_label,
            })
            for k, _ in r.attributes:
                column = _attribute_column(k)
                if column not in attribute_columns:
                    attribute_columns.append(column)

        columns = RECORD_COLUMNS + attribute_columns + DERIVED_COLUMNS
        return pd.DataFrame(rows, columns=columns)

    def to_geodataframe(self) -> gpd.GeoDataFrame:
        """GeoDataFrame of the features with the collection's CRS set."""
        frame = self.to_dataframe()
        geometry = [f.geometry.point for f in self.features]
        return gpd.GeoDataFrame(frame, geometry=geometry, crs=self.crs)


def derive_tow_flags(records: Sequence[RawStationRecord]) -> Tuple[bool, ...]:
    """True for records with a tow start time, False where it is absent."""
    return tuple(r.tow_start_time is not None for r in records)


def assemble_features(
    records: Sequence[RawStationRecord],
    geometries: Sequence[PointGeometry],
    tow_flags: Optional[Sequence[bool]] = None,
    crs: str = DEFAULT_CRS,
) -> FeatureCollection:
    """
    Combine row-aligned records, geometries and tow flags.

    Args:
        records: RawStationRecords in table order
        geometries: One PointGeometry per record, same order
        tow_flags: One flag per record (derived from the records when None)
        crs: Datum identifier of the collection

    Returns:
        New FeatureCollection; inputs are left untouched

    Raises:
        AlignmentError: If the sequences differ in length
    """
    if len(records) != len(geometries):
        raise AlignmentError(len(records), len(geometries), "geometries")

    if tow_flags is None:
        tow_flags = derive_tow_flags(records)
    elif len(tow_flags) != len(records):
        raise AlignmentError(len(records), len(tow_flags), "tow flags")

    features = tuple(
        StationFeature(record=r, geometry=g, tow_occurred=bool(t))
        for r, g, t in zip(records, geometries, tow_flags)
    )
    return FeatureCollection(features=features, crs=crs)
