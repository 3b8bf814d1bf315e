"""
Tests for feature table assembly.

Covers:
1. Tow flag derivation (absent tow start time -> N)
2. Row-aligned assembly and immutability
3. AlignmentError on mismatched lengths, with no partial output
4. GeoDataFrame hand-off for rendering
"""

import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

import geopandas as gpd
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from oceanmap.exceptions import AlignmentError
from oceanmap.geo.features import (
    DERIVED_COLUMNS,
    RECORD_COLUMNS,
    FeatureCollection,
    assemble_features,
    derive_tow_flags,
)
from oceanmap.geo.geometry import build_point
from oceanmap.ingestion.stations import RawStationRecord


def _records(n):
    return [
        RawStationRecord(
            row_index=i,
            station=f"S{i}",
            latitude=f"{40 + i}°00.0'",
            longitude=f"{70 - i}°30.0'",
            cast_type="CTD",
            filter_status="Y",
            tow_start_time="2023-05-01 10:00" if i % 2 == 0 else None,
            attributes=(("Cruise", "HB2301"),),
        )
        for i in range(n)
    ]


def _geometries(n):
    return [build_point(-(70.5 - i), 40.0 + i) for i in range(n)]


def test_tow_flags():
    flags = derive_tow_flags(_records(4))
    assert flags == (True, False, True, False)


def test_assemble_preserves_order_and_correspondence():
    records = _records(5)
    geometries = _geometries(5)
    collection = assemble_features(records, geometries)

    assert isinstance(collection, FeatureCollection)
    assert len(collection) == 5
    for i, feature in enumerate(collection):
        assert feature.record is records[i]
        assert feature.geometry is geometries[i]
        assert feature.row_index == i
    assert [f.tow_label for f in collection] == ["Y", "N", "Y", "N", "Y"]
    assert collection.tow_count == 3


def test_explicit_tow_flags_override_derivation():
    collection = assemble_features(_records(2), _geometries(2), tow_flags=[False, True])
    assert [f.tow_occurred for f in collection] == [False, True]


def test_mismatched_lengths_raise():
    """5 records but 4 geometries -> AlignmentError, nothing returned."""
    result = None
    with pytest.raises(AlignmentError) as exc_info:
        result = assemble_features(_records(5), _geometries(4))
    assert result is None
    assert exc_info.value.n_records == 5
    assert exc_info.value.n_other == 4


@pytest.mark.parametrize("n_records,n_geometries", [(0, 0), (3, 3), (3, 2), (2, 3), (0, 1)])
def test_alignment_error_iff_lengths_differ(n_records, n_geometries):
    if n_records == n_geometries:
        assert len(assemble_features(_records(n_records), _geometries(n_geometries))) == n_records
    else:
        with pytest.raises(AlignmentError):
            assemble_features(_records(n_records), _geometries(n_geometries))


def test_mismatched_tow_flags_raise():
    with pytest.raises(AlignmentError, match="tow flags"):
        assemble_features(_records(3), _geometries(3), tow_flags=[True])


def test_inputs_not_mutated_and_output_frozen():
    records = _records(3)
    geometries = _geometries(3)
    records_before = list(records)
    geometries_before = list(geometries)

    collection = assemble_features(records, geometries)

    assert records == records_before
    assert geometries == geometries_before
    assert isinstance(collection.features, tuple)
    with pytest.raises(FrozenInstanceError):
        collection.crs = "EPSG:3857"
    with pytest.raises(FrozenInstanceError):
        collection[0].tow_occurred = False


def test_geodataframe_handoff():
    collection = assemble_features(_records(3), _geometries(3), crs="EPSG:4326")
    gdf = collection.to_geodataframe()

    assert isinstance(gdf, gpd.GeoDataFrame)
    assert gdf.crs.to_epsg() == 4326
    assert len(gdf) == 3
    assert list(gdf["row_index"]) == [0, 1, 2]
    assert list(gdf["tow_label"]) == ["Y", "N", "Y"]
    assert list(gdf["Cruise"]) == ["HB2301"] * 3
    assert gdf.geometry.iloc[1].x == pytest.approx(-69.5)
    assert gdf.geometry.iloc[1].y == pytest.approx(41.0)


def test_empty_collection_frames():
    collection = assemble_features([], [])
    assert len(collection) == 0
    assert collection.tow_count == 0
    assert len(collection.to_geodataframe()) == 0
    assert list(collection.to_dataframe().columns) == RECORD_COLUMNS + DERIVED_COLUMNS
    gdf = collection.to_geodataframe()
    for column in ["tow_occurred", "tow_label", "longitude", "latitude", "station"]:
        assert column in gdf.columns


def test_attribute_names_do_not_overwrite_feature_columns():
    record = RawStationRecord(
        row_index=0,
        station="S0",
        latitude="40°00.0'",
        longitude="70°30.0'",
        cast_type="CTD",
        filter_status="Y",
        attributes=(("station", "legacy-17"), ("longitude", "70W"), ("Depth", "55")),
    )
    collection = assemble_features([record], [build_point(-70.5, 40.0)])
    frame = collection.to_dataframe()

    assert frame.loc[0, "station"] == "S0"
    assert frame.loc[0, "longitude"] == pytest.approx(-70.5)
    assert frame.loc[0, "attr_station"] == "legacy-17"
    assert frame.loc[0, "attr_longitude"] == "70W"
    assert frame.loc[0, "Depth"] == "55"
