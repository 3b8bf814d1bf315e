"""
Tests for the build_station_features script.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scripts.build_station_features import main

STATION_CSV = """Station,Cast_Type,Latitude,Longitude,Filtered,Tow_start_time
A1,CTD,40°15.5',70°30.0',Y,2023-05-01 10:00
A2,CTD,41°00.0',69°45.6',Y,
A3,Bongo,41°30.0',69°00.0',Y,2023-05-01 18:00
"""


@pytest.fixture
def station_csv(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "stations.csv"
    path.write_text(STATION_CSV, encoding="utf-8")
    return path


def test_writes_csv(station_csv, tmp_path):
    output = tmp_path / "out" / "features.csv"
    status = main(["--source", str(station_csv), "--output", str(output)])

    assert status == 0
    frame = pd.read_csv(output)
    assert list(frame["station"]) == ["A1", "A2"]
    assert list(frame["tow_label"]) == ["Y", "N"]
    assert frame.loc[0, "longitude"] == pytest.approx(-70.5)


def test_extra_cast_type(station_csv, tmp_path):
    output = tmp_path / "features.csv"
    status = main([
        "--source", str(station_csv),
        "--output", str(output),
        "--cast-type", "CTD",
        "--cast-type", "Bongo",
        "--separator", "auto",
    ])
    assert status == 0
    assert len(pd.read_csv(output)) == 3


def test_bad_coordinates_exit_nonzero(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "bad.csv"
    path.write_text(
        "Station,Cast_Type,Latitude,Longitude,Filtered,Tow_start_time\n"
        "A1,CTD,40°15.5',70 30.0',Y,\n",
        encoding="utf-8",
    )
    output = tmp_path / "features.csv"
    assert main(["--source", str(path), "--output", str(output)]) == 1
    assert not output.exists()


def test_no_matching_casts_writes_header_only_csv(station_csv, tmp_path):
    output = tmp_path / "features.csv"
    status = main([
        "--source", str(station_csv),
        "--output", str(output),
        "--cast-type", "XBT",
    ])

    assert status == 0
    frame = pd.read_csv(output)
    assert len(frame) == 0
    for column in ["station", "longitude", "latitude", "tow_occurred", "tow_label"]:
        assert column in frame.columns
