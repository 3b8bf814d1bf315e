"""
Degrees-minutes coordinate parsing.

Station tables publish positions as text such as ``40°15.5'``: whole (or
decimal) degrees, one separator character, decimal minutes and an
apostrophe minutes marker. Values are unsigned; the hemisphere is a
property of the dataset and is applied from configuration:

    decimal = sign * (degrees + minutes / 60)

The separator is either configured or detected from the first row, and
every row is then checked against it so a format change part-way through
a table fails at the offending row instead of producing a wrong split.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger

from ..config import StationMapConfig
from ..exceptions import ParseError
from ..ingestion.stations import RawStationRecord

_NUMERIC = set("0123456789.")


@dataclass(frozen=True)
class ParsedCoordinate:
    """Decimal-degree position of one station."""
    latitude: float
    longitude: float


def detect_separator(text: str, row_index: Optional[int] = 0) -> str:
    """
    Find the degrees/minutes separator in a sample coordinate.

    The separator is the first character after the leading degree digits
    that is neither a digit nor a decimal point.

    Raises:
        ParseError: If the sample has no such boundary
    """
    if not isinstance(text, str):
        raise ParseError(row_index, text, "not a string")

    sample = text.strip()
    i = 0
    while i < len(sample) and sample[i] in _NUMERIC:
        i += 1

    if i == 0 or i >= len(sample):
        raise ParseError(row_index, text, "no degrees/minutes boundary found")

    return sample[i]


def parse_degrees_minutes(
    text: str,
    separator: str,
    marker: str = "'",
    row_index: Optional[int] = None,
) -> float:
    """
    Convert one ``D{separator}M'`` string to unsigned decimal degrees.

    Args:
        text: Coordinate text, e.g. "40°15.5'"
        separator: Character between degrees and minutes
        marker: Minutes marker to strip before conversion
        row_index: Source row, reported in errors

    Returns:
        degrees + minutes / 60

    Raises:
        ParseError: If the text does not split into exactly two numbers
            on the separator, or either number is signed
    """
    if not isinstance(text, str):
        raise ParseError(row_index, text, "not a string")

    cleaned = text.strip()
    if marker:
        cleaned = cleaned.replace(marker, "").strip()

    if separator not in cleaned:
        raise ParseError(row_index, text, f"separator {separator!r} not found")

    parts = cleaned.split(separator)
    if len(parts) != 2:
        raise ParseError(
            row_index, text, f"expected 2 segments on {separator!r}, got {len(parts)}"
        )

    try:
        degrees = float(parts[0].strip())
        minutes = float(parts[1].strip())
    except ValueError as e:
        raise ParseError(row_index, text, "segments are not numeric") from e

    if math.copysign(1.0, degrees) < 0 or math.copysign(1.0, minutes) < 0:
        raise ParseError(
            row_index, text, "signed value; hemisphere is set by configuration"
        )

    return degrees + minutes / 60.0


def parse_coordinate_batch(
    values: Sequence[str],
    separator: Optional[str] = None,
    marker: str = "'",
    sign: int = 1,
    row_indices: Optional[Sequence[int]] = None,
) -> List[float]:
    """
    Parse a column of coordinates that share one separator.

    Args:
        values: Coordinate strings in table order
        separator: Separator character; detected from values[0] when None
        marker: Minutes marker
        sign: +1 or -1, applied to every parsed magnitude
        row_indices: Source row per value (defaults to positions)

    Returns:
        Signed decimal degrees, one per input value
    """
    if sign not in (1, -1):
        raise ValueError(f"sign must be +1 or -1, got {sign!r}")
    if row_indices is None:
        row_indices = range(len(values))
    elif len(row_indices) != len(values):
        raise ValueError("row_indices must match values in length")

    if not values:
        return []

    if separator is None:
        separator = detect_separator(values[0], row_index=row_indices[0])
        logger.debug(f"Detected degrees/minutes separator {separator!r}")

    return [
        sign * parse_degrees_minutes(v, separator, marker, row_index=idx)
        for v, idx in zip(values, row_indices)
    ]


def parse_station_coordinates(
    records: Sequence[RawStationRecord],
    config: Optional[StationMapConfig] = None,
) -> List[ParsedCoordinate]:
    """
    Parse latitude and longitude of every station record.

    Hemisphere signs come from config (N/W by default, so latitude is
    positive and longitude negative).
    """
    config = config or StationMapConfig()
    indices = [r.row_index for r in records]

    latitudes = parse_coordinate_batch(
        [r.latitude for r in records],
        separator=config.separator,
        marker=config.minutes_marker,
        sign=config.latitude_sign,
        row_indices=indices,
    )
    longitudes = parse_coordinate_batch(
        [r.longitude for r in records],
        separator=config.separator,
        marker=config.minutes_marker,
        sign=config.longitude_sign,
        row_indices=indices,
    )

    return [ParsedCoordinate(latitude=lat, longitude=lon) for lat, lon in zip(latitudes, longitudes)]
