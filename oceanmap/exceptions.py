"""
Error taxonomy for the station feature pipeline.

Every error is terminal for the batch being processed: there is no retry
and no partial result. Errors carry the row index and the offending value
so the bad input record can be located in the source table.
"""

from typing import Any, Optional


class OceanMapError(ValueError):
    """Base class for all oceanmap errors."""


class ConfigError(OceanMapError):
    """Invalid configuration value."""


class IngestionError(OceanMapError):
    """The station table is missing columns the pipeline needs."""


class ParseError(OceanMapError):
    """A coordinate string could not be converted to decimal degrees."""

    def __init__(self, row_index: Optional[int], value: Any, reason: str):
        self.row_index = row_index
        self.value = value
        self.reason = reason
        where = f"row {row_index}" if row_index is not None else "coordinate"
        super().__init__(f"{where}: cannot parse {value!r} ({reason})")


class GeometryError(OceanMapError):
    """A decimal coordinate pair is non-finite or out of range."""

    def __init__(
        self,
        row_index: Optional[int],
        longitude: float,
        latitude: float,
        reason: str,
    ):
        self.row_index = row_index
        self.longitude = longitude
        self.latitude = latitude
        self.reason = reason
        where = f"row {row_index}" if row_index is not None else "point"
        super().__init__(
            f"{where}: invalid point (lon={longitude!r}, lat={latitude!r}): {reason}"
        )


class AlignmentError(OceanMapError):
    """Records and geometries (or tow flags) are not row-aligned."""

    def __init__(self, n_records: int, n_other: int, what: str = "geometries"):
        self.n_records = n_records
        self.n_other = n_other
        self.what = what
        super().__init__(
            f"{n_records} records but {n_other} {what}; sequences must be row-aligned"
        )


class ZoneError(OceanMapError):
    """Requested zone label or label column is not present."""
