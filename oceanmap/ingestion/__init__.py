"""
Station table ingestion

Modules:
- stations: Survey station log (local CSV or URL), cast filtering, raw records
"""

from .stations import StationTableClient, RawStationRecord

__all__ = [
    "StationTableClient",
    "RawStationRecord",
]
