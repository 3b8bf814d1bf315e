"""
Survey Station Table Client

Loads the station log (one row per sampling event) from a local CSV file or
an http(s) URL and reduces it to the rows that become map features:
- Cast type must be one of the configured cast types (e.g. CTD)
- Filter status must be non-empty (the sample was actually filtered)

Coordinates are kept exactly as published (degrees-minutes text); parsing
happens downstream in oceanmap.geo.coordinates.
"""

import math
import time
from dataclasses import dataclass
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd
import requests
from loguru import logger

from ..config import StationMapConfig
from ..exceptions import IngestionError


@dataclass(frozen=True)
class RawStationRecord:
    """
    One sampling event as read from the station table.

    row_index is the 0-based data row in the source table (before cast
    filtering); it is carried through every later stage so errors point
    back at the source row. attributes holds the remaining columns as
    (name, value) pairs so the record stays immutable and hashable.
    """
    row_index: int
    station: str
    latitude: str
    longitude: str
    cast_type: str
    filter_status: str
    tow_start_time: Optional[str] = None
    attributes: Tuple[Tuple[str, Any], ...] = ()

    @property
    def attribute_dict(self) -> Dict[str, Any]:
        return dict(self.attributes)


def _clean(value: Any) -> Optional[str]:
    """Cell value as stripped text, or None for NaN/blank cells."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    text = str(value).strip()
    return text or None


class StationTableClient:
    """
    Client for the survey station table.

    Remote tables are fetched with a plain requests session and a retry
    loop (timeouts, connection errors, 429 and 5xx responses).
    """

    def __init__(
        self,
        config: Optional[StationMapConfig] = None,
        retry_attempts: int = 3,
        retry_delay: float = 5.0,
    ):
        """
        Initialize the station table client.

        Args:
            config: Pipeline configuration (column names, cast types, source)
            retry_attempts: Number of attempts for remote downloads
            retry_delay: Delay between retries in seconds
        """
        self.config = config or StationMapConfig()
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.session = requests.Session()

    @property
    def required_columns(self) -> List[str]:
        c = self.config
        return [
            c.latitude_column,
            c.longitude_column,
            c.cast_type_column,
            c.filter_status_column,
        ]

    def _retry_after(self, response: requests.Response) -> float:
        """Seconds from a numeric Retry-After header, else retry_delay (HTTP-dates included)."""
        raw = response.headers.get("Retry-After")
        if raw is None:
            return self.retry_delay
        try:
            seconds = float(str(raw).strip())
        except ValueError:
            seconds = math.nan
        if not math.isfinite(seconds) or seconds < 0:
            logger.debug(f"Unusable Retry-After {raw!r}; using {self.retry_delay}s")
            return self.retry_delay
        return seconds

    def _request_with_retry(self, url: str) -> requests.Response:
        """GET with automatic retry on transient failures."""
        last_exception = None

        for attempt in range(self.retry_attempts):
            try:
                if self.config.rate_limit_delay > 0:
                    time.sleep(self.config.rate_limit_delay)

                response = self.session.get(url, timeout=self.config.request_timeout)

                if response.status_code == 429:
                    wait_time = self._retry_after(response)
                    logger.warning(f"Rate limited. Waiting {wait_time}s...")
                    time.sleep(wait_time)
                    continue

                if response.status_code >= 500:
                    logger.warning(
                        f"Server error {response.status_code}. "
                        f"Attempt {attempt + 1}/{self.retry_attempts}"
                    )
                    time.sleep(self.retry_delay)
                    continue

                response.raise_for_status()
                return response

            except requests.exceptions.Timeout as e:
                last_exception = e
                logger.warning(f"Timeout. Attempt {attempt + 1}/{self.retry_attempts}")
                time.sleep(self.retry_delay)

            except requests.exceptions.ConnectionError as e:
                last_exception = e
                logger.warning(f"Connection error. Attempt {attempt + 1}/{self.retry_attempts}")
                time.sleep(self.retry_delay)

        raise requests.RequestException(
            f"All {self.retry_attempts} attempts failed for {url}"
        ) from last_exception

    # =========================================================================
    # Loading
    # =========================================================================

    def load_table(self, source: Optional[Union[str, Path]] = None) -> pd.DataFrame:
        """
        Load the raw station table.

        Args:
            source: CSV path or http(s) URL (defaults to config.source)

        Returns:
            DataFrame with every column read as text
        """
        source = source or self.config.source
        if source is None:
            raise IngestionError("No station table source given (set OCEANMAP_STATION_SOURCE)")

        source = str(source)
        if source.startswith(("http://", "https://")):
            logger.info(f"Downloading station table from {source}...")
            response = self._request_with_retry(source)
            content = response.content.decode("utf-8-sig")
            frame = pd.read_csv(StringIO(content), dtype=str, keep_default_na=True)
        else:
            logger.info(f"Reading station table from {source}...")
            frame = pd.read_csv(source, dtype=str, encoding="utf-8-sig")

        logger.info(f"Loaded {len(frame)} station rows")
        return frame

    def filter_casts(self, frame: pd.DataFrame) -> pd.DataFrame:
        """
        Keep configured cast types with a non-empty filter status.

        Raises:
            IngestionError: If a required column is missing
        """
        missing = [c for c in self.required_columns if c not in frame.columns]
        if missing:
            raise IngestionError(f"Station table is missing columns: {missing}")

        cast = frame[self.config.cast_type_column].astype("string").str.strip()
        status = frame[self.config.filter_status_column].astype("string").str.strip()

        is_cast = cast.isin(self.config.cast_types).fillna(False)
        is_filtered = (status.notna() & (status != "")).fillna(False)

        # source index is kept so records point back at their original row
        kept = frame[is_cast & is_filtered]

        logger.info(
            f"Kept {len(kept)} of {len(frame)} rows "
            f"(cast types {list(self.config.cast_types)}, non-empty filter status)"
        )
        excluded_cast = int((~is_cast).sum())
        excluded_status = int((is_cast & ~is_filtered).sum())
        if excluded_cast:
            logger.debug(f"Excluded {excluded_cast} rows with other cast types")
        if excluded_status:
            logger.warning(f"Excluded {excluded_status} casts with empty filter status")

        return kept

    def to_records(self, frame: pd.DataFrame) -> List[RawStationRecord]:
        """Convert a filtered table to RawStationRecords, preserving row order and source index."""
        c = self.config
        core = {
            c.station_column,
            c.latitude_column,
            c.longitude_column,
            c.cast_type_column,
            c.filter_status_column,
            c.tow_start_column,
        }

        records = []
        for index, row in zip(frame.index, frame.to_dict(orient="records")):
            records.append(RawStationRecord(
                row_index=int(index),
                station=_clean(row.get(c.station_column)) or str(index),
                latitude=_clean(row.get(c.latitude_column)) or "",
                longitude=_clean(row.get(c.longitude_column)) or "",
                cast_type=_clean(row.get(c.cast_type_column)) or "",
                filter_status=_clean(row.get(c.filter_status_column)) or "",
                tow_start_time=_clean(row.get(c.tow_start_column)),
                attributes=tuple((k, v) for k, v in row.items() if k not in core),
            ))
        return records

    def fetch_records(self, source: Optional[Union[str, Path]] = None) -> List[RawStationRecord]:
        """Load, filter and convert the station table in one call."""
        frame = self.filter_casts(self.load_table(source))
        records = self.to_records(frame)

        towed = sum(1 for r in records if r.tow_start_time is not None)
        logger.info(f"Station records: {len(records)} ({towed} with a net tow)")
        return records

    # =========================================================================
    # DataFrame Conversion
    # =========================================================================

    def records_to_dataframe(self, records: List[RawStationRecord]) -> pd.DataFrame:
        """Convert RawStationRecords back to a flat DataFrame."""
        rows = []
        for r in records:
            rows.append({
                "row_index": r.row_index,
                "station": r.station,
                "latitude": r.latitude,
                "longitude": r.longitude,
                "cast_type": r.cast_type,
                "filter_status": r.filter_status,
                "tow_start_time": r.tow_start_time,
                **r.attribute_dict,
            })
        return pd.DataFrame(rows)
