"""
Configuration for the station feature pipeline.

Defaults describe the survey station table as it is published: degree
sign separator, apostrophe minutes marker, stations in the northern and
western hemispheres, and WGS84 (EPSG:4326) as the output datum.

Every field can be overridden from the environment (OCEANMAP_* variables),
which is populated from config/.env.local, config/.env and .env if present.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from dotenv import load_dotenv
from loguru import logger

from .exceptions import ConfigError

HEMISPHERE_SIGNS = {"N": 1, "S": -1, "E": 1, "W": -1}


@dataclass(frozen=True)
class StationMapConfig:
    """
    Settings for ingestion, coordinate parsing and feature assembly.

    The hemisphere fields make the sign convention explicit: the table
    stores unsigned magnitudes and the true sign comes from here.
    """

    # Station table location (local CSV path or http(s) URL)
    source: Optional[str] = None

    # Column names in the station table
    station_column: str = "Station"
    latitude_column: str = "Latitude"
    longitude_column: str = "Longitude"
    cast_type_column: str = "Cast_Type"
    filter_status_column: str = "Filtered"
    tow_start_column: str = "Tow_start_time"

    # Rows kept by ingestion
    cast_types: Tuple[str, ...] = ("CTD",)

    # Degrees-minutes format; separator=None means detect from the first row
    separator: Optional[str] = "°"
    minutes_marker: str = "'"

    # Sign convention for unsigned magnitudes
    latitude_hemisphere: str = "N"
    longitude_hemisphere: str = "W"

    # Datum attached to every point
    crs: str = "EPSG:4326"

    # HTTP download behaviour
    request_timeout: float = 60.0
    rate_limit_delay: float = 0.0

    def __post_init__(self):
        if self.latitude_hemisphere not in ("N", "S"):
            raise ConfigError(
                f"latitude_hemisphere must be 'N' or 'S', got {self.latitude_hemisphere!r}"
            )
        if self.longitude_hemisphere not in ("E", "W"):
            raise ConfigError(
                f"longitude_hemisphere must be 'E' or 'W', got {self.longitude_hemisphere!r}"
            )
        if self.separator is not None and len(self.separator) != 1:
            raise ConfigError(
                f"separator must be a single character, got {self.separator!r}"
            )
        if not self.cast_types:
            raise ConfigError("cast_types must name at least one cast type")

    @property
    def latitude_sign(self) -> int:
        return HEMISPHERE_SIGNS[self.latitude_hemisphere]

    @property
    def longitude_sign(self) -> int:
        return HEMISPHERE_SIGNS[self.longitude_hemisphere]

    def with_overrides(self, **changes) -> "StationMapConfig":
        """Return a copy with the non-None keyword values applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)


def _env(name: str, strip_quotes: bool = True) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    raw = raw.strip()
    return raw.strip("'\"") if strip_quotes else raw


def _env_float(name: str) -> Optional[float]:
    raw = _env(name)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid float for {name}: {raw!r}") from e


def load_config(env_file: Optional[str] = None) -> StationMapConfig:
    """
    Build a StationMapConfig from defaults and OCEANMAP_* environment variables.

    Args:
        env_file: Extra .env file to load before the standard locations

    Returns:
        Validated StationMapConfig

    Raises:
        ConfigError: If a variable holds an invalid value
    """
    if env_file:
        load_dotenv(env_file)
    load_dotenv("config/.env.local")
    load_dotenv("config/.env")
    load_dotenv()

    cast_types = _env("OCEANMAP_CAST_TYPES")
    separator = _env("OCEANMAP_SEPARATOR")
    detect_separator = separator is not None and separator.lower() == "auto"
    if detect_separator:
        separator = None

    overrides = dict(
        source=_env("OCEANMAP_STATION_SOURCE"),
        station_column=_env("OCEANMAP_STATION_COLUMN"),
        latitude_column=_env("OCEANMAP_LATITUDE_COLUMN"),
        longitude_column=_env("OCEANMAP_LONGITUDE_COLUMN"),
        cast_type_column=_env("OCEANMAP_CAST_TYPE_COLUMN"),
        filter_status_column=_env("OCEANMAP_FILTER_STATUS_COLUMN"),
        tow_start_column=_env("OCEANMAP_TOW_START_COLUMN"),
        cast_types=(
            tuple(c.strip() for c in cast_types.split(",") if c.strip())
            if cast_types else None
        ),
        separator=separator,
        minutes_marker=_env("OCEANMAP_MINUTES_MARKER", strip_quotes=False),
        latitude_hemisphere=(_env("OCEANMAP_LATITUDE_HEMISPHERE") or "").upper() or None,
        longitude_hemisphere=(_env("OCEANMAP_LONGITUDE_HEMISPHERE") or "").upper() or None,
        crs=_env("OCEANMAP_CRS"),
        request_timeout=_env_float("OCEANMAP_REQUEST_TIMEOUT"),
        rate_limit_delay=_env_float("OCEANMAP_RATE_LIMIT_DELAY"),
    )

    config = StationMapConfig().with_overrides(**overrides)
    if detect_separator:
        config = replace(config, separator=None)

    logger.debug(f"Loaded config: {config}")
    return config
