"""Data source factories for plugging different station backends."""

from .base import CallableStationDataSource, StationDataSource
from .factory import build_data_source
from .pws_client import (
    StationOfflineError,
    StationPayloadError,
    fetch_current,
    fetch_daily,
    fetch_hourly,
)

__all__ = [
    "build_data_source",
    "StationDataSource",
    "CallableStationDataSource",
    "StationOfflineError",
    "StationPayloadError",
    "fetch_current",
    "fetch_daily",
    "fetch_hourly",
]
