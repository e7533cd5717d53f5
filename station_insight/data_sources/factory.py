"""Factory helpers for choosing a station data source at startup."""

from __future__ import annotations

from functools import partial

from station_insight import config
from station_insight.data_sources import pws_client
from station_insight.data_sources.base import CallableStationDataSource, StationDataSource
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "pws"


def build_data_source(settings: config.Settings | None = None) -> StationDataSource:
    """Instantiate the configured station data source."""
    settings = settings or config.settings
    source = (settings.data_source or DEFAULT_SOURCE_NAME).lower()

    if source == "pws":
        if not settings.api_key:
            logger.warning("No PWS api_key configured; requests will be rejected")
        logger.info(
            "Using Weather.com PWS data source",
            extra={"station_id": settings.station_id, "base_url": settings.api_base_url},
        )
        return CallableStationDataSource(
            current=partial(pws_client.fetch_current, settings=settings),
            hourly=partial(pws_client.fetch_hourly, settings=settings),
            daily=partial(pws_client.fetch_daily, settings=settings),
        )

    raise ValueError(f"Unknown data source '{source}'")
