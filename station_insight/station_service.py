"""Fetch a station snapshot and assemble the dashboard view from it."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, List

from station_insight import config
from station_insight.comfort import condition_labels, wind_cardinal
from station_insight.data_sources import StationDataSource
from station_insight.domain import (
    DailyPoint,
    DashboardPayload,
    HourlyPoint,
    MetricKind,
    Observation,
    WindowStats,
)
from station_insight.ephemeris import SunTimesMemo, compute_sun_times, is_night
from station_insight.history import merge_daily_history, normalize_hourly
from station_insight.lunar import moon_phase
from station_insight.pressure import classify_pressure_trend, pressure_delta
from station_insight.rollup import METRIC_FIELDS
from station_insight.statistics import aggregate
from station_insight.time_windows import SECONDS_PER_DAY, as_aware, to_epoch
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="station_insight/station_service")


@dataclass
class StationSnapshot:
    """Current observation plus hourly and daily history, as fetched together."""
    current: Observation
    hourly: List[HourlyPoint] = field(default_factory=list)
    daily: List[DailyPoint] = field(default_factory=list)
    fetched_at: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))


def fetch_snapshot(
    data_source: StationDataSource,
    *,
    now: dt.datetime | None = None,
    settings: config.Settings | None = None,
) -> StationSnapshot:
    """Fetch everything the dashboard needs and stamp the current pressure trend.

    Source errors (StationOfflineError, requests exceptions) propagate.
    """
    settings = settings or config.settings
    now = as_aware(now or dt.datetime.now(settings.tz), settings.tz)

    current = data_source.fetch_current()
    hourly = normalize_hourly(data_source.fetch_hourly(now=now))
    daily = merge_daily_history([data_source.fetch_daily(now=now)])

    trend = classify_pressure_trend(
        hourly,
        window=settings.pressure_trend_samples,
        deadband=settings.pressure_trend_deadband_hpa,
    )
    current = current.model_copy(update={"pressure_trend": trend})

    logger.info(
        "Fetched station snapshot",
        extra={
            "station_id": settings.station_id,
            "hourly_rows": len(hourly),
            "daily_rows": len(daily),
            "pressure_trend": trend.value,
        },
    )
    return StationSnapshot(current=current, hourly=hourly, daily=daily, fetched_at=now)


def rolling_24h_stats(
    hourly: List[HourlyPoint],
    *,
    now: dt.datetime | int | float,
) -> Dict[MetricKind, WindowStats | None]:
    """Min/max/avg/sum of each metric's hourly field over the last 24 hours."""
    end = to_epoch(as_aware(now))
    start = end - SECONDS_PER_DAY
    return {
        metric: aggregate(hourly, fields.hourly_field, start=start, end=end)
        for metric, fields in METRIC_FIELDS.items()
    }


def build_dashboard(
    snapshot: StationSnapshot,
    *,
    now: dt.datetime | int | float,
    settings: config.Settings | None = None,
    sun_memo: SunTimesMemo | None = None,
) -> DashboardPayload:
    """Assemble labels, astronomy and 24h statistics for the current instant."""
    settings = settings or config.settings
    local_now = as_aware(now, settings.tz)
    observation = snapshot.current

    if sun_memo is not None:
        sun = sun_memo.get(
            local_now.date(), latitude=settings.latitude, longitude=settings.longitude, tz=settings.tz
        )
    else:
        sun = compute_sun_times(
            local_now.date(), latitude=settings.latitude, longitude=settings.longitude, tz=settings.tz
        )

    return DashboardPayload(
        station_id=settings.station_id,
        generated_at=local_now,
        observation=observation,
        pressure_delta=pressure_delta(snapshot.hourly, window=settings.pressure_trend_samples),
        labels=condition_labels(observation),
        wind_cardinal=wind_cardinal(observation.wind_dir),
        sun=sun,
        is_night=is_night(local_now, sun),
        moon=moon_phase(local_now, reference_new_moon=settings.reference_new_moon),
        stats_24h=rolling_24h_stats(snapshot.hourly, now=local_now),
    )
