"""Period rollups: pick hourly or daily resolution and compute chart statistics.

Short periods (up to 2.5 days by default) are served from the hourly series
with native fields. Longer periods switch to daily aggregates renamed to the
same generic chart fields, so a caller can chart and summarise either series
without knowing which one it got.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, List, Sequence

from station_insight.domain import (
    Aggregation,
    DailyPoint,
    Granularity,
    HourlyPoint,
    MetricKind,
    MetricStats,
    Period,
    RollupPoint,
    RollupSeries,
)
from station_insight.history import sorted_by_epoch
from station_insight.statistics import get_field, is_number, numeric_values
from station_insight.time_windows import period_bounds

DEFAULT_DAILY_THRESHOLD_SECONDS = 216_000  # 2.5 days


@dataclass(frozen=True)
class MetricFieldMap:
    """Where a metric lives in each representation."""
    chart_field: str  # generic RollupPoint field
    hourly_field: str
    daily_field: str
    daily_max_field: str
    daily_min_field: str
    aggregation: Aggregation = Aggregation.EXTREMES


METRIC_FIELDS: Dict[MetricKind, MetricFieldMap] = {
    MetricKind.TEMPERATURE: MetricFieldMap("temp", "temp", "temp_avg", "temp_high", "temp_low"),
    MetricKind.DEW_POINT: MetricFieldMap("dew_point", "dew_point", "dew_point_avg", "dew_point", "dew_point"),
    MetricKind.HUMIDITY: MetricFieldMap("humidity", "humidity", "humidity_avg", "humidity_high", "humidity_low"),
    MetricKind.PRESSURE: MetricFieldMap("pressure", "pressure", "pressure_avg", "pressure_max", "pressure_min"),
    MetricKind.WIND: MetricFieldMap("wind", "wind_speed", "wind_speed_max", "wind_gust_max", "wind_speed_max"),
    MetricKind.PRECIPITATION: MetricFieldMap(
        "precip", "precip_rate", "precip_total", "precip", "precip", Aggregation.TOTAL
    ),
}

# RollupPoint field -> source field
_HOURLY_ROW_FIELDS = {
    "temp": "temp",
    "dew_point": "dew_point",
    "humidity": "humidity",
    "pressure": "pressure",
    "precip": "precip_rate",
    "precip_accum": "precip_accum",
    "wind": "wind_speed",
    "gust": "wind_gust",
}

_DAILY_ROW_FIELDS = {
    "temp": "temp_avg",
    "dew_point": "dew_point_avg",
    "humidity": "humidity_avg",
    "pressure": "pressure_avg",
    "precip": "precip_total",
    "wind": "wind_speed_max",
    "gust": "wind_gust_max",
    "temp_high": "temp_high",
    "temp_low": "temp_low",
    "humidity_high": "humidity_high",
    "humidity_low": "humidity_low",
    "pressure_max": "pressure_max",
    "pressure_min": "pressure_min",
    "wind_speed_max": "wind_speed_max",
    "wind_gust_max": "wind_gust_max",
}


def _hourly_rows(hourly: Sequence[HourlyPoint], start: int) -> List[RollupPoint]:
    rows = []
    for point in sorted_by_epoch(hourly):
        if point.epoch < start:
            continue
        values = {name: getattr(point, source) for name, source in _HOURLY_ROW_FIELDS.items()}
        rows.append(RollupPoint(epoch=point.epoch, **values))
    return rows


def _daily_rows(daily: Sequence[DailyPoint], start: int) -> List[RollupPoint]:
    rows = []
    accum = 0.0  # restarts at the first day of the window
    for point in sorted_by_epoch(daily):
        if point.epoch < start:
            continue
        values = {name: getattr(point, source) for name, source in _DAILY_ROW_FIELDS.items()}
        if is_number(point.precip_total):
            accum += point.precip_total
        rows.append(RollupPoint(epoch=point.epoch, date=point.date, precip_accum=accum, **values))
    return rows


def select_rollup(
    period: Period,
    hourly: Sequence[HourlyPoint],
    daily: Sequence[DailyPoint],
    *,
    now: dt.datetime | int | float,
    tz: dt.tzinfo | None = None,
    daily_threshold_seconds: int = DEFAULT_DAILY_THRESHOLD_SECONDS,
) -> RollupSeries:
    """Series for `period` ending at `now`, at hourly or daily resolution.

    Daily resolution is used when the window is strictly longer than
    `daily_threshold_seconds`. Inputs are not mutated.
    """
    start, end = period_bounds(period, now, tz=tz)
    if end - start > daily_threshold_seconds:
        granularity = Granularity.DAILY
        points = _daily_rows(daily, start)
    else:
        granularity = Granularity.HOURLY
        points = _hourly_rows(hourly, start)
    return RollupSeries(period=period, start=start, end=end, granularity=granularity, points=points)


def _with_fallback(field: str, chart_field: str):
    def pick(point):
        value = get_field(point, field)
        return value if is_number(value) else get_field(point, chart_field)
    return pick


def metric_stats(series: RollupSeries, metric: MetricKind) -> MetricStats | None:
    """Max/min (and total for precipitation) of one metric over a rolled-up series.

    Extremes metrics read the daily max/min columns, falling back to the chart
    field where a row has none (always the case for hourly rows). Total
    metrics read the chart field, counting a missing value as 0, with min
    pinned to 0. Returns None for an empty series.
    """
    if not series.points:
        return None
    fields = METRIC_FIELDS[metric]

    if fields.aggregation == Aggregation.TOTAL:
        values = [
            float(v) if is_number(v) else 0.0
            for v in (get_field(p, fields.chart_field) for p in series.points)
        ]
        return MetricStats(
            metric=metric,
            granularity=series.granularity,
            max=max(values),
            min=0.0,
            total=sum(values),
            count=len(values),
        )

    max_values = numeric_values(series.points, _with_fallback(fields.daily_max_field, fields.chart_field))
    min_values = numeric_values(series.points, _with_fallback(fields.daily_min_field, fields.chart_field))
    if not max_values or not min_values:
        return None
    return MetricStats(
        metric=metric,
        granularity=series.granularity,
        max=max(max_values),
        min=min(min_values),
        count=len(max_values),
    )
