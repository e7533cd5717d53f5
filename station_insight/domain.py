"""Domain vocabulary and strict schemas for station observations and derived metrics.

This module defines the stable contract between the ingestion layer, the pure
metric computations and any presentation layer: enums, input records
(observations, hourly and daily history, crop profiles) and the Pydantic models
for every derived result. No computation logic lives here.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class _FrozenModel(BaseModel):
    """Immutable input record; replaced wholesale, never mutated."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class PressureTrend(str, Enum):
    """Barometric tendency over the trailing sample window."""
    RISING = "rising"
    STEADY = "steady"
    FALLING = "falling"


class MoonPhaseName(str, Enum):
    """Eight named phases of the synodic cycle."""
    NEW_MOON = "new_moon"
    WAXING_CRESCENT = "waxing_crescent"
    FIRST_QUARTER = "first_quarter"
    WAXING_GIBBOUS = "waxing_gibbous"
    FULL_MOON = "full_moon"
    WANING_GIBBOUS = "waning_gibbous"
    LAST_QUARTER = "last_quarter"
    WANING_CRESCENT = "waning_crescent"


class PeriodKind(str, Enum):
    """Reporting period selectors, rolling or calendar-anchored."""
    ROLLING_HOURS = "rolling_hours"
    ROLLING_DAYS = "rolling_days"
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"


class MetricKind(str, Enum):
    """Metrics that can be rolled up over a period."""
    TEMPERATURE = "temperature"
    DEW_POINT = "dew_point"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    PRECIPITATION = "precipitation"
    WIND = "wind"


class Aggregation(str, Enum):
    """How period statistics are derived for a metric."""
    EXTREMES = "extremes"
    TOTAL = "total"


class Granularity(str, Enum):
    """Resolution of a rolled-up series."""
    HOURLY = "hourly"
    DAILY = "daily"


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


class Observation(_FrozenModel):
    """Current station snapshot (metric units: C, %, hPa, km/h, mm)."""
    observed_at: dt.datetime
    temp: float | None = None
    feels_like: float | None = None
    dew_point: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    pressure_trend: PressureTrend = PressureTrend.STEADY
    wind_speed: float | None = None
    wind_gust: float | None = None
    wind_dir: float | None = None
    precip_rate: float | None = None
    precip_total: float | None = None
    solar_radiation: float | None = None
    uv_index: float | None = None


class HourlyPoint(_FrozenModel):
    """One row of the rolling hourly history."""
    epoch: int
    temp: float | None = None
    feels_like: float | None = None
    dew_point: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    wind_speed: float | None = None
    wind_gust: float | None = None
    wind_dir: float | None = None
    precip_rate: float | None = None
    precip_accum: float | None = None  # since local midnight
    solar_radiation: float | None = None
    uv_index: float | None = None


class DailyPoint(_FrozenModel):
    """One calendar day of long-term history, keyed by `date`."""
    date: dt.date
    epoch: int
    temp_high: float | None = None
    temp_low: float | None = None
    temp_avg: float | None = None
    dew_point_avg: float | None = None
    humidity_high: float | None = None
    humidity_low: float | None = None
    humidity_avg: float | None = None
    pressure_max: float | None = None
    pressure_min: float | None = None
    pressure_avg: float | None = None
    precip_total: float | None = None
    wind_speed_max: float | None = None
    wind_gust_max: float | None = None


class CropProfile(_FrozenModel):
    """Static GDD requirements for a crop."""
    name: str
    category: str
    gdd_min: float
    gdd_max: float
    base_temp: float


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


class SunTimes(_StrictBaseModel):
    """Civil dawn, sunrise, sunset and civil dusk for one date and location.

    A pair is None when the sun never crosses the matching zenith that day.
    """
    date: dt.date
    dawn: dt.datetime | None = None
    sunrise: dt.datetime | None = None
    sunset: dt.datetime | None = None
    dusk: dt.datetime | None = None

    @property
    def has_daylight(self) -> bool:
        """True when both sunrise and sunset are defined."""
        return self.sunrise is not None and self.sunset is not None

    def epochs(self) -> Dict[str, int | None]:
        """Return the four instants as epoch seconds."""
        return {
            name: int(value.timestamp()) if value is not None else None
            for name, value in (
                ("dawn", self.dawn),
                ("sunrise", self.sunrise),
                ("sunset", self.sunset),
                ("dusk", self.dusk),
            )
        }


class MoonPhase(_StrictBaseModel):
    """Synodic position of the moon at an instant."""
    key: MoonPhaseName
    name: str
    fraction: float = Field(ge=0.0, lt=1.0)
    age_days: float
    illumination: float = Field(ge=0.0, le=1.0)
    days_to_full: float
    days_to_new: float


class WindowStats(_StrictBaseModel):
    """Min/max/avg/sum over the qualifying values of a window."""
    min: float
    max: float
    avg: float
    sum: float
    count: int


class ConditionLabels(_StrictBaseModel):
    """Narrative labels for the current observation."""
    temperature: str
    humidity: str
    precipitation: str
    pressure: str


class GddDay(_StrictBaseModel):
    """Per-day growth degree-day gain and running total."""
    date: dt.date
    epoch: int
    temp_avg: float | None = None
    daily_gain: float
    cumulative_gain: float


class GddSummary(_StrictBaseModel):
    """Season statistics over a GDD series."""
    total: float = 0.0
    avg_gain_per_day: float = 0.0
    active_days: int = 0
    day_count: int = 0
    maturity_date: dt.date | None = None
    progress_percent: float | None = None


class GddReport(_StrictBaseModel):
    """GDD series for one year plus its summary."""
    year: int
    base_threshold: float
    crop: CropProfile | None = None
    days: List[GddDay] = Field(default_factory=list)
    summary: GddSummary = Field(default_factory=GddSummary)


class AmplitudeDay(_StrictBaseModel):
    """Daily thermal amplitude and its stress flag."""
    date: dt.date
    epoch: int
    temp_high: float
    temp_low: float
    amplitude: float
    is_critical: bool


class AmplitudeReport(_StrictBaseModel):
    """Thermal-stress analysis over one calendar year."""
    year: int
    threshold: float
    days: List[AmplitudeDay] = Field(default_factory=list)
    critical_days: List[AmplitudeDay] = Field(default_factory=list)  # most recent first
    total_critical_days: int = 0
    max_amplitude: float = 0.0
    longest_streak: int = 0
    streak_days: List[AmplitudeDay] = Field(default_factory=list)
    streak_dates: List[dt.date] = Field(default_factory=list)

    @model_validator(mode="after")
    def _derive_streak_dates(self) -> "AmplitudeReport":
        """Keep `streak_dates` in step with the retained longest run."""
        self.streak_dates = [d.date for d in self.streak_days]
        return self


class Period(_FrozenModel):
    """Reporting period; `amount` only matters for rolling kinds."""
    kind: PeriodKind
    amount: int = Field(default=1, ge=0)


class RollupPoint(_StrictBaseModel):
    """A chart row with generic field names, hourly or daily."""
    epoch: int
    date: dt.date | None = None
    temp: float | None = None
    dew_point: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    precip: float | None = None
    precip_accum: float | None = None
    wind: float | None = None
    gust: float | None = None
    # daily extremes, None on hourly rows
    temp_high: float | None = None
    temp_low: float | None = None
    humidity_high: float | None = None
    humidity_low: float | None = None
    pressure_max: float | None = None
    pressure_min: float | None = None
    wind_speed_max: float | None = None
    wind_gust_max: float | None = None


class RollupSeries(_StrictBaseModel):
    """Series selected for a period at the appropriate granularity."""
    period: Period
    start: int
    end: int
    granularity: Granularity
    points: List[RollupPoint] = Field(default_factory=list)


class MetricStats(_StrictBaseModel):
    """Period statistics for one metric."""
    metric: MetricKind
    granularity: Granularity
    max: float
    min: float
    total: float | None = None
    count: int


class MonthlyPrecipitation(_StrictBaseModel):
    """Rain total and rain-day count for one month."""
    month: int = Field(ge=1, le=12)
    total: float = 0.0
    rain_days: int = 0


class PrecipitationReport(_StrictBaseModel):
    """Month-by-month precipitation for one year."""
    year: int
    months: List[MonthlyPrecipitation] = Field(default_factory=list)
    total: float = 0.0
    total_rain_days: int = 0
    wettest_month: MonthlyPrecipitation | None = None


class DashboardPayload(_StrictBaseModel):
    """Everything the dashboard renders for the current instant."""
    station_id: str
    generated_at: dt.datetime
    observation: Observation
    pressure_delta: float | None = None
    labels: ConditionLabels
    wind_cardinal: str | None = None
    sun: SunTimes
    is_night: bool
    moon: MoonPhase
    stats_24h: Dict[MetricKind, WindowStats | None] = Field(default_factory=dict)
