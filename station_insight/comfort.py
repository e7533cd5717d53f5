"""Narrative labels for temperature, humidity, precipitation and wind."""

from __future__ import annotations

from station_insight.domain import ConditionLabels, Observation
from station_insight.pressure import pressure_narrative
from station_insight.statistics import is_number

UNKNOWN = "Unavailable"

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def temperature_info(temp: float | None, dew_point: float | None, feels_like: float | None = None) -> str:
    """Describe the air mass from the dew-point spread and the apparent temperature.

    Rules are evaluated in order:
      spread <= 2 -> frost risk below 2 C, fog risk otherwise
      feels_like < temp - 2 -> wind chill
      feels_like > temp + 2 -> humid heat
      spread > 15 -> very dry air
      otherwise -> stable
    A missing feels_like is read as equal to temp.
    """
    if not is_number(temp) or not is_number(dew_point):
        return UNKNOWN
    spread = temp - dew_point
    feels = feels_like if is_number(feels_like) else temp

    if spread <= 2:
        if temp < 2:
            return "Frost / black ice risk"
        return "Saturated air (fog risk)"
    if feels < temp - 2:
        return "Noticeable wind chill"
    if feels > temp + 2:
        return "Heavy heat (humidex)"
    if spread > 15:
        return "Very dry air / excellent visibility"
    return "Stable conditions"


def humidity_info(humidity: float | None) -> str:
    """Comfort band for relative humidity (%)."""
    if not is_number(humidity):
        return UNKNOWN
    if humidity < 30:
        return "Dry air (low comfort)"
    if humidity <= 60:
        return "Optimal comfort"
    if humidity <= 85:
        return "Humid air"
    return "Very humid (condensation risk)"


def precipitation_info(rate: float | None, total: float | None) -> str:
    """Rain state from the instantaneous rate (mm/h) and the day total (mm)."""
    if is_number(rate) and rate > 0:
        return f"Rain in progress ({rate:.2f} mm/h)"
    if is_number(total) and total > 0:
        return "Currently dry"
    return "Dry weather"


def wind_cardinal(degrees: float | None) -> str | None:
    """16-point compass label for a bearing, None when unknown."""
    if not is_number(degrees):
        return None
    index = int(degrees / 22.5 + 0.5) % 16
    return COMPASS_POINTS[index]


def condition_labels(observation: Observation) -> ConditionLabels:
    """Bundle every narrative label for the current observation."""
    return ConditionLabels(
        temperature=temperature_info(observation.temp, observation.dew_point, observation.feels_like),
        humidity=humidity_info(observation.humidity),
        precipitation=precipitation_info(observation.precip_rate, observation.precip_total),
        pressure=pressure_narrative(observation.pressure_trend, observation.pressure),
    )
