"""Barometric trend classification and the pressure narrative table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Sequence

from station_insight.domain import PressureTrend
from station_insight.statistics import get_field, is_number

DEFAULT_TREND_SAMPLES = 10
DEFAULT_DEADBAND_HPA = 0.5


@dataclass(frozen=True)
class PressureRule:
    """One row of the narrative decision table."""
    trend: PressureTrend
    applies: Callable[[float], bool]
    text: str


# Evaluated top to bottom; the first matching row wins.
PRESSURE_NARRATIVE_RULES: List[PressureRule] = [
    PressureRule(PressureTrend.FALLING, lambda p: p < 1005, "Depression: rain and wind likely"),
    PressureRule(PressureTrend.FALLING, lambda p: True, "Falling: deterioration expected"),
    PressureRule(PressureTrend.RISING, lambda p: p > 1020, "Anticyclone: lasting improvement"),
    PressureRule(PressureTrend.RISING, lambda p: True, "Rising: clearing on the way"),
    PressureRule(PressureTrend.STEADY, lambda p: p > 1022, "Fair and dry settled weather"),
    PressureRule(PressureTrend.STEADY, lambda p: p < 1000, "Persistent unsettled weather"),
    PressureRule(PressureTrend.STEADY, lambda p: p < 1010, "Variable sky, risk of instability"),
    PressureRule(PressureTrend.STEADY, lambda p: True, "Stable barometric conditions"),
]

UNKNOWN_PRESSURE_TEXT = "Pressure unavailable"


def _recent_pressures(samples: Sequence[Any], window: int) -> List[float]:
    """Pressures of the last `window` usable samples, oldest first."""
    usable = [
        s for s in samples
        if is_number(get_field(s, "pressure")) and is_number(get_field(s, "epoch"))
    ]
    usable.sort(key=lambda s: get_field(s, "epoch"))
    return [float(get_field(s, "pressure")) for s in usable[-window:]] if window > 0 else []


def pressure_delta(samples: Sequence[Any], *, window: int = DEFAULT_TREND_SAMPLES) -> float | None:
    """Last minus first pressure over the trailing window; None with < 2 samples."""
    pressures = _recent_pressures(samples, window)
    if len(pressures) < 2:
        return None
    return pressures[-1] - pressures[0]


def trend_from_delta(delta: float | None, *, deadband: float = DEFAULT_DEADBAND_HPA) -> PressureTrend:
    """Classify a pressure change against the +/- deadband."""
    if delta is None:
        return PressureTrend.STEADY
    if delta > deadband:
        return PressureTrend.RISING
    if delta < -deadband:
        return PressureTrend.FALLING
    return PressureTrend.STEADY


def classify_pressure_trend(
    samples: Sequence[Any],
    *,
    window: int = DEFAULT_TREND_SAMPLES,
    deadband: float = DEFAULT_DEADBAND_HPA,
) -> PressureTrend:
    """Rising/steady/falling from the trailing `window` samples (epoch + pressure)."""
    return trend_from_delta(pressure_delta(samples, window=window), deadband=deadband)


def pressure_narrative(trend: PressureTrend, pressure: float | None) -> str:
    """Forecast hint for a trend at an absolute pressure (hPa)."""
    if not is_number(pressure):
        return UNKNOWN_PRESSURE_TEXT
    for rule in PRESSURE_NARRATIVE_RULES:
        if rule.trend == trend and rule.applies(pressure):
            return rule.text
    return UNKNOWN_PRESSURE_TEXT
