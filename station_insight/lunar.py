"""Moon phase from elapsed time since a reference new moon.

The synodic month is taken as 2,551,443 s (29.530 days). Phase names use
fixed fraction boundaries; the new-moon label covers both ends of the cycle.
Illumination is the cosine approximation (1 - cos(2*pi*f)) / 2, which
ignores orbital eccentricity and is good to a few percent.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import List, Tuple

from station_insight.domain import MoonPhase, MoonPhaseName
from station_insight.time_windows import as_aware

SYNODIC_MONTH_SECONDS = 2_551_443
SECONDS_PER_DAY = 86_400

# Upper bounds (exclusive) on the phase fraction, evaluated in order.
PHASE_BOUNDARIES: List[Tuple[float, MoonPhaseName]] = [
    (0.03, MoonPhaseName.NEW_MOON),
    (0.22, MoonPhaseName.WAXING_CRESCENT),
    (0.28, MoonPhaseName.FIRST_QUARTER),
    (0.47, MoonPhaseName.WAXING_GIBBOUS),
    (0.53, MoonPhaseName.FULL_MOON),
    (0.72, MoonPhaseName.WANING_GIBBOUS),
    (0.78, MoonPhaseName.LAST_QUARTER),
    (0.97, MoonPhaseName.WANING_CRESCENT),
]

PHASE_NAMES = {
    MoonPhaseName.NEW_MOON: "New Moon",
    MoonPhaseName.WAXING_CRESCENT: "Waxing Crescent",
    MoonPhaseName.FIRST_QUARTER: "First Quarter",
    MoonPhaseName.WAXING_GIBBOUS: "Waxing Gibbous",
    MoonPhaseName.FULL_MOON: "Full Moon",
    MoonPhaseName.WANING_GIBBOUS: "Waning Gibbous",
    MoonPhaseName.LAST_QUARTER: "Last Quarter",
    MoonPhaseName.WANING_CRESCENT: "Waning Crescent",
}


def phase_from_fraction(fraction: float) -> MoonPhaseName:
    """Map a phase fraction in [0, 1) to its named phase."""
    for upper, name in PHASE_BOUNDARIES:
        if fraction < upper:
            return name
    return MoonPhaseName.NEW_MOON


def illumination_from_fraction(fraction: float) -> float:
    """Illuminated share of the disk (0 new, 1 full)."""
    return (1.0 - math.cos(2.0 * math.pi * fraction)) / 2.0


def moon_phase(
    now: dt.datetime | int | float,
    *,
    reference_new_moon: dt.datetime,
) -> MoonPhase:
    """Phase, age and illumination of the moon at `now`.

    Instants before the reference wrap forwards into the cycle, so the
    fraction is always in [0, 1).
    """
    elapsed = as_aware(now).timestamp() - as_aware(reference_new_moon).timestamp()
    phase_seconds = elapsed % SYNODIC_MONTH_SECONDS
    fraction = phase_seconds / SYNODIC_MONTH_SECONDS
    if fraction >= 1.0:  # float rounding just below a full cycle
        phase_seconds, fraction = 0.0, 0.0
    age_days = phase_seconds / SECONDS_PER_DAY

    synodic_days = SYNODIC_MONTH_SECONDS / SECONDS_PER_DAY
    days_to_full = ((0.5 - fraction) % 1.0) * synodic_days
    days_to_new = (1.0 - fraction) * synodic_days

    key = phase_from_fraction(fraction)
    return MoonPhase(
        key=key,
        name=PHASE_NAMES[key],
        fraction=fraction,
        age_days=age_days,
        illumination=illumination_from_fraction(fraction),
        days_to_full=days_to_full,
        days_to_new=days_to_new,
    )
