"""Daily thermal amplitude and critical-stress streaks."""

from __future__ import annotations

from typing import List, Optional, Sequence

from station_insight.domain import AmplitudeDay, AmplitudeReport, DailyPoint
from station_insight.history import filter_year
from station_insight.statistics import is_number

DEFAULT_THRESHOLD_C = 15.0


def longest_critical_streak(days: Sequence[Optional[AmplitudeDay]]) -> List[AmplitudeDay]:
    """Longest run of consecutive critical days.

    A None entry (a day without usable extremes) ends the current run. On a
    tie the later run wins: the best run is replaced whenever the current one
    is at least as long.
    """
    current: List[AmplitudeDay] = []
    best: List[AmplitudeDay] = []
    for day in days:
        if day is not None and day.is_critical:
            current.append(day)
            if len(current) >= len(best):
                best = list(current)
        else:
            current = []
    return best


def analyze_amplitude(
    daily: Sequence[DailyPoint],
    *,
    year: int,
    threshold: float = DEFAULT_THRESHOLD_C,
) -> AmplitudeReport:
    """Amplitude per day of `year`, critical days and the longest critical streak.

    Days missing either the high or the low are left out of the report and
    break any running streak. A day is critical when its amplitude strictly
    exceeds `threshold`.
    """
    scan: List[Optional[AmplitudeDay]] = []
    for point in filter_year(daily, year):
        if not is_number(point.temp_high) or not is_number(point.temp_low):
            scan.append(None)
            continue
        amplitude = point.temp_high - point.temp_low
        scan.append(
            AmplitudeDay(
                date=point.date,
                epoch=point.epoch,
                temp_high=point.temp_high,
                temp_low=point.temp_low,
                amplitude=amplitude,
                is_critical=amplitude > threshold,
            )
        )

    days = [d for d in scan if d is not None]
    critical = [d for d in days if d.is_critical]
    streak = longest_critical_streak(scan)
    return AmplitudeReport(
        year=year,
        threshold=threshold,
        days=days,
        critical_days=list(reversed(critical)),
        total_critical_days=len(critical),
        max_amplitude=max((d.amplitude for d in days), default=0.0),
        longest_streak=len(streak),
        streak_days=streak,
    )
