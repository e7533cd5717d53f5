"""Growing degree-day accumulation over one calendar year of daily history."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from station_insight.domain import CropProfile, DailyPoint, GddDay, GddReport, GddSummary
from station_insight.history import filter_year
from station_insight.statistics import is_number

DEFAULT_EXTRA_YEARS = (2025, 2026)


def daily_gain(temp_avg: float | None, base_threshold: float) -> float:
    """Degree-days gained on one day; never negative, 0 when temp_avg is missing."""
    if not is_number(temp_avg):
        return 0.0
    return max(0.0, temp_avg - base_threshold)


def summarize(days: Sequence[GddDay], crop: CropProfile | None = None) -> GddSummary:
    """Season totals for a GDD series, with maturity when a crop is given."""
    if not days:
        return GddSummary()

    total = days[-1].cumulative_gain
    summary = GddSummary(
        total=total,
        avg_gain_per_day=total / len(days),
        active_days=sum(1 for d in days if d.daily_gain > 0),
        day_count=len(days),
    )
    if crop is not None:
        # gdd_max plays no part in maturity
        summary.maturity_date = next(
            (d.date for d in days if d.cumulative_gain >= crop.gdd_min), None
        )
        if crop.gdd_min > 0:
            summary.progress_percent = min(100.0, total / crop.gdd_min * 100.0)
        else:
            # no requirement: mature on the first day
            summary.progress_percent = 100.0
    return summary


def compute_gdd(
    daily: Sequence[DailyPoint],
    *,
    year: int,
    base_threshold: float | None = None,
    crop: CropProfile | None = None,
) -> GddReport:
    """Accumulate GDD for `year`.

    The base threshold is the explicit argument when given, else the crop's
    base temperature, else 0 C.
    """
    if base_threshold is None:
        base_threshold = crop.base_temp if crop is not None else 0.0

    days: List[GddDay] = []
    cumulative = 0.0
    for point in filter_year(daily, year):
        gain = daily_gain(point.temp_avg, base_threshold)
        cumulative += gain
        days.append(
            GddDay(
                date=point.date,
                epoch=point.epoch,
                temp_avg=point.temp_avg,
                daily_gain=gain,
                cumulative_gain=cumulative,
            )
        )

    return GddReport(
        year=year,
        base_threshold=base_threshold,
        crop=crop,
        days=days,
        summary=summarize(days, crop),
    )


def available_years(
    daily: Iterable[DailyPoint],
    *,
    minimum_year: int = 2025,
    extra_years: Iterable[int] = DEFAULT_EXTRA_YEARS,
) -> List[int]:
    """Years offered for selection: seen in history or defaulted, newest first."""
    years = {d.date.year for d in daily} | set(extra_years)
    return sorted((y for y in years if y >= minimum_year), reverse=True)
