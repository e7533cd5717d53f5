"""Month-by-month rainfall for one calendar year."""

from __future__ import annotations

from typing import List, Sequence

from station_insight.domain import DailyPoint, MonthlyPrecipitation, PrecipitationReport
from station_insight.history import filter_year
from station_insight.statistics import is_number

DEFAULT_RAIN_DAY_THRESHOLD_MM = 0.2


def monthly_precipitation(
    daily: Sequence[DailyPoint],
    *,
    year: int,
    rain_day_threshold: float = DEFAULT_RAIN_DAY_THRESHOLD_MM,
) -> PrecipitationReport:
    """Totals and rain days for each of the 12 months of `year`.

    A rain day has strictly more than `rain_day_threshold` mm. The wettest
    month is the earliest month holding the highest total; None when the year
    has no days at all.
    """
    months: List[MonthlyPrecipitation] = [MonthlyPrecipitation(month=m) for m in range(1, 13)]
    days = filter_year(daily, year)
    for day in days:
        if not is_number(day.precip_total):
            continue
        bucket = months[day.date.month - 1]
        bucket.total += day.precip_total
        if day.precip_total > rain_day_threshold:
            bucket.rain_days += 1

    wettest = None
    if days:
        # max() keeps the first of equal totals
        wettest = max(months, key=lambda m: m.total)

    return PrecipitationReport(
        year=year,
        months=months,
        total=sum(m.total for m in months),
        total_rain_days=sum(m.rain_days for m in months),
        wettest_month=wettest,
    )
