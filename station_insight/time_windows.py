"""Calendar and epoch arithmetic for rolling and calendar reporting windows.

Every function takes `now` explicitly; nothing here reads the wall clock.
Calendar boundaries are local midnights in the timezone of `now` (or the
`tz` argument when given).
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Tuple
from zoneinfo import ZoneInfo

from station_insight.domain import Period, PeriodKind

UTC = ZoneInfo("UTC")

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

_ROLLING_RE = re.compile(r"^(?:rolling[_-]?)?(\d+)\s*([hdj])$")

_CALENDAR_TOKENS = {
    "today": PeriodKind.TODAY,
    "thisweek": PeriodKind.THIS_WEEK,
    "this_week": PeriodKind.THIS_WEEK,
    "week": PeriodKind.THIS_WEEK,
    "thismonth": PeriodKind.THIS_MONTH,
    "this_month": PeriodKind.THIS_MONTH,
    "month": PeriodKind.THIS_MONTH,
    "thisyear": PeriodKind.THIS_YEAR,
    "this_year": PeriodKind.THIS_YEAR,
    "year": PeriodKind.THIS_YEAR,
}


def rolling_hours(hours: int) -> Period:
    """Period covering the last `hours` hours."""
    return Period(kind=PeriodKind.ROLLING_HOURS, amount=hours)


def rolling_days(days: int) -> Period:
    """Period covering the last `days` days."""
    return Period(kind=PeriodKind.ROLLING_DAYS, amount=days)


def parse_period(token: str) -> Period:
    """Parse a period token such as "24h", "7d", "rolling30d" or "thisWeek".

    Raises ValueError for tokens that name no known period.
    """
    cleaned = token.strip().lower()
    if cleaned in _CALENDAR_TOKENS:
        return Period(kind=_CALENDAR_TOKENS[cleaned])

    match = _ROLLING_RE.match(cleaned)
    if not match:
        raise ValueError(f"Unknown period '{token}'")
    amount, unit = int(match.group(1)), match.group(2)
    if unit == "h":
        return rolling_hours(amount)
    return rolling_days(amount)


def as_aware(now: dt.datetime | int | float, tz: dt.tzinfo | None = None) -> dt.datetime:
    """Normalize epoch seconds or a naive/aware datetime to an aware datetime.

    Naive datetimes are read as wall time in `tz` (UTC when `tz` is None).
    Aware datetimes are converted to `tz` when it is given.
    """
    if isinstance(now, (int, float)):
        return dt.datetime.fromtimestamp(now, tz or UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz or UTC)
    if tz is not None:
        return now.astimezone(tz)
    return now


def to_epoch(moment: dt.datetime) -> int:
    """Whole seconds since the Unix epoch."""
    return int(as_aware(moment).timestamp())


def from_epoch(epoch: int | float, tz: dt.tzinfo | None = None) -> dt.datetime:
    """Aware datetime for an epoch, in `tz` (UTC by default)."""
    return dt.datetime.fromtimestamp(epoch, tz or UTC)


def local_midnight(day: dt.date, tz: dt.tzinfo) -> dt.datetime:
    """Midnight at the start of `day` in `tz`."""
    return dt.datetime(day.year, day.month, day.day, tzinfo=tz)


def start_of_day(now: dt.datetime) -> dt.datetime:
    """Local midnight of the day containing `now`."""
    return local_midnight(now.date(), now.tzinfo or UTC)


def start_of_week(now: dt.datetime) -> dt.datetime:
    """Local midnight of the Monday starting the week containing `now`.

    A Sunday is day 7 of the week begun six days earlier; any other day rolls
    back by its weekday index minus one. With Monday=0 that is `weekday()` days.
    """
    monday = now.date() - dt.timedelta(days=now.weekday())
    return local_midnight(monday, now.tzinfo or UTC)


def start_of_month(now: dt.datetime) -> dt.datetime:
    """Local midnight on the 1st of the month containing `now`."""
    return local_midnight(now.date().replace(day=1), now.tzinfo or UTC)


def start_of_year(now: dt.datetime) -> dt.datetime:
    """Local midnight on January 1st of the year containing `now`."""
    return local_midnight(dt.date(now.year, 1, 1), now.tzinfo or UTC)


def day_of_year(day: dt.date) -> int:
    """1-based ordinal day within the year."""
    return day.timetuple().tm_yday


def period_bounds(
    period: Period,
    now: dt.datetime | int | float,
    *,
    tz: dt.tzinfo | None = None,
) -> Tuple[int, int]:
    """Return `(start_epoch, end_epoch)` for `period`, ending at `now`.

    Never raises; a zero-length rolling period yields a zero-width interval.
    """
    current = as_aware(now, tz)
    end = to_epoch(current)

    if period.kind == PeriodKind.ROLLING_HOURS:
        return end - period.amount * SECONDS_PER_HOUR, end
    if period.kind == PeriodKind.ROLLING_DAYS:
        return end - period.amount * SECONDS_PER_DAY, end
    if period.kind == PeriodKind.TODAY:
        return to_epoch(start_of_day(current)), end
    if period.kind == PeriodKind.THIS_WEEK:
        return to_epoch(start_of_week(current)), end
    if period.kind == PeriodKind.THIS_MONTH:
        return to_epoch(start_of_month(current)), end
    return to_epoch(start_of_year(current)), end


def epoch_in_window(epoch: int, start: int | None, end: int | None) -> bool:
    """Inclusive window membership; an open bound accepts everything."""
    if start is not None and epoch < start:
        return False
    if end is not None and epoch > end:
        return False
    return True
