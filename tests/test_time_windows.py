import datetime as dt
import unittest
from zoneinfo import ZoneInfo

import pytest

from station_insight.domain import Period, PeriodKind
from station_insight.time_windows import (
    as_aware,
    day_of_year,
    epoch_in_window,
    from_epoch,
    parse_period,
    period_bounds,
    start_of_week,
    to_epoch,
)

PARIS = ZoneInfo("Europe/Paris")
UTC = ZoneInfo("UTC")


class TestParsePeriod(unittest.TestCase):
    def test_rolling_tokens(self):
        self.assertEqual(parse_period("24h"), Period(kind=PeriodKind.ROLLING_HOURS, amount=24))
        self.assertEqual(parse_period("6h"), Period(kind=PeriodKind.ROLLING_HOURS, amount=6))
        self.assertEqual(parse_period("7d"), Period(kind=PeriodKind.ROLLING_DAYS, amount=7))
        self.assertEqual(parse_period("7j"), Period(kind=PeriodKind.ROLLING_DAYS, amount=7))
        self.assertEqual(parse_period("rolling30d"), Period(kind=PeriodKind.ROLLING_DAYS, amount=30))
        self.assertEqual(parse_period("rolling_365d"), Period(kind=PeriodKind.ROLLING_DAYS, amount=365))
        self.assertEqual(parse_period("rolling24h"), Period(kind=PeriodKind.ROLLING_HOURS, amount=24))

    def test_calendar_tokens(self):
        self.assertEqual(parse_period("today").kind, PeriodKind.TODAY)
        self.assertEqual(parse_period("thisWeek").kind, PeriodKind.THIS_WEEK)
        self.assertEqual(parse_period("this_month").kind, PeriodKind.THIS_MONTH)
        self.assertEqual(parse_period(" thisYear ").kind, PeriodKind.THIS_YEAR)

    def test_unknown_token_raises(self):
        with self.assertRaises(ValueError):
            parse_period("fortnight")
        with self.assertRaises(ValueError):
            parse_period("24m")


class TestPeriodBounds(unittest.TestCase):
    def setUp(self):
        # Sunday afternoon in Paris (CEST, UTC+2)
        self.now = dt.datetime(2025, 6, 15, 14, 30, tzinfo=PARIS)
        self.end = to_epoch(self.now)

    def test_rolling_windows_subtract_fixed_spans(self):
        start, end = period_bounds(parse_period("24h"), self.now)
        self.assertEqual(end, self.end)
        self.assertEqual(end - start, 86400)

        start, end = period_bounds(parse_period("rolling7d"), self.now)
        self.assertEqual(end - start, 7 * 86400)

    def test_zero_length_rolling_window(self):
        start, end = period_bounds(Period(kind=PeriodKind.ROLLING_HOURS, amount=0), self.now)
        self.assertEqual(start, end)

    def test_today_starts_at_local_midnight(self):
        start, _ = period_bounds(parse_period("today"), self.now)
        self.assertEqual(from_epoch(start, PARIS), dt.datetime(2025, 6, 15, tzinfo=PARIS))

    def test_week_starts_on_monday_when_now_is_sunday(self):
        start, _ = period_bounds(parse_period("thisWeek"), self.now)
        self.assertEqual(from_epoch(start, PARIS), dt.datetime(2025, 6, 9, tzinfo=PARIS))

    def test_week_on_monday_starts_same_day(self):
        monday = dt.datetime(2025, 6, 16, 8, 0, tzinfo=PARIS)
        self.assertEqual(start_of_week(monday), dt.datetime(2025, 6, 16, tzinfo=PARIS))

    def test_month_and_year(self):
        start, _ = period_bounds(parse_period("thisMonth"), self.now)
        self.assertEqual(from_epoch(start, PARIS), dt.datetime(2025, 6, 1, tzinfo=PARIS))
        start, _ = period_bounds(parse_period("thisYear"), self.now)
        self.assertEqual(from_epoch(start, PARIS), dt.datetime(2025, 1, 1, tzinfo=PARIS))

    def test_tz_argument_moves_calendar_anchor(self):
        # 23:30 UTC on the 14th is already the 15th in Paris
        now = dt.datetime(2025, 6, 14, 23, 30, tzinfo=UTC)
        start, _ = period_bounds(parse_period("today"), now, tz=PARIS)
        self.assertEqual(from_epoch(start, PARIS).date(), dt.date(2025, 6, 15))


def test_epoch_in_window_is_inclusive():
    assert epoch_in_window(10, 10, 20)
    assert epoch_in_window(20, 10, 20)
    assert not epoch_in_window(9, 10, 20)
    assert not epoch_in_window(21, 10, 20)
    assert epoch_in_window(5, None, None)


def test_as_aware_accepts_epochs_and_naive_datetimes():
    assert as_aware(0) == dt.datetime(1970, 1, 1, tzinfo=UTC)
    naive = dt.datetime(2025, 1, 1, 12, 0)
    assert as_aware(naive, PARIS).utcoffset() == dt.timedelta(hours=1)


@pytest.mark.parametrize(
    "day,expected",
    [(dt.date(2025, 1, 1), 1), (dt.date(2025, 12, 31), 365), (dt.date(2024, 12, 31), 366)],
)
def test_day_of_year(day, expected):
    assert day_of_year(day) == expected


if __name__ == "__main__":
    unittest.main()
