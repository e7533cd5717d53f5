import datetime as dt
import unittest
from zoneinfo import ZoneInfo

from station_insight.amplitude import analyze_amplitude
from station_insight.domain import DailyPoint


def _days(amplitudes, year=2025, low=5.0):
    out = []
    start = dt.date(year, 5, 1)
    for i, amp in enumerate(amplitudes):
        day = start + dt.timedelta(days=i)
        epoch = int(dt.datetime(day.year, day.month, day.day, tzinfo=ZoneInfo("UTC")).timestamp())
        high = None if amp is None else low + amp
        out.append(DailyPoint(date=day, epoch=epoch, temp_high=high, temp_low=low))
    return out


class TestAnalyzeAmplitude(unittest.TestCase):
    def test_critical_days_and_streak(self):
        days = _days([16, 17, 10, 16])
        report = analyze_amplitude(days, year=2025)
        self.assertEqual(report.total_critical_days, 3)
        self.assertEqual(report.longest_streak, 2)
        self.assertEqual(report.streak_dates, [days[0].date, days[1].date])
        self.assertEqual(report.max_amplitude, 17)
        # most recent first
        self.assertEqual([d.date for d in report.critical_days], [days[3].date, days[1].date, days[0].date])

    def test_tied_streaks_keep_the_later_one(self):
        days = _days([16, 10, 16])
        report = analyze_amplitude(days, year=2025)
        self.assertEqual(report.longest_streak, 1)
        self.assertEqual(report.streak_dates, [days[2].date])

    def test_threshold_is_strict(self):
        report = analyze_amplitude(_days([15, 15.1]), year=2025)
        self.assertEqual([d.is_critical for d in report.days], [False, True])

    def test_custom_threshold(self):
        report = analyze_amplitude(_days([11, 12]), year=2025, threshold=10)
        self.assertEqual(report.longest_streak, 2)

    def test_empty_year(self):
        report = analyze_amplitude(_days([20]), year=2024)
        self.assertEqual(report.days, [])
        self.assertEqual(report.max_amplitude, 0)
        self.assertEqual(report.longest_streak, 0)
        self.assertEqual(report.streak_dates, [])

    def test_days_missing_extremes_are_skipped_and_break_streaks(self):
        days = _days([16, None, 16])
        report = analyze_amplitude(days, year=2025)
        self.assertEqual(len(report.days), 2)
        self.assertEqual(report.total_critical_days, 2)
        self.assertEqual(report.longest_streak, 1)
        self.assertEqual(report.streak_dates, [days[2].date])

    def test_streak_resets_at_year_boundary(self):
        days = []
        for day in (dt.date(2024, 12, 30), dt.date(2024, 12, 31), dt.date(2025, 1, 1)):
            epoch = int(dt.datetime(day.year, day.month, day.day, tzinfo=ZoneInfo("UTC")).timestamp())
            days.append(DailyPoint(date=day, epoch=epoch, temp_high=25.0, temp_low=5.0))
        report = analyze_amplitude(days, year=2025)
        self.assertEqual(report.longest_streak, 1)
        self.assertEqual(report.streak_dates, [dt.date(2025, 1, 1)])
        self.assertEqual(analyze_amplitude(days, year=2024).longest_streak, 2)

    def test_streak_dates_are_serialized(self):
        days = _days([16, 17])
        dumped = analyze_amplitude(days, year=2025).model_dump(mode="json")
        self.assertEqual(dumped["streak_dates"], ["2025-05-01", "2025-05-02"])

    def test_input_order_does_not_matter(self):
        days = _days([16, 17, 10, 16])
        forward = analyze_amplitude(days, year=2025)
        backward = analyze_amplitude(list(reversed(days)), year=2025)
        self.assertEqual(forward, backward)


if __name__ == "__main__":
    unittest.main()
