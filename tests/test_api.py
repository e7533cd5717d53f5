import datetime as dt
import unittest
from zoneinfo import ZoneInfo

import requests
from fastapi.testclient import TestClient

from station_insight.main import app as fastapi_app
from station_insight.data_sources import build_data_source, pws_client
from station_insight.data_sources.base import CallableStationDataSource
from station_insight.data_sources.pws_client import StationOfflineError
from station_insight.domain import DailyPoint, HourlyPoint, Observation

PARIS = ZoneInfo("Europe/Paris")
NOW = dt.datetime(2025, 6, 21, 12, 0, tzinfo=PARIS)
NOW_EPOCH = int(NOW.timestamp())


def _mock_current(**kwargs):
    return Observation(
        observed_at=NOW,
        temp=22.0,
        feels_like=22.0,
        dew_point=12.0,
        humidity=55.0,
        pressure=1015.0,
        wind_speed=8.0,
        wind_dir=90.0,
        precip_rate=0.0,
        precip_total=0.0,
    )


def _mock_hourly(**kwargs):
    return [
        HourlyPoint(epoch=NOW_EPOCH - (47 - i) * 3600, temp=10.0 + i % 12, pressure=1015.0, humidity=60.0,
                    precip_rate=0.0)
        for i in range(48)
    ]


def _mock_daily(**kwargs):
    out = []
    for i in range(20):
        day = dt.date(2025, 6, 1) + dt.timedelta(days=i)
        epoch = int(dt.datetime(day.year, day.month, day.day, tzinfo=PARIS).timestamp())
        out.append(
            DailyPoint(date=day, epoch=epoch, temp_avg=15.0, temp_high=25.0, temp_low=8.0,
                       precip_total=1.0 if i % 2 else 0.0)
        )
    return out


class TestApi(unittest.TestCase):
    def setUp(self):
        import station_insight.api as api_mod
        from station_insight.config import settings

        self.api_mod = api_mod
        self.calls = {"current": 0}
        self._orig_source = api_mod.DATA_SOURCE
        self._orig_now = api_mod._now
        self._orig_service_key = settings.service_api_key

        def counting_current(**kwargs):
            self.calls["current"] += 1
            return _mock_current()

        api_mod.DATA_SOURCE = CallableStationDataSource(
            current=counting_current, hourly=_mock_hourly, daily=_mock_daily
        )
        api_mod._now = lambda: NOW
        api_mod.SNAPSHOT_CACHE.clear()
        settings.service_api_key = None
        self.client = TestClient(fastapi_app)

    def tearDown(self):
        from station_insight.config import settings

        self.api_mod.DATA_SOURCE = self._orig_source
        self.api_mod._now = self._orig_now
        self.api_mod.SNAPSHOT_CACHE.clear()
        settings.service_api_key = self._orig_service_key

    def _fail_with(self, exc):
        def raising(**kwargs):
            raise exc

        self.api_mod.DATA_SOURCE = CallableStationDataSource(
            current=raising, hourly=_mock_hourly, daily=_mock_daily
        )

    def test_dashboard_200(self):
        resp = self.client.get("/v1/dashboard")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["wind_cardinal"], "E")
        self.assertEqual(data["observation"]["pressure_trend"], "steady")
        self.assertEqual(data["labels"]["pressure"], "Stable barometric conditions")
        self.assertFalse(data["is_night"])
        self.assertIn("temperature", data["stats_24h"])
        self.assertEqual(data["stats_24h"]["temperature"]["count"], 25)

    def test_snapshot_is_cached_between_requests(self):
        self.client.get("/v1/dashboard")
        self.client.get("/v1/amplitude?year=2025")
        self.assertEqual(self.calls["current"], 1)

    def test_rollup_hourly_and_daily(self):
        hourly = self.client.get("/v1/rollup/temperature?period=24h")
        self.assertEqual(hourly.status_code, 200)
        self.assertEqual(hourly.json()["series"]["granularity"], "hourly")

        daily = self.client.get("/v1/rollup/precipitation?period=7d")
        self.assertEqual(daily.status_code, 200)
        body = daily.json()
        self.assertEqual(body["series"]["granularity"], "daily")
        self.assertEqual(body["stats"]["metric"], "precipitation")

    def test_rollup_bad_period_400(self):
        resp = self.client.get("/v1/rollup/temperature?period=fortnight")
        self.assertEqual(resp.status_code, 400)

    def test_rollup_unknown_metric_422(self):
        resp = self.client.get("/v1/rollup/visibility")
        self.assertEqual(resp.status_code, 422)

    def test_gdd_with_crop(self):
        resp = self.client.get("/v1/gdd?year=2025&crop=tomatoes")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["base_threshold"], 10.0)
        self.assertEqual(data["summary"]["total"], 100.0)
        self.assertEqual(data["crop"]["name"], "Tomatoes")

    def test_gdd_unknown_crop_404(self):
        resp = self.client.get("/v1/gdd?crop=Mandrake")
        self.assertEqual(resp.status_code, 404)

    def test_amplitude(self):
        data = self.client.get("/v1/amplitude?year=2025").json()
        self.assertEqual(data["total_critical_days"], 20)
        self.assertEqual(data["longest_streak"], 20)
        self.assertEqual(data["max_amplitude"], 17.0)

    def test_precipitation(self):
        data = self.client.get("/v1/precipitation?year=2025").json()
        self.assertEqual(len(data["months"]), 12)
        self.assertEqual(data["total"], 10.0)
        self.assertEqual(data["total_rain_days"], 10)
        self.assertEqual(data["wettest_month"]["month"], 6)

    def test_years(self):
        data = self.client.get("/v1/years").json()
        self.assertIn(2025, data["years"])
        self.assertEqual(data["years"], sorted(data["years"], reverse=True))

    def test_crops(self):
        data = self.client.get("/v1/crops").json()
        self.assertIn("Cereals", data)
        self.assertTrue(all(crop["category"] == "Cereals" for crop in data["Cereals"]))

    def test_sun_for_date(self):
        resp = self.client.get("/v1/sun?date=2025-06-21")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["date"], "2025-06-21")
        self.assertIsNotNone(data["sunrise"])
        self.assertLess(data["dawn"], data["sunrise"])

    def test_moon(self):
        data = self.client.get("/v1/moon").json()
        self.assertIn("key", data)
        self.assertGreaterEqual(data["illumination"], 0.0)
        self.assertLessEqual(data["illumination"], 1.0)

    def test_offline_station_503(self):
        self._fail_with(StationOfflineError("no observations"))
        resp = self.client.get("/v1/dashboard")
        self.assertEqual(resp.status_code, 503)

    def test_request_failure_503(self):
        self._fail_with(requests.ConnectionError("boom"))
        resp = self.client.get("/v1/gdd")
        self.assertEqual(resp.status_code, 503)

    def test_unreadable_station_payload_503(self):
        class Resp:
            status_code = 200
            content = b"{}"

            def raise_for_status(self):
                return None

            def json(self):
                return {"observations": [{"metric": {"temp": 10}}]}

        from station_insight.config import settings

        orig_session = pws_client.session
        pws_client.session = type("S", (), {"get": lambda *a, **k: Resp()})()
        try:
            self.api_mod.DATA_SOURCE = build_data_source(settings)
            resp = self.client.get("/v1/dashboard")
        finally:
            pws_client.session = orig_session
        self.assertEqual(resp.status_code, 503)

    def test_invalid_observation_503(self):
        self._fail_with(ValueError("bad record"))
        resp = self.client.get("/v1/amplitude")
        self.assertEqual(resp.status_code, 503)

    def test_sun_memo_stays_bounded(self):
        self.api_mod.SUN_MEMO.clear()
        start = dt.date(2000, 1, 1)
        for offset in range(self.api_mod.SUN_MEMO.max_entries + 10):
            day = start + dt.timedelta(days=offset)
            self.assertEqual(self.client.get(f"/v1/sun?date={day.isoformat()}").status_code, 200)
        self.assertEqual(len(self.api_mod.SUN_MEMO), self.api_mod.SUN_MEMO.max_entries)

    def test_amplitude_streak_dates_in_payload(self):
        data = self.client.get("/v1/amplitude?year=2025").json()
        self.assertEqual(len(data["streak_dates"]), 20)
        self.assertEqual(data["streak_dates"][0], "2025-06-01")

    def test_requires_api_key_when_set(self):
        from station_insight.config import settings

        settings.service_api_key = "sekret"

        missing = self.client.get("/v1/crops")
        self.assertEqual(missing.status_code, 401)

        wrong = self.client.get("/v1/crops", headers={"X-API-Key": "nope"})
        self.assertEqual(wrong.status_code, 401)

        ok = self.client.get("/v1/crops", headers={"X-API-Key": "sekret"})
        self.assertEqual(ok.status_code, 200)


if __name__ == "__main__":
    unittest.main()
