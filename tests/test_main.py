import unittest

from fastapi.testclient import TestClient

from station_insight.main import app


class TestMain(unittest.TestCase):
    def test_app_metadata(self):
        self.assertEqual(app.title, "Station Insight")

    def test_health_does_not_need_api_key(self):
        from station_insight.config import settings

        original = settings.service_api_key
        settings.service_api_key = "sekret"
        try:
            resp = TestClient(app).get("/health")
        finally:
            settings.service_api_key = original
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")
        self.assertEqual(resp.json()["station_id"], settings.station_id)


if __name__ == "__main__":
    unittest.main()
