"""Station configuration pulled from environment variables via pydantic."""
from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="station_insight/config")


class Settings(BaseSettings):
    """Environment-driven configuration for the station-insight service."""
    model_config = SettingsConfigDict(env_prefix="STATION_", extra="ignore")

    data_source: str = "pws"  # options: pws
    station_id: str = "IPLLAU91"
    api_key: str | None = None
    api_base_url: str = "https://api.weather.com/v2/pws"
    request_timeout_seconds: float = 10.0
    http_cache_name: str = ".pws_cache"  # requests-cache sqlite file
    http_retries: int = 5
    http_backoff_factor: float = 0.2
    service_api_key: str | None = None

    latitude: float = 48.7120
    longitude: float = 2.2446
    timezone: str = "Europe/Paris"
    history_start_year: int = 2025
    reference_new_moon: datetime = Field(
        default_factory=lambda: datetime(2024, 1, 11, 11, 57, tzinfo=ZoneInfo("Europe/Paris"))
    )

    pressure_trend_samples: int = 10
    pressure_trend_deadband_hpa: float = 0.5
    amplitude_threshold_c: float = 15.0
    daily_mode_threshold_seconds: int = 216_000  # 2.5 days
    rain_day_threshold_mm: float = 0.2
    snapshot_ttl_seconds: int = 300

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("reference_new_moon", mode="after")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Treat a naive reference instant as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=ZoneInfo("UTC"))
        return v

    @property
    def tz(self) -> ZoneInfo:
        """Station timezone as a ZoneInfo."""
        return ZoneInfo(self.timezone)


settings = Settings()


if __name__ == "__main__":
    logger.logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
