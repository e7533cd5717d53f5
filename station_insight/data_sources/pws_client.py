"""Helpers for fetching observations and history from the Weather.com PWS API."""
from __future__ import annotations

import calendar
import datetime as dt
from typing import Any, Dict, List, Mapping, Optional

import requests
import requests_cache
from pydantic import ValidationError
from retry_requests import retry

from station_insight import config
from station_insight.domain import DailyPoint, HourlyPoint, Observation
from station_insight.history import merge_daily_history, normalize_hourly
from station_insight.statistics import is_number
from utils.logging_utils import get_tagged_logger, mask_api_key

logger = get_tagged_logger(__name__, tag="data_sources/pws_client")

# Live reads expire quickly; closed months never change once the month is over.
LIVE_EXPIRE_SECONDS = 60
CLOSED_MONTH_EXPIRE_SECONDS = 30 * 86400

cache_session = requests_cache.CachedSession(
    config.settings.http_cache_name,
    expire_after=LIVE_EXPIRE_SECONDS,
)
session = retry(
    cache_session,
    retries=config.settings.http_retries,
    backoff_factor=config.settings.http_backoff_factor,
)

CURRENT_PATH = "observations/current"
HOURLY_PATH = "history/hourly"
DAILY_PATH = "history/daily"

DEFAULT_PRESSURE_HPA = 1013.0


class StationOfflineError(RuntimeError):
    """The station returned no current observation."""


class StationPayloadError(ValueError):
    """The API answered with a payload that cannot be read as an observation."""


def _first(*values: Any) -> Optional[float]:
    """First numeric value, like a chain of `??` fallbacks."""
    for value in values:
        if is_number(value):
            return float(value)
    return None


def _metric(record: Mapping[str, Any]) -> Mapping[str, Any]:
    return record.get("metric") or {}


def format_yyyymmdd(day: dt.date) -> str:
    """Date in the API's YYYYMMDD query format."""
    return day.strftime("%Y%m%d")


def _local_datetime(obs_time_local: str | None, epoch: Any, tz: dt.tzinfo) -> dt.datetime:
    """Observation instant from `obsTimeLocal`, else from the epoch."""
    if obs_time_local:
        try:
            return dt.datetime.fromisoformat(obs_time_local.replace(" ", "T")).replace(tzinfo=tz)
        except ValueError:
            logger.warning("Unparseable obsTimeLocal", extra={"obs_time_local": obs_time_local})
    if is_number(epoch):
        try:
            return dt.datetime.fromtimestamp(epoch, tz)
        except (OverflowError, OSError, ValueError) as exc:
            raise StationPayloadError(f"Observation epoch out of range: {epoch}") from exc
    raise StationPayloadError("Observation carries neither obsTimeLocal nor epoch")


def parse_current(payload: Mapping[str, Any], *, tz: dt.tzinfo) -> Observation:
    """Build an Observation from an `observations/current` payload."""
    observations = payload.get("observations") if payload else None
    if not observations:
        raise StationOfflineError("Station offline: no current observation")
    obs = observations[0]
    if not isinstance(obs, Mapping):
        raise StationPayloadError("Current observation is not an object")
    metric = _metric(obs)
    try:
        return _build_observation(obs, metric, tz)
    except ValidationError as exc:
        raise StationPayloadError(f"Invalid current observation: {exc.error_count()} error(s)") from exc


def _build_observation(obs: Mapping[str, Any], metric: Mapping[str, Any], tz: dt.tzinfo) -> Observation:
    return Observation(
        observed_at=_local_datetime(obs.get("obsTimeLocal"), obs.get("epoch"), tz),
        temp=_first(metric.get("temp")),
        feels_like=_first(metric.get("windChill"), metric.get("temp")),
        dew_point=_first(metric.get("dewpt")),
        humidity=_first(obs.get("humidity")),
        pressure=_first(metric.get("pressure"), DEFAULT_PRESSURE_HPA),
        wind_speed=_first(metric.get("windSpeed")),
        wind_gust=_first(metric.get("windGust")),
        wind_dir=_first(obs.get("winddir")),
        precip_rate=_first(metric.get("precipRate"), 0.0),
        precip_total=_first(metric.get("precipTotal"), 0.0),
        solar_radiation=_first(obs.get("solarRadiation")),
        uv_index=_first(obs.get("uv")),
    )


def parse_hourly(payload: Mapping[str, Any]) -> List[HourlyPoint]:
    """Hourly rows from a `history/hourly` payload, normalised and sorted."""
    points: List[HourlyPoint] = []
    for row in (payload or {}).get("observations") or []:
        if not is_number(row.get("epoch")):
            continue
        metric = _metric(row)
        points.append(
            HourlyPoint(
                epoch=int(row["epoch"]),
                temp=_first(metric.get("tempAvg"), metric.get("temp")),
                dew_point=_first(metric.get("dewptAvg"), metric.get("dewpt")),
                pressure=_first(metric.get("pressureMax"), metric.get("pressure")),
                wind_speed=_first(
                    metric.get("windspeedHigh"), metric.get("windspeedAvg"), metric.get("windSpeed"), 0.0
                ),
                wind_gust=_first(metric.get("windgustHigh"), metric.get("windGust")),
                wind_dir=_first(row.get("winddirAvg"), row.get("winddir")),
                humidity=_first(row.get("humidityAvg"), row.get("humidity")),
                precip_rate=_first(metric.get("precipRate"), 0.0),
                precip_accum=_first(metric.get("precipTotal"), 0.0),
                solar_radiation=_first(row.get("solarRadiationHigh"), row.get("solarRadiation")),
                uv_index=_first(row.get("uvHigh"), row.get("uv")),
            )
        )
    return normalize_hourly(points)


def parse_daily(payload: Mapping[str, Any]) -> List[DailyPoint]:
    """Daily rows from a `history/daily` payload, in payload order.

    Humidity sits at the record root in daily history, with `metric` as a
    fallback. The API has no daily mean pressure, so `pressure_avg` carries
    `pressureMax`.
    """
    points: List[DailyPoint] = []
    for row in (payload or {}).get("observations") or []:
        obs_time_local = row.get("obsTimeLocal")
        if not obs_time_local or not is_number(row.get("epoch")):
            continue
        try:
            day = dt.date.fromisoformat(obs_time_local.split(" ")[0])
        except ValueError:
            logger.warning("Skipping daily row with bad date", extra={"obs_time_local": obs_time_local})
            continue
        metric = _metric(row)
        points.append(
            DailyPoint(
                date=day,
                epoch=int(row["epoch"]),
                precip_total=_first(metric.get("precipTotal"), 0.0),
                temp_high=_first(metric.get("tempHigh")),
                temp_low=_first(metric.get("tempLow")),
                temp_avg=_first(metric.get("tempAvg")),
                dew_point_avg=_first(metric.get("dewptAvg")),
                humidity_high=_first(row.get("humidityHigh"), metric.get("humidityHigh")),
                humidity_low=_first(row.get("humidityLow"), metric.get("humidityLow")),
                humidity_avg=_first(row.get("humidityAvg"), metric.get("humidityAvg")),
                pressure_max=_first(metric.get("pressureMax")),
                pressure_min=_first(metric.get("pressureMin")),
                pressure_avg=_first(metric.get("pressureMax")),
                wind_speed_max=_first(metric.get("windspeedHigh")),
                wind_gust_max=_first(metric.get("windgustHigh")),
            )
        )
    return points


def _base_params(settings: config.Settings) -> Dict[str, Any]:
    return {
        "stationId": settings.station_id,
        "format": "json",
        "units": "m",
        "numericPrecision": "decimal",
        "apiKey": settings.api_key,
    }


def _get(
    path: str,
    params: Dict[str, Any],
    settings: config.Settings,
    *,
    expire_after: int = LIVE_EXPIRE_SECONDS,
) -> requests.Response:
    url = f"{settings.api_base_url}/{path}"
    prepared = requests.Request("GET", url, params=params).prepare()
    logger.debug("PWS request", extra={"url": mask_api_key(prepared.url)})
    resp = session.get(url, params=params, timeout=settings.request_timeout_seconds, expire_after=expire_after)
    logger.debug(
        "PWS response",
        extra={"path": path, "status": resp.status_code, "from_cache": getattr(resp, "from_cache", False)},
    )
    return resp


def _json_or_empty(resp: requests.Response) -> Dict[str, Any]:
    # 204 means the station has nothing to report for the request
    if resp.status_code == 204 or not resp.content:
        return {}
    return resp.json()


def fetch_current(*, settings: config.Settings | None = None) -> Observation:
    """Fetch the latest observation; StationOfflineError when there is none."""
    settings = settings or config.settings
    resp = _get(CURRENT_PATH, _base_params(settings), settings)
    resp.raise_for_status()
    observation = parse_current(_json_or_empty(resp), tz=settings.tz)
    logger.info(
        "Fetched current observation",
        extra={"station_id": settings.station_id, "observed_at": observation.observed_at.isoformat()},
    )
    return observation


def fetch_hourly(
    *,
    now: dt.datetime | None = None,
    settings: config.Settings | None = None,
) -> List[HourlyPoint]:
    """Fetch hourly history from yesterday through today (station-local dates)."""
    settings = settings or config.settings
    today = (now or dt.datetime.now(settings.tz)).astimezone(settings.tz).date()
    params = _base_params(settings)
    params.update(
        startDate=format_yyyymmdd(today - dt.timedelta(days=1)),
        endDate=format_yyyymmdd(today),
    )
    resp = _get(HOURLY_PATH, params, settings)
    resp.raise_for_status()
    points = parse_hourly(_json_or_empty(resp))
    logger.info("Fetched hourly history", extra={"station_id": settings.station_id, "rows": len(points)})
    return points


def month_segments(start_year: int, today: dt.date) -> List[tuple]:
    """(first, last) dates of every month from January of `start_year` to today.

    The current month ends at `today`.
    """
    segments = []
    for year in range(start_year, today.year + 1):
        last_month = today.month if year == today.year else 12
        for month in range(1, last_month + 1):
            first = dt.date(year, month, 1)
            last = dt.date(year, month, calendar.monthrange(year, month)[1])
            segments.append((first, min(last, today)))
    return segments


def fetch_daily_segment(
    first: dt.date,
    last: dt.date,
    *,
    settings: config.Settings,
    closed: bool = False,
) -> List[DailyPoint]:
    """One month of daily history; a failed request yields an empty list.

    Closed months are cached for CLOSED_MONTH_EXPIRE_SECONDS, the running
    month only for LIVE_EXPIRE_SECONDS.
    """
    params = _base_params(settings)
    params.update(startDate=format_yyyymmdd(first), endDate=format_yyyymmdd(last))
    expire_after = CLOSED_MONTH_EXPIRE_SECONDS if closed else LIVE_EXPIRE_SECONDS
    try:
        resp = _get(DAILY_PATH, params, settings, expire_after=expire_after)
        if not resp.ok:
            logger.warning(
                "Daily history segment rejected",
                extra={"start": first.isoformat(), "status": resp.status_code},
            )
            return []
        return parse_daily(_json_or_empty(resp))
    except (requests.RequestException, ValueError) as exc:
        logger.warning(
            "Daily history segment failed",
            extra={"start": first.isoformat(), "error": str(exc)},
        )
        return []


def fetch_daily(
    *,
    now: dt.datetime | None = None,
    settings: config.Settings | None = None,
) -> List[DailyPoint]:
    """Fetch daily history month by month since `history_start_year`, merged by date."""
    settings = settings or config.settings
    today = (now or dt.datetime.now(settings.tz)).astimezone(settings.tz).date()
    batches = [
        fetch_daily_segment(first, last, settings=settings, closed=last < today)
        for first, last in month_segments(settings.history_start_year, today)
    ]
    merged = merge_daily_history(batches)
    logger.info(
        "Fetched daily history",
        extra={"station_id": settings.station_id, "segments": len(batches), "days": len(merged)},
    )
    return merged
