"""HTTP API for the station dashboard."""

import datetime as dt
import hmac
from typing import Dict, List, Optional

import requests
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel

from .app_types import SnapshotCache
from .config import settings
from .crops import crops_by_category, find_crop
from .data_sources import StationOfflineError, build_data_source
from .domain import (
    AmplitudeReport,
    CropProfile,
    DashboardPayload,
    GddReport,
    MetricKind,
    MetricStats,
    MoonPhase,
    PrecipitationReport,
    RollupSeries,
    SunTimes,
)
from .amplitude import analyze_amplitude
from .ephemeris import SunTimesMemo
from .gdd import available_years, compute_gdd
from .lunar import moon_phase
from .precipitation import monthly_precipitation
from .rollup import metric_stats, select_rollup
from .station_service import StationSnapshot, build_dashboard, fetch_snapshot
from .time_windows import parse_period
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="station_insight/api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header against the static service_api_key setting."""
    if not settings.service_api_key:
        logger.debug("No service API key configured; allowing all requests")
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.service_api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)
SNAPSHOT_CACHE = SnapshotCache()
SUN_MEMO = SunTimesMemo()


class RollupResponse(BaseModel):
    """Chart series for a metric plus its period statistics."""
    series: RollupSeries
    stats: Optional[MetricStats] = None


class YearsResponse(BaseModel):
    """Years that can be selected for the long-term tabs."""
    years: List[int]


def _now() -> dt.datetime:
    return dt.datetime.now(settings.tz)


def _load_snapshot() -> StationSnapshot:
    """Return a fresh-enough snapshot, mapping source failures to 503."""
    now = _now()
    try:
        return SNAPSHOT_CACHE.get(
            lambda: fetch_snapshot(DATA_SOURCE, now=now, settings=settings),
            now=now,
            ttl_seconds=settings.snapshot_ttl_seconds,
        )
    except StationOfflineError as exc:
        logger.warning("Station offline", extra={"station_id": settings.station_id})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    except requests.RequestException as exc:
        logger.warning("Station data source request failed", extra={"error": str(exc)})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Station data unavailable")
    except ValueError as exc:
        # StationPayloadError and pydantic ValidationError both land here
        logger.warning("Station returned an unreadable payload", extra={"error": str(exc)})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Station data unreadable")


def _resolve_year(year: Optional[int]) -> int:
    return year if year is not None else _now().year


@router.get("/dashboard", response_model=DashboardPayload)
def get_dashboard():
    """Current observation with labels, astronomy and 24h statistics."""
    snapshot = _load_snapshot()
    return build_dashboard(snapshot, now=_now(), settings=settings, sun_memo=SUN_MEMO)


@router.get("/rollup/{metric}", response_model=RollupResponse)
def get_rollup(metric: MetricKind, period: str = Query(default="24h")):
    """Series and statistics for one metric over a rolling or calendar period."""
    try:
        parsed = parse_period(period)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    snapshot = _load_snapshot()
    series = select_rollup(
        parsed,
        snapshot.hourly,
        snapshot.daily,
        now=_now(),
        tz=settings.tz,
        daily_threshold_seconds=settings.daily_mode_threshold_seconds,
    )
    return RollupResponse(series=series, stats=metric_stats(series, metric))


@router.get("/gdd", response_model=GddReport)
def get_gdd(
    year: Optional[int] = None,
    base: Optional[float] = None,
    crop: Optional[str] = None,
):
    """Growing degree-days for a year, optionally against a crop's requirement."""
    profile = None
    if crop:
        profile = find_crop(crop)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown crop '{crop}'")
    snapshot = _load_snapshot()
    return compute_gdd(snapshot.daily, year=_resolve_year(year), base_threshold=base, crop=profile)


@router.get("/amplitude", response_model=AmplitudeReport)
def get_amplitude(year: Optional[int] = None):
    """Thermal amplitude and critical streaks for a year."""
    snapshot = _load_snapshot()
    return analyze_amplitude(
        snapshot.daily, year=_resolve_year(year), threshold=settings.amplitude_threshold_c
    )


@router.get("/precipitation", response_model=PrecipitationReport)
def get_precipitation(year: Optional[int] = None):
    """Monthly rainfall for a year."""
    snapshot = _load_snapshot()
    return monthly_precipitation(
        snapshot.daily, year=_resolve_year(year), rain_day_threshold=settings.rain_day_threshold_mm
    )


@router.get("/years", response_model=YearsResponse)
def get_years():
    """Years offered by the long-term tabs."""
    snapshot = _load_snapshot()
    years = available_years(
        snapshot.daily,
        minimum_year=settings.history_start_year,
        extra_years=(settings.history_start_year, _now().year),
    )
    return YearsResponse(years=years)


@router.get("/crops", response_model=Dict[str, List[CropProfile]])
def get_crops():
    """Crop reference table grouped by category."""
    return crops_by_category()


@router.get("/sun", response_model=SunTimes)
def get_sun(date: Optional[dt.date] = None):
    """Dawn, sunrise, sunset and dusk at the station for a date (default today)."""
    day = date or _now().date()
    return SUN_MEMO.get(day, latitude=settings.latitude, longitude=settings.longitude, tz=settings.tz)


@router.get("/moon", response_model=MoonPhase)
def get_moon():
    """Moon phase right now."""
    return moon_phase(_now(), reference_new_moon=settings.reference_new_moon)
