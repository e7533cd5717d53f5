"""Approximate solar ephemeris: civil dawn, sunrise, sunset and civil dusk.

Method: low-order solar position approximation.

  declination  = 23.45 * sin(360/365 * (doy - 81))            degrees
  eq. of time  = 9.87  * sin(2 * 360/365 * (doy - 81))        minutes
  cos(H)       = (cos(Z) - sin(lat) sin(decl)) / (cos(lat) cos(decl))
  solar noon   = 12 - lon/15 - eot/60 + utc_offset            local hours
  event        = solar noon -/+ H/15

Z = 90.833 deg for sunrise/sunset (refraction + solar radius) and 96 deg for
civil dawn/dusk. The UTC offset is the station timezone's offset on that
date, so daylight-saving shifts are honoured.

Accuracy: a few minutes against almanac values at mid-latitudes. The
declination and equation-of-time terms are single sinusoids, so errors grow
near the poles and around the equinoxes. Do not use for navigation.
"""

from __future__ import annotations

import datetime as dt
import math
from collections import OrderedDict
from typing import Tuple

from station_insight.domain import SunTimes
from station_insight.time_windows import as_aware, day_of_year, local_midnight

SUNRISE_ZENITH = 90.833
CIVIL_ZENITH = 96.0

DEFAULT_MEMO_ENTRIES = 32


def solar_declination(doy: int) -> float:
    """Approximate solar declination in degrees."""
    return 23.45 * math.sin(math.radians(360.0 / 365.0 * (doy - 81)))


def equation_of_time_minutes(doy: int) -> float:
    """Approximate equation of time in minutes."""
    return 9.87 * math.sin(math.radians(2 * (360.0 / 365.0 * (doy - 81))))


def hour_angle(zenith: float, latitude: float, declination: float) -> float | None:
    """Hour angle in degrees at which the sun reaches `zenith`.

    None when the sun never crosses that zenith (|cos H| > 1).
    """
    lat = math.radians(latitude)
    decl = math.radians(declination)
    cos_h = (math.cos(math.radians(zenith)) - math.sin(lat) * math.sin(decl)) / (
        math.cos(lat) * math.cos(decl)
    )
    if cos_h > 1 or cos_h < -1:
        return None
    return math.degrees(math.acos(cos_h))


def _utc_offset_hours(day: dt.date, tz: dt.tzinfo) -> float:
    """UTC offset of `tz` at local noon on `day`."""
    offset = dt.datetime(day.year, day.month, day.day, 12, tzinfo=tz).utcoffset()
    return offset.total_seconds() / 3600.0 if offset is not None else 0.0


def _local_clock(day: dt.date, hours: float, tz: dt.tzinfo) -> dt.datetime:
    """Wall-clock instant `hours` after local midnight, truncated to the minute."""
    whole = math.floor(hours)
    minutes = math.floor((hours - whole) * 60)
    return local_midnight(day, tz) + dt.timedelta(hours=whole, minutes=minutes)


def compute_sun_times(
    day: dt.date,
    *,
    latitude: float,
    longitude: float,
    tz: dt.tzinfo,
) -> SunTimes:
    """Compute dawn/sunrise/sunset/dusk for `day` at the given location.

    Each pair is left as None when its hour angle has no solution (polar day or
    night). When all four exist they satisfy dawn <= sunrise <= sunset <= dusk.
    """
    doy = day_of_year(day)
    declination = solar_declination(doy)
    eot = equation_of_time_minutes(doy)
    solar_noon = 12.0 - longitude / 15.0 - eot / 60.0 + _utc_offset_hours(day, tz)

    times = SunTimes(date=day)

    ha_sunrise = hour_angle(SUNRISE_ZENITH, latitude, declination)
    if ha_sunrise is not None:
        times.sunrise = _local_clock(day, solar_noon - ha_sunrise / 15.0, tz)
        times.sunset = _local_clock(day, solar_noon + ha_sunrise / 15.0, tz)

    ha_dawn = hour_angle(CIVIL_ZENITH, latitude, declination)
    if ha_dawn is not None:
        times.dawn = _local_clock(day, solar_noon - ha_dawn / 15.0, tz)
        times.dusk = _local_clock(day, solar_noon + ha_dawn / 15.0, tz)

    return times


def is_night(now: dt.datetime | int | float, sun: SunTimes) -> bool:
    """Night is before civil dawn or after civil dusk.

    Falls back to sunrise/sunset when dawn/dusk are undefined, and to day
    (False) when no crossing is defined at all.
    """
    moment = as_aware(now)
    if sun.dawn is not None and sun.dusk is not None:
        return moment > sun.dusk or moment < sun.dawn
    if sun.sunrise is not None and sun.sunset is not None:
        return moment > sun.sunset or moment < sun.sunrise
    return False


class SunTimesMemo:
    """Caller-owned LRU memo of sun times keyed by (date, latitude, longitude, tz).

    At most `max_entries` dates are kept; the least recently used one is
    evicted first.
    """

    def __init__(self, max_entries: int = DEFAULT_MEMO_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[Tuple[dt.date, float, float, str], SunTimes] = OrderedDict()

    def get(self, day: dt.date, *, latitude: float, longitude: float, tz: dt.tzinfo) -> SunTimes:
        """Return memoized sun times, computing them on first use."""
        key = (day, latitude, longitude, str(tz))
        cached = self._entries.get(key)
        if cached is None:
            cached = compute_sun_times(day, latitude=latitude, longitude=longitude, tz=tz)
            self._entries[key] = cached
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        else:
            self._entries.move_to_end(key)
        return cached.model_copy()

    def clear(self) -> None:
        """Drop every memoized entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
