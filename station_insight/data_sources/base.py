"""Interfaces and helpers for station data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Protocol

from station_insight.domain import DailyPoint, HourlyPoint, Observation


class StationDataSource(Protocol):
    """Interface for anything that can provide station observations and history."""

    def fetch_current(self, **kwargs) -> Observation:
        """Return the latest observation."""
        ...

    def fetch_hourly(self, **kwargs) -> List[HourlyPoint]:
        """Return recent hourly history, sorted by epoch."""
        ...

    def fetch_daily(self, **kwargs) -> List[DailyPoint]:
        """Return long-term daily history, unique by date and sorted by epoch."""
        ...


@dataclass
class CallableStationDataSource(StationDataSource):
    """Wrap three callables so they can be swapped for different backends."""

    current: Callable[..., Observation]
    hourly: Callable[..., List[HourlyPoint]]
    daily: Callable[..., List[DailyPoint]]

    def fetch_current(self, **kwargs) -> Observation:
        return self.current(**kwargs)

    def fetch_hourly(self, **kwargs) -> List[HourlyPoint]:
        return self.hourly(**kwargs)

    def fetch_daily(self, **kwargs) -> List[DailyPoint]:
        return self.daily(**kwargs)
