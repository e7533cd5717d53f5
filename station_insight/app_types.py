"""Shared dataclasses and lightweight types used across modules."""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from station_insight.station_service import StationSnapshot


@dataclass
class CachedSnapshot:
    """StationSnapshot payload with the timestamp it was fetched."""
    data: StationSnapshot
    fetched_at: datetime

    def is_fresh(self, now: datetime, ttl_seconds: float) -> bool:
        """True while the snapshot is younger than `ttl_seconds`."""
        return (now - self.fetched_at).total_seconds() < ttl_seconds


class SnapshotCache:
    """Thread-safe holder for the latest snapshot; refreshes replace it wholesale."""

    def __init__(self) -> None:
        self._entry: Optional[CachedSnapshot] = None
        self._lock = threading.Lock()

    def get(self, loader: Callable[[], StationSnapshot], *, now: datetime, ttl_seconds: float) -> StationSnapshot:
        """Return the cached snapshot while fresh, else load and store a new one."""
        with self._lock:
            entry = self._entry
            if entry is not None and entry.is_fresh(now, ttl_seconds):
                return entry.data
            snapshot = loader()
            self._entry = CachedSnapshot(data=snapshot, fetched_at=now)
            return snapshot

    def clear(self) -> None:
        with self._lock:
            self._entry = None
