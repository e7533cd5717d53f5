"""Ingestion invariants for hourly and daily history sequences."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from station_insight.domain import DailyPoint, HourlyPoint
from station_insight.statistics import is_number
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="station_insight/history")


def merge_daily_history(batches: Iterable[Iterable[DailyPoint]]) -> List[DailyPoint]:
    """Flatten daily batches into one series, unique by calendar date.

    A later record for the same date replaces the earlier one. The result is
    sorted by epoch ascending.
    """
    by_date: Dict = {}
    for batch in batches:
        for point in batch:
            by_date[point.date] = point
    merged = sorted(by_date.values(), key=lambda p: p.epoch)
    logger.debug("Merged daily history", extra={"days": len(merged)})
    return merged


def normalize_hourly(points: Iterable[HourlyPoint]) -> List[HourlyPoint]:
    """Drop rows without a numeric temperature, dedupe by epoch (last wins) and sort."""
    by_epoch: Dict[int, HourlyPoint] = {}
    dropped = 0
    for point in points:
        if not is_number(point.temp):
            dropped += 1
            continue
        by_epoch[point.epoch] = point
    if dropped:
        logger.debug("Dropped hourly rows without temperature", extra={"dropped": dropped})
    return [by_epoch[epoch] for epoch in sorted(by_epoch)]


def filter_year(daily: Sequence[DailyPoint], year: int) -> List[DailyPoint]:
    """Days of `year`, sorted by epoch ascending."""
    return sorted((d for d in daily if d.date.year == year), key=lambda d: d.epoch)


def sorted_by_epoch(points: Iterable) -> List:
    """Copy of `points` sorted by their `epoch` attribute."""
    return sorted(points, key=lambda p: p.epoch)
