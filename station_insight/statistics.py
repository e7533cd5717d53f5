"""Windowed min/max/avg/sum reduction over observation sequences."""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Union

from station_insight.domain import WindowStats
from station_insight.time_windows import epoch_in_window

FieldSelector = Union[str, Callable[[Any], Any]]


def get_field(point: Any, key: str, default=None):
    """Support attribute, dict, or Mapping access for points."""
    if point is None:
        return default
    if isinstance(point, Mapping):
        return point.get(key, default)
    return getattr(point, key, default)


def _select(point: Any, field: FieldSelector):
    """Resolve a field selector against a point."""
    if callable(field):
        return field(point)
    return get_field(point, field)


def is_number(value: Any) -> bool:
    """True for finite-or-infinite real numbers; rejects None, NaN and bools."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def numeric_values(points: Iterable[Any], field: FieldSelector) -> List[float]:
    """Values of `field` across points, skipping missing and NaN entries."""
    out: List[float] = []
    for p in points:
        value = _select(p, field)
        if is_number(value):
            out.append(float(value))
    return out


def aggregate_values(values: Sequence[float]) -> WindowStats | None:
    """Reduce bare numbers; None when nothing qualifies."""
    clean = [float(v) for v in values if is_number(v)]
    if not clean:
        return None
    total = math.fsum(clean)
    return WindowStats(
        min=min(clean),
        max=max(clean),
        avg=total / len(clean),
        sum=total,
        count=len(clean),
    )


def aggregate(
    points: Iterable[Any],
    field: FieldSelector,
    *,
    start: int | None = None,
    end: int | None = None,
    epoch_of: FieldSelector = "epoch",
) -> WindowStats | None:
    """
    Reduce `field` over the points whose epoch falls in `[start, end]`.

    Points with a missing epoch are skipped when a bound is given. Returns None
    when no numeric value qualifies; never divides by zero.
    """
    if start is None and end is None:
        return aggregate_values(numeric_values(points, field))

    in_window = []
    for p in points:
        epoch = _select(p, epoch_of)
        if not is_number(epoch):
            continue
        if epoch_in_window(epoch, start, end):
            in_window.append(p)
    return aggregate_values(numeric_values(in_window, field))
