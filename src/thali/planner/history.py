"""Calendar grouping and variety statistics over logged meals."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable

from thali.models.base import WireModel
from thali.models.context import MealHistoryEntry
from thali.planner.utils import normalize_name


class HistoryStats(WireModel):
    total_meals: int
    cuisine_distribution: dict[str, int]
    # (meal name, times eaten) for meals eaten more than once, most repeated first.
    repeated_meals: list[tuple[str, int]]
    variety_score: float


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Return ``[first day of month, first day of next month)`` as naive datetimes."""

    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def group_by_day(entries: Iterable[MealHistoryEntry]) -> dict[str, list[MealHistoryEntry]]:
    """Bucket entries by ISO date, each bucket in the order eaten."""

    grouped: dict[str, list[MealHistoryEntry]] = {}
    for entry in sorted(entries, key=lambda item: (item.eaten_at, item.id or 0)):
        grouped.setdefault(entry.eaten_at.date().isoformat(), []).append(entry)
    return grouped


def history_stats(entries: Iterable[MealHistoryEntry]) -> HistoryStats:
    """Summarize cuisine spread and repetition; names compare case-insensitively.

    ``variety_score`` is distinct meals divided by meals eaten, 0.0 when nothing was logged.
    """

    entries = list(entries)
    cuisines = Counter(entry.cuisine for entry in entries)
    counts: Counter[str] = Counter()
    display: dict[str, str] = {}
    for entry in entries:
        key = normalize_name(entry.meal_name)
        counts[key] += 1
        display.setdefault(key, entry.meal_name)

    repeated = sorted(
        ((display[key], count) for key, count in counts.items() if count > 1),
        key=lambda pair: (-pair[1], pair[0]),
    )
    variety = round(len(counts) / len(entries), 2) if entries else 0.0
    return HistoryStats(
        total_meals=len(entries),
        cuisine_distribution=dict(sorted(cuisines.items())),
        repeated_meals=repeated,
        variety_score=variety,
    )


__all__ = ["HistoryStats", "month_bounds", "group_by_day", "history_stats"]
