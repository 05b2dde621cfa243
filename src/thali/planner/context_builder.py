"""Assemble the request-scoped suggestion context from storage."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar

from thali.config import Settings, get_settings
from thali.errors import StorageError
from thali.models.context import CalorieBudget, MealHistoryEntry, SuggestionContext
from thali.planner.preferences import analyze
from thali.planner.storage import Storage
from thali.planner.utils import normalize_name, start_of_day

logger = logging.getLogger(__name__)

RECENT_MEALS_DAYS = 14
YESTERDAY_WINDOW = timedelta(hours=24)
REVIEW_WINDOW_DAYS = 30
DAY_REVIEW_LIMIT = 7
DAILY_CALORIE_GOAL_KEY = "dailyCalorieGoal"

T = TypeVar("T")


def distinct_meal_names(history: list[MealHistoryEntry]) -> list[str]:
    """Distinct names in input order (most recent first), compared case-insensitively."""

    seen: set[str] = set()
    names: list[str] = []
    for entry in history:
        key = normalize_name(entry.meal_name)
        if not key or key in seen:
            continue
        seen.add(key)
        names.append(entry.meal_name.strip())
    return names


class _Fetch:
    """Outcome of one storage sub-fetch; failures degrade to ``fallback``."""

    def __init__(self, name: str, value: Any, error: Optional[StorageError] = None) -> None:
        self.name = name
        self.value = value
        self.error = error


class ContextAssembler:
    """Gather household state in parallel into a :class:`SuggestionContext`."""

    def __init__(self, storage: Storage, settings: Optional[Settings] = None) -> None:
        self._storage = storage
        self._settings = settings or get_settings()

    async def _fetch(self, name: str, call: Callable[[], T], fallback: T) -> _Fetch:
        try:
            return _Fetch(name, await asyncio.to_thread(call))
        except StorageError as exc:
            logger.warning("Context sub-fetch %s failed; using empty value: %s", name, exc)
            return _Fetch(name, fallback, exc)

    def _calorie_goal(self) -> int:
        stored = self._storage.get_preference(DAILY_CALORIE_GOAL_KEY)
        if stored is None or isinstance(stored, bool):
            return self._settings.default_calorie_goal
        try:
            goal = int(float(stored))
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric %s preference: %r", DAILY_CALORIE_GOAL_KEY, stored)
            return self._settings.default_calorie_goal
        return goal if goal > 0 else self._settings.default_calorie_goal

    def _consumed_today(self, now: datetime) -> int:
        day_start = start_of_day(now)
        entries = self._storage.list_history(day_start, day_start + timedelta(days=1))
        return sum(entry.calories or 0 for entry in entries)

    async def build(self, now: Optional[datetime] = None) -> SuggestionContext:
        """Return a best-effort context; raises only when every sub-fetch failed."""

        now = now or datetime.now()
        day_start = start_of_day(now)
        storage = self._storage
        review_since = day_start - timedelta(days=REVIEW_WINDOW_DAYS)

        tasks: list[Awaitable[_Fetch]] = [
            self._fetch("inventory", storage.list_inventory, []),
            self._fetch(
                "recent_meals",
                lambda: storage.list_history(day_start - timedelta(days=RECENT_MEALS_DAYS)),
                [],
            ),
            self._fetch(
                "yesterday_cuisines",
                lambda: storage.list_history(now - YESTERDAY_WINDOW),
                [],
            ),
            self._fetch("calorie_goal", self._calorie_goal, self._settings.default_calorie_goal),
            self._fetch("consumed_today", lambda: self._consumed_today(now), 0),
            self._fetch(
                "rated_history",
                lambda: storage.list_history(review_since, rated_only=True),
                [],
            ),
            self._fetch(
                "day_reviews",
                lambda: storage.list_day_reviews(review_since.date(), DAY_REVIEW_LIMIT),
                [],
            ),
        ]
        results = {fetch.name: fetch for fetch in await asyncio.gather(*tasks)}

        failures = [fetch.error for fetch in results.values() if fetch.error is not None]
        if len(failures) == len(results):
            raise failures[0]

        yesterday = results["yesterday_cuisines"].value
        day_reviews = results["day_reviews"].value[:DAY_REVIEW_LIMIT]

        return SuggestionContext(
            generated_at=now,
            inventory=results["inventory"].value,
            recent_meal_names=distinct_meal_names(results["recent_meals"].value),
            yesterday_cuisines=sorted({entry.cuisine for entry in yesterday}),
            calorie_budget=CalorieBudget.from_totals(
                results["calorie_goal"].value, results["consumed_today"].value
            ),
            review_context=analyze(results["rated_history"].value, day_reviews),
        )


__all__ = ["DAILY_CALORIE_GOAL_KEY", "ContextAssembler", "distinct_meal_names"]
