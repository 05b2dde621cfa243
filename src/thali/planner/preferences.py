"""Reduce rated meal history and day reviews into preference signal."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Sequence

from thali.models.context import CuisinePreference, DayReview, MealHistoryEntry, ReviewContext

HIGH_RATING_THRESHOLD = 4
LOW_RATING_THRESHOLD = 2
HIGH_RATED_LIMIT = 10
LOW_RATED_LIMIT = 5
INSIGHT_REVIEW_WINDOW = 3

SIMPLER_OPTIONS_HINT = "prefer simpler options"
NOVELTY_HINT = "prefer novelty"


def _by_rating_then_recency(entries: Iterable[MealHistoryEntry]) -> list[MealHistoryEntry]:
    return sorted(entries, key=lambda entry: (-(entry.rating or 0), -entry.eaten_at.timestamp()))


def cuisine_preferences(rated: Sequence[MealHistoryEntry]) -> list[CuisinePreference]:
    totals: dict[str, list[int]] = defaultdict(list)
    for entry in rated:
        if entry.rating is not None:
            totals[entry.cuisine].append(entry.rating)

    prefs = [
        CuisinePreference(cuisine=cuisine, avg_rating=sum(ratings) / len(ratings), count=len(ratings))
        for cuisine, ratings in totals.items()
    ]
    prefs.sort(key=lambda pref: (-pref.avg_rating, -pref.count, pref.cuisine))
    return prefs


def review_insights(day_reviews: Sequence[DayReview]) -> list[str]:
    """Derive hint strings from the most recent day reviews."""

    recent = sorted(day_reviews, key=lambda review: review.date, reverse=True)[:INSIGHT_REVIEW_WINDOW]
    insights: list[str] = []
    if any(review.effort >= 4 and review.satisfaction <= 2 for review in recent):
        insights.append(SIMPLER_OPTIONS_HINT)
    if any(review.variety <= 2 for review in recent):
        insights.append(NOVELTY_HINT)
    return insights


def analyze(
    rated_history: Sequence[MealHistoryEntry],
    day_reviews: Sequence[DayReview],
) -> ReviewContext:
    """Build a :class:`ReviewContext`; pure and order-independent in its inputs."""

    rated = [entry for entry in rated_history if entry.rating is not None]
    high = _by_rating_then_recency(e for e in rated if e.rating >= HIGH_RATING_THRESHOLD)
    low = _by_rating_then_recency(e for e in rated if e.rating <= LOW_RATING_THRESHOLD)
    average = round(sum(e.rating for e in rated) / len(rated), 2) if rated else None

    return ReviewContext(
        high_rated_meals=high[:HIGH_RATED_LIMIT],
        low_rated_meals=low[:LOW_RATED_LIMIT],
        cuisine_preferences=cuisine_preferences(rated),
        recent_day_reviews=sorted(day_reviews, key=lambda review: review.date, reverse=True),
        insights=review_insights(day_reviews),
        average_rating=average,
    )


__all__ = [
    "SIMPLER_OPTIONS_HINT",
    "NOVELTY_HINT",
    "analyze",
    "cuisine_preferences",
    "review_insights",
]
