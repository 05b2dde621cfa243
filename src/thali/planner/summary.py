"""Review summary built from the same context bundle the suggestion flow uses."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from thali.models.base import WireModel
from thali.models.context import CalorieBudget, CuisinePreference, DayReview, MealHistoryEntry
from thali.planner.context_builder import ContextAssembler


class ReviewSummary(WireModel):
    high_rated_meals: list[MealHistoryEntry] = Field(default_factory=list)
    low_rated_meals: list[MealHistoryEntry] = Field(default_factory=list)
    average_rating: Optional[float] = None
    cuisine_preferences: list[CuisinePreference] = Field(default_factory=list)
    favorite_cuisines: list[str] = Field(default_factory=list)
    recent_day_reviews: list[DayReview] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    calorie_info: Optional[CalorieBudget] = None


async def build_review_summary(
    assembler: ContextAssembler,
    now: Optional[datetime] = None,
) -> ReviewSummary:
    context = await assembler.build(now)
    review = context.review_context
    return ReviewSummary(
        high_rated_meals=review.high_rated_meals,
        low_rated_meals=review.low_rated_meals,
        average_rating=review.average_rating,
        cuisine_preferences=review.cuisine_preferences,
        favorite_cuisines=review.favorite_cuisines,
        recent_day_reviews=review.recent_day_reviews,
        insights=review.insights,
        calorie_info=context.calorie_budget,
    )


__all__ = ["ReviewSummary", "build_review_summary"]
