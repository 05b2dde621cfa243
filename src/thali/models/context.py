"""Household state snapshots and the request-scoped suggestion context."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from thali.models.base import WireModel
from thali.models.meal import Cuisine, MealType

InventoryCategory = Literal["grains", "spices", "vegetables", "dairy", "proteins", "fruits", "others"]


class InventoryItem(WireModel):
    """Item currently available in the household pantry."""

    id: Optional[int] = None
    name: str = Field(min_length=1, max_length=100)
    category: InventoryCategory = "others"
    quantity: float = Field(ge=0)
    unit: str = Field(default="", max_length=20)
    low_stock_at: Optional[float] = Field(default=None, gt=0)


class MealHistoryEntry(WireModel):
    """Record of a meal the household actually ate."""

    id: Optional[int] = None
    meal_name: str = Field(min_length=1, max_length=200)
    cuisine: Cuisine
    meal_type: MealType
    eaten_at: datetime
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    calories: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)


class DayReview(WireModel):
    """End-of-day review scores (0-10)."""

    date: date
    variety: int = Field(ge=0, le=10)
    effort: int = Field(ge=0, le=10)
    satisfaction: int = Field(ge=0, le=10)
    notes: Optional[str] = Field(default=None, max_length=1000)


class WeekReview(WireModel):
    """Retrospective on a whole week; every score and note is optional."""

    week_start: date
    variety_balance: Optional[int] = Field(default=None, ge=0, le=10)
    effort_vs_satisfaction: Optional[int] = Field(default=None, ge=0, le=10)
    highlights: Optional[str] = Field(default=None, max_length=1000)
    improvements: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)


class CalorieBudget(WireModel):
    """Daily goal, calories already logged today, and what is left."""

    daily_goal: int = Field(ge=0)
    consumed: int = Field(ge=0)
    remaining: int = Field(ge=0)

    @classmethod
    def from_totals(cls, daily_goal: int, consumed: int) -> "CalorieBudget":
        consumed = max(0, consumed)
        return cls(daily_goal=daily_goal, consumed=consumed, remaining=max(0, daily_goal - consumed))


class CuisinePreference(WireModel):
    cuisine: str
    avg_rating: float
    count: int


class ReviewContext(WireModel):
    """Preference signal distilled from ratings and day reviews."""

    high_rated_meals: list[MealHistoryEntry] = Field(default_factory=list)
    low_rated_meals: list[MealHistoryEntry] = Field(default_factory=list)
    cuisine_preferences: list[CuisinePreference] = Field(default_factory=list)
    recent_day_reviews: list[DayReview] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    average_rating: Optional[float] = None

    @property
    def favorite_cuisines(self) -> list[str]:
        return [pref.cuisine for pref in self.cuisine_preferences if pref.avg_rating >= 4]


class SuggestionContext(WireModel):
    """Best-effort snapshot of household state for one request."""

    generated_at: datetime
    inventory: list[InventoryItem] = Field(default_factory=list)
    recent_meal_names: list[str] = Field(default_factory=list)
    yesterday_cuisines: list[str] = Field(default_factory=list)
    calorie_budget: Optional[CalorieBudget] = None
    review_context: ReviewContext = Field(default_factory=ReviewContext)

    @field_validator("recent_meal_names")
    @classmethod
    def drop_blank_names(cls, value: list[str]) -> list[str]:
        return [name for name in value if name and name.strip()]


__all__ = [
    "InventoryCategory",
    "InventoryItem",
    "MealHistoryEntry",
    "DayReview",
    "WeekReview",
    "CalorieBudget",
    "CuisinePreference",
    "ReviewContext",
    "SuggestionContext",
]
