"""Meal plan slot and week generation contracts."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field

from thali.models.base import WireModel
from thali.models.meal import MealPayload, MealType

DayName = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
DAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
PLANNED_MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner")


class PlanSlot(WireModel):
    """A meal scheduled for a (date, mealType) slot."""

    id: Optional[int] = None
    date: date
    meal_type: MealType
    meal: MealPayload


class PlannedDay(WireModel):
    day: DayName
    date: date
    meals: dict[str, MealPayload] = Field(default_factory=dict)


class WeekPlanResult(WireModel):
    success: bool = True
    week_start: date
    week_plan: list[PlannedDay] = Field(default_factory=list)
    created_plans: int = 0
    slots: list[PlanSlot] = Field(default_factory=list, exclude=True)


__all__ = [
    "DayName",
    "DAY_NAMES",
    "PLANNED_MEAL_TYPES",
    "PlanSlot",
    "PlannedDay",
    "WeekPlanResult",
]
