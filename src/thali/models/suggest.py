"""Suggestion request/response contracts."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from thali.models.base import WireModel
from thali.models.context import CalorieBudget
from thali.models.meal import Cuisine, MealType, Suggestion


class RejectedMeal(WireModel):
    name: str = Field(max_length=200)
    reason: Optional[str] = Field(default=None, max_length=500)


class SuggestRequest(WireModel):
    mood: Optional[str] = Field(default=None, max_length=50)
    time_available: Optional[str] = Field(default=None, max_length=10)
    cuisine: Optional[Cuisine] = None
    meal_type: Optional[MealType] = None
    rejected_meals: list[RejectedMeal] = Field(default_factory=list, max_length=20)


class SuggestResponse(WireModel):
    suggestions: list[Suggestion] = Field(default_factory=list)
    calorie_info: CalorieBudget


class ChatMessage(WireModel):
    role: Literal["user", "assistant"]
    content: str = Field(max_length=2000)


class ChatSuggestRequest(WireModel):
    """A free-form conversation about what to eat, oldest turn first."""

    meal_type: Optional[MealType] = None
    conversation: list[ChatMessage] = Field(max_length=50)


class ChatSuggestResponse(WireModel):
    message: str
    suggestions: list[Suggestion] = Field(default_factory=list)
    calorie_info: CalorieBudget


__all__ = [
    "RejectedMeal",
    "SuggestRequest",
    "SuggestResponse",
    "ChatMessage",
    "ChatSuggestRequest",
    "ChatSuggestResponse",
]
