"""Recipe models produced by expanding a chosen meal."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from thali.models.base import WireModel
from thali.models.meal import Cuisine, Ingredient


class RecipeRequestMeal(WireModel):
    """The meal the user picked, as sent back by the client."""

    name: str = Field(min_length=1, max_length=200)
    cuisine: Optional[Cuisine] = None
    prep_time: Optional[int] = Field(default=None, gt=0, le=480)
    estimated_calories: Optional[int] = Field(default=None, gt=0, le=5000)
    description: Optional[str] = Field(default=None, max_length=1000)


class RecipeDraft(WireModel):
    """Recipe body as returned by the LLM."""

    meal_name: str = Field(min_length=1, max_length=200)
    cuisine: Cuisine = "other"
    prep_time: int = Field(default=30, ge=1, le=480)
    cook_time: int = Field(default=20, ge=0, le=480)
    servings: int = Field(default=2, ge=1, le=20)
    ingredients: list[Ingredient] = Field(default_factory=list, max_length=50)
    instructions: list[str] = Field(min_length=1, max_length=40)
    tips: list[str] = Field(default_factory=list, max_length=10)
    description: str = Field(default="", max_length=1000)
    calories: Optional[int] = Field(default=None, ge=0, le=5000)


class Recipe(RecipeDraft):
    id: int
    created_at: Optional[datetime] = None


__all__ = ["RecipeRequestMeal", "RecipeDraft", "Recipe"]
