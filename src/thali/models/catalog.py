"""Saved meal catalog contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, field_validator

from thali.models.base import WireModel
from thali.models.meal import Cuisine, MealType

IngredientName = Annotated[str, Field(max_length=100)]


class SavedMeal(WireModel):
    """A dish kept in the household catalog, with plain-text ingredients."""

    id: Optional[int] = None
    name: str = Field(min_length=1, max_length=200)
    cuisine: Cuisine
    meal_type: MealType
    prep_time: Optional[int] = Field(default=None, gt=0, le=480)
    ingredients: list[IngredientName] = Field(default_factory=list, max_length=50)
    recipe: Optional[str] = Field(default=None, max_length=10000)
    is_custom: bool = True
    created_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


__all__ = ["SavedMeal"]
