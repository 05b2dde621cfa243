"""Meal payload contracts produced by the LLM and embedded in plan slots."""

from __future__ import annotations

from typing import Any, Literal, Optional, get_args

from pydantic import Field, field_validator, model_validator

from thali.models.base import WireModel

Cuisine = Literal[
    "indian",
    "south_indian",
    "north_indian",
    "indian_fusion",
    "chinese",
    "japanese",
    "korean",
    "thai",
    "italian",
    "french",
    "mediterranean",
    "middle_eastern",
    "mexican",
    "american",
    "continental",
    "street_food",
    "other",
]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]

# Shared by request validation, LLM output validation and the prompt schema.
CUISINES: tuple[str, ...] = get_args(Cuisine)
MEAL_TYPES: tuple[str, ...] = get_args(MealType)

DEFAULT_INGREDIENT_UNIT = "pieces"


def coerce_quantity(value: Any) -> float:
    """Return ``value`` as a positive float, defaulting to 1.0 when unusable."""

    if isinstance(value, bool):
        return 1.0
    if isinstance(value, str):
        value = value.strip()
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 1.0
    if parsed != parsed or parsed <= 0:  # NaN or non-positive
        return 1.0
    return parsed


class Ingredient(WireModel):
    """Ingredient line; tolerates the legacy ``item`` key and string quantities."""

    name: str = Field(min_length=1, max_length=200)
    quantity: float = Field(default=1.0, gt=0)
    unit: str = Field(default=DEFAULT_INGREDIENT_UNIT, max_length=40)

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        normalized = dict(data)
        if not normalized.get("name") and normalized.get("item"):
            normalized["name"] = normalized["item"]
        normalized.pop("item", None)
        normalized["quantity"] = coerce_quantity(normalized.get("quantity"))
        unit = normalized.get("unit")
        if not isinstance(unit, str) or not unit.strip():
            normalized["unit"] = DEFAULT_INGREDIENT_UNIT
        return normalized

    @field_validator("name", "unit")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()


class MealPayload(WireModel):
    """A single meal as described by the LLM."""

    name: str = Field(min_length=1, max_length=200)
    cuisine: Cuisine
    meal_type: MealType
    prep_time: int = Field(ge=1, le=480)
    estimated_calories: int = Field(ge=0, le=5000)
    ingredients: list[Ingredient] = Field(default_factory=list, max_length=50)
    reason: str = Field(default="", max_length=500)
    description: str = Field(default="", max_length=1000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


class Suggestion(MealPayload):
    """Meal payload annotated for the caller's remaining calorie budget."""

    calorie_warning: Optional[str] = None


__all__ = [
    "Cuisine",
    "MealType",
    "CUISINES",
    "MEAL_TYPES",
    "DEFAULT_INGREDIENT_UNIT",
    "coerce_quantity",
    "Ingredient",
    "MealPayload",
    "Suggestion",
]
