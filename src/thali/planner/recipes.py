"""Expand a chosen meal into a saved recipe."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from thali.errors import LLMUnavailable
from thali.models.recipe import Recipe, RecipeDraft, RecipeRequestMeal
from thali.planner.llm import LLMDriver
from thali.planner.prompts import compose_recipe
from thali.planner.storage import Storage

logger = logging.getLogger(__name__)


def _merge_defaults(body: dict[str, Any], meal: RecipeRequestMeal) -> dict[str, Any]:
    """Fill gaps in the LLM answer from the meal the user picked."""

    merged = dict(body)
    merged.setdefault("mealName", meal.name)
    if not merged.get("mealName"):
        merged["mealName"] = meal.name
    if not merged.get("cuisine") and meal.cuisine:
        merged["cuisine"] = meal.cuisine
    if not merged.get("prepTime") and meal.prep_time:
        merged["prepTime"] = meal.prep_time
    if merged.get("calories") is None and meal.estimated_calories:
        merged["calories"] = meal.estimated_calories
    if not merged.get("description") and meal.description:
        merged["description"] = meal.description
    if merged.get("tips") is None:
        merged["tips"] = []
    return merged


class RecipeGenerator:
    def __init__(self, storage: Storage, driver: LLMDriver) -> None:
        self._storage = storage
        self._driver = driver

    async def generate(self, meal: RecipeRequestMeal) -> Recipe:
        """Ask the LLM for a recipe and persist it; LLM failures propagate."""

        body = await self._driver.complete(compose_recipe(meal), operation="recipe")
        try:
            draft = RecipeDraft.model_validate(_merge_defaults(body, meal))
        except ValidationError as exc:
            logger.warning("Recipe for %s failed validation: %s", meal.name, exc.errors()[:1])
            raise LLMUnavailable("LLM returned an unusable recipe") from exc
        recipe = await asyncio.to_thread(self._storage.save_recipe, draft)
        logger.info("Saved recipe %s (id=%s)", recipe.meal_name, recipe.id)
        return recipe


__all__ = ["RecipeGenerator"]
