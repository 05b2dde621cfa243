"""Constraint enforcement, ordering and calorie annotation for suggestions."""

from __future__ import annotations

from typing import Iterable, Sequence

from thali.models.context import SuggestionContext
from thali.models.meal import MealPayload, Suggestion
from thali.models.suggest import SuggestRequest
from thali.planner.utils import normalize_name


def excluded_names(request: SuggestRequest, context: SuggestionContext) -> set[str]:
    """Normalized names that must never be suggested: recent meals and rejections."""

    names = {normalize_name(name) for name in context.recent_meal_names}
    names.update(normalize_name(rejected.name) for rejected in request.rejected_meals)
    names.discard("")
    return names


def enforce_constraints(
    meals: Iterable[MealPayload],
    request: SuggestRequest,
    context: SuggestionContext,
) -> list[MealPayload]:
    """Drop meals violating the hard constraints, keeping input order."""

    excluded = excluded_names(request, context)
    kept: list[MealPayload] = []
    for meal in meals:
        if normalize_name(meal.name) in excluded:
            continue
        if request.cuisine and meal.cuisine != request.cuisine:
            continue
        if request.meal_type and meal.meal_type != request.meal_type:
            continue
        kept.append(meal)
    return kept


def calorie_warning(calories: int, remaining: int) -> str | None:
    if remaining > 0 and calories > remaining:
        return f"Exceeds remaining {remaining} kcal"
    return None


def process(meals: Sequence[MealPayload], context: SuggestionContext) -> list[Suggestion]:
    """Dedupe by name, order by calories/prep time/name and attach calorie warnings."""

    seen: set[str] = set()
    unique: list[MealPayload] = []
    for meal in meals:
        key = meal.name.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(meal)

    unique.sort(key=lambda meal: (meal.estimated_calories, meal.prep_time, meal.name))
    remaining = context.calorie_budget.remaining if context.calorie_budget else 0
    return [
        Suggestion(
            **meal.model_dump(),
            calorie_warning=calorie_warning(meal.estimated_calories, remaining),
        )
        for meal in unique
    ]


__all__ = ["excluded_names", "enforce_constraints", "calorie_warning", "process"]
