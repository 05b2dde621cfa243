"""Prompt composition for suggestions, chat, week plans and recipes.

Every function here is pure: identical inputs render byte-identical prompts, so
responses can be cached and tests can compare prompts verbatim. JSON schemas are
dumped with sorted keys for the same reason.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from thali.models.context import InventoryItem, ReviewContext, SuggestionContext
from thali.models.meal import CUISINES, MEAL_TYPES
from thali.models.plan import DAY_NAMES, PLANNED_MEAL_TYPES
from thali.models.recipe import RecipeRequestMeal
from thali.models.suggest import ChatSuggestRequest, SuggestRequest
from thali.planner.utils import format_quantity, week_dates

SUGGESTION_COUNT = 3
LOW_BUDGET_THRESHOLD = 500

# Rejection reasons matching this pattern carry a positive request ("I want chicken curry").
POSITIVE_PREFERENCE_PATTERN = re.compile(
    r"\b(want|prefer|need|give|craving|looking for|in the mood for)\b",
    re.IGNORECASE,
)

SYSTEM_PROMPT = (
    "You are a culinary advisor for a food-loving household that hates eating the same thing twice. "
    "You suggest creative, well-crafted Indian and international home-cooked meals with realistic "
    "prep times and calorie estimates for typical portions. "
    "Always respond with valid JSON only. Do not emit prose, Markdown, or keys outside the schema."
)

WEEK_SYSTEM_PROMPT = (
    "You are a household meal planner who builds varied, practical weekly plans of Indian and "
    "international home cooking. Always respond with valid JSON only. Do not emit prose, Markdown, "
    "or keys outside the schema."
)

RECIPE_SYSTEM_PROMPT = (
    "You are a home-cooking instructor who writes clear, reliable recipes with precise quantities. "
    "Always respond with valid JSON only."
)

CHAT_SYSTEM_PROMPT = (
    "You are a friendly culinary assistant helping a food-loving household find exciting meals. "
    "They hate boring, repetitive food. Keep your chat to one or two sentences, ask one clarifying "
    "question when the request is vague, and always include concrete suggestions. "
    "Always respond with valid JSON only."
)

# Sent as the only user turn when the conversation is empty.
CHAT_OPENER = "Suggest a few meals for me."

INGREDIENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["name", "quantity", "unit"],
    "properties": {
        "name": {"type": "string", "maxLength": 200},
        "quantity": {"type": "number", "exclusiveMinimum": 0},
        "unit": {"type": "string", "maxLength": 40},
    },
}

MEAL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": [
        "name",
        "cuisine",
        "mealType",
        "prepTime",
        "estimatedCalories",
        "ingredients",
        "reason",
        "description",
    ],
    "properties": {
        "name": {"type": "string", "minLength": 1, "maxLength": 200},
        "cuisine": {"enum": list(CUISINES)},
        "mealType": {"enum": list(MEAL_TYPES)},
        "prepTime": {"type": "integer", "minimum": 1, "maximum": 480},
        "estimatedCalories": {"type": "integer", "minimum": 0, "maximum": 5000},
        "ingredients": {"type": "array", "maxItems": 50, "items": INGREDIENT_SCHEMA},
        "reason": {"type": "string", "maxLength": 500},
        "description": {"type": "string", "maxLength": 1000},
    },
}

SUGGESTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["suggestions"],
    "properties": {
        "suggestions": {
            "type": "array",
            "minItems": SUGGESTION_COUNT,
            "maxItems": SUGGESTION_COUNT,
            "items": MEAL_SCHEMA,
        }
    },
}

CHAT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["message", "suggestions"],
    "properties": {
        "message": {"type": "string", "maxLength": 2000},
        "suggestions": {"type": "array", "maxItems": SUGGESTION_COUNT, "items": MEAL_SCHEMA},
    },
}

WEEK_PLAN_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["weekPlan"],
    "properties": {
        "weekPlan": {
            "type": "array",
            "minItems": 7,
            "maxItems": 7,
            "items": {
                "type": "object",
                "required": ["day", "meals"],
                "properties": {
                    "day": {"enum": list(DAY_NAMES)},
                    "meals": {
                        "type": "object",
                        "required": list(PLANNED_MEAL_TYPES),
                        "properties": {meal_type: MEAL_SCHEMA for meal_type in PLANNED_MEAL_TYPES},
                    },
                },
            },
        }
    },
}

RECIPE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["mealName", "cuisine", "prepTime", "cookTime", "servings", "ingredients", "instructions"],
    "properties": {
        "mealName": {"type": "string", "maxLength": 200},
        "cuisine": {"enum": list(CUISINES)},
        "prepTime": {"type": "integer", "minimum": 1, "maximum": 480},
        "cookTime": {"type": "integer", "minimum": 0, "maximum": 480},
        "servings": {"type": "integer", "minimum": 1, "maximum": 20},
        "ingredients": {"type": "array", "maxItems": 50, "items": INGREDIENT_SCHEMA},
        "instructions": {"type": "array", "minItems": 1, "items": {"type": "string"}},
        "tips": {"type": "array", "maxItems": 10, "items": {"type": "string"}},
        "description": {"type": "string", "maxLength": 1000},
        "calories": {"type": "integer", "minimum": 0, "maximum": 5000},
    },
}


@dataclass(frozen=True)
class ComposedPrompt:
    """Rendered prompt ready for the chat completions endpoint."""

    system: str
    user: str
    schema: dict[str, Any] = field(default_factory=dict)
    # Prior chat turns as (role, content), sent after the user message.
    turns: tuple[tuple[str, str], ...] = ()

    def messages(self) -> list[dict[str, str]]:
        rendered = [{"role": "system", "content": self.system}]
        if self.user:
            rendered.append({"role": "user", "content": self.user})
        rendered.extend({"role": role, "content": content} for role, content in self.turns)
        return rendered


def _render_schema(schema: dict[str, Any]) -> str:
    return json.dumps(schema, sort_keys=True, indent=2)


def _join_or_none(values: list[str]) -> str:
    return ", ".join(values) if values else "none"


def format_inventory(inventory: list[InventoryItem]) -> str:
    """Render pantry items as ``name (quantity unit)`` or ``Not specified``."""

    rendered = []
    for item in inventory:
        amount = format_quantity(item.quantity)
        unit = item.unit.strip()
        rendered.append(f"{item.name} ({amount} {unit})" if unit else f"{item.name} ({amount})")
    return ", ".join(rendered) if rendered else "Not specified"


def extract_positive_preferences(request: SuggestRequest) -> str:
    """Join rejection reasons that express what the user wants instead."""

    reasons = [
        rejected.reason.strip()
        for rejected in request.rejected_meals
        if rejected.reason and POSITIVE_PREFERENCE_PATTERN.search(rejected.reason)
    ]
    return "; ".join(reasons)


def _calorie_lines(context: SuggestionContext) -> list[str]:
    budget = context.calorie_budget
    if budget is None:
        return []
    return [
        "CALORIE CONTEXT:",
        f"- Daily goal: {budget.daily_goal} kcal",
        f"- Already consumed today: {budget.consumed} kcal",
        f"- Remaining budget: {budget.remaining} kcal",
        f"- If the remaining budget is below {LOW_BUDGET_THRESHOLD} kcal prefer lighter options; "
        "still include variety.",
        "",
    ]


def _rejected_list(request: SuggestRequest) -> str:
    rendered = []
    for rejected in request.rejected_meals:
        name = rejected.name.strip()
        if not name:
            continue
        reason = (rejected.reason or "").strip()
        rendered.append(f"{name} (reason: {reason})" if reason else name)
    return _join_or_none(rendered)


def _constraint_lines(request: SuggestRequest, context: SuggestionContext) -> list[str]:
    cuisine_rule = (
        f'5. ALL suggestions MUST be authentic "{request.cuisine}" dishes; set cuisine to "{request.cuisine}".'
        if request.cuisine
        else "5. Suggest diverse cuisines."
    )
    meal_type_rule = (
        f'6. ALL suggestions MUST be appropriate for {request.meal_type}; set mealType to "{request.meal_type}".'
        if request.meal_type
        else "6. Any meal type is acceptable."
    )
    return [
        "HARD CONSTRAINTS:",
        f"1. NEVER suggest any of these recently eaten meals: {_join_or_none(context.recent_meal_names)}",
        f"2. AVOID these cuisines (eaten yesterday): {_join_or_none(context.yesterday_cuisines)}",
        f"3. NEVER suggest these rejected meals: {_rejected_list(request)}",
        "4. Learn from rejection reasons: if a meal was rejected as too heavy, suggest lighter options.",
        cuisine_rule,
        meal_type_rule,
        "",
    ]


def _review_lines(review: ReviewContext) -> list[str]:
    lines: list[str] = []
    if review.high_rated_meals:
        rendered = ", ".join(f"{m.meal_name} ({m.rating}/5)" for m in review.high_rated_meals)
        lines.append(f"- HIGHLY RATED MEALS (prefer similar): {rendered}")
    if review.low_rated_meals:
        rendered = ", ".join(f"{m.meal_name} ({m.rating}/5)" for m in review.low_rated_meals)
        lines.append(f"- LOW RATED MEALS (avoid similar): {rendered}")
    if review.favorite_cuisines:
        lines.append(f"- FAVORITE CUISINES: {', '.join(review.favorite_cuisines)}")
    for insight in review.insights:
        lines.append(f"- INSIGHT: {insight}")
    if not lines:
        return []
    return ["USER PREFERENCES FROM PAST REVIEWS:", *lines, ""]


def _user_context_lines(request: SuggestRequest) -> list[str]:
    time_available = (request.time_available or "").strip()
    return [
        "USER CONTEXT:",
        f"- Mood: {(request.mood or '').strip() or 'not specified'}",
        f"- Time available: {f'{time_available} minutes' if time_available else 'not specified'}",
        f"- Preferred cuisine: {request.cuisine or 'any'}",
        f"- Meal type: {request.meal_type or 'any'}",
        "",
    ]


def compose(request: SuggestRequest, context: SuggestionContext) -> ComposedPrompt:
    """Render the single-meal suggestion prompt."""

    lines = _calorie_lines(context)
    lines.extend(_constraint_lines(request, context))

    positive = extract_positive_preferences(request)
    if positive:
        lines.extend([f'USER REQUEST - prioritize this: "{positive}"', ""])

    lines.extend(_review_lines(context.review_context))
    lines.extend(_user_context_lines(request))
    lines.extend(["AVAILABLE INGREDIENTS:", format_inventory(context.inventory), ""])
    lines.extend(
        [
            "OUTPUT FORMAT:",
            f"Respond with JSON only, exactly matching this schema, with exactly {SUGGESTION_COUNT} suggestions. "
            "Use only the cuisine and mealType values the schema allows.",
            _render_schema(SUGGESTION_SCHEMA),
        ]
    )
    return ComposedPrompt(system=SYSTEM_PROMPT, user="\n".join(lines), schema=SUGGESTION_SCHEMA)


def compose_week(context: SuggestionContext, week_start: date) -> ComposedPrompt:
    """Render the 7-day breakfast/lunch/dinner planning prompt."""

    dates = week_dates(week_start)
    lines: list[str] = []
    if context.calorie_budget is not None:
        lines.extend(
            [
                f"Daily calorie goal: {context.calorie_budget.daily_goal} kcal. "
                "Keep each day's three meals close to it.",
                "",
            ]
        )
    lines.extend(
        [
            f"Plan every meal for the week of {dates[0].isoformat()} to {dates[-1].isoformat()}.",
            "",
            "HARD CONSTRAINTS:",
            f"1. Do not plan any of these recently eaten meals: {_join_or_none(context.recent_meal_names)}",
            "2. Do not repeat a dish within the week.",
            "3. Breakfasts must suit breakfast, lunches lunch, dinners dinner; set mealType accordingly.",
            "4. Keep weekday (Monday-Friday) prep times under 45 minutes.",
            "",
        ]
    )
    lines.extend(_review_lines(context.review_context))
    lines.extend(["AVAILABLE INGREDIENTS:", format_inventory(context.inventory), ""])
    lines.extend(
        [
            "OUTPUT FORMAT:",
            "Respond with JSON only, exactly matching this schema. Include all seven days "
            f"({', '.join(DAY_NAMES)}), each with {', '.join(PLANNED_MEAL_TYPES)}. "
            "List ingredient quantities for two people.",
            _render_schema(WEEK_PLAN_SCHEMA),
        ]
    )
    return ComposedPrompt(system=WEEK_SYSTEM_PROMPT, user="\n".join(lines), schema=WEEK_PLAN_SCHEMA)


def compose_recipe(meal: RecipeRequestMeal, servings: Optional[int] = None) -> ComposedPrompt:
    """Render the prompt expanding a chosen meal into a full recipe."""

    lines = [f"Write a detailed recipe for: {meal.name}"]
    if meal.cuisine:
        lines.append(f"- Cuisine: {meal.cuisine}")
    if meal.description:
        lines.append(f"- Description: {meal.description}")
    if meal.prep_time:
        lines.append(f"- Target total time: about {meal.prep_time} minutes")
    if meal.estimated_calories:
        lines.append(f"- Approximate calories per serving: {meal.estimated_calories}")
    lines.append(f"- Servings: {servings or 2}")
    lines.extend(
        [
            "",
            "Instructions must be short imperative steps in order. Tips are optional.",
            "OUTPUT FORMAT:",
            "Respond with JSON only, exactly matching this schema.",
            _render_schema(RECIPE_SCHEMA),
        ]
    )
    return ComposedPrompt(system=RECIPE_SYSTEM_PROMPT, user="\n".join(lines), schema=RECIPE_SCHEMA)


def compose_chat(request: ChatSuggestRequest, context: SuggestionContext) -> ComposedPrompt:
    """Render the conversational prompt; household context rides in the system message."""

    lines = [CHAT_SYSTEM_PROMPT, ""]
    lines.extend(_calorie_lines(context))
    lines.extend(
        [
            "CONTEXT:",
            f"- Meal type: {request.meal_type or 'any (the user will say)'}",
            f"- Recently eaten (never suggest these): {_join_or_none(context.recent_meal_names)}",
            f"- Available ingredients: {format_inventory(context.inventory)}",
            "",
        ]
    )
    lines.extend(_review_lines(context.review_context))
    meal_type_rule = (
        f'Every suggestion must suit {request.meal_type}; set mealType to "{request.meal_type}".'
        if request.meal_type
        else "Pick the mealType that fits what the user asks for."
    )
    lines.extend(
        [
            "OUTPUT FORMAT:",
            f"Respond with JSON only, exactly matching this schema, with at most {SUGGESTION_COUNT} "
            f"suggestions. {meal_type_rule}",
            _render_schema(CHAT_SCHEMA),
        ]
    )
    turns = tuple((message.role, message.content) for message in request.conversation)
    return ComposedPrompt(
        system="\n".join(lines),
        user="" if turns else CHAT_OPENER,
        schema=CHAT_SCHEMA,
        turns=turns,
    )


__all__ = [
    "POSITIVE_PREFERENCE_PATTERN",
    "SUGGESTION_COUNT",
    "SYSTEM_PROMPT",
    "SUGGESTION_SCHEMA",
    "WEEK_PLAN_SCHEMA",
    "RECIPE_SCHEMA",
    "CHAT_SCHEMA",
    "CHAT_OPENER",
    "ComposedPrompt",
    "compose",
    "compose_chat",
    "compose_week",
    "compose_recipe",
    "extract_positive_preferences",
    "format_inventory",
]
