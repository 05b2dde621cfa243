"""Curated meals served when the LLM cannot produce usable suggestions."""

from __future__ import annotations

import logging
import re
from typing import Optional

from thali.models.context import SuggestionContext
from thali.models.meal import MealPayload
from thali.models.suggest import SuggestRequest
from thali.planner.postprocess import enforce_constraints, excluded_names

logger = logging.getLogger(__name__)

DEFAULT_TIME_AVAILABLE = 30
QUICK_TIME_LIMIT = 25

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")

_QUICK = (
    {
        "name": "Masala Maggi with Vegetables",
        "cuisine": "indian_fusion",
        "meal_type": "snack",
        "prep_time": 15,
        "estimated_calories": 350,
        "ingredients": [
            {"name": "Maggi noodles", "quantity": 2, "unit": "packets"},
            {"name": "Mixed vegetables", "quantity": 100, "unit": "g"},
            {"name": "Butter", "quantity": 1, "unit": "tbsp"},
        ],
        "reason": "Quick comfort food when you need something fast",
        "description": "Loaded veggie Maggi with a buttery kick",
    },
    {
        "name": "Egg Bhurji with Paratha",
        "cuisine": "north_indian",
        "meal_type": "breakfast",
        "prep_time": 20,
        "estimated_calories": 450,
        "ingredients": [
            {"name": "Eggs", "quantity": 4, "unit": "pieces"},
            {"name": "Onion", "quantity": 1, "unit": "pieces"},
            {"name": "Tomato", "quantity": 1, "unit": "pieces"},
            {"name": "Atta", "quantity": 100, "unit": "g"},
        ],
        "reason": "Protein-packed and satisfying",
        "description": "Spiced scrambled eggs with flaky homemade parathas",
    },
    {
        "name": "Curd Rice with Pickle",
        "cuisine": "south_indian",
        "meal_type": "lunch",
        "prep_time": 10,
        "estimated_calories": 280,
        "ingredients": [
            {"name": "Rice", "quantity": 200, "unit": "g"},
            {"name": "Curd", "quantity": 200, "unit": "g"},
            {"name": "Mustard seeds", "quantity": 1, "unit": "tsp"},
        ],
        "reason": "Light, cooling and comforting",
        "description": "Silky curd rice tempered with mustard and curry leaves",
    },
    {
        "name": "Vegetable Hakka Noodles",
        "cuisine": "chinese",
        "meal_type": "dinner",
        "prep_time": 25,
        "estimated_calories": 420,
        "ingredients": [
            {"name": "Noodles", "quantity": 200, "unit": "g"},
            {"name": "Cabbage", "quantity": 100, "unit": "g"},
            {"name": "Capsicum", "quantity": 1, "unit": "pieces"},
            {"name": "Soy sauce", "quantity": 2, "unit": "tbsp"},
        ],
        "reason": "A fast wok dinner that feels like a takeaway",
        "description": "Smoky stir-fried noodles with crunchy vegetables",
    },
    {
        "name": "Chana Chaat",
        "cuisine": "street_food",
        "meal_type": "snack",
        "prep_time": 15,
        "estimated_calories": 260,
        "ingredients": [
            {"name": "Boiled chana", "quantity": 200, "unit": "g"},
            {"name": "Onion", "quantity": 1, "unit": "pieces"},
            {"name": "Tomato", "quantity": 1, "unit": "pieces"},
            {"name": "Chaat masala", "quantity": 1, "unit": "tsp"},
        ],
        "reason": "Tangy and light when time is short",
        "description": "Zesty chickpea salad with chaat masala and lime",
    },
)

_ELABORATE = (
    {
        "name": "Paneer Tikka Masala",
        "cuisine": "north_indian",
        "meal_type": "dinner",
        "prep_time": 45,
        "estimated_calories": 550,
        "ingredients": [
            {"name": "Paneer", "quantity": 250, "unit": "g"},
            {"name": "Capsicum", "quantity": 1, "unit": "pieces"},
            {"name": "Onion", "quantity": 2, "unit": "pieces"},
            {"name": "Tomato", "quantity": 3, "unit": "pieces"},
            {"name": "Cream", "quantity": 50, "unit": "ml"},
        ],
        "reason": "Restaurant-quality dinner at home",
        "description": "Charred paneer in smoky, creamy tomato gravy",
    },
    {
        "name": "Hyderabadi Vegetable Biryani",
        "cuisine": "south_indian",
        "meal_type": "lunch",
        "prep_time": 60,
        "estimated_calories": 650,
        "ingredients": [
            {"name": "Basmati rice", "quantity": 300, "unit": "g"},
            {"name": "Mixed vegetables", "quantity": 200, "unit": "g"},
            {"name": "Curd", "quantity": 100, "unit": "g"},
            {"name": "Ghee", "quantity": 3, "unit": "tbsp"},
            {"name": "Biryani masala", "quantity": 2, "unit": "tbsp"},
        ],
        "reason": "When you want something special and aromatic",
        "description": "Layered, fragrant biryani with perfectly spiced vegetables",
    },
    {
        "name": "Palak Paneer with Butter Naan",
        "cuisine": "north_indian",
        "meal_type": "dinner",
        "prep_time": 50,
        "estimated_calories": 580,
        "ingredients": [
            {"name": "Spinach", "quantity": 300, "unit": "g"},
            {"name": "Paneer", "quantity": 200, "unit": "g"},
            {"name": "Cream", "quantity": 50, "unit": "ml"},
            {"name": "Atta", "quantity": 200, "unit": "g"},
        ],
        "reason": "Nutritious and deeply satisfying",
        "description": "Velvety spinach gravy with soft paneer cubes",
    },
    {
        "name": "Thai Green Curry with Jasmine Rice",
        "cuisine": "thai",
        "meal_type": "dinner",
        "prep_time": 40,
        "estimated_calories": 600,
        "ingredients": [
            {"name": "Coconut milk", "quantity": 400, "unit": "ml"},
            {"name": "Green curry paste", "quantity": 2, "unit": "tbsp"},
            {"name": "Tofu", "quantity": 200, "unit": "g"},
            {"name": "Jasmine rice", "quantity": 200, "unit": "g"},
        ],
        "reason": "Fragrant and comforting for an unhurried evening",
        "description": "Creamy coconut curry humming with basil and lemongrass",
    },
    {
        "name": "Masala Dosa with Sambar",
        "cuisine": "south_indian",
        "meal_type": "breakfast",
        "prep_time": 40,
        "estimated_calories": 480,
        "ingredients": [
            {"name": "Dosa batter", "quantity": 500, "unit": "g"},
            {"name": "Potato", "quantity": 3, "unit": "pieces"},
            {"name": "Toor dal", "quantity": 100, "unit": "g"},
            {"name": "Sambar powder", "quantity": 2, "unit": "tbsp"},
        ],
        "reason": "A weekend breakfast worth the effort",
        "description": "Crisp golden dosa wrapped around spiced potato",
    },
)

QUICK_MEALS: tuple[MealPayload, ...] = tuple(MealPayload.model_validate(m) for m in _QUICK)
ELABORATE_MEALS: tuple[MealPayload, ...] = tuple(MealPayload.model_validate(m) for m in _ELABORATE)


def parse_time_available(value: Optional[str]) -> int:
    """Minutes from the leading integer of ``value``; 30 when absent or unparsable."""

    match = _LEADING_INT_RE.match(value or "")
    if not match:
        return DEFAULT_TIME_AVAILABLE
    minutes = int(match.group(1))
    return minutes if minutes > 0 else DEFAULT_TIME_AVAILABLE


def fallback_tier(time_available: Optional[str]) -> list[MealPayload]:
    meals = QUICK_MEALS if parse_time_available(time_available) <= QUICK_TIME_LIMIT else ELABORATE_MEALS
    return [meal.model_copy(deep=True) for meal in meals]


def choose_fallback(request: SuggestRequest, context: SuggestionContext) -> list[MealPayload]:
    """Pick fallback meals that satisfy every hard constraint of the request.

    The tier matching ``timeAvailable`` is filtered first. When nothing in it
    survives, the other tier is filtered the same way. Recent and rejected names
    and the cuisine and mealType filters are never relaxed, so the result is empty
    only when no curated meal fits at all.
    """

    preferred = fallback_tier(request.time_available)
    filtered = enforce_constraints(preferred, request, context)
    if filtered:
        return filtered

    preferred_names = {meal.name for meal in preferred}
    other = [
        meal.model_copy(deep=True)
        for meal in (*QUICK_MEALS, *ELABORATE_MEALS)
        if meal.name not in preferred_names
    ]
    filtered = enforce_constraints(other, request, context)
    if filtered:
        logger.info("No meal in the preferred fallback tier fits; using the other tier")
        return filtered

    logger.warning(
        "No curated fallback meal fits (cuisine=%s mealType=%s excluded=%d)",
        request.cuisine or "any",
        request.meal_type or "any",
        len(excluded_names(request, context)),
    )
    return []


__all__ = [
    "QUICK_MEALS",
    "ELABORATE_MEALS",
    "parse_time_available",
    "fallback_tier",
    "choose_fallback",
]
