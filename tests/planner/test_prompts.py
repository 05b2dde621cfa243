from __future__ import annotations

import json
from datetime import date, datetime

import pytest

from thali.models.context import CalorieBudget, InventoryItem, ReviewContext, SuggestionContext
from thali.models.recipe import RecipeRequestMeal
from thali.models.suggest import RejectedMeal, SuggestRequest
from thali.planner.preferences import NOVELTY_HINT
from thali.planner.prompts import (
    SUGGESTION_SCHEMA,
    SYSTEM_PROMPT,
    compose,
    compose_recipe,
    compose_week,
    extract_positive_preferences,
    format_inventory,
)

from tests.planner.fakes import eaten

NOW = datetime(2025, 3, 12, 19, 0)


@pytest.fixture()
def context() -> SuggestionContext:
    return SuggestionContext(
        generated_at=NOW,
        inventory=[
            InventoryItem(name="Paneer", quantity=200, unit="g"),
            InventoryItem(name="Tomato", quantity=2.0, unit=""),
        ],
        recent_meal_names=["Butter Chicken", "Poha"],
        yesterday_cuisines=["chinese"],
        calorie_budget=CalorieBudget.from_totals(2000, 400),
        review_context=ReviewContext(
            high_rated_meals=[eaten("Masala Dosa", NOW, cuisine="south_indian", rating=5)],
            insights=[NOVELTY_HINT],
        ),
    )


def test_compose_is_deterministic(context):
    request = SuggestRequest(mood="cozy", time_available="30", meal_type="dinner")

    first = compose(request, context)
    second = compose(request, context)

    assert first == second
    assert first.user == second.user
    assert first.system == SYSTEM_PROMPT


def test_distinct_requests_produce_distinct_prompts(context):
    assert compose(SuggestRequest(mood="cozy"), context).user != compose(SuggestRequest(mood="light"), context).user


def test_rejection_with_positive_preference_is_prioritized(context):
    request = SuggestRequest(rejected_meals=[RejectedMeal(name="Dal Rice", reason="I want chicken curry")])

    user = compose(request, context).user

    assert 'USER REQUEST - prioritize this: "I want chicken curry"' in user
    never_line = next(line for line in user.splitlines() if "NEVER suggest these rejected meals" in line)
    assert "Dal Rice" in never_line


def test_negative_rejection_reason_is_not_a_user_request(context):
    request = SuggestRequest(rejected_meals=[RejectedMeal(name="Chole", reason="too heavy")])

    assert extract_positive_preferences(request) == ""
    assert "USER REQUEST" not in compose(request, context).user


def test_sections_follow_fixed_order(context):
    user = compose(SuggestRequest(cuisine="north_indian"), context).user

    markers = [
        "CALORIE CONTEXT:",
        "HARD CONSTRAINTS:",
        "USER PREFERENCES FROM PAST REVIEWS:",
        "USER CONTEXT:",
        "AVAILABLE INGREDIENTS:",
        "OUTPUT FORMAT:",
    ]
    positions = [user.index(marker) for marker in markers]
    assert positions == sorted(positions)
    assert "Remaining budget: 1600 kcal" in user
    assert 'ALL suggestions MUST be authentic "north_indian" dishes' in user
    assert "NEVER suggest any of these recently eaten meals: Butter Chicken, Poha" in user
    assert "AVOID these cuisines (eaten yesterday): chinese" in user
    assert "Masala Dosa (5/5)" in user
    assert f"INSIGHT: {NOVELTY_HINT}" in user


def test_schema_is_embedded_with_sorted_keys(context):
    user = compose(SuggestRequest(), context).user

    assert json.dumps(SUGGESTION_SCHEMA, sort_keys=True, indent=2) in user


def test_format_inventory_trims_trailing_zeros():
    items = [
        InventoryItem(name="Onion", quantity=2.0, unit="kg"),
        InventoryItem(name="Eggs", quantity=6, unit=""),
        InventoryItem(name="Milk", quantity=0.5, unit="l"),
    ]

    assert format_inventory(items) == "Onion (2 kg), Eggs (6), Milk (0.5 l)"
    assert format_inventory([]) == "Not specified"


def test_compose_week_lists_the_week_and_constraints(context):
    prompt = compose_week(context, date(2025, 3, 10))

    assert "week of 2025-03-10 to 2025-03-16" in prompt.user
    assert "Butter Chicken, Poha" in prompt.user
    assert '"weekPlan"' in prompt.user
    assert prompt.messages()[0]["role"] == "system"


def test_compose_recipe_mentions_meal_details():
    prompt = compose_recipe(
        RecipeRequestMeal(name="Palak Paneer", cuisine="north_indian", prep_time=40, estimated_calories=450)
    )

    assert prompt.user.startswith("Write a detailed recipe for: Palak Paneer")
    assert "Cuisine: north_indian" in prompt.user
    assert "Servings: 2" in prompt.user
