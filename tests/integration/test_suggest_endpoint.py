"""Integration tests for the meal suggestion endpoint."""

from __future__ import annotations

from datetime import datetime

import httpx
from fastapi import status

from thali.db.history import record_meal
from thali.db.inventory import create_inventory_item
from thali.models.context import MealHistoryEntry
from thali.planner.fallbacks import ELABORATE_MEALS, QUICK_MEALS

from tests.integration.utils import auth_headers, install_llm
from tests.planner.fakes import meal


def _seed_household() -> None:
    create_inventory_item(name="Paneer", quantity=200, unit="g", category="dairy")
    create_inventory_item(name="Tomato", quantity=500, unit="g", category="vegetables")
    record_meal(
        MealHistoryEntry(
            meal_name="Butter Chicken",
            cuisine="north_indian",
            meal_type="dinner",
            eaten_at=datetime(2025, 3, 9, 20, 0),
        )
    )
    record_meal(
        MealHistoryEntry(
            meal_name="Poha",
            cuisine="indian",
            meal_type="breakfast",
            eaten_at=datetime(2025, 3, 12, 8, 0),
            calories=400,
        )
    )


def test_filtered_suggestions_sorted_by_calories(app, client):
    _seed_household()
    llm = install_llm(
        app,
        {
            "suggestions": [
                meal("Paneer Butter Masala", calories=550, prep_time=30),
                meal("Tomato Paneer Bhurji", calories=380, prep_time=20),
                meal("Shahi Paneer with Naan", calories=720, prep_time=30),
            ]
        },
    )

    response = client.post(
        "/suggest",
        json={"mealType": "dinner", "cuisine": "north_indian", "timeAvailable": "30"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert [s["estimatedCalories"] for s in body["suggestions"]] == [380, 550, 720]
    assert all(s["calorieWarning"] is None for s in body["suggestions"])
    assert body["calorieInfo"] == {"dailyGoal": 2000, "consumed": 400, "remaining": 1600}

    prompt = llm.sent_payloads()[0]["messages"][1]["content"]
    assert "Paneer (200 g), Tomato (500 g)" in prompt
    assert "recently eaten meals: Poha, Butter Chicken" in prompt


def test_suggestions_never_repeat_recent_or_rejected_meals(app, client):
    _seed_household()
    install_llm(
        app,
        {
            "suggestions": [
                meal("butter chicken"),
                meal("Dal Rice", cuisine="indian"),
                meal("Kadai Paneer", calories=650),
            ]
        },
    )

    response = client.post(
        "/suggest",
        json={"rejectedMeals": [{"name": "DAL RICE", "reason": "I want chicken curry"}]},
        headers=auth_headers(),
    )

    body = response.json()
    assert [s["name"] for s in body["suggestions"]] == ["Kadai Paneer"]


def test_calorie_warning_uses_remaining_budget(app, client):
    client.put("/preferences/dailyCalorieGoal", json={"value": 900}, headers=auth_headers())
    _seed_household()
    install_llm(app, {"suggestions": [meal("Chole Bhature", calories=800), meal("Khichdi", calories=350)]})

    body = client.post("/suggest", json={}, headers=auth_headers()).json()

    warnings = {s["name"]: s["calorieWarning"] for s in body["suggestions"]}
    assert warnings == {"Khichdi": None, "Chole Bhature": "Exceeds remaining 500 kcal"}


def test_llm_outage_serves_quick_fallback(app, client):
    install_llm(app, httpx.Response(502, text="bad gateway"))

    response = client.post("/suggest", json={"timeAvailable": "15"}, headers=auth_headers())

    assert response.status_code == status.HTTP_200_OK
    names = [s["name"] for s in response.json()["suggestions"]]
    assert names
    assert set(names) <= {m.name for m in QUICK_MEALS}


def test_missing_llm_key_still_answers(client):
    response = client.post("/suggest", json={"cuisine": "thai"}, headers=auth_headers())

    assert response.status_code == status.HTTP_200_OK
    assert [s["cuisine"] for s in response.json()["suggestions"]] == ["thai"]


def test_fallback_keeps_requested_cuisine_even_when_nothing_fits(client):
    response = client.post(
        "/suggest",
        json={"cuisine": "italian", "timeAvailable": "60"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["suggestions"] == []


def test_fallback_never_returns_rejected_meals(client):
    rejected = [{"name": m.name} for m in ELABORATE_MEALS]

    response = client.post(
        "/suggest",
        json={"timeAvailable": "60", "rejectedMeals": rejected},
        headers=auth_headers(),
    )

    names = {s["name"] for s in response.json()["suggestions"]}
    assert names
    assert names.isdisjoint(m.name for m in ELABORATE_MEALS)
