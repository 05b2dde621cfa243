"""Week generation followed by shopping list derivation."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from fastapi import status

from thali.db.inventory import create_inventory_item
from thali.models.plan import DAY_NAMES

from tests.integration.utils import auth_headers, install_llm
from tests.planner.fakes import meal


def _week_body() -> dict:
    def _day(name: str) -> dict:
        return {
            "day": name,
            "meals": {
                "breakfast": meal(
                    "Poha",
                    cuisine="indian",
                    meal_type="breakfast",
                    calories=300,
                    ingredients=[{"name": "Poha", "quantity": 0.1, "unit": "kg"}],
                ),
                "lunch": meal(
                    "Dal Rice",
                    cuisine="indian",
                    meal_type="lunch",
                    calories=550,
                    ingredients=[
                        {"name": "Rice", "quantity": 0.2, "unit": "kg"},
                        {"name": "Toor Dal", "quantity": 0.05, "unit": "kg"},
                    ],
                ),
                "dinner": meal(
                    "Paneer Masala",
                    calories=600,
                    ingredients=[{"name": "Paneer", "quantity": 0.2, "unit": "kg"}],
                ),
            },
        }

    return {"weekPlan": [_day(name) for name in DAY_NAMES]}


def test_generate_week_then_derive_shopping_list(app, client):
    install_llm(app, _week_body())

    response = client.post(
        "/meal-plan/generate-week",
        json={"weekStart": "2024-06-10"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["createdPlans"] == 21
    assert body["weekStart"] == "2024-06-10"
    assert [day["day"] for day in body["weekPlan"]] == list(DAY_NAMES)
    assert "slots" not in body

    slots = client.get("/meal-plan", params={"week": "2024-06-13"}).json()
    assert len(slots) == 21
    expected_dates = {(date(2024, 6, 10) + timedelta(days=offset)).isoformat() for offset in range(7)}
    assert {slot["date"] for slot in slots} == expected_dates
    monday_lunch = next(s for s in slots if s["date"] == "2024-06-10" and s["mealType"] == "lunch")
    assert monday_lunch["meal"]["name"] == "Dal Rice"
    assert monday_lunch["meal"]["ingredients"][0] == {"name": "Rice", "quantity": 0.2, "unit": "kg"}

    create_inventory_item(name="Rice", quantity=1, unit="kg", category="grains")
    create_inventory_item(name="Poha", quantity=0.5, unit="kg", category="grains")
    create_inventory_item(name="Paneer", quantity=0.3, unit="kg", category="dairy")

    response = client.post("/shopping/generate", json={"week": "2024-06-10"}, headers=auth_headers())

    assert response.status_code == status.HTTP_200_OK
    items = {item["name"]: item for item in response.json()}
    assert set(items) == {"Rice", "Toor Dal", "Paneer", "Poha"}
    assert items["Rice"]["quantity"] == pytest.approx(0.4)
    assert items["Toor Dal"]["quantity"] == pytest.approx(0.35)
    assert items["Paneer"]["quantity"] == pytest.approx(1.1)
    assert items["Poha"]["quantity"] == pytest.approx(0.2)
    assert {name: item["unit"] for name, item in items.items()} == dict.fromkeys(items, "kg")
    assert items["Rice"]["category"] == "grains"
    assert items["Toor Dal"]["category"] == "proteins"
    assert items["Paneer"]["category"] == "dairy"
    assert items["Poha"]["category"] == "grains"


def test_week_generation_surfaces_llm_outage(app, client):
    install_llm(app, "no json here")

    response = client.post(
        "/meal-plan/generate-week",
        json={"weekStart": "2024-06-12"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["code"] == "LLM_UNAVAILABLE"
    assert client.get("/meal-plan", params={"week": "2024-06-10"}).json() == []


def test_shopping_generation_requires_a_plan(client):
    response = client.post("/shopping/generate", json={}, headers=auth_headers())

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "error": "No meals planned for this week. Add meals to your meal plan first.",
        "code": "NO_MEALS_PLANNED",
    }
