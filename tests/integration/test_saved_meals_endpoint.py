"""Integration tests for the saved meal catalog."""

from __future__ import annotations

from fastapi import status

from tests.integration.utils import auth_headers


def _create(client, name: str, **extra) -> dict:
    payload = {"name": name, "cuisine": "north_indian", "mealType": "dinner", **extra}
    response = client.post("/meals", json=payload, headers=auth_headers())
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_saved_meal_crud_and_filters(client):
    dal = _create(client, "Dal Tadka", prepTime=30, ingredients=["Toor dal", "Ghee"])
    _create(client, "Masala Dosa", cuisine="south_indian", mealType="breakfast")

    assert dal["isCustom"] is True
    assert dal["ingredients"] == ["Toor dal", "Ghee"]
    assert [m["name"] for m in client.get("/meals").json()] == ["Masala Dosa", "Dal Tadka"]
    assert [m["name"] for m in client.get("/meals", params={"mealType": "breakfast"}).json()] == ["Masala Dosa"]
    assert [m["name"] for m in client.get("/meals", params={"cuisine": "north_indian"}).json()] == ["Dal Tadka"]

    response = client.patch(f"/meals/{dal['id']}", json={"recipe": "Temper, then simmer."}, headers=auth_headers())
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["prepTime"] == 30
    assert client.get(f"/meals/{dal['id']}").json()["recipe"] == "Temper, then simmer."

    assert client.delete(f"/meals/{dal['id']}", headers=auth_headers()).status_code == status.HTTP_204_NO_CONTENT
    missing = client.get(f"/meals/{dal['id']}")
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json() == {"error": "Meal not found", "code": "NOT_FOUND"}


def test_saved_meal_validation(client):
    bad_payloads = [
        {"name": "", "cuisine": "north_indian", "mealType": "dinner"},
        {"name": "Pizza", "cuisine": "martian", "mealType": "dinner"},
        {"name": "Pizza", "cuisine": "italian", "mealType": "dinner", "prepTime": 0},
        {"name": "Pizza", "cuisine": "italian", "mealType": "dinner", "ingredients": ["x" * 101]},
    ]
    for payload in bad_payloads:
        response = client.post("/meals", json=payload, headers=auth_headers())
        assert response.status_code == status.HTTP_400_BAD_REQUEST, payload

    meal = _create(client, "Pizza Margherita", cuisine="italian")
    response = client.patch(f"/meals/{meal['id']}", json={}, headers=auth_headers())
    assert response.status_code == status.HTTP_400_BAD_REQUEST
