"""Integration tests for the inventory endpoints."""

from __future__ import annotations

from fastapi import status

from tests.integration.utils import auth_headers


def test_inventory_create_update_delete_flow(client):
    response = client.post(
        "/inventory",
        json={"name": "Toor Dal", "quantity": 1, "unit": "kg", "category": "proteins", "lowStockAt": 0.25},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_201_CREATED
    created = response.json()
    item_id = created["id"]
    assert created["lowStockAt"] == 0.25

    response = client.patch(f"/inventory/{item_id}", json={"quantity": 0.2}, headers=auth_headers())
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["quantity"] == 0.2

    low_stock = client.get("/inventory/low-stock").json()
    assert [item["name"] for item in low_stock] == ["Toor Dal"]

    response = client.delete(f"/inventory/{item_id}", headers=auth_headers())
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/inventory").json() == []


def test_duplicate_inventory_name_conflicts(client):
    client.post("/inventory", json={"name": "Paneer", "quantity": 200, "unit": "g"}, headers=auth_headers())

    response = client.post("/inventory", json={"name": "paneer", "quantity": 100, "unit": "g"}, headers=auth_headers())

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "DUPLICATE_ENTRY"


def test_decrement_below_zero_clamps(client):
    item = client.post("/inventory", json={"name": "Eggs", "quantity": 2}, headers=auth_headers()).json()

    response = client.patch(f"/inventory/{item['id']}", json={"quantity": -4}, headers=auth_headers())

    assert response.json()["quantity"] == 0


def test_inventory_validation_and_missing_items(client):
    response = client.post("/inventory", json={"name": "", "quantity": 0}, headers=auth_headers())
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert {d["field"] for d in response.json()["details"]} == {"name", "quantity"}

    response = client.patch("/inventory/999", json={"quantity": 1}, headers=auth_headers())
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.patch("/inventory/999", json={}, headers=auth_headers())
    assert response.status_code == status.HTTP_400_BAD_REQUEST
