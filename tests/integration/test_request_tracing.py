"""Integration tests covering request ID propagation and middleware."""

from __future__ import annotations


def test_request_id_echoed_when_provided(client):
    response = client.get("/inventory", headers={"X-Request-ID": "trace-abc-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "trace-abc-123"


def test_request_id_generated_for_error_responses(client):
    response = client.get("/recipes/404")

    assert response.status_code == 404
    assert response.json() == {"error": "Recipe not found", "code": "NOT_FOUND"}
    assert len(response.headers.get("X-Request-ID", "")) >= 8
