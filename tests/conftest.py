"""Shared pytest fixtures for the Thali test suite."""

from __future__ import annotations

from datetime import datetime
from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from thali.config import get_settings
from thali.db.repository import reset_repository_state
from thali.server import deps
from thali.server.app import create_app

# A Wednesday evening; its week starts on Monday 2025-03-10.
FIXED_NOW = datetime(2025, 3, 12, 19, 0)


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    application.dependency_overrides[deps.get_clock] = lambda: (lambda: FIXED_NOW)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database and no real LLM credentials."""

    db_path = tmp_path / "test_thali.db"
    monkeypatch.setenv("THALI_DATABASE_PATH", str(db_path))
    monkeypatch.delenv("THALI_API_TOKEN", raising=False)
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("THALI_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
