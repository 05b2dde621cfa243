"""Shared helpers for integration tests."""

from __future__ import annotations

from fastapi import FastAPI

from thali.config import get_settings
from thali.server import deps

from tests.planner.fakes import ScriptedLLM


def auth_headers() -> dict[str, str]:
    token = get_settings().api_token
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def install_llm(app: FastAPI, *answers) -> ScriptedLLM:
    """Route the app's LLM calls to a scripted transport."""

    llm = ScriptedLLM(*answers)
    app.dependency_overrides[deps.get_llm_driver] = lambda: llm.driver()
    return llm
