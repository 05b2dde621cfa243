"""Runtime settings for the API, CLI and LLM driver."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/thali.db"),
        description="SQLite database location.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating endpoints.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    llm_api_key: Optional[str] = Field(
        default=None,
        description="Secret key sent as a bearer token to the chat completions endpoint.",
    )
    llm_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI-compatible base URL; /chat/completions is appended when missing.",
    )
    llm_model: str = Field(
        default="gpt-4o",
        description="Model identifier passed to the chat completions endpoint.",
    )
    llm_timeout_ms: int = Field(
        default=30000,
        ge=1,
        description="Hard timeout for a single LLM request, in milliseconds.",
    )
    llm_temperature: float = Field(
        default=0.8,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for suggestion and planning prompts.",
    )
    llm_max_retries: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Extra attempts made when the LLM returns malformed JSON.",
    )
    default_calorie_goal: int = Field(
        default=2000,
        ge=0,
        description="Daily calorie goal used when no dailyCalorieGoal preference is stored.",
    )

    model_config = ConfigDict(frozen=True)

    @property
    def llm_timeout_seconds(self) -> float:
        return self.llm_timeout_ms / 1000.0


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Environment variable -> (settings field, parser). Unparseable values are
# ignored so the field keeps its default.
_ENV_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "THALI_DATABASE_PATH": ("database_path", Path),
    "THALI_API_TOKEN": ("api_token", str),
    "THALI_LOG_LEVEL": ("log_level", str),
    "THALI_LOG_FORMAT": ("log_format", str),
    "THALI_LOG_REQUESTS": ("log_requests", _coerce_bool),
    "LLM_API_KEY": ("llm_api_key", str),
    "LLM_BASE_URL": ("llm_base_url", str),
    "LLM_MODEL": ("llm_model", str),
    "LLM_TIMEOUT_MS": ("llm_timeout_ms", int),
    "LLM_TEMPERATURE": ("llm_temperature", float),
    "LLM_MAX_RETRIES": ("llm_max_retries", int),
    "DEFAULT_CALORIE_GOAL": ("default_calorie_goal", int),
}


def _read_dotenv(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    entries: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        entries[key.strip()] = value.strip().strip('"').strip("'")
    return entries


def _load_from_env() -> dict[str, object]:
    """Collect settings overrides; real env vars win over ``.env`` entries."""

    fallback: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        fallback.update(_read_dotenv(candidate))

    overrides: dict[str, object] = {}
    for env_name, (field, parse) in _ENV_FIELDS.items():
        raw = os.environ.get(env_name) or fallback.get(env_name)
        if not raw:
            continue
        try:
            overrides[field] = parse(raw)
        except ValueError:
            continue
    return overrides


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
