"""Error taxonomy shared by the planning engine and the HTTP layer.

Every failure the engine surfaces is a :class:`ThaliError` subclass. Components raise
and propagate these types; only the FastAPI exception handlers turn them into JSON.
"""

from __future__ import annotations

from typing import Any, Optional


class ThaliError(Exception):
    """Base class carrying the HTTP status and machine-readable code."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ThaliError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        details: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message, details=details or [])


class NotFoundError(ThaliError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found")


class LLMUnavailable(ThaliError):
    """The LLM endpoint timed out, failed, or answered with unusable content."""

    status_code = 502
    code = "LLM_UNAVAILABLE"


class LLMTimeout(LLMUnavailable):
    status_code = 504
    code = "LLM_TIMEOUT"

    def __init__(self, message: str = "Request timed out. Please try again.") -> None:
        super().__init__(message)


class StorageError(ThaliError):
    status_code = 503
    code = "STORAGE_ERROR"


class PlanEmpty(ThaliError):
    status_code = 400
    code = "NO_MEALS_PLANNED"

    def __init__(
        self,
        message: str = "No meals planned for this week. Add meals to your meal plan first.",
    ) -> None:
        super().__init__(message)


class DuplicateKey(ThaliError):
    """Concurrent upsert conflict. Callers treat it as last-writer-wins success."""

    status_code = 409
    code = "DUPLICATE_ENTRY"


class AuthError(ThaliError):
    status_code = 401
    code = "AUTH_ERROR"

    def __init__(self, message: str = "Please log in to continue.") -> None:
        super().__init__(message)


__all__ = [
    "ThaliError",
    "ValidationError",
    "NotFoundError",
    "LLMUnavailable",
    "LLMTimeout",
    "StorageError",
    "PlanEmpty",
    "DuplicateKey",
    "AuthError",
]
