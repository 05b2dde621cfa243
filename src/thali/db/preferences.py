"""Data access helpers for household preferences."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy import delete, select

from .models import PreferenceORM
from .repository import session_scope

logger = logging.getLogger(__name__)


def _encode_value(value: Any) -> str:
    return json.dumps(value)


def _decode_value(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        # Rows written before values were JSON-encoded hold the raw text.
        return value


def get_preference(key: str) -> Optional[Any]:
    with session_scope() as session:
        row = session.get(PreferenceORM, key)
        if row is None:
            return None
        return _decode_value(row.value)


def list_preferences() -> Dict[str, Any]:
    with session_scope() as session:
        rows = session.execute(select(PreferenceORM).order_by(PreferenceORM.key)).scalars().all()
        return {row.key: _decode_value(row.value) for row in rows}


def set_preference(key: str, value: Any) -> Any:
    """Persist ``value`` under ``key`` and return the stored value."""

    logger.debug("Persisting preference key=%s", key)
    with session_scope() as session:
        session.merge(PreferenceORM(key=key, value=_encode_value(value)))
    return get_preference(key)


def delete_preference(key: str) -> None:
    with session_scope() as session:
        session.execute(delete(PreferenceORM).where(PreferenceORM.key == key))


__all__ = [
    "get_preference",
    "list_preferences",
    "set_preference",
    "delete_preference",
]
