"""SQLite persistence for pantry, history, reviews, plans and shopping."""

from thali.db.repository import reset_repository_state, session_scope
from thali.db.storage import SqlStorage

__all__ = ["SqlStorage", "reset_repository_state", "session_scope"]
