"""SQLite engine bootstrap and unit-of-work sessions for the household store."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from thali.config import get_settings
from thali.db.models import Base

logger = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT_SECONDS = 15
_PRAGMAS = ("journal_mode=WAL", "foreign_keys=ON")

# Serializes engine construction; context assembly opens sessions from several
# worker threads at once.
_ENGINE_LOCK = threading.Lock()


class _EngineState:
    engine: Optional[Engine] = None
    sessions: Optional[sessionmaker[Session]] = None


def _apply_pragmas(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        for pragma in _PRAGMAS:
            cursor.execute(f"PRAGMA {pragma}")
    finally:
        cursor.close()


def _create_schema(engine: Engine) -> None:
    try:
        Base.metadata.create_all(engine)
    except OperationalError as exc:
        # Two processes racing on a fresh file can both attempt CREATE TABLE.
        if "already exists" not in str(exc).lower():
            raise
        logger.debug("Schema created concurrently: %s", exc)


def get_engine(database_path: Path | None = None) -> Engine:
    """Build the process-wide engine on first use, creating tables as needed."""

    if _EngineState.engine is not None:
        return _EngineState.engine

    with _ENGINE_LOCK:
        if _EngineState.engine is None:
            _build_engine(database_path)
    assert _EngineState.engine is not None
    return _EngineState.engine


def _build_engine(database_path: Path | None) -> None:
    target = database_path or get_settings().database_path
    target.parent.mkdir(parents=True, exist_ok=True)

    # Storage calls hop between worker threads through asyncio.to_thread.
    engine = create_engine(
        f"sqlite:///{target}",
        future=True,
        connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_SECONDS},
    )
    event.listen(engine, "connect", _apply_pragmas)
    _create_schema(engine)
    logger.debug("Opened household database at %s", target)

    _EngineState.sessions = sessionmaker(bind=engine, autoflush=False, future=True)
    _EngineState.engine = engine


def get_session() -> Session:
    if _EngineState.sessions is None:
        get_engine()
    factory = _EngineState.sessions
    assert factory is not None
    return factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on any error."""

    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_repository_state() -> None:
    """Dispose the cached engine so the next call rereads settings."""

    with _ENGINE_LOCK:
        if _EngineState.engine is not None:
            _EngineState.engine.dispose()
        _EngineState.engine = None
        _EngineState.sessions = None


__all__ = ["get_engine", "get_session", "session_scope", "reset_repository_state"]
