"""Data access helpers for meal history."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select

from thali.errors import NotFoundError
from thali.models.context import MealHistoryEntry

from .models import MealHistoryORM
from .repository import session_scope

_UNSET = object()


def _to_model(row: MealHistoryORM) -> MealHistoryEntry:
    return MealHistoryEntry.model_validate(
        {
            "id": row.id,
            "meal_name": row.meal_name,
            "cuisine": row.cuisine,
            "meal_type": row.meal_type,
            "eaten_at": row.eaten_at,
            "rating": row.rating,
            "calories": row.calories,
            "notes": row.notes,
        }
    )


def list_history(
    since: datetime,
    until: Optional[datetime] = None,
    *,
    rated_only: bool = False,
    unrated_only: bool = False,
) -> List[MealHistoryEntry]:
    """Return meals eaten in ``[since, until)`` ordered most recent first."""

    stmt = select(MealHistoryORM).where(MealHistoryORM.eaten_at >= since)
    if until is not None:
        stmt = stmt.where(MealHistoryORM.eaten_at < until)
    if rated_only:
        stmt = stmt.where(MealHistoryORM.rating.is_not(None))
    if unrated_only:
        stmt = stmt.where(MealHistoryORM.rating.is_(None))
    stmt = stmt.order_by(MealHistoryORM.eaten_at.desc(), MealHistoryORM.id.desc())

    with session_scope() as session:
        rows = session.execute(stmt).scalars().all()
        return [_to_model(row) for row in rows]


def sum_calories(since: datetime, until: datetime) -> int:
    """Total logged calories in ``[since, until)``; unlogged calories count as zero."""

    with session_scope() as session:
        total = session.execute(
            select(func.coalesce(func.sum(MealHistoryORM.calories), 0)).where(
                MealHistoryORM.eaten_at >= since,
                MealHistoryORM.eaten_at < until,
            )
        ).scalar_one()
        return int(total or 0)


def record_meal(entry: MealHistoryEntry) -> MealHistoryEntry:
    """Insert a meal history entry."""

    with session_scope() as session:
        row = MealHistoryORM(
            meal_name=entry.meal_name.strip(),
            cuisine=entry.cuisine,
            meal_type=entry.meal_type,
            eaten_at=entry.eaten_at,
            rating=entry.rating,
            calories=entry.calories,
            notes=entry.notes,
        )
        session.add(row)
        session.flush()
        return _to_model(row)


def update_meal(
    entry_id: int,
    *,
    rating: Optional[int] | object = _UNSET,
    notes: Optional[str] | object = _UNSET,
) -> MealHistoryEntry:
    """Attach a rating or notes to an existing entry."""

    with session_scope() as session:
        row = session.get(MealHistoryORM, entry_id)
        if row is None:
            raise NotFoundError("Meal history entry")
        if rating is not _UNSET:
            row.rating = rating  # type: ignore[assignment]
        if notes is not _UNSET:
            row.notes = notes  # type: ignore[assignment]
        session.flush()
        return _to_model(row)


__all__ = ["list_history", "sum_calories", "record_meal", "update_meal"]
