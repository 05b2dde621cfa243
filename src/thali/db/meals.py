"""Saved meal catalog persistence helpers."""

from __future__ import annotations

import json
from typing import List, Optional

from sqlalchemy import select

from thali.errors import NotFoundError
from thali.models.catalog import SavedMeal

from .models import SavedMealORM
from .repository import session_scope

_UNSET = object()


def _to_model(row: SavedMealORM) -> SavedMeal:
    return SavedMeal.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "cuisine": row.cuisine,
            "meal_type": row.meal_type,
            "prep_time": row.prep_time,
            "ingredients": json.loads(row.ingredients or "[]"),
            "recipe": row.recipe,
            "is_custom": row.is_custom,
            "created_at": row.created_at,
        }
    )


def list_saved_meals(
    cuisine: Optional[str] = None,
    meal_type: Optional[str] = None,
) -> List[SavedMeal]:
    """Return catalog entries, newest first, optionally filtered."""

    stmt = select(SavedMealORM)
    if cuisine:
        stmt = stmt.where(SavedMealORM.cuisine == cuisine)
    if meal_type:
        stmt = stmt.where(SavedMealORM.meal_type == meal_type)
    stmt = stmt.order_by(SavedMealORM.created_at.desc(), SavedMealORM.id.desc())

    with session_scope() as session:
        return [_to_model(row) for row in session.execute(stmt).scalars().all()]


def get_saved_meal(meal_id: int) -> SavedMeal:
    with session_scope() as session:
        row = session.get(SavedMealORM, meal_id)
        if row is None:
            raise NotFoundError("Meal")
        return _to_model(row)


def create_saved_meal(meal: SavedMeal) -> SavedMeal:
    with session_scope() as session:
        row = SavedMealORM(
            name=meal.name,
            cuisine=meal.cuisine,
            meal_type=meal.meal_type,
            prep_time=meal.prep_time,
            ingredients=json.dumps([name.strip() for name in meal.ingredients if name.strip()]),
            recipe=meal.recipe,
            is_custom=meal.is_custom,
        )
        session.add(row)
        session.flush()
        return _to_model(row)


def update_saved_meal(
    meal_id: int,
    *,
    name: Optional[str] = None,
    cuisine: Optional[str] = None,
    meal_type: Optional[str] = None,
    prep_time: Optional[int] | object = _UNSET,
    ingredients: Optional[list[str]] = None,
    recipe: Optional[str] | object = _UNSET,
) -> SavedMeal:
    """Apply a partial update; ``prep_time`` and ``recipe`` may be cleared with ``None``."""

    with session_scope() as session:
        row = session.get(SavedMealORM, meal_id)
        if row is None:
            raise NotFoundError("Meal")
        if name is not None:
            row.name = name.strip()
        if cuisine is not None:
            row.cuisine = cuisine
        if meal_type is not None:
            row.meal_type = meal_type
        if prep_time is not _UNSET:
            row.prep_time = prep_time  # type: ignore[assignment]
        if ingredients is not None:
            row.ingredients = json.dumps([item.strip() for item in ingredients if item.strip()])
        if recipe is not _UNSET:
            row.recipe = recipe  # type: ignore[assignment]
        session.flush()
        return _to_model(row)


def delete_saved_meal(meal_id: int) -> None:
    with session_scope() as session:
        row = session.get(SavedMealORM, meal_id)
        if row is None:
            raise NotFoundError("Meal")
        session.delete(row)


__all__ = [
    "list_saved_meals",
    "get_saved_meal",
    "create_saved_meal",
    "update_saved_meal",
    "delete_saved_meal",
]
