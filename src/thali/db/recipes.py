"""Recipe persistence helpers."""

from __future__ import annotations

import json
from typing import List

from sqlalchemy import func, or_, select

from thali.errors import NotFoundError
from thali.models.recipe import Recipe, RecipeDraft

from .models import RecipeORM
from .repository import session_scope


def _to_model(row: RecipeORM) -> Recipe:
    return Recipe.model_validate(
        {
            "id": row.id,
            "meal_name": row.meal_name,
            "cuisine": row.cuisine,
            "prep_time": row.prep_time,
            "cook_time": row.cook_time,
            "servings": row.servings,
            "ingredients": json.loads(row.ingredients or "[]"),
            "instructions": json.loads(row.instructions or "[]"),
            "tips": json.loads(row.tips or "[]"),
            "description": row.description,
            "calories": row.calories,
            "created_at": row.created_at,
        }
    )


def save_recipe(draft: RecipeDraft) -> Recipe:
    with session_scope() as session:
        row = RecipeORM(
            meal_name=draft.meal_name,
            cuisine=draft.cuisine,
            prep_time=draft.prep_time,
            cook_time=draft.cook_time,
            servings=draft.servings,
            ingredients=json.dumps([item.model_dump(mode="json") for item in draft.ingredients]),
            instructions=json.dumps(draft.instructions),
            tips=json.dumps(draft.tips),
            description=draft.description,
            calories=draft.calories,
        )
        session.add(row)
        session.flush()
        return _to_model(row)


def list_recipes(limit: int = 50) -> List[Recipe]:
    """Return saved recipes, newest first."""

    with session_scope() as session:
        rows = (
            session.execute(select(RecipeORM).order_by(RecipeORM.id.desc()).limit(limit))
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def search_recipes(query: str, limit: int = 50) -> List[Recipe]:
    """Return recipes whose name or cuisine contains ``query``, case-insensitively."""

    needle = query.strip().lower()
    if not needle:
        return []
    stmt = (
        select(RecipeORM)
        .where(
            or_(
                func.lower(RecipeORM.meal_name).contains(needle, autoescape=True),
                func.lower(RecipeORM.cuisine).contains(needle, autoescape=True),
            )
        )
        .order_by(RecipeORM.id.desc())
        .limit(limit)
    )
    with session_scope() as session:
        return [_to_model(row) for row in session.execute(stmt).scalars().all()]


def get_recipe(recipe_id: int) -> Recipe:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            raise NotFoundError("Recipe")
        return _to_model(row)


def delete_recipe(recipe_id: int) -> None:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            raise NotFoundError("Recipe")
        session.delete(row)


__all__ = ["save_recipe", "list_recipes", "search_recipes", "get_recipe", "delete_recipe"]
