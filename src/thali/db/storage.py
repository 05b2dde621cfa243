"""SQLite-backed implementation of :class:`thali.planner.storage.Storage`."""

from __future__ import annotations

import functools
import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from thali.errors import StorageError
from thali.models.context import DayReview, InventoryItem, MealHistoryEntry
from thali.models.plan import PlanSlot
from thali.models.recipe import Recipe, RecipeDraft
from thali.models.shopping import ShoppingItem, ShoppingItemDraft

from . import history, inventory, plans, preferences, recipes, reviews, shopping_list

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _wrap_errors(func: Callable[..., T]) -> Callable[..., T]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("Storage operation %s failed: %s", func.__name__, exc)
            raise StorageError(f"Storage operation {func.__name__} failed") from exc

    return wrapper


class SqlStorage:
    """Adapter translating engine calls into the ``thali.db`` helpers."""

    @_wrap_errors
    def list_inventory(self) -> list[InventoryItem]:
        return inventory.list_inventory()

    @_wrap_errors
    def list_history(
        self,
        since: datetime,
        until: Optional[datetime] = None,
        *,
        rated_only: bool = False,
    ) -> list[MealHistoryEntry]:
        return history.list_history(since, until, rated_only=rated_only)

    @_wrap_errors
    def list_day_reviews(self, since: date, limit: int) -> list[DayReview]:
        return reviews.list_day_reviews(since, limit)

    @_wrap_errors
    def get_preference(self, key: str) -> Optional[Any]:
        return preferences.get_preference(key)

    @_wrap_errors
    def upsert_plan_slot(self, slot: PlanSlot) -> PlanSlot:
        return plans.upsert_plan_slot(slot)

    @_wrap_errors
    def list_plan_slots(self, start: date, end: date) -> list[PlanSlot]:
        return plans.list_plan_slots(start, end)

    @_wrap_errors
    def list_shopping_items(self) -> list[ShoppingItem]:
        return shopping_list.list_shopping_items()

    @_wrap_errors
    def add_shopping_items(self, drafts: Iterable[ShoppingItemDraft]) -> list[ShoppingItem]:
        return shopping_list.add_shopping_items(drafts)

    @_wrap_errors
    def save_recipe(self, draft: RecipeDraft) -> Recipe:
        return recipes.save_recipe(draft)


__all__ = ["SqlStorage"]
