"""Storage interface consumed by the planning engine.

Implementations are synchronous; the engine calls them through ``asyncio.to_thread``
so a blocking database driver never stalls the event loop. Implementations raise
:class:`thali.errors.StorageError` for persistence failures.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol

from thali.models.context import DayReview, InventoryItem, MealHistoryEntry
from thali.models.plan import PlanSlot
from thali.models.recipe import Recipe, RecipeDraft
from thali.models.shopping import ShoppingItem, ShoppingItemDraft


class Storage(Protocol):
    def list_inventory(self) -> list[InventoryItem]: ...

    def list_history(
        self,
        since: datetime,
        until: Optional[datetime] = None,
        *,
        rated_only: bool = False,
    ) -> list[MealHistoryEntry]: ...

    def list_day_reviews(self, since: date, limit: int) -> list[DayReview]: ...

    def get_preference(self, key: str) -> Optional[Any]: ...

    def upsert_plan_slot(self, slot: PlanSlot) -> PlanSlot: ...

    def list_plan_slots(self, start: date, end: date) -> list[PlanSlot]: ...

    def list_shopping_items(self) -> list[ShoppingItem]: ...

    def add_shopping_items(self, drafts: Iterable[ShoppingItemDraft]) -> list[ShoppingItem]: ...

    def save_recipe(self, draft: RecipeDraft) -> Recipe: ...


__all__ = ["Storage"]
