"""Shopping list models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from thali.models.base import WireModel
from thali.models.context import InventoryCategory


class ShoppingItemDraft(WireModel):
    """Derived shopping need that has not been persisted yet."""

    name: str = Field(min_length=1, max_length=100)
    quantity: float = Field(gt=0)
    unit: str = Field(default="pieces", max_length=20)
    category: InventoryCategory = "others"


class ShoppingItem(ShoppingItemDraft):
    """Single entry on the household shopping list."""

    id: int
    is_purchased: bool = False
    created_at: Optional[datetime] = None


__all__ = ["ShoppingItemDraft", "ShoppingItem"]
