"""Inventory data access helpers."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from thali.errors import DuplicateKey, NotFoundError
from thali.models.context import InventoryItem
from thali.planner.utils import normalize_name

from .models import InventoryItemORM
from .repository import session_scope

_UNSET = object()


def _to_model(row: InventoryItemORM) -> InventoryItem:
    return InventoryItem.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "category": row.category,
            "quantity": row.quantity,
            "unit": row.unit,
            "low_stock_at": row.low_stock_at,
        }
    )


def list_inventory() -> List[InventoryItem]:
    """Return inventory items grouped by category, then name."""

    with session_scope() as session:
        rows = (
            session.execute(
                select(InventoryItemORM).order_by(
                    InventoryItemORM.category.asc(),
                    InventoryItemORM.normalized_name.asc(),
                )
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def list_low_stock() -> List[InventoryItem]:
    """Return items at or below their low-stock threshold."""

    return [
        item
        for item in list_inventory()
        if item.low_stock_at is not None and item.quantity <= item.low_stock_at
    ]


def create_inventory_item(
    *,
    name: str,
    quantity: float,
    unit: str = "",
    category: str = "others",
    low_stock_at: Optional[float] = None,
) -> InventoryItem:
    normalized = normalize_name(name)
    with session_scope() as session:
        existing = session.execute(
            select(InventoryItemORM.id).where(InventoryItemORM.normalized_name == normalized)
        ).first()
        if existing:
            raise DuplicateKey(f"Inventory item '{name.strip()}' already exists")

        db_item = InventoryItemORM(
            name=name.strip(),
            normalized_name=normalized,
            category=category,
            quantity=float(quantity),
            unit=unit.strip(),
            low_stock_at=low_stock_at,
        )
        session.add(db_item)
        session.flush()
        return _to_model(db_item)


def update_inventory_item(
    item_id: int,
    *,
    name: Optional[str] = None,
    quantity: Optional[float] = None,
    unit: Optional[str] = None,
    category: Optional[str] = None,
    low_stock_at: Optional[float] | object = _UNSET,
) -> InventoryItem:
    with session_scope() as session:
        db_item = session.get(InventoryItemORM, item_id)
        if db_item is None:
            raise NotFoundError("Inventory item")

        if name is not None:
            normalized = normalize_name(name)
            clash = session.execute(
                select(InventoryItemORM.id).where(
                    InventoryItemORM.normalized_name == normalized,
                    InventoryItemORM.id != item_id,
                )
            ).first()
            if clash:
                raise DuplicateKey(f"Inventory item '{name.strip()}' already exists")
            db_item.name = name.strip()
            db_item.normalized_name = normalized
        if quantity is not None:
            # Quantities never go negative after a decrement.
            db_item.quantity = max(0.0, float(quantity))
        if unit is not None:
            db_item.unit = unit.strip()
        if category is not None:
            db_item.category = category
        if low_stock_at is not _UNSET:
            db_item.low_stock_at = low_stock_at  # type: ignore[assignment]

        session.flush()
        return _to_model(db_item)


def delete_inventory_item(item_id: int) -> None:
    with session_scope() as session:
        db_item = session.get(InventoryItemORM, item_id)
        if db_item is None:
            raise NotFoundError("Inventory item")
        session.delete(db_item)


def get_inventory_item(item_id: int) -> Optional[InventoryItem]:
    with session_scope() as session:
        row = session.get(InventoryItemORM, item_id)
        if row is None:
            return None
        return _to_model(row)


__all__ = [
    "list_inventory",
    "list_low_stock",
    "create_inventory_item",
    "update_inventory_item",
    "delete_inventory_item",
    "get_inventory_item",
]
