"""Shopping list persistence helpers."""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import delete, select

from thali.errors import NotFoundError
from thali.models.shopping import ShoppingItem, ShoppingItemDraft
from thali.planner.utils import normalize_name

from .models import ShoppingItemORM
from .repository import session_scope

_UNSET = object()


def _to_model(row: ShoppingItemORM) -> ShoppingItem:
    return ShoppingItem.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "quantity": row.quantity,
            "unit": row.unit,
            "category": row.category,
            "is_purchased": row.is_purchased,
            "created_at": row.created_at,
        }
    )


def list_shopping_items() -> List[ShoppingItem]:
    """Return all items: unpurchased first, then by category and name."""

    with session_scope() as session:
        rows = (
            session.execute(
                select(ShoppingItemORM).order_by(
                    ShoppingItemORM.is_purchased.asc(),
                    ShoppingItemORM.category.asc(),
                    ShoppingItemORM.name.asc(),
                )
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def add_shopping_items(drafts: Iterable[ShoppingItemDraft]) -> List[ShoppingItem]:
    """Insert drafts, skipping names already on the list and not yet purchased."""

    created: List[ShoppingItem] = []
    with session_scope() as session:
        pending = {
            normalize_name(name)
            for name in session.execute(
                select(ShoppingItemORM.name).where(ShoppingItemORM.is_purchased.is_(False))
            ).scalars()
        }
        for draft in drafts:
            key = normalize_name(draft.name)
            if key in pending:
                continue
            row = ShoppingItemORM(
                name=draft.name.strip(),
                quantity=draft.quantity,
                unit=draft.unit,
                category=draft.category,
                is_purchased=False,
            )
            session.add(row)
            session.flush()
            pending.add(key)
            created.append(_to_model(row))
    return created


def create_shopping_item(draft: ShoppingItemDraft) -> ShoppingItem:
    """Insert a hand-added item without de-duplication."""

    with session_scope() as session:
        row = ShoppingItemORM(
            name=draft.name.strip(),
            quantity=draft.quantity,
            unit=draft.unit.strip(),
            category=draft.category,
            is_purchased=False,
        )
        session.add(row)
        session.flush()
        return _to_model(row)


def update_shopping_item(
    item_id: int,
    *,
    quantity: Optional[float] = None,
    unit: Optional[str] = None,
    is_purchased: bool | object = _UNSET,
) -> ShoppingItem:
    with session_scope() as session:
        row = session.get(ShoppingItemORM, item_id)
        if row is None:
            raise NotFoundError("Shopping item")
        if quantity is not None:
            row.quantity = float(quantity)
        if unit is not None:
            row.unit = unit.strip()
        if is_purchased is not _UNSET:
            row.is_purchased = bool(is_purchased)
        session.flush()
        return _to_model(row)


def delete_shopping_item(item_id: int) -> None:
    with session_scope() as session:
        row = session.get(ShoppingItemORM, item_id)
        if row is None:
            raise NotFoundError("Shopping item")
        session.delete(row)


def clear_purchased() -> int:
    """Remove purchased items and return how many were deleted."""

    with session_scope() as session:
        result = session.execute(delete(ShoppingItemORM).where(ShoppingItemORM.is_purchased.is_(True)))
        return int(result.rowcount or 0)


__all__ = [
    "list_shopping_items",
    "add_shopping_items",
    "create_shopping_item",
    "update_shopping_item",
    "delete_shopping_item",
    "clear_purchased",
]
