"""Meal plan slot persistence.

The :class:`~thali.models.meal.MealPayload` of a slot is stored as a single JSON text
column. Serialization happens only in this module; callers always see parsed models.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from thali.errors import DuplicateKey, NotFoundError
from thali.models.meal import MealPayload
from thali.models.plan import PlanSlot

from .models import PlanSlotORM
from .repository import session_scope

logger = logging.getLogger(__name__)


def _encode_payload(meal: MealPayload) -> str:
    return json.dumps(meal.model_dump(mode="json", by_alias=True), sort_keys=True)


def _decode_payload(raw: str) -> MealPayload:
    return MealPayload.model_validate(json.loads(raw))


def _to_model(row: PlanSlotORM) -> PlanSlot:
    return PlanSlot(
        id=row.id,
        date=row.date,
        meal_type=row.meal_type,  # type: ignore[arg-type]
        meal=_decode_payload(row.payload),
    )


def _write_slot(session: Session, slot: PlanSlot) -> PlanSlotORM:
    row = session.execute(
        select(PlanSlotORM).where(
            PlanSlotORM.date == slot.date,
            PlanSlotORM.meal_type == slot.meal_type,
        )
    ).scalar_one_or_none()
    if row is None:
        row = PlanSlotORM(date=slot.date, meal_type=slot.meal_type)
        session.add(row)
    row.payload = _encode_payload(slot.meal)
    session.flush()
    return row


def upsert_plan_slot(slot: PlanSlot) -> PlanSlot:
    """Insert or overwrite the slot for ``(slot.date, slot.meal_type)``."""

    try:
        with session_scope() as session:
            try:
                return _to_model(_write_slot(session, slot))
            except IntegrityError as exc:
                raise DuplicateKey(f"Plan slot {slot.date} {slot.meal_type} already exists") from exc
    except DuplicateKey:
        # A concurrent writer inserted the same slot first; overwrite it.
        logger.info("Plan slot conflict on %s %s; retrying as update", slot.date, slot.meal_type)
        with session_scope() as session:
            return _to_model(_write_slot(session, slot))


def list_plan_slots(start: date, end: date) -> List[PlanSlot]:
    """Return slots dated in ``[start, end)`` ordered by date then meal type."""

    with session_scope() as session:
        rows = (
            session.execute(
                select(PlanSlotORM)
                .where(PlanSlotORM.date >= start, PlanSlotORM.date < end)
                .order_by(PlanSlotORM.date.asc(), PlanSlotORM.meal_type.asc())
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def delete_plan_slot(slot_id: int) -> None:
    with session_scope() as session:
        row = session.get(PlanSlotORM, slot_id)
        if row is None:
            raise NotFoundError("Meal plan entry")
        session.delete(row)


def clear_plan_range(start: date, end: date) -> int:
    """Delete every slot in ``[start, end)`` and return how many were removed."""

    with session_scope() as session:
        result = session.execute(
            delete(PlanSlotORM).where(PlanSlotORM.date >= start, PlanSlotORM.date < end)
        )
        return int(result.rowcount or 0)


__all__ = ["upsert_plan_slot", "list_plan_slots", "delete_plan_slot", "clear_plan_range"]
