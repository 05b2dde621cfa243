from __future__ import annotations

from datetime import date

import pytest

from thali.db.plans import clear_plan_range, delete_plan_slot, list_plan_slots, upsert_plan_slot
from thali.errors import NotFoundError
from thali.models.meal import MealPayload
from thali.models.plan import PlanSlot

from tests.planner.fakes import meal


def _slot(day: date, meal_type: str, name: str) -> PlanSlot:
    payload = MealPayload.model_validate(
        meal(name, meal_type=meal_type, ingredients=[{"item": "Rice", "quantity": "0.2", "unit": "kg"}])
    )
    return PlanSlot(date=day, meal_type=meal_type, meal=payload)


def test_upsert_is_idempotent_per_date_and_meal_type():
    first = upsert_plan_slot(_slot(date(2025, 3, 10), "lunch", "Dal Rice"))
    second = upsert_plan_slot(_slot(date(2025, 3, 10), "lunch", "Rajma Rice"))

    slots = list_plan_slots(date(2025, 3, 10), date(2025, 3, 17))

    assert first.id == second.id
    assert len(slots) == 1
    assert slots[0].meal.name == "Rajma Rice"
    assert slots[0].meal.ingredients[0].name == "Rice"
    assert slots[0].meal.ingredients[0].quantity == 0.2


def test_list_plan_slots_is_half_open():
    upsert_plan_slot(_slot(date(2025, 3, 9), "dinner", "Sunday Biryani"))
    upsert_plan_slot(_slot(date(2025, 3, 10), "breakfast", "Idli"))
    upsert_plan_slot(_slot(date(2025, 3, 16), "dinner", "Pulao"))
    upsert_plan_slot(_slot(date(2025, 3, 17), "breakfast", "Next Week Dosa"))

    names = [slot.meal.name for slot in list_plan_slots(date(2025, 3, 10), date(2025, 3, 17))]

    assert names == ["Idli", "Pulao"]


def test_delete_and_clear_plan():
    slot = upsert_plan_slot(_slot(date(2025, 3, 11), "dinner", "Kadhi Chawal"))
    upsert_plan_slot(_slot(date(2025, 3, 12), "dinner", "Aloo Tikki"))
    upsert_plan_slot(_slot(date(2025, 3, 13), "dinner", "Bhindi Fry"))

    delete_plan_slot(slot.id)
    with pytest.raises(NotFoundError):
        delete_plan_slot(slot.id)

    assert clear_plan_range(date(2025, 3, 10), date(2025, 3, 17)) == 2
    assert list_plan_slots(date(2025, 3, 10), date(2025, 3, 17)) == []
