"""Weekly plan generation: assemble, prompt, validate, then persist per slot."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from pydantic import ValidationError

from thali.errors import LLMUnavailable
from thali.models.meal import MealPayload
from thali.models.plan import DAY_NAMES, PLANNED_MEAL_TYPES, PlannedDay, PlanSlot, WeekPlanResult
from thali.planner.context_builder import ContextAssembler
from thali.planner.llm import LLMDriver
from thali.planner.prompts import compose_week
from thali.planner.storage import Storage
from thali.planner.utils import week_start_for

logger = logging.getLogger(__name__)

_DAY_OFFSETS = {name.casefold(): offset for offset, name in enumerate(DAY_NAMES)}


def _parse_meal(raw: Any, meal_type: str) -> Optional[MealPayload]:
    if not isinstance(raw, dict):
        return None
    # The slot key decides the meal type.
    data = {**raw, "mealType": meal_type}
    data.pop("meal_type", None)
    try:
        return MealPayload.model_validate(data)
    except ValidationError as exc:
        logger.info("Dropping invalid %s entry: %s", meal_type, exc.errors()[:1])
        return None


def parse_week_plan(body: dict[str, Any], week_start: date) -> list[PlannedDay]:
    """Validate the ``weekPlan`` array, dropping malformed days and meals.

    A repeated day keeps its first occurrence.
    """

    raw_days = body.get("weekPlan")
    if not isinstance(raw_days, list):
        return []

    days: dict[int, PlannedDay] = {}
    for raw_day in raw_days:
        if not isinstance(raw_day, dict) or not isinstance(raw_day.get("day"), str):
            continue
        offset = _DAY_OFFSETS.get(raw_day["day"].strip().casefold())
        if offset is None or offset in days:
            continue
        raw_meals = raw_day.get("meals")
        if not isinstance(raw_meals, dict):
            continue
        meals = {}
        for meal_type in PLANNED_MEAL_TYPES:
            meal = _parse_meal(raw_meals.get(meal_type), meal_type)
            if meal is not None:
                meals[meal_type] = meal
        if meals:
            days[offset] = PlannedDay(
                day=DAY_NAMES[offset],
                date=week_start + timedelta(days=offset),
                meals=meals,
            )
    return [days[offset] for offset in sorted(days)]


class WeekPlanGenerator:
    """Generate and persist a Monday-anchored 7 x 3 meal plan."""

    def __init__(self, storage: Storage, driver: LLMDriver, assembler: ContextAssembler) -> None:
        self._storage = storage
        self._driver = driver
        self._assembler = assembler

    async def generate_week(self, week_start: date, now: Optional[datetime] = None) -> WeekPlanResult:
        week_start = week_start_for(week_start)
        context = await self._assembler.build(now)
        prompt = compose_week(context, week_start)

        body = await self._driver.complete(prompt, operation="week_plan")
        days = parse_week_plan(body, week_start)
        if not days:
            raise LLMUnavailable("LLM returned no usable meals for the week")

        slots: list[PlanSlot] = []
        for day in days:
            for meal_type, meal in day.meals.items():
                slot = PlanSlot(date=day.date, meal_type=meal_type, meal=meal)
                slots.append(await asyncio.to_thread(self._storage.upsert_plan_slot, slot))

        logger.info("Generated week plan from %s with %d slots", week_start.isoformat(), len(slots))
        return WeekPlanResult(
            week_start=week_start,
            week_plan=days,
            created_plans=len(slots),
            slots=slots,
        )


__all__ = ["WeekPlanGenerator", "parse_week_plan"]
