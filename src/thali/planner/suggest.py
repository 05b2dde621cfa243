"""Single-meal suggestion flow."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from thali.models.context import CalorieBudget
from thali.models.suggest import SuggestRequest, SuggestResponse
from thali.planner.context_builder import ContextAssembler
from thali.planner.llm import LLMDriver
from thali.planner.postprocess import process
from thali.planner.prompts import compose

logger = logging.getLogger(__name__)


async def suggest_meals(
    request: SuggestRequest,
    *,
    assembler: ContextAssembler,
    driver: LLMDriver,
    now: Optional[datetime] = None,
) -> SuggestResponse:
    """Assemble context, prompt the LLM and return ordered, annotated suggestions.

    Storage failures propagate; LLM failures degrade to the fallback set inside the driver.
    """

    context = await assembler.build(now)
    prompt = compose(request, context)
    meals = await driver.invoke(prompt, request, context)
    suggestions = process(meals, context)
    logger.info(
        "Suggested %d meals (cuisine=%s mealType=%s rejected=%d)",
        len(suggestions),
        request.cuisine or "any",
        request.meal_type or "any",
        len(request.rejected_meals),
    )
    budget = context.calorie_budget or CalorieBudget.from_totals(0, 0)
    return SuggestResponse(suggestions=suggestions, calorie_info=budget)


__all__ = ["suggest_meals"]
