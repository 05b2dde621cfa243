"""Conversational meal suggestions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from thali.errors import LLMUnavailable
from thali.models.context import CalorieBudget
from thali.models.suggest import ChatSuggestRequest, ChatSuggestResponse, SuggestRequest
from thali.planner.context_builder import ContextAssembler
from thali.planner.llm import LLMDriver, validate_meals
from thali.planner.postprocess import enforce_constraints, process
from thali.planner.prompts import compose_chat

logger = logging.getLogger(__name__)

CHAT_FALLBACK_MESSAGE = "I'm having trouble thinking right now. Could you try again?"
CHAT_DEFAULT_MESSAGE = "Here are a few ideas."


def _reply_text(body: dict) -> str:
    message = body.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return CHAT_DEFAULT_MESSAGE


async def chat_suggest(
    request: ChatSuggestRequest,
    *,
    assembler: ContextAssembler,
    driver: LLMDriver,
    now: Optional[datetime] = None,
) -> ChatSuggestResponse:
    """Answer one chat turn with a short reply and constraint-checked suggestions.

    LLM failures become an apologetic reply with no suggestions. Recently eaten
    meals and a requested meal type are enforced the same way as ``/suggest``.
    """

    context = await assembler.build(now)
    budget = context.calorie_budget or CalorieBudget.from_totals(0, 0)
    try:
        body = await driver.complete(compose_chat(request, context), operation="chat")
    except LLMUnavailable as exc:
        logger.warning("Chat LLM unavailable; replying without suggestions: %s", exc)
        return ChatSuggestResponse(message=CHAT_FALLBACK_MESSAGE, suggestions=[], calorie_info=budget)

    constraints = SuggestRequest(meal_type=request.meal_type)
    meals = enforce_constraints(validate_meals(body.get("suggestions")), constraints, context)
    suggestions = process(meals, context)
    logger.info(
        "Chat turn answered with %d suggestions (turns=%d mealType=%s)",
        len(suggestions),
        len(request.conversation),
        request.meal_type or "any",
    )
    return ChatSuggestResponse(message=_reply_text(body), suggestions=suggestions, calorie_info=budget)


__all__ = ["CHAT_FALLBACK_MESSAGE", "chat_suggest"]
