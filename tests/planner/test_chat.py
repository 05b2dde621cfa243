from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import httpx

from thali.config import Settings
from thali.models.context import InventoryItem
from thali.models.suggest import ChatMessage, ChatSuggestRequest
from thali.planner.chat import CHAT_FALLBACK_MESSAGE, chat_suggest
from thali.planner.context_builder import DAILY_CALORIE_GOAL_KEY, ContextAssembler
from thali.planner.prompts import CHAT_OPENER

from tests.planner.fakes import FakeStorage, ScriptedLLM, eaten, meal

NOW = datetime(2025, 3, 12, 19, 0)


def _storage() -> FakeStorage:
    return FakeStorage(
        inventory=[InventoryItem(name="Paneer", quantity=200, unit="g")],
        history=[
            eaten("Rajma Chawal", NOW - timedelta(days=1), meal_type="lunch"),
            eaten("Poha", NOW.replace(hour=8), cuisine="indian", meal_type="breakfast", calories=400),
        ],
        preferences={DAILY_CALORIE_GOAL_KEY: 1800},
    )


def _chat(request: ChatSuggestRequest, llm: ScriptedLLM, storage: FakeStorage | None = None):
    assembler = ContextAssembler(storage or _storage(), Settings())
    return asyncio.run(chat_suggest(request, assembler=assembler, driver=llm.driver(), now=NOW))


def test_chat_sends_conversation_after_household_context():
    llm = ScriptedLLM({"message": "Spicy it is!", "suggestions": [meal("Paneer Tikka")]})
    request = ChatSuggestRequest(
        meal_type="dinner",
        conversation=[
            ChatMessage(role="user", content="Something spicy"),
            ChatMessage(role="assistant", content="Veg or non-veg?"),
            ChatMessage(role="user", content="Veg please"),
        ],
    )

    response = _chat(request, llm)

    assert response.message == "Spicy it is!"
    messages = llm.sent_payloads()[0]["messages"]
    assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
    assert messages[-1]["content"] == "Veg please"
    system = messages[0]["content"]
    assert "Rajma Chawal" in system
    assert "Paneer (200 g)" in system
    assert 'set mealType to "dinner"' in system


def test_chat_filters_recent_and_off_type_meals_and_orders_by_calories():
    llm = ScriptedLLM(
        {
            "message": "Try these.",
            "suggestions": [
                meal("Shahi Paneer", calories=700),
                meal("rajma chawal", calories=300),
                meal("Masala Dosa", meal_type="breakfast", calories=350),
                meal("Palak Paneer", calories=450),
                {"name": "Broken"},
            ],
        }
    )
    request = ChatSuggestRequest(
        meal_type="dinner",
        conversation=[ChatMessage(role="user", content="Paneer tonight")],
    )

    response = _chat(request, llm)

    assert [s.name for s in response.suggestions] == ["Palak Paneer", "Shahi Paneer"]
    assert response.calorie_info.daily_goal == 1800
    assert response.calorie_info.remaining == 1400


def test_chat_without_meal_type_keeps_any_type():
    llm = ScriptedLLM(
        {
            "message": "Breakfast for dinner?",
            "suggestions": [meal("Masala Dosa", meal_type="breakfast"), meal("Dal Makhani")],
        }
    )

    response = _chat(ChatSuggestRequest(conversation=[ChatMessage(role="user", content="Surprise me")]), llm)

    assert {s.name for s in response.suggestions} == {"Masala Dosa", "Dal Makhani"}


def test_empty_conversation_sends_opener():
    llm = ScriptedLLM({"message": "What are you craving?", "suggestions": []})

    response = _chat(ChatSuggestRequest(conversation=[]), llm)

    messages = llm.sent_payloads()[0]["messages"]
    assert messages[1] == {"role": "user", "content": CHAT_OPENER}
    assert response.suggestions == []


def test_blank_message_gets_default_text():
    llm = ScriptedLLM({"message": "  ", "suggestions": [meal("Kadai Paneer")]})

    response = _chat(ChatSuggestRequest(conversation=[ChatMessage(role="user", content="hi")]), llm)

    assert response.message == "Here are a few ideas."
    assert [s.name for s in response.suggestions] == ["Kadai Paneer"]


def test_llm_failure_replies_with_apology_and_no_suggestions():
    llm = ScriptedLLM(httpx.ConnectError)

    response = _chat(ChatSuggestRequest(conversation=[ChatMessage(role="user", content="hi")]), llm)

    assert response.message == CHAT_FALLBACK_MESSAGE
    assert response.suggestions == []
    assert response.calorie_info.remaining == 1400
