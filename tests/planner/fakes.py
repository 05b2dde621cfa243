"""In-memory storage and scripted LLM transport used by planner tests."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Iterable, Optional

import httpx

from thali.config import Settings
from thali.errors import StorageError
from thali.models.context import DayReview, InventoryItem, MealHistoryEntry
from thali.models.plan import PlanSlot
from thali.models.recipe import Recipe, RecipeDraft
from thali.models.shopping import ShoppingItem, ShoppingItemDraft
from thali.planner.llm import LLMDriver
from thali.planner.utils import normalize_name


def meal(
    name: str,
    *,
    cuisine: str = "north_indian",
    meal_type: str = "dinner",
    calories: int = 500,
    prep_time: int = 30,
    ingredients: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    """Meal payload shaped the way the LLM returns it."""

    return {
        "name": name,
        "cuisine": cuisine,
        "mealType": meal_type,
        "prepTime": prep_time,
        "estimatedCalories": calories,
        "ingredients": ingredients or [],
        "reason": f"{name} fits tonight",
        "description": f"Homestyle {name}",
    }


def eaten(
    name: str,
    eaten_at: datetime,
    *,
    cuisine: str = "north_indian",
    meal_type: str = "dinner",
    rating: Optional[int] = None,
    calories: Optional[int] = None,
) -> MealHistoryEntry:
    return MealHistoryEntry(
        meal_name=name,
        cuisine=cuisine,
        meal_type=meal_type,
        eaten_at=eaten_at,
        rating=rating,
        calories=calories,
    )


def chat_completion(content: str) -> dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }


class ScriptedLLM:
    """Replay queued answers through an ``httpx.MockTransport``.

    Answers may be a dict (sent as JSON content), a raw string, an ``httpx.Response``
    or an ``httpx`` exception class raised for the request. The last answer repeats.
    """

    def __init__(self, *answers: Any) -> None:
        self.answers = list(answers)
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, type) and issubclass(answer, httpx.HTTPError):
            raise answer("scripted failure", request=request)
        if isinstance(answer, httpx.Response):
            return answer
        if isinstance(answer, dict):
            answer = json.dumps(answer)
        return httpx.Response(200, json=chat_completion(answer))

    def sent_payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def driver(self, **overrides: Any) -> LLMDriver:
        settings = Settings(llm_api_key="test-llm-key", **overrides)
        return LLMDriver(settings, transport=self.transport)


class FakeStorage:
    """Dictionary-backed storage; names in ``failing`` raise :class:`StorageError`."""

    def __init__(
        self,
        *,
        inventory: Iterable[InventoryItem] = (),
        history: Iterable[MealHistoryEntry] = (),
        day_reviews: Iterable[DayReview] = (),
        preferences: Optional[dict[str, Any]] = None,
        shopping: Iterable[ShoppingItem] = (),
        failing: Iterable[str] = (),
    ) -> None:
        self.inventory = list(inventory)
        self.history = list(history)
        self.day_reviews = list(day_reviews)
        self.preferences = dict(preferences or {})
        self.slots: dict[tuple[date, str], PlanSlot] = {}
        self.shopping = list(shopping)
        self.recipes: list[Recipe] = []
        self.failing = set(failing)
        self._next_id = 1

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise StorageError(f"{name} unavailable")

    def _allocate_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def list_inventory(self) -> list[InventoryItem]:
        self._check("list_inventory")
        return list(self.inventory)

    def list_history(
        self,
        since: datetime,
        until: Optional[datetime] = None,
        *,
        rated_only: bool = False,
    ) -> list[MealHistoryEntry]:
        self._check("list_history")
        entries = [
            entry
            for entry in self.history
            if entry.eaten_at >= since
            and (until is None or entry.eaten_at < until)
            and (not rated_only or entry.rating is not None)
        ]
        return sorted(entries, key=lambda entry: entry.eaten_at, reverse=True)

    def list_day_reviews(self, since: date, limit: int) -> list[DayReview]:
        self._check("list_day_reviews")
        reviews = [review for review in self.day_reviews if review.date >= since]
        return sorted(reviews, key=lambda review: review.date, reverse=True)[:limit]

    def get_preference(self, key: str) -> Optional[Any]:
        self._check("get_preference")
        return self.preferences.get(key)

    def upsert_plan_slot(self, slot: PlanSlot) -> PlanSlot:
        self._check("upsert_plan_slot")
        key = (slot.date, slot.meal_type)
        existing = self.slots.get(key)
        stored = slot.model_copy(update={"id": existing.id if existing else self._allocate_id()})
        self.slots[key] = stored
        return stored

    def list_plan_slots(self, start: date, end: date) -> list[PlanSlot]:
        self._check("list_plan_slots")
        return [self.slots[key] for key in sorted(self.slots) if start <= key[0] < end]

    def list_shopping_items(self) -> list[ShoppingItem]:
        self._check("list_shopping_items")
        return list(self.shopping)

    def add_shopping_items(self, drafts: Iterable[ShoppingItemDraft]) -> list[ShoppingItem]:
        self._check("add_shopping_items")
        pending = {normalize_name(item.name) for item in self.shopping if not item.is_purchased}
        created = []
        for draft in drafts:
            if normalize_name(draft.name) in pending:
                continue
            item = ShoppingItem(id=self._allocate_id(), **draft.model_dump())
            self.shopping.append(item)
            pending.add(normalize_name(draft.name))
            created.append(item)
        return created

    def save_recipe(self, draft: RecipeDraft) -> Recipe:
        self._check("save_recipe")
        recipe = Recipe(id=self._allocate_id(), **draft.model_dump())
        self.recipes.append(recipe)
        return recipe
