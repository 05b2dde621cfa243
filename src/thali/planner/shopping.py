"""Derive a shopping list from the week's planned meals minus pantry stock."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from rapidfuzz import fuzz, process

from thali.errors import PlanEmpty
from thali.metrics import SHOPPING_ITEMS_DERIVED
from thali.models.context import InventoryItem
from thali.models.meal import DEFAULT_INGREDIENT_UNIT
from thali.models.plan import PlanSlot
from thali.models.shopping import ShoppingItem, ShoppingItemDraft
from thali.planner.storage import Storage
from thali.planner.utils import build_inventory_index, normalize_name, week_start_for

logger = logging.getLogger(__name__)

QUANTITY_PRECISION = 3
# Minimum rapidfuzz ratio for a pantry item to stand in for an ingredient
# ("onions" matches "onion"; "potato" does not match "tomato").
STOCK_MATCH_THRESHOLD = 90

# Names that contain a keyword from the wrong category (dalchini contains "dal",
# raisin contains "rai"); checked before CATEGORY_KEYWORDS.
KEYWORD_COLLISIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("spices", ("dalchini", "masala powder")),
    ("fruits", ("raisin",)),
)

# Ordered; the first category with a keyword contained in the name wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "vegetables",
        (
            "onion", "tomato", "potato", "carrot", "beans", "capsicum", "cauliflower",
            "cabbage", "spinach", "palak", "methi", "bhindi", "brinjal", "eggplant",
            "lauki", "turai", "parwal", "peas", "mushroom",
        ),
    ),
    ("dairy", ("milk", "curd", "paneer", "butter", "ghee", "cream", "cheese", "yogurt", "dahi")),
    ("grains", ("rice", "atta", "maida", "besan", "rava", "suji", "poha", "oats", "bread", "roti")),
    (
        "proteins",
        ("chicken", "mutton", "fish", "egg", "prawn", "dal", "chana", "rajma", "chole", "tofu", "soya"),
    ),
    (
        "spices",
        ("haldi", "mirchi", "jeera", "dhania", "garam masala", "hing", "rai", "kasuri", "chaat masala"),
    ),
    (
        "fruits",
        ("apple", "banana", "mango", "orange", "grape", "papaya", "pomegranate", "lemon", "lime", "guava"),
    ),
)

_WEIGHT_UNITS = {
    "g": 1.0,
    "gm": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "kilogram": 1000.0,
    "kilograms": 1000.0,
    "mg": 0.001,
}
_VOLUME_UNITS = {
    "ml": 1.0,
    "milliliter": 1.0,
    "milliliters": 1.0,
    "l": 1000.0,
    "liter": 1000.0,
    "liters": 1000.0,
    "litre": 1000.0,
    "litres": 1000.0,
    "cup": 240.0,
    "cups": 240.0,
    "tbsp": 15.0,
    "tablespoon": 15.0,
    "tablespoons": 15.0,
    "tsp": 5.0,
    "teaspoon": 5.0,
    "teaspoons": 5.0,
}
_COUNT_UNITS = {"count", "ea", "each", "unit", "units", "piece", "pieces", "pc", "pcs", "nos"}


def categorize(name: str) -> str:
    lowered = name.casefold()
    for category, keywords in (*KEYWORD_COLLISIONS, *CATEGORY_KEYWORDS):
        if any(keyword in lowered for keyword in keywords):
            return category
    return "others"


def _normalize_unit(unit: Optional[str]) -> str:
    return " ".join((unit or "").lower().split())


def convert_quantity(quantity: float, from_unit: str, to_unit: str) -> Optional[float]:
    """Convert between units of one family; ``None`` when they are incompatible.

    A blank unit on either side is treated as matching.
    """

    source, target = _normalize_unit(from_unit), _normalize_unit(to_unit)
    if source == target or not source or not target:
        return quantity
    if source in _COUNT_UNITS and target in _COUNT_UNITS:
        return quantity
    for table in (_WEIGHT_UNITS, _VOLUME_UNITS):
        if source in table and target in table:
            return quantity * table[source] / table[target]
    return None


@dataclass
class _Requirement:
    name: str
    quantity: float
    unit: str
    category: str


def aggregate_ingredients(slots: Iterable[PlanSlot]) -> dict[str, _Requirement]:
    """Sum ingredient quantities across slots keyed by normalized name.

    The first occurrence fixes the display name and unit; later entries in a
    convertible unit are converted before summing.
    """

    needed: dict[str, _Requirement] = {}
    for slot in slots:
        for ingredient in slot.meal.ingredients:
            key = normalize_name(ingredient.name)
            if not key:
                continue
            unit = _normalize_unit(ingredient.unit) or DEFAULT_INGREDIENT_UNIT
            current = needed.get(key)
            if current is None:
                needed[key] = _Requirement(
                    name=ingredient.name.strip(),
                    quantity=ingredient.quantity,
                    unit=unit,
                    category=categorize(ingredient.name),
                )
                continue
            converted = convert_quantity(ingredient.quantity, unit, current.unit)
            current.quantity += converted if converted is not None else ingredient.quantity
    return needed


def match_stock(key: str, index: dict[str, InventoryItem]) -> Optional[InventoryItem]:
    """Pantry item for a normalized ingredient name, exact first, then fuzzy."""

    if key in index:
        return index[key]
    if not index:
        return None
    match = process.extractOne(key, list(index), scorer=fuzz.ratio, score_cutoff=STOCK_MATCH_THRESHOLD)
    if match is None:
        return None
    matched_key, score, _ = match
    logger.debug("Matched ingredient %r to pantry item %r (score %.0f)", key, matched_key, score)
    return index[matched_key]


def _on_hand(requirement: _Requirement, stock: Optional[InventoryItem]) -> float:
    if stock is None:
        return 0.0
    converted = convert_quantity(stock.quantity, stock.unit, requirement.unit)
    if converted is None:
        logger.debug(
            "Ignoring stock of %s: unit %r not comparable with %r",
            requirement.name,
            stock.unit,
            requirement.unit,
        )
        return 0.0
    return converted


def compute_shortfall(
    slots: Iterable[PlanSlot],
    inventory: Iterable[InventoryItem],
) -> list[ShoppingItemDraft]:
    """Required minus on-hand per ingredient; fully stocked ingredients are omitted."""

    index = build_inventory_index(inventory)
    drafts: list[ShoppingItemDraft] = []
    for key, requirement in aggregate_ingredients(slots).items():
        on_hand = _on_hand(requirement, match_stock(key, index))
        missing = round(requirement.quantity - on_hand, QUANTITY_PRECISION)
        if missing <= 0:
            continue
        drafts.append(
            ShoppingItemDraft(
                name=requirement.name[:100],
                quantity=missing,
                unit=requirement.unit[:20],
                category=requirement.category,
            )
        )
    return drafts


def sort_shopping_list(items: Iterable[ShoppingItem]) -> list[ShoppingItem]:
    return sorted(items, key=lambda item: (item.is_purchased, item.category, item.name.casefold()))


class ShoppingListDeriver:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    async def derive(self, week: Optional[date] = None, now: Optional[datetime] = None) -> list[ShoppingItem]:
        """Persist the week's shortfall and return the whole shopping list.

        ``week`` may be any day of the target week; it defaults to the current week.
        Raises :class:`PlanEmpty` when nothing is planned.
        """

        anchor = week or (now or datetime.now()).date()
        week_start = week_start_for(anchor)
        slots = await asyncio.to_thread(
            self._storage.list_plan_slots, week_start, week_start + timedelta(days=7)
        )
        if not slots:
            raise PlanEmpty()

        inventory = await asyncio.to_thread(self._storage.list_inventory)
        drafts = compute_shortfall(slots, inventory)
        created = await asyncio.to_thread(self._storage.add_shopping_items, drafts)
        SHOPPING_ITEMS_DERIVED.inc(len(created))
        logger.info(
            "Derived %d shopping items (%d new) for week of %s",
            len(drafts),
            len(created),
            week_start.isoformat(),
        )
        return sort_shopping_list(await asyncio.to_thread(self._storage.list_shopping_items))


__all__ = [
    "CATEGORY_KEYWORDS",
    "ShoppingListDeriver",
    "aggregate_ingredients",
    "categorize",
    "compute_shortfall",
    "convert_quantity",
    "sort_shopping_list",
]
