"""Shared helpers for planner modules."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable

from thali.models.context import InventoryItem


def normalize_name(value: str) -> str:
    """Normalize free-text names for comparison."""
    return " ".join(value.casefold().split())


def build_inventory_index(inventory: Iterable[InventoryItem]) -> Dict[str, InventoryItem]:
    """Create a lookup table of inventory items by normalized name."""
    return {normalize_name(item.name): item for item in inventory}


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def week_start_for(day: date) -> date:
    """Return the Monday on or before ``day``."""
    return day - timedelta(days=day.weekday())


def week_dates(week_start: date) -> list[date]:
    return [week_start + timedelta(days=offset) for offset in range(7)]


def format_quantity(value: float) -> str:
    """Render quantities without trailing zeros (``2.0`` -> ``2``)."""
    return f"{value:g}"


__all__ = [
    "normalize_name",
    "build_inventory_index",
    "start_of_day",
    "week_start_for",
    "week_dates",
    "format_quantity",
]
