"""SQLAlchemy models representing Thali persistence tables."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base class for Thali ORM models."""


class InventoryItemORM(Base):
    """Pantry item; ``normalized_name`` keeps names unique case-insensitively."""

    __tablename__ = "inventory_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="others")
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    low_stock_at: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class MealHistoryORM(Base):
    """Meal the household ate, optionally rated for preference learning."""

    __tablename__ = "meal_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    meal_name: Mapped[str] = mapped_column(String(200), nullable=False)
    cuisine: Mapped[str] = mapped_column(String(32), nullable=False)
    meal_type: Mapped[str] = mapped_column(String(16), nullable=False)
    eaten_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    calories: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class DayReviewORM(Base):
    __tablename__ = "day_reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, nullable=False, unique=True)
    variety: Mapped[int] = mapped_column(Integer, nullable=False)
    effort: Mapped[int] = mapped_column(Integer, nullable=False)
    satisfaction: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class WeekReviewORM(Base):
    """Retrospective for the week starting on ``week_start`` (a Monday)."""

    __tablename__ = "week_reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_start: Mapped[date] = mapped_column(Date, nullable=False, unique=True)
    variety_balance: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    effort_vs_satisfaction: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    highlights: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    improvements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class PreferenceORM(Base):
    """Key/value storage for household preferences (calorie goal, etc.)."""

    __tablename__ = "preferences"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class PlanSlotORM(Base):
    """Meal plan slot; the meal payload is stored as one JSON text column."""

    __tablename__ = "meal_plan_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    meal_type: Mapped[str] = mapped_column(String(16), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("date", "meal_type", name="uq_plan_date_meal_type"),)


class ShoppingItemORM(Base):
    """Shopping list entries, derived from the plan or added by hand."""

    __tablename__ = "shopping_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="pieces")
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="others")
    is_purchased: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


class RecipeORM(Base):
    """Saved recipe; list-valued fields are JSON text."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    meal_name: Mapped[str] = mapped_column(String(200), nullable=False)
    cuisine: Mapped[str] = mapped_column(String(32), nullable=False)
    prep_time: Mapped[int] = mapped_column(Integer, nullable=False)
    cook_time: Mapped[int] = mapped_column(Integer, nullable=False)
    servings: Mapped[int] = mapped_column(Integer, nullable=False)
    ingredients: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    instructions: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    tips: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    calories: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


class SavedMealORM(Base):
    """Catalog entry for a dish the household keeps coming back to."""

    __tablename__ = "saved_meals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    cuisine: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    meal_type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    prep_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ingredients: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    recipe: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


__all__ = [
    "Base",
    "InventoryItemORM",
    "MealHistoryORM",
    "DayReviewORM",
    "WeekReviewORM",
    "PreferenceORM",
    "PlanSlotORM",
    "ShoppingItemORM",
    "RecipeORM",
    "SavedMealORM",
]
