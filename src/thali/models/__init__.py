"""Pydantic models defining shared data contracts."""

from thali.models.catalog import SavedMeal
from thali.models.context import (
    CalorieBudget,
    CuisinePreference,
    DayReview,
    InventoryItem,
    MealHistoryEntry,
    ReviewContext,
    SuggestionContext,
    WeekReview,
)
from thali.models.meal import (
    CUISINES,
    MEAL_TYPES,
    Ingredient,
    MealPayload,
    Suggestion,
)
from thali.models.plan import PlannedDay, PlanSlot, WeekPlanResult
from thali.models.recipe import Recipe, RecipeDraft, RecipeRequestMeal
from thali.models.shopping import ShoppingItem, ShoppingItemDraft
from thali.models.suggest import (
    ChatMessage,
    ChatSuggestRequest,
    ChatSuggestResponse,
    RejectedMeal,
    SuggestRequest,
    SuggestResponse,
)

__all__ = [
    "CalorieBudget",
    "CuisinePreference",
    "DayReview",
    "InventoryItem",
    "MealHistoryEntry",
    "ReviewContext",
    "SuggestionContext",
    "WeekReview",
    "SavedMeal",
    "CUISINES",
    "MEAL_TYPES",
    "Ingredient",
    "MealPayload",
    "Suggestion",
    "PlannedDay",
    "PlanSlot",
    "WeekPlanResult",
    "Recipe",
    "RecipeDraft",
    "RecipeRequestMeal",
    "ShoppingItem",
    "ShoppingItemDraft",
    "RejectedMeal",
    "SuggestRequest",
    "SuggestResponse",
    "ChatMessage",
    "ChatSuggestRequest",
    "ChatSuggestResponse",
]
