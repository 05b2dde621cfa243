"""Dependency definitions for the Thali API server."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, Request

from thali.config import Settings, get_settings
from thali.db.history import list_history, record_meal, sum_calories, update_meal
from thali.db.inventory import (
    create_inventory_item,
    delete_inventory_item,
    list_inventory,
    list_low_stock,
    update_inventory_item,
)
from thali.db.meals import (
    create_saved_meal,
    delete_saved_meal,
    get_saved_meal,
    list_saved_meals,
    update_saved_meal,
)
from thali.db.plans import clear_plan_range, delete_plan_slot, list_plan_slots, upsert_plan_slot
from thali.db.preferences import delete_preference, get_preference, list_preferences, set_preference
from thali.db.recipes import delete_recipe, get_recipe, list_recipes, search_recipes
from thali.db.reviews import get_day_review, get_week_review, save_day_review, save_week_review
from thali.db.shopping_list import (
    clear_purchased,
    create_shopping_item,
    delete_shopping_item,
    list_shopping_items,
    update_shopping_item,
)
from thali.db.storage import SqlStorage
from thali.errors import AuthError
from thali.models.catalog import SavedMeal
from thali.models.context import DayReview, InventoryItem, MealHistoryEntry, WeekReview
from thali.models.plan import PlanSlot
from thali.models.recipe import Recipe
from thali.models.shopping import ShoppingItem, ShoppingItemDraft
from thali.planner.context_builder import ContextAssembler
from thali.planner.llm import LLMDriver
from thali.planner.recipes import RecipeGenerator
from thali.planner.shopping import ShoppingListDeriver
from thali.planner.storage import Storage
from thali.planner.week import WeekPlanGenerator

Clock = Callable[[], datetime]
InventoryProvider = Callable[[], List[InventoryItem]]
InventoryCreator = Callable[[dict], InventoryItem]
InventoryUpdater = Callable[[int, dict], InventoryItem]
InventoryDeleter = Callable[[int], None]
HistoryProvider = Callable[..., List[MealHistoryEntry]]
MealRecorder = Callable[[MealHistoryEntry], MealHistoryEntry]
MealUpdater = Callable[[int, dict], MealHistoryEntry]
CalorieCounter = Callable[[datetime, datetime], int]
DayReviewFetcher = Callable[[date], Optional[DayReview]]
DayReviewSaver = Callable[[DayReview], DayReview]
WeekReviewFetcher = Callable[[date], Optional[WeekReview]]
WeekReviewSaver = Callable[[WeekReview], WeekReview]
PreferenceFetcher = Callable[[str], Optional[Any]]
PreferencesProvider = Callable[[], Dict[str, Any]]
PreferenceSaver = Callable[[str, Any], Any]
PreferenceDeleter = Callable[[str], None]
PlanSlotsProvider = Callable[[date, date], List[PlanSlot]]
PlanSlotSaver = Callable[[PlanSlot], PlanSlot]
PlanSlotDeleter = Callable[[int], None]
PlanRangeClearer = Callable[[date, date], int]
ShoppingListProvider = Callable[[], List[ShoppingItem]]
ShoppingListCreator = Callable[[ShoppingItemDraft], ShoppingItem]
ShoppingListUpdater = Callable[[int, dict], ShoppingItem]
ShoppingListDeleter = Callable[[int], None]
PurchasedClearer = Callable[[], int]
RecipesProvider = Callable[[], List[Recipe]]
RecipeFetcher = Callable[[int], Recipe]
RecipeSearcher = Callable[[str], List[Recipe]]
RecipeDeleter = Callable[[int], None]
SavedMealsProvider = Callable[[Optional[str], Optional[str]], List[SavedMeal]]
SavedMealFetcher = Callable[[int], SavedMeal]
SavedMealCreator = Callable[[SavedMeal], SavedMeal]
SavedMealUpdater = Callable[[int, dict], SavedMeal]
SavedMealDeleter = Callable[[int], None]


def get_clock() -> Clock:
    """Return the wall clock used for local day boundaries."""

    return datetime.now


def get_storage() -> Storage:
    return SqlStorage()


def get_llm_driver(settings: Settings = Depends(get_settings)) -> LLMDriver:
    return LLMDriver(settings)


def get_context_assembler(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> ContextAssembler:
    return ContextAssembler(storage, settings)


def get_week_plan_generator(
    storage: Storage = Depends(get_storage),
    driver: LLMDriver = Depends(get_llm_driver),
    assembler: ContextAssembler = Depends(get_context_assembler),
) -> WeekPlanGenerator:
    return WeekPlanGenerator(storage, driver, assembler)


def get_shopping_list_deriver(storage: Storage = Depends(get_storage)) -> ShoppingListDeriver:
    return ShoppingListDeriver(storage)


def get_recipe_generator(
    storage: Storage = Depends(get_storage),
    driver: LLMDriver = Depends(get_llm_driver),
) -> RecipeGenerator:
    return RecipeGenerator(storage, driver)


def get_inventory_provider() -> InventoryProvider:
    return list_inventory


def get_low_stock_provider() -> InventoryProvider:
    return list_low_stock


def get_inventory_creator() -> InventoryCreator:
    return lambda payload: create_inventory_item(**payload)


def get_inventory_updater() -> InventoryUpdater:
    return lambda item_id, payload: update_inventory_item(item_id, **payload)


def get_inventory_deleter() -> InventoryDeleter:
    return lambda item_id: delete_inventory_item(item_id)


def get_history_provider() -> HistoryProvider:
    return list_history


def get_meal_recorder() -> MealRecorder:
    return record_meal


def get_meal_updater() -> MealUpdater:
    return lambda entry_id, payload: update_meal(entry_id, **payload)


def get_calorie_counter() -> CalorieCounter:
    return sum_calories


def get_day_review_fetcher() -> DayReviewFetcher:
    return get_day_review


def get_day_review_saver() -> DayReviewSaver:
    return save_day_review


def get_week_review_fetcher() -> WeekReviewFetcher:
    return get_week_review


def get_week_review_saver() -> WeekReviewSaver:
    return save_week_review


def get_preference_fetcher() -> PreferenceFetcher:
    return get_preference


def get_preferences_provider() -> PreferencesProvider:
    return list_preferences


def get_preference_saver() -> PreferenceSaver:
    return set_preference


def get_preference_deleter() -> PreferenceDeleter:
    return delete_preference


def get_plan_slots_provider() -> PlanSlotsProvider:
    return list_plan_slots


def get_plan_slot_saver() -> PlanSlotSaver:
    return upsert_plan_slot


def get_plan_slot_deleter() -> PlanSlotDeleter:
    return delete_plan_slot


def get_plan_range_clearer() -> PlanRangeClearer:
    return clear_plan_range


def get_shopping_list_provider() -> ShoppingListProvider:
    return list_shopping_items


def get_shopping_list_creator() -> ShoppingListCreator:
    return create_shopping_item


def get_shopping_list_updater() -> ShoppingListUpdater:
    return lambda item_id, payload: update_shopping_item(item_id, **payload)


def get_shopping_list_deleter() -> ShoppingListDeleter:
    return delete_shopping_item


def get_purchased_clearer() -> PurchasedClearer:
    return clear_purchased


def get_recipes_provider() -> RecipesProvider:
    return list_recipes


def get_recipe_fetcher() -> RecipeFetcher:
    return get_recipe


def get_recipe_deleter() -> RecipeDeleter:
    return delete_recipe


def get_recipe_searcher() -> RecipeSearcher:
    return search_recipes


def get_saved_meals_provider() -> SavedMealsProvider:
    return list_saved_meals


def get_saved_meal_fetcher() -> SavedMealFetcher:
    return get_saved_meal


def get_saved_meal_creator() -> SavedMealCreator:
    return create_saved_meal


def get_saved_meal_updater() -> SavedMealUpdater:
    return lambda meal_id, payload: update_saved_meal(meal_id, **payload)


def get_saved_meal_deleter() -> SavedMealDeleter:
    return delete_saved_meal


def require_api_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    raise AuthError()
