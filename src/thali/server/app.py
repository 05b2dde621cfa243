"""ASGI application for Thali."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import Field
from sqlalchemy.exc import SQLAlchemyError

from thali import __version__, metrics
from thali.config import Settings, get_settings
from thali.errors import NotFoundError, StorageError, ThaliError, ValidationError
from thali.logging_utils import configure_logging as configure_app_logging
from thali.logging_utils import secrets_from_settings
from thali.models.base import WireModel
from thali.models.catalog import IngredientName, SavedMeal
from thali.models.context import (
    DayReview,
    InventoryCategory,
    InventoryItem,
    MealHistoryEntry,
    WeekReview,
)
from thali.models.meal import Cuisine, MealPayload, MealType
from thali.models.plan import PlanSlot, WeekPlanResult
from thali.models.recipe import Recipe, RecipeRequestMeal
from thali.models.shopping import ShoppingItem, ShoppingItemDraft
from thali.models.suggest import (
    ChatSuggestRequest,
    ChatSuggestResponse,
    SuggestRequest,
    SuggestResponse,
)
from thali.planner.chat import chat_suggest
from thali.planner.context_builder import DAILY_CALORIE_GOAL_KEY, ContextAssembler
from thali.planner.history import HistoryStats, group_by_day, history_stats, month_bounds
from thali.planner.llm import LLMDriver
from thali.planner.recipes import RecipeGenerator
from thali.planner.shopping import ShoppingListDeriver, categorize, sort_shopping_list
from thali.planner.suggest import suggest_meals
from thali.planner.summary import ReviewSummary, build_review_summary
from thali.planner.utils import start_of_day, week_start_for
from thali.planner.week import WeekPlanGenerator
from thali.server import deps

logger = logging.getLogger(__name__)

MAX_PREFERENCE_VALUE_LENGTH = 1000


def _validation_details(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``{field, message}`` pairs."""

    details: list[dict[str, str]] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(location) or "body",
                "message": str(error.get("msg", "Invalid value")),
            }
        )
    return details


def _configure_logging(settings: Settings) -> None:
    configure_app_logging(settings.log_level, settings.log_format, secrets_from_settings(settings))


def _request_log_extra(request: Request) -> dict[str, Any]:
    request_id = getattr(request.state, "request_id", None)
    return {"extra": {"request_id": request_id}} if request_id else {}


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Thali Meal Planner", version=__version__)
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("thali.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(method=method, path=path, status=str(response.status_code)).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(ThaliError)
    async def thali_error_handler(request: Request, exc: ThaliError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "%s on %s %s: %s",
            exc.code,
            request.method,
            request.url.path,
            exc.message,
            **_request_log_extra(request),
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @application.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            "Storage failure on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            **_request_log_extra(request),
        )
        error = StorageError("Storage is temporarily unavailable. Please try again.")
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = _validation_details(exc.errors())
        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            details,
            **_request_log_extra(request),
        )
        error = ValidationError(details=details)
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @application.get("/health", summary="Liveness check")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    # --- Suggestion & planning engine -------------------------------------------------

    @application.post("/suggest", response_model=SuggestResponse, summary="Suggest meals")
    async def suggest_endpoint(
        payload: SuggestRequest,
        auth: None = Depends(deps.require_api_token),
        assembler: ContextAssembler = Depends(deps.get_context_assembler),
        driver: LLMDriver = Depends(deps.get_llm_driver),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> SuggestResponse:
        return await suggest_meals(payload, assembler=assembler, driver=driver, now=clock())

    @application.post("/suggest/chat", response_model=ChatSuggestResponse, summary="Chat about what to eat")
    async def suggest_chat_endpoint(
        payload: ChatSuggestRequest,
        auth: None = Depends(deps.require_api_token),
        assembler: ContextAssembler = Depends(deps.get_context_assembler),
        driver: LLMDriver = Depends(deps.get_llm_driver),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> ChatSuggestResponse:
        return await chat_suggest(payload, assembler=assembler, driver=driver, now=clock())

    @application.post(
        "/meal-plan/generate-week",
        response_model=WeekPlanResult,
        summary="Generate a week of meals",
    )
    async def generate_week_endpoint(
        payload: WeekGenerateRequest,
        auth: None = Depends(deps.require_api_token),
        generator: WeekPlanGenerator = Depends(deps.get_week_plan_generator),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> WeekPlanResult:
        return await generator.generate_week(payload.week_start, now=clock())

    @application.post(
        "/shopping/generate",
        response_model=list[ShoppingItem],
        summary="Generate shopping list from the week's plan",
    )
    async def generate_shopping_endpoint(
        payload: Optional[ShoppingGenerateRequest] = Body(default=None),
        auth: None = Depends(deps.require_api_token),
        deriver: ShoppingListDeriver = Depends(deps.get_shopping_list_deriver),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> list[ShoppingItem]:
        week = payload.week if payload else None
        return await deriver.derive(week, now=clock())

    @application.get(
        "/reviews/summary",
        response_model=ReviewSummary,
        summary="Ratings and review insights",
    )
    async def review_summary_endpoint(
        assembler: ContextAssembler = Depends(deps.get_context_assembler),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> ReviewSummary:
        return await build_review_summary(assembler, now=clock())

    @application.post("/recipes/generate", response_model=Recipe, summary="Generate and save a recipe")
    async def generate_recipe_endpoint(
        payload: RecipeGenerateRequest,
        auth: None = Depends(deps.require_api_token),
        generator: RecipeGenerator = Depends(deps.get_recipe_generator),
    ) -> Recipe:
        return await generator.generate(payload.meal)

    @application.get("/recipes", response_model=list[Recipe], summary="List saved recipes")
    def recipes_list(provider: deps.RecipesProvider = Depends(deps.get_recipes_provider)) -> list[Recipe]:
        return provider()

    @application.get(
        "/recipes/search/{query}",
        response_model=list[Recipe],
        summary="Search saved recipes by name or cuisine",
    )
    def recipes_search(
        query: str,
        searcher: deps.RecipeSearcher = Depends(deps.get_recipe_searcher),
    ) -> list[Recipe]:
        return searcher(query)

    @application.get("/recipes/{recipe_id}", response_model=Recipe, summary="Fetch a saved recipe")
    def recipes_get(
        recipe_id: int,
        fetcher: deps.RecipeFetcher = Depends(deps.get_recipe_fetcher),
    ) -> Recipe:
        return fetcher(recipe_id)

    @application.delete(
        "/recipes/{recipe_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a saved recipe",
    )
    def recipes_delete(
        recipe_id: int,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.RecipeDeleter = Depends(deps.get_recipe_deleter),
    ) -> None:
        deleter(recipe_id)

    # --- Inventory ----------------------------------------------------------------------

    @application.get("/inventory", response_model=list[InventoryItem], summary="List pantry inventory")
    def inventory_list(
        provider: deps.InventoryProvider = Depends(deps.get_inventory_provider),
    ) -> list[InventoryItem]:
        return provider()

    @application.get(
        "/inventory/low-stock",
        response_model=list[InventoryItem],
        summary="List items at or below their low-stock threshold",
    )
    def inventory_low_stock(
        provider: deps.InventoryProvider = Depends(deps.get_low_stock_provider),
    ) -> list[InventoryItem]:
        return provider()

    @application.post(
        "/inventory",
        response_model=InventoryItem,
        status_code=status.HTTP_201_CREATED,
        summary="Create inventory item",
    )
    def inventory_create(
        payload: InventoryCreateRequest,
        auth: None = Depends(deps.require_api_token),
        creator: deps.InventoryCreator = Depends(deps.get_inventory_creator),
    ) -> InventoryItem:
        create_payload = payload.model_dump()
        logger.debug("Creating inventory item payload=%s", create_payload)
        return creator(create_payload)

    @application.patch("/inventory/{item_id}", response_model=InventoryItem, summary="Update inventory item")
    def inventory_update(
        item_id: int,
        payload: InventoryUpdateRequest,
        auth: None = Depends(deps.require_api_token),
        updater: deps.InventoryUpdater = Depends(deps.get_inventory_updater),
    ) -> InventoryItem:
        update_payload = payload.model_dump(exclude_unset=True)
        if not update_payload:
            raise ValidationError("No fields provided for update")
        logger.debug("Updating inventory item %s with payload=%s", item_id, update_payload)
        return updater(item_id, update_payload)

    @application.delete(
        "/inventory/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete inventory item",
    )
    def inventory_delete(
        item_id: int,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.InventoryDeleter = Depends(deps.get_inventory_deleter),
    ) -> None:
        deleter(item_id)

    # --- Meal history & reviews ---------------------------------------------------------

    @application.get("/history", response_model=list[MealHistoryEntry], summary="List recent meals")
    def history_list(
        days: int = Query(default=14, ge=1, le=365),
        provider: deps.HistoryProvider = Depends(deps.get_history_provider),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> list[MealHistoryEntry]:
        return provider(start_of_day(clock()) - timedelta(days=days))

    @application.get("/history/calories/today", summary="Calories logged today")
    def history_calories_today(
        provider: deps.HistoryProvider = Depends(deps.get_history_provider),
        counter: deps.CalorieCounter = Depends(deps.get_calorie_counter),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> dict[str, Any]:
        day_start = start_of_day(clock())
        day_end = day_start + timedelta(days=1)
        meals = provider(day_start, day_end)
        return {
            "totalCalories": counter(day_start, day_end),
            "mealCount": len(meals),
            "meals": [meal.to_wire() for meal in meals],
        }

    @application.get(
        "/history/calendar",
        response_model=dict[str, list[MealHistoryEntry]],
        summary="Meals of one month grouped by day",
    )
    def history_calendar(
        year: Optional[int] = Query(default=None, ge=2000, le=2100),
        month: Optional[int] = Query(default=None, ge=1, le=12),
        provider: deps.HistoryProvider = Depends(deps.get_history_provider),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> dict[str, list[MealHistoryEntry]]:
        today = clock()
        start, end = month_bounds(year or today.year, month or today.month)
        return group_by_day(provider(start, end))

    @application.get("/history/stats", response_model=HistoryStats, summary="Cuisine variety and repeats")
    def history_stats_endpoint(
        days: int = Query(default=14, ge=1, le=365),
        provider: deps.HistoryProvider = Depends(deps.get_history_provider),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> HistoryStats:
        return history_stats(provider(start_of_day(clock()) - timedelta(days=days)))

    @application.post(
        "/history",
        response_model=MealHistoryEntry,
        status_code=status.HTTP_201_CREATED,
        summary="Log a meal as eaten",
    )
    def history_create(
        payload: HistoryCreateRequest,
        auth: None = Depends(deps.require_api_token),
        recorder: deps.MealRecorder = Depends(deps.get_meal_recorder),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> MealHistoryEntry:
        entry = MealHistoryEntry(
            meal_name=payload.meal_name,
            cuisine=payload.cuisine,
            meal_type=payload.meal_type,
            eaten_at=payload.eaten_at or clock(),
            rating=payload.rating,
            calories=payload.calories,
            notes=payload.notes,
        )
        return recorder(entry)

    @application.patch(
        "/history/{entry_id}",
        response_model=MealHistoryEntry,
        summary="Rate or annotate a logged meal",
    )
    def history_update(
        entry_id: int,
        payload: HistoryUpdateRequest,
        auth: None = Depends(deps.require_api_token),
        updater: deps.MealUpdater = Depends(deps.get_meal_updater),
    ) -> MealHistoryEntry:
        update_payload = payload.model_dump(exclude_unset=True)
        if not update_payload:
            raise ValidationError("No fields provided for update")
        return updater(entry_id, update_payload)

    @application.get(
        "/reviews/unrated-today",
        response_model=list[MealHistoryEntry],
        summary="Meals eaten today that still need a rating",
    )
    def reviews_unrated_today(
        provider: deps.HistoryProvider = Depends(deps.get_history_provider),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> list[MealHistoryEntry]:
        day_start = start_of_day(clock())
        return provider(day_start, day_start + timedelta(days=1), unrated_only=True)

    @application.get("/reviews/day/{review_date}", response_model=DayReview, summary="Fetch a day review")
    def reviews_day_get(
        review_date: date,
        fetcher: deps.DayReviewFetcher = Depends(deps.get_day_review_fetcher),
    ) -> DayReview:
        review = fetcher(review_date)
        if review is None:
            raise NotFoundError("Day review")
        return review

    @application.put(
        "/reviews/day/{review_date}",
        response_model=DayReview,
        summary="Create or replace a day review",
    )
    def reviews_day_put(
        review_date: date,
        payload: DayReviewRequest,
        auth: None = Depends(deps.require_api_token),
        saver: deps.DayReviewSaver = Depends(deps.get_day_review_saver),
    ) -> DayReview:
        return saver(DayReview(date=review_date, **payload.model_dump()))

    @application.get("/reviews/week/{week_start}", response_model=WeekReview, summary="Fetch a week review")
    def reviews_week_get(
        week_start: date,
        fetcher: deps.WeekReviewFetcher = Depends(deps.get_week_review_fetcher),
    ) -> WeekReview:
        review = fetcher(week_start_for(week_start))
        if review is None:
            raise NotFoundError("Week review")
        return review

    @application.put(
        "/reviews/week/{week_start}",
        response_model=WeekReview,
        summary="Create or replace a week review",
    )
    def reviews_week_put(
        week_start: date,
        payload: WeekReviewRequest,
        auth: None = Depends(deps.require_api_token),
        saver: deps.WeekReviewSaver = Depends(deps.get_week_review_saver),
    ) -> WeekReview:
        return saver(WeekReview(week_start=week_start_for(week_start), **payload.model_dump()))

    # --- Saved meals --------------------------------------------------------------------

    @application.get("/meals", response_model=list[SavedMeal], summary="List saved meals")
    def meals_list(
        cuisine: Optional[Cuisine] = Query(default=None),
        meal_type: Optional[MealType] = Query(default=None, alias="mealType"),
        provider: deps.SavedMealsProvider = Depends(deps.get_saved_meals_provider),
    ) -> list[SavedMeal]:
        return provider(cuisine, meal_type)

    @application.get("/meals/{meal_id}", response_model=SavedMeal, summary="Fetch a saved meal")
    def meals_get(
        meal_id: int,
        fetcher: deps.SavedMealFetcher = Depends(deps.get_saved_meal_fetcher),
    ) -> SavedMeal:
        return fetcher(meal_id)

    @application.post(
        "/meals",
        response_model=SavedMeal,
        status_code=status.HTTP_201_CREATED,
        summary="Add a custom meal",
    )
    def meals_create(
        payload: SavedMealCreateRequest,
        auth: None = Depends(deps.require_api_token),
        creator: deps.SavedMealCreator = Depends(deps.get_saved_meal_creator),
    ) -> SavedMeal:
        return creator(SavedMeal(**payload.model_dump(), is_custom=True))

    @application.patch("/meals/{meal_id}", response_model=SavedMeal, summary="Update a saved meal")
    def meals_update(
        meal_id: int,
        payload: SavedMealUpdateRequest,
        auth: None = Depends(deps.require_api_token),
        updater: deps.SavedMealUpdater = Depends(deps.get_saved_meal_updater),
    ) -> SavedMeal:
        update_payload = payload.model_dump(exclude_unset=True)
        if not update_payload:
            raise ValidationError("No fields provided for update")
        return updater(meal_id, update_payload)

    @application.delete(
        "/meals/{meal_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a saved meal",
    )
    def meals_delete(
        meal_id: int,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.SavedMealDeleter = Depends(deps.get_saved_meal_deleter),
    ) -> None:
        deleter(meal_id)

    # --- Preferences --------------------------------------------------------------------

    @application.get("/preferences", summary="List stored preferences")
    def preferences_list(
        provider: deps.PreferencesProvider = Depends(deps.get_preferences_provider),
    ) -> dict[str, Any]:
        return provider()

    @application.get("/preferences/{key}", summary="Fetch one preference")
    def preferences_get(
        key: str,
        fetcher: deps.PreferenceFetcher = Depends(deps.get_preference_fetcher),
    ) -> dict[str, Any]:
        value = fetcher(key)
        if value is None:
            raise NotFoundError("Preference")
        return {"key": key, "value": value}

    @application.put("/preferences/{key}", summary="Store one preference")
    def preferences_put(
        key: str,
        payload: PreferenceValueRequest,
        auth: None = Depends(deps.require_api_token),
        saver: deps.PreferenceSaver = Depends(deps.get_preference_saver),
    ) -> dict[str, Any]:
        _validate_preference(key, payload.value)
        return {"key": key, "value": saver(key, payload.value)}

    @application.delete(
        "/preferences/{key}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove one preference",
    )
    def preferences_delete(
        key: str,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.PreferenceDeleter = Depends(deps.get_preference_deleter),
    ) -> None:
        deleter(key)

    # --- Meal plan ----------------------------------------------------------------------

    @application.get("/meal-plan", response_model=list[PlanSlot], summary="List a week's planned meals")
    def meal_plan_list(
        week: Optional[date] = Query(default=None),
        provider: deps.PlanSlotsProvider = Depends(deps.get_plan_slots_provider),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> list[PlanSlot]:
        week_start = week_start_for(week or clock().date())
        return provider(week_start, week_start + timedelta(days=7))

    @application.post("/meal-plan", response_model=PlanSlot, summary="Plan a meal in a slot")
    def meal_plan_save(
        payload: PlanSlotRequest,
        auth: None = Depends(deps.require_api_token),
        saver: deps.PlanSlotSaver = Depends(deps.get_plan_slot_saver),
    ) -> PlanSlot:
        meal = payload.meal.model_copy(update={"meal_type": payload.meal_type})
        return saver(PlanSlot(date=payload.date, meal_type=payload.meal_type, meal=meal))

    @application.delete(
        "/meal-plan/{slot_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Remove a planned meal",
    )
    def meal_plan_delete(
        slot_id: int,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.PlanSlotDeleter = Depends(deps.get_plan_slot_deleter),
    ) -> None:
        deleter(slot_id)

    @application.delete("/meal-plan", summary="Clear a week's plan")
    def meal_plan_clear(
        week: Optional[date] = Query(default=None),
        auth: None = Depends(deps.require_api_token),
        clearer: deps.PlanRangeClearer = Depends(deps.get_plan_range_clearer),
        clock: deps.Clock = Depends(deps.get_clock),
    ) -> dict[str, int]:
        week_start = week_start_for(week or clock().date())
        return {"deleted": clearer(week_start, week_start + timedelta(days=7))}

    # --- Shopping list ------------------------------------------------------------------

    @application.get("/shopping", response_model=list[ShoppingItem], summary="List shopping items")
    def shopping_list(
        provider: deps.ShoppingListProvider = Depends(deps.get_shopping_list_provider),
    ) -> list[ShoppingItem]:
        return sort_shopping_list(provider())

    @application.post(
        "/shopping",
        response_model=ShoppingItem,
        status_code=status.HTTP_201_CREATED,
        summary="Add a shopping item by hand",
    )
    def shopping_create(
        payload: ShoppingCreateRequest,
        auth: None = Depends(deps.require_api_token),
        creator: deps.ShoppingListCreator = Depends(deps.get_shopping_list_creator),
    ) -> ShoppingItem:
        draft = ShoppingItemDraft(
            name=payload.name,
            quantity=payload.quantity,
            unit=payload.unit,
            category=payload.category or categorize(payload.name),
        )
        return creator(draft)

    @application.delete("/shopping/clear/purchased", summary="Remove purchased items")
    def shopping_clear_purchased(
        auth: None = Depends(deps.require_api_token),
        clearer: deps.PurchasedClearer = Depends(deps.get_purchased_clearer),
    ) -> dict[str, int]:
        return {"deleted": clearer()}

    @application.patch("/shopping/{item_id}", response_model=ShoppingItem, summary="Update a shopping item")
    def shopping_update(
        item_id: int,
        payload: ShoppingUpdateRequest,
        auth: None = Depends(deps.require_api_token),
        updater: deps.ShoppingListUpdater = Depends(deps.get_shopping_list_updater),
    ) -> ShoppingItem:
        update_payload = payload.model_dump(exclude_unset=True)
        if not update_payload:
            raise ValidationError("No fields provided for update")
        return updater(item_id, update_payload)

    @application.delete(
        "/shopping/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary="Delete a shopping item",
    )
    def shopping_delete(
        item_id: int,
        auth: None = Depends(deps.require_api_token),
        deleter: deps.ShoppingListDeleter = Depends(deps.get_shopping_list_deleter),
    ) -> None:
        deleter(item_id)

    return application


def _validate_preference(key: str, value: Any) -> None:
    if len(key) > 128:
        raise ValidationError(details=[{"field": "key", "message": "Key must be at most 128 characters"}])
    if len(json.dumps(value)) > MAX_PREFERENCE_VALUE_LENGTH:
        raise ValidationError(
            details=[{"field": "value", "message": "Value must be at most 1000 characters"}]
        )
    if key == DAILY_CALORIE_GOAL_KEY:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value <= 10000:
            raise ValidationError(
                details=[{"field": "value", "message": "dailyCalorieGoal must be between 1 and 10000"}]
            )


class WeekGenerateRequest(WireModel):
    week_start: date


class ShoppingGenerateRequest(WireModel):
    week: Optional[date] = None


class RecipeGenerateRequest(WireModel):
    meal: RecipeRequestMeal


class InventoryCreateRequest(WireModel):
    name: str = Field(min_length=1, max_length=100)
    category: InventoryCategory = "others"
    quantity: float = Field(gt=0)
    unit: str = Field(default="", max_length=20)
    low_stock_at: Optional[float] = Field(default=None, gt=0)


class InventoryUpdateRequest(WireModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category: Optional[InventoryCategory] = None
    quantity: Optional[float] = None
    unit: Optional[str] = Field(default=None, max_length=20)
    low_stock_at: Optional[float] = Field(default=None, gt=0)


class HistoryCreateRequest(WireModel):
    meal_name: str = Field(min_length=1, max_length=200)
    cuisine: Cuisine
    meal_type: MealType
    eaten_at: Optional[datetime] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    calories: Optional[int] = Field(default=None, ge=0, le=10000)
    notes: Optional[str] = Field(default=None, max_length=1000)


class HistoryUpdateRequest(WireModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = Field(default=None, max_length=1000)


class DayReviewRequest(WireModel):
    variety: int = Field(ge=0, le=10)
    effort: int = Field(ge=0, le=10)
    satisfaction: int = Field(ge=0, le=10)
    notes: Optional[str] = Field(default=None, max_length=1000)


class WeekReviewRequest(WireModel):
    variety_balance: Optional[int] = Field(default=None, ge=0, le=10)
    effort_vs_satisfaction: Optional[int] = Field(default=None, ge=0, le=10)
    highlights: Optional[str] = Field(default=None, max_length=1000)
    improvements: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)


class SavedMealCreateRequest(WireModel):
    name: str = Field(min_length=1, max_length=200)
    cuisine: Cuisine
    meal_type: MealType
    prep_time: Optional[int] = Field(default=None, gt=0, le=480)
    ingredients: list[IngredientName] = Field(default_factory=list, max_length=50)
    recipe: Optional[str] = Field(default=None, max_length=10000)


class SavedMealUpdateRequest(WireModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    cuisine: Optional[Cuisine] = None
    meal_type: Optional[MealType] = None
    prep_time: Optional[int] = Field(default=None, gt=0, le=480)
    ingredients: Optional[list[IngredientName]] = Field(default=None, max_length=50)
    recipe: Optional[str] = Field(default=None, max_length=10000)


class PreferenceValueRequest(WireModel):
    value: Any


class PlanSlotRequest(WireModel):
    date: date
    meal_type: MealType
    meal: MealPayload


class ShoppingCreateRequest(WireModel):
    name: str = Field(min_length=1, max_length=100)
    quantity: float = Field(default=1.0, gt=0)
    unit: str = Field(default="pieces", max_length=20)
    category: Optional[InventoryCategory] = None


class ShoppingUpdateRequest(WireModel):
    quantity: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = Field(default=None, max_length=20)
    is_purchased: Optional[bool] = None


app = create_app()

__all__ = ["app", "create_app"]
