"""Command-line interface for Thali."""

from __future__ import annotations

import asyncio
import json
from datetime import date, datetime
from typing import Any, Optional

import typer
from pydantic import ValidationError as PydanticValidationError

from thali.config import get_settings
from thali.db.storage import SqlStorage
from thali.errors import ThaliError
from thali.logging_utils import configure_logging, secrets_from_settings
from thali.models.suggest import RejectedMeal, SuggestRequest
from thali.planner.context_builder import ContextAssembler
from thali.planner.llm import LLMDriver
from thali.planner.shopping import ShoppingListDeriver
from thali.planner.suggest import suggest_meals
from thali.planner.summary import build_review_summary
from thali.planner.week import WeekPlanGenerator

app = typer.Typer(help="Thali household meal-planning commands.")


def _echo(payload: Any, pretty: bool) -> None:
    if pretty:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        typer.echo(json.dumps(payload))


def _run(coro: Any) -> Any:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format, secrets_from_settings(settings))
    try:
        return asyncio.run(coro)
    except ThaliError as exc:
        typer.secho(f"{exc.code}: {exc.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def suggest(
    mood: Optional[str] = typer.Option(None, "--mood", help="Free-text mood, e.g. 'comfort'."),
    time_available: Optional[str] = typer.Option(None, "--time", help="Minutes available, e.g. '20'."),
    cuisine: Optional[str] = typer.Option(None, "--cuisine", help="Cuisine to prefer."),
    meal_type: Optional[str] = typer.Option(None, "--meal-type", help="breakfast/lunch/dinner/snack."),
    reject: list[str] = typer.Option([], "--reject", help="Meal name to exclude; repeatable."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """
    Suggest three meals for right now using the stored household state.
    """

    try:
        request = SuggestRequest(
            mood=mood,
            time_available=time_available,
            cuisine=cuisine,
            meal_type=meal_type,
            rejected_meals=[RejectedMeal(name=name) for name in reject],
        )
    except PydanticValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    settings = get_settings()
    assembler = ContextAssembler(SqlStorage(), settings)
    response = _run(suggest_meals(request, assembler=assembler, driver=LLMDriver(settings)))
    _echo(response.to_wire(), pretty)


@app.command("generate-week")
def generate_week(
    week_start: Optional[str] = typer.Option(
        None,
        "--week-start",
        help="Any date in the target week (YYYY-MM-DD); defaults to the current week.",
    ),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """Generate and store a Monday-to-Sunday meal plan."""

    start = date.fromisoformat(week_start) if week_start else datetime.now().date()
    settings = get_settings()
    storage = SqlStorage()
    generator = WeekPlanGenerator(storage, LLMDriver(settings), ContextAssembler(storage, settings))
    result = _run(generator.generate_week(start))
    _echo(result.to_wire(), pretty)


@app.command()
def shopping(
    week: Optional[str] = typer.Option(None, "--week", help="Any date in the planned week."),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """Add the planned week's ingredient shortfall to the shopping list."""

    target = date.fromisoformat(week) if week else None
    items = _run(ShoppingListDeriver(SqlStorage()).derive(target))
    _echo([item.to_wire() for item in items], pretty)
    typer.echo(f"Added {len(items)} item(s).", err=True)


@app.command()
def summary(
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """Show rating insights gathered from meal history and day reviews."""

    assembler = ContextAssembler(SqlStorage(), get_settings())
    result = _run(build_review_summary(assembler))
    _echo(result.to_wire(), pretty)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``thali`` console script."""
    app(prog_name="thali", args=argv)


if __name__ == "__main__":
    main()
