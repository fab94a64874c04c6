"""Command-line interface for mealsync."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

import typer

from mealsync.client.http import build_list_service
from mealsync.config import get_settings
from mealsync.logging_utils import configure_logging
from mealsync.sync.lists import ShoppingListIndex
from mealsync.sync.mealplan_import import NO_RECIPES_MESSAGE
from mealsync.sync.results import Outcome
from mealsync.sync.session import ShoppingListSession
from mealsync.sync.store import StoreState

app = typer.Typer(help="Synchronize Mealie shopping lists and import meal-plan ingredients.")

SessionAction = Callable[[ShoppingListSession], Awaitable[object]]


@app.callback()
def _configure() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format, [settings.api_token or ""])


def _open_service():
    try:
        return build_list_service()
    except RuntimeError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


async def _run_session(list_id: str, action: Optional[SessionAction]) -> StoreState:
    async with _open_service() as remote:
        session = ShoppingListSession(list_id, remote)
        try:
            if await session.open() and action is not None:
                await action(session)
        finally:
            session.close()
        return session.store.snapshot()


def _emit(state: StoreState, pretty: bool) -> None:
    payload = state.model_dump(mode="json")
    typer.echo(json.dumps(payload, indent=2 if pretty else None, sort_keys=pretty))
    if state.last_error:
        typer.secho(state.last_error, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _run(list_id: str, action: Optional[SessionAction], pretty: bool) -> None:
    _emit(asyncio.run(_run_session(list_id, action)), pretty)


PRETTY_OPTION = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON.")


@app.command()
def show(list_id: str, pretty: bool = PRETTY_OPTION) -> None:
    """Print a shopping list with its items, unchecked first."""

    _run(list_id, None, pretty)


@app.command()
def check(
    list_id: str,
    item_id: str,
    uncheck: bool = typer.Option(False, "--uncheck", help="Mark the item as not bought."),
    pretty: bool = PRETTY_OPTION,
) -> None:
    """Check (or uncheck) a single item."""

    async def action(session: ShoppingListSession) -> object:
        return await session.coordinator.toggle_checked(item_id, not uncheck)

    _run(list_id, action, pretty)


@app.command()
def add(
    list_id: str,
    note: str = typer.Argument("", help="Free-text item name."),
    quantity: float = typer.Option(1.0, "--quantity", "-q", help="Item quantity."),
    food_id: Optional[str] = typer.Option(None, "--food-id", help="Linked food identifier."),
    unit_id: Optional[str] = typer.Option(None, "--unit-id", help="Linked unit identifier."),
    pretty: bool = PRETTY_OPTION,
) -> None:
    """Add an item to the list."""

    async def action(session: ShoppingListSession) -> object:
        return await session.coordinator.add_item(note, quantity, food_id=food_id, unit_id=unit_id)

    _run(list_id, action, pretty)


@app.command()
def delete(list_id: str, item_ids: List[str], pretty: bool = PRETTY_OPTION) -> None:
    """Delete items one by one, stopping at the first failure."""

    async def action(session: ShoppingListSession) -> object:
        return await session.bulk.delete_many(item_ids)

    _run(list_id, action, pretty)


@app.command("remove-checked")
def remove_checked(list_id: str, pretty: bool = PRETTY_OPTION) -> None:
    """Delete every checked item."""

    async def action(session: ShoppingListSession) -> object:
        return await session.bulk.remove_checked()

    _run(list_id, action, pretty)


def _report_import(outcome: Outcome) -> None:
    if outcome is Outcome.NO_RECIPES:
        typer.secho(NO_RECIPES_MESSAGE, fg=typer.colors.YELLOW, err=True)


@app.command("import-meal-plan")
def import_meal_plan(
    list_id: str,
    start: datetime = typer.Argument(..., formats=["%Y-%m-%d"], help="First day (YYYY-MM-DD)."),
    end: datetime = typer.Argument(..., formats=["%Y-%m-%d"], help="Last day (YYYY-MM-DD)."),
    pretty: bool = PRETTY_OPTION,
) -> None:
    """Add the ingredients of every recipe planned between START and END."""

    async def action(session: ShoppingListSession) -> object:
        result = await session.importer.import_range(start, end)
        _report_import(result.outcome)
        return result

    _run(list_id, action, pretty)


@app.command("import-week")
def import_week(
    list_id: str,
    next_week: bool = typer.Option(False, "--next", help="Import next week instead of this week."),
    pretty: bool = PRETTY_OPTION,
) -> None:
    """Add the ingredients of this (or next) week's meal plan."""

    async def action(session: ShoppingListSession) -> object:
        if next_week:
            result = await session.importer.import_next_week()
        else:
            result = await session.importer.import_current_week()
        _report_import(result.outcome)
        return result

    _run(list_id, action, pretty)


@app.command("create-list")
def create_list(name: Optional[str] = typer.Argument(None, help="List name.")) -> None:
    """Create a new shopping list and print its summary."""

    async def _create():
        async with _open_service() as remote:
            index = ShoppingListIndex(remote)
            created = await index.create(name)
            return created, index.last_error

    created, error = asyncio.run(_create())
    if created is None:
        typer.secho(error or "Failed to create list.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(created.model_dump(mode="json"), indent=2, sort_keys=True))


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m mealsync`."""
    app(prog_name="mealsync", args=argv)


if __name__ == "__main__":
    main()
