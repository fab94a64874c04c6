"""Import the ingredients of scheduled meal-plan recipes into a shopping list."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Awaitable, Callable, Iterable, Union

from mealsync.client.base import RemoteListService
from mealsync.client.errors import RemoteError
from mealsync.metrics import MUTATIONS
from mealsync.models.mealplan import MealPlanEntry
from mealsync.sync.results import ImportResult, Outcome
from mealsync.sync.store import ListItemStore

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]
Reloader = Callable[..., Awaitable[bool]]

NO_RECIPES_MESSAGE = "No recipes found in the selected date range."


def normalize_range(start: DateLike, end: DateLike) -> tuple[datetime, datetime]:
    """Widen a range to start-of-day of ``start`` through end-of-day of ``end``."""

    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end.date() if isinstance(end, datetime) else end
    if end_day < start_day:
        raise ValueError(f"End date {end_day.isoformat()} is before start date {start_day.isoformat()}.")
    return datetime.combine(start_day, time.min), datetime.combine(end_day, time.max)


def week_bounds(reference: date, week_start: int = 0) -> tuple[date, date]:
    """Return the first and last day of the calendar week containing ``reference``."""

    offset = (reference.weekday() - week_start) % 7
    first = reference - timedelta(days=offset)
    return first, first + timedelta(days=6)


def collect_recipe_ids(entries: Iterable[MealPlanEntry]) -> frozenset[str]:
    """Distinct recipe ids referenced by ``entries``; freeform entries are skipped."""

    return frozenset(entry.recipe_id for entry in entries if entry.recipe_id)


class MealPlanImportMerger:
    """Turn a date range of meal-plan entries into one bulk recipe import."""

    def __init__(
        self,
        store: ListItemStore,
        remote: RemoteListService,
        reload: Reloader,
        *,
        week_start: int = 0,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._remote = remote
        self._reload = reload
        self._week_start = week_start
        self._today = today

    async def import_range(self, start: DateLike, end: DateLike) -> ImportResult:
        try:
            range_start, range_end = normalize_range(start, end)
        except ValueError as exc:
            self._store.report_error(str(exc))
            return self._record(ImportResult(Outcome.REJECTED, error=str(exc)))

        self._store.clear_error()
        try:
            entries = await self._remote.fetch_meal_plan_entries(range_start.date(), range_end.date())
            recipe_ids = collect_recipe_ids(entries)
            if not recipe_ids:
                logger.info(
                    "No recipes scheduled between %s and %s",
                    range_start.date().isoformat(),
                    range_end.date().isoformat(),
                    extra={"list_id": self._store.list_id},
                )
                return self._record(ImportResult(Outcome.NO_RECIPES))
            await self._remote.bulk_add_recipes(self._store.list_id, sorted(recipe_ids))
        except RemoteError as exc:
            message = f"Failed to import meal plan ingredients: {str(exc) or exc.__class__.__name__}"
            logger.warning(
                "Meal plan import into list %s failed: %s",
                self._store.list_id,
                exc,
                extra={"list_id": self._store.list_id},
            )
            self._store.report_error(message)
            return self._record(ImportResult(Outcome.FAILED, error=message))

        logger.info(
            "Imported %d recipe(s) from %d meal plan entries into list %s",
            len(recipe_ids),
            len(entries),
            self._store.list_id,
            extra={"list_id": self._store.list_id},
        )
        await self._reload()
        return self._record(ImportResult(Outcome.IMPORTED, recipe_ids=recipe_ids))

    async def import_current_week(self) -> ImportResult:
        return await self.import_range(*week_bounds(self._today(), self._week_start))

    async def import_next_week(self) -> ImportResult:
        return await self.import_range(*week_bounds(self._today() + timedelta(days=7), self._week_start))

    @staticmethod
    def _record(result: ImportResult) -> ImportResult:
        MUTATIONS.labels(operation="import_meal_plan", outcome=result.outcome.value).inc()
        return result


__all__ = [
    "MealPlanImportMerger",
    "NO_RECIPES_MESSAGE",
    "collect_recipe_ids",
    "normalize_range",
    "week_bounds",
]
