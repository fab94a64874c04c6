"""Debounced, cancellable food search for item add/edit."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from mealsync.client.base import RemoteListService
from mealsync.client.errors import RemoteError
from mealsync.models.shopping import FoodStub
from mealsync.sync.store import ListItemStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


class FoodSearch:
    """Issue a search only after the query has been quiet for ``debounce`` seconds.

    Every ``update_query`` cancels the previous task and bumps a generation token; a completion
    carrying an outdated token is dropped, so only the latest query's results are ever applied.
    """

    def __init__(
        self,
        remote: RemoteListService,
        *,
        store: Optional[ListItemStore] = None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        page_size: int = 50,
    ) -> None:
        self._remote = remote
        self._store = store
        self._debounce = debounce
        self._page_size = page_size
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self.query = ""
        self.results: list[FoodStub] = []

    @property
    def generation(self) -> int:
        return self._generation

    def update_query(self, query: str) -> asyncio.Task:
        """Schedule a search for ``query`` and return its task. Must run inside the event loop."""

        self.cancel()
        self._generation += 1
        self.query = query
        self._task = asyncio.ensure_future(self._search(query, self._generation))
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _search(self, query: str, token: int) -> None:
        trimmed = query.strip()
        if not trimmed:
            self.results = []
            return

        await asyncio.sleep(self._debounce)
        try:
            foods = await self._remote.search_foods(trimmed, per_page=self._page_size)
        except RemoteError as exc:
            if token == self._generation:
                logger.warning("Food search for %r failed: %s", trimmed, exc)
                if self._store is not None:
                    self._store.report_error(f"Failed to load foods: {str(exc) or exc.__class__.__name__}")
            return

        if token != self._generation:
            logger.debug("Discarding stale food search results for %r", trimmed)
            return
        self.results = sorted(foods, key=lambda food: food.name.casefold())


__all__ = ["FoodSearch", "DEFAULT_DEBOUNCE_SECONDS"]
