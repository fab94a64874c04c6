"""Shopping list summaries: create, rename and delete whole lists."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from mealsync.client.base import RemoteListService
from mealsync.client.errors import RemoteError, UnauthorizedError
from mealsync.metrics import MUTATIONS
from mealsync.models.shopping import ShoppingList
from mealsync.sync.results import BatchResult, MutationResult, Outcome

logger = logging.getLogger(__name__)


def _describe(error: Exception) -> str:
    return str(error) or error.__class__.__name__


class ShoppingListIndex:
    """Known shopping lists, newest first."""

    def __init__(self, remote: RemoteListService, *, per_page: int = 50) -> None:
        self._remote = remote
        self._per_page = per_page
        self.lists: List[ShoppingList] = []
        self.last_error: Optional[str] = None

    def find(self, list_id: str) -> Optional[ShoppingList]:
        return next((entry for entry in self.lists if entry.id == list_id), None)

    async def load(self) -> bool:
        self.last_error = None
        try:
            page = await self._remote.fetch_lists(page=1, per_page=self._per_page)
        except RemoteError as exc:
            self.last_error = (
                _describe(exc)
                if isinstance(exc, UnauthorizedError)
                else f"Failed to load shopping lists: {_describe(exc)}"
            )
            return False
        self.lists = list(page.items)
        return True

    async def create(self, name: Optional[str] = None) -> Optional[ShoppingList]:
        final_name = (name or "").strip() or None
        self.last_error = None
        try:
            detail = await self._remote.create_list(final_name)
        except RemoteError as exc:
            self.last_error = f"Failed to create list: {_describe(exc)}"
            MUTATIONS.labels(operation="create_list", outcome=Outcome.FAILED.value).inc()
            return None

        summary = detail.summary()
        self.lists.insert(0, summary)
        logger.info("Created shopping list %s (%s)", summary.id, summary.display_name)
        MUTATIONS.labels(operation="create_list", outcome=Outcome.RECONCILED.value).inc()
        return summary

    async def rename(self, list_id: str, name: Optional[str]) -> MutationResult:
        target = self.find(list_id)
        if target is None:
            self.last_error = f"Shopping list {list_id} not found"
            return MutationResult(Outcome.REJECTED, self.last_error)

        self.last_error = None
        try:
            await self._remote.update_list(target, (name or "").strip() or None)
        except RemoteError as exc:
            self.last_error = f"Failed to update list: {_describe(exc)}"
            MUTATIONS.labels(operation="rename_list", outcome=Outcome.FAILED.value).inc()
            return MutationResult(Outcome.FAILED, self.last_error)

        await self.load()
        MUTATIONS.labels(operation="rename_list", outcome=Outcome.RECONCILED.value).inc()
        return MutationResult(Outcome.RECONCILED)

    async def delete_many(self, list_ids: Iterable[str]) -> BatchResult:
        """Delete lists in order; on the first failure restore that list only and stop."""

        wanted = list(dict.fromkeys(list_ids))
        removed = [(index, entry) for index, entry in enumerate(self.lists) if entry.id in wanted]
        if not removed:
            return BatchResult(Outcome.NOOP)
        removed.sort(key=lambda pair: wanted.index(pair[1].id))
        self.lists = [entry for entry in self.lists if entry.id not in wanted]
        self.last_error = None

        committed: list[str] = []
        for position, (index, entry) in enumerate(removed):
            try:
                await self._remote.delete_list(entry.id)
            except RemoteError as exc:
                self.lists.insert(min(index, len(self.lists)), entry)
                self.last_error = f"Failed to delete '{entry.display_name}': {_describe(exc)}"
                logger.warning("Deleting list %s failed: %s", entry.id, exc)
                MUTATIONS.labels(operation="delete_lists", outcome=Outcome.ABORTED.value).inc()
                return BatchResult(
                    Outcome.ABORTED,
                    committed=tuple(committed),
                    failed=entry.id,
                    restored=(entry.id,),
                    unattempted=tuple(pending.id for _, pending in removed[position + 1 :]),
                    error=self.last_error,
                )
            committed.append(entry.id)

        MUTATIONS.labels(operation="delete_lists", outcome=Outcome.RECONCILED.value).inc()
        return BatchResult(Outcome.RECONCILED, committed=tuple(committed))


__all__ = ["ShoppingListIndex"]
