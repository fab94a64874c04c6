"""Sequential multi-item deletes with abort-on-first-failure."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Optional, Sequence

from mealsync.client.base import RemoteListService
from mealsync.client.errors import RemoteError
from mealsync.metrics import BULK_ITEMS, MUTATIONS
from mealsync.sync.results import BatchResult, DeleteAttempt, Outcome
from mealsync.sync.store import ListItemStore, RemovedItem

logger = logging.getLogger(__name__)


class RollbackPolicy(str, Enum):
    """Which optimistically removed items come back when a batch aborts."""

    FAILED_ONLY = "failed_only"
    UNCONFIRMED = "unconfirmed"


class BulkOperationRunner:
    """Delete items one at a time, stopping at the first failure.

    Requests are never parallelised: everything before the failure stays committed and the
    boundary between committed and rolled-back items is the returned :class:`BatchResult`.
    """

    def __init__(self, store: ListItemStore, remote: RemoteListService) -> None:
        self._store = store
        self._remote = remote

    async def delete_many(
        self,
        item_ids: Iterable[str],
        policy: RollbackPolicy = RollbackPolicy.FAILED_ONLY,
    ) -> BatchResult:
        removed = self._store.remove(item_ids)
        if not removed:
            return BatchResult(Outcome.NOOP)
        self._store.clear_error()
        return await self._run("delete_many", removed, policy)

    async def remove_checked(self, policy: RollbackPolicy = RollbackPolicy.UNCONFIRMED) -> BatchResult:
        checked_ids = [item.id for item in self._store.items if item.checked]
        if not checked_ids:
            return BatchResult(Outcome.NOOP)
        self._store.clear_error()
        removed = self._store.remove(checked_ids)
        return await self._run("remove_checked", removed, policy)

    async def _attempt(self, item_id: str) -> DeleteAttempt:
        try:
            await self._remote.delete_item(item_id)
        except RemoteError as exc:
            return DeleteAttempt(item_id=item_id, error=exc)
        return DeleteAttempt(item_id=item_id)

    async def _run(
        self,
        operation: str,
        removed: Sequence[RemovedItem],
        policy: RollbackPolicy,
    ) -> BatchResult:
        committed: list[str] = []
        failure: Optional[DeleteAttempt] = None
        failed_index = len(removed)

        for position, entry in enumerate(removed):
            attempt = await self._attempt(entry.item.id)
            if not attempt.succeeded:
                failure = attempt
                failed_index = position
                BULK_ITEMS.labels(operation=operation, result="failed").inc()
                break
            committed.append(attempt.item_id)
            BULK_ITEMS.labels(operation=operation, result="deleted").inc()

        if failure is None:
            logger.info(
                "%s removed %d item(s) from list %s",
                operation,
                len(committed),
                self._store.list_id,
                extra={"list_id": self._store.list_id},
            )
            MUTATIONS.labels(operation=operation, outcome=Outcome.RECONCILED.value).inc()
            return BatchResult(Outcome.RECONCILED, committed=tuple(committed))

        pending = removed[failed_index + 1 :]
        if policy is RollbackPolicy.UNCONFIRMED:
            to_restore = [removed[failed_index], *pending]
        else:
            to_restore = [removed[failed_index]]

        for entry in sorted(to_restore, key=lambda restored: restored.index):
            self._store.reinsert(entry.item, entry.index)

        message = self._message(operation, removed[failed_index], failure)
        logger.warning(
            "%s aborted at item %s after %d deletion(s): %s",
            operation,
            failure.item_id,
            len(committed),
            failure.error,
            extra={"list_id": self._store.list_id},
        )
        self._store.report_error(message)
        MUTATIONS.labels(operation=operation, outcome=Outcome.ABORTED.value).inc()
        return BatchResult(
            Outcome.ABORTED,
            committed=tuple(committed),
            failed=failure.item_id,
            restored=tuple(entry.item.id for entry in to_restore),
            unattempted=tuple(entry.item.id for entry in pending),
            error=message,
        )

    @staticmethod
    def _message(operation: str, entry: RemovedItem, failure: DeleteAttempt) -> str:
        detail = str(failure.error) or failure.error.__class__.__name__
        if operation == "remove_checked":
            return f"Failed to remove checked items: {detail}"
        return f"Failed to delete item '{entry.item.display_name}': {detail}"


__all__ = ["BulkOperationRunner", "RollbackPolicy"]
