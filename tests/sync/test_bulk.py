"""Tests for sequential bulk deletes with abort-on-first-failure."""

from __future__ import annotations

import asyncio
import logging

from fakes import FakeRemote, make_detail, make_item

from mealsync.client.errors import UnauthorizedError
from mealsync.sync.bulk import BulkOperationRunner, RollbackPolicy
from mealsync.sync.results import Outcome
from mealsync.sync.store import ListItemStore


def _store(*items) -> ListItemStore:
    store = ListItemStore("list-1")
    store.load(make_detail(items))
    return store


def _ids(store) -> list[str]:
    return [item.id for item in store.items]


def test_delete_many_commits_in_order():
    store = _store(make_item("a"), make_item("b"), make_item("c"), make_item("d"))
    remote = FakeRemote()

    result = asyncio.run(BulkOperationRunner(store, remote).delete_many(["c", "a"]))

    assert result.outcome is Outcome.RECONCILED
    assert remote.deleted == ["c", "a"]
    assert _ids(store) == ["b", "d"]
    assert store.last_error is None


def test_delete_many_restores_only_the_failing_item():
    store = _store(make_item("a"), make_item("b"), make_item("c"), make_item("d"))
    remote = FakeRemote()
    remote.fail("delete_item", "b")

    result = asyncio.run(BulkOperationRunner(store, remote).delete_many(["a", "b", "c"]))

    assert result.outcome is Outcome.ABORTED
    assert result.committed == ("a",)
    assert result.failed == "b"
    assert result.restored == ("b",)
    assert result.unattempted == ("c",)
    assert remote.deleted == ["a"]
    assert ("delete_item", "c") not in remote.calls
    ids = _ids(store)
    assert "a" not in ids and "c" not in ids
    assert ids == ["d", "b"]
    original_index, shrinkage = 1, 3
    assert abs(ids.index("b") - original_index) <= shrinkage
    assert store.last_error.startswith("Failed to delete item '1 b'")


def test_delete_many_unauthorized_aborts_like_any_failure():
    store = _store(make_item("a"), make_item("b"))
    remote = FakeRemote()
    remote.fail("delete_item", "a", error=UnauthorizedError())

    result = asyncio.run(BulkOperationRunner(store, remote).delete_many(["a", "b"]))

    assert result.outcome is Outcome.ABORTED
    assert result.committed == ()
    assert _ids(store) == ["a"]
    assert remote.count("delete_item") == 1
    assert store.last_error is not None


def test_delete_many_with_unknown_ids_is_a_noop():
    store = _store(make_item("a"))
    remote = FakeRemote()

    result = asyncio.run(BulkOperationRunner(store, remote).delete_many(["ghost"]))

    assert result.outcome is Outcome.NOOP
    assert remote.calls == []


def test_remove_checked_restores_failing_and_unattempted_items():
    store = _store(
        make_item("x", checked=True),
        make_item("y", checked=True),
        make_item("w", checked=True),
        make_item("z"),
    )
    remote = FakeRemote()
    remote.fail("delete_item", "y")

    result = asyncio.run(BulkOperationRunner(store, remote).remove_checked())

    assert result.outcome is Outcome.ABORTED
    assert result.committed == ("x",)
    assert set(result.restored) == {"y", "w"}
    assert _ids(store) == ["z", "y", "w"]
    assert store.get("z") == make_item("z")
    assert store.last_error.startswith("Failed to remove checked items")


def test_remove_checked_partial_failure_keeps_committed_deletions():
    store = _store(make_item("x", checked=True), make_item("y", checked=True), make_item("z"))
    remote = FakeRemote()
    remote.fail("delete_item", "y")

    asyncio.run(BulkOperationRunner(store, remote).remove_checked())

    assert _ids(store) == ["z", "y"]
    assert store.get("y").checked is True
    assert remote.deleted == ["x"]


def test_remove_checked_with_failed_only_policy():
    store = _store(make_item("x", checked=True), make_item("y", checked=True), make_item("w", checked=True))
    remote = FakeRemote()
    remote.fail("delete_item", "x")

    result = asyncio.run(
        BulkOperationRunner(store, remote).remove_checked(policy=RollbackPolicy.FAILED_ONLY)
    )

    assert result.restored == ("x",)
    assert result.unattempted == ("y", "w")
    assert _ids(store) == ["x"]


def test_remove_checked_without_checked_items_makes_no_calls():
    store = _store(make_item("a"))
    remote = FakeRemote()

    result = asyncio.run(BulkOperationRunner(store, remote).remove_checked())

    assert result.outcome is Outcome.NOOP
    assert remote.calls == []


def test_abort_log_record_carries_list_id(caplog):
    store = _store(make_item("a"))
    remote = FakeRemote()
    remote.fail("delete_item", "a")

    with caplog.at_level(logging.WARNING, logger="mealsync.sync.bulk"):
        asyncio.run(BulkOperationRunner(store, remote).delete_many(["a"]))

    (record,) = [record for record in caplog.records if record.name == "mealsync.sync.bulk"]
    assert record.list_id == "list-1"
