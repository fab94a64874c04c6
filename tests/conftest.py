"""Shared pytest fixtures for the mealsync test suite."""

from __future__ import annotations

import pytest
from fakes import FakeRemote, make_detail, make_item

from mealsync.config import get_settings
from mealsync.sync.store import ListItemStore


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent from the developer's environment and .env files."""

    for key in (
        "MEALSYNC_BASE_URL",
        "MEALSYNC_API_TOKEN",
        "MEALSYNC_LOG_LEVEL",
        "MEALSYNC_LOG_FORMAT",
        "MEALSYNC_REQUEST_TIMEOUT",
        "MEALSYNC_FOOD_SEARCH_DEBOUNCE",
        "MEALSYNC_FOOD_SEARCH_PAGE_SIZE",
        "MEALSYNC_WEEK_START",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def sample_detail():
    """Two unchecked items followed by two checked ones, in server order."""

    return make_detail(
        [
            make_item("milk"),
            make_item("eggs", checked=True),
            make_item("bread"),
            make_item("salt", checked=True),
        ]
    )


@pytest.fixture()
def remote(sample_detail) -> FakeRemote:
    return FakeRemote(sample_detail)


@pytest.fixture()
def store(sample_detail) -> ListItemStore:
    list_store = ListItemStore(sample_detail.id)
    list_store.load(sample_detail)
    return list_store
