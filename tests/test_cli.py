"""CLI tests driven through typer's runner with an in-memory remote."""

from __future__ import annotations

import json

import pytest
from fakes import FakeRemote, make_detail, make_item
from typer.testing import CliRunner

from mealsync import cli
from mealsync.models.mealplan import MealPlanEntry
from mealsync.sync.mealplan_import import NO_RECIPES_MESSAGE

runner = CliRunner()


@pytest.fixture()
def cli_remote(monkeypatch) -> FakeRemote:
    remote = FakeRemote(make_detail([make_item("milk"), make_item("eggs", checked=True), make_item("bread")]))
    monkeypatch.setattr(cli, "build_list_service", lambda: remote)
    return remote


def _payload(result) -> dict:
    line = next(line for line in result.stdout.splitlines() if line.startswith("{"))
    return json.loads(line)


def test_show_prints_unchecked_items_first(cli_remote):
    result = runner.invoke(cli.app, ["show", "list-1", "--no-pretty"])

    assert result.exit_code == 0, result.output
    payload = _payload(result)
    assert [item["id"] for item in payload["items"]] == ["milk", "bread", "eggs"]
    assert payload["last_error"] is None


def test_check_marks_item_and_sends_update(cli_remote):
    result = runner.invoke(cli.app, ["check", "list-1", "milk", "--no-pretty"])

    assert result.exit_code == 0, result.output
    assert [(item.id, item.checked) for item in cli_remote.updated] == [("milk", True)]


def test_add_with_blank_note_exits_with_error(cli_remote):
    result = runner.invoke(cli.app, ["add", "list-1", "   ", "--no-pretty"])

    assert result.exit_code == 1
    assert cli_remote.count("create_item") == 0


def test_delete_reports_failure_exit_code(cli_remote):
    cli_remote.fail("delete_item", "bread")

    result = runner.invoke(cli.app, ["delete", "list-1", "milk", "bread", "--no-pretty"])

    assert result.exit_code == 1
    assert [item["id"] for item in _payload(result)["items"]] == ["bread", "eggs"]


def test_import_meal_plan_without_recipes(cli_remote):
    cli_remote.entries = [MealPlanEntry(date="2024-05-13", title="Leftovers")]

    result = runner.invoke(cli.app, ["import-meal-plan", "list-1", "2024-05-13", "2024-05-19", "--no-pretty"])

    assert result.exit_code == 0, result.output
    assert NO_RECIPES_MESSAGE in result.output
    assert cli_remote.bulk_calls == []


def test_import_meal_plan_adds_recipes(cli_remote):
    cli_remote.entries = [
        MealPlanEntry(date="2024-05-13", recipe_id="r2"),
        MealPlanEntry(date="2024-05-14", recipe_id="r1"),
    ]

    result = runner.invoke(cli.app, ["import-meal-plan", "list-1", "2024-05-13", "2024-05-19", "--no-pretty"])

    assert result.exit_code == 0, result.output
    assert cli_remote.bulk_calls == [("list-1", ["r1", "r2"])]
    assert cli_remote.count("fetch_list_detail") == 2


def test_missing_base_url_exits_with_code_2():
    result = runner.invoke(cli.app, ["show", "list-1"])

    assert result.exit_code == 2
