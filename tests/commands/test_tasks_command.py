"""Tests for task commands."""
# pylint: disable=redefined-outer-name

import pytest
import typer
from typer.testing import CliRunner

from yata_sync.commands.tasks import app, parse_position

runner = CliRunner()


@pytest.fixture
def created_task(cli_user, parse_json):
    result = runner.invoke(
        app, ["create", "Buy milk", "-u", cli_user, "--section", "Today", "-o", "json"]
    )
    assert result.exit_code == 0, result.output
    return parse_json(result.stdout)


class TestParsePosition:
    def test_valid(self):
        position = parse_position("t1:To Do:3")
        assert (position.id, position.section, position.order) == ("t1", "To Do", 3)

    def test_section_may_contain_colons(self):
        assert parse_position("t1:a:b:-1").section == "a:b"

    @pytest.mark.parametrize("value", ["t1", "t1:Today", ":Today:1", "t1:Today:x"])
    def test_invalid(self, value):
        with pytest.raises(typer.BadParameter):
            parse_position(value)


def test_create_and_get(created_task, cli_user, parse_json):
    assert created_task["title"] == "Buy milk"
    assert created_task["section"] == "Today"

    result = runner.invoke(app, ["get", created_task["id"], "-u", cli_user, "-o", "json"])

    assert result.exit_code == 0, result.output
    detail = parse_json(result.stdout)
    assert detail["subtasks"] == []
    assert detail["project"] is None


def test_list_filters(created_task, cli_user, parse_json):
    runner.invoke(app, ["create", "Other", "-u", cli_user])

    result = runner.invoke(app, ["list", "-u", cli_user, "--section", "Today", "-o", "json"])

    assert [t["id"] for t in parse_json(result.stdout)] == [created_task["id"]]


def test_list_table(created_task, cli_user):
    result = runner.invoke(app, ["list", "-u", cli_user, "-o", "table"])
    assert result.exit_code == 0
    assert "Buy milk" in result.stdout


def test_create_with_unknown_project(cli_user):
    result = runner.invoke(app, ["create", "x", "-u", cli_user, "--project", "nope"])
    assert result.exit_code == 5
    assert "Project not found: nope" in result.stdout


def test_create_with_blank_title(cli_user):
    result = runner.invoke(app, ["create", "", "-u", cli_user])
    assert result.exit_code == 2


def test_get_missing(cli_user):
    result = runner.invoke(app, ["get", "missing", "-u", cli_user])
    assert result.exit_code == 5


def test_delete_requires_confirmation(created_task, cli_user):
    result = runner.invoke(app, ["delete", created_task["id"], "-u", cli_user], input="n\n")

    assert result.exit_code == 0
    assert "Cancelled" in result.stdout
    assert runner.invoke(app, ["get", created_task["id"], "-u", cli_user]).exit_code == 0


def test_delete(created_task, cli_user):
    result = runner.invoke(app, ["delete", created_task["id"], "-u", cli_user, "--yes"])

    assert result.exit_code == 0
    assert runner.invoke(app, ["get", created_task["id"], "-u", cli_user]).exit_code == 5


def test_reorder(created_task, cli_user, parse_json):
    result = runner.invoke(
        app, ["reorder", f"{created_task['id']}:Someday:4", "-u", cli_user, "-o", "json"]
    )

    assert result.exit_code == 0, result.output
    moved = parse_json(result.stdout)
    assert (moved[0]["section"], moved[0]["order"]) == ("Someday", 4)


def test_reorder_bad_position(cli_user):
    result = runner.invoke(app, ["reorder", "garbage", "-u", cli_user])
    assert result.exit_code == 2
