import re

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient

from api.main import app
from pomopoint import api_client
from pomopoint import config as cli_config
from pomopoint.command_option import cli
from pomopoint.time_util import format_countdown
from storage.repository import task as task_repo


@pytest.fixture
def runner(monkeypatch, user_id):
    monkeypatch.setattr(cli_config, "_config", {
        "home": "/tmp/pomopoint-test",
        "database_url": "sqlite://",
        "user_id": user_id,
        "api_url": "http://testserver",
        "timezone": "UTC",
    })
    monkeypatch.setattr(cli_config, "_db_initialized", True)
    return CliRunner()


def add_task(runner, *args):
    result = runner.invoke(cli, ["task", "add", *args])
    assert result.exit_code == 0, result.output
    return re.search(r"\((\w+)\)$", result.output.strip()).group(1)


def test_task_add_and_get(runner, user_id):
    task_id = add_task(runner, "Write report", "-p", "high", "-d", "2026-11-01")
    result = runner.invoke(cli, ["task", "get", task_id])
    assert "Write report" in result.output
    assert "high" in result.output
    assert "2026-11-01" in result.output
    assert task_repo.get_task(user_id, task_id) is not None


def test_task_add_rejects_empty_text(runner):
    result = runner.invoke(cli, ["task", "add", "  "])
    assert result.exit_code != 0


def test_task_toggle_reports_points(runner):
    task_id = add_task(runner, "Write report")
    result = runner.invoke(cli, ["task", "toggle", task_id])
    assert "Completed 'Write report'! +10 points" in result.output
    result = runner.invoke(cli, ["task", "toggle", task_id])
    assert "Task completion undone. -10 points" in result.output


def test_task_update_and_delete(runner):
    task_id = add_task(runner, "Draft")
    result = runner.invoke(cli, ["task", "update", task_id, "-t", "Final"])
    assert "Updated task 'Final'" in result.output
    result = runner.invoke(cli, ["task", "delete", task_id])
    assert "Deleted task" in result.output
    result = runner.invoke(cli, ["task", "get", task_id])
    assert "not found" in result.output


def test_unknown_task(runner):
    result = runner.invoke(cli, ["task", "toggle", "nope"])
    assert "Task 'nope' not found" in result.output


def test_subtask_commands(runner, user_id):
    task_id = add_task(runner, "Write report")
    runner.invoke(cli, ["subtask", "add", task_id, "Outline"])
    runner.invoke(cli, ["subtask", "add", task_id, "Draft"])
    first, second = task_repo.get_task(user_id, task_id).sub_tasks

    result = runner.invoke(cli, ["subtask", "toggle", task_id, first.id])
    assert "Subtask completed! +3 points" in result.output

    result = runner.invoke(cli, ["subtask", "reorder", task_id, second.id, first.id])
    assert "1. Draft\n2. Outline" in result.output

    result = runner.invoke(cli, ["subtask", "delete", task_id, second.id])
    assert "Deleted subtask" in result.output
    assert [st.order for st in task_repo.get_task(user_id, task_id).sub_tasks] == [1]


def test_subtask_rename(runner, user_id):
    task_id = add_task(runner, "Write report")
    runner.invoke(cli, ["subtask", "add", task_id, "Outline"])
    (st,) = task_repo.get_task(user_id, task_id).sub_tasks

    result = runner.invoke(cli, ["subtask", "rename", task_id, st.id, "  Full outline "])
    assert "Renamed subtask" in result.output
    assert task_repo.get_task(user_id, task_id).sub_tasks[0].text == "Full outline"

    result = runner.invoke(cli, ["subtask", "rename", task_id, st.id, "   "])
    assert "Subtask text must not be empty" in result.output
    assert task_repo.get_task(user_id, task_id).sub_tasks[0].text == "Full outline"


def test_points_commands(runner):
    task_id = add_task(runner, "Write report", "-p", "low")
    runner.invoke(cli, ["task", "toggle", task_id])

    result = runner.invoke(cli, ["points", "show"])
    assert "Current:   5" in result.output
    assert "Today:     +5" in result.output

    result = runner.invoke(cli, ["points", "history"])
    assert "Task completed: Write report" in result.output

    result = runner.invoke(cli, ["points", "bonus"])
    assert "Login bonus: +10 points" in result.output
    result = runner.invoke(cli, ["points", "bonus"])
    assert "already claimed" in result.output

    result = runner.invoke(cli, ["points", "spend", "12", "-d", "Theme"])
    assert "Spent 12 points, 3 left" in result.output
    result = runner.invoke(cli, ["points", "spend", "5"])
    assert "Not enough points (need 5)" in result.output
    result = runner.invoke(cli, ["points", "spend", "0"])
    assert result.exit_code != 0


def test_timer_stats(runner):
    result = runner.invoke(cli, ["timer", "stats"])
    assert "Pomodoros today: 0" in result.output


def test_format_countdown():
    assert format_countdown(1500) == "25:00"
    assert format_countdown(61) == "01:01"
    assert format_countdown(-3) == "00:00"


def test_task_list_goes_through_api(runner, monkeypatch):
    add_task(runner, "Write report", "-p", "high")
    add_task(runner, "Water plants", "-p", "low")
    with TestClient(app) as client:
        monkeypatch.setattr(api_client.httpx, "request", client.request)
        result = runner.invoke(cli, ["task", "list"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert "Write report" in lines[2]
    assert "Water plants" in lines[3]
