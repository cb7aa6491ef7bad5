import pytest
from fastapi.testclient import TestClient

from api.main import app
from worker.timer import WORK_SECONDS

HEADERS = {"X-User-Id": "user-1"}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create(client, text="Write report", priority="medium"):
    resp = client.post("/api/task", json={"text": text, "priority": priority}, headers=HEADERS)
    assert resp.status_code == 200
    return resp.json()


def test_requires_user_header(client):
    resp = client.get("/api/task/list")
    assert resp.status_code == 401


def test_task_crud(client):
    task = create(client)
    assert task["priority"] == "medium"

    resp = client.get("/api/task/detail", params={"task_id": task["task_id"]}, headers=HEADERS)
    assert resp.json()["text"] == "Write report"

    resp = client.post("/api/task/update", json={"task_id": task["task_id"], "priority": "high"}, headers=HEADERS)
    assert resp.json()["priority"] == "high"

    resp = client.post("/api/task/delete", json={"task_id": task["task_id"]}, headers=HEADERS)
    assert resp.json()["deleted"] is True
    resp = client.get("/api/task/detail", params={"task_id": task["task_id"]}, headers=HEADERS)
    assert resp.status_code == 404


def test_create_rejects_bad_priority(client):
    resp = client.post("/api/task", json={"text": "x", "priority": "critical"}, headers=HEADERS)
    assert resp.status_code == 400


def test_tasks_are_scoped_to_user(client):
    create(client)
    resp = client.get("/api/task/list", headers={"X-User-Id": "user-2"})
    assert resp.json() == []


def test_toggle_awards_and_revokes(client):
    task = create(client, priority="high")

    resp = client.post("/api/task/toggle", json={"task_id": task["task_id"]}, headers=HEADERS)
    body = resp.json()
    assert body["completed"] is True
    assert body["points"] == 15

    summary = client.get("/api/point/summary", headers=HEADERS).json()
    assert summary["current_points"] == 15
    assert summary["today"] == 15

    resp = client.post("/api/task/toggle", json={"task_id": task["task_id"]}, headers=HEADERS)
    assert resp.json()["points"] == -15

    summary = client.get("/api/point/summary", headers=HEADERS).json()
    assert summary["current_points"] == 0
    assert summary["total_points"] == 15

    history = client.get("/api/point/history", headers=HEADERS).json()
    assert sorted(h["points"] for h in history) == [-15, 15]


def test_toggle_missing_task(client):
    resp = client.post("/api/task/toggle", json={"task_id": "nope"}, headers=HEADERS)
    assert resp.status_code == 404


def test_subtask_flow(client):
    task = create(client)
    a = client.post("/api/task/subtask", json={"task_id": task["task_id"], "text": "a"}, headers=HEADERS).json()
    b = client.post("/api/task/subtask", json={"task_id": task["task_id"], "text": "b"}, headers=HEADERS).json()

    resp = client.post("/api/task/subtask/toggle",
                       json={"task_id": task["task_id"], "sub_task_id": a["id"]}, headers=HEADERS)
    assert resp.json()["points"] == 3

    resp = client.post("/api/task/subtask/reorder",
                       json={"task_id": task["task_id"], "order": [b["id"], a["id"]]}, headers=HEADERS)
    assert [st["text"] for st in resp.json()["sub_tasks"]] == ["b", "a"]

    resp = client.post("/api/task/subtask/delete",
                       json={"task_id": task["task_id"], "sub_task_id": b["id"]}, headers=HEADERS)
    assert [(st["text"], st["order"]) for st in resp.json()["sub_tasks"]] == [("a", 1)]


def test_login_bonus_once(client):
    first = client.post("/api/point/login-bonus", headers=HEADERS).json()
    second = client.post("/api/point/login-bonus", headers=HEADERS).json()
    assert first["awarded"] == 10
    assert second["awarded"] == 0
    assert second["points"]["current_points"] == 10


def test_list_rejects_unknown_sort(client):
    resp = client.get("/api/task/list", params={"sort_by": "color"}, headers=HEADERS)
    assert resp.status_code == 400


def test_pomodoro_start_and_stop(client):
    task = create(client)

    resp = client.post("/api/pomodoro/start", json={"task_id": task["task_id"]}, headers=HEADERS)
    state = resp.json()
    assert state["is_running"] is True
    assert state["task_id"] == task["task_id"]
    assert state["time_left"] >= WORK_SECONDS - 2

    state = client.get("/api/pomodoro/state", headers=HEADERS).json()
    assert state["is_visible"] is True

    state = client.post("/api/pomodoro/stop", headers=HEADERS).json()
    assert state["is_running"] is False
    assert client.get("/api/feedback", headers=HEADERS).json()["message"] == "Pomodoro timer stopped"

    stats = client.get("/api/pomodoro/stats", headers=HEADERS).json()
    assert stats["completed_sessions"] == 0


def test_pomodoro_start_unknown_task(client):
    resp = client.post("/api/pomodoro/start", json={"task_id": "nope"}, headers=HEADERS)
    assert resp.status_code == 404


def test_analytics(client):
    create(client)
    body = client.get("/api/task/analytics", headers=HEADERS).json()
    assert body["total_tasks"] == 1


def test_subtask_rename(client):
    task = create(client)
    st = client.post("/api/task/subtask", json={"task_id": task["task_id"], "text": "Outline"}, headers=HEADERS).json()
    resp = client.post("/api/task/subtask/update",
                       json={"task_id": task["task_id"], "sub_task_id": st["id"], "text": "Detailed outline"},
                       headers=HEADERS)
    assert [s["text"] for s in resp.json()["sub_tasks"]] == ["Detailed outline"]

    resp = client.post("/api/task/subtask/update",
                       json={"task_id": task["task_id"], "sub_task_id": "missing", "text": "x"}, headers=HEADERS)
    assert resp.status_code == 404


def test_subtask_rename_rejects_blank_text(client):
    task = create(client)
    st = client.post("/api/task/subtask", json={"task_id": task["task_id"], "text": "Outline"}, headers=HEADERS).json()
    resp = client.post("/api/task/subtask/update",
                       json={"task_id": task["task_id"], "sub_task_id": st["id"], "text": "   "}, headers=HEADERS)
    assert resp.status_code == 400
    detail = client.get("/api/task/detail", params={"task_id": task["task_id"]}, headers=HEADERS).json()
    assert [s["text"] for s in detail["sub_tasks"]] == ["Outline"]


def test_spend_points(client):
    task = create(client, priority="high")
    client.post("/api/task/toggle", json={"task_id": task["task_id"]}, headers=HEADERS)

    resp = client.post("/api/point/spend", json={"amount": 10, "description": "Theme"}, headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json()["points"]["current_points"] == 5

    resp = client.post("/api/point/spend", json={"amount": 10}, headers=HEADERS)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Not enough points (need 10)"

    resp = client.post("/api/point/spend", json={"amount": 0}, headers=HEADERS)
    assert resp.status_code == 400


def test_only_timer_owner_can_stop(client):
    task = create(client)
    other = {"X-User-Id": "user-2"}
    client.post("/api/pomodoro/start", json={"task_id": task["task_id"]}, headers=HEADERS)

    assert client.post("/api/pomodoro/stop", headers=other).status_code == 409
    assert client.post("/api/pomodoro/stop-alarm", headers=other).status_code == 409
    other_task = client.post("/api/task", json={"text": "Mine"}, headers=other).json()
    resp = client.post("/api/pomodoro/start", json={"task_id": other_task["task_id"]}, headers=other)
    assert resp.status_code == 409
    assert client.get("/api/pomodoro/state", headers=HEADERS).json()["is_running"] is True

    assert client.post("/api/pomodoro/stop", headers=HEADERS).status_code == 200
    resp = client.post("/api/pomodoro/start", json={"task_id": other_task["task_id"]}, headers=other)
    assert resp.status_code == 200
    assert resp.json()["task_id"] == other_task["task_id"]
