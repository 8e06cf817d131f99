# tests/test_tasks_api.py

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from actionable_inbox.api.deps import get_task_service
from actionable_inbox.models.task import TaskPriority

from .conftest import add_task


def test_list_scenario_user_and_completion_filter(client: TestClient, db, users) -> None:
    u1, u2 = users
    a = add_task(db, u1, "A", priority=TaskPriority.HIGH)
    add_task(db, u1, "B", completed=True, priority=TaskPriority.HIGH)
    add_task(db, u2, "C", priority=TaskPriority.LOW)

    r = client.get("/api/tasks", params={"userId": str(u1), "completed": "false"})

    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == [str(a)]


def test_list_payload_shape(client: TestClient, db, users) -> None:
    u1, _ = users
    add_task(db, u1, "Review quarterly reports", priority=TaskPriority.HIGH, due_date=datetime(2024, 2, 15, tzinfo=timezone.utc))

    [task] = client.get("/api/tasks").json()

    assert task["title"] == "Review quarterly reports"
    assert task["priority"] == "HIGH"
    assert task["completed"] is False
    assert task["dueDate"].startswith("2024-02-15")
    assert task["userId"] == str(u1)
    assert task["user"] == {"id": str(u1), "name": "John Doe", "email": "john.doe@example.com"}
    assert {"createdAt", "updatedAt", "description"} <= task.keys()


def test_list_orders_incomplete_and_urgent_first(client: TestClient, db, users) -> None:
    u1, _ = users
    done = add_task(db, u1, "done", completed=True, priority=TaskPriority.URGENT)
    low = add_task(db, u1, "low", priority=TaskPriority.LOW)
    urgent = add_task(db, u1, "urgent", priority=TaskPriority.URGENT)

    ids = [t["id"] for t in client.get("/api/tasks").json()]

    assert ids == [str(urgent), str(low), str(done)]


def test_list_rejects_bad_filters(client: TestClient) -> None:
    assert client.get("/api/tasks", params={"priority": "SOMEDAY"}).status_code == 400
    r = client.get("/api/tasks", params={"userId": "not-a-uuid"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_create_defaults(client: TestClient, users) -> None:
    u1, _ = users

    r = client.post("/api/tasks", json={"title": "X", "userId": str(u1)})

    assert r.status_code == 201
    body = r.json()
    assert body["priority"] == "MEDIUM"
    assert body["completed"] is False
    assert body["dueDate"] is None
    assert body["user"]["email"] == "john.doe@example.com"


def test_create_with_all_fields(client: TestClient, users) -> None:
    _, u2 = users

    r = client.post(
        "/api/tasks",
        json={
            "title": "Fix critical bug in production",
            "description": "Address the authentication issue",
            "priority": "URGENT",
            "dueDate": "2024-02-05",
            "userId": str(u2),
        },
    )

    assert r.status_code == 201
    body = r.json()
    assert body["priority"] == "URGENT"
    assert body["dueDate"].startswith("2024-02-05T00:00:00")
    assert body["description"] == "Address the authentication issue"


def test_create_missing_fields_creates_nothing(client: TestClient, users) -> None:
    u1, _ = users

    for payload in ({"userId": str(u1)}, {"title": "X"}, {"title": "", "userId": str(u1)}):
        r = client.post("/api/tasks", json=payload)
        assert r.status_code == 400
        assert r.json() == {"error": "Title and userId are required"}

    assert client.get("/api/tasks").json() == []


def test_create_for_unknown_user(client: TestClient) -> None:
    r = client.post("/api/tasks", json={"title": "X", "userId": str(uuid.uuid4())})

    assert r.status_code == 400
    assert client.get("/api/tasks").json() == []


def test_create_invalid_priority(client: TestClient, users) -> None:
    u1, _ = users

    r = client.post("/api/tasks", json={"title": "X", "userId": str(u1), "priority": "urgent!"})

    assert r.status_code == 400
    assert "Invalid priority" in r.json()["error"]


def test_get_task(client: TestClient, db, users) -> None:
    u1, _ = users
    task_id = add_task(db, u1, "T")

    assert client.get(f"/api/tasks/{task_id}").json()["title"] == "T"
    assert client.get(f"/api/tasks/{uuid.uuid4()}").status_code == 404


def test_update_scenario_priority_only(client: TestClient, db, users) -> None:
    u1, _ = users
    task_id = add_task(db, u1, "Old", priority=TaskPriority.HIGH, due_date=datetime(2024, 2, 15, tzinfo=timezone.utc))

    r = client.put(f"/api/tasks/{task_id}", json={"priority": "LOW"})

    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Old"
    assert body["priority"] == "LOW"
    assert body["dueDate"].startswith("2024-02-15")


def test_update_distinguishes_null_from_absent(client: TestClient, db, users) -> None:
    u1, _ = users
    task_id = add_task(db, u1, "T", description="notes", due_date=datetime(2024, 2, 15, tzinfo=timezone.utc))

    body = client.put(f"/api/tasks/{task_id}", json={"completed": True}).json()
    assert body["completed"] is True
    assert body["description"] == "notes"
    assert body["dueDate"] is not None

    body = client.put(f"/api/tasks/{task_id}", json={"dueDate": None, "description": None}).json()
    assert body["dueDate"] is None
    assert body["description"] is None
    assert body["completed"] is True


def test_update_empty_due_date_clears_it(client: TestClient, db, users) -> None:
    u1, _ = users
    task_id = add_task(db, u1, "T", due_date=datetime(2024, 2, 15, tzinfo=timezone.utc))

    assert client.put(f"/api/tasks/{task_id}", json={"dueDate": ""}).json()["dueDate"] is None


def test_update_cannot_move_task_to_another_user(client: TestClient, db, users) -> None:
    u1, u2 = users
    task_id = add_task(db, u1, "T")

    body = client.put(f"/api/tasks/{task_id}", json={"userId": str(u2), "title": "Renamed"}).json()

    assert body["userId"] == str(u1)
    assert body["title"] == "Renamed"


def test_update_unknown_task(client: TestClient, db, users) -> None:
    u1, _ = users
    add_task(db, u1, "T")

    r = client.put(f"/api/tasks/{uuid.uuid4()}", json={"title": "X"})

    assert r.status_code == 404
    assert r.json() == {"error": "Task not found"}
    assert [t["title"] for t in client.get("/api/tasks").json()] == ["T"]


def test_delete_task(client: TestClient, db, users) -> None:
    u1, _ = users
    task_id = add_task(db, u1, "T")

    r = client.delete(f"/api/tasks/{task_id}")

    assert r.status_code == 204
    assert r.content == b""
    assert client.get("/api/tasks").json() == []


def test_delete_unknown_task(client: TestClient, db, users) -> None:
    u1, _ = users
    add_task(db, u1, "T")

    assert client.delete(f"/api/tasks/{uuid.uuid4()}").status_code == 404
    assert len(client.get("/api/tasks").json()) == 1


class _BrokenTaskService:
    def list_tasks(self, **kwargs):
        raise OperationalError("SELECT * FROM tasks", {}, Exception("database is locked"))


def test_store_failure_is_a_generic_500(client: TestClient) -> None:
    client.app.dependency_overrides[get_task_service] = lambda: _BrokenTaskService()
    try:
        r = client.get("/api/tasks")
    finally:
        client.app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}


def test_list_blank_filters_mean_no_filter(client: TestClient, db, users) -> None:
    u1, u2 = users
    add_task(db, u1, "mine")
    add_task(db, u2, "theirs", completed=True)

    r = client.get("/api/tasks?userId=&completed=&priority=")

    assert r.status_code == 200
    assert sorted(t["title"] for t in r.json()) == ["mine", "theirs"]


def test_list_completed_true_and_priority_with_user(client: TestClient, db, users) -> None:
    u1, u2 = users
    done = add_task(db, u1, "done", completed=True, priority=TaskPriority.HIGH)
    mine_high = add_task(db, u1, "mine high", priority=TaskPriority.HIGH)
    add_task(db, u1, "mine low", priority=TaskPriority.LOW)
    add_task(db, u2, "theirs high", priority=TaskPriority.HIGH)

    completed = client.get("/api/tasks", params={"completed": "true"}).json()
    high = client.get("/api/tasks", params={"userId": str(u1), "priority": "HIGH"}).json()

    assert [t["id"] for t in completed] == [str(done)]
    assert [t["id"] for t in high] == [str(mine_high), str(done)]


def test_list_rejects_bad_completed_value(client: TestClient) -> None:
    r = client.get("/api/tasks", params={"completed": "maybe"})

    assert r.status_code == 400
    assert "completed" in r.json()["error"]


def test_timestamps_round_trip_as_utc(client: TestClient, users) -> None:
    u1, _ = users

    created = client.post(
        "/api/tasks", json={"title": "X", "userId": str(u1), "dueDate": "2024-02-15T12:00:00+02:00"}
    ).json()
    fetched = client.get(f"/api/tasks/{created['id']}").json()

    assert created["dueDate"] == "2024-02-15T10:00:00Z"
    assert fetched["dueDate"] == "2024-02-15T10:00:00Z"
    assert fetched["createdAt"].endswith("Z")
    assert fetched["updatedAt"].endswith("Z")
    assert client.get("/api/users").json()[0]["createdAt"].endswith("Z")
