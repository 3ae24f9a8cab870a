from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from daybook.api.app import create_app
from daybook.services.container import Container


@pytest.fixture()
def client(memory_container: Container) -> TestClient:
    return TestClient(create_app(memory_container))


def test_task_crud_uses_camel_case(client: TestClient) -> None:
    response = client.post("/api/tasks", json={"name": "X", "taskType": "yes-no", "scheduledDate": "2024-03-10"})
    assert response.status_code == 201
    task = response.json()
    assert task["id"] == 1
    assert task["isCompleted"] is False
    assert task["hasTimeRequired"] is True
    assert task["scheduledDate"] == "2024-03-10"
    assert task["recurringDays"] == []
    assert "createdAt" in task

    response = client.put("/api/tasks/1", json={"name": "Y"})
    assert response.status_code == 200
    assert response.json()["name"] == "Y"

    assert client.get("/api/tasks/1").json()["name"] == "Y"
    assert [t["id"] for t in client.get("/api/tasks").json()] == [1]

    assert client.delete("/api/tasks/1").status_code == 204
    assert client.delete("/api/tasks/1").status_code == 404
    assert client.get("/api/tasks/1").status_code == 404


def test_task_errors_map_to_statuses(client: TestClient) -> None:
    assert client.post("/api/tasks", json={"name": "", "taskType": "yes-no"}).status_code == 400
    assert client.post("/api/tasks", json={"name": "X", "taskType": "todo"}).status_code == 400
    assert client.post("/api/tasks", json={"name": "X", "taskType": "yes-no", "id": 3}).status_code == 400
    response = client.post("/api/tasks", json={"name": "X", "taskType": "yes-no", "scheduledTime": "7pm"})
    assert response.status_code == 422
    assert "message" in response.json()
    assert client.put("/api/tasks/9", json={"name": "Y"}).status_code == 404


def test_complete_letter_task(client: TestClient) -> None:
    task_id = client.post("/api/tasks", json={"name": "Grade", "taskType": "letter"}).json()["id"]

    response = client.post(f"/api/tasks/{task_id}/complete", json={"outcome": "b"})
    assert response.status_code == 200
    assert response.json()["letterValue"] == "B"
    assert response.json()["isCompleted"] is True

    assert client.post(f"/api/tasks/{task_id}/complete", json={"outcome": ""}).status_code == 400


def test_daily_views(client: TestClient) -> None:
    client.post("/api/tasks", json={"name": "a", "taskType": "yes-no", "isDaily": True})
    client.post("/api/tasks", json={"name": "b", "taskType": "yes-no", "scheduledDate": "2024-03-10"})

    daily = client.get("/api/tasks/daily").json()
    assert [t["name"] for t in daily] == ["a"]
    assert daily[0]["dailyPosition"] == 1

    progress = client.get("/api/tasks/daily/progress").json()
    assert progress == {"completed": 0, "total": 1, "target": 8}


def test_tasks_and_notes_by_date(client: TestClient) -> None:
    client.post("/api/tasks", json={"name": "b", "taskType": "yes-no", "scheduledDate": "2024-03-10"})
    client.post("/api/notes", json={"title": "n", "content": "c", "associatedDate": "2024-03-10"})

    assert [t["name"] for t in client.get("/api/tasks/date/2024-03-10").json()] == ["b"]
    assert client.get("/api/tasks/date/2024-03-11").json() == []
    assert [n["title"] for n in client.get("/api/notes/date/2024-03-10").json()] == ["n"]
    assert client.get("/api/tasks/date/not-a-date").status_code == 400


def test_note_crud(client: TestClient) -> None:
    response = client.post("/api/notes", json={"title": "n", "content": "c"})
    assert response.status_code == 201
    note_id = response.json()["id"]
    assert response.json()["associatedDate"] is None

    assert client.put(f"/api/notes/{note_id}", json={"content": "d"}).json()["content"] == "d"
    assert client.get(f"/api/notes/{note_id}").json()["content"] == "d"
    assert len(client.get("/api/notes").json()) == 1
    assert client.post("/api/notes", json={"title": "n"}).status_code == 400
    assert client.delete(f"/api/notes/{note_id}").status_code == 204
    assert client.delete(f"/api/notes/{note_id}").status_code == 404


def test_notifications(client: TestClient) -> None:
    response = client.post("/api/notifications", json={"taskId": 5, "notificationTime": "2024-03-10T08:00:00Z"})
    assert response.status_code == 201
    notification = response.json()
    assert notification["isRead"] is False
    assert notification["taskId"] == 5

    assert len(client.get("/api/notifications/unread").json()) == 1
    assert client.put(f"/api/notifications/{notification['id']}/read").json()["isRead"] is True
    assert client.get("/api/notifications/unread").json() == []
    assert len(client.get("/api/notifications").json()) == 1
    assert client.put("/api/notifications/99/read").status_code == 404
    assert client.delete(f"/api/notifications/{notification['id']}").status_code == 204


def test_settings(client: TestClient) -> None:
    assert client.get("/api/settings/dailyTasksCount").json() == {"key": "dailyTasksCount", "value": "8"}
    assert client.get("/api/settings/theme").status_code == 404
    assert client.put("/api/settings/theme", json={"value": "dark"}).json() == {"key": "theme", "value": "dark"}
    assert client.put("/api/settings/theme", json={"value": 3}).status_code == 400


def test_calendar_range(client: TestClient) -> None:
    client.post("/api/tasks", json={"name": "A", "taskType": "yes-no", "scheduledDate": "2024-03-10"})
    client.post("/api/notes", json={"title": "B", "content": "c", "associatedDate": "2024-03-10"})

    response = client.get("/api/calendar/2024-03-09/2024-03-11")

    assert response.status_code == 200
    data = response.json()
    assert list(data) == ["2024-03-09", "2024-03-10", "2024-03-11"]
    assert [t["name"] for t in data["2024-03-10"]["tasks"]] == ["A"]
    assert [n["title"] for n in data["2024-03-10"]["notes"]] == ["B"]
    assert data["2024-03-09"] == {"tasks": [], "notes": []}
    assert client.get("/api/calendar/2024-03-11/2024-03-09").status_code == 400
