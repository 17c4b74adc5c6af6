"""
Taskboard API - Task CRUD Tests

CI-safe tests for the /tasks endpoints without MongoDB.
"""

import asyncio

import pytest
from datetime import datetime, timezone, timedelta

from fastapi.testclient import TestClient

from taskboard.main import app
from taskboard.tasks.repository import InMemoryTaskRepository
from taskboard.tasks.router import get_task_repository


def _future(**delta) -> str:
    return (datetime.now(timezone.utc) + timedelta(**delta)).isoformat()


class ExplodingTaskRepository(InMemoryTaskRepository):
    """Fails every read with an internal error."""

    async def list(self, filters, skip=0, limit=None):
        raise RuntimeError("connection to mongodb://db:27017 refused")


class TestCreateTask:
    """Tests for POST /tasks."""

    def test_create_task_minimal(self, client, auth_headers):
        """Create task with only required fields."""
        response = client.post("/tasks", json={"title": "Test Task"}, headers=auth_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Test Task"
        assert data["status"] == "todo"
        assert data["priority"] == "medium"
        assert data["description"] is None
        assert data["deadline"] is None
        assert data["assigneeId"] is None
        assert data["assignee"] is None
        assert isinstance(data["id"], int)
        assert "createdAt" in data
        assert "updatedAt" in data

    def test_create_task_all_fields(self, client, auth_headers, second_user):
        """Create task with all fields."""
        response = client.post(
            "/tasks",
            json={
                "title": "Full Task",
                "description": "A detailed description",
                "type": "Bug",
                "status": "in_progress",
                "priority": "urgent",
                "deadline": _future(days=3),
                "assigneeId": second_user["id"],
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Full Task"
        assert data["description"] == "A detailed description"
        assert data["type"] == "Bug"
        assert data["status"] == "in_progress"
        assert data["priority"] == "urgent"
        assert data["deadline"] is not None
        assert data["assigneeId"] == second_user["id"]
        assert data["assignee"] == {
            "id": second_user["id"],
            "firstname": "Second",
            "lastname": "User",
            "email": "second@example.com",
        }

    def test_create_task_ids_increase(self, client, auth_headers):
        first = client.post("/tasks", json={"title": "One"}, headers=auth_headers).json()
        second = client.post("/tasks", json={"title": "Two"}, headers=auth_headers).json()
        assert second["id"] > first["id"]

    def test_create_task_requires_auth(self, client):
        """Create task without token should fail."""
        response = client.post("/tasks", json={"title": "Unauthorized"})
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_create_task_invalid_body_without_auth_is_401(self, client):
        """Authentication is decided before the body is judged."""
        response = client.post("/tasks", json={"status": "invalid"})
        assert response.status_code == 401

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "Bad Status", "status": "invalid"},
            {"title": "Bad Priority", "priority": "invalid"},
            {"title": "Bad Type", "type": "Chore"},
            {"title": ""},
            {"title": "   "},
            {"description": "No title"},
            {"title": "Negative", "assigneeId": -1},
            {"title": "Oversized", "assigneeId": 10**23},
        ],
    )
    def test_create_task_invalid_payload(self, client, auth_headers, payload):
        response = client.post("/tasks", json=payload, headers=auth_headers)
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Validation failed"
        assert data["details"]

    def test_create_task_past_deadline(self, client, auth_headers):
        """A deadline one second ago is rejected."""
        response = client.post(
            "/tasks",
            json={"title": "Late", "deadline": _future(seconds=-1)},
            headers=auth_headers,
        )
        assert response.status_code == 400
        details = response.json()["details"]
        assert ["deadline"] in [detail["path"] for detail in details]

    def test_create_task_future_deadline(self, client, auth_headers):
        response = client.post(
            "/tasks",
            json={"title": "Tomorrow", "deadline": _future(days=1)},
            headers=auth_headers,
        )
        assert response.status_code == 201

    def test_create_task_null_deadline(self, client, auth_headers):
        response = client.post(
            "/tasks",
            json={"title": "Whenever", "deadline": None},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["deadline"] is None

    def test_create_task_unknown_assignee(self, client, auth_headers):
        response = client.post(
            "/tasks",
            json={"title": "Orphan", "assigneeId": 999},
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Assignee not found"}


class TestGetTask:
    """Tests for GET /tasks/{id}."""

    def test_get_task(self, client, auth_headers, second_user):
        created = client.post(
            "/tasks",
            json={"title": "Assigned", "assigneeId": second_user["id"]},
            headers=auth_headers,
        ).json()

        response = client.get(f"/tasks/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["title"] == "Assigned"
        assert data["assignee"]["email"] == "second@example.com"
        assert "password" not in data["assignee"]
        assert "passwordHash" not in data["assignee"]

    def test_get_task_not_found(self, client, auth_headers):
        response = client.get("/tasks/999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    @pytest.mark.parametrize("task_id", ["invalid", "0", "-1", "99999999999999999999999"])
    def test_get_task_invalid_id(self, client, auth_headers, task_id):
        response = client.get(f"/tasks/{task_id}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_any_user_can_read_any_task(self, client, auth_headers, token_codec, second_user):
        """Tasks are shared; there is no per-owner scoping."""
        created = client.post("/tasks", json={"title": "Shared"}, headers=auth_headers).json()
        other_token = token_codec.issue(user_id=second_user["id"], email=second_user["email"])

        response = client.get(
            f"/tasks/{created['id']}",
            headers={"Authorization": f"Bearer {other_token}"},
        )
        assert response.status_code == 200


class TestUpdateTask:
    """Tests for PUT /tasks/{id}."""

    @pytest.fixture
    def task(self, client, auth_headers):
        return client.post(
            "/tasks",
            json={"title": "Original", "description": "Keep me", "priority": "low"},
            headers=auth_headers,
        ).json()

    def test_partial_update_keeps_other_fields(self, client, auth_headers, task):
        response = client.put(
            f"/tasks/{task['id']}",
            json={"title": "Renamed"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renamed"
        assert data["description"] == "Keep me"
        assert data["priority"] == "low"
        assert data["status"] == "todo"

    def test_update_status(self, client, auth_headers, task):
        response = client.put(
            f"/tasks/{task['id']}",
            json={"status": "done"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "done"

    def test_update_assignee(self, client, auth_headers, task, second_user):
        response = client.put(
            f"/tasks/{task['id']}",
            json={"assigneeId": second_user["id"]},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["assignee"]["id"] == second_user["id"]

    def test_clear_description(self, client, auth_headers, task):
        response = client.put(
            f"/tasks/{task['id']}",
            json={"description": None},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["description"] is None

    def test_empty_update_returns_task(self, client, auth_headers, task):
        response = client.put(f"/tasks/{task['id']}", json={}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Original"

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": None},
            {"title": "   "},
            {"status": "archived"},
            {"priority": None},
        ],
    )
    def test_update_invalid_payload(self, client, auth_headers, task, payload):
        response = client.put(f"/tasks/{task['id']}", json=payload, headers=auth_headers)
        assert response.status_code == 400

    def test_update_past_deadline(self, client, auth_headers, task):
        response = client.put(
            f"/tasks/{task['id']}",
            json={"deadline": _future(days=-1)},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_update_unknown_assignee(self, client, auth_headers, task):
        response = client.put(
            f"/tasks/{task['id']}",
            json={"assigneeId": 999},
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Assignee not found"}

    def test_update_not_found(self, client, auth_headers):
        response = client.put("/tasks/999", json={"title": "Nope"}, headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    def test_update_invalid_id(self, client, auth_headers):
        response = client.put("/tasks/abc", json={"title": "Nope"}, headers=auth_headers)
        assert response.status_code == 400

    def test_update_requires_auth(self, client, task):
        response = client.put(f"/tasks/{task['id']}", json={"title": "Nope"})
        assert response.status_code == 401


class TestDeleteTask:
    """Tests for DELETE /tasks/{id}."""

    def test_delete_task(self, client, auth_headers):
        created = client.post("/tasks", json={"title": "Doomed"}, headers=auth_headers).json()

        response = client.delete(f"/tasks/{created['id']}", headers=auth_headers)
        assert response.status_code == 204
        assert response.content == b""

        assert client.get(f"/tasks/{created['id']}", headers=auth_headers).status_code == 404

    def test_delete_twice(self, client, auth_headers):
        """The second delete of the same task is a 404."""
        created = client.post("/tasks", json={"title": "Doomed"}, headers=auth_headers).json()
        client.delete(f"/tasks/{created['id']}", headers=auth_headers)

        response = client.delete(f"/tasks/{created['id']}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    def test_delete_invalid_id(self, client, auth_headers):
        response = client.delete("/tasks/invalid", headers=auth_headers)
        assert response.status_code == 400


class TestListTasks:
    """Tests for GET /tasks."""

    def _create_many(self, client, auth_headers, count):
        for index in range(count):
            response = client.post(
                "/tasks",
                json={"title": f"Task {index}"},
                headers=auth_headers,
            )
            assert response.status_code == 201

    def test_list_empty(self, client, auth_headers):
        response = client.get("/tasks", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_list_without_paging_returns_everything(self, client, auth_headers):
        self._create_many(client, auth_headers, 25)

        response = client.get("/tasks", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert isinstance(data, list)
        assert len(data) == 25

    def test_list_newest_first(self, client, auth_headers):
        self._create_many(client, auth_headers, 3)

        titles = [task["title"] for task in client.get("/tasks", headers=auth_headers).json()]
        assert titles == ["Task 2", "Task 1", "Task 0"]

    def test_first_page(self, client, auth_headers):
        self._create_many(client, auth_headers, 25)

        response = client.get("/tasks?page=1&limit=10", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 10
        assert data["pagination"] == {
            "total": 25,
            "page": 1,
            "limit": 10,
            "totalPages": 3,
            "hasNext": True,
            "hasPrev": False,
        }

    def test_last_page(self, client, auth_headers):
        self._create_many(client, auth_headers, 25)

        data = client.get("/tasks?page=3&limit=10", headers=auth_headers).json()
        assert len(data["items"]) == 5
        assert data["pagination"]["hasNext"] is False
        assert data["pagination"]["hasPrev"] is True

    def test_page_past_end_is_empty(self, client, auth_headers):
        self._create_many(client, auth_headers, 3)

        data = client.get("/tasks?page=5&limit=10", headers=auth_headers).json()
        assert data["items"] == []
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["hasNext"] is False

    def test_limit_alone_selects_envelope(self, client, auth_headers):
        self._create_many(client, auth_headers, 3)

        data = client.get("/tasks?limit=2", headers=auth_headers).json()
        assert len(data["items"]) == 2
        assert data["pagination"]["page"] == 1
        assert data["pagination"]["totalPages"] == 2

    def test_empty_paged_listing(self, client, auth_headers):
        data = client.get("/tasks?page=1", headers=auth_headers).json()
        assert data["items"] == []
        assert data["pagination"]["total"] == 0
        assert data["pagination"]["totalPages"] == 0
        assert data["pagination"]["hasNext"] is False

    @pytest.mark.parametrize(
        "query",
        [
            "limit=101",
            "limit=0",
            "page=0",
            "page=abc",
            "status=invalid",
            "priority=invalid",
            "createdFrom=invalid-date",
            "page=100000000000000000000000&limit=10",
        ],
    )
    def test_invalid_query(self, client, auth_headers, query):
        response = client.get(f"/tasks?{query}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_filters_are_conjunctive(self, client, auth_headers):
        for payload in (
            {"title": "A", "status": "todo", "priority": "high"},
            {"title": "B", "status": "todo", "priority": "low"},
            {"title": "C", "status": "done", "priority": "high"},
        ):
            client.post("/tasks", json=payload, headers=auth_headers)

        data = client.get("/tasks?status=todo&priority=high", headers=auth_headers).json()
        assert [task["title"] for task in data] == ["A"]

        by_status = client.get("/tasks?status=todo", headers=auth_headers).json()
        assert {task["title"] for task in by_status} == {"A", "B"}

    def test_created_range_filter(self, client, auth_headers, task_repository):
        old = client.post("/tasks", json={"title": "Old"}, headers=auth_headers).json()
        client.post("/tasks", json={"title": "New"}, headers=auth_headers)

        asyncio.run(task_repository.update(
            old["id"], {"created_at": datetime(2024, 1, 1, tzinfo=timezone.utc)}
        ))

        data = client.get(
            "/tasks?createdFrom=2023-12-31&createdTo=2024-01-02",
            headers=auth_headers,
        ).json()
        assert [task["title"] for task in data] == ["Old"]

    def test_list_includes_assignee(self, client, auth_headers, second_user):
        client.post(
            "/tasks",
            json={"title": "Assigned", "assigneeId": second_user["id"]},
            headers=auth_headers,
        )
        data = client.get("/tasks", headers=auth_headers).json()
        assert data[0]["assignee"]["firstname"] == "Second"

    def test_list_requires_auth(self, client):
        response = client.get("/tasks")
        assert response.status_code == 401


class TestInternalErrors:
    """Unexpected failures surface as a generic 500."""

    def test_internal_error_is_masked(self, client, auth_headers):
        app.dependency_overrides[get_task_repository] = lambda: ExplodingTaskRepository()
        safe_client = TestClient(app, raise_server_exceptions=False)

        response = safe_client.get("/tasks", headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "mongodb" not in response.text
