import json
from unittest.mock import patch

from fastapi.testclient import TestClient
from starlette.concurrency import run_in_threadpool

from todo_api.dispatcher import RequestDispatcher
from todo_api.main import create_app
from todo_api.store import TaskStore


def test_startup_creates_document(client: TestClient, store: TaskStore) -> None:
    assert json.loads(store.path.read_text("utf-8")) == []


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").status_code == 200


def test_crud_flow(client: TestClient) -> None:
    response = client.post("/tasks", json={"title": "Buy milk"})
    assert response.status_code == 201
    created = response.json()["data"]
    assert created["title"] == "Buy milk"
    assert created["completed"] is False
    assert set(created) == {"id", "title", "completed", "createdAt"}

    response = client.put(f"/tasks/{created['id']}", json={"completed": True})
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {**created, "completed": True}}

    response = client.get("/tasks")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [{**created, "completed": True}]}

    response = client.delete(f"/tasks/{created['id']}")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["message"]

    assert client.get("/tasks").json()["data"] == []


def test_create_empty_title(client: TestClient) -> None:
    response = client.post("/tasks", json={"title": ""})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"]
    assert client.get("/tasks").json()["data"] == []


def test_create_with_malformed_json(client: TestClient) -> None:
    response = client.post(
        "/tasks", content=b"{title:", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_update_unknown_task(client: TestClient) -> None:
    response = client.put("/tasks/nonexistent-id", json={"completed": True})
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_update_and_delete_require_id(client: TestClient) -> None:
    assert client.put("/tasks", json={"completed": True}).status_code == 400
    assert client.delete("/tasks").status_code == 400


def test_delete_unknown_task(client: TestClient) -> None:
    response = client.delete("/tasks/missing")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Task not found", "error": "not_found"}


def test_unsupported_method(client: TestClient) -> None:
    response = client.patch("/tasks/abc", json={"completed": True})
    assert response.status_code == 405
    assert response.json()["success"] is False
    assert response.json()["error"] == "unsupported_operation"


def test_options_preflight(client: TestClient) -> None:
    response = client.options(
        "/tasks",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "PUT"},
    )
    assert response.status_code == 200
    assert "PUT" in response.headers["access-control-allow-methods"]

    assert client.options("/tasks/abc").status_code == 200


def test_unknown_path_is_enveloped(client: TestClient) -> None:
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_data_survives_new_app(client: TestClient, store: TaskStore) -> None:
    client.post("/tasks", json={"title": "one"})
    client.post("/tasks", json={"title": "two"})
    before = client.get("/tasks").json()

    with TestClient(create_app(TaskStore(store.path))) as restarted:
        assert restarted.get("/tasks").json() == before


def test_fault_outside_dispatcher_is_enveloped(store: TaskStore) -> None:
    with patch.object(RequestDispatcher, "dispatch", side_effect=RuntimeError("boom")):
        with TestClient(create_app(store), raise_server_exceptions=False) as c:
            response = c.get("/tasks")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "internal_error"
    assert "boom" in body["message"]


def test_dispatch_runs_in_threadpool(client: TestClient) -> None:
    calls = []

    async def recording_threadpool(func, *args, **kwargs):
        calls.append(func)
        return await run_in_threadpool(func, *args, **kwargs)

    with patch("todo_api.routers.tasks.run_in_threadpool", new=recording_threadpool):
        response = client.post("/tasks", json={"title": "Buy milk"})

    assert response.status_code == 201
    assert len(calls) == 1
