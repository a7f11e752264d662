from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from todo_api.dispatcher import RequestDispatcher
from todo_api.main import create_app
from todo_api.store import TaskStore


@pytest.fixture()
def tasks_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "tasks.json"


@pytest.fixture()
def store(tasks_path: Path) -> TaskStore:
    """A fresh store per test, pointed at its own document under tmp_path."""
    return TaskStore(tasks_path)


@pytest.fixture()
def dispatcher(store: TaskStore) -> RequestDispatcher:
    return RequestDispatcher(store)


@pytest.fixture()
def client(store: TaskStore):
    with TestClient(create_app(store)) as c:
        yield c
