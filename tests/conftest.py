from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_organizer.config import Settings
from task_organizer.main import create_app
from task_organizer.store import TaskStore


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def store(data_dir: Path) -> TaskStore:
    task_store = TaskStore(data_dir)
    task_store.start()
    return task_store


@pytest.fixture
def client(data_dir: Path):
    app = create_app(Settings(data_dir=data_dir))
    with TestClient(app) as test_client:
        yield test_client
