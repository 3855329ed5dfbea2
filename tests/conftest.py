"""Shared pytest fixtures: in-memory MongoDB, a scratch data directory and an API client."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Tuple

import mongomock
import pytest

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from credential_hub import database, storage  # noqa: E402


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch: pytest.MonkeyPatch):
    """Provide an isolated in-memory MongoDB database for each test."""
    test_db_name = "test_credential_hub"
    monkeypatch.setenv("ENABLE_MONGODB", "true")
    monkeypatch.setenv("MONGODB_DATABASE", test_db_name)

    client = mongomock.MongoClient()
    db = client[test_db_name]

    monkeypatch.setattr(database, "get_mongo_client", lambda: client)
    monkeypatch.setattr(database, "get_database", lambda: db)

    yield db

    client.drop_database(test_db_name)


@pytest.fixture(autouse=True)
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point profile, upload and verification files at a temporary directory."""
    root = tmp_path / "data"
    monkeypatch.setenv("CREDENTIAL_HUB_DATA_DIR", str(root))
    monkeypatch.setenv("PUBLIC_BASE_URL", "http://testserver:3001")
    monkeypatch.delenv("SMTP_HOST", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return root


@pytest.fixture(autouse=True)
def clear_tabs():
    yield
    for tab in list(storage.tabs.values()):
        tab.close()
    storage.tabs.clear()


class ManualScheduler:
    """Collects scheduled callbacks so tests decide when timers fire."""

    def __init__(self) -> None:
        self.pending: List[Tuple[float, Callable[[], None]]] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay, callback))

    def fire_all(self) -> None:
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def app():
    from credential_hub.main import create_app

    flask_app = create_app()
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tab_headers(client):
    """Open a tab and return the Authorization header for it."""
    response = client.post("/api/tabs", json={"clientId": "client-test-0001"})
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.get_json()['token']}"}
