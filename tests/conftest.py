# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from trifocus.advisory.advisor import AdvisoryClient
from trifocus.core.state import AppState
from trifocus.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeCompletionClient, MemoryStorage, sequential_ids


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than reading the real environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="trifocus-test",
        log_level="INFO",
        data_dir=tmp_path,
        storage_backend="json",
        tasks_db_path=tmp_path / "tasks.sqlite3",
        tasks_json_path=tmp_path / "tasks.json",
        api_key="test-key",
        base_url="https://example.invalid/v1",
        model="test/model",
        extra_headers={"X-Title": "trifocus-test"},
        connect_timeout=1.0,
        read_timeout=2.0,
        advice_language="English",
        breakdown_max_steps=5,
    )


@pytest.fixture()
def unconfigured_settings(settings: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(**{**vars(settings), "api_key": None})


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def store(storage: MemoryStorage) -> TaskStore:
    return TaskStore(storage, id_generator=sequential_ids(), clock=FakeClock())


@pytest.fixture()
def llm() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, llm: FakeCompletionClient) -> AppState:
    """AppState wired with the in-memory storage and a fake completion client."""
    return AppState(
        settings=settings,
        task_store=store,
        advisor=AdvisoryClient(settings, completion_client=llm),
    )
