# src/trifocus/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/task store/advisory client),
- loads the persisted backlog.
"""

from __future__ import annotations

import logging

from ..advisory.advisor import AdvisoryClient
from ..config import get_settings
from ..core.ports import TaskStorage
from ..core.state import AppState
from ..tasks.task_storage import JsonFileStorage, SqliteRecordStorage
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_json_path.parent.mkdir(parents=True, exist_ok=True)


def build_storage(settings) -> TaskStorage:
    if settings.storage_backend == "json":
        return JsonFileStorage(settings.tasks_json_path)
    return SqliteRecordStorage(settings.tasks_db_path)


def create_initial_state(*, settings=None, storage: TaskStorage | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and storage injectable makes the app easier to test and avoids
    hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = build_storage(settings)

    task_store = TaskStore(storage)
    task_store.load()

    advisor = AdvisoryClient(settings)
    if not advisor.configured:
        logger.info("No advisory API key configured; /plan and /split will report it.")

    return AppState(settings=settings, task_store=task_store, advisor=advisor)
