# tests/test_task_storage.py

from __future__ import annotations

from datetime import date
from pathlib import Path

from trifocus.tasks.task_models import Effort, JobContext, Priority, TaskDraft
from trifocus.tasks.task_storage import JsonFileStorage, SqliteRecordStorage
from trifocus.tasks.task_store import TaskStore


def test_json_storage_missing_file_reads_none(tmp_path: Path) -> None:
    assert JsonFileStorage(tmp_path / "nope" / "tasks.json").read() is None


def test_json_storage_overwrites_wholesale(tmp_path: Path) -> None:
    path = tmp_path / "data" / "tasks.json"
    storage = JsonFileStorage(path)

    storage.write('[{"id": "a"}]')
    storage.write("[]")

    assert storage.read() == "[]"
    assert path.exists()
    assert not list(path.parent.glob("*.tmp"))


def test_sqlite_storage_single_keyed_record(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    storage = SqliteRecordStorage(db)
    assert storage.read() is None

    storage.write("[1]")
    storage.write("[2]")
    assert storage.read() == "[2]"

    # A second handle on the same file sees the same record; another key is independent.
    assert SqliteRecordStorage(db).read() == "[2]"
    assert SqliteRecordStorage(db, key="other").read() is None


def test_task_store_round_trip_through_sqlite(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    store = TaskStore(SqliteRecordStorage(db))
    store.load()
    store.add(
        TaskDraft(
            title="Prepare class on Psalms",
            job=JobContext.IPE,
            deadline=date(2025, 3, 10),
            priority=Priority.HIGH,
            effort=Effort.MEDIUM,
        )
    )
    store.add(
        TaskDraft(
            title="Saturday service slides",
            job=JobContext.VIBE_TEEN,
            deadline=date(2025, 3, 8),
            priority=Priority.MEDIUM,
            effort=Effort.EASY,
        )
    )
    store.toggle_completed(store.tasks[0].id)

    reopened = TaskStore(SqliteRecordStorage(db))
    assert reopened.load() == store.tasks


def test_task_store_round_trip_through_json_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore(JsonFileStorage(path))
    store.add(
        TaskDraft(
            title="Edit gratitude video",
            job=JobContext.SOMOSUM,
            deadline=date(2025, 1, 1),
            priority=Priority.LOW,
            effort=Effort.HARD,
            description="cut to 60s",
        )
    )
    assert TaskStore(JsonFileStorage(path)).load() == store.tasks


def test_corrupt_file_degrades_to_empty(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("[{ this is not json", "utf-8")
    assert TaskStore(JsonFileStorage(path)).load() == []
