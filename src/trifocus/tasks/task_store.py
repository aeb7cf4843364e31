# src/trifocus/tasks/task_store.py

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
import warnings
from dataclasses import replace
from datetime import date, datetime

from ..core.ports import Clock, IdGenerator, TaskStorage
from ..errors import PersistenceWarning, ValidationError
from .task_models import Effort, JobContext, Priority, Task, TaskDraft, task_from_record, task_to_record

logger = logging.getLogger(__name__)


def new_task_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """
    Authoritative in-memory task collection for one session, mirrored to storage.

    Persistence is write-through: every mutation that changes the collection
    serializes the whole collection and hands it to the storage port before
    returning. A failed write is reported as PersistenceWarning and never rolls
    the mutation back.

    Thread-safety:
    - mutations and load() are serialized by an internal lock
    """

    def __init__(
        self,
        storage: TaskStorage,
        *,
        id_generator: IdGenerator = new_task_id,
        clock: Clock = time.time,
    ) -> None:
        self._storage = storage
        self._new_id = id_generator
        self._clock = clock
        self._lock = threading.RLock()
        self._tasks: list[Task] = []
        self._issued_ids: set[str] = set()
        self.last_persistence_error: Exception | None = None

    # ---- queries ----

    @property
    def tasks(self) -> list[Task]:
        """Snapshot of the collection in insertion order."""
        with self._lock:
            return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            for t in self._tasks:
                if t.id == task_id:
                    return t
            return None

    def pending_count(self) -> int:
        with self._lock:
            return sum(1 for t in self._tasks if not t.completed)

    # ---- lifecycle ----

    def load(self) -> list[Task]:
        """
        Replace the in-memory collection with the persisted one.

        Never raises: a missing record, unreadable storage or a payload that is
        not a JSON array all yield an empty collection. Individual invalid
        records are skipped; the first occurrence of a duplicate id wins.
        """
        with self._lock:
            self._tasks = self._read_persisted()
            self._issued_ids.update(t.id for t in self._tasks)
            logger.info("TaskStore loaded total=%d pending=%d", len(self._tasks), self.pending_count())
            return list(self._tasks)

    def add(self, draft: TaskDraft) -> list[Task]:
        task = self._validate(draft)
        with self._lock:
            task_id = self._new_id()
            while task_id in self._issued_ids:
                logger.warning("Id generator returned a used id=%s; drawing again", task_id)
                task_id = self._new_id()
            self._issued_ids.add(task_id)
            task = replace(task, id=task_id, created_at=float(self._clock()))
            self._tasks.append(task)
            logger.debug("Task added id=%s job=%s deadline=%s", task.id, task.job, task.deadline)
            self._persist()
            return list(self._tasks)

    def toggle_completed(self, task_id: str) -> list[Task]:
        with self._lock:
            for i, t in enumerate(self._tasks):
                if t.id == task_id:
                    self._tasks[i] = replace(t, completed=not t.completed)
                    logger.debug("Task toggled id=%s completed=%s", task_id, not t.completed)
                    self._persist()
                    break
            else:
                logger.debug("toggle_completed: no task id=%s", task_id)
            return list(self._tasks)

    def delete(self, task_id: str) -> list[Task]:
        with self._lock:
            kept = [t for t in self._tasks if t.id != task_id]
            if len(kept) != len(self._tasks):
                self._tasks = kept
                logger.debug("Task deleted id=%s", task_id)
                self._persist()
            else:
                logger.debug("delete: no task id=%s", task_id)
            return list(self._tasks)

    # ---- helpers ----

    @staticmethod
    def _validate(draft: TaskDraft) -> Task:
        title = draft.title.strip() if isinstance(draft.title, str) else ""
        if not title:
            raise ValidationError("title is required")
        if not isinstance(draft.job, JobContext):
            raise ValidationError(f"job must be one of {[j.value for j in JobContext]}")
        if not isinstance(draft.priority, Priority):
            raise ValidationError(f"priority must be one of {[p.value for p in Priority]}")
        if not isinstance(draft.effort, Effort):
            raise ValidationError(f"effort must be one of {[e.value for e in Effort]}")
        if not isinstance(draft.deadline, date) or isinstance(draft.deadline, datetime):
            raise ValidationError("deadline must be a calendar date")
        description = draft.description.strip() if isinstance(draft.description, str) else ""

        return Task(
            id="",
            title=title,
            job=draft.job,
            deadline=draft.deadline,
            priority=draft.priority,
            effort=draft.effort,
            completed=False,
            created_at=0.0,
            description=description,
        )

    def _read_persisted(self) -> list[Task]:
        try:
            raw = self._storage.read()
        except Exception as e:
            self._warn(f"Failed to read task collection: {e}", e)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("Persisted task collection is not valid JSON; starting empty.")
            return []

        if not isinstance(data, list):
            logger.warning("Persisted task collection is not a JSON array; starting empty.")
            return []

        out: list[Task] = []
        seen: set[str] = set()
        for i, rec in enumerate(data):
            try:
                task = task_from_record(rec)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping invalid task record #%d: %s", i, e)
                continue
            if task.id in seen:
                logger.warning("Skipping duplicate task id=%s", task.id)
                continue
            seen.add(task.id)
            out.append(task)
        return out

    def _persist(self) -> None:
        payload = json.dumps([task_to_record(t) for t in self._tasks], ensure_ascii=False)
        try:
            self._storage.write(payload)
        except Exception as e:
            self._warn(f"Failed to persist task collection: {e}", e)
            return
        self.last_persistence_error = None

    def _warn(self, message: str, err: Exception) -> None:
        self.last_persistence_error = err
        logger.debug("%s", message, exc_info=err)
        warnings.warn(message, PersistenceWarning, stacklevel=4)
