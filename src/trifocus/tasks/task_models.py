# src/trifocus/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any


def _norm(raw: str) -> str:
    return " ".join(str(raw).strip().lower().replace("_", " ").split())


class JobContext(StrEnum):
    """
    The three employment contexts a task belongs to.

    Values are the display names and are what gets persisted.
    """

    SOMOSUM = "SomosUm"
    VIBE_TEEN = "Vibe Teen"
    IPE = "IPE"

    @classmethod
    def parse(cls, raw: str) -> JobContext:
        key = _norm(raw)
        for member in cls:
            if key in (_norm(member.value), _norm(member.name)):
                return member
        alias = _JOB_ALIASES.get(key)
        if alias is None:
            raise ValueError(f"unknown job context: {raw!r}")
        return alias


_JOB_ALIASES: dict[str, JobContext] = {
    "somos um": JobContext.SOMOSUM,
    "vibe": JobContext.VIBE_TEEN,
    "vibeteen": JobContext.VIBE_TEEN,
}


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: str) -> Priority:
        key = _norm(raw)
        try:
            return cls(key)
        except ValueError:
            pass
        alias = _PRIORITY_ALIASES.get(key)
        if alias is None:
            raise ValueError(f"unknown priority: {raw!r}")
        return alias


class Effort(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, raw: str) -> Effort:
        key = _norm(raw)
        try:
            return cls(key)
        except ValueError:
            pass
        alias = _EFFORT_ALIASES.get(key)
        if alias is None:
            raise ValueError(f"unknown effort: {raw!r}")
        return alias


# Short forms plus the Portuguese labels the app was first used with.
_PRIORITY_ALIASES: dict[str, Priority] = {
    "h": Priority.HIGH,
    "m": Priority.MEDIUM,
    "l": Priority.LOW,
    "alta": Priority.HIGH,
    "média": Priority.MEDIUM,
    "media": Priority.MEDIUM,
    "baixa": Priority.LOW,
}

_EFFORT_ALIASES: dict[str, Effort] = {
    "e": Effort.EASY,
    "m": Effort.MEDIUM,
    "h": Effort.HARD,
    "fácil": Effort.EASY,
    "facil": Effort.EASY,
    "médio": Effort.MEDIUM,
    "medio": Effort.MEDIUM,
    "difícil": Effort.HARD,
    "dificil": Effort.HARD,
}


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """Everything the caller supplies when adding a task (id/completed/created_at are assigned)."""

    title: str
    job: JobContext
    deadline: date
    priority: Priority
    effort: Effort
    description: str = ""


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    job: JobContext
    deadline: date
    priority: Priority
    effort: Effort
    completed: bool
    created_at: float

    description: str = ""


def task_to_record(task: Task) -> dict[str, Any]:
    """JSON-friendly dict; enum fields are stored by value, deadline as YYYY-MM-DD."""
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "job": task.job.value,
        "deadline": task.deadline.isoformat(),
        "priority": task.priority.value,
        "effort": task.effort.value,
        "completed": task.completed,
        "created_at": task.created_at,
    }


def task_from_record(rec: Any) -> Task:
    """
    Strict inverse of task_to_record.

    Raises ValueError/TypeError/KeyError on anything that is not a valid task record;
    callers decide whether to skip or abort.
    """
    if not isinstance(rec, dict):
        raise TypeError(f"task record must be an object, got {type(rec).__name__}")

    task_id = rec["id"]
    title = rec["title"]
    if not isinstance(task_id, str) or not task_id:
        raise ValueError("task id must be a non-empty string")
    if not isinstance(title, str) or not title.strip():
        raise ValueError("task title must be a non-empty string")

    completed = rec.get("completed", False)
    if not isinstance(completed, bool):
        raise TypeError("completed must be a boolean")

    created_at = rec.get("created_at", 0.0)
    if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
        raise TypeError("created_at must be a number")

    description = rec.get("description") or ""
    if not isinstance(description, str):
        raise TypeError("description must be a string")

    return Task(
        id=task_id,
        title=title,
        job=JobContext(rec["job"]),
        deadline=date.fromisoformat(rec["deadline"]),
        priority=Priority(rec["priority"]),
        effort=Effort(rec["effort"]),
        completed=completed,
        created_at=float(created_at),
        description=description,
    )
