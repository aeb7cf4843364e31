# src/trifocus/tasks/prioritization.py

"""
Backlog ordering.

Four keys, first decisive key wins:
1. incomplete before completed
2. earlier deadline first (calendar order)
3. higher priority weight first
4. lower effort weight first (quick wins before hard items of equal urgency)

sorted() is stable, so tasks tied on all four keys keep their input order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from types import MappingProxyType

from .task_models import Effort, JobContext, Priority, Task

PRIORITY_WEIGHTS: Mapping[Priority, int] = MappingProxyType(
    {
        Priority.HIGH: 3,
        Priority.MEDIUM: 2,
        Priority.LOW: 1,
    }
)

EFFORT_WEIGHTS: Mapping[Effort, int] = MappingProxyType(
    {
        Effort.EASY: 1,
        Effort.MEDIUM: 2,
        Effort.HARD: 3,
    }
)


def _check_view(view: JobContext | None) -> JobContext | None:
    if view is None or isinstance(view, JobContext):
        return view
    raise ValueError(f"view must be None (all contexts) or a JobContext, got {view!r}")


def filter_view(tasks: Iterable[Task], view: JobContext | None = None) -> list[Task]:
    """Tasks visible under `view` (None = dashboard), in input order."""
    view = _check_view(view)
    if view is None:
        return list(tasks)
    return [t for t in tasks if t.job == view]


def pending(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if not t.completed]


def is_overdue(task: Task, today: date) -> bool:
    """An open task whose deadline is strictly before `today`."""
    return not task.completed and task.deadline < today


def order(
    tasks: Iterable[Task],
    view: JobContext | None = None,
    *,
    priority_weights: Mapping[Priority, int] = PRIORITY_WEIGHTS,
    effort_weights: Mapping[Effort, int] = EFFORT_WEIGHTS,
) -> list[Task]:
    """
    Filter by `view`, then sort. Pure: the input is never mutated and equal
    inputs always produce equal outputs.
    """
    visible = filter_view(tasks, view)

    def sort_key(t: Task) -> tuple[bool, int, int, int]:
        return (
            t.completed,
            t.deadline.toordinal(),
            -priority_weights[t.priority],
            effort_weights[t.effort],
        )

    return sorted(visible, key=sort_key)
