# src/trifocus/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..advisory.advisor import Advice, AdvisoryClient
from ..tasks.task_models import JobContext, Task
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (real Settings or a test double with the same attributes).
    settings: Any

    task_store: TaskStore
    advisor: AdvisoryClient

    # Active view filter: None = dashboard (all contexts).
    view: JobContext | None = None

    # Last rendered listing, so commands can refer to tasks by 1-based position.
    last_listing: list[Task] = field(default_factory=list)

    # Ephemeral advisory output; cleared whenever a new request starts.
    last_advice: Advice | None = None

    lock: threading.Lock = field(default_factory=threading.Lock)
