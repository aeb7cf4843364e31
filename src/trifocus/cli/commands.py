# src/trifocus/cli/commands.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from datetime import date

from ..core.state import AppState
from ..errors import ValidationError
from ..tasks.prioritization import is_overdue, order
from ..tasks.task_models import Effort, JobContext, Priority, Task, TaskDraft

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering / lookup helpers ----


def _view_label(view: JobContext | None) -> str:
    return "Dashboard (all jobs)" if view is None else view.value


def format_task(n: int, task: Task, today: date | None = None) -> str:
    box = "[x]" if task.completed else "[ ]"
    flag = " (!) OVERDUE" if is_overdue(task, today or date.today()) else ""
    return (
        f"{n:>2}. {box}{flag} {task.title} | {task.job.value} | due {task.deadline.isoformat()} "
        f"| {task.priority.value}/{task.effort.value}"
    )


def _parse_view(raw: str) -> JobContext | None:
    if raw.strip().lower() in ("all", "dashboard", "*"):
        return None
    return JobContext.parse(raw)


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """`ref` is a 1-based position in the last listing, or a task id (unique prefix accepted)."""
    if ref.isdecimal():
        idx = int(ref) - 1
        if 0 <= idx < len(state.last_listing):
            return state.task_store.get(state.last_listing[idx].id)
        return None

    exact = state.task_store.get(ref)
    if exact is not None:
        return exact
    matches = [t for t in state.task_store.tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def render_listing(state: AppState) -> str:
    tasks = order(state.task_store.tasks, state.view)
    today = date.today()
    state.last_listing = tasks
    header = f"{_view_label(state.view)} - {state.task_store.pending_count()} pending"
    if not tasks:
        return f"{header}\n  (empty list - time to rest or plan)"
    return "\n".join([header, *(format_task(i, t, today) for i, t in enumerate(tasks, start=1))])


# ---- commands ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /list        -> current view
    /list <job>  -> switch view and list
    /list all    -> dashboard
    """
    if args:
        try:
            state.view = _parse_view(" ".join(args))
        except ValueError as e:
            return str(e)
    return render_listing(state)


def cmd_view(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return f"Current view: {_view_label(state.view)}. Use /view <job|all>."
    try:
        state.view = _parse_view(" ".join(args))
    except ValueError as e:
        return str(e)
    return f"View set to {_view_label(state.view)}."


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title> | <job> | <YYYY-MM-DD> | <priority> | <effort>

    job defaults to the current view (if one is selected), deadline to today,
    priority and effort to medium.
    """
    usage = "Usage: /add <title> | <job> | <YYYY-MM-DD> | <high|medium|low> | <easy|medium|hard>"
    fields = [f.strip() for f in " ".join(args).split("|")]
    if not fields[0] or len(fields) > 5:
        return usage
    fields += [""] * (5 - len(fields))
    title, job_raw, deadline_raw, priority_raw, effort_raw = fields

    try:
        if job_raw:
            job = JobContext.parse(job_raw)
        elif state.view is not None:
            job = state.view
        else:
            return "Which job? " + usage
        deadline = date.fromisoformat(deadline_raw) if deadline_raw else date.today()
        priority = Priority.parse(priority_raw) if priority_raw else Priority.MEDIUM
        effort = Effort.parse(effort_raw) if effort_raw else Effort.MEDIUM
    except ValueError as e:
        return f"{e}\n{usage}"

    draft = TaskDraft(title=title, job=job, deadline=deadline, priority=priority, effort=effort)
    try:
        tasks = state.task_store.add(draft)
    except ValidationError as e:
        return f"Task rejected: {e}"

    added = tasks[-1]
    return f"Added: {added.title} ({added.job.value}, due {added.deadline.isoformat()})."


def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /done <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}. Use /list first."
    state.task_store.toggle_completed(task.id)
    return f"{'Reopened' if task.completed else 'Completed'}: {task.title}"


def cmd_delete(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /del <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}. Use /list first."
    state.task_store.delete(task.id)
    state.last_listing = [t for t in state.last_listing if t.id != task.id]
    return f"Deleted: {task.title}"


def cmd_plan(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.last_advice = None
    if emit:
        with contextlib.suppress(Exception):
            emit("[COACH] Building today's plan...")
    advice = state.advisor.get_prioritization_advice(state.task_store.tasks)
    state.last_advice = advice
    logger.debug("Advice status=%s", advice.status)
    return advice.text


def cmd_split(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /split <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}. Use /list first."
    if task.completed:
        return f"'{task.title}' is already completed; reopen it with /done to split it."
    if emit:
        with contextlib.suppress(Exception):
            emit(f"[COACH] Splitting '{task.title}'...")
    breakdown = state.advisor.breakdown_task(task.title, task.job)
    lines = breakdown.display_lines()
    if not breakdown.ok:
        return lines[0] if lines else "No steps."
    return "\n".join([f"Steps for {task.title}:", *(f"  - {s}" for s in lines)])


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    settings = state.settings
    advisory = (
        f"ON (model {getattr(settings, 'model', '?')})" if state.advisor.configured else "OFF (no API key)"
    )
    store = state.task_store
    last_err = store.last_persistence_error
    return (
        "Status:\n"
        f"  View: {_view_label(state.view)}\n"
        f"  Tasks: {len(store.tasks)} total, {store.pending_count()} pending\n"
        f"  Storage: {getattr(settings, 'storage_backend', '?')}"
        f"{' (last write FAILED)' if last_err else ''}\n"
        f"  Advisory: {advisory}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks in priority order: /list [job|all].", aliases=["ls"])
registry.register("view", cmd_view, help_text="Switch view: /view <SomosUm|Vibe Teen|IPE|all>.")
registry.register(
    "add", cmd_add, help_text="Add a task: /add title | job | YYYY-MM-DD | priority | effort."
)
registry.register("done", cmd_done, help_text="Toggle completed: /done <n|id>.", aliases=["toggle"])
registry.register("del", cmd_delete, help_text="Delete a task: /del <n|id>.", aliases=["rm"])
registry.register("plan", cmd_plan, help_text="Ask the coach for today's plan of attack.")
registry.register("split", cmd_split, help_text="Break a task into 3-5 steps: /split <n|id>.")
registry.register("status", cmd_status, help_text="Show view, counts, storage and advisory status.")
