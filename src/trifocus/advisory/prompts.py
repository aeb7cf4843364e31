# src/trifocus/advisory/prompts.py

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from ..tasks.task_models import JobContext, Task

JOB_DESCRIPTIONS: dict[JobContext, str] = {
    JobContext.SOMOSUM: "university ministry media: videos, social posts, writing",
    JobContext.VIBE_TEEN: "teen ministry: discipleship, Saturday services, camps",
    JobContext.IPE: "religious-education teacher: preparing and giving classes",
}

BREAKDOWN_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "steps": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["steps"],
    "additionalProperties": False,
}


def _pending_payload(tasks: Iterable[Task]) -> str:
    return json.dumps(
        [
            {
                "title": t.title,
                "job": t.job.value,
                "deadline": t.deadline.isoformat(),
                "priority": t.priority.value,
                "effort": t.effort.value,
            }
            for t in tasks
        ],
        ensure_ascii=False,
    )


def build_advice_prompt(pending: Iterable[Task], *, language: str) -> str:
    jobs = "\n".join(
        f"{i}. {job.value} ({JOB_DESCRIPTIONS[job]})." for i, job in enumerate(JobContext, start=1)
    )
    return f"""Act as a personal productivity assistant specialised in juggling several work contexts.

The user holds 3 jobs:
{jobs}

The user prioritises:
1. Imminent deadlines.
2. High priority.
3. Ease of execution (do "easy" effort first to build momentum).

Current pending tasks (JSON):
{_pending_payload(pending)}

Analyse the list and provide:
1. A short "plan of attack" for today: which task to do first and why.
2. One quick tip on switching between these contexts (e.g. creative vs teaching) based on the listed tasks.

Keep the tone encouraging, organised and direct. Answer in {language}. Use simple Markdown."""


def build_breakdown_prompt(title: str, job: JobContext, *, language: str, max_steps: int) -> str:
    low = min(3, max_steps)
    return f"""I have a complex task for my job at {job.value} ({JOB_DESCRIPTIONS[job]}): "{title}".
Break this task into {low} to {max_steps} smaller, actionable sub-tasks so I can start easily.
Each sub-task is one short sentence. Write them in {language}.
Return JSON: {{"steps": ["...", "..."]}}"""
