# src/trifocus/advisory/advisor.py

"""
Advisory boundary.

Turns the backlog (or one task) into a prompt for the external text-generation
service and turns the answer, or the lack of one, into a tagged result that can
always be rendered. Nothing here raises on service failure and nothing here
touches the TaskStore.

Every call is a fresh single attempt: no retries, no caching. If the caller
fires overlapping requests, tracking which answer is the latest is its job.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..config import Settings
from ..core.ports import CompletionClient
from ..errors import AdvisoryUnavailable
from ..tasks.prioritization import pending
from ..tasks.task_models import JobContext, Task
from .client import OpenAICompletionClient, friendly_error_message
from .prompts import BREAKDOWN_SCHEMA, build_advice_prompt, build_breakdown_prompt

logger = logging.getLogger(__name__)

NOTHING_PENDING_MESSAGE = "You have no pending tasks! Enjoy your rest."
NOT_CONFIGURED_MESSAGE = "Advisory service is not configured (missing API key). Set TRIFOCUS_API_KEY in .env."
ADVICE_UNAVAILABLE_MESSAGE = "Could not generate advice right now. Check your connection or try again later."
BREAKDOWN_UNAVAILABLE_MESSAGE = "Could not break this task down right now."

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


class AdvisoryStatus(StrEnum):
    OK = "ok"
    NOTHING_PENDING = "nothing_pending"
    NOT_CONFIGURED = "not_configured"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class Advice:
    status: AdvisoryStatus
    text: str

    @property
    def ok(self) -> bool:
        return self.status is AdvisoryStatus.OK


@dataclass(frozen=True, slots=True)
class Breakdown:
    status: AdvisoryStatus
    steps: tuple[str, ...] = ()
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is AdvisoryStatus.OK

    def display_lines(self) -> list[str]:
        if self.steps:
            return list(self.steps)
        return [self.message] if self.message else []


def parse_steps(text: str, *, max_steps: int) -> list[str] | None:
    """
    Accept a JSON array of strings or {"steps": [...]}, optionally inside a
    markdown code fence. Returns None when the text is not that shape.
    """
    raw = _FENCE_RE.sub("", (text or "").strip())
    if not raw:
        return None
    try:
        data: Any = json.loads(raw)
    except (ValueError, RecursionError):
        return None

    if isinstance(data, dict):
        data = data.get("steps")
    if not isinstance(data, list) or not all(isinstance(s, str) for s in data):
        return None

    steps = [s.strip() for s in data if s.strip()]
    return steps[:max_steps]


class AdvisoryClient:
    def __init__(self, settings: Settings, completion_client: CompletionClient | None = None) -> None:
        self._settings = settings
        self._completion = completion_client

    @property
    def configured(self) -> bool:
        return bool((self._settings.api_key or "").strip())

    def _client(self) -> CompletionClient:
        if self._completion is None:
            self._completion = OpenAICompletionClient(self._settings)
        return self._completion

    def get_prioritization_advice(self, tasks: Iterable[Task]) -> Advice:
        if not self.configured:
            logger.info("Advice requested but no API key configured.")
            return Advice(AdvisoryStatus.NOT_CONFIGURED, NOT_CONFIGURED_MESSAGE)
        todo = pending(tasks)
        if not todo:
            return Advice(AdvisoryStatus.NOTHING_PENDING, NOTHING_PENDING_MESSAGE)

        prompt = build_advice_prompt(todo, language=self._settings.advice_language)
        try:
            text = self._client().complete(prompt)
        except AdvisoryUnavailable as e:
            logger.warning("Advice unavailable: %s", friendly_error_message(e))
            return Advice(AdvisoryStatus.UNAVAILABLE, ADVICE_UNAVAILABLE_MESSAGE)

        if not text.strip():
            return Advice(AdvisoryStatus.UNAVAILABLE, ADVICE_UNAVAILABLE_MESSAGE)
        logger.info("Advice generated for %d pending tasks.", len(todo))
        return Advice(AdvisoryStatus.OK, text)

    def breakdown_task(self, title: str, job: JobContext) -> Breakdown:
        if not self.configured:
            logger.info("Breakdown requested but no API key configured.")
            return Breakdown(AdvisoryStatus.NOT_CONFIGURED, message=NOT_CONFIGURED_MESSAGE)

        max_steps = self._settings.breakdown_max_steps
        prompt = build_breakdown_prompt(
            title, job, language=self._settings.advice_language, max_steps=max_steps
        )
        try:
            text = self._client().complete(prompt, json_schema=BREAKDOWN_SCHEMA)
        except AdvisoryUnavailable as e:
            logger.warning("Breakdown unavailable: %s", friendly_error_message(e))
            return Breakdown(AdvisoryStatus.UNAVAILABLE, message=BREAKDOWN_UNAVAILABLE_MESSAGE)

        steps = parse_steps(text, max_steps=max_steps)
        if not steps:
            logger.warning("Breakdown response was not a list of steps: %.200r", text)
            return Breakdown(AdvisoryStatus.UNAVAILABLE, message=BREAKDOWN_UNAVAILABLE_MESSAGE)
        return Breakdown(AdvisoryStatus.OK, steps=tuple(steps))

    # ---- async wrappers (blocking call runs in a worker thread) ----

    async def get_prioritization_advice_async(self, tasks: Iterable[Task]) -> Advice:
        snapshot = list(tasks)
        return await asyncio.to_thread(self.get_prioritization_advice, snapshot)

    async def breakdown_task_async(self, title: str, job: JobContext) -> Breakdown:
        return await asyncio.to_thread(self.breakdown_task, title, job)
