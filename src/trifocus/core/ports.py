# src/trifocus/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/advisory providers swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

IdGenerator = Callable[[], str]
# Must return a string never returned before within the collection.

Clock = Callable[[], float]
# Epoch seconds (time.time-compatible).


class TaskStorage(Protocol):
    """
    Whole-collection durable storage.

    read() returns the last written payload, or None if nothing was ever written.
    write() replaces the payload wholesale. Both may raise OSError / sqlite3.Error.
    """

    def read(self) -> str | None: ...

    def write(self, payload: str) -> None: ...


class CompletionClient(Protocol):
    """
    Single-shot text generation (OpenAI-compatible).

    If json_schema is given, the provider is asked for structured output matching it.
    Implementations raise AdvisoryUnavailable on any failure.
    """

    def complete(self, prompt: str, *, json_schema: dict[str, Any] | None = None) -> str: ...
