# src/trifocus/errors.py

"""
Error taxonomy shared by the core.

- ValidationError: a task candidate was rejected before any mutation.
- PersistenceWarning: durable storage failed; the in-memory collection stays authoritative.
- AdvisoryUnavailable: the external advisory service could not produce a usable answer.
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised by TaskStore.add when a candidate has empty or invalid fields."""


class PersistenceWarning(UserWarning):
    """Issued (never raised) when reading or writing the task collection fails."""


class AdvisoryUnavailable(RuntimeError):
    """
    Any failure of the advisory boundary: missing credential, transport error,
    non-2xx reply, empty or malformed body.

    `reason` is a short machine-friendly tag (e.g. "auth", "rate_limit", "network").
    """

    def __init__(self, message: str, *, reason: str = "unavailable") -> None:
        super().__init__(message)
        self.reason = reason
