# src/trifocus/advisory/client.py

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..config import Settings
from ..errors import AdvisoryUnavailable

logger = logging.getLogger(__name__)


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"AuthenticationError", "PermissionDeniedError", "UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"RateLimitError", "TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return True
    return exc.__class__.__name__ in {
        "APIConnectionError",
        "APITimeoutError",
        "Timeout",
        "ConnectTimeout",
        "ReadTimeout",
        "WriteTimeout",
    }


def _is_not_found_error(exc: Exception) -> bool:
    # OpenAI-compatible SDK uses NotFoundError for HTTP 404 (unknown model)
    if isinstance(exc, openai.NotFoundError):
        return True
    return exc.__class__.__name__ in {"NotFoundError"}


def _translate_error(exc: Exception, model: str) -> AdvisoryUnavailable:
    if _is_auth_error(exc):
        return AdvisoryUnavailable("Advisory authentication failed. Check TRIFOCUS_API_KEY.", reason="auth")
    if _is_rate_limit_error(exc):
        return AdvisoryUnavailable("Advisory service is rate-limited. Try again later.", reason="rate_limit")
    if _is_connection_error(exc):
        return AdvisoryUnavailable("Advisory service network/timeout error.", reason="network")
    if _is_not_found_error(exc):
        return AdvisoryUnavailable(f"Advisory model not available: {model}", reason="model_not_found")
    if isinstance(exc, openai.APIStatusError):
        return AdvisoryUnavailable(
            f"Advisory service returned HTTP {exc.status_code}.", reason="http_error"
        )
    return AdvisoryUnavailable(f"Advisory call failed ({exc.__class__.__name__}).", reason="unavailable")


def friendly_error_message(err: Exception) -> str:
    reason = getattr(err, "reason", None)
    if reason == "not_configured":
        return "Advisory service is not configured (missing API key). Set TRIFOCUS_API_KEY in .env."
    if reason == "auth":
        return "Advisory service rejected the API key. Check TRIFOCUS_API_KEY."
    if reason == "rate_limit":
        return "Advisory service is busy (rate-limited). Try again in a moment."
    if reason == "network":
        return "Could not reach the advisory service. Check your connection and try again later."
    if reason == "model_not_found":
        return "The configured advisory model is not available. Change TRIFOCUS_MODEL."
    return str(err).strip() or "Advisory service error."


def _response_text(resp: Any) -> str:
    try:
        choice0 = resp.choices[0]
        content = getattr(choice0.message, "content", None)
    except (AttributeError, IndexError, TypeError):
        return ""
    return content.strip() if isinstance(content, str) else ""


class OpenAICompletionClient:
    """
    Single-shot chat completion against an OpenAI-compatible endpoint (OpenRouter by default).

    One attempt per call: SDK retries are disabled so a failure surfaces immediately
    and the caller can fall back.
    """

    def __init__(self, settings: Settings, *, client: OpenAI | None = None) -> None:
        api_key = (settings.api_key or "").strip()
        if not api_key:
            raise AdvisoryUnavailable(
                "Advisory API key is not set. Set TRIFOCUS_API_KEY in your .env.", reason="not_configured"
            )
        if not settings.base_url.strip():
            raise AdvisoryUnavailable(
                "Advisory base URL is not set. Set TRIFOCUS_BASE_URL in your .env.", reason="not_configured"
            )

        self._model = settings.model
        self._headers = dict(settings.extra_headers or {})
        self._client = client or OpenAI(
            base_url=settings.base_url,
            api_key=api_key,
            timeout=httpx.Timeout(
                connect=settings.connect_timeout,
                read=settings.read_timeout,
                write=10.0,
                pool=settings.connect_timeout,
            ),
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._model

    def complete(self, prompt: str, *, json_schema: dict[str, Any] | None = None) -> str:
        kwargs: dict[str, Any] = {}
        if json_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "response", "schema": json_schema, "strict": True},
            }

        logger.info("Advisory: calling model=%s structured=%s", self._model, json_schema is not None)
        t0 = time.monotonic()
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                extra_headers=self._headers or None,
                **kwargs,
            )
        except Exception as e:
            err = _translate_error(e, self._model)
            logger.info("Advisory: %s on model=%s (%s)", err.reason, self._model, e.__class__.__name__)
            raise err from e

        text = _response_text(resp)
        if not text:
            raise AdvisoryUnavailable(f"Model returned no content: {self._model}", reason="empty")

        logger.debug("Advisory: model=%s answered in %.2fs", self._model, time.monotonic() - t0)
        return text
