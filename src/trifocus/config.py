# src/trifocus/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time: the advisory credential is optional and
  its absence is checked before any call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TRIFOCUS"

STORAGE_BACKENDS = ("sqlite", "json")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data ----
    data_dir: Path
    storage_backend: str
    tasks_db_path: Path
    tasks_json_path: Path

    # ---- Advisory service (OpenAI-compatible) ----
    api_key: str | None
    base_url: str
    model: str
    extra_headers: dict[str, str]
    connect_timeout: float
    read_timeout: float

    # ---- Advisory behaviour ----
    advice_language: str
    breakdown_max_steps: int

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "trifocus").strip() or "trifocus"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/trifocus"))
        storage_backend = _env(_k("STORAGE"), "sqlite").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "sqlite"
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        tasks_json_path = _env_path(_k("TASKS_JSON_PATH"), data_dir / "tasks.json")

        api_key = _first_env(_k("API_KEY"), "OPENROUTER_API_KEY", default=None)
        base_url = _env(_k("BASE_URL"), "https://openrouter.ai/api/v1").strip()
        model = _env(_k("MODEL"), "google/gemini-2.5-flash").strip() or "google/gemini-2.5-flash"

        extra_headers = {
            "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
            "X-Title": _env(_k("APP_TITLE"), app_name),
        }

        connect_timeout = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("READ_TIMEOUT_SECONDS"), 30.0)

        advice_language = _env(_k("ADVICE_LANGUAGE"), "Brazilian Portuguese").strip() or "Brazilian Portuguese"
        breakdown_max_steps = max(1, _env_int(_k("BREAKDOWN_MAX_STEPS"), 5))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_backend=storage_backend,
            tasks_db_path=tasks_db_path,
            tasks_json_path=tasks_json_path,
            api_key=api_key,
            base_url=base_url,
            model=model,
            extra_headers=extra_headers,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            advice_language=advice_language,
            breakdown_max_steps=breakdown_max_steps,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env (never overriding the real environment) and build Settings once."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
