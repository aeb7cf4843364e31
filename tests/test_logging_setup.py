# tests/test_logging_setup.py

from __future__ import annotations

import logging
import warnings
from pathlib import Path

import pytest

from trifocus.errors import PersistenceWarning
from trifocus.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_app_logs_and_drops_library_noise() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("trifocus.tasks.task_store", logging.DEBUG))
    assert f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("httpx", logging.WARNING))
    assert f.filter(_record("openai", logging.ERROR))


def test_setup_logging_writes_file_and_captures_warnings(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

    logging.getLogger("trifocus.test").info("hello file")
    with warnings.catch_warnings():
        warnings.simplefilter("always")
        warnings.warn("storage down", PersistenceWarning)

    for h in logging.getLogger().handlers:
        h.flush()

    text = (tmp_path / "logs" / "trifocus.log").read_text("utf-8")
    assert "hello file" in text
    assert "storage down" in text
    assert logging.getLogger("httpx").level == logging.WARNING
