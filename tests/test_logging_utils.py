# tests/test_logging_utils.py

from __future__ import annotations

import contextlib
import logging

from utils.logging_utils import configure_root_logger, get_logger


@contextlib.contextmanager
def bare_root():
    """Root logger with no handlers for the duration of the block."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    root.handlers = []
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_configured_root_only_changes_level(tmp_path):
    with bare_root() as root:
        existing = logging.NullHandler()
        root.addHandler(existing)

        configure_root_logger(level=logging.DEBUG, log_to_file=True, log_dir=tmp_path)

        assert root.handlers == [existing]
        assert root.level == logging.DEBUG
    # no file handler was opened for the skipped configuration
    assert list(tmp_path.iterdir()) == []


def test_file_logging_on_fresh_root(tmp_path):
    with bare_root() as root:
        configure_root_logger(log_to_file=True, log_to_stdout=False, log_dir=tmp_path,
                              filename="run.log")

        get_logger("tests.logging").info("ladder rung saved")
        for handler in root.handlers:
            handler.flush()

    assert "ladder rung saved" in (tmp_path / "run.log").read_text(encoding="utf-8")


def test_get_logger_is_cached():
    assert get_logger("tests.cache") is get_logger("tests.cache")
    assert get_logger().name == "__main__"
