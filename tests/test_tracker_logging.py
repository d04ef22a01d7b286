from __future__ import annotations

import logging

import pytest

from umich_tracker_logging import setup_logging


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    ready = getattr(root, "_course_tracker_logger_ready", None)
    if ready is not None:
        del root._course_tracker_logger_ready
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    if hasattr(root, "_course_tracker_logger_ready"):
        del root._course_tracker_logger_ready
    if ready is not None:
        root._course_tracker_logger_ready = ready


def test_setup_logging_is_idempotent(clean_root):
    setup_logging("DEBUG")
    setup_logging("WARNING")

    assert len(clean_root.handlers) == 1
    assert clean_root.level == logging.WARNING
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_unknown_level_falls_back_to_info(clean_root):
    setup_logging("CHATTY")

    assert clean_root.level == logging.INFO
