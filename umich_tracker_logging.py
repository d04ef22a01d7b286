"""
umich_tracker_logging.py

Console logging for the course tracker job. One handler on the root logger,
set up once per process however many times setup_logging() is called.
"""

from __future__ import annotations

import logging

from umich_tracker_config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | int = LOG_LEVEL) -> None:
    """Configure console logging for a snapshot run (idempotent)."""
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if getattr(root, "_course_tracker_logger_ready", False):
        root.setLevel(level)
        return

    root.setLevel(level)
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root.handlers.clear()
    root.addHandler(console)
    # urllib3 logs every pooled connection at DEBUG; 25 workers make that noisy.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    root._course_tracker_logger_ready = True  # type: ignore[attr-defined]
