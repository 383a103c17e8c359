"""Centralized logger configuration.

Usage:
    from confschedule.utils.logger import get_logger
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import time

from confschedule.config import settings


def setup_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)


def elapsed_ms(started: float) -> int:
    """Milliseconds since *started*, a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - started) * 1000)


def log_action(logger: logging.Logger, message: str, *, level: int = logging.INFO, **fields) -> None:
    """Emit one wide log line: the message followed by sorted key=value fields."""
    rendered = " ".join(f"{key}={fields[key]}" for key in sorted(fields))
    logger.log(level, "%s %s", message, rendered, extra={"fields": fields})
