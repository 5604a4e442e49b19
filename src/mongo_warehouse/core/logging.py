"""loguru setup for the CLI and a capture helper for tests.

Library modules only bind context loggers; sinks are installed by whoever
owns the process, normally ``mongo_warehouse.cli``.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Iterator, List

from loguru import logger

from mongo_warehouse.core.config import get_settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]: <12} | {message}"


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one stderr sink.

    ``level`` falls back to ``Settings.log_level`` (``MONGO_WAREHOUSE_LOG_LEVEL``).
    """

    level = level or get_settings().log_level
    logger.remove()
    logger.configure(extra={"module": "-"})
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, enqueue=True)


def get_logger(module: str, **extra: Any):
    """Return a logger bound to ``module`` so records show where they came from."""

    return logger.bind(module=module, **extra)


@contextmanager
def capture_logs(level: str = "DEBUG") -> Iterator[List[str]]:
    """Collect formatted records emitted inside the block as ``LEVEL | message``."""

    records: List[str] = []
    sink_id = logger.add(records.append, level=level, format="{level} | {message}")
    try:
        yield records
    finally:
        logger.remove(sink_id)
