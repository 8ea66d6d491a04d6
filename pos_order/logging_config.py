"""Logging setup. The terminal belongs to the UI, so records go to a file."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pos_order.config import LOG_LEVEL, LOG_PATH


class UtcFormatter(logging.Formatter):
    """``<utc iso timestamp> <level> <logger> <message>`` lines."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return datetime.fromtimestamp(record.created, timezone.utc).isoformat()


def setup_logging(level: str = LOG_LEVEL, log_path: str = LOG_PATH) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(UtcFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    root_logger.info("logging_initialized level=%s path=%s", level, path)
