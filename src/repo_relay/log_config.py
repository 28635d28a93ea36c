"""Logging configuration.

Two output modes:
- text: human-readable lines for development
- json: one JSON object per line for log aggregation

Set LOG_FORMAT=json in production.
"""

import json
import logging
import sys
from typing import Any

from repo_relay.config import settings


class JSONFormatter(logging.Formatter):
    """Formatter that renders each record as a JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
        }

        # Optional context passed through `extra=`
        for attr in ("owner", "repo", "session_id", "user_id"):
            if hasattr(record, attr):
                log_record[attr] = getattr(record, attr)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure the root logger once.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_format: "text" or "json". Defaults to settings.log_format.
    """
    root_logger = logging.getLogger()

    # Avoid adding multiple handlers
    if root_logger.handlers:
        return

    root_logger.setLevel((level or settings.log_level).upper())

    handler = logging.StreamHandler(sys.stdout)

    if (log_format or settings.log_format) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)

    # Noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
