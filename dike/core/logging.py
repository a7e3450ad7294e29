"""Logging setup: one stdout handler, plain text in development, JSON lines in production."""

import json
import logging
import sys
from datetime import datetime, timezone

from dike.core.config import settings

# Attributes passed via ``extra=`` that are copied into JSON log lines
STRUCTURED_FIELDS = ("request_id", "method", "path", "status", "duration_ms")

PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "slowapi")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the request fields the middleware attaches."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "env": settings.app_env,
        }
        for field in STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False)


def setup_logging() -> None:
    """Install the stdout handler on the root logger, replacing any existing ones."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if settings.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    # RequestLoggingMiddleware already writes one line per API call
    logging.getLogger("uvicorn.access").setLevel(level if settings.app_debug else logging.WARNING)
