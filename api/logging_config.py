"""Logging setup for the storefront API.

Console output for development, one JSON object per line for production.
Every record carries the request correlation id when there is one.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from api.middleware import get_correlation_id


class CorrelationIdFilter(logging.Filter):
    """Stamp records with the current request's correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlationId": getattr(record, "correlation_id", "-"),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s [%(correlation_id)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", fmt: str = "console") -> logging.Handler:
    """Install a single stdout handler on the root logger.

    Replaces any handler previously installed by this function, so calling
    it twice does not duplicate output.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.set_name("storefront")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "storefront":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
