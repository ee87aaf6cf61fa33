"""
Server entry point: structured logging and the uvicorn runner.

Installs a single-line JSON log formatter on the root logger and serves
``dashboard.src.api.main:app`` on the configured host and port.

CHANGELOG:
- 2026-10-19: Tag log lines with the service name; pluggable formatter (STORY-012)
- 2026-10-16: Initial creation (STORY-012)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

import uvicorn

from dashboard.src.config import DashboardSettings

logger = logging.getLogger(__name__)


SERVICE_NAME = "isolar-dashboard"


class JsonFormatter(logging.Formatter):
    """Single-line JSON log formatter.

    Each line carries ``ts`` (UTC ISO-8601), ``level``, ``logger`` and
    ``msg``, plus ``exception`` when a traceback is attached. A
    *service* name, when given, is added to every line as ``service``.
    """

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if self.service:
            log_entry["service"] = self.service
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO", formatter: logging.Formatter | None = None) -> None:
    """Configure structured logging on the root logger.

    Replaces any existing root handlers with one handler on stderr using
    *formatter*, a service-tagged :class:`JsonFormatter` by default.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter or JsonFormatter(service=SERVICE_NAME))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def main() -> None:
    """Load settings, configure logging and run the API server."""
    settings = DashboardSettings()
    configure_logging(settings.log_level)
    logger.info("Starting dashboard API on %s:%d", settings.host, settings.port)
    uvicorn.run(
        "dashboard.src.api.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
