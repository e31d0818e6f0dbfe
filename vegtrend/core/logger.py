"""
Logging for vegtrend: a single root configuration applied on first use.

Environment:
    VEGTREND_LOG_LEVEL  level name, e.g. DEBUG (INFO when unset or unknown)
    VEGTREND_LOG_FMT    ``json`` for one JSON object per line, otherwise a
                        ``logging`` format string
"""

import logging
import os
import json
from datetime import datetime, timezone

LEVEL_ENV = "VEGTREND_LOG_LEVEL"
FORMAT_ENV = "VEGTREND_LOG_FMT"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """
    Render a record as ``{"timestamp", "level", "name", "message"}``.

    The timestamp is the record's creation time in UTC, ISO-8601. A record
    logged with ``exc_info`` also carries the formatted traceback under
    ``exc_info``.
    """

    def format(self, record):
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class Logger:
    """Process-wide logging switch used by the CLI, services and analytics."""

    _configured = False

    @staticmethod
    def setup(
        level: int | None = None,
        fmt: str | None = None,
        datefmt: str = "%Y-%m-%d %H:%M:%S",
    ) -> None:
        """
        Install one stderr handler on the root logger; later calls are no-ops.

        Explicit *level* and *fmt* take precedence over the environment.
        """
        if Logger._configured:
            return
        if level is None:
            name = os.getenv(LEVEL_ENV, "INFO").upper()
            level = getattr(logging, name, logging.INFO)
        if fmt is None:
            fmt = os.getenv(FORMAT_ENV, "")

        root = logging.getLogger()
        root.handlers.clear()
        if fmt.lower() == "json":
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter(datefmt=datefmt))
            root.addHandler(handler)
            root.setLevel(level)
        else:
            logging.basicConfig(level=level, format=fmt or TEXT_FORMAT, datefmt=datefmt)
        Logger._configured = True

    @staticmethod
    def get_logger(
        name: str = "vegtrend", *, level: int | None = None, fmt: str | None = None
    ) -> logging.Logger:
        """Return ``logging.getLogger(name)``, running :meth:`setup` first."""
        Logger.setup(level=level, fmt=fmt)
        return logging.getLogger(name)
