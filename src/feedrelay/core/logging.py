"""Logging setup.

Modules log through ``logging.getLogger(__name__)``; this module only wires
handlers at process start (CLI entry points call :func:`configure_logging`).

Example:
    >>> import logging
    >>> from feedrelay.core.logging import JsonFormatter
    >>> record = logging.LogRecord("feedrelay", logging.INFO, "", 0, "hello", None, None)
    >>> '"message": "hello"' in JsonFormatter().format(record)
    True
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from rich.logging import RichHandler

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """Format records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: str | int = "INFO", fmt: str = "console") -> None:
    """Install a root handler for the given level and format.

    Args:
        level: Logging level name or number.
        fmt: ``"console"`` for rich output, ``"json"`` for JSON lines.

    Raises:
        ValueError: If fmt is not a known format.
    """
    if fmt == "console":
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    elif fmt == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    else:
        raise ValueError(f"Unknown log format: {fmt!r}")

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
