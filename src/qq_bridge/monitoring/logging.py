"""Logging setup for the QQ bridge: plain text or one JSON object per line."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Used when structured logging is off
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Every line carries ``service`` when one is configured, and ``task`` with
    the asyncio task name when the record was emitted inside a task, so the
    lines of concurrently handled QQ events can be told apart. Context passed
    as ``extra={"extra_data": {...}}`` lands under ``"data"``.
    """

    def __init__(self, *, service: str | None = None) -> None:
        super().__init__()
        self._service = service

    def _entry(self, record: logging.LogRecord) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self._service:
            entry["service"] = self._service
        # LogRecord.taskName exists from Python 3.12
        task_name = getattr(record, "taskName", None)
        if task_name:
            entry["task"] = task_name
        return entry

    def format(self, record: logging.LogRecord) -> str:
        entry = self._entry(record)
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        extra_data = getattr(record, "extra_data", None)
        if extra_data is not None:
            entry["data"] = extra_data
        # CJK nicknames and notice texts stay readable in the log file
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(
    *,
    structured: bool = False,
    log_file: Path | None = None,
    level: int = logging.INFO,
    service: str = "qq-bridge",
) -> None:
    """Configure the root logger.

    Args:
        structured: Emit JSON lines instead of plain text.
        log_file: If provided, also write logs to this file (UTF-8).
        level: Logging level (default INFO).
        service: Name stamped on every JSON line.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicate output
    root.handlers.clear()

    formatter: logging.Formatter
    if structured:
        formatter = JSONFormatter(service=service)
    else:
        formatter = logging.Formatter(_PLAIN_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_file), encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
