"""Event hooks and logging setup for sync runs.

Core functions accept an `EventRecorder` and work identically with the
no-op `NullEventRecorder`.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Protocol

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class EventRecorder(Protocol):
    """Side channel that receives named events with structured context."""

    def record(self, level: int, event: str, **context: Any) -> None: ...


class NullEventRecorder:
    """Recorder that drops every event."""

    def record(self, level: int, event: str, **context: Any) -> None:
        return None


class LoggingEventRecorder:
    """Recorder that forwards events to a standard library logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("catalog_sync")

    def record(self, level: int, event: str, **context: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        if context:
            payload = json.dumps(context, ensure_ascii=False, sort_keys=True, default=str)
            self.logger.log(level, "%s %s", event, payload)
        else:
            self.logger.log(level, "%s", event)


NULL_RECORDER = NullEventRecorder()


def configure_logging(
    level: str | int = "INFO",
    log_file: Path | None = None,
    *,
    retention_days: int | None = None,
) -> logging.Logger:
    """Configure the package logger with a stderr handler and optional log file.

    With a log file and `retention_days`, stale `*.log` files next to it are
    removed first. The package logger does not propagate to the root logger.
    """

    logger = logging.getLogger("catalog_sync")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if retention_days is not None:
            cleanup_old_logs(log_file.parent, retention_days)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def cleanup_old_logs(directory: Path, max_age_days: int, *, now: float | None = None) -> list[Path]:
    """Delete `*.log` files older than `max_age_days` and return what was removed."""

    if not directory.is_dir():
        return []
    threshold = (time.time() if now is None else now) - max_age_days * 86400
    removed: list[Path] = []
    for path in sorted(directory.glob("*.log")):
        if path.is_file() and path.stat().st_mtime < threshold:
            path.unlink()
            removed.append(path)
    return removed
