"""Logging helpers: JSON-lines file output with an optional console echo.

Quiz components log through plain :mod:`logging` loggers and attach
structured context with ``extra=``. The ``event`` key, when present, is
lifted to the top level of each JSON line so log files can be filtered by
session event without unpacking the rest of the payload.
"""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_FILE_TAG = "_topic_quiz_file"
_CONSOLE_TAG = "_topic_quiz_console"
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields land under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        context = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        }
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event = context.pop("event", None)
        if event is not None:
            line["event"] = event
        if context:
            line["extra"] = context
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=True)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Attach a rotating JSON file handler to ``name`` and return its path.

    Safe to call repeatedly: the tagged file handler is reused while it
    points at the same file and swapped when ``log_dir`` or ``filename``
    changes. ``verbose`` drops the file threshold to DEBUG and echoes
    records to stderr.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    target = _writable_log_path(
        log_dir, filename or name.rsplit(".", 1)[-1] + ".log"
    )
    handler = _file_handler_for(logger, target, max_bytes, backup_count)
    handler.setLevel(logging.DEBUG if verbose else _level_number(level))
    _sync_console_handler(logger, enabled=verbose)
    return logger, Path(handler.baseFilename)


def _level_number(level: str) -> int:
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _file_handler_for(
    logger: logging.Logger,
    target: Path,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    for existing in list(logger.handlers):
        if not getattr(existing, _FILE_TAG, False):
            continue
        current = Path(existing.baseFilename)  # type: ignore[attr-defined]
        if current == target.absolute():
            return existing  # type: ignore[return-value]
        logger.removeHandler(existing)
        existing.close()

    try:
        handler = RotatingFileHandler(
            target,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except PermissionError:
        handler = RotatingFileHandler(
            _writable_log_path(_fallback_log_dir(), target.name),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    handler.setFormatter(JsonLogFormatter())
    setattr(handler, _FILE_TAG, True)
    logger.addHandler(handler)
    return handler


def _sync_console_handler(logger: logging.Logger, *, enabled: bool) -> None:
    echoes = [h for h in logger.handlers if getattr(h, _CONSOLE_TAG, False)]
    if not enabled:
        for handler in echoes:
            logger.removeHandler(handler)
            handler.close()
        return
    if echoes:
        return
    echo = logging.StreamHandler(stream=sys.stderr)
    echo.setLevel(logging.DEBUG)
    echo.setFormatter(
        logging.Formatter("%(levelname)s %(name)s: %(message)s")
    )
    setattr(echo, _CONSOLE_TAG, True)
    logger.addHandler(echo)


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Enum):
        return _jsonable(value.value)
    return repr(value)


def _writable_log_path(log_dir: Path, filename: str) -> Path:
    """Return ``log_dir / filename``, or the temp fallback if not writable."""

    for directory in (log_dir, _fallback_log_dir()):
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / filename
            path.touch(exist_ok=True)
            return path
        except PermissionError:
            continue
    raise PermissionError(f"No writable log directory for {filename}")


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "topic-quiz-logs"
