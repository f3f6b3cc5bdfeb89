"""Structured logging setup with JSON-lines output and redaction support."""

from __future__ import annotations

import json
import logging
import math
import sys
import threading
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import IO, TYPE_CHECKING, Final

from shapekit.constants import LOGGER_NAME
from shapekit.errors import REDACTED_VALUE, JSONValue, is_sensitive_key

if TYPE_CHECKING:
    from shapekit.config.schema import ShapekitSettings

_TEXT_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)

_ACTIVE_HANDLER_LOCK = threading.Lock()
_ACTIVE_HANDLER: logging.Handler | None = None

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger inside the ``shapekit`` namespace."""

    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def __init__(self, *, redact: bool, sensitive_keys: Sequence[str] = ()) -> None:
        super().__init__()
        self._redact = redact
        self._sensitive_keys = tuple(sensitive_keys)

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = self._redact_fields(extras)

        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    def _redact_fields(self, fields: dict[str, JSONValue]) -> JSONValue:
        if not self._redact:
            return fields
        return _redact_value(fields, key_context=None, sensitive_keys=self._sensitive_keys)


def setup_logging(
    settings: ShapekitSettings,
    *,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach one stream handler to the ``shapekit`` logger and return it.

    Parameters
    ----------
    settings:
        Effective settings; ``log_level``, ``log_format``, ``redact_values`` and
        ``sensitive_keys`` are honoured.
    stream:
        Output stream (default: ``sys.stderr``).
    """

    global _ACTIVE_HANDLER

    logger = logging.getLogger(LOGGER_NAME)
    level = _parse_log_level(settings.log_level)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    if settings.log_format == "json":
        handler.setFormatter(
            _JsonLineFormatter(
                redact=settings.redact_values,
                sensitive_keys=settings.sensitive_keys,
            )
        )
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    with _ACTIVE_HANDLER_LOCK:
        if _ACTIVE_HANDLER is not None:
            logger.removeHandler(_ACTIVE_HANDLER)
            _ACTIVE_HANDLER.close()
        logger.addHandler(handler)
        logger.setLevel(level)
        _ACTIVE_HANDLER = handler

    return logger


def shutdown_logging() -> None:
    """Remove the handler installed by ``setup_logging``."""

    global _ACTIVE_HANDLER

    with _ACTIVE_HANDLER_LOCK:
        if _ACTIVE_HANDLER is None:
            return
        logger = logging.getLogger(LOGGER_NAME)
        _ACTIVE_HANDLER.flush()
        logger.removeHandler(_ACTIVE_HANDLER)
        _ACTIVE_HANDLER.close()
        _ACTIVE_HANDLER = None
        logger.setLevel(logging.NOTSET)


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    normalized = value.strip().upper()
    level = logging.getLevelName(normalized)
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {value!r}")
    return level


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS:
            continue
        if key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    return repr(value)


def _redact_value(
    value: JSONValue,
    *,
    key_context: str | None,
    sensitive_keys: Sequence[str],
) -> JSONValue:
    if key_context is not None and is_sensitive_key(key_context, sensitive_keys):
        return REDACTED_VALUE

    if isinstance(value, list):
        return [
            _redact_value(item, key_context=None, sensitive_keys=sensitive_keys) for item in value
        ]

    if isinstance(value, dict):
        return {
            key: _redact_value(item, key_context=key, sensitive_keys=sensitive_keys)
            for key, item in value.items()
        }

    return value


__all__ = [
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
