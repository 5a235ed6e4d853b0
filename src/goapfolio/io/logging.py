"""Structured logging utilities."""

from __future__ import annotations

import json
from collections.abc import Mapping as MappingABC
from datetime import datetime, UTC
from enum import Enum
import re
import sys
from typing import Any, TextIO, cast

_LEVELS: dict[str, int] = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def _escape_control(text: str) -> str:
    """Replace terminal control characters with visible escapes."""
    return _CONTROL_CHARS.sub(lambda match: f"\\x{ord(match.group()):02x}", text)


def _normalise_log_value(value: Any) -> Any:
    """Convert structured log data into JSON friendly, escaped values."""
    if isinstance(value, Enum):
        return _normalise_log_value(value.value)
    if isinstance(value, str):
        return _escape_control(value)
    if isinstance(value, MappingABC):
        typed_mapping = cast("MappingABC[Any, Any]", value)
        return {
            str(_normalise_log_value(key)): _normalise_log_value(item)
            for key, item in typed_mapping.items()
        }
    if isinstance(value, list | tuple | set | frozenset):
        typed_items = cast("list[Any]", list(value))
        return [_normalise_log_value(item) for item in typed_items]
    return value


class StructuredLogger:
    """Simple structured logger supporting JSON lines and text output."""

    def __init__(
        self,
        *,
        name: str,
        json_mode: bool = False,
        stream: TextIO | None = None,
        level: str = "INFO",
        context: MappingABC[str, Any] | None = None,
    ) -> None:
        """Initialise the structured logger.

        ``level`` is the minimum severity that gets written; ``context`` fields
        are attached to every record.
        """
        if level.upper() not in _LEVELS:
            msg = f"Unknown log level: {level}"
            raise ValueError(msg)
        self._name = name
        self._json_mode = json_mode
        self._stream: TextIO = stream or sys.stderr
        self._level = level.upper()
        self._context: dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        """Return the logger name."""
        return self._name

    @property
    def json_mode(self) -> bool:
        """Return whether JSON mode is enabled."""
        return self._json_mode

    @property
    def level(self) -> str:
        return self._level

    def bind(self, **fields: Any) -> StructuredLogger:
        """Return a logger writing to the same stream with extra context fields."""
        return StructuredLogger(
            name=self._name,
            json_mode=self._json_mode,
            stream=self._stream,
            level=self._level,
            context={**self._context, **fields},
        )

    def is_enabled_for(self, level: str) -> bool:
        return _LEVELS[level] >= _LEVELS[self._level]

    def debug(self, message: str, **fields: Any) -> None:
        """Log a DEBUG-level message."""
        self._emit("DEBUG", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        """Log an INFO-level message."""
        self._emit("INFO", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        """Log a WARNING-level message."""
        self._emit("WARNING", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        """Log an ERROR-level message."""
        self._emit("ERROR", message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        if not self.is_enabled_for(level):
            return
        timestamp = datetime.now(UTC).isoformat()
        clean_message = _escape_control(message)
        clean_fields = {
            key: _normalise_log_value(value)
            for key, value in {**self._context, **fields}.items()
        }
        if self._json_mode:
            payload: dict[str, Any] = {
                "timestamp": timestamp,
                "level": level,
                "logger": self._name,
                "message": clean_message,
            }
            payload.update(clean_fields)
            self._stream.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
        else:
            line = f"[{timestamp}] {level:<7} {self._name}: {clean_message}"
            if clean_fields:
                extras = " ".join(
                    f"{key}={json.dumps(value, ensure_ascii=False, default=str)}"
                    for key, value in clean_fields.items()
                )
                line = f"{line} | {extras}"
            self._stream.write(line + "\n")
        self._stream.flush()


__all__ = ["StructuredLogger"]
