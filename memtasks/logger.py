"""Structured JSON-lines logger."""

from __future__ import annotations

import json
import sys
import threading
from datetime import datetime
from enum import IntEnum
from typing import Any, Mapping, TextIO


class Level(IntEnum):
    """Log levels, from most to least verbose."""

    TRACE = -1
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    PANIC = 5


_LEVELS_BY_NAME = {level.name.lower(): level for level in Level}


def parse_log_level(level: str) -> Level:
    """Map a level name, in any case, to a Level; unknown names mean INFO."""
    return _LEVELS_BY_NAME.get(level.lower(), Level.INFO)


class Logger:
    """Writes one JSON object per line for each message at or above its level."""

    def __init__(self, level: str | Level = "info", stream: TextIO | None = None) -> None:
        self.level = level if isinstance(level, Level) else parse_log_level(level)
        self._stream = stream
        self._lock = threading.Lock()

    def _log(self, level: Level, msg: str, fields: Mapping[str, Any] | None) -> None:
        if level < self.level:
            return
        record: dict[str, Any] = {"level": level.name.lower()}
        if fields:
            record.update(fields)
        record["time"] = datetime.now().astimezone().isoformat(timespec="seconds")
        record["message"] = msg
        line = json.dumps(record, default=str, ensure_ascii=False)
        stream = self._stream if self._stream is not None else sys.stdout
        with self._lock:
            stream.write(line + "\n")
            stream.flush()

    def trace(self, msg: str, fields: Mapping[str, Any] | None = None) -> None:
        self._log(Level.TRACE, msg, fields)

    def debug(self, msg: str, fields: Mapping[str, Any] | None = None) -> None:
        self._log(Level.DEBUG, msg, fields)

    def info(self, msg: str, fields: Mapping[str, Any] | None = None) -> None:
        self._log(Level.INFO, msg, fields)

    def error(self, msg: str, fields: Mapping[str, Any] | None = None) -> None:
        self._log(Level.ERROR, msg, fields)