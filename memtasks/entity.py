"""The default task: a job that runs for a few minutes and then finishes."""

from __future__ import annotations

import json
import os
import random
import threading
import time
import uuid
from concurrent.futures import CancelledError
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from .logger import Logger


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    CANCELED = "canceled"
    FINISHED = "finished"


def _now() -> datetime:
    return datetime.now().astimezone()


def _rfc3339(moment: datetime) -> str:
    text = moment.astimezone().isoformat(timespec="seconds") if moment.tzinfo is None else moment.isoformat(timespec="seconds")
    return text[:-6] + "Z" if text.endswith("+00:00") else text


def _with_fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    return f"{whole}.{str(rest).zfill(len(str(unit)) - 1).rstrip('0')}"


def format_duration(seconds: float) -> str:
    """Format a duration given in seconds as, for example, 4m2.5s or 750ms."""
    nanos = round(seconds * 1_000_000_000)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    for limit, unit, suffix in ((1_000, 1, "ns"), (1_000_000, 1_000, "µs"), (1_000_000_000, 1_000_000, "ms")):
        if nanos < limit:
            return f"{sign}{_with_fraction(nanos, unit)}{suffix}"
    hours, rest = divmod(nanos, 3_600_000_000_000)
    minutes, rest = divmod(rest, 60_000_000_000)
    text = f"{hours}h" if hours else ""
    if hours or minutes:
        text += f"{minutes}m"
    return f"{sign}{text}{_with_fraction(rest, 1_000_000_000)}s"


def generate_task_id() -> str:
    """Return a new time-ordered (version 7) UUID string."""
    millis = time.time_ns() // 1_000_000
    rand = int.from_bytes(os.urandom(10), "big")
    value = (millis & ((1 << 48) - 1)) << 80
    value |= (0x7 << 76) | (((rand >> 68) & 0xFFF) << 64) | (0b10 << 62)
    value |= rand & ((1 << 62) - 1)
    return str(uuid.UUID(int=value))


@dataclass
class DefaultTaskInput:
    title: str
    description: str | None = None


@dataclass
class DefaultTask:
    """A task that runs for three to five minutes unless cancelled.

    ``run_seconds`` fixes the run length; when unset a random whole number
    of minutes between three and five is used.
    """

    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    processing_time: timedelta | None = None
    run_seconds: float | None = field(default=None, repr=False, compare=False)

    @classmethod
    def create(cls, title: str, description: str = "") -> DefaultTask:
        """Create a pending task with a fresh identifier."""
        return cls(id=generate_task_id(), title=title, description=description)

    def execute(self, cancel_event: threading.Event, logger: Logger) -> None:
        """Run the task, logging a trace line each second.

        Raises CancelledError if ``cancel_event`` is set before the run ends.
        """
        started = _now()
        clock = time.monotonic()
        self.status = TaskStatus.RUNNING
        self.started_at = started
        duration = self.run_seconds if self.run_seconds is not None else random.randint(3, 5) * 60
        deadline = clock + duration
        next_tick = clock + 1.0

        while not cancel_event.wait(max(0.0, min(next_tick, deadline) - time.monotonic())):
            now = time.monotonic()
            if now >= deadline:
                finished = _now()
                self.status = TaskStatus.FINISHED
                self.finished_at = finished
                self.processing_time = finished - started
                return
            if now >= next_tick:
                logger.trace(
                    "Task is running",
                    {
                        "task_id": self.id,
                        "title": self.title,
                        "description": self.description,
                        "elapsed_time": format_duration(now - clock),
                    },
                )
                next_tick += 1.0
        self.status = TaskStatus.CANCELED
        raise CancelledError("context canceled")

    def to_json(self) -> str:
        """Serialise the task; unset times and an empty description are left out."""
        document: dict[str, str] = {"id": self.id, "title": self.title}
        if self.description:
            document["description"] = self.description
        document["status"] = TaskStatus(self.status).value
        document["created_at"] = _rfc3339(self.created_at)
        if self.started_at is not None:
            document["started_at"] = _rfc3339(self.started_at)
        if self.finished_at is not None:
            document["finished_at"] = _rfc3339(self.finished_at)
        if self.processing_time is not None:
            document["processing_time"] = format_duration(self.processing_time.total_seconds())
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False)