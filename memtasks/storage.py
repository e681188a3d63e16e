"""Thread-safe in-memory store of running tasks."""

from __future__ import annotations

import threading

from .errors import bad_request, not_found
from .service import RunningTask


class TaskStorage:
    """Keeps running tasks by identifier, guarded by a lock."""

    def __init__(self) -> None:
        self._tasks: dict[str, RunningTask] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._tasks

    def create_task(self, running_task: RunningTask) -> None:
        """Store a task; a 400 AppError is raised if its identifier is taken."""
        task_id = running_task.task.id
        with self._lock:
            if task_id in self._tasks:
                raise bad_request("task with this ID already exists")
            self._tasks[task_id] = running_task

    def delete_task(self, task_id: str) -> None:
        """Remove a task; a 404 AppError is raised if it is unknown."""
        with self._lock:
            try:
                del self._tasks[task_id]
            except KeyError:
                raise not_found("task not found") from None

    def get_task_by_id(self, task_id: str) -> RunningTask:
        """Return a stored task; a 404 AppError is raised if it is unknown."""
        with self._lock:
            try:
                return self._tasks[task_id]
            except KeyError:
                raise not_found("task not found") from None