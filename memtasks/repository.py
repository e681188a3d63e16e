"""Task repository backed by the in-memory task storage."""

from __future__ import annotations

from .logger import Logger
from .service import RunningTask
from .storage import TaskStorage


class StorageTaskRepository:
    """Stores tasks in a TaskStorage and logs every failure."""

    def __init__(self, logger: Logger | None, task_storage: TaskStorage | None) -> None:
        if logger is None:
            raise ValueError("task repository logger is not set")
        if task_storage is None:
            raise ValueError("task repository task storage is not set")
        self._logger = logger
        self._storage = task_storage

    def create_task(self, running_task: RunningTask) -> None:
        try:
            self._storage.create_task(running_task)
        except Exception as exc:
            self._logger.error(
                "Failed to create task", {"task_id": running_task.task.id, "error": str(exc)}
            )
            raise

    def delete_task(self, task_id: str) -> None:
        try:
            self._storage.delete_task(task_id)
        except Exception as exc:
            self._logger.error("Failed to delete task", {"task_id": task_id, "error": str(exc)})
            raise

    def get_task_by_id(self, task_id: str) -> RunningTask:
        try:
            return self._storage.get_task_by_id(task_id)
        except Exception as exc:
            self._logger.error("Failed to get task", {"task_id": task_id, "error": str(exc)})
            raise