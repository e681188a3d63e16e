"""Task manager service: creates, runs, looks up and cancels tasks."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .entity import DefaultTask, DefaultTaskInput
from .errors import bad_request
from .logger import Logger


class Task(Protocol):
    """Something the service can run in the background."""

    id: str

    def execute(self, cancel_event: threading.Event, logger: Logger) -> None: ...

    def to_json(self) -> str: ...


@dataclass
class RunningTask:
    """A task together with the callable that cancels its run."""

    task: Task
    cancel: Callable[[], None]


class TaskRepository(Protocol):
    """Where running tasks are kept."""

    def create_task(self, running_task: RunningTask) -> None: ...

    def delete_task(self, task_id: str) -> None: ...

    def get_task_by_id(self, task_id: str) -> RunningTask: ...


@dataclass
class CreateTaskRequest:
    """A request to create a task of ``type`` from ``data``."""

    type: str | None = None
    data: Any = None


@dataclass
class ServiceConfiguration:
    logger: Logger | None
    task_repository: TaskRepository | None
    max_concurrent_tasks: int = 0

    def validate(self) -> None:
        if self.task_repository is None:
            raise ValueError("task repository is not set")
        if self.logger is None:
            raise ValueError("logger is not set")


def parse_default_task_input(data: Any) -> DefaultTaskInput:
    """Read the fields of a default task from request data.

    Keys match case-insensitively, unknown keys are ignored and a title is
    required. Raises a 400 AppError when the data does not fit.
    """
    try:
        raw = json.dumps(data, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise bad_request("invalid data format") from exc
    decoded = json.loads(raw)

    title = ""
    description: str | None = None
    if decoded is not None:
        if not isinstance(decoded, dict):
            raise bad_request("invalid fields in task data")
        for key, value in decoded.items():
            name = key.casefold()
            if name not in ("title", "description"):
                continue
            if value is not None and not isinstance(value, str):
                raise bad_request("invalid fields in task data")
            if name == "title":
                if value is not None:
                    title = value
            else:
                description = value

    if not title:
        raise bad_request("title is required")
    return DefaultTaskInput(title=title, description=description)


class TaskManagerService:
    """Runs tasks in background threads, at most a fixed number at once."""

    def __init__(self, config: ServiceConfiguration) -> None:
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"validate configuration: {exc}") from exc
        self._logger: Logger = config.logger
        self._repository: TaskRepository = config.task_repository
        self._slots = threading.Semaphore(config.max_concurrent_tasks)

    def get_task_by_id(self, task_id: str) -> Task:
        return self._repository.get_task_by_id(task_id).task

    def create_task(self, task: Task) -> threading.Thread:
        """Store the task and start running it; return the worker thread."""
        cancel_event = threading.Event()
        running = RunningTask(task=task, cancel=cancel_event.set)
        try:
            self._repository.create_task(running)
        except Exception:
            cancel_event.set()
            raise

        worker = threading.Thread(
            target=self._run, args=(task, cancel_event), name=f"task-{task.id}", daemon=True
        )
        worker.start()
        return worker

    def _run(self, task: Task, cancel_event: threading.Event) -> None:
        with self._slots:
            try:
                task.execute(cancel_event, self._logger)
            except Exception as exc:
                self._logger.error(
                    "task execution failed", {"task_id": task.id, "error": str(exc)}
                )
            else:
                self._logger.debug("task executed successfully", {"task_id": task.id})

    def delete_task(self, task_id: str) -> None:
        """Cancel the task's run and remove it."""
        running = self._repository.get_task_by_id(task_id)
        running.cancel()
        self._repository.delete_task(task_id)

    def to_task_object(self, request: CreateTaskRequest) -> Task:
        """Build a task from a creation request; only the default type exists."""
        task_type = request.type or "default"
        if task_type == "default":
            task_input = parse_default_task_input(request.data)
            return DefaultTask.create(task_input.title, task_input.description or "")
        raise bad_request(f"unsupported task type: {task_type}")