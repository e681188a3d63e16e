"""Wires the task manager together and runs its HTTP server."""

from __future__ import annotations

import signal
import sys
import threading
from typing import Sequence

from .config import Configuration, load_config
from .logger import Logger
from .repository import StorageTaskRepository
from .server import ServerConfiguration, TaskServer
from .service import ServiceConfiguration, TaskManagerService
from .storage import TaskStorage


class Application:
    """The logger, storage, service and HTTP server of one running instance."""

    def __init__(self, config: Configuration | None = None) -> None:
        if config is None:
            try:
                config = load_config()
            except ValueError as exc:
                raise ValueError(f"new configuration: {exc}") from exc
        self.config = config

        self.logger = Logger(config.log_level)
        self.logger.info(f"Config: {config}")

        self.task_repository = StorageTaskRepository(self.logger, TaskStorage())

        try:
            self.task_manager_service = TaskManagerService(
                ServiceConfiguration(
                    logger=self.logger,
                    task_repository=self.task_repository,
                    max_concurrent_tasks=config.max_concurrent_tasks,
                )
            )
        except ValueError as exc:
            raise ValueError(f"set service: creating task manager service: {exc}") from exc

        try:
            self.server = TaskServer(
                ServerConfiguration(
                    logger=self.logger,
                    rest_address=config.rest_address,
                    read_timeout_seconds=config.read_timeout_seconds,
                    write_timeout_seconds=config.write_timeout_seconds,
                    expose_api_specification=config.expose_api_specification,
                    task_manager_service=self.task_manager_service,
                )
            )
        except ValueError as exc:
            raise ValueError(f"set server: creating HTTP server: {exc}") from exc

    def start(self) -> None:
        """Serve HTTP until close() is called."""
        try:
            self.server.start()
        except RuntimeError as exc:
            raise RuntimeError(f"http server: {exc}") from exc

    def close(self) -> None:
        """Stop the HTTP server; failures are logged, not raised."""
        try:
            self.server.close()
        except RuntimeError as exc:
            self.logger.error(f"closing HTTP server: {exc}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server until interrupted; returns the exit status."""
    try:
        app = Application()
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    closers: list[threading.Thread] = []

    def on_interrupt(signum: int, frame: object) -> None:
        if closers:
            return
        closer = threading.Thread(target=app.close, name="shutdown", daemon=True)
        closers.append(closer)
        closer.start()

    in_main_thread = threading.current_thread() is threading.main_thread()
    previous = signal.signal(signal.SIGINT, on_interrupt) if in_main_thread else None
    try:
        app.start()
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)

    for closer in closers:
        closer.join()
    return 0


if __name__ == "__main__":
    sys.exit(main())