"""HTTP front end for the task manager service."""

from __future__ import annotations

import json
import socket
import threading
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import unquote

from .errors import bad_request, error_response
from .logger import Logger
from .service import CreateTaskRequest, TaskManagerService

API_BASE = "/api"
_TASKS_PATH = API_BASE + "/tasks"
_SPEC_PATH = API_BASE + "/swagger.json"
_JSON = "application/json"
_TEXT = "text/plain; charset=utf-8"

Response = tuple[int, dict[str, str], bytes]

_SPECIFICATION = {
    "openapi": "3.0.3",
    "info": {"title": "In-memory task manager", "version": "1.0.0"},
    "servers": [{"url": API_BASE}],
    "paths": {
        "/tasks": {"post": {"operationId": "createTask"}},
        "/tasks/{taskId}": {
            "get": {"operationId": "getTaskById"},
            "delete": {"operationId": "deleteTaskById"},
        },
    },
}


@dataclass
class ServerConfiguration:
    logger: Logger | None = None
    rest_address: str = ""
    read_timeout_seconds: int = 0
    write_timeout_seconds: int = 0
    expose_api_specification: bool = False
    task_manager_service: TaskManagerService | None = None

    def validate(self) -> None:
        if not self.rest_address:
            raise ValueError("http port is required")
        if self.logger is None:
            raise ValueError("logger is not set")
        if self.task_manager_service is None:
            raise ValueError("task manager service is not set")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _decode_request(body: bytes | str) -> CreateTaskRequest:
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    value, _ = json.JSONDecoder(parse_constant=_reject_constant).raw_decode(text.lstrip(" \t\r\n"))
    request = CreateTaskRequest()
    if value is None:
        return request
    if not isinstance(value, dict):
        raise ValueError("request body is not an object")
    for key, item in value.items():
        name = key.casefold()
        if name == "type":
            if item is not None and not isinstance(item, str):
                raise ValueError("type is not a string")
            request.type = item
        elif name == "data":
            request.data = item
    return request


def _json_response(status: int, payload: bytes) -> Response:
    return int(status), {"Content-Type": _JSON}, payload


def _error(err: BaseException) -> Response:
    return _json_response(*error_response(err))


def _method_not_allowed(methods: str) -> Response:
    return int(HTTPStatus.METHOD_NOT_ALLOWED), {"Allow": methods, "Content-Type": _TEXT}, b"Method Not Allowed\n"


class _RequestHandler(BaseHTTPRequestHandler):
    server: _HTTPServer
    server_version = "memtasks"

    def setup(self) -> None:
        self.timeout = self.server.request_timeout
        super().setup()

    def _dispatch(self) -> None:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            self.send_error(HTTPStatus.BAD_REQUEST, "invalid Content-Length")
            return
        body = self.rfile.read(length) if length > 0 else b""
        status, headers, payload = self.server.task_server.handle(self.command, self.path, body)
        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD" and payload:
            self.wfile.write(payload)

    do_GET = do_HEAD = do_POST = do_PUT = do_PATCH = do_DELETE = do_OPTIONS = _dispatch

    def log_message(self, format: str, *args: Any) -> None:
        self.server.task_server._logger.trace("http request", {"request": format % args})


class _HTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, family, task_server: TaskServer, request_timeout: float | None) -> None:
        self.address_family = family
        self.task_server = task_server
        self.request_timeout = request_timeout
        super().__init__(address, _RequestHandler)


class TaskServer:
    """Serves the task REST API under /api."""

    def __init__(self, config: ServerConfiguration) -> None:
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"validate configuration: {exc}") from exc
        self.rest_address = config.rest_address
        self.read_timeout_seconds = config.read_timeout_seconds
        self.write_timeout_seconds = config.write_timeout_seconds
        self._logger: Logger = config.logger
        self._service: TaskManagerService = config.task_manager_service
        self._expose_specification = config.expose_api_specification
        self._lock = threading.Lock()
        self._httpd: _HTTPServer | None = None
        self._closed = False

    def handle(self, method: str, path: str, body: bytes | str = b"") -> Response:
        """Answer one request; returns the status, the headers and the body."""
        method = method.upper()
        path = path.split("?", 1)[0].split("#", 1)[0]

        if self._expose_specification and path == _SPEC_PATH:
            return _json_response(HTTPStatus.OK, (json.dumps(_SPECIFICATION) + "\n").encode("utf-8"))

        if path == _TASKS_PATH:
            return self._create_task(body) if method == "POST" else _method_not_allowed("POST")

        segment = path[len(_TASKS_PATH) + 1 :] if path.startswith(_TASKS_PATH + "/") else ""
        if segment and "/" not in segment:
            task_id = unquote(segment)
            try:
                if method in ("GET", "HEAD"):
                    task = self._service.get_task_by_id(task_id)
                    return _json_response(HTTPStatus.OK, task.to_json().encode("utf-8"))
                if method == "DELETE":
                    self._service.delete_task(task_id)
                    return int(HTTPStatus.OK), {}, b""
            except Exception as exc:
                return _error(exc)
            return _method_not_allowed("DELETE, GET, HEAD")

        return int(HTTPStatus.NOT_FOUND), {"Content-Type": _TEXT}, b"404 page not found\n"

    def _create_task(self, body: bytes | str) -> Response:
        try:
            request = _decode_request(body)
        except ValueError:
            return _error(bad_request("invalid request body"))
        try:
            task = self._service.to_task_object(request)
            self._service.create_task(task)
        except Exception as exc:
            return _error(exc)
        return _json_response(HTTPStatus.CREATED, task.to_json().encode("utf-8"))

    def start(self) -> None:
        """Listen and serve until close() is called.

        Returns at once if the server was already closed; raises RuntimeError
        if the address cannot be listened on.
        """
        with self._lock:
            if self._closed:
                return
            try:
                host, sep, port = self.rest_address.rpartition(":")
                if not sep:
                    raise ValueError(f"address {self.rest_address}: missing port in address")
                host = host.strip("[]")
                family = socket.AF_INET6 if ":" in host else socket.AF_INET
                httpd = _HTTPServer(
                    (host, int(port or 0)), family, self, self.read_timeout_seconds or None
                )
            except (OSError, ValueError, OverflowError) as exc:
                raise RuntimeError(f"launching HTTP server error: {exc}") from exc
            self._httpd = httpd
        try:
            httpd.serve_forever()
        finally:
            httpd.server_close()

    def close(self) -> None:
        """Stop serving; start() then returns."""
        with self._lock:
            self._closed = True
            httpd = self._httpd
        if httpd is not None:
            try:
                httpd.shutdown()
            except Exception as exc:
                raise RuntimeError(f"closing error: {exc}") from exc