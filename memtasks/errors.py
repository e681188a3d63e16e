"""Application errors that carry an HTTP status code."""

from __future__ import annotations

import json
from http import HTTPStatus


class AppError(Exception):
    """An error with a client-facing message and an HTTP status code."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.message = message
        self.code = int(code)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"AppError(message={self.message!r}, code={self.code})"

    def to_dict(self) -> dict:
        """Return the error as a JSON-ready mapping."""
        return {"message": self.message, "code": self.code}


def not_found(message: str) -> AppError:
    """Create a 404 error."""
    return AppError(message, HTTPStatus.NOT_FOUND)


def internal_error(message: str) -> AppError:
    """Create a 500 error."""
    return AppError(message, HTTPStatus.INTERNAL_SERVER_ERROR)


def bad_request(message: str) -> AppError:
    """Create a 400 error."""
    return AppError(message, HTTPStatus.BAD_REQUEST)


def _find_app_error(err: BaseException) -> AppError | None:
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        if isinstance(current, AppError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def error_response(err: BaseException | None) -> tuple[int, bytes]:
    """Turn an exception into an HTTP status and a JSON body.

    Application errors keep their own status; anything else becomes a 500
    whose message is the exception text.
    """
    if err is None:
        app_error = internal_error("no error passed to error_response")
    else:
        app_error = _find_app_error(err) or internal_error(str(err))
    body = json.dumps(app_error.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return app_error.code, (body + "\n").encode("utf-8")