"""Application configuration read from a dotenv file and the environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from dotenv import dotenv_values

CONFIG_PATH = "./config/.env"


@dataclass
class Configuration:
    log_level: str = "debug"
    rest_address: str = "0.0.0.0:8080"
    read_timeout_seconds: int = 30
    write_timeout_seconds: int = 30
    expose_api_specification: bool = True
    max_concurrent_tasks: int = 1000


def _parse_number(name: str, text: str, signed: bool) -> int:
    pattern, low, high = (r"[+-]?[0-9]+", -(2**63), 2**63 - 1) if signed else (r"[0-9]+", 0, 2**64 - 1)
    if re.fullmatch(pattern, text) is None or not low <= int(text) <= high:
        raise ValueError(f"parsing config: invalid integer {text!r} for {name}")
    return int(text)


def _parse_bool(name: str, text: str) -> bool:
    if text in ("1", "t", "T", "TRUE", "true", "True"):
        return True
    if text in ("0", "f", "F", "FALSE", "false", "False"):
        return False
    raise ValueError(f"parsing config: invalid boolean {text!r} for {name}")


def load_config(path: str | os.PathLike[str] = CONFIG_PATH) -> Configuration:
    """Load the configuration.

    When the dotenv file cannot be opened, every setting takes its default.
    Otherwise variables from the file are used unless the environment already
    sets them, and empty settings fall back to their defaults (the API
    specification is then exposed only when asked for). Raises ValueError on a
    malformed file or value.
    """
    try:
        handle = open(path, encoding="utf-8")
    except OSError:
        return Configuration()
    with handle:
        try:
            file_values = dotenv_values(stream=handle)
        except UnicodeDecodeError as exc:
            raise ValueError(f"loading configuration: {exc}") from exc

    values = {key: value for key, value in file_values.items() if value is not None}
    values.update(os.environ)

    def get(name: str) -> str:
        return values.get(name) or ""

    defaults = Configuration()
    read = get("HTTP_READ_TIME_OUT")
    write = get("HTTP_WRITE_TIME_OUT")
    expose = get("HTTP_EXPOSE_API_SPECIFICATION")
    tasks = get("MAX_CONCURRENT_TASKS")
    return Configuration(
        log_level=get("LOG_LEVEL") or defaults.log_level,
        rest_address=get("REST_ADDRESS") or defaults.rest_address,
        read_timeout_seconds=(read and _parse_number("HTTP_READ_TIME_OUT", read, False))
        or defaults.read_timeout_seconds,
        write_timeout_seconds=(write and _parse_number("HTTP_WRITE_TIME_OUT", write, False))
        or defaults.write_timeout_seconds,
        expose_api_specification=bool(expose) and _parse_bool("HTTP_EXPOSE_API_SPECIFICATION", expose),
        max_concurrent_tasks=(tasks and _parse_number("MAX_CONCURRENT_TASKS", tasks, True))
        or defaults.max_concurrent_tasks,
    )