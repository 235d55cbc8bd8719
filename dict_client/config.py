"""Connection and logging defaults read from DICT_* environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .protocol import COMMAND_TIMEOUT, CONNECTION_TIMEOUT, DEFAULT_PORT


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    timeout_s: float
    connect_timeout_s: float
    log_level: str


def _env(name: str, default: str, convert):
    raw = os.getenv(name, default)
    try:
        return convert(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}={raw!r}: {exc}") from exc


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file, if present).

    Raises:
        ValueError: If a variable can't be converted or names an unknown
            log level.
    """
    load_dotenv(override=False)

    host = os.getenv("DICT_HOST", "dict.org")
    port = _env("DICT_PORT", str(DEFAULT_PORT), int)
    timeout_s = _env("DICT_TIMEOUT_S", str(COMMAND_TIMEOUT), float)
    connect_timeout_s = _env("DICT_CONNECT_TIMEOUT_S", str(CONNECTION_TIMEOUT), float)
    log_level = os.getenv("DICT_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Invalid DICT_LOG_LEVEL={log_level!r}: unknown level")

    return Settings(
        host=host,
        port=port,
        timeout_s=timeout_s,
        connect_timeout_s=connect_timeout_s,
        log_level=log_level,
    )
