"""Configuration loading for the taskboard service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8083


class ConfigError(RuntimeError):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class AppConfig:
    data_dir: Path
    frontend_dir: Path | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    log_dir: Path | None = None
    atomic_writes: bool = True
    strict_decode: bool = False


def _read_dotenv_value(dotenv_path: Path, key: str) -> str | None:
    """Read a single key from a .env file without mutating the environment."""
    if not dotenv_path.is_file():
        return None
    try:
        content = dotenv_path.read_text(encoding="utf-8")
    except OSError:
        return None

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].strip()
        if "=" not in stripped:
            continue
        name, value = stripped.split("=", 1)
        name = name.strip()
        if name != key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        return value or None
    return None


def _read_bool(raw_value: str | None, *, default: bool, key: str) -> bool:
    if raw_value is None:
        return default
    normalized = raw_value.strip().lower()
    if not normalized:
        return default
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{key} must be a boolean value.")


def _read_port(raw_value: str | None, *, key: str) -> int:
    if raw_value is None or not raw_value.strip():
        return DEFAULT_PORT
    try:
        port = int(raw_value.strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer.") from exc
    if not 1 <= port <= 65535:
        raise ConfigError(f"{key} must be between 1 and 65535.")
    return port


def _read_log_level(raw_value: str | None, *, key: str) -> str:
    if raw_value is None or not raw_value.strip():
        return "INFO"
    level = raw_value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"{key} must be a logging level name.")
    return level


def load_config() -> AppConfig:
    """Load configuration from the environment, falling back to ./.env."""
    dotenv_path = Path.cwd() / ".env"

    def lookup(key: str) -> str | None:
        value = os.environ.get(key)
        if value is None:
            value = _read_dotenv_value(dotenv_path, key)
        return value

    raw_data_dir = (lookup("TASKBOARD_DATA_DIR") or "").strip() or "."
    raw_frontend_dir = (lookup("TASKBOARD_FRONTEND_DIR") or "").strip()
    raw_log_dir = (lookup("TASKBOARD_LOG_DIR") or "").strip()

    return AppConfig(
        data_dir=Path(raw_data_dir).resolve(),
        frontend_dir=Path(raw_frontend_dir).resolve() if raw_frontend_dir else None,
        host=(lookup("TASKBOARD_HOST") or "").strip() or DEFAULT_HOST,
        port=_read_port(lookup("TASKBOARD_PORT"), key="TASKBOARD_PORT"),
        log_level=_read_log_level(
            lookup("TASKBOARD_LOG_LEVEL"), key="TASKBOARD_LOG_LEVEL"
        ),
        log_dir=Path(raw_log_dir).resolve() if raw_log_dir else None,
        atomic_writes=_read_bool(
            lookup("TASKBOARD_ATOMIC_WRITES"),
            default=True,
            key="TASKBOARD_ATOMIC_WRITES",
        ),
        strict_decode=_read_bool(
            lookup("TASKBOARD_STRICT_DECODE"),
            default=False,
            key="TASKBOARD_STRICT_DECODE",
        ),
    )
