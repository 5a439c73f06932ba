"""
Runtime configuration read from the environment.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

SERVER_NAME = "Camera App Backend"
VERSION = "1.0.0"

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
MAX_FILE_SIZE_LABEL = "10MB"

UPLOADS_DIR = Path(__file__).resolve().parent.parent / "uploads"

API_PREFIX = "/api"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

_DEFAULT_PORT = 3001


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    environment: str
    cors_origins: tuple[str, ...]
    log_level: str


def get_environment() -> str:
    return os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development"


def get_port() -> int:
    raw = os.getenv("PORT", "")
    if not raw:
        return _DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        error_message = f"PORT must be an integer, got {raw!r}"
        raise ValueError(error_message) from exc


def get_settings() -> Settings:
    """
    Build settings from environment variables.
    Only the listening address, environment tag, CORS origins and log level
    are configurable; upload limits and the storage directory are fixed.
    """
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),  # noqa: S104
        port=get_port(),
        environment=get_environment(),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
