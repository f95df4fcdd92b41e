"""Configuration helpers for backend runtime."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import structlog


DEFAULT_REMOTE_URL = "https://jsonblob.com/api/jsonBlob"
DEFAULT_PUBLIC_URL = "http://127.0.0.1:8000/"


@dataclass(frozen=True)
class BackendSettings:
    remote_url: str | None
    database_url: str | None
    public_url: str
    host: str
    port: int
    remote_timeout_s: float
    log_level: str


def load_settings() -> BackendSettings:
    port_raw = os.getenv("GIFTEXCHANGE_PORT", "8000")
    timeout_raw = os.getenv("GIFTEXCHANGE_REMOTE_TIMEOUT", "10")
    # An empty remote URL keeps every event on the local backend.
    remote_url = os.getenv("GIFTEXCHANGE_REMOTE_URL", DEFAULT_REMOTE_URL)
    return BackendSettings(
        remote_url=remote_url or None,
        database_url=os.getenv("GIFTEXCHANGE_DATABASE_URL") or None,
        public_url=os.getenv("GIFTEXCHANGE_PUBLIC_URL", DEFAULT_PUBLIC_URL),
        host=os.getenv("GIFTEXCHANGE_HOST", "127.0.0.1"),
        port=int(port_raw),
        remote_timeout_s=float(timeout_raw),
        log_level=os.getenv("GIFTEXCHANGE_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog for console output at the given level."""
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        cache_logger_on_first_use=True,
    )
