"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    CACHE_MAX_AGE,
    CACHE_STALE_WHILE_REVALIDATE,
    DATABASE_URL,
    DB_RESET,
    LOCAL_STATE_PATH,
    LOG_LEVEL,
    REMOTE_API_BASE,
    REMOTE_TIMEOUT,
)
from .database import engine, get_session
from .errors import ImplausibleDuration, RemoteSyncError, ValidationError
from .time import now_ms, to_epoch_ms, utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "CACHE_MAX_AGE",
    "CACHE_STALE_WHILE_REVALIDATE",
    "DATABASE_URL",
    "DB_RESET",
    "LOCAL_STATE_PATH",
    "LOG_LEVEL",
    "REMOTE_API_BASE",
    "REMOTE_TIMEOUT",
    "ImplausibleDuration",
    "RemoteSyncError",
    "ValidationError",
    "engine",
    "get_session",
    "now_ms",
    "to_epoch_ms",
    "utcnow",
]
