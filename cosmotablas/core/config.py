"""Application settings and environment helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


_PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = _PROJECT_ROOT / "data"


# Storage --------------------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{DATA_DIR / 'app.db'}"
DB_RESET = _env_bool("DB_RESET", False)
LOCAL_STATE_PATH = Path(os.getenv("LOCAL_STATE_PATH") or DATA_DIR / "local_state.json")


# HTTP surface ---------------------------------------------------------------
# Leaderboards are public; "*" keeps the API open to any game host.
ALLOWED_CORS_ORIGINS = _unique(_split_csv(os.getenv("ALLOWED_CORS_ORIGINS", "*"))) or ["*"]

CACHE_MAX_AGE = _env_int("CACHE_MAX_AGE", 30)
CACHE_STALE_WHILE_REVALIDATE = _env_int("CACHE_STALE_WHILE_REVALIDATE", 60)


# Runtime behaviour ----------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
REMOTE_API_BASE = os.getenv("REMOTE_API_BASE", "http://127.0.0.1:3000").rstrip("/")
REMOTE_TIMEOUT = _env_int("REMOTE_TIMEOUT", 10)


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "CACHE_MAX_AGE",
    "CACHE_STALE_WHILE_REVALIDATE",
    "DATABASE_URL",
    "DATA_DIR",
    "DB_RESET",
    "LOCAL_STATE_PATH",
    "LOG_LEVEL",
    "REMOTE_API_BASE",
    "REMOTE_TIMEOUT",
]
