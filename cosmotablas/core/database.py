"""Database configuration and session helpers."""

from __future__ import annotations

from typing import Any, Dict, Iterator

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from .config import DATA_DIR, DATABASE_URL


def _engine_options(url: str) -> Dict[str, Any]:
    if not url.startswith("sqlite"):
        return {}
    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url in {"sqlite://", "sqlite:///:memory:"}:
        # A single shared connection keeps in-memory tables alive across sessions.
        options["poolclass"] = StaticPool
    else:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))


def get_session() -> Iterator[Session]:
    """FastAPI dependency that yields a database session."""

    with Session(engine) as session:
        yield session


__all__ = ["engine", "get_session"]
