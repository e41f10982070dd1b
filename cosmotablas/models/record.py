"""Database model for submitted quiz attempts."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class GlobalRecord(SQLModel, table=True):
    """One attempt accepted by the shared leaderboard."""

    __tablename__ = "global_records"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    user_id: str = ORMField(index=True)
    user_name: str = ORMField(max_length=15)
    table_number: int = ORMField(index=True)
    time_ms: int
    errors: int
    points: int = ORMField(index=True)
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["GlobalRecord"]
