"""Database model for the global mistake tally."""

from __future__ import annotations

from sqlmodel import Field as ORMField, SQLModel


class QuestionMistake(SQLModel, table=True):
    """First-attempt error count for one (table, multiplier) question."""

    __tablename__ = "question_mistakes"

    table_number: int = ORMField(primary_key=True)
    multiplier: int = ORMField(primary_key=True)
    error_count: int = ORMField(default=0, index=True)


__all__ = ["QuestionMistake"]
