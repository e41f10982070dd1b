"""Server-side leaderboard and mistake-tally queries."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from ..core.time import to_epoch_ms
from ..models import GlobalRecord, QuestionMistake
from .mistakes import MistakeEntry
from .scoring import Submission, is_valid_question

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10
MISTAKE_BATCH_LIMIT = 20
TOP_MISTAKES = 20

_ORDERING = (
    GlobalRecord.points.asc(),
    GlobalRecord.created_at.asc(),
    GlobalRecord.id.asc(),
)

_UPSERT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def record_to_dict(record: GlobalRecord) -> Dict[str, Any]:
    """Serialise a stored attempt to the public record shape."""

    return {
        "user_id": record.user_id,
        "user_name": record.user_name,
        "table_number": record.table_number,
        "time_ms": record.time_ms,
        "errors": record.errors,
        "points": record.points,
        "date": to_epoch_ms(record.created_at),
    }


def insert_record(session: Session, submission: Submission) -> GlobalRecord:
    record = GlobalRecord(
        user_id=submission.user_id,
        user_name=submission.user_name,
        table_number=submission.table_number,
        time_ms=submission.time_ms,
        errors=submission.errors,
        points=submission.points,
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info(
        "Accepted record %s: table=%s points=%s user=%s",
        record.id,
        record.table_number,
        record.points,
        record.user_id,
    )
    return record


def best_per_player(
    session: Session, table_number: int, limit: int = LEADERBOARD_SIZE
) -> List[GlobalRecord]:
    """Each player's best attempt on a table, best first."""

    rows = session.exec(
        select(GlobalRecord)
        .where(GlobalRecord.table_number == table_number)
        .order_by(*_ORDERING)
    ).all()

    seen = set()
    best: List[GlobalRecord] = []
    for row in rows:
        if row.user_id in seen:
            continue
        seen.add(row.user_id)
        best.append(row)
        if len(best) >= limit:
            break
    return best


def all_attempts(
    session: Session, table_number: int, limit: int = LEADERBOARD_SIZE
) -> List[GlobalRecord]:
    return list(
        session.exec(
            select(GlobalRecord)
            .where(GlobalRecord.table_number == table_number)
            .order_by(*_ORDERING)
            .limit(limit)
        ).all()
    )


def tables_with_records(session: Session) -> List[int]:
    tables = session.exec(
        select(GlobalRecord.table_number).distinct().order_by(GlobalRecord.table_number)
    ).all()
    return [int(table) for table in tables]


def all_tables_best(
    session: Session, limit: int = LEADERBOARD_SIZE
) -> Dict[int, List[GlobalRecord]]:
    return {
        table: best_per_player(session, table, limit)
        for table in tables_with_records(session)
    }


def filter_mistakes(mistakes: Iterable[Any]) -> List[Dict[str, int]]:
    """Cap a batch at ``MISTAKE_BATCH_LIMIT`` and keep only in-grid pairs."""

    valid: List[Dict[str, int]] = []
    for index, mistake in enumerate(mistakes):
        if index >= MISTAKE_BATCH_LIMIT:
            break
        if not isinstance(mistake, dict):
            continue
        table, multiplier = mistake.get("table"), mistake.get("multiplier")
        if is_valid_question(table, multiplier):
            valid.append({"table": int(table), "multiplier": int(multiplier)})
    return valid


def increment_mistake(session: Session, table_number: int, multiplier: int) -> None:
    """Insert-or-increment one counter as a single statement."""

    columns = QuestionMistake.__table__.c
    insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
    if insert is not None:
        statement = (
            insert(QuestionMistake.__table__)
            .values(table_number=table_number, multiplier=multiplier, error_count=1)
            .on_conflict_do_update(
                index_elements=[columns.table_number, columns.multiplier],
                set_={"error_count": columns.error_count + 1},
            )
        )
        session.connection().execute(statement)
        return

    # Other backends: atomic UPDATE first, INSERT only when no row existed.
    result = session.connection().execute(
        update(QuestionMistake.__table__)
        .where(columns.table_number == table_number, columns.multiplier == multiplier)
        .values(error_count=columns.error_count + 1)
    )
    if result.rowcount == 0:
        session.add(
            QuestionMistake(table_number=table_number, multiplier=multiplier, error_count=1)
        )
        session.flush()


def record_mistakes(session: Session, mistakes: List[Dict[str, int]]) -> int:
    for mistake in mistakes:
        increment_mistake(session, mistake["table"], mistake["multiplier"])
    session.commit()
    return len(mistakes)


def top_mistakes(session: Session, limit: int = TOP_MISTAKES) -> List[Dict[str, int]]:
    rows = session.exec(
        select(QuestionMistake)
        .order_by(
            QuestionMistake.error_count.desc(),
            QuestionMistake.table_number.asc(),
            QuestionMistake.multiplier.asc(),
        )
        .limit(limit)
    ).all()
    return [
        MistakeEntry(row.table_number, row.multiplier, row.error_count).to_dict()
        for row in rows
    ]


__all__ = [
    "LEADERBOARD_SIZE",
    "MISTAKE_BATCH_LIMIT",
    "TOP_MISTAKES",
    "all_attempts",
    "all_tables_best",
    "best_per_player",
    "filter_mistakes",
    "increment_mistake",
    "insert_record",
    "record_mistakes",
    "record_to_dict",
    "tables_with_records",
    "top_mistakes",
]
