"""Leaderboard endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from ...core import ValidationError, get_session
from ...services.leaderboard import (
    all_attempts,
    all_tables_best,
    best_per_player,
    record_to_dict,
)
from ...services.scoring import validate_table
from ..common import mark_cacheable, preflight

router = APIRouter(tags=["leaderboard"])


def _parse_table(raw: str) -> int:
    try:
        value = float(raw)
    except ValueError as exc:
        raise HTTPException(400, "Invalid table number") from exc
    try:
        return validate_table(value)
    except ValidationError as exc:
        raise HTTPException(400, exc.reason) from exc


@router.get("/leaderboard")
def get_leaderboard(
    response: Response,
    table: Optional[str] = None,
    mode: str = "best",
    session: Session = Depends(get_session),
):
    """Top ten for one table, or best-per-player boards for every table.

    ``mode=all`` lists every attempt (players may repeat); anything else
    keeps each player's best attempt only.
    """

    if not table:
        boards = all_tables_best(session)
        mark_cacheable(response)
        return {
            "tables": {
                str(number): [record_to_dict(record) for record in records]
                for number, records in boards.items()
            }
        }

    table_number = _parse_table(table)
    if mode == "all":
        records = all_attempts(session, table_number)
    else:
        records = best_per_player(session, table_number)
    return {"records": [record_to_dict(record) for record in records]}


@router.options("/leaderboard")
def leaderboard_options() -> Response:
    return preflight()


__all__ = ["router"]
