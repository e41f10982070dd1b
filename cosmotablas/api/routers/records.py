"""Attempt submission endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlmodel import Session

from ...core import ValidationError, get_session
from ...services.leaderboard import insert_record
from ...services.scoring import parse_submission
from ..common import preflight, read_json_object

logger = logging.getLogger(__name__)

router = APIRouter(tags=["records"])


@router.post("/records", status_code=201)
async def submit_record(request: Request, session: Session = Depends(get_session)):
    """Store one attempt after recomputing its points server-side."""

    body = await read_json_object(request)
    try:
        submission = parse_submission(body)
    except ValidationError as exc:
        logger.warning("Rejected record from %r: %s", body.get("userId"), exc.reason)
        raise HTTPException(400, exc.reason) from exc

    record = insert_record(session, submission)
    return {"success": True, "id": record.id}


@router.options("/records")
def records_options() -> Response:
    return preflight()


__all__ = ["router"]
