"""Global mistake tally endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlmodel import Session

from ...core import get_session
from ...services.leaderboard import filter_mistakes, record_mistakes, top_mistakes
from ..common import mark_cacheable, preflight, read_json_object

logger = logging.getLogger(__name__)

router = APIRouter(tags=["mistakes"])


@router.post("/mistakes")
async def submit_mistakes(request: Request, session: Session = Depends(get_session)):
    """Count each valid (table, multiplier) pair once; at most 20 per request."""

    body = await read_json_object(request)
    mistakes = body.get("mistakes")
    if not isinstance(mistakes, list) or not mistakes:
        raise HTTPException(400, "Missing mistakes array")

    valid = filter_mistakes(mistakes)
    if not valid:
        raise HTTPException(400, "No valid mistakes")

    count = record_mistakes(session, valid)
    logger.info("Counted %d of %d submitted mistakes", count, len(mistakes))
    return {"success": True, "count": count}


@router.get("/mistakes")
def get_mistakes(response: Response, session: Session = Depends(get_session)):
    """Most-missed questions across all players."""

    mistakes = top_mistakes(session)
    mark_cacheable(response)
    return {"mistakes": mistakes}


@router.options("/mistakes")
def mistakes_options() -> Response:
    return preflight()


__all__ = ["router"]
