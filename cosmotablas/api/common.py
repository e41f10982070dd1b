"""Request and response helpers shared by the routers."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Request, Response

from ..core import CACHE_MAX_AGE, CACHE_STALE_WHILE_REVALIDATE


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Return the JSON body as a dict; anything else reads as empty."""

    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def mark_cacheable(response: Response) -> None:
    response.headers["Cache-Control"] = (
        f"s-maxage={CACHE_MAX_AGE}, "
        f"stale-while-revalidate={CACHE_STALE_WHILE_REVALIDATE}"
    )


def preflight() -> Response:
    """Empty 200 for OPTIONS requests that bypass the CORS middleware."""

    return Response(status_code=200)


__all__ = ["mark_cacheable", "preflight", "read_json_object"]
