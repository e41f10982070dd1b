"""Client for the shared leaderboard backend.

Submissions are fire-and-forget: they run as detached tasks whose outcome is
only logged. Queries raise ``RemoteSyncError`` so callers can fall back to
local data.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Optional, Set, Union

import httpx

from ..core.config import REMOTE_API_BASE, REMOTE_TIMEOUT
from ..core.errors import RemoteSyncError, ValidationError
from .leaderboard import MISTAKE_BATCH_LIMIT
from .ledger import AttemptRecord
from .mistakes import MistakeEntry, question_pair
from .scoring import compute_score, is_valid_question, validate_table

logger = logging.getLogger(__name__)

Dispatched = Union["asyncio.Task[None]", threading.Thread]


def record_payload(record: AttemptRecord) -> Dict[str, Any]:
    """Build the ``POST /records`` body, refusing anything the server would."""

    validate_table(record.table_number)
    if record.score != compute_score(record.elapsed_ms, record.error_count):
        raise ValidationError("Points mismatch")
    return {
        "userId": record.player_id,
        "userName": record.player_name,
        "tableNumber": record.table_number,
        "timeMs": record.elapsed_ms,
        "errors": record.error_count,
        "points": record.score,
    }


@contextmanager
def _malformed(endpoint: str) -> Iterator[None]:
    """Turn an unexpected response shape into ``RemoteSyncError``."""

    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise RemoteSyncError(f"{endpoint} returned a malformed payload: {exc!r}") from exc


def record_from_api(row: Dict[str, Any]) -> AttemptRecord:
    return AttemptRecord(
        player_id=str(row["user_id"]),
        player_name=str(row["user_name"]),
        table_number=int(row["table_number"]),
        elapsed_ms=int(float(row["time_ms"])),
        error_count=int(row["errors"]),
        score=int(row["points"]),
        recorded_at=int(float(row["date"])),
    )


class RemoteGateway:
    """Async HTTP gateway to ``/records``, ``/leaderboard`` and ``/mistakes``."""

    def __init__(
        self,
        base_url: str = REMOTE_API_BASE,
        timeout: float = REMOTE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._pending: Set["asyncio.Task[None]"] = set()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteSyncError(f"{method} {path} failed: {exc}") from exc
        if not isinstance(data, dict):
            raise RemoteSyncError(
                f"{method} {path} returned {type(data).__name__}, not an object"
            )
        return data

    # Submissions ------------------------------------------------------------
    async def submit_record(self, record: AttemptRecord) -> Dict[str, Any]:
        return await self._request("POST", "/records", json=record_payload(record))

    async def submit_mistakes(self, mistakes: Iterable[Any]) -> int:
        """Send valid pairs in server-sized batches; returns the accepted count."""

        pairs = []
        for mistake in mistakes:
            table, multiplier = question_pair(mistake)
            if is_valid_question(table, multiplier):
                pairs.append({"table": int(table), "multiplier": int(multiplier)})

        accepted = 0
        for start in range(0, len(pairs), MISTAKE_BATCH_LIMIT):
            batch = pairs[start : start + MISTAKE_BATCH_LIMIT]
            data = await self._request("POST", "/mistakes", json={"mistakes": batch})
            with _malformed("POST /mistakes"):
                accepted += int(data.get("count", 0))
        return accepted

    # Queries ----------------------------------------------------------------
    async def fetch_global_leaderboard(self) -> Dict[int, List[AttemptRecord]]:
        data = await self._request("GET", "/leaderboard")
        with _malformed("GET /leaderboard"):
            return {
                int(table): [record_from_api(row) for row in rows]
                for table, rows in (data.get("tables") or {}).items()
            }

    async def fetch_table_leaderboard(
        self, table_number: int, mode: str = "best"
    ) -> List[AttemptRecord]:
        data = await self._request(
            "GET", "/leaderboard", params={"table": table_number, "mode": mode}
        )
        with _malformed("GET /leaderboard"):
            return [record_from_api(row) for row in data.get("records") or []]

    async def fetch_global_mistakes(self) -> List[MistakeEntry]:
        data = await self._request("GET", "/mistakes")
        with _malformed("GET /mistakes"):
            return [
                MistakeEntry(
                    table=int(row["table"]),
                    multiplier=int(row["multiplier"]),
                    count=int(row["count"]),
                )
                for row in data.get("mistakes") or []
            ]

    # Fire-and-forget --------------------------------------------------------
    def dispatch_record(self, record: AttemptRecord) -> Dispatched:
        return self._dispatch(lambda: self.submit_record(record), "record submission")

    def dispatch_mistakes(self, mistakes: Iterable[Any]) -> Dispatched:
        pending = list(mistakes)
        return self._dispatch(lambda: self.submit_mistakes(pending), "mistake submission")

    def _dispatch(self, call: Callable[[], Awaitable[Any]], label: str) -> Dispatched:
        async def runner() -> None:
            try:
                await call()
            except (RemoteSyncError, ValidationError) as exc:
                logger.warning("Background %s dropped: %s", label, exc)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            thread = threading.Thread(
                target=asyncio.run, args=(runner(),), name=f"sync-{label}", daemon=True
            )
            thread.start()
            return thread

        task = loop.create_task(runner())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for in-flight background submissions, e.g. at shutdown."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["RemoteGateway", "record_from_api", "record_payload"]
