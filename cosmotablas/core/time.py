"""Clock helpers shared by the ledger and the server store."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def now_ms() -> int:
    return int(time.time() * 1000)


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to epoch milliseconds, reading naive values as UTC."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


__all__ = ["now_ms", "to_epoch_ms", "utcnow"]
