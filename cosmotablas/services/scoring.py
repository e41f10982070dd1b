"""Score function and the boundary checks shared by every entry point."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, Optional

from ..core.errors import ImplausibleDuration, ValidationError

STANDARD_TABLES = range(2, 10)
MULTIPLIERS = range(2, 10)
CHALLENGE_TABLE = 0

MIN_ELAPSED_MS = 3000
ERROR_PENALTY = 5
MAX_NAME_LENGTH = 15


def compute_score(elapsed_ms: float, error_count: int) -> int:
    """Lower-is-better points: whole seconds plus five per error.

    Seconds round half up, matching the game client, so a recomputed score
    agrees exactly with the one the client submits.
    """

    if isinstance(elapsed_ms, int):
        seconds = (elapsed_ms + 500) // 1000
    else:
        seconds = math.floor(elapsed_ms / 1000 + 0.5)
    return int(seconds) + int(error_count) * ERROR_PENALTY


def is_valid_question(table: Any, multiplier: Any) -> bool:
    """Whether a (table, multiplier) pair lies in the 2..9 x 2..9 grid."""

    return (
        _as_int(table) in STANDARD_TABLES and _as_int(multiplier) in MULTIPLIERS
    )


def validate_table(table_number: Any, *, allow_challenge: bool = False) -> int:
    value = _as_int(table_number)
    if value in STANDARD_TABLES or (allow_challenge and value == CHALLENGE_TABLE):
        return value
    raise ValidationError("Invalid table number")


def validate_duration(elapsed_ms: Any) -> None:
    if _as_number(elapsed_ms) is None or elapsed_ms < MIN_ELAPSED_MS:
        raise ImplausibleDuration()


def validate_error_count(error_count: Any) -> int:
    value = _as_int(error_count)
    if value is None or value < 0:
        raise ValidationError("Invalid error count")
    return value


@dataclass(frozen=True)
class Submission:
    """A client attempt that passed the server trust boundary."""

    user_id: str
    user_name: str
    table_number: int
    time_ms: int
    errors: int
    points: int


def parse_submission(body: Dict[str, Any]) -> Submission:
    """Validate a raw ``POST /records`` payload.

    Checks run in a fixed order so each rejection carries one reason. The
    claimed ``points`` is never corrected: a mismatch rejects the attempt.
    """

    user_id = body.get("userId")
    user_name = body.get("userName")
    table_number = body.get("tableNumber")
    time_ms = _as_number(body.get("timeMs"))
    errors = _as_number(body.get("errors"))
    points = _as_number(body.get("points"))

    if not user_id or not user_name or not table_number:
        raise ValidationError("Missing required fields")
    if time_ms is None or errors is None or points is None:
        raise ValidationError("Missing required fields")

    table = validate_table(table_number)

    if not isinstance(user_name, str):
        raise ValidationError("Invalid user name")
    name = user_name.strip()
    if not 1 <= len(name) <= MAX_NAME_LENGTH:
        raise ValidationError("Invalid user name")

    server_points = compute_score(time_ms, errors)
    if server_points != points:
        raise ValidationError("Points mismatch")

    validate_duration(time_ms)
    error_count = validate_error_count(errors)

    return Submission(
        user_id=str(user_id),
        user_name=name[:MAX_NAME_LENGTH],
        table_number=table,
        time_ms=int(time_ms),
        errors=error_count,
        points=server_points,
    )


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _as_int(value: Any) -> Optional[int]:
    number = _as_number(value)
    if number is None:
        return None
    if isinstance(number, int):
        return number
    if float(number).is_integer():
        return int(number)
    return None


__all__ = [
    "CHALLENGE_TABLE",
    "ERROR_PENALTY",
    "MAX_NAME_LENGTH",
    "MIN_ELAPSED_MS",
    "MULTIPLIERS",
    "STANDARD_TABLES",
    "Submission",
    "compute_score",
    "is_valid_question",
    "parse_submission",
    "validate_duration",
    "validate_error_count",
    "validate_table",
]
