"""Per-table attempt ledger with leaderboard views.

Each table keeps at most ``LEDGER_CAPACITY`` attempts. Records order by
``(score, recorded_at, sequence)`` so equal scores resolve in favour of the
attempt inserted first, both in the views and when evicting.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..core.time import now_ms
from .scoring import (
    MAX_NAME_LENGTH,
    compute_score,
    validate_duration,
    validate_error_count,
    validate_table,
)

logger = logging.getLogger(__name__)

LEDGER_CAPACITY = 100


@dataclass(frozen=True)
class AttemptRecord:
    """One completed quiz attempt. Never mutated after creation."""

    player_id: str
    player_name: str
    table_number: int
    elapsed_ms: int
    error_count: int
    score: int
    recorded_at: int
    sequence: int = 0

    def sort_key(self) -> tuple[int, int, int]:
        return (self.score, self.recorded_at, self.sequence)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttemptRecord":
        record = cls(
            player_id=str(data["player_id"]),
            player_name=str(data["player_name"]),
            table_number=int(data["table_number"]),
            elapsed_ms=int(data["elapsed_ms"]),
            error_count=int(data["error_count"]),
            score=int(data["score"]),
            recorded_at=int(data["recorded_at"]),
            sequence=int(data.get("sequence", 0)),
        )
        if record.score != compute_score(record.elapsed_ms, record.error_count):
            raise ValueError(
                f"Stored score {record.score} does not match its duration and errors"
            )
        return record


@dataclass(frozen=True)
class RecordResult:
    """Outcome of inserting an attempt, as shown on the celebration screen."""

    rank: int
    total_players: int
    is_new_personal_best: bool
    is_absolute_record: bool
    score: int
    record: Optional[AttemptRecord] = field(default=None, compare=False, repr=False)


class TableLedger:
    """Attempts for a single table number."""

    def __init__(self, table_number: int, capacity: int = LEDGER_CAPACITY) -> None:
        self.table_number = table_number
        self.capacity = capacity
        self.lock = threading.Lock()
        self._records: List[AttemptRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def personal_best(self, player_id: str) -> Optional[int]:
        scores = [r.score for r in self._records if r.player_id == player_id]
        return min(scores) if scores else None

    def append(self, record: AttemptRecord) -> List[AttemptRecord]:
        """Add a record and return whatever the capacity bound evicted."""

        self._records.append(record)
        if len(self._records) <= self.capacity:
            return []
        self._records.sort(key=AttemptRecord.sort_key)
        evicted = self._records[self.capacity :]
        del self._records[self.capacity :]
        return evicted

    def ranked(self) -> List[AttemptRecord]:
        return sorted(self._records, key=AttemptRecord.sort_key)

    def best_per_player(self) -> List[AttemptRecord]:
        seen = set()
        best: List[AttemptRecord] = []
        for record in self.ranked():
            if record.player_id in seen:
                continue
            seen.add(record.player_id)
            best.append(record)
        return best

    def rank_of(self, player_id: str) -> int:
        for index, record in enumerate(self.best_per_player()):
            if record.player_id == player_id:
                return index + 1
        return 0


class RecordsLedger:
    """Local records store, owned by one process and passed to collaborators."""

    def __init__(
        self,
        capacity: int = LEDGER_CAPACITY,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.capacity = capacity
        self._clock = clock
        self._tables: Dict[int, TableLedger] = {}
        self._registry_lock = threading.Lock()
        self._sequence = itertools.count(1)

    def _table(self, table_number: int, create: bool = False) -> Optional[TableLedger]:
        with self._registry_lock:
            ledger = self._tables.get(table_number)
            if ledger is None and create:
                ledger = TableLedger(table_number, self.capacity)
                self._tables[table_number] = ledger
            return ledger

    def add_record(
        self,
        player_id: str,
        player_name: str,
        table_number: int,
        elapsed_ms: int,
        error_count: int,
    ) -> RecordResult:
        """Record a finished attempt and report where it landed.

        Raises ``ValidationError`` for an unknown table or a negative error
        count and ``ImplausibleDuration`` for attempts under three seconds.
        """

        table = validate_table(table_number, allow_challenge=True)
        validate_duration(elapsed_ms)
        errors = validate_error_count(error_count)
        score = compute_score(elapsed_ms, errors)

        ledger = self._table(table, create=True)
        with ledger.lock:
            previous_best = ledger.personal_best(player_id)
            improved = previous_best is None or score < previous_best
            record = AttemptRecord(
                player_id=player_id,
                player_name=(player_name or "").strip()[:MAX_NAME_LENGTH],
                table_number=table,
                elapsed_ms=int(elapsed_ms),
                error_count=errors,
                score=score,
                recorded_at=self._clock(),
                sequence=next(self._sequence),
            )
            evicted = ledger.append(record)
            if record in evicted:
                improved = False
            if evicted:
                logger.debug(
                    "Table %s over capacity, evicted %d record(s)", table, len(evicted)
                )
            best = ledger.best_per_player()

        rank = next(
            (i + 1 for i, r in enumerate(best) if r.player_id == player_id), 0
        )
        return RecordResult(
            rank=rank,
            total_players=len(best),
            is_new_personal_best=improved,
            is_absolute_record=rank == 1,
            score=score,
            record=record,
        )

    def get_rank(self, table_number: int, player_id: str) -> int:
        ledger = self._table(table_number)
        if ledger is None:
            return 0
        with ledger.lock:
            return ledger.rank_of(player_id)

    def best_per_player(
        self, table_number: int, limit: Optional[int] = None
    ) -> List[AttemptRecord]:
        """One record per player, best first."""

        ledger = self._table(table_number)
        if ledger is None:
            return []
        with ledger.lock:
            return _cap(ledger.best_per_player(), limit)

    def all_attempts(
        self, table_number: int, limit: Optional[int] = None
    ) -> List[AttemptRecord]:
        """Every stored attempt, best first; players may repeat."""

        ledger = self._table(table_number)
        if ledger is None:
            return []
        with ledger.lock:
            return _cap(ledger.ranked(), limit)

    def top_by_time(self, table_number: int, limit: int = 3) -> List[AttemptRecord]:
        return self._sorted_by(
            table_number, lambda r: (r.elapsed_ms, r.recorded_at, r.sequence), limit
        )

    def top_by_errors(self, table_number: int, limit: int = 3) -> List[AttemptRecord]:
        return self._sorted_by(
            table_number,
            lambda r: (r.error_count, r.elapsed_ms, r.recorded_at, r.sequence),
            limit,
        )

    def _sorted_by(
        self, table_number: int, key: Callable[[AttemptRecord], Any], limit: int
    ) -> List[AttemptRecord]:
        ledger = self._table(table_number)
        if ledger is None:
            return []
        with ledger.lock:
            return sorted(ledger.ranked(), key=key)[:limit]

    def tables_with_records(self) -> List[int]:
        with self._registry_lock:
            ledgers = list(self._tables.values())
        return sorted(ledger.table_number for ledger in ledgers if len(ledger))

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """JSON-safe copy of every table, keyed by table number."""

        data: Dict[str, List[Dict[str, Any]]] = {}
        for table in self.tables_with_records():
            data[str(table)] = [r.to_dict() for r in self.all_attempts(table)]
        return data

    def restore(self, data: Dict[str, Iterable[Dict[str, Any]]]) -> None:
        """Replace current state with a snapshot, re-checking every score.

        Rows go through the same table and duration checks as ``add_record``;
        any malformed input raises ``ValueError`` and leaves state untouched.
        """

        if not isinstance(data, Mapping):
            raise ValueError("Records snapshot must be a mapping of table to rows")
        tables: Dict[int, TableLedger] = {}
        highest = 0
        for key, rows in data.items():
            table = validate_table(int(key), allow_challenge=True)
            if not isinstance(rows, list):
                raise ValueError(f"Rows for table {key} must be a list")
            ledger = TableLedger(table, self.capacity)
            for row in rows:
                if not isinstance(row, Mapping):
                    raise ValueError(f"Malformed record in table {key}")
                record = AttemptRecord.from_dict(row)
                if record.table_number != table:
                    raise ValueError(
                        f"Record for table {record.table_number} filed under {key}"
                    )
                validate_duration(record.elapsed_ms)
                validate_error_count(record.error_count)
                highest = max(highest, record.sequence)
                ledger.append(record)
            tables[ledger.table_number] = ledger
        with self._registry_lock:
            self._tables = tables
            self._sequence = itertools.count(highest + 1)

    def reset(self) -> None:
        with self._registry_lock:
            self._tables = {}


def _cap(records: List[AttemptRecord], limit: Optional[int]) -> List[AttemptRecord]:
    return records if limit is None else records[:limit]


__all__ = [
    "LEDGER_CAPACITY",
    "AttemptRecord",
    "RecordResult",
    "RecordsLedger",
    "TableLedger",
]
