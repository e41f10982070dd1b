"""Session-end entry point used by the game front end."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..core.config import LOCAL_STATE_PATH
from ..core.errors import RemoteSyncError
from .challenge import CHALLENGE_SLOTS, Question, select_challenge_questions
from .ledger import AttemptRecord, RecordResult, RecordsLedger
from .mistakes import MistakeAggregator
from .persistence import LocalStateStore
from .scoring import STANDARD_TABLES
from .sync import RemoteGateway

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardView:
    tables: Dict[int, List[AttemptRecord]] = field(default_factory=dict)
    degraded: bool = False


class PlayerProgress:
    """Owns the local ledger and mistake tally for one process.

    Local state is the source of truth; the gateway is an eventually
    consistent mirror that never blocks or rolls back a local update.
    """

    def __init__(
        self,
        ledger: Optional[RecordsLedger] = None,
        mistakes: Optional[MistakeAggregator] = None,
        gateway: Optional[RemoteGateway] = None,
        store: Optional[LocalStateStore] = None,
    ) -> None:
        self.ledger = ledger or RecordsLedger()
        self.mistakes = mistakes or MistakeAggregator()
        self.gateway = gateway
        self.store = store

    @classmethod
    def from_config(cls, sync: bool = True) -> "PlayerProgress":
        """Build the process-wide instance from settings and load saved state."""

        progress = cls(
            gateway=RemoteGateway() if sync else None,
            store=LocalStateStore(LOCAL_STATE_PATH),
        )
        progress.load()
        return progress

    def load(self) -> bool:
        """Restore saved state; a missing or unreadable snapshot starts fresh."""

        if self.store is None:
            return False
        document = self.store.load()
        if document is None:
            return False
        try:
            self.ledger.restore(document.get("records") or {})
            self.mistakes.restore(document.get("mistakes") or {})
        except (KeyError, TypeError, ValueError):
            logger.exception("Discarding corrupt local state")
            self.ledger.reset()
            self.mistakes.reset()
            return False
        return True

    def save(self) -> bool:
        if self.store is None:
            return False
        return self.store.save(self.ledger.snapshot(), self.mistakes.snapshot())

    def reset(self) -> None:
        self.ledger.reset()
        self.mistakes.reset()
        if self.store is not None:
            self.store.clear()

    def complete_session(
        self,
        player_id: str,
        player_name: str,
        table_number: int,
        elapsed_ms: int,
        mistakes: Iterable[Any] = (),
    ) -> RecordResult:
        """Record a finished session locally, then mirror it in the background."""

        missed = list(mistakes)
        result = self.ledger.add_record(
            player_id, player_name, table_number, elapsed_ms, len(missed)
        )
        self.mistakes.record_mistakes(player_id, missed)
        self.save()

        if self.gateway is not None:
            if table_number in STANDARD_TABLES:
                if result.record is not None:
                    self.gateway.dispatch_record(result.record)
            if missed:
                self.gateway.dispatch_mistakes(missed)
        return result

    def challenge_questions(
        self, player_id: str, slot_count: int = CHALLENGE_SLOTS
    ) -> List[Question]:
        return select_challenge_questions(
            self.mistakes.top_mistakes(player_id, limit=slot_count), slot_count
        )

    async def global_leaderboard(self) -> LeaderboardView:
        """Remote best-per-player boards, or local ones flagged as degraded."""

        if self.gateway is not None:
            try:
                return LeaderboardView(await self.gateway.fetch_global_leaderboard())
            except RemoteSyncError as exc:
                logger.warning("Global leaderboard unavailable, showing local: %s", exc)
        local = {
            table: self.ledger.best_per_player(table, limit=10)
            for table in self.ledger.tables_with_records()
        }
        return LeaderboardView(local, degraded=True)


__all__ = ["LeaderboardView", "PlayerProgress"]
