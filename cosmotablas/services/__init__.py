"""Service layer helpers."""

from .challenge import Question, select_challenge_questions
from .ledger import AttemptRecord, RecordResult, RecordsLedger
from .mistakes import MistakeAggregator, MistakeEntry
from .persistence import LocalStateStore
from .progress import LeaderboardView, PlayerProgress
from .scoring import CHALLENGE_TABLE, compute_score, parse_submission
from .sync import RemoteGateway

__all__ = [
    "CHALLENGE_TABLE",
    "AttemptRecord",
    "LeaderboardView",
    "LocalStateStore",
    "MistakeAggregator",
    "MistakeEntry",
    "PlayerProgress",
    "Question",
    "RecordResult",
    "RecordsLedger",
    "RemoteGateway",
    "compute_score",
    "parse_submission",
    "select_challenge_questions",
]
