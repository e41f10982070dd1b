"""Per-player tally of first-attempt mistakes."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .scoring import is_valid_question

Question = Tuple[int, int]


@dataclass(frozen=True)
class MistakeEntry:
    table: int
    multiplier: int
    count: int

    def to_dict(self) -> Dict[str, int]:
        return {"table": self.table, "multiplier": self.multiplier, "count": self.count}


def question_pair(mistake: Any) -> Tuple[Any, Any]:
    if isinstance(mistake, Mapping):
        return mistake.get("table"), mistake.get("multiplier")
    if isinstance(mistake, (tuple, list)) and len(mistake) == 2:
        return mistake[0], mistake[1]
    return getattr(mistake, "table", None), getattr(mistake, "multiplier", None)


class MistakeAggregator:
    """Counts only ever grow; entries persist across sessions."""

    def __init__(self) -> None:
        self._tallies: Dict[str, Dict[Question, int]] = {}
        self._lock = threading.Lock()

    def record_mistakes(self, player_id: str, mistakes: Iterable[Any]) -> int:
        """Add one to each valid pair; out-of-grid pairs are dropped.

        Accepts ``(table, multiplier)`` tuples, ``{"table", "multiplier"}``
        dicts or objects with those attributes. Returns how many counted.
        """

        accepted: List[Question] = []
        for mistake in mistakes:
            table, multiplier = question_pair(mistake)
            if is_valid_question(table, multiplier):
                accepted.append((int(table), int(multiplier)))
        if not accepted:
            return 0
        with self._lock:
            tally = self._tallies.setdefault(player_id, {})
            for key in accepted:
                tally[key] = tally.get(key, 0) + 1
        return len(accepted)

    def top_mistakes(self, player_id: str, limit: int = 10) -> List[MistakeEntry]:
        """Most-missed questions first; ties keep first-recorded order."""

        with self._lock:
            tally = dict(self._tallies.get(player_id, {}))
        entries = [
            MistakeEntry(table=table, multiplier=multiplier, count=count)
            for (table, multiplier), count in tally.items()
        ]
        entries.sort(key=lambda entry: -entry.count)
        return entries[:limit]

    def snapshot(self) -> Dict[str, List[List[int]]]:
        with self._lock:
            return {
                player: [[t, m, count] for (t, m), count in tally.items()]
                for player, tally in self._tallies.items()
            }

    def restore(self, data: Mapping[str, Iterable[Iterable[int]]]) -> None:
        if not isinstance(data, Mapping):
            raise ValueError("Mistakes snapshot must be a mapping of player to rows")
        tallies: Dict[str, Dict[Question, int]] = {}
        for player, rows in data.items():
            if not isinstance(rows, list):
                raise ValueError(f"Mistake rows for {player!r} must be a list")
            tally: Dict[Question, int] = {}
            for table, multiplier, count in rows:
                if is_valid_question(table, multiplier) and int(count) > 0:
                    tally[(int(table), int(multiplier))] = int(count)
            tallies[player] = tally
        with self._lock:
            self._tallies = tallies

    def reset(self) -> None:
        with self._lock:
            self._tallies = {}


__all__ = ["MistakeAggregator", "MistakeEntry", "question_pair"]
