"""Question selection for remedial challenge sessions."""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

CHALLENGE_SLOTS = 8


@dataclass(frozen=True)
class Question:
    id: str
    table: int
    multiplier: int
    correct_answer: int


def select_challenge_questions(
    mistakes: Sequence[Any],
    slot_count: int = CHALLENGE_SLOTS,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """Fill ``slot_count`` questions from the most-missed pairs.

    ``mistakes`` must already be ranked (e.g. ``top_mistakes`` output). With
    fewer weak spots than slots the pool repeats round-robin, then the whole
    set is shuffled. An empty ranking means no challenge is available.
    """

    if not mistakes or slot_count <= 0:
        return []

    pool = list(mistakes[:slot_count])
    filled = list(itertools.islice(itertools.cycle(pool), slot_count))
    (rng or random).shuffle(filled)

    return [
        Question(
            id=f"{entry.table}-{entry.multiplier}-{index}",
            table=entry.table,
            multiplier=entry.multiplier,
            correct_answer=entry.table * entry.multiplier,
        )
        for index, entry in enumerate(filled)
    ]


__all__ = ["CHALLENGE_SLOTS", "Question", "select_challenge_questions"]
