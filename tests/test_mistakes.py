"""Mistake tallies and challenge question selection."""

from __future__ import annotations

import random
from collections import Counter

from cosmotablas.services import MistakeAggregator, MistakeEntry, select_challenge_questions


class TestMistakeAggregator:
    def test_counts_accumulate_across_calls(self):
        tally = MistakeAggregator()
        tally.record_mistakes("a", [(7, 8), (6, 7)])
        tally.record_mistakes("a", [(7, 8), {"table": 7, "multiplier": 8}])

        top = tally.top_mistakes("a")

        assert top[0] == MistakeEntry(table=7, multiplier=8, count=3)
        assert top[1] == MistakeEntry(table=6, multiplier=7, count=1)

    def test_invalid_pairs_are_dropped(self):
        tally = MistakeAggregator()
        accepted = tally.record_mistakes("a", [(1, 5), (5, 10), (3, 3), ("x", 2)])

        assert accepted == 1
        assert tally.top_mistakes("a") == [MistakeEntry(3, 3, 1)]

    def test_unknown_player_has_no_mistakes(self):
        assert MistakeAggregator().top_mistakes("nobody") == []

    def test_players_are_tracked_separately(self):
        tally = MistakeAggregator()
        tally.record_mistakes("a", [(4, 4)])
        tally.record_mistakes("b", [(9, 9)])

        assert [(e.table, e.multiplier) for e in tally.top_mistakes("b")] == [(9, 9)]

    def test_ties_keep_first_recorded_order_and_limit(self):
        tally = MistakeAggregator()
        tally.record_mistakes("a", [(2, 3), (2, 4), (2, 5)])

        top = tally.top_mistakes("a", limit=2)

        assert [(e.table, e.multiplier) for e in top] == [(2, 3), (2, 4)]

    def test_snapshot_restores_counts(self):
        tally = MistakeAggregator()
        tally.record_mistakes("a", [(8, 7), (8, 7)])

        restored = MistakeAggregator()
        restored.restore(tally.snapshot())

        assert restored.top_mistakes("a") == [MistakeEntry(8, 7, 2)]


class TestChallengeSelection:
    weak_spots = [MistakeEntry(7, 8, 5), MistakeEntry(6, 9, 3), MistakeEntry(4, 7, 1)]

    def test_fills_slots_cyclically(self):
        questions = select_challenge_questions(self.weak_spots, 8, rng=random.Random(3))

        assert len(questions) == 8
        counts = Counter((q.table, q.multiplier) for q in questions)
        assert set(counts) == {(7, 8), (6, 9), (4, 7)}
        assert sorted(counts.values()) == [2, 3, 3]
        assert all(q.correct_answer == q.table * q.multiplier for q in questions)
        assert len({q.id for q in questions}) == 8

    def test_output_is_shuffled(self):
        cyclic = [(e.table, e.multiplier) for e in (self.weak_spots * 3)[:8]]
        orders = [
            [(q.table, q.multiplier) for q in select_challenge_questions(
                self.weak_spots, 8, rng=random.Random(seed)
            )]
            for seed in range(10)
        ]
        assert any(order != cyclic for order in orders)

    def test_empty_ranking_means_no_challenge(self):
        assert select_challenge_questions([], 8) == []

    def test_only_top_entries_are_used(self):
        ranking = [MistakeEntry(t, 2, 10 - t) for t in range(2, 10)]
        questions = select_challenge_questions(ranking, 4, rng=random.Random(0))

        assert {q.table for q in questions} == {2, 3, 4, 5}
