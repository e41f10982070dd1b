"""Score function and submission trust boundary."""

from __future__ import annotations

import pytest

from cosmotablas.core import ImplausibleDuration, ValidationError
from cosmotablas.services.scoring import compute_score, parse_submission


def _body(**overrides):
    body = {
        "userId": "player-1",
        "userName": "Ana",
        "tableNumber": 5,
        "timeMs": 10000,
        "errors": 1,
        "points": 15,
    }
    body.update(overrides)
    return body


class TestComputeScore:
    def test_seconds_plus_penalty(self):
        assert compute_score(8000, 2) == 18

    def test_half_second_rounds_up(self):
        assert compute_score(2500, 0) == 3
        assert compute_score(2499, 0) == 2

    def test_float_durations_round_like_integers(self):
        assert compute_score(12499.9, 0) == 12
        assert compute_score(12500.0, 1) == 18

    def test_zero_inputs(self):
        assert compute_score(0, 0) == 0


class TestParseSubmission:
    def test_accepts_matching_points(self):
        submission = parse_submission(_body())
        assert submission.points == 15
        assert submission.table_number == 5

    def test_rejects_points_mismatch(self):
        with pytest.raises(ValidationError) as info:
            parse_submission(_body(points=10))
        assert info.value.reason == "Points mismatch"

    def test_rejects_short_duration_even_when_points_match(self):
        with pytest.raises(ImplausibleDuration) as info:
            parse_submission(_body(timeMs=2999, errors=0, points=3))
        assert info.value.reason == "Invalid time"

    @pytest.mark.parametrize("field", ["userId", "userName", "tableNumber", "timeMs", "errors", "points"])
    def test_missing_field(self, field):
        body = _body()
        del body[field]
        with pytest.raises(ValidationError) as info:
            parse_submission(body)
        assert info.value.reason == "Missing required fields"

    def test_table_checked_before_name(self):
        with pytest.raises(ValidationError) as info:
            parse_submission(_body(tableNumber=10, userName="x" * 20))
        assert info.value.reason == "Invalid table number"

    def test_name_length_after_trim(self):
        with pytest.raises(ValidationError) as info:
            parse_submission(_body(userName="   "))
        assert info.value.reason == "Invalid user name"
        with pytest.raises(ValidationError):
            parse_submission(_body(userName="a" * 16))
        assert parse_submission(_body(userName="  Ana  ")).user_name == "Ana"

    def test_negative_errors_rejected(self):
        with pytest.raises(ValidationError) as info:
            parse_submission(_body(errors=-1, points=5))
        assert info.value.reason == "Invalid error count"

    def test_boolean_is_not_a_number(self):
        with pytest.raises(ValidationError) as info:
            parse_submission(_body(errors=True))
        assert info.value.reason == "Missing required fields"
