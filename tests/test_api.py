"""HTTP endpoints for records, leaderboards and mistakes."""

from __future__ import annotations

import time

import pytest


def submit(client, user_id, table, time_ms, errors, points=None, name=None):
    if points is None:
        points = round(time_ms / 1000) + errors * 5
    return client.post(
        "/records",
        json={
            "userId": user_id,
            "userName": name or user_id.title(),
            "tableNumber": table,
            "timeMs": time_ms,
            "errors": errors,
            "points": points,
        },
    )


class TestRecords:
    def test_accepts_valid_submission(self, client):
        response = submit(client, "ana", 5, 10000, 1, points=15)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert isinstance(body["id"], int)

    def test_rejects_points_mismatch(self, client):
        response = submit(client, "ana", 5, 10000, 1, points=10)

        assert response.status_code == 400
        assert response.json() == {"error": "Points mismatch"}

    def test_rejects_implausible_duration(self, client):
        response = submit(client, "ana", 5, 2999, 0, points=3)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid time"}

    @pytest.mark.parametrize(
        "payload, reason",
        [
            ({}, "Missing required fields"),
            ({"userId": "a", "userName": "A", "tableNumber": 5, "timeMs": 9000}, "Missing required fields"),
            (
                {"userId": "a", "userName": "A", "tableNumber": 11, "timeMs": 9000, "errors": 0, "points": 9},
                "Invalid table number",
            ),
            (
                {"userId": "a", "userName": "x" * 16, "tableNumber": 5, "timeMs": 9000, "errors": 0, "points": 9},
                "Invalid user name",
            ),
        ],
    )
    def test_validation_reasons(self, client, payload, reason):
        response = client.post("/records", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": reason}

    def test_non_object_body_counts_as_missing(self, client):
        response = client.post("/records", content=b"[1, 2]", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_unsupported_method(self, client):
        response = client.put("/records", json={})

        assert response.status_code == 405
        assert "error" in response.json()

    def test_plain_options_is_empty_ok(self, client):
        response = client.options("/records")

        assert response.status_code == 200
        assert response.content == b""

    def test_cors_preflight(self, client):
        response = client.options(
            "/records",
            headers={"Origin": "https://game.example", "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


class TestLeaderboard:
    def test_end_to_end_scenario(self, client):
        assert submit(client, "a", 5, 12000, 0, points=12).status_code == 201
        assert submit(client, "b", 5, 9000, 1, points=14).status_code == 201
        assert submit(client, "a", 5, 20000, 0, points=20).status_code == 201

        best = client.get("/leaderboard", params={"table": 5}).json()["records"]
        assert [(r["user_id"], r["points"]) for r in best] == [("a", 12), ("b", 14)]

        every = client.get("/leaderboard", params={"table": 5, "mode": "all"}).json()["records"]
        assert [r["points"] for r in every] == [12, 14, 20]

    def test_record_shape(self, client):
        submit(client, "ana", 3, 8000, 2)

        record = client.get("/leaderboard", params={"table": 3}).json()["records"][0]

        assert set(record) == {"user_id", "user_name", "table_number", "time_ms", "errors", "points", "date"}
        assert record["points"] == 18
        assert abs(record["date"] - time.time() * 1000) < 60_000

    def test_top_ten_only(self, client):
        for i in range(12):
            submit(client, f"p{i}", 4, 10000 + i * 1000, 0)

        best = client.get("/leaderboard", params={"table": 4}).json()["records"]

        assert len(best) == 10
        assert best[0]["user_id"] == "p0"

    def test_all_tables_view_is_cacheable(self, client):
        submit(client, "a", 2, 9000, 0)
        submit(client, "b", 7, 9000, 0)

        response = client.get("/leaderboard")

        assert response.status_code == 200
        assert set(response.json()["tables"]) == {"2", "7"}
        assert response.headers["cache-control"] == "s-maxage=30, stale-while-revalidate=60"

    def test_empty_store(self, client):
        assert client.get("/leaderboard").json() == {"tables": {}}

    @pytest.mark.parametrize("table", ["1", "10", "abc", "5.5"])
    def test_invalid_table_param(self, client, table):
        response = client.get("/leaderboard", params={"table": table})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid table number"}


class TestMistakes:
    def test_filters_invalid_entries(self, client):
        response = client.post(
            "/mistakes",
            json={"mistakes": [{"table": 7, "multiplier": 8}, {"table": 1, "multiplier": 8}, {"table": "7"}]},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 1}

    def test_caps_batch_at_twenty(self, client):
        batch = [{"table": 6, "multiplier": 7}] * 25

        response = client.post("/mistakes", json={"mistakes": batch})

        assert response.json()["count"] == 20
        assert client.get("/mistakes").json()["mistakes"] == [{"table": 6, "multiplier": 7, "count": 20}]

    def test_no_valid_entries(self, client):
        response = client.post("/mistakes", json={"mistakes": [{"table": 12, "multiplier": 3}]})

        assert response.status_code == 400
        assert response.json() == {"error": "No valid mistakes"}

    def test_missing_array(self, client):
        assert client.post("/mistakes", json={}).status_code == 400

    def test_top_mistakes_sorted_by_count(self, client):
        client.post("/mistakes", json={"mistakes": [{"table": 3, "multiplier": 4}]})
        client.post(
            "/mistakes",
            json={"mistakes": [{"table": 8, "multiplier": 9}, {"table": 8, "multiplier": 9}]},
        )

        response = client.get("/mistakes")

        assert response.json()["mistakes"] == [
            {"table": 8, "multiplier": 9, "count": 2},
            {"table": 3, "multiplier": 4, "count": 1},
        ]
        assert response.headers["cache-control"].startswith("s-maxage=30")

    def test_unsupported_method(self, client):
        assert client.delete("/mistakes").status_code == 405


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
