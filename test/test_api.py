"""Tests for the HTTP API."""

import threading
import time

import pytest
from fastapi.testclient import TestClient

from scorekeeper.api import main as api


@pytest.fixture
def client():
    api.matches.clear()
    yield TestClient(api.app)
    api.matches.clear()


@pytest.fixture
def match_id(client):
    response = client.post("/matches", json={
        "player1_name": "Alice",
        "player2_name": "Bob",
        "game_type": 301,
        "max_legs": 3,
    })
    assert response.status_code == 200
    return response.json()["match_id"]


def throw(client, match_id, *points):
    response = None
    for p in points:
        response = client.post(f"/matches/{match_id}/turns", json={"points": p})
        assert response.status_code == 200, response.text
    return response


def test_root(client):
    assert client.get("/").json()["message"] == "Darts Scorekeeper API"


def test_create_match_defaults(client):
    response = client.post("/matches", json={"player2_name": "  Bob "})
    assert response.status_code == 200
    body = response.json()
    assert [p["name"] for p in body["state"]["players"]] == ["Player 1", "Bob"]
    assert body["state"]["game_type"] == 501
    assert body["state"]["max_legs"] == 5
    assert body["summary"]["legs_needed"] == 3
    assert [e["type"] for e in body["events"]] == ["set_started", "leg_started"]


@pytest.mark.parametrize("payload", [{"game_type": 401}, {"max_legs": 0}])
def test_create_match_validation(client, payload):
    assert client.post("/matches", json=payload).status_code == 422


def test_add_turn(client, match_id):
    body = throw(client, match_id, 100).json()
    assert body["state"]["current_leg"]["turns"] == [
        {"id": 1, "player_id": 1, "points": 100, "running_score": 201}
    ]
    assert body["summary"]["current_player_name"] == "Bob"
    assert body["events"][0]["type"] == "turn_added"


@pytest.mark.parametrize("points", [-1, 181])
def test_turn_outside_dart_range(client, match_id, points):
    response = client.post(f"/matches/{match_id}/turns", json={"points": points})
    assert response.status_code == 422


def test_bust_is_400_and_state_unchanged(client, match_id):
    throw(client, match_id, 180, 0)
    response = client.post(f"/matches/{match_id}/turns", json={"points": 122})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "score_below_zero"

    summary = client.get(f"/matches/{match_id}").json()["summary"]
    assert summary["turn_count"] == 2
    assert summary["players"][0]["remaining"] == 121
    assert summary["current_player_name"] == "Alice"


def test_undo(client, match_id):
    throw(client, match_id, 100, 60)
    body = client.post(f"/matches/{match_id}/undo").json()
    assert body["summary"]["turn_count"] == 1
    assert body["summary"]["current_player_name"] == "Bob"
    assert body["events"][0]["type"] == "turn_removed"


def test_undo_without_turns(client, match_id):
    response = client.post(f"/matches/{match_id}/undo")
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "no_turns"


def test_leg_and_set_flow(client, match_id):
    response = client.post(f"/matches/{match_id}/next-leg")
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "leg_not_finished"

    body = throw(client, match_id, 180, 0, 121).json()
    assert [e["type"] for e in body["events"]] == ["turn_added", "leg_won"]
    assert client.get(f"/matches/{match_id}/available-actions").json() == {
        "action_types": ["start_next_leg", "reset_set"]
    }

    body = client.post(f"/matches/{match_id}/next-leg").json()
    assert body["summary"]["leg_number"] == 2

    body = throw(client, match_id, 180, 0, 121).json()
    assert [e["type"] for e in body["events"]] == ["turn_added", "leg_won", "set_won"]
    assert body["summary"]["set_finished"] is True
    assert body["summary"]["winner_name"] == "Alice"


def test_reset_and_rematch(client, match_id):
    throw(client, match_id, 180, 0, 121)
    body = client.post(f"/matches/{match_id}/reset").json()
    assert body["state"]["current_leg"] is None
    assert body["summary"]["current_player_name"] == "–"
    assert [p["legs_won"] for p in body["state"]["players"]] == [0, 0]

    body = client.post(f"/matches/{match_id}/rematch").json()
    assert body["summary"]["leg_number"] == 1
    assert [p["name"] for p in body["state"]["players"]] == ["Alice", "Bob"]
    assert body["state"]["game_type"] == 301


def test_list_and_delete(client, match_id):
    listed = client.get("/matches").json()["matches"]
    assert [m["match_id"] for m in listed] == [match_id]

    assert client.delete(f"/matches/{match_id}").json() == {"deleted": match_id}
    assert client.get(f"/matches/{match_id}").status_code == 404


def test_unknown_match(client):
    assert client.get("/matches/nope").status_code == 404
    assert client.post("/matches/nope/turns", json={"points": 60}).status_code == 404


def test_concurrent_turns_are_both_kept(client, match_id, monkeypatch):
    real_apply = api.apply_action

    def slow_apply(state, action):
        time.sleep(0.2)
        return real_apply(state, action)

    monkeypatch.setattr(api, "apply_action", slow_apply)
    statuses = []

    def post(points):
        response = client.post(f"/matches/{match_id}/turns", json={"points": points})
        statuses.append(response.status_code)

    workers = [threading.Thread(target=post, args=(p,)) for p in (60, 100)]
    for w in workers:
        w.start()
    for w in workers:
        w.join()

    assert statuses == [200, 200]
    turns = client.get(f"/matches/{match_id}").json()["state"]["current_leg"]["turns"]
    assert [t["id"] for t in turns] == [1, 2]
    assert [t["player_id"] for t in turns] == [1, 2]
    assert sorted(t["points"] for t in turns) == [60, 100]
    assert all(t["running_score"] == 301 - t["points"] for t in turns)


def test_engine_crash_is_json_500(match_id, monkeypatch):
    def broken_apply(state, action):
        raise RuntimeError("leg table corrupted")

    monkeypatch.setattr(api, "apply_action", broken_apply)
    client = TestClient(api.app, raise_server_exceptions=False)
    response = client.post(
        f"/matches/{match_id}/turns",
        json={"points": 60},
        headers={"origin": "http://localhost:5173"},
    )
    assert response.status_code == 500
    body = response.json()
    assert body["error_type"] == "RuntimeError"
    assert body["error"] == "leg table corrupted"
    assert body["detail"] == f"Scoring failed on POST /matches/{match_id}/turns"
    assert "traceback" not in body
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
