from __future__ import annotations

from fastapi.testclient import TestClient

from sanboard.engine.board import STARTPOS_PLACEMENT
from sanboard.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_undo_restores_previous_snapshot() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    client.post(f"/api/games/{game_id}/move", json={"san": "d4"})
    client.post(f"/api/games/{game_id}/move", json={"san": "d5"})

    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 200
    state = r.json()
    assert state["ply"] == 1
    assert state["move_history"] == ["d4"]
    assert state["side_to_move"] == "b"
    assert state["last_move"] == "d2d4"

    r2 = client.post(f"/api/games/{game_id}/undo")
    assert r2.json()["fen"] == STARTPOS_PLACEMENT
    assert r2.json()["last_move"] is None


def test_undo_without_moves_is_400() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "no moves to undo"
