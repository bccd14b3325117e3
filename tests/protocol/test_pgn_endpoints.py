from __future__ import annotations

from fastapi.testclient import TestClient

from sanboard.protocol.http.app import create_app

OPERA = """[Event "Paris"]
[White "Morphy"]
[Black "Duke Karl / Count Isouard"]
[Result "1-0"]

1. e4 e5 2. Nf3 d6 3. d4 Bg4 4. dxe5 Bxf3 5. Qxf3 dxe5 6. Bc4 Nf6
7. Qb3 Qe7 8. Nc3 c6 9. Bg5 b5 10. Nxb5 cxb5 11. Bxb5+ Nbd7
12. O-O-O Rd8 13. Rxd7 Rxd7 14. Rd1 Qe6 15. Bxd7+ Nxd7 16. Qb8+ Nxb8
17. Rd8# 1-0
"""


def _client() -> TestClient:
    return TestClient(create_app())


def test_load_pgn_replays_whole_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/pgn", json={"pgn": OPERA})
    assert r.status_code == 200
    state = r.json()
    assert state["error"] is None
    assert state["ply"] == 33
    assert state["result"] == "1-0"
    assert state["tags"]["White"] == "Morphy"
    assert state["move_history"][22] == "O-O-O"
    assert state["pieces"]["d8"] == "R"


def test_export_pgn_after_load() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    client.post(f"/api/games/{game_id}/pgn", json={"pgn": OPERA})
    r = client.get(f"/api/games/{game_id}/pgn")
    assert r.status_code == 200
    text = r.json()["pgn"]
    assert text.startswith('[Black "Duke Karl / Count Isouard"]')
    assert "\n\n1. e4 e5 2. Nf3 d6" in text
    assert text.endswith("17. Rd8 1-0")


def test_load_pgn_with_bad_token_keeps_partial_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/pgn", json={"pgn": "1. e4 e5 2. Nf3 Nf3 3. Bc4 *"})
    assert r.status_code == 200
    state = r.json()
    assert state["ply"] == 3
    assert state["result"] is None
    assert state["move_history"] == ["e4", "e5", "Nf3"]
    err = state["error"]
    assert err["ply"] == 3
    assert err["token"] == "Nf3"
    assert err["code"] == "no_legal_candidate"

    # Play continues from the last good position
    r2 = client.post(f"/api/games/{game_id}/move", json={"san": "Nc6"})
    assert r2.status_code == 200
    assert r2.json()["ply"] == 4


def test_export_pgn_of_played_moves() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    for san in ("e4", "c5", "Nf3"):
        client.post(f"/api/games/{game_id}/move", json={"san": san})
    r = client.get(f"/api/games/{game_id}/pgn")
    assert r.json()["pgn"] == "1. e4 c5 2. Nf3"


def test_pgn_endpoints_unknown_game_404() -> None:
    client = _client()
    assert client.get("/api/games/missing/pgn").status_code == 404
    r = client.post("/api/games/missing/pgn", json={"pgn": "1. e4 *"})
    assert r.status_code == 404


def test_black_first_game_round_trips_through_pgn() -> None:
    client = _client()
    game_id = client.post("/api/games", json={"side_to_move": "b"}).json()["game_id"]
    for san in ("e5", "e4"):
        assert client.post(f"/api/games/{game_id}/move", json={"san": san}).status_code == 200
    before = client.get(f"/api/games/{game_id}/state").json()

    text = client.get(f"/api/games/{game_id}/pgn").json()["pgn"]
    assert '[FEN "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR b - - 0 1"]' in text
    assert '[SetUp "1"]' in text
    assert text.endswith("1... e5 2. e4")

    other = client.post("/api/games").json()["game_id"]
    state = client.post(f"/api/games/{other}/pgn", json={"pgn": text}).json()
    assert state["error"] is None
    assert state["ply"] == 2
    assert state["fen"] == before["fen"]
    assert state["side_to_move"] == before["side_to_move"] == "b"


def test_placement_only_fen_exports_active_colour() -> None:
    client = _client()
    body = {"fen": "4k3/8/8/8/8/8/4P3/4K3", "side_to_move": "b"}
    game_id = client.post("/api/games", json=body).json()["game_id"]
    for san in ("Kd8", "e4"):
        client.post(f"/api/games/{game_id}/move", json={"san": san})

    text = client.get(f"/api/games/{game_id}/pgn").json()["pgn"]
    assert '[FEN "4k3/8/8/8/8/8/4P3/4K3 b - - 0 1"]' in text

    other = client.post("/api/games").json()["game_id"]
    state = client.post(f"/api/games/{other}/pgn", json={"pgn": text}).json()
    assert state["error"] is None
    assert state["pieces"] == {"d8": "k", "e4": "P", "e1": "K"}
