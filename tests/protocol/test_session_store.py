from __future__ import annotations

import threading

import pytest

from sanboard.engine.game import GameState
from sanboard.notation.replay import replay_game
from sanboard.notation.san import parse_san
from sanboard.protocol.http.session import GameSession, InMemorySessionStore


def test_create_get_set_delete() -> None:
    store = InMemorySessionStore()
    gid = store.create()
    session = store.get(gid)
    assert session is not None and session.ply == 0
    assert len(store) == 1

    replacement = GameSession.new()
    store.set(gid, replacement)
    assert store.get(gid) is replacement

    assert store.delete(gid)
    assert store.get(gid) is None
    assert not store.delete(gid)
    with pytest.raises(KeyError):
        store.set(gid, replacement)


def test_concurrent_creates_produce_unique_ids() -> None:
    store = InMemorySessionStore()
    ids: list[str] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(50):
            gid = store.create()
            with lock:
                ids.append(gid)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(ids) == 200
    assert len(set(ids)) == 200
    assert len(store) == 200


def test_session_push_and_pop() -> None:
    session = GameSession.new()
    state = session.state
    move = parse_san("e4", state.board, state.side_to_move)
    session.push("e4", move, state.apply_move(move))
    assert session.ply == 1
    assert session.to_parsed_game().moves == ["e4"]
    session.pop()
    assert session.ply == 0
    with pytest.raises(ValueError):
        session.pop()


def test_session_from_failed_replay_drops_result() -> None:
    replay = replay_game("1. e4 Nf3 1-0")
    session = GameSession.from_replay(replay)
    assert session.sans == ["e4"]
    assert session.result is None
    assert session.state == replay.final_state
    assert isinstance(session.history[0], GameState)


def test_fen_tag_fills_active_colour_and_keeps_tail() -> None:
    from sanboard.engine.piece import Color
    from sanboard.protocol.http.session import fen_tag

    state = GameState.new("4k3/8/8/8/8/8/4P3/4K3", Color.BLACK)
    assert fen_tag(state) == "4k3/8/8/8/8/8/4P3/4K3 b - - 0 1"
    assert fen_tag(state, "4k3/8/8/8/8/8/4P3/4K3 w K - 3 20") == "4k3/8/8/8/8/8/4P3/4K3 b K - 3 20"


def test_default_start_exports_without_fen_tag() -> None:
    assert "FEN" not in GameSession.new().to_parsed_game().tags
