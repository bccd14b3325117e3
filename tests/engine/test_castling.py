from __future__ import annotations

from sanboard.engine.board import WK, WR, Board
from sanboard.engine.move import MoveFlag
from sanboard.engine.movegen import generate_moves
from sanboard.engine.piece import Color
from sanboard.engine.square import Square


def moves_by_uci(b: Board, color: Color):
    return {m.to_uci(): m for m in generate_moves(b, color)}


def test_white_castling_available_when_path_clear() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R")
    ms = moves_by_uci(b, Color.WHITE)
    assert ms["e1g1"].flag is MoveFlag.KING_SIDE_CASTLING
    assert ms["e1c1"].flag is MoveFlag.QUEEN_SIDE_CASTLING


def test_black_castling_available_when_path_clear() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R")
    ms = moves_by_uci(b, Color.BLACK)
    assert ms["e8g8"].flag is MoveFlag.KING_SIDE_CASTLING
    assert ms["e8c8"].flag is MoveFlag.QUEEN_SIDE_CASTLING


def test_castling_blocked_by_pieces_between() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/RN2K1NR")
    ms = moves_by_uci(b, Color.WHITE)
    assert "e1g1" not in ms
    assert "e1c1" not in ms


def test_castling_needs_rook_on_home_square() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/4K2R")
    ms = moves_by_uci(b, Color.WHITE)
    assert "e1g1" in ms
    assert "e1c1" not in ms


def test_castling_ignores_attacked_squares() -> None:
    # Rook on e8 gives check; generation stays pseudo-legal
    b = Board.from_fen("4r2k/8/8/8/8/8/8/R3K2R")
    assert "e1g1" in moves_by_uci(b, Color.WHITE)


def test_castling_moves_rook_correctly() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R")
    mv = moves_by_uci(b, Color.WHITE)["e1g1"]
    b.make_move(mv)
    assert b.bb[WR].contains(Square.parse("f1"))
    assert not b.bb[WR].contains(Square.parse("h1"))
    assert b.bb[WK].contains(Square.parse("g1"))
    assert b.to_fen() == "r3k2r/8/8/8/8/8/8/R4RK1"


def test_queen_side_castling_moves_rook_to_d_file() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R")
    mv = moves_by_uci(b, Color.BLACK)["e8c8"]
    assert b.apply(mv).to_fen() == "2kr3r/8/8/8/8/8/8/R3K2R"
