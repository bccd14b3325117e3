from __future__ import annotations

from sanboard.engine.board import Board
from sanboard.engine.move import Move, MoveFlag
from sanboard.engine.movegen import generate_moves, moves_from
from sanboard.engine.piece import Color, Piece, PieceType
from sanboard.engine.square import Square


def test_white_en_passant_generated_when_enemy_pawn_is_adjacent() -> None:
    b = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    ep = [m for m in moves_from(b, Square.parse("e5")) if m.flag is MoveFlag.EN_PASSANT_CAPTURE]
    assert len(ep) == 1
    assert ep[0].to_uci() == "e5d6"
    assert ep[0].captured == Piece(PieceType.PAWN, Color.BLACK)


def test_black_en_passant_generated_on_fourth_rank() -> None:
    b = Board.from_fen("4k3/8/8/8/3Pp3/8/8/4K3")
    ucis = {m.to_uci() for m in generate_moves(b, Color.BLACK)
            if m.flag is MoveFlag.EN_PASSANT_CAPTURE}
    assert ucis == {"e4d3"}


def test_no_en_passant_off_the_capture_rank() -> None:
    b = Board.from_fen("4k3/8/3pP3/8/8/8/8/4K3")
    assert not any(
        m.flag is MoveFlag.EN_PASSANT_CAPTURE for m in moves_from(b, Square.parse("e6"))
    )


def test_no_en_passant_against_non_pawn() -> None:
    b = Board.from_fen("4k3/8/8/3nP3/8/8/8/4K3")
    assert not any(
        m.flag is MoveFlag.EN_PASSANT_CAPTURE for m in moves_from(b, Square.parse("e5"))
    )


def test_en_passant_removes_the_passed_pawn() -> None:
    b = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    mv = Move(
        Square.parse("e5"),
        Square.parse("d6"),
        Piece(PieceType.PAWN, Color.WHITE),
        captured=Piece(PieceType.PAWN, Color.BLACK),
        flag=MoveFlag.EN_PASSANT_CAPTURE,
    )
    after = b.apply(mv)
    assert after.piece_at(Square.parse("d5")) is None
    assert after.piece_at(Square.parse("e5")) is None
    assert after.piece_at(Square.parse("d6")) == Piece(PieceType.PAWN, Color.WHITE)
    assert after.to_fen() == "4k3/8/3P4/8/8/8/8/4K3"
