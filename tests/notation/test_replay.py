from __future__ import annotations

from sanboard.engine.piece import Color, Piece, PieceType
from sanboard.engine.square import Square
from sanboard.notation import parse_pgn, replay_game

IMMORTAL_OPERA = (
    "1. e4 e5 2. Nf3 d6 3. d4 Bg4 4. dxe5 Bxf3 5. Qxf3 dxe5 6. Bc4 Nf6 "
    "7. Qb3 Qe7 8. Nc3 c6 9. Bg5 b5 10. Nxb5 cxb5 11. Bxb5+ Nbd7 "
    "12. O-O-O Rd8 13. Rxd7 Rxd7 14. Rd1 Qe6 15. Bxd7+ Nxd7 16. Qb8+ Nxb8 "
    "17. Rd8# 1-0"
)


def test_full_game_replays_to_the_end() -> None:
    res = replay_game(IMMORTAL_OPERA)
    assert res.ok
    assert res.game.result == "1-0"
    assert res.plies == 33
    assert len(res.states) == 34
    final = res.final_state
    assert final.side_to_move is Color.BLACK
    assert final.board.piece_at(Square.parse("d8")) == Piece(PieceType.ROOK, Color.WHITE)
    assert final.board.piece_at(Square.parse("c1")) == Piece(PieceType.KING, Color.WHITE)
    assert final.board.piece_at(Square.parse("b8")) == Piece(PieceType.KNIGHT, Color.BLACK)


def test_replay_keeps_every_intermediate_state() -> None:
    res = replay_game(parse_pgn(IMMORTAL_OPERA))
    assert res.states[0].board.piece_at(Square.parse("e2")) == Piece(PieceType.PAWN, Color.WHITE)
    assert res.states[1].board.piece_at(Square.parse("e4")) == Piece(PieceType.PAWN, Color.WHITE)
    # Castling is ply 22 (12. O-O-O)
    assert res.moves[22].is_castling
    assert res.states[23].board.piece_at(Square.parse("d1")) == Piece(PieceType.ROOK, Color.WHITE)


def test_replay_halts_on_first_bad_token() -> None:
    res = replay_game("1. e4 e5 2. Nf3 Nf3 3. Bc4 *")
    assert not res.ok
    assert res.error is not None
    assert res.error.ply == 3
    assert res.error.token == "Nf3"
    assert res.error.code == "no_legal_candidate"
    assert res.plies == 3
    assert len(res.states) == 4
    assert res.final_state.board.piece_at(Square.parse("f3")) == Piece(
        PieceType.KNIGHT, Color.WHITE
    )


def test_replay_reports_garbage_token() -> None:
    res = replay_game("1. e4 ??? 2. d4")
    assert res.error is not None
    assert res.error.ply == 1
    assert res.error.code == "invalid_move_format"


def test_replay_starts_from_fen_tag_with_its_side_to_move() -> None:
    text = '[FEN "4k3/8/8/8/8/8/4P3/4K3 b - - 0 1"]\n\n1... Kd8 2. e4 *'
    res = replay_game(text)
    assert res.ok
    assert res.states[0].side_to_move is Color.BLACK
    board = res.final_state.board
    assert board.piece_at(Square.parse("d8")) == Piece(PieceType.KING, Color.BLACK)
    assert board.piece_at(Square.parse("e4")) == Piece(PieceType.PAWN, Color.WHITE)


def test_explicit_side_overrides_fen_tag() -> None:
    res = replay_game("1. e4 *", side_to_move=Color.WHITE)
    assert res.ok
    assert res.final_state.side_to_move is Color.BLACK
