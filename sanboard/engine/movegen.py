from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from .board import Board, castling_rook_squares, home_rank, king_home
from .move import Move, MoveFlag
from .piece import PROMOTION_TYPES, Color, Piece, PieceType
from .square import ALL_SQUARES, Square


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
KING_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
BISHOP_DIRS = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS = BISHOP_DIRS + ROOK_DIRS


def pawn_direction(color: Color) -> int:
    return 1 if color is Color.WHITE else -1


def pawn_start_rank(color: Color) -> int:
    return 1 if color is Color.WHITE else 6


def promotion_rank(color: Color) -> int:
    return 7 if color is Color.WHITE else 0


def en_passant_rank(color: Color) -> int:
    """Rank a pawn must stand on to capture en passant (5 for white, 4 for black)."""
    return 4 if color is Color.WHITE else 3


def generate_moves(board: Board, color: Color, *, all_promotions: bool = True) -> List[Move]:
    """Return every pseudo-legal move for ``color``.

    Args:
        board (Board): Position to generate from.
        color (Color): Side whose pieces move.
        all_promotions (bool): Emit one move per promotion piece (Q, R, B, N)
            when True, a single queen promotion otherwise.

    Returns:
        List[Move]: Moves in board index order of their origin squares.

    Notes:
        Moves are not filtered for leaving the own king in check, and castling
        does not consider attacked squares. En passant only requires an enemy
        pawn beside the capturing pawn.
    """
    moves: List[Move] = []
    for sq in ALL_SQUARES:
        piece = board.piece_at(sq)
        if piece is not None and piece.color is color:
            moves.extend(_GENERATORS[piece.piece_type](board, piece, sq, all_promotions))
    return moves


def moves_from(board: Board, sq: Square, *, all_promotions: bool = True) -> List[Move]:
    """Pseudo-legal moves of the piece standing on ``sq`` (empty list if none)."""
    piece = board.piece_at(sq)
    if piece is None:
        return []
    return _GENERATORS[piece.piece_type](board, piece, sq, all_promotions)


def _promotions(
    sq: Square, target: Square, piece: Piece, captured: Optional[Piece], all_promotions: bool
) -> List[Move]:
    kinds = PROMOTION_TYPES if all_promotions else (PieceType.QUEEN,)
    return [
        Move(sq, target, piece, captured=captured, flag=MoveFlag.PROMOTION, promotion=kind)
        for kind in kinds
    ]


def _pawn_moves(board: Board, piece: Piece, sq: Square, all_promotions: bool) -> List[Move]:
    moves: List[Move] = []
    color = piece.color
    direction = pawn_direction(color)
    last_rank = promotion_rank(color)

    # Pushes
    one = sq.offset(0, direction)
    if one is not None and board.is_empty(one):
        if one.rank == last_rank:
            moves.extend(_promotions(sq, one, piece, None, all_promotions))
        else:
            moves.append(Move(sq, one, piece))
            if sq.rank == pawn_start_rank(color):
                two = sq.offset(0, 2 * direction)
                if two is not None and board.is_empty(two):
                    moves.append(Move(sq, two, piece, flag=MoveFlag.DOUBLE_PAWN_PUSH))

    # Captures, including en passant
    for df in (-1, 1):
        target = sq.offset(df, direction)
        if target is None:
            continue
        occupant = board.piece_at(target)
        if occupant is not None:
            if occupant.color is not color:
                if target.rank == last_rank:
                    moves.extend(_promotions(sq, target, piece, occupant, all_promotions))
                else:
                    moves.append(Move(sq, target, piece, captured=occupant, flag=MoveFlag.CAPTURE))
            continue
        if sq.rank == en_passant_rank(color):
            beside = board.piece_at(Square(target.file, sq.rank))
            # No record of the enemy pawn's last move: adjacency is enough
            if beside is not None and beside.piece_type is PieceType.PAWN and beside.color is not color:
                moves.append(
                    Move(sq, target, piece, captured=beside, flag=MoveFlag.EN_PASSANT_CAPTURE)
                )
    return moves


def _step_moves(
    board: Board, piece: Piece, sq: Square, offsets: Tuple[Tuple[int, int], ...]
) -> List[Move]:
    moves: List[Move] = []
    for df, dr in offsets:
        target = sq.offset(df, dr)
        if target is None:
            continue
        occupant = board.piece_at(target)
        if occupant is None:
            moves.append(Move(sq, target, piece))
        elif occupant.color is not piece.color:
            moves.append(Move(sq, target, piece, captured=occupant, flag=MoveFlag.CAPTURE))
    return moves


def _slide_moves(
    board: Board, piece: Piece, sq: Square, directions: Tuple[Tuple[int, int], ...]
) -> List[Move]:
    moves: List[Move] = []
    for df, dr in directions:
        target = sq.offset(df, dr)
        while target is not None:
            occupant = board.piece_at(target)
            if occupant is not None:
                if occupant.color is not piece.color:
                    moves.append(
                        Move(sq, target, piece, captured=occupant, flag=MoveFlag.CAPTURE)
                    )
                break
            moves.append(Move(sq, target, piece))
            target = target.offset(df, dr)
    return moves


def _knight_moves(board: Board, piece: Piece, sq: Square, all_promotions: bool) -> List[Move]:
    return _step_moves(board, piece, sq, KNIGHT_OFFSETS)


def _bishop_moves(board: Board, piece: Piece, sq: Square, all_promotions: bool) -> List[Move]:
    return _slide_moves(board, piece, sq, BISHOP_DIRS)


def _rook_moves(board: Board, piece: Piece, sq: Square, all_promotions: bool) -> List[Move]:
    return _slide_moves(board, piece, sq, ROOK_DIRS)


def _queen_moves(board: Board, piece: Piece, sq: Square, all_promotions: bool) -> List[Move]:
    return _slide_moves(board, piece, sq, QUEEN_DIRS)


def _king_moves(board: Board, piece: Piece, sq: Square, all_promotions: bool) -> List[Move]:
    moves = _step_moves(board, piece, sq, KING_OFFSETS)
    if sq != king_home(piece.color):
        return moves
    # Castling: rook at home and empty squares between; check is not considered
    rank = home_rank(piece.color)
    rook = Piece(PieceType.ROOK, piece.color)
    for flag, king_to_file in (
        (MoveFlag.KING_SIDE_CASTLING, 6),
        (MoveFlag.QUEEN_SIDE_CASTLING, 2),
    ):
        rook_home, _ = castling_rook_squares(flag, piece.color)
        if board.piece_at(rook_home) != rook:
            continue
        if board.is_path_clear(sq, rook_home):
            moves.append(Move(sq, Square(king_to_file, rank), piece, flag=flag))
    return moves


_GENERATORS: Dict[PieceType, Callable[[Board, Piece, Square, bool], List[Move]]] = {
    PieceType.PAWN: _pawn_moves,
    PieceType.KNIGHT: _knight_moves,
    PieceType.BISHOP: _bishop_moves,
    PieceType.ROOK: _rook_moves,
    PieceType.QUEEN: _queen_moves,
    PieceType.KING: _king_moves,
}
