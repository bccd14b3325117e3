from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..engine.board import Board, en_passant_victim_square, king_home
from ..engine.errors import (
    AmbiguousMove,
    InvalidDestination,
    InvalidMoveFormat,
    NoLegalCandidate,
    PieceNotFoundAtOrigin,
)
from ..engine.move import Move, MoveFlag
from ..engine.movegen import en_passant_rank, pawn_direction, pawn_start_rank, promotion_rank
from ..engine.piece import Color, Piece, PieceType
from ..engine.square import FILE_NAMES, RANK_NAMES, Square


logger = logging.getLogger(__name__)

KING_SIDE_TOKENS = ("O-O", "0-0")
QUEEN_SIDE_TOKENS = ("O-O-O", "0-0-0")
_PROMOTION_LETTERS = {
    "Q": PieceType.QUEEN,
    "R": PieceType.ROOK,
    "B": PieceType.BISHOP,
    "N": PieceType.KNIGHT,
}


@dataclass(frozen=True)
class SanParts:
    """Structural decomposition of a SAN token (before board lookup)."""

    piece_type: PieceType
    to_text: str
    is_capture: bool
    from_file: Optional[int] = None
    from_rank: Optional[int] = None
    promotion: Optional[PieceType] = None


def parse_san(san: str, board: Board, side_to_move: Color) -> Move:
    """Resolve a SAN token against ``board`` into a fully qualified Move.

    Args:
        san (str): Token such as ``"Nf3"``, ``"exd5"``, ``"e8=Q+"`` or ``"O-O"``.
        board (Board): Position before the move.
        side_to_move (Color): Color making the move.

    Returns:
        Move: Move with origin, captured piece and flag filled in.

    Raises:
        InvalidMoveFormat: The token does not have a SAN shape.
        InvalidDestination: The destination text is not a square.
        NoLegalCandidate: No piece of the named type can make the move.
        AmbiguousMove: More than one piece can make the move.
        PieceNotFoundAtOrigin: The resolved origin does not hold the mover, or
            a castling token is given while the king is off e1/e8.

    Notes:
        Queens and kings are matched on destination occupancy only, en passant
        only needs an enemy pawn beside the capturer, and a pawn reaching the
        last rank without a suffix promotes to a queen.
        Castling checks only that the king stands on its home square; the
        rook and the squares between are not examined.
    """
    original = san.strip()
    if not original:
        raise InvalidMoveFormat("empty move token", token=san)

    castle = _parse_castling(original, board, side_to_move)
    if castle is not None:
        return castle

    parts = split_san(original)
    to_sq = Square.try_parse(parts.to_text)
    if to_sq is None:
        raise InvalidDestination(
            f"Invalid destination {parts.to_text!r} for move {original!r}", token=original
        )

    promotion = parts.promotion
    if parts.piece_type is PieceType.PAWN:
        if to_sq.rank == promotion_rank(side_to_move):
            if promotion is None:
                promotion = PieceType.QUEEN
        elif promotion is not None:
            raise InvalidMoveFormat(
                f"Promotion outside the last rank: {original!r}", token=original
            )

    origins = candidate_origins(
        board,
        parts.piece_type,
        side_to_move,
        to_sq,
        parts.is_capture,
        from_file=parts.from_file,
        from_rank=parts.from_rank,
    )
    if not origins:
        raise NoLegalCandidate(
            f"No valid starting square found for {original!r} "
            f"for {side_to_move.name.lower()} {parts.piece_type.name.lower()}",
            token=original,
        )
    if len(origins) > 1:
        raise AmbiguousMove(
            f"Ambiguous move: {original!r} ({', '.join(str(s) for s in origins)})",
            token=original,
        )
    from_sq = origins[0]
    logger.debug("resolved %s -> %s%s", original, from_sq, to_sq)
    return _build_move(original, board, side_to_move, parts.piece_type, from_sq, to_sq, promotion)


def split_san(san: str) -> SanParts:
    """Decompose a non-castling SAN token.

    ``x``, ``+``, ``#`` and trailing ``!``/``?`` glyphs are dropped; whether
    the original token contained ``x`` is kept as ``is_capture``.

    Raises:
        InvalidMoveFormat: Unknown piece letter or bad disambiguator.
    """
    is_capture = "x" in san
    clean = san.replace("x", "").replace("+", "").replace("#", "").rstrip("!?")
    if not clean:
        raise InvalidMoveFormat(f"Invalid move format: {san!r}", token=san)

    promotion: Optional[PieceType] = None
    last = clean[-1]
    if len(clean) > 2 and last.upper() in _PROMOTION_LETTERS:
        promotion = _PROMOTION_LETTERS[last.upper()]
        clean = clean[:-1]
        if clean.endswith("="):
            clean = clean[:-1]
    elif clean.endswith("="):
        raise InvalidMoveFormat(f"Missing promotion piece: {san!r}", token=san)

    first = clean[0]
    from_file: Optional[int] = None
    from_rank: Optional[int] = None
    if first.isupper():
        piece_type = PieceType.from_san_letter(first)
        if piece_type is None:
            raise InvalidMoveFormat(f"Invalid move format: {san!r}", token=san)
        if promotion is not None:
            raise InvalidMoveFormat(f"Only pawns promote: {san!r}", token=san)
        rest = clean[1:]
        if len(rest) == 3:
            from_file, from_rank = _disambiguator(rest[0], san)
            rest = rest[1:]
        elif len(rest) == 4:
            # Full origin square, e.g. Qh4e1
            hint = Square.try_parse(rest[:2])
            if hint is None:
                raise InvalidMoveFormat(f"Invalid disambiguation in {san!r}", token=san)
            from_file, from_rank = hint.file, hint.rank
            rest = rest[2:]
        to_text = rest
    else:
        piece_type = PieceType.PAWN
        to_text = clean
        if len(clean) == 3 and clean[0] in FILE_NAMES:
            from_file = FILE_NAMES.index(clean[0])
            to_text = clean[1:]

    return SanParts(
        piece_type=piece_type,
        to_text=to_text,
        is_capture=is_capture,
        from_file=from_file,
        from_rank=from_rank,
        promotion=promotion,
    )


def _disambiguator(ch: str, san: str) -> Tuple[Optional[int], Optional[int]]:
    if ch in FILE_NAMES:
        return FILE_NAMES.index(ch), None
    if ch in RANK_NAMES:
        return None, RANK_NAMES.index(ch)
    raise InvalidMoveFormat(f"Invalid disambiguation {ch!r} in {san!r}", token=san)


def _parse_castling(san: str, board: Board, color: Color) -> Optional[Move]:
    clean = san.replace("+", "").replace("#", "").rstrip("!?")
    if clean in KING_SIDE_TOKENS:
        flag, to_file = MoveFlag.KING_SIDE_CASTLING, 6
    elif clean in QUEEN_SIDE_TOKENS:
        flag, to_file = MoveFlag.QUEEN_SIDE_CASTLING, 2
    else:
        return None
    king = Piece(PieceType.KING, color)
    from_sq = king_home(color)
    if board.piece_at(from_sq) != king:
        raise PieceNotFoundAtOrigin(
            f"No {color.name.lower()} king on {from_sq} to castle", token=san
        )
    return Move(from_sq, Square(to_file, from_sq.rank), king, flag=flag)


def candidate_origins(
    board: Board,
    piece_type: PieceType,
    color: Color,
    to_sq: Square,
    is_capture: bool,
    *,
    from_file: Optional[int] = None,
    from_rank: Optional[int] = None,
) -> List[Square]:
    """Squares from which a ``color`` ``piece_type`` could make the move.

    Candidates are filtered by the file/rank hints, then by per-piece rules
    evaluated against ``board``; ``is_capture`` must agree with the
    destination's occupancy.
    """
    target = board.piece_at(to_sq)
    survivors: List[Square] = []
    for from_sq in board.squares_of(Piece(piece_type, color)):
        if from_file is not None and from_sq.file != from_file:
            continue
        if from_rank is not None and from_sq.rank != from_rank:
            continue
        if _reaches(board, piece_type, color, from_sq, to_sq, target, is_capture):
            survivors.append(from_sq)
    return survivors


def _occupancy_matches(target: Optional[Piece], color: Color, is_capture: bool) -> bool:
    if is_capture:
        return target is not None and target.color is not color
    return target is None


def _reaches(
    board: Board,
    piece_type: PieceType,
    color: Color,
    from_sq: Square,
    to_sq: Square,
    target: Optional[Piece],
    is_capture: bool,
) -> bool:
    df = abs(from_sq.file - to_sq.file)
    dr_abs = abs(from_sq.rank - to_sq.rank)

    if piece_type is PieceType.PAWN:
        forward = pawn_direction(color)
        dr = to_sq.rank - from_sq.rank
        if not is_capture:
            if df != 0 or target is not None:
                return False
            if dr == forward:
                return True
            if dr == 2 * forward and from_sq.rank == pawn_start_rank(color):
                return board.is_empty(Square(from_sq.file, from_sq.rank + forward))
            return False
        if df != 1 or dr != forward:
            return False
        if target is not None:
            return target.color is not color
        # En passant onto an empty square
        if from_sq.rank != en_passant_rank(color):
            return False
        victim = board.piece_at(en_passant_victim_square(to_sq, color))
        return victim == Piece(PieceType.PAWN, color.opposite)

    if piece_type is PieceType.KNIGHT:
        if (df, dr_abs) not in ((1, 2), (2, 1)):
            return False
        return _occupancy_matches(target, color, is_capture)

    if piece_type is PieceType.BISHOP:
        if df == 0 or df != dr_abs:
            return False
        return board.is_path_clear(from_sq, to_sq) and _occupancy_matches(
            target, color, is_capture
        )

    if piece_type is PieceType.ROOK:
        if not ((df == 0) != (dr_abs == 0)):
            return False
        return board.is_path_clear(from_sq, to_sq) and _occupancy_matches(
            target, color, is_capture
        )

    # Queen and king: destination occupancy only, no shape or path test
    return _occupancy_matches(target, color, is_capture)


def _build_move(
    san: str,
    board: Board,
    color: Color,
    piece_type: PieceType,
    from_sq: Square,
    to_sq: Square,
    promotion: Optional[PieceType],
) -> Move:
    mover = board.piece_at(from_sq)
    if mover is None or mover.piece_type is not piece_type or mover.color is not color:
        raise PieceNotFoundAtOrigin(
            f"No {color.name.lower()} {piece_type.name.lower()} found at inferred "
            f"starting square {from_sq}",
            token=san,
        )

    captured = board.piece_at(to_sq)
    flag = MoveFlag.NORMAL
    if piece_type is PieceType.PAWN and from_sq.file != to_sq.file and captured is None:
        # Diagonal pawn move onto an empty square: en passant
        victim = board.piece_at(en_passant_victim_square(to_sq, color))
        if victim is not None and victim.piece_type is PieceType.PAWN and victim.color is not color:
            captured = victim
            flag = MoveFlag.EN_PASSANT_CAPTURE
    elif promotion is not None:
        flag = MoveFlag.PROMOTION
    elif captured is not None:
        flag = MoveFlag.CAPTURE

    if flag is not MoveFlag.PROMOTION:
        promotion = None
    return Move(from_sq, to_sq, mover, captured=captured, flag=flag, promotion=promotion)


def move_to_san(move: Move, board: Board) -> str:
    """Render ``move`` (made from ``board``) as SAN without check marks.

    The disambiguator is the shortest hint that makes ``parse_san`` resolve
    the token back to ``move.from_sq``.
    """
    if move.flag is MoveFlag.KING_SIDE_CASTLING:
        return "O-O"
    if move.flag is MoveFlag.QUEEN_SIDE_CASTLING:
        return "O-O-O"

    capture = "x" if move.captured is not None else ""
    promo = f"={move.promotion.value.upper()}" if move.promotion is not None else ""
    if move.piece.piece_type is PieceType.PAWN:
        prefix = FILE_NAMES[move.from_sq.file] if move.from_sq.file != move.to_sq.file else ""
        return f"{prefix}{capture}{move.to_sq}{promo}"

    others = [
        sq
        for sq in candidate_origins(
            board, move.piece.piece_type, move.piece.color, move.to_sq, move.captured is not None
        )
        if sq != move.from_sq
    ]
    hint = ""
    if others:
        if all(sq.file != move.from_sq.file for sq in others):
            hint = FILE_NAMES[move.from_sq.file]
        elif all(sq.rank != move.from_sq.rank for sq in others):
            hint = RANK_NAMES[move.from_sq.rank]
        else:
            hint = move.from_sq.name
    return f"{move.piece.piece_type.san_letter}{hint}{capture}{move.to_sq}"
