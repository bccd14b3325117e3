from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .bitboard import EMPTY, Bitboard
from .errors import InvalidFENFormat
from .move import Move, MoveFlag
from .piece import Color, Piece, PieceType
from .square import ALL_SQUARES, Square


logger = logging.getLogger(__name__)

STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
STARTPOS_PLACEMENT = STARTPOS_FEN.split()[0]


# Piece indices for bitboards
WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK = range(12)
PIECE_ORDER = [WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK]
PIECE_TO_CHAR = {
    WP: "P",
    WN: "N",
    WB: "B",
    WR: "R",
    WQ: "Q",
    WK: "K",
    BP: "p",
    BN: "n",
    BB: "b",
    BR: "r",
    BQ: "q",
    BK: "k",
}
CHAR_TO_PIECE = {v: k for k, v in PIECE_TO_CHAR.items()}

_TYPE_ORDER = (
    PieceType.PAWN,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
    PieceType.KING,
)
_INDEX_TO_PIECE: Dict[int, Piece] = {
    idx: Piece(_TYPE_ORDER[idx % 6], Color.WHITE if idx < 6 else Color.BLACK)
    for idx in PIECE_ORDER
}
_PIECE_TO_INDEX: Dict[Piece, int] = {p: idx for idx, p in _INDEX_TO_PIECE.items()}

# Castling geometry per color: home rank, king home file
_HOME_RANK = {Color.WHITE: 0, Color.BLACK: 7}
_KING_FILE = 4
# flag -> (rook from file, rook to file)
_CASTLING_ROOK_FILES = {
    MoveFlag.KING_SIDE_CASTLING: (7, 5),
    MoveFlag.QUEEN_SIDE_CASTLING: (0, 3),
}


def piece_index(piece: Piece) -> int:
    return _PIECE_TO_INDEX[piece]


def piece_from_index(idx: int) -> Piece:
    return _INDEX_TO_PIECE[idx]


def home_rank(color: Color) -> int:
    return _HOME_RANK[color]


def king_home(color: Color) -> Square:
    return Square(_KING_FILE, _HOME_RANK[color])


def castling_rook_squares(flag: MoveFlag, color: Color) -> Tuple[Square, Square]:
    """Return (rook home, rook post-castle square) for a castling flag."""
    from_file, to_file = _CASTLING_ROOK_FILES[flag]
    rank = _HOME_RANK[color]
    return Square(from_file, rank), Square(to_file, rank)


def en_passant_victim_square(move_to: Square, mover: Color) -> Square:
    """Square of the pawn removed by an en passant capture landing on ``move_to``.

    It sits on the destination file and on the capturing pawn's rank
    (rank 5 for white, rank 4 for black).
    """
    return Square(move_to.file, 4 if mover is Color.WHITE else 3)


@dataclass
class Board:
    """Piece placement held as twelve bitboards.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - A square is set in at most one of the twelve bitboards; every mutator
      below preserves that.
    - Side to move, castling rights and clocks are not part of the board;
      see ``GameState``.
    """

    # 12 piece bitboards, indexed by constants above
    bb: List[Bitboard] = field(default_factory=lambda: [EMPTY] * 12)

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls.from_fen(STARTPOS_PLACEMENT)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from the piece-placement field of a FEN string.

        Args:
            fen (str): Full FEN or placement field only. Fields after the
                first are ignored.

        Returns:
            Board: Board with pieces placed as described.

        Raises:
            InvalidFENFormat: If the placement does not have 8 ranks, a rank
                does not describe exactly 8 squares, an empty-run digit is
                outside 1..8, or a character is not a FEN piece letter.
        """
        if not fen or not isinstance(fen, str) or not fen.strip():
            raise InvalidFENFormat("FEN must be a non-empty string")
        placement = fen.strip().split()[0]

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise InvalidFENFormat(f"FEN board must have 8 ranks, got {len(ranks)}")
        bb = [0] * 12
        for offset, rank in enumerate(ranks):  # rank 8 first
            rank_idx = 7 - offset
            file_idx = 0
            for ch in rank:
                if ch in "0123456789":
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise InvalidFENFormat("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise InvalidFENFormat(f"invalid piece in FEN: {ch!r}")
                    if file_idx >= 8:
                        raise InvalidFENFormat("too many squares in FEN rank")
                    bb[CHAR_TO_PIECE[ch]] |= 1 << (rank_idx * 8 + file_idx)
                    file_idx += 1
            if file_idx != 8:
                raise InvalidFENFormat(f"rank {rank_idx + 1} does not sum to 8 squares in FEN")
        return cls(bb=[Bitboard(v) for v in bb])

    @classmethod
    def from_fen_or_default(cls, fen: Optional[str]) -> "Board":
        """Decode ``fen``; fall back to the starting position when it is invalid."""
        if fen is None:
            return cls.startpos()
        board = decode_fen(fen)
        if board is None:
            logger.warning("invalid FEN %r, using starting position", fen)
            return cls.startpos()
        return board

    def to_fen(self) -> str:
        """Serialize the piece placement into the first FEN field."""
        ranks_str: List[str] = []
        for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
            run = 0
            row = []
            for file_idx in range(8):
                piece = self.piece_at(Square(file_idx, rank_idx))
                if piece is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(piece.fen_char)
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        return "/".join(ranks_str)

    def copy(self) -> "Board":
        return Board(bb=list(self.bb))

    # --- Queries ---
    def piece_at(self, sq: Square) -> Optional[Piece]:
        """Return the piece on ``sq`` or None when the square is empty."""
        # White pieces first, then black
        for idx in PIECE_ORDER:
            if self.bb[idx].contains(sq):
                return _INDEX_TO_PIECE[idx]
        return None

    def bitboard(self, piece: Piece) -> Bitboard:
        return self.bb[_PIECE_TO_INDEX[piece]]

    def squares_of(self, piece: Piece) -> List[Square]:
        return self.bb[_PIECE_TO_INDEX[piece]].squares()

    def pieces(self) -> Iterator[Tuple[Square, Piece]]:
        """Yield (square, piece) for every occupied square in index order."""
        for sq in ALL_SQUARES:
            piece = self.piece_at(sq)
            if piece is not None:
                yield sq, piece

    def occupancy(self, color: Color) -> Bitboard:
        start = 0 if color is Color.WHITE else 6
        occ = EMPTY
        for idx in range(start, start + 6):
            occ = occ | self.bb[idx]
        return occ

    @property
    def white(self) -> Bitboard:
        return self.occupancy(Color.WHITE)

    @property
    def black(self) -> Bitboard:
        return self.occupancy(Color.BLACK)

    @property
    def occupied(self) -> Bitboard:
        return self.white | self.black

    @property
    def empty_squares(self) -> Bitboard:
        return ~self.occupied

    def is_empty(self, sq: Square) -> bool:
        return not self.occupied.contains(sq)

    def is_path_clear(self, start: Square, end: Square) -> bool:
        """Return True if no piece stands strictly between ``start`` and ``end``.

        The squares must share a file, a rank or a diagonal; any other pair
        returns False. Adjacent squares have no intermediate squares and are
        always clear.
        """
        df = end.file - start.file
        dr = end.rank - start.rank
        if df == 0 and dr == 0:
            return True
        if df != 0 and dr != 0 and abs(df) != abs(dr):
            return False
        step_f = (df > 0) - (df < 0)
        step_r = (dr > 0) - (dr < 0)
        occ = self.occupied
        f, r = start.file + step_f, start.rank + step_r
        while (f, r) != (end.file, end.rank):
            if occ.contains(Square(f, r)):
                return False
            f += step_f
            r += step_r
        return True

    # --- Mutation ---
    def place(self, sq: Square, piece: Piece) -> None:
        """Put ``piece`` on ``sq``, replacing whatever stood there."""
        self.clear_square(sq)
        idx = _PIECE_TO_INDEX[piece]
        self.bb[idx] = self.bb[idx].with_square(sq)

    def remove(self, sq: Square, piece: Piece) -> None:
        idx = _PIECE_TO_INDEX[piece]
        self.bb[idx] = self.bb[idx].without_square(sq)

    def clear_square(self, sq: Square) -> None:
        for idx in PIECE_ORDER:
            if self.bb[idx].contains(sq):
                self.bb[idx] = self.bb[idx].without_square(sq)

    def make_move(self, move: Move) -> None:
        """Apply ``move`` to this board in-place.

        Supports: normal moves, captures, promotions, en passant, and castling.
        The move is not checked for legality.
        """
        color = move.piece.color
        # 1. Lift the mover
        self.remove(move.from_sq, move.piece)

        # 2. Captures; the en passant victim is not on the destination square
        if move.captured is not None:
            if move.flag is MoveFlag.EN_PASSANT_CAPTURE:
                self.remove(en_passant_victim_square(move.to_sq, color), move.captured)
            else:
                self.remove(move.to_sq, move.captured)

        # 3. Drop the mover, substituting the promotion piece
        if move.flag is MoveFlag.PROMOTION and move.promotion is not None:
            self.place(move.to_sq, Piece(move.promotion, color))
        else:
            self.place(move.to_sq, move.piece)

        # 4. Castling rook relocation
        if move.is_castling:
            rook_from, rook_to = castling_rook_squares(move.flag, color)
            rook = Piece(PieceType.ROOK, color)
            self.remove(rook_from, rook)
            self.place(rook_to, rook)

    def apply(self, move: Move) -> "Board":
        """Return a new Board with ``move`` applied; this board is unchanged."""
        new_board = self.copy()
        new_board.make_move(move)
        return new_board

    def ascii(self) -> str:
        rows: List[str] = []
        for rank_idx in range(7, -1, -1):
            cells = []
            for file_idx in range(8):
                piece = self.piece_at(Square(file_idx, rank_idx))
                cells.append(piece.fen_char if piece is not None else ".")
            rows.append(f"{rank_idx + 1} " + " ".join(cells))
        rows.append("  a b c d e f g h")
        return "\n".join(rows)


def decode_fen(fen: str) -> Optional[Board]:
    """Decode a FEN placement; return None instead of raising on bad input."""
    try:
        return Board.from_fen(fen)
    except InvalidFENFormat as e:
        logger.debug("FEN decode failed for %r: %s", fen, e)
        return None
