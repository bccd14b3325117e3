from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @classmethod
    def parse(cls, s: str) -> "Color":
        """Accept ``w``/``b`` or ``white``/``black`` (any case)."""
        key = s.strip().lower()
        if key in ("w", "white"):
            return cls.WHITE
        if key in ("b", "black"):
            return cls.BLACK
        raise ValueError(f"invalid color: {s!r}")


class PieceType(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"

    @property
    def san_letter(self) -> str:
        """Uppercase SAN prefix; empty for pawns."""
        return "" if self is PieceType.PAWN else self.value.upper()

    @classmethod
    def from_san_letter(cls, ch: str) -> Optional["PieceType"]:
        return _SAN_LETTERS.get(ch)


_SAN_LETTERS = {
    "N": PieceType.KNIGHT,
    "B": PieceType.BISHOP,
    "R": PieceType.ROOK,
    "Q": PieceType.QUEEN,
    "K": PieceType.KING,
}

PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


@dataclass(frozen=True)
class Piece:
    piece_type: PieceType
    color: Color

    @property
    def fen_char(self) -> str:
        ch = self.piece_type.value
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_fen_char(cls, ch: str) -> Optional["Piece"]:
        """Decode a FEN piece letter; uppercase is white. Returns None if unknown."""
        if len(ch) != 1:
            return None
        try:
            pt = PieceType(ch.lower())
        except ValueError:
            return None
        return cls(pt, Color.WHITE if ch.isupper() else Color.BLACK)

    def __str__(self) -> str:
        return f"{self.color.name.lower()} {self.piece_type.name.lower()}"
