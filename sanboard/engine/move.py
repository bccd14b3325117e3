from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .piece import Piece, PieceType
from .square import Square


class MoveFlag(Enum):
    NORMAL = "normal"
    CAPTURE = "capture"
    DOUBLE_PAWN_PUSH = "double_pawn_push"
    KING_SIDE_CASTLING = "king_side_castling"
    QUEEN_SIDE_CASTLING = "queen_side_castling"
    PROMOTION = "promotion"
    EN_PASSANT_CAPTURE = "en_passant_capture"


CASTLING_FLAGS = (MoveFlag.KING_SIDE_CASTLING, MoveFlag.QUEEN_SIDE_CASTLING)


@dataclass(frozen=True)
class Move:
    """Fully qualified move.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        piece (Piece): The moving piece.
        captured (Optional[Piece]): Captured piece; set for CAPTURE,
            EN_PASSANT_CAPTURE and capturing promotions, None otherwise.
        flag (MoveFlag): Move kind.
        promotion (Optional[PieceType]): Promotion target when ``flag`` is
            PROMOTION.
    """

    from_sq: Square
    to_sq: Square
    piece: Piece
    captured: Optional[Piece] = None
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: Optional[PieceType] = None

    def __post_init__(self) -> None:
        if (self.flag is MoveFlag.PROMOTION) != (self.promotion is not None):
            raise ValueError("promotion piece must be set iff flag is PROMOTION")
        if self.flag in (MoveFlag.CAPTURE, MoveFlag.EN_PASSANT_CAPTURE) and self.captured is None:
            raise ValueError(f"{self.flag.value} move requires a captured piece")
        if self.captured is not None and self.flag not in (
            MoveFlag.CAPTURE,
            MoveFlag.EN_PASSANT_CAPTURE,
            MoveFlag.PROMOTION,
        ):
            raise ValueError(f"{self.flag.value} move cannot carry a captured piece")

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def is_castling(self) -> bool:
        return self.flag in CASTLING_FLAGS

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = self.promotion.value if self.promotion is not None else ""
        return self.from_sq.name + self.to_sq.name + promo

    def __str__(self) -> str:
        text = f"{self.piece.fen_char} from {self.from_sq} to {self.to_sq}"
        if self.captured is not None:
            text += f" (captures {self.captured.fen_char})"
        if self.flag is not MoveFlag.NORMAL:
            text += f" ({self.flag.value})"
        return text
