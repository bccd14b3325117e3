from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from .square import Square


MASK64 = (1 << 64) - 1


@dataclass(frozen=True)
class Bitboard:
    """Immutable 64-bit set of squares.

    Bit ``i`` is set iff square index ``i`` (a1=0 .. h8=63) is a member.
    All operators return new values; results are masked to 64 bits so that
    complement stays within the board.
    """

    value: int = 0

    def __post_init__(self) -> None:
        if self.value < 0 or self.value > MASK64:
            raise ValueError(f"bitboard value out of range: {self.value:#x}")

    @classmethod
    def of(cls, *squares: Square) -> "Bitboard":
        v = 0
        for sq in squares:
            v |= 1 << sq.index
        return cls(v)

    def contains(self, sq: Square) -> bool:
        return (self.value >> sq.index) & 1 == 1

    def with_square(self, sq: Square) -> "Bitboard":
        return Bitboard(self.value | (1 << sq.index))

    def without_square(self, sq: Square) -> "Bitboard":
        return Bitboard(self.value & ~(1 << sq.index))

    def toggled(self, sq: Square) -> "Bitboard":
        return Bitboard(self.value ^ (1 << sq.index))

    def __and__(self, other: "Bitboard") -> "Bitboard":
        return Bitboard(self.value & other.value)

    def __or__(self, other: "Bitboard") -> "Bitboard":
        return Bitboard(self.value | other.value)

    def __xor__(self, other: "Bitboard") -> "Bitboard":
        return Bitboard(self.value ^ other.value)

    def __invert__(self) -> "Bitboard":
        return Bitboard(~self.value & MASK64)

    def __contains__(self, sq: Square) -> bool:
        return self.contains(sq)

    def __bool__(self) -> bool:
        return self.value != 0

    def __len__(self) -> int:
        return self.popcount

    def __iter__(self) -> Iterator[Square]:
        return iter(self.squares())

    @property
    def is_empty(self) -> bool:
        return self.value == 0

    @property
    def popcount(self) -> int:
        return bin(self.value).count("1")

    def lsb(self) -> Optional[Square]:
        if self.value == 0:
            return None
        return Square.from_index((self.value & -self.value).bit_length() - 1)

    def squares(self) -> List[Square]:
        """Members in ascending index order."""
        out: List[Square] = []
        v = self.value
        while v:
            lsb = v & -v
            out.append(Square.from_index(lsb.bit_length() - 1))
            v ^= lsb
        return out

    def diagram(self) -> str:
        rows: List[str] = []
        for rank in range(7, -1, -1):
            cells = ["1" if (self.value >> (rank * 8 + f)) & 1 else "." for f in range(8)]
            rows.append(f"{rank + 1} " + " ".join(cells))
        rows.append("  a b c d e f g h")
        return "\n".join(rows)


EMPTY = Bitboard(0)
