from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"


@dataclass(frozen=True, order=True)
class Square:
    """Board coordinate as a (file, rank) pair.

    Attributes:
        file (int): File index, 0 (a) .. 7 (h).
        rank (int): Rank index, 0 (rank 1) .. 7 (rank 8).

    Notes:
    - Linear index is ``rank * 8 + file`` (a1=0 .. h8=63), matching the
      bit layout used by the board bitboards.
    """

    file: int
    rank: int

    def __post_init__(self) -> None:
        if not (0 <= self.file < 8 and 0 <= self.rank < 8):
            raise ValueError(f"invalid square coordinates: ({self.file}, {self.rank})")

    @property
    def index(self) -> int:
        return self.rank * 8 + self.file

    @classmethod
    def from_index(cls, idx: int) -> "Square":
        """Build a square from its 0-based index.

        Raises:
            ValueError: If ``idx`` is outside 0..63.
        """
        if idx < 0 or idx > 63:
            raise ValueError(f"invalid square index: {idx}")
        return cls(idx % 8, idx // 8)

    @classmethod
    def parse(cls, s: str) -> "Square":
        """Parse algebraic text such as ``"e4"``.

        Only lowercase file letters are accepted, as in SAN and FEN.

        Raises:
            ValueError: If ``s`` is not a valid square name.
        """
        if len(s) != 2:
            raise ValueError(f"invalid square: {s!r}")
        file_ch = s[0]
        rank_ch = s[1]
        if file_ch not in FILE_NAMES or rank_ch not in RANK_NAMES:
            raise ValueError(f"invalid square: {s!r}")
        return cls(FILE_NAMES.index(file_ch), RANK_NAMES.index(rank_ch))

    @classmethod
    def try_parse(cls, s: str) -> Optional["Square"]:
        try:
            return cls.parse(s)
        except ValueError:
            return None

    def offset(self, df: int, dr: int) -> Optional["Square"]:
        """Return the square shifted by (df, dr), or None when off the board."""
        f = self.file + df
        r = self.rank + dr
        if 0 <= f < 8 and 0 <= r < 8:
            return Square(f, r)
        return None

    @property
    def name(self) -> str:
        return FILE_NAMES[self.file] + RANK_NAMES[self.rank]

    def __str__(self) -> str:
        return self.name


# a1, b1, ..., h1, a2, ..., h8 (index order)
ALL_SQUARES: List[Square] = [Square.from_index(i) for i in range(64)]


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    return Square.parse(s).index


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    return Square.from_index(idx).name
