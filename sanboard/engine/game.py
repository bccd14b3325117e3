from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .board import Board
from .move import Move
from .movegen import generate_moves
from .piece import Color


@dataclass(frozen=True)
class GameState:
    """Board plus side to move.

    Responsibility: hold one position snapshot and produce the next one.
    States are never mutated; ``apply_move`` returns a fresh state whose board
    is an independent copy.
    """

    board: Board
    side_to_move: Color = Color.WHITE

    @classmethod
    def new(cls, fen: Optional[str] = None, side_to_move: Color = Color.WHITE) -> "GameState":
        """Start from ``fen`` (placement field) or the standard position.

        An undecodable FEN degrades to the starting position.
        """
        return cls(board=Board.from_fen_or_default(fen), side_to_move=side_to_move)

    def to_fen(self) -> str:
        return self.board.to_fen()

    def legal_moves(self) -> List[Move]:
        # Pseudo-legal: no king-safety filtering
        return generate_moves(self.board, self.side_to_move)

    def apply_move(self, move: Move) -> "GameState":
        """Return the state after ``move``; legality is the caller's concern."""
        return GameState(board=self.board.apply(move), side_to_move=self.side_to_move.opposite)


def new_game(fen: Optional[str] = None, side_to_move: Color = Color.WHITE) -> GameState:
    return GameState.new(fen, side_to_move)
