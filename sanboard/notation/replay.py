from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..engine.errors import NotationError
from ..engine.game import GameState
from ..engine.move import Move
from ..engine.piece import Color
from .pgn import ParsedGame, parse_pgn
from .san import parse_san


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplayError:
    ply: int
    token: str
    error: NotationError

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class ReplayResult:
    """Outcome of replaying a game token by token.

    ``states[0]`` is the initial state and ``states[i]`` the state after ply
    ``i``; on failure the list stops at the last successfully applied ply.
    """

    game: ParsedGame
    states: List[GameState] = field(default_factory=list)
    moves: List[Move] = field(default_factory=list)
    error: Optional[ReplayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def final_state(self) -> GameState:
        return self.states[-1]

    @property
    def plies(self) -> int:
        return len(self.moves)


def initial_side(game: ParsedGame) -> Color:
    """Side to move from the FEN tag's active-color field, white otherwise."""
    fields = game.tags.get("FEN", "").split()
    if len(fields) >= 2:
        try:
            return Color.parse(fields[1])
        except ValueError:
            logger.debug("ignoring active color %r in FEN tag", fields[1])
    return Color.WHITE


def replay_game(
    game: Union[ParsedGame, str], side_to_move: Optional[Color] = None
) -> ReplayResult:
    """Resolve and apply every SAN token of ``game`` in order.

    Args:
        game: A parsed game or raw PGN text.
        side_to_move: Color of the first mover; defaults to ``initial_side``.

    Returns:
        ReplayResult: States for every applied ply. Replay halts at the first
            token that fails to parse; the failing ply index, token and error
            are reported in ``error`` and earlier states are kept.
    """
    parsed = parse_pgn(game) if isinstance(game, str) else game
    side = side_to_move if side_to_move is not None else initial_side(parsed)
    state = GameState.new(parsed.initial_fen, side)
    result = ReplayResult(game=parsed, states=[state])

    for ply, token in enumerate(parsed.moves):
        try:
            move = parse_san(token, state.board, state.side_to_move)
        except NotationError as e:
            logger.warning("replay halted at ply %d on %r: %s", ply, token, e)
            result.error = ReplayError(ply=ply, token=token, error=e)
            break
        state = state.apply_move(move)
        result.moves.append(move)
        result.states.append(state)
    return result
