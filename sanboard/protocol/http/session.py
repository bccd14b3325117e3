from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...engine.board import STARTPOS_PLACEMENT
from ...engine.game import GameState
from ...engine.move import Move
from ...engine.piece import Color
from ...notation.pgn import ParsedGame
from ...notation.replay import ReplayResult


@dataclass
class GameSession:
    """One open game: a snapshot per ply plus the SAN history.

    ``history[0]`` is the starting state; ``history[i]`` follows ``sans[i-1]``.
    """

    history: List[GameState]
    sans: List[str] = field(default_factory=list)
    moves: List[Move] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    result: Optional[str] = None

    @classmethod
    def new(cls, state: Optional[GameState] = None) -> "GameSession":
        return cls(history=[state if state is not None else GameState.new()])

    @classmethod
    def from_replay(cls, replay: ReplayResult) -> "GameSession":
        applied = replay.plies
        return cls(
            history=list(replay.states),
            sans=list(replay.game.moves[:applied]),
            moves=list(replay.moves),
            tags=dict(replay.game.tags),
            result=replay.game.result if replay.ok else None,
        )

    @property
    def state(self) -> GameState:
        return self.history[-1]

    @property
    def ply(self) -> int:
        return len(self.history) - 1

    def push(self, san: str, move: Move, state: GameState) -> None:
        self.history.append(state)
        self.sans.append(san)
        self.moves.append(move)

    def pop(self) -> None:
        if len(self.history) <= 1:
            raise ValueError("no moves to undo")
        self.history.pop()
        self.sans.pop()
        self.moves.pop()

    def to_parsed_game(self) -> ParsedGame:
        """Export the game; non-standard starts get a full FEN tag with the first mover."""
        tags = dict(self.tags)
        start = self.history[0]
        if (
            "FEN" in tags
            or start.side_to_move is not Color.WHITE
            or start.to_fen() != STARTPOS_PLACEMENT
        ):
            tags["FEN"] = fen_tag(start, tags.get("FEN"))
            tags["SetUp"] = "1"
        return ParsedGame(
            tags=tags,
            initial_fen=tags.get("FEN", start.to_fen()),
            moves=list(self.sans),
            result=self.result,
        )


_FEN_TAIL_DEFAULTS = ("-", "-", "0", "1")


def fen_tag(state: GameState, fen: Optional[str] = None) -> str:
    """Full six-field FEN for `state`.

    Placement and active colour come from `state`; castling, en passant and
    clock fields are kept from `fen` when it has them.
    """
    tail = (fen or "").split()[2:6]
    tail += list(_FEN_TAIL_DEFAULTS[len(tail):])
    return " ".join([state.to_fen(), state.side_to_move.value, *tail])


class InMemorySessionStore:
    """Open games keyed by uuid4 `game_id`, guarded by a re-entrant lock.

    One store belongs to one app instance; sessions are replaced wholesale
    (`set`) when a PGN import rebuilds the game.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, GameSession] = {}

    def create(self, session: Optional[GameSession] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if session is None:
            session = GameSession.new()
        with self._lock:
            self._games[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._games.get(game_id)

    def set(self, game_id: str, session: GameSession) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = session

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
