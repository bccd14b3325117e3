from __future__ import annotations

from .pgn import ParsedGame, build_pgn, parse_pgn, split_pgn_games
from .replay import ReplayError, ReplayResult, replay_game
from .san import move_to_san, parse_san

__all__ = [
    "ParsedGame",
    "ReplayError",
    "ReplayResult",
    "build_pgn",
    "move_to_san",
    "parse_pgn",
    "parse_san",
    "replay_game",
    "split_pgn_games",
]
