#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import logging
import os
import sys

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from sanboard.notation.pgn import split_pgn_games
from sanboard.notation.replay import replay_game


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay every game of a PGN file")
    parser.add_argument("path", type=str, help="PGN file (use - for stdin)")
    parser.add_argument("--board", action="store_true", help="Print the final position diagram")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log SAN resolution")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.path == "-":
        text = sys.stdin.read()
    else:
        with open(args.path, "r", encoding="utf-8") as fh:
            text = fh.read()

    failures = 0
    for idx, game in enumerate(split_pgn_games(text), start=1):
        res = replay_game(game)
        title = f"{game.tags.get('White', '?')} - {game.tags.get('Black', '?')}"
        if res.ok:
            print(f"#{idx} {title}: {res.plies} plies, result {game.result or '*'}")
        else:
            failures += 1
            err = res.error
            assert err is not None
            print(
                f"#{idx} {title}: stopped at ply {err.ply} on {err.token!r} "
                f"[{err.code}] {err.message}"
            )
        if args.board:
            print(res.final_state.board.ascii())
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
