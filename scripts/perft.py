#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `sanboard/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from sanboard.engine.board import STARTPOS_FEN
from sanboard.engine.game import GameState
from sanboard.engine.perft import perft
from sanboard.engine.piece import Color


def main() -> None:
    parser = argparse.ArgumentParser(description="Count pseudo-legal perft nodes for a FEN")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--side", type=str, default="w", help="Side to move: w or b (default: w)")
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    args = parser.parse_args()

    state = GameState.new(args.fen, Color.parse(args.side))
    start = time.perf_counter()
    nodes = perft(state, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
