from __future__ import annotations

from .game import GameState


def perft(state: GameState, depth: int) -> int:
    """Count pseudo-legal leaf nodes reachable from ``state`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all child positions' perft(depth-1).

    Note: moves come from the pseudo-legal generator, so counts diverge from
    standard perft tables once checks or en passant without a preceding double
    push become reachable.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for m in state.legal_moves():
        nodes += perft(state.apply_move(m), depth - 1)
    return nodes
