from __future__ import annotations

import pytest

from sanboard.engine.game import GameState
from sanboard.engine.perft import perft


def test_perft_depth_zero_is_one() -> None:
    assert perft(GameState.new(), 0) == 1


@pytest.mark.parametrize("depth,expected", [(1, 20), (2, 400)])
def test_perft_startpos(depth: int, expected: int) -> None:
    assert perft(GameState.new(), depth) == expected


def test_perft_rejects_negative_depth() -> None:
    with pytest.raises(ValueError):
        perft(GameState.new(), -1)
