from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import pytest

from tile_merge.game import GameConfig, GameRules, MergeGame, TileSpawned


Layout = Dict[Tuple[int, int], int]


class Recorder:
    def __init__(self) -> None:
        self.events: List[object] = []

    def __call__(self, event: object) -> None:
        self.events.append(event)

    def of_type(self, kind: type) -> list:
        return [e for e in self.events if isinstance(e, kind)]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture()
def make_game(recorder: Recorder) -> Callable[..., MergeGame]:
    """Start a seeded session, then swap in `layout` and forget the opening spawn."""

    def _make(layout: Optional[Layout] = None, width: int = 4, height: int = 4, seed: int = 7,
              rules: Optional[GameRules] = None) -> MergeGame:
        game = MergeGame(GameConfig(width=width, height=height, random_seed=seed), rules, listeners=[recorder])
        game.start()
        if layout is not None:
            game.load_tiles(layout)
        recorder.clear()
        return game

    return _make


def board_before_spawn(game: MergeGame, recorder: Recorder) -> np.ndarray:
    """Current values with any tiles spawned since the last clear removed."""
    state = game.get_state()
    for event in recorder.of_type(TileSpawned):
        x, y = event.cell
        state[y, x] = 0
    return state
