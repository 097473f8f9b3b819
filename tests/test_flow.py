from __future__ import annotations

import logging

import pytest
from statemachine.exceptions import TransitionNotAllowed

from tile_merge.game import (
    Direction,
    GameConfig,
    GameFlow,
    GameLost,
    GameRules,
    GameState,
    GameWon,
    MergeGame,
    TileSpawned,
)


def test_flow_starts_generating_level() -> None:
    flow = GameFlow()
    assert flow.phase is GameState.GENERATING_LEVEL


def test_flow_rejects_illegal_transitions() -> None:
    flow = GameFlow()
    flow.send("level_generated")
    flow.send("spawned")
    assert flow.phase is GameState.WAITING_INPUT
    with pytest.raises(TransitionNotAllowed):
        flow.send("won")
    flow.send("move_requested")
    flow.send("moves_settled")
    flow.send("lost")
    assert flow.phase is GameState.LOSE
    with pytest.raises(TransitionNotAllowed):
        flow.send("level_generated")


def test_transitions_are_logged(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="tile_merge.game.flow")
    game = MergeGame(GameConfig(random_seed=3))
    game.start()
    messages = [r.getMessage() for r in caplog.records if r.name == "tile_merge.game.flow"]
    assert any("State changed to spawning_blocks" in m for m in messages)
    assert any("State changed to waiting_input" in m for m in messages)


def test_first_spawn_places_two_tiles_then_one(recorder) -> None:
    game = MergeGame(GameConfig(random_seed=21), listeners=[recorder])
    assert game.state is GameState.GENERATING_LEVEL
    game.start()
    assert game.state is GameState.WAITING_INPUT
    assert game.round == 1
    spawned = recorder.of_type(TileSpawned)
    assert len(spawned) == 2
    assert all(e.round == 1 and e.value in (2, 4) for e in spawned)
    assert len(game.tiles) == 2

    recorder.clear()
    game.request_move(Direction.LEFT)
    game.animations_complete()
    assert game.round == 2
    assert len(recorder.of_type(TileSpawned)) == 1


def test_start_only_runs_once(recorder) -> None:
    game = MergeGame(GameConfig(random_seed=2), listeners=[recorder])
    game.start()
    game.start()
    assert len(recorder.of_type(TileSpawned)) == 2


def test_same_seed_same_game() -> None:
    boards = []
    for _ in range(2):
        game = MergeGame(GameConfig(random_seed=99))
        game.start()
        for direction in (Direction.LEFT, Direction.UP, Direction.RIGHT):
            game.request_move(direction)
            game.animations_complete()
        boards.append(game.get_state())
    assert (boards[0] == boards[1]).all()


def test_spawned_values_follow_distribution() -> None:
    values = []
    for seed in range(1500):
        game = MergeGame(GameConfig(random_seed=seed))
        game.start()
        values.extend(t.value for t in game.tiles.values())
    share_of_twos = values.count(2) / len(values)
    assert 0.76 < share_of_twos < 0.84


def test_input_ignored_while_moving(make_game) -> None:
    game = make_game({(0, 0): 2, (3, 0): 2})
    assert game.request_move(Direction.LEFT) is not None
    assert game.request_move(Direction.RIGHT) is None
    assert game.state is GameState.MOVING
    game.animations_complete()
    assert game.state is GameState.WAITING_INPUT


@pytest.mark.parametrize("direction", [(1, 1), (-1, 1), (0, 0), (2, 0), 7, "left", None, True])
def test_illegal_directions_ignored(make_game, direction) -> None:
    game = make_game({(1, 1): 2})
    assert game.request_move(direction) is None
    assert game.state is GameState.WAITING_INPUT


@pytest.mark.parametrize(
    "value,expected",
    [((0, 1), Direction.UP), ((0, -1), Direction.DOWN), ((-1, 0), Direction.LEFT), ((1, 0), Direction.RIGHT),
     (2, Direction.LEFT), (Direction.RIGHT, Direction.RIGHT)],
)
def test_direction_parse(value, expected) -> None:
    assert Direction.parse(value) is expected


def test_vector_input_accepted(make_game) -> None:
    game = make_game({(3, 3): 2})
    batch = game.request_move((0, -1))
    assert batch.direction is Direction.DOWN
    assert batch.placements[0].to_cell == (3, 0)


def test_animations_complete_ignored_outside_moving(make_game) -> None:
    game = make_game({(0, 0): 2})
    game.animations_complete()
    assert game.state is GameState.WAITING_INPUT
    assert game.round == 1


def test_one_empty_cell_after_spawn_loses(recorder) -> None:
    game = MergeGame(GameConfig(width=3, height=1, random_seed=0), listeners=[recorder])
    game.start()
    assert game.state is GameState.LOSE
    assert recorder.of_type(GameLost) == [GameLost(round=1, empty_cells=1)]


def test_early_lose_even_with_moves_left(make_game, recorder) -> None:
    layout = {}
    rows = [[2, 4, 8, 16], [4, 8, 16, 32], [8, 16, 32, 64], [16, 32]]
    for y, row in enumerate(rows):
        for x, value in enumerate(row):
            layout[(x, y)] = value
    game = make_game(layout)
    game.request_move(Direction.LEFT)
    game.animations_complete()
    assert game.state is GameState.LOSE
    assert len(recorder.of_type(GameLost)) == 1
    assert game.legal_directions()
    assert game.request_move(Direction.RIGHT) is None


def test_full_board_without_moves_loses() -> None:
    game = MergeGame(GameConfig(width=1, height=1, random_seed=0))
    game.start()
    assert len(game.tiles) == 1
    assert game.state is GameState.LOSE


def test_full_board_with_a_merge_waits_for_input() -> None:
    rules = GameRules(spawn_distribution=((2, 1.0),))
    game = MergeGame(GameConfig(width=2, height=1, random_seed=0), rules)
    game.start()
    assert game.state is GameState.WAITING_INPUT
    game.request_move(Direction.LEFT)
    game.animations_complete()
    # 4 next to the new 2 with no free cell left
    assert sorted(t.value for t in game.tiles.values()) == [2, 4]
    assert game.state is GameState.LOSE


def test_reaching_win_value_wins(make_game, recorder) -> None:
    game = make_game({(0, 0): 1024, (1, 0): 1024})
    batch = game.request_move(Direction.LEFT)
    game.animations_complete()
    assert game.state is GameState.WIN
    won = recorder.of_type(GameWon)
    assert won == [GameWon(tile_id=batch.merges[0].survivor_id, value=2048, round=2)]
    assert game.request_move(Direction.RIGHT) is None


def test_custom_win_value(make_game) -> None:
    game = make_game({(0, 0): 4, (0, 1): 4}, rules=GameRules(win_value=8))
    game.request_move(Direction.DOWN)
    game.animations_complete()
    assert game.state is GameState.WIN
    assert game.max_tile() == 8


def test_lose_checked_before_win() -> None:
    rules = GameRules(win_value=2, spawn_distribution=((2, 1.0),))
    game = MergeGame(GameConfig(width=3, height=1, random_seed=0), rules)
    game.start()
    assert game.state is GameState.LOSE

    game = MergeGame(GameConfig(random_seed=0), rules)
    game.start()
    assert game.state is GameState.WIN
