from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tile_merge.game import Direction, GameConfig, GameRules, GameState, MergeGame, MoveResolved


def _compute_action_mask(game: MergeGame) -> np.ndarray:
    mask = np.zeros((len(Direction),), dtype=np.bool_)
    for direction in game.legal_directions():
        mask[int(direction)] = True
    return mask


class TileMergeEnv(gym.Env):
    """Headless driver for a MergeGame session.

    Stands in for the presentation layer: every step requests a move and
    reports the animations as finished straight away, so each step covers
    one full move including the follow-up spawn.
    """

    metadata = {"render_modes": []}

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[GameRules] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 step_penalty: float = 0.0) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.rules = rules or GameRules()
        self.game = MergeGame(self.config, self.rules)

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.step_penalty = float(step_penalty)
        self.reward_weights: Dict[str, float] = {
            "merges": 0.1,      # reward per merge settled
            "win": 1.0,         # bonus when the win tile appears
            "lose": -1.0,       # penalty when the board locks up
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        h, w = self.config.height, self.config.width
        self.observation_space = spaces.Box(
            low=0, high=np.iinfo(np.int64).max, shape=(h, w), dtype=np.int64
        )
        self.action_space = spaces.Discrete(len(Direction))

        self._events: List[Any] = []
        self._steps = 0

    def _new_game(self, seed: Optional[int]) -> MergeGame:
        config = self.config if seed is None else replace(self.config, random_seed=seed)
        game = MergeGame(config, self.rules, listeners=[self._events.append])
        game.start()
        return game

    def _get_obs(self) -> np.ndarray:
        return self.game.get_state()

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "max_tile": self.game.max_tile(),
            "round": self.game.round,
            "state": self.game.state.value,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        self._events.clear()
        self.game = self._new_game(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        if self.game.is_over:
            raise RuntimeError("step() called on a finished game; call reset()")

        self._events.clear()
        batch: Optional[MoveResolved] = self.game.request_move(Direction(int(action)))
        self.game.animations_complete()

        reward_components: Dict[str, float] = {}
        if batch is not None and batch.changed:
            reward_components["merges"] = self.reward_weights["merges"] * float(len(batch.merges))
        else:
            reward_components["invalid"] = self.invalid_action_penalty
        reward_components["step"] = self.step_penalty

        state = self.game.state
        terminated = state in (GameState.WIN, GameState.LOSE)
        if state is GameState.WIN:
            reward_components["win"] = self.reward_weights["win"]
        elif state is GameState.LOSE:
            reward_components["lose"] = self.reward_weights["lose"]
        self._steps += 1

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        info["events"] = list(self._events)
        return self._get_obs(), reward, terminated, False, info

    def close(self) -> None:
        pass
