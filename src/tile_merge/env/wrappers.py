from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces


class Log2Observation(gym.ObservationWrapper):
    """Maps tile values to their exponents (2 -> 1, 4 -> 2, empty -> 0).

    Exponents fit in uint8 for any reachable board, which keeps observations
    compact for tabular or embedding-based agents.
    """

    def __init__(self, env: gym.Env, max_exponent: int = 31):
        super().__init__(env)
        assert isinstance(env.observation_space, spaces.Box)
        self.max_exponent = int(max_exponent)
        self.observation_space = spaces.Box(
            low=0, high=self.max_exponent, shape=env.observation_space.shape, dtype=np.uint8
        )

    def observation(self, observation: np.ndarray) -> np.ndarray:  # type: ignore[override]
        values = np.asarray(observation, dtype=np.int64)
        exponents = np.zeros(values.shape, dtype=np.uint8)
        filled = values > 0
        exponents[filled] = np.log2(values[filled]).astype(np.uint8)
        return np.minimum(exponents, self.max_exponent).astype(np.uint8)
