from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Tuple

from .errors import ConfigurationError
from .tiles import is_power_of_two


@dataclass
class GameRules:
    win_value: int = 2048
    spawn_distribution: Tuple[Tuple[int, float], ...] = ((2, 0.8), (4, 0.2))
    first_round_spawns: int = 2
    spawns_per_round: int = 1

    def validate(self) -> None:
        if not self.spawn_distribution:
            raise ConfigurationError("spawn distribution is empty")
        for value, probability in self.spawn_distribution:
            if not is_power_of_two(int(value)) or value < 2:
                raise ConfigurationError(f"spawn value {value} is not a power of two")
            if probability <= 0:
                raise ConfigurationError(f"spawn probability for {value} must be positive")
        total = sum(p for _, p in self.spawn_distribution)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ConfigurationError(f"spawn probabilities sum to {total}, expected 1")
        if not is_power_of_two(int(self.win_value)) or self.win_value < 2:
            raise ConfigurationError(f"win value {self.win_value} is not a power of two")
        if self.first_round_spawns <= 0 or self.spawns_per_round <= 0:
            raise ConfigurationError("spawn counts must be positive")

    def spawn_amount(self, round_index: int) -> int:
        return self.first_round_spawns if round_index == 0 else self.spawns_per_round

    def draw_value(self, rng: random.Random) -> int:
        """Sample a spawn value; with the defaults a draw below 0.8 gives 2."""
        draw = rng.random()
        cumulative = 0.0
        for value, probability in self.spawn_distribution:
            cumulative += probability
            if draw < cumulative:
                return int(value)
        # Float rounding can leave the cumulative sum a hair below 1
        return int(self.spawn_distribution[-1][0])
