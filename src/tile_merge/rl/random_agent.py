from __future__ import annotations

import argparse
import logging
from collections import Counter
from typing import Any, Dict, Optional

import numpy as np
import gymnasium as gym

# Ensure envs are registered
import tile_merge.env  # noqa: F401
from tile_merge.game import GameConfig


logger = logging.getLogger(__name__)


def run_random(episodes: int = 10, seed: Optional[int] = None, width: int = 4, height: int = 4,
               max_steps: int = 5000) -> Dict[str, Any]:
    """Play random legal moves and return outcome counts and the best tile seen."""
    env = gym.make("TileMerge-4x4-v0", config=GameConfig(width=width, height=height))
    rng = np.random.default_rng(seed)
    outcomes: Counter = Counter()
    best_tile = 0
    total_steps = 0
    for episode in range(episodes):
        obs, info = env.reset(seed=None if seed is None else seed + episode)
        state = info["state"]
        for _ in range(max_steps):
            if state in ("win", "lose"):
                break
            # Prefer legal moves; a locked board still has to play something
            legal = np.flatnonzero(info["action_mask"])
            action = int(rng.choice(legal)) if legal.size else int(env.action_space.sample())
            obs, reward, terminated, truncated, info = env.step(action)
            state = info["state"]
            total_steps += 1
            if terminated or truncated:
                break
        outcomes[state] += 1
        best_tile = max(best_tile, int(info["max_tile"]))
        logger.info("Episode %d finished in state %s, max tile %d", episode, state, info["max_tile"])
    env.close()
    return {"outcomes": dict(outcomes), "best_tile": best_tile, "steps": total_steps}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the tile merge puzzle with random legal moves")
    p.add_argument("--episodes", type=int, default=10)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--width", type=int, default=4)
    p.add_argument("--height", type=int, default=4)
    p.add_argument("--max_steps", type=int, default=5000)
    p.add_argument("--log_level", type=str, default="INFO")
    return p


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    summary = run_random(
        episodes=args.episodes,
        seed=args.seed,
        width=args.width,
        height=args.height,
        max_steps=args.max_steps,
    )
    print(f"Random agent outcomes: {summary['outcomes']}, best tile: {summary['best_tile']}")


if __name__ == "__main__":  # pragma: no cover
    main()
