"""Gymnasium environments for the tile merge puzzle."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register default 4x4 environment
register(
    id="TileMerge-4x4-v0",
    entry_point="tile_merge.env.tile_merge_env:TileMergeEnv",
)

__all__ = ["TileMerge-4x4-v0"]
