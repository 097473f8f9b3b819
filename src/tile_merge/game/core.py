from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import numpy as np

from .errors import ConfigurationError, InvariantViolation
from .events import (
    GameEvent,
    GameLost,
    GameWon,
    Listener,
    MergeNotice,
    MoveResolved,
    TilePlacement,
    TileSpawned,
)
from .flow import GameFlow, GameState
from .grid import GameGrid, Position
from .rules import GameRules
from .tiles import Tile, is_power_of_two


logger = logging.getLogger(__name__)


class Direction(IntEnum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @property
    def vector(self) -> Tuple[int, int]:
        return _VECTORS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["Direction"]:
        """Return the direction for a Direction, its int value or a unit vector.

        Anything else (diagonals, zero vector, unknown ints) gives None.
        """
        if isinstance(value, Direction):
            return value
        if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            try:
                return cls(int(value))
            except ValueError:
                return None
        try:
            dx, dy = value
        except (TypeError, ValueError):
            return None
        for direction, vector in _VECTORS.items():
            if vector == (dx, dy):
                return direction
        return None


# y grows upward
_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


@dataclass
class GameConfig:
    width: int = 4
    height: int = 4
    random_seed: Optional[int] = None
    animation_duration: float = 0.2


class MergeGame:
    """One play session: the grid, the live tiles and the state machine.

    Moves are resolved eagerly in ``request_move`` and handed to listeners as
    a ``MoveResolved`` batch. Nothing else happens until the presentation
    layer calls ``animations_complete``; only then are merges settled, new
    tiles spawned and win/lose evaluated.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[GameRules] = None,
        listeners: Optional[Iterable[Listener]] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or GameRules()
        if self.config.width <= 0 or self.config.height <= 0:
            raise ConfigurationError(
                f"grid dimensions must be positive, got {self.config.width}x{self.config.height}"
            )
        self.rules.validate()
        self.rng = random.Random(self.config.random_seed)
        self.flow = GameFlow()
        self.grid: Optional[GameGrid] = None
        self.tiles: Dict[int, Tile] = {}
        self.round = 0
        self._next_id = 0
        self._pending: Optional[MoveResolved] = None
        self._listeners: List[Listener] = list(listeners or [])

    @property
    def state(self) -> GameState:
        return self.flow.phase

    @property
    def is_over(self) -> bool:
        return self.state in (GameState.WIN, GameState.LOSE)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: GameEvent) -> None:
        for listener in self._listeners:
            listener(event)

    # ------------------------------------------------------------------
    # Level generation and spawning
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Build the level and run the opening spawn."""
        if self.state is not GameState.GENERATING_LEVEL:
            logger.debug("start() ignored in state %s", self.state.value)
            return
        self.grid = GameGrid(self.config.width, self.config.height)
        self.round = 0
        self.tiles.clear()
        self.flow.send("level_generated")
        self._spawn_blocks()

    def _allocate_id(self) -> int:
        tile_id = self._next_id
        self._next_id += 1
        return tile_id

    def _add_tile(self, position: Position, value: int, tile_id: Optional[int] = None) -> Tile:
        assert self.grid is not None
        if self.grid.occupant_at(position) is not None:
            raise InvariantViolation(f"cell {position} is already occupied")
        tile = Tile(id=self._allocate_id() if tile_id is None else tile_id, value=value, position=position)
        self.tiles[tile.id] = tile
        self.grid.set_occupant(position, tile.id)
        return tile

    def _tile(self, tile_id: int) -> Tile:
        try:
            return self.tiles[tile_id]
        except KeyError:
            raise InvariantViolation(f"tile {tile_id} is not live") from None

    def _spawn_blocks(self) -> None:
        assert self.grid is not None
        amount = self.rules.spawn_amount(self.round)
        self.round += 1

        free = self.grid.empty_positions()
        self.rng.shuffle(free)
        for position in free[:amount]:
            tile = self._add_tile(position, self.rules.draw_value(self.rng))
            logger.debug("Spawned %d at %s", tile.value, position)
            self._emit(TileSpawned(tile_id=tile.id, cell=position, value=tile.value, round=self.round))

        remaining = len(self.grid.empty_positions())
        # A single free cell ends the game even if a merge is still possible
        if remaining == 1 or (remaining == 0 and not self.legal_directions()):
            self.flow.send("lost")
            logger.info("Game lost after round %d", self.round)
            self._emit(GameLost(round=self.round, empty_cells=remaining))
            return

        winner = next((t for t in self.tiles.values() if t.value == self.rules.win_value), None)
        if winner is not None:
            self.flow.send("won")
            logger.info("Game won with %d after round %d", winner.value, self.round)
            self._emit(GameWon(tile_id=winner.id, value=winner.value, round=self.round))
            return

        self.flow.send("spawned")

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------
    def request_move(self, direction: Any) -> Optional[MoveResolved]:
        """Resolve a move and publish it; returns None when the input is ignored."""
        if self.state is not GameState.WAITING_INPUT:
            logger.debug("Move %r ignored in state %s", direction, self.state.value)
            return None
        parsed = Direction.parse(direction)
        if parsed is None:
            logger.debug("Move %r is not a legal direction", direction)
            return None

        self.flow.send("move_requested")
        batch = self._resolve_move(parsed)
        self._pending = batch
        logger.debug(
            "Moved %s: %d placements, %d merges", parsed.name, len(batch.placements), len(batch.merges)
        )
        self._emit(batch)
        return batch

    def _resolve_move(self, direction: Direction) -> MoveResolved:
        assert self.grid is not None
        dx, dy = direction.vector

        ordered = sorted(self.tiles.values(), key=lambda t: (t.position[0], t.position[1]))
        if direction in (Direction.UP, Direction.RIGHT):
            ordered.reverse()

        origins = {tile.id: tile.position for tile in ordered}
        claimed: Set[int] = set()
        for tile in ordered:
            current = tile.position
            while True:
                ahead = (current[0] + dx, current[1] + dy)
                if not self.grid.is_inside(ahead):
                    break
                occupant_id = self.grid.occupant_at(ahead)
                if occupant_id is None:
                    self.grid.set_occupant(current, None)
                    self.grid.set_occupant(ahead, tile.id)
                    tile.position = current = ahead
                    continue
                occupant = self._tile(occupant_id)
                if occupant_id not in claimed and tile.can_merge_into(occupant):
                    tile.merge_target = occupant_id
                    claimed.add(occupant_id)
                    # The absorbed tile no longer blocks the tiles behind it
                    self.grid.set_occupant(current, None)
                break

        placements: List[TilePlacement] = []
        merges: List[MergeNotice] = []
        for tile in ordered:
            destination = tile.position
            if tile.merge_target is not None:
                target = self._tile(tile.merge_target)
                destination = target.position
                merges.append(
                    MergeNotice(
                        survivor_id=self._allocate_id(),
                        absorbed_ids=(target.id, tile.id),
                        cell=target.position,
                        value=target.value * 2,
                    )
                )
            placements.append(TilePlacement(tile_id=tile.id, from_cell=origins[tile.id], to_cell=destination))

        return MoveResolved(
            direction=direction,
            placements=tuple(placements),
            merges=tuple(merges),
            duration=self.config.animation_duration,
        )

    def animations_complete(self) -> None:
        """Settle the pending move and continue with the next spawn."""
        if self.state is not GameState.MOVING or self._pending is None:
            logger.debug("animations_complete() ignored in state %s", self.state.value)
            return
        batch, self._pending = self._pending, None
        self._settle(batch)
        self.flow.send("moves_settled")
        self._spawn_blocks()

    def _settle(self, batch: MoveResolved) -> None:
        assert self.grid is not None
        for merge in batch.merges:
            target = self.tiles.pop(merge.absorbed_ids[0], None)
            mover = self.tiles.pop(merge.absorbed_ids[1], None)
            if target is None or mover is None:
                raise InvariantViolation(f"merge {merge.absorbed_ids} refers to a retired tile")
            self.grid.set_occupant(target.position, None)
            self._add_tile(merge.cell, merge.value, tile_id=merge.survivor_id)
        for tile in self.tiles.values():
            tile.merge_target = None

    # ------------------------------------------------------------------
    # Queries and setup
    # ------------------------------------------------------------------
    def legal_directions(self) -> List[Direction]:
        """Directions in which at least one tile would slide or merge."""
        if self.grid is None:
            return []
        legal = []
        for direction in Direction:
            dx, dy = direction.vector
            for tile in self.tiles.values():
                ahead = (tile.position[0] + dx, tile.position[1] + dy)
                if not self.grid.is_inside(ahead):
                    continue
                occupant_id = self.grid.occupant_at(ahead)
                if occupant_id is None or self.tiles[occupant_id].value == tile.value:
                    legal.append(direction)
                    break
        return legal

    def get_state(self) -> np.ndarray:
        """Tile values indexed ``[y, x]``, 0 for empty cells."""
        state = np.zeros((self.config.height, self.config.width), dtype=np.int64)
        for tile in self.tiles.values():
            x, y = tile.position
            state[y, x] = tile.value
        return state

    def max_tile(self) -> int:
        return max((t.value for t in self.tiles.values()), default=0)

    def tile_at(self, position: Position) -> Optional[Tile]:
        if self.grid is None:
            return None
        tile_id = self.grid.occupant_at(position)
        return None if tile_id is None else self.tiles[tile_id]

    def load_tiles(self, layout: Mapping[Position, int]) -> None:
        """Replace the live tiles with ``layout`` while waiting for input."""
        if self.state is not GameState.WAITING_INPUT:
            raise RuntimeError(f"tiles can only be loaded while waiting for input, not in {self.state.value}")
        assert self.grid is not None
        for position, value in layout.items():
            if not self.grid.is_inside(position):
                raise IndexError(f"cell {position} is outside the grid")
            if not is_power_of_two(int(value)) or value < 2:
                raise ValueError(f"tile value {value} at {position} is not a power of two")
        self.grid.reset()
        self.tiles.clear()
        for position, value in layout.items():
            self._add_tile(tuple(position), int(value))
