from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple, Union

from .grid import Position


@dataclass(frozen=True, slots=True)
class TileSpawned:
    tile_id: int
    cell: Position
    value: int
    round: int


@dataclass(frozen=True, slots=True)
class TilePlacement:
    """Where a tile slides to; for a merging tile this is the target's cell."""

    tile_id: int
    from_cell: Position
    to_cell: Position


@dataclass(frozen=True, slots=True)
class MergeNotice:
    """A merge that settles once the presentation layer reports completion.

    `survivor_id` is reserved when the move resolves and becomes the id of
    the new tile. `absorbed_ids` is (target, mover).
    """

    survivor_id: int
    absorbed_ids: Tuple[int, int]
    cell: Position
    value: int


@dataclass(frozen=True, slots=True)
class MoveResolved:
    direction: int
    placements: Tuple[TilePlacement, ...]
    merges: Tuple[MergeNotice, ...]
    duration: float

    @property
    def changed(self) -> bool:
        return bool(self.merges) or any(p.from_cell != p.to_cell for p in self.placements)


@dataclass(frozen=True, slots=True)
class GameWon:
    tile_id: int
    value: int
    round: int


@dataclass(frozen=True, slots=True)
class GameLost:
    round: int
    empty_cells: int


GameEvent = Union[TileSpawned, MoveResolved, GameWon, GameLost]
Listener = Callable[[GameEvent], None]
