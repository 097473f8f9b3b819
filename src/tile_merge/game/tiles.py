from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .grid import Position


def is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


@dataclass
class Tile:
    """A numbered piece on the board.

    Tiles are never revalued: a merge retires both sources and creates a new
    tile. ``merge_target`` is the id of the tile this one is being absorbed
    into during the move currently being resolved.
    """

    id: int
    value: int
    position: Position
    merge_target: Optional[int] = None

    def can_merge_into(self, other: "Tile") -> bool:
        return other.id != self.id and other.value == self.value and other.merge_target is None
