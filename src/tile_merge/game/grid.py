from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from .errors import ConfigurationError


Position = Tuple[int, int]

EMPTY = -1


class GameGrid:
    """Fixed width x height occupancy map from cell position to tile id.

    Cells are addressed as ``(x, y)`` while the backing array is indexed
    ``[y, x]``. Empty cells hold ``EMPTY``. The grid is a pure map: it does
    not know tile values and does not check that a tile's own position
    agrees with where it is recorded.
    """

    def __init__(self, width: int, height: int) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ConfigurationError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.grid = np.full((self.height, self.width), EMPTY, dtype=np.int64)

    def reset(self) -> None:
        self.grid.fill(EMPTY)

    def is_inside(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, position: Position) -> None:
        # numpy would silently wrap negative indices
        if not self.is_inside(position):
            raise IndexError(f"cell {position} is outside the {self.width}x{self.height} grid")

    def occupant_at(self, position: Position) -> Optional[int]:
        self._check(position)
        x, y = position
        tile_id = int(self.grid[y, x])
        return None if tile_id == EMPTY else tile_id

    def set_occupant(self, position: Position, tile_id: Optional[int]) -> None:
        self._check(position)
        x, y = position
        self.grid[y, x] = EMPTY if tile_id is None else int(tile_id)

    def empty_positions(self) -> List[Position]:
        """Unoccupied cells in row-major order; callers shuffle as needed."""
        return [(int(x), int(y)) for y, x in np.argwhere(self.grid == EMPTY)]

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self.grid != EMPTY))

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
