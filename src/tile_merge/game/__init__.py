"""Game module for the tile merge puzzle.

Exports the rules engine and supporting classes:
- GameGrid: cell position to tile id occupancy map
- Tile: a numbered piece and its transient merge target
- GameRules: win threshold and spawn distribution
- GameFlow / GameState: the session's state machine
- MergeGame: session object driving spawns, moves and merges
- Event types published to the presentation layer
"""

from .errors import ConfigurationError, InvariantViolation
from .grid import GameGrid, Position
from .tiles import Tile
from .rules import GameRules
from .flow import GameFlow, GameState
from .events import GameEvent, GameLost, GameWon, MergeNotice, MoveResolved, TilePlacement, TileSpawned
from .core import Direction, GameConfig, MergeGame

__all__ = [
    "ConfigurationError",
    "InvariantViolation",
    "GameGrid",
    "Position",
    "Tile",
    "GameRules",
    "GameFlow",
    "GameState",
    "GameEvent",
    "GameLost",
    "GameWon",
    "MergeNotice",
    "MoveResolved",
    "TilePlacement",
    "TileSpawned",
    "Direction",
    "GameConfig",
    "MergeGame",
]
