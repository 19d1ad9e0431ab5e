"""Public dungeon package interface."""

from .corridors import Corridor
from .pipeline import generate
from .rooms import Room
from .state import DungeonState
from .themes import Theme, theme_for_level
from .tiles import WALKABLE, CellType, is_walkable

__all__ = [
    "CellType",
    "Corridor",
    "DungeonState",
    "Room",
    "Theme",
    "WALKABLE",
    "generate",
    "is_walkable",
    "theme_for_level",
]
