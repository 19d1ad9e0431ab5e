# Cell type constants centralized for modular imports
from __future__ import annotations

from enum import Enum


class CellType(str, Enum):
    """Grid cell kinds. The value doubles as the ASCII map glyph."""

    WALL = "#"
    FLOOR = "."
    DOOR = "+"
    ENTRANCE = "<"
    EXIT = ">"
    WATER = "~"
    LAVA = "="
    CHASM = ":"
    PILLAR = "O"
    RUBBLE = ","
    ALTAR = "_"


WALL = CellType.WALL
FLOOR = CellType.FLOOR
DOOR = CellType.DOOR
ENTRANCE = CellType.ENTRANCE
EXIT = CellType.EXIT

WALKABLE = frozenset(
    {
        CellType.FLOOR,
        CellType.DOOR,
        CellType.ENTRANCE,
        CellType.EXIT,
        CellType.WATER,
        CellType.RUBBLE,
    }
)
BLOCKING_FEATURES = frozenset({CellType.LAVA, CellType.CHASM, CellType.PILLAR, CellType.ALTAR})

_BY_GLYPH = {c.value: c for c in CellType}


def is_walkable(cell) -> bool:
    return cell in WALKABLE


def from_glyph(ch: str) -> CellType:
    """Map a saved glyph back to its cell type; unknown glyphs become Wall."""
    return _BY_GLYPH.get(ch, CellType.WALL)


__all__ = [
    "CellType",
    "WALL",
    "FLOOR",
    "DOOR",
    "ENTRANCE",
    "EXIT",
    "WALKABLE",
    "BLOCKING_FEATURES",
    "is_walkable",
    "from_glyph",
]
