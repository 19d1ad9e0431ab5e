"""Door placement on corridor endpoints.

A corridor endpoint becomes a Door (30% of the time) when it is plain Floor
squeezed between walls along exactly one axis, i.e. it reads as a doorway
rather than open floor or a dead-end nub.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence

from .corridors import Corridor
from .tiles import CellType

DOOR_CHANCE = 0.3


def _cell(grid, x: int, y: int) -> CellType:
    if 0 <= y < len(grid) and 0 <= x < len(grid[y]):
        return grid[y][x]
    return CellType.WALL


def is_door_candidate(grid, x: int, y: int) -> bool:
    if _cell(grid, x, y) != CellType.FLOOR:
        return False
    vertical = _cell(grid, x, y - 1) == CellType.WALL and _cell(grid, x, y + 1) == CellType.WALL
    horizontal = _cell(grid, x - 1, y) == CellType.WALL and _cell(grid, x + 1, y) == CellType.WALL
    return vertical != horizontal


def place_doors(grid, corridors: Sequence[Corridor], rng: Optional[random.Random] = None) -> int:
    r = rng or random
    placed = 0
    for corridor in corridors:
        for x, y in corridor.endpoints():
            if is_door_candidate(grid, x, y) and r.random() < DOOR_CHANCE:
                grid[y][x] = CellType.DOOR
                placed += 1
    return placed
