"""L-shaped corridor carving between room centers.

Each corridor runs horizontally along the start row to the end column, then
vertically along the end column to the end row. Carving only turns Wall into
Floor, so crossing an existing room or corridor leaves it untouched.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..utils.geometry import clamp
from .rooms import Room
from .tiles import CellType

EXTRA_LINK_RATIO = 0.2


@dataclass(frozen=True)
class Corridor:
    start_x: int
    start_y: int
    end_x: int
    end_y: int

    def endpoints(self):
        return ((self.start_x, self.start_y), (self.end_x, self.end_y))

    def to_dict(self) -> dict:
        return {"start_x": self.start_x, "start_y": self.start_y, "end_x": self.end_x, "end_y": self.end_y}

    @classmethod
    def from_dict(cls, data: dict) -> "Corridor":
        return cls(int(data["start_x"]), int(data["start_y"]), int(data["end_x"]), int(data["end_y"]))


def carve_corridor(grid, corridor: Corridor) -> int:
    """Carve one corridor; returns how many Wall cells became Floor."""
    height = len(grid)
    width = len(grid[0]) if height else 0
    if not width:
        return 0
    carved = 0
    row = clamp(corridor.start_y, 0, height - 1)
    x_a = clamp(min(corridor.start_x, corridor.end_x), 0, width - 1)
    x_b = clamp(max(corridor.start_x, corridor.end_x), 0, width - 1)
    for x in range(x_a, x_b + 1):
        if grid[row][x] == CellType.WALL:
            grid[row][x] = CellType.FLOOR
            carved += 1
    col = clamp(corridor.end_x, 0, width - 1)
    y_a = clamp(min(corridor.start_y, corridor.end_y), 0, height - 1)
    y_b = clamp(max(corridor.start_y, corridor.end_y), 0, height - 1)
    for y in range(y_a, y_b + 1):
        if grid[y][col] == CellType.WALL:
            grid[y][col] = CellType.FLOOR
            carved += 1
    return carved


def _link(grid, a: Room, b: Room, out: List[Corridor]) -> int:
    corridor = Corridor(a.center_x, a.center_y, b.center_x, b.center_y)
    out.append(corridor)
    return carve_corridor(grid, corridor)


def connect_rooms(grid, rooms: Sequence[Room], rng: Optional[random.Random] = None):
    """Chain consecutive rooms, then add a few random loops.

    Returns (corridors, carved_cells). Self pairs drawn for a loop are skipped,
    not redrawn.
    """
    r = rng or random
    corridors: List[Corridor] = []
    carved = 0
    for i in range(1, len(rooms)):
        carved += _link(grid, rooms[i - 1], rooms[i], corridors)
    extra = int(len(rooms) * EXTRA_LINK_RATIO)
    for _ in range(extra):
        a = r.randrange(len(rooms))
        b = r.randrange(len(rooms))
        if a == b:
            continue
        carved += _link(grid, rooms[a], rooms[b], corridors)
    return corridors, carved
