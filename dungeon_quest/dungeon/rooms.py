"""Room carving and decorative feature placement.

Rooms are carved one per BSP leaf. The room rectangle includes its own
perimeter: interior cells always become Floor, perimeter cells are eroded
(left as Wall) with the template's ``irregularity`` probability to give caves
and ruins a ragged outline. A carved perimeter corner whose two perimeter
neighbours both stayed Wall would only touch the room diagonally, so it is
reverted to Wall.

Feature rules then stamp special cells over Floor. Blocking features (lava,
chasm, pillar, altar) keep two cells away from the room edge and are undone if
they would cut the room's walkable area in two. The room center (where
corridors aim and the entrance or exit may go) never takes a blocking feature.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .bsp import Partition
from .connectivity import flood_region
from .themes import RoomTemplate, Theme
from .tiles import BLOCKING_FEATURES, WALKABLE, CellType

MIN_LEAF_SIZE = 6
PADDING = 2
MIN_ROOM_SIDE = 3
FEATURE_ATTEMPTS = 10


@dataclass(frozen=True)
class Room:
    x: int
    y: int
    width: int
    height: int
    center_x: int
    center_y: int
    template_name: str
    theme: str

    @classmethod
    def create(cls, x: int, y: int, width: int, height: int, template_name: str, theme) -> "Room":
        theme_value = theme.value if isinstance(theme, Theme) else str(theme)
        return cls(x, y, width, height, x + width // 2, y + height // 2, template_name, theme_value)

    @property
    def center(self) -> Tuple[int, int]:
        return (self.center_x, self.center_y)

    def cells(self) -> Iterator[Tuple[int, int]]:
        for iy in range(self.y, self.y + self.height):
            for ix in range(self.x, self.x + self.width):
                yield ix, iy

    def interior_cells(self) -> Iterator[Tuple[int, int]]:
        for iy in range(self.y + 1, self.y + self.height - 1):
            for ix in range(self.x + 1, self.x + self.width - 1):
                yield ix, iy

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def edge_distance(self, x: int, y: int) -> int:
        return min(x - self.x, self.x + self.width - 1 - x, y - self.y, self.y + self.height - 1 - y)

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "center_x": self.center_x,
            "center_y": self.center_y,
            "template_name": self.template_name,
            "theme": self.theme,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Room":
        return cls.create(
            int(data["x"]),
            int(data["y"]),
            int(data["width"]),
            int(data["height"]),
            data.get("template_name", "chamber"),
            data.get("theme", Theme.DUNGEON.value),
        )


def _size_range(tmpl_min: int, tmpl_max: int, leaf_side: int) -> Optional[Tuple[int, int]]:
    avail = leaf_side - 2 * PADDING
    lo = min(tmpl_min, avail)
    hi = min(tmpl_max, avail)
    if hi < MIN_ROOM_SIDE or lo > hi:
        return None
    return lo, hi


def carve_room(
    grid: List[List[CellType]],
    leaf: Partition,
    templates: Sequence[RoomTemplate],
    theme: Theme,
    rng: Optional[random.Random] = None,
) -> Optional[Tuple[Room, RoomTemplate]]:
    """Carve a templated room inside ``leaf``; None when the leaf cannot host one."""
    r = rng or random
    if leaf.w < MIN_LEAF_SIZE or leaf.h < MIN_LEAF_SIZE or not templates:
        return None
    tmpl = r.choice(list(templates))
    w_range = _size_range(tmpl.min_width, tmpl.max_width, leaf.w)
    h_range = _size_range(tmpl.min_height, tmpl.max_height, leaf.h)
    if w_range is None or h_range is None:
        return None
    w = r.randint(*w_range)
    h = r.randint(*h_range)
    x = leaf.x + PADDING + r.randint(0, leaf.w - w - 2 * PADDING)
    y = leaf.y + PADDING + r.randint(0, leaf.h - h - 2 * PADDING)
    height = len(grid)
    width = len(grid[0]) if height else 0
    if x < 0 or y < 0 or x + w > width or y + h > height:
        return None
    room = Room.create(x, y, w, h, tmpl.name, theme)
    _carve_rect(grid, room, tmpl.irregularity, r)
    return room, tmpl


def _carve_rect(grid, room: Room, irregularity: float, rng) -> None:
    for ix, iy in room.cells():
        if room.edge_distance(ix, iy) > 0:
            grid[iy][ix] = CellType.FLOOR
        elif irregularity <= 0 or rng.random() >= irregularity:
            grid[iy][ix] = CellType.FLOOR
    x0, y0 = room.x, room.y
    x1, y1 = room.x + room.width - 1, room.y + room.height - 1
    for cx, cy, sx, sy in ((x0, y0, 1, 1), (x1, y0, -1, 1), (x0, y1, 1, -1), (x1, y1, -1, -1)):
        if grid[cy][cx] != CellType.FLOOR:
            continue
        if grid[cy][cx + sx] != CellType.FLOOR and grid[cy + sy][cx] != CellType.FLOOR:
            grid[cy][cx] = CellType.WALL


def _room_connected(grid, room: Room) -> bool:
    """True when the room's walkable cells form one region around its center."""

    def passable(x: int, y: int) -> bool:
        return room.contains(x, y) and grid[y][x] in WALKABLE

    total = sum(1 for x, y in room.cells() if passable(x, y))
    return len(flood_region(room.center, passable)) == total


def place_features(grid, room: Room, template: RoomTemplate, rng: Optional[random.Random] = None) -> Tuple[int, int]:
    """Apply the template's feature rules. Returns (placed, reverted)."""
    r = rng or random
    placed = reverted = 0
    for rule in template.features:
        if r.random() >= rule.chance:
            continue
        blocking = rule.cell_type in BLOCKING_FEATURES
        margin = 2 if blocking else 1
        x_lo, x_hi = room.x + margin, room.x + room.width - 1 - margin
        y_lo, y_hi = room.y + margin, room.y + room.height - 1 - margin
        if x_lo > x_hi or y_lo > y_hi:
            continue
        count = r.randint(*rule.count_range)
        for _ in range(count):
            for _attempt in range(FEATURE_ATTEMPTS):
                fx = r.randint(x_lo, x_hi)
                fy = r.randint(y_lo, y_hi)
                if grid[fy][fx] != CellType.FLOOR:
                    continue
                if blocking and (fx, fy) == room.center:
                    continue
                grid[fy][fx] = rule.cell_type
                if blocking and not _room_connected(grid, room):
                    grid[fy][fx] = CellType.FLOOR
                    reverted += 1
                    continue
                placed += 1
                break
    return placed, reverted
