"""Dungeon level state shared by the generator, the turn engine and save/load.

The grid is row-major (``grid[y][x]``). Reads outside the grid never raise:
they resolve to Wall (cells) or False (visibility).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..utils.geometry import in_bounds, make_grid
from . import visibility
from .corridors import Corridor
from .rooms import Room
from .themes import Theme, theme_for_level
from .tiles import WALKABLE, CellType, from_glyph

Coord = Tuple[int, int]


@dataclass
class DungeonState:
    width: int
    height: int
    level: int = 1
    theme: Theme = Theme.DUNGEON
    grid: List[List[CellType]] = field(default_factory=list)
    visible: List[List[bool]] = field(default_factory=list)
    explored: List[List[bool]] = field(default_factory=list)
    rooms: List[Room] = field(default_factory=list)
    corridors: List[Corridor] = field(default_factory=list)
    entrance: Optional[Coord] = None
    exit: Optional[Coord] = None
    warnings: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def reset_grids(self) -> None:
        self.grid = make_grid(self.width, self.height, CellType.WALL)
        self.visible = make_grid(self.width, self.height, False)
        self.explored = make_grid(self.width, self.height, False)

    # ------------------------------------------------------------------ cells
    def get_cell_type(self, x: int, y: int) -> CellType:
        if not in_bounds(x, y, self.width, self.height):
            return CellType.WALL
        try:
            return self.grid[y][x]
        except IndexError:
            return CellType.WALL

    def set_cell(self, x: int, y: int, cell: CellType) -> bool:
        if not in_bounds(x, y, self.width, self.height):
            return False
        self.grid[y][x] = cell
        return True

    def is_walkable(self, x: int, y: int) -> bool:
        return self.get_cell_type(x, y) in WALKABLE

    def is_visible(self, x: int, y: int) -> bool:
        try:
            return in_bounds(x, y, self.width, self.height) and bool(self.visible[y][x])
        except IndexError:
            return False

    def is_explored(self, x: int, y: int) -> bool:
        try:
            return in_bounds(x, y, self.width, self.height) and bool(self.explored[y][x])
        except IndexError:
            return False

    def update_visibility(self, viewer_x: int, viewer_y: int, radius: int) -> int:
        return visibility.update_visibility(self, viewer_x, viewer_y, radius)

    def render_rows(self) -> List[str]:
        return ["".join(cell.value for cell in row) for row in self.grid]

    # -------------------------------------------------------------- save/load
    def get_save_data(self) -> Dict[str, Any]:
        """Serializable snapshot. ``visible`` is left out; it is recomputed after load."""
        return {
            "grid": self.render_rows(),
            "width": self.width,
            "height": self.height,
            "level": self.level,
            "theme": self.theme.value,
            "rooms": [r.to_dict() for r in self.rooms],
            "corridors": [c.to_dict() for c in self.corridors],
            "entrance": list(self.entrance) if self.entrance else None,
            "exit": list(self.exit) if self.exit else None,
            "explored": [[bool(v) for v in row] for row in self.explored],
        }

    @classmethod
    def load_save_data(cls, data: Dict[str, Any]) -> "DungeonState":
        width = int(data["width"])
        height = int(data["height"])
        level = int(data.get("level", 1))
        try:
            theme = Theme(data.get("theme"))
        except ValueError:
            theme = theme_for_level(level)
        state = cls(width, height, level, theme)
        state.reset_grids()
        for y, row in enumerate(data.get("grid", [])[:height]):
            for x, ch in enumerate(row[:width]):
                state.grid[y][x] = from_glyph(ch)
        state.rooms = [Room.from_dict(r) for r in data.get("rooms", [])]
        state.corridors = [Corridor.from_dict(c) for c in data.get("corridors", [])]
        entrance = data.get("entrance")
        exit_ = data.get("exit")
        state.entrance = (int(entrance[0]), int(entrance[1])) if entrance else None
        state.exit = (int(exit_[0]), int(exit_[1])) if exit_ else None
        explored = data.get("explored")
        if isinstance(explored, list):
            state.explored = [[bool(v) for v in row] if isinstance(row, list) else row for row in explored]
        else:
            state.explored = None
        visibility.ensure_explored(state)
        return state
