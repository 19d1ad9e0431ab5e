"""Connectivity utilities: 4-directional flood fill over walkable cells."""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterable, List, Set, Tuple

from .tiles import WALKABLE, CellType

Coord2D = Tuple[int, int]


def flood_region(start: Coord2D, passable: Callable[[int, int], bool]) -> Set[Coord2D]:
    """Cells reachable from ``start`` through cells where ``passable(x, y)`` holds."""
    if not passable(*start):
        return set()
    visited = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nxt = (cx + dx, cy + dy)
            if nxt not in visited and passable(*nxt):
                visited.add(nxt)
                q.append(nxt)
    return visited


def flood_accessibility(dungeon) -> Set[Coord2D]:
    """Walkable cells reachable from the entrance (empty set without one)."""
    if dungeon.entrance is None:
        return set()
    return flood_region(tuple(dungeon.entrance), dungeon.is_walkable)


def walkable_cells(dungeon) -> Iterable[Coord2D]:
    for y, row in enumerate(dungeon.grid):
        for x, cell in enumerate(row):
            if cell in WALKABLE:
                yield x, y


def unreachable_cells(dungeon) -> List[Coord2D]:
    reached = flood_accessibility(dungeon)
    return [c for c in walkable_cells(dungeon) if c not in reached]


def count_cells(dungeon, cell_type: CellType) -> int:
    return sum(1 for row in dungeon.grid for cell in row if cell == cell_type)
