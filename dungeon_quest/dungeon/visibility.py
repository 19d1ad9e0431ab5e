"""Fog of war: distance-only sight around the viewer.

There is no occlusion; every in-bounds cell within ``radius`` Manhattan steps
is visible. ``explored`` accumulates and is never cleared here.
"""

from __future__ import annotations

from ..utils.geometry import grid_distance, make_grid


def ensure_explored(dungeon) -> bool:
    """Re-initialise ``explored`` if it is missing or mis-sized. Returns True if reset."""
    explored = getattr(dungeon, "explored", None)
    ok = (
        isinstance(explored, list)
        and len(explored) == dungeon.height
        and all(isinstance(row, list) and len(row) == dungeon.width for row in explored)
    )
    if not ok:
        dungeon.explored = make_grid(dungeon.width, dungeon.height, False)
    return not ok


def update_visibility(dungeon, viewer_x: int, viewer_y: int, radius: int) -> int:
    """Recompute ``visible`` around the viewer; returns the number of visible cells."""
    ensure_explored(dungeon)
    dungeon.visible = make_grid(dungeon.width, dungeon.height, False)
    seen = 0
    for y in range(max(0, viewer_y - radius), min(dungeon.height, viewer_y + radius + 1)):
        for x in range(max(0, viewer_x - radius), min(dungeon.width, viewer_x + radius + 1)):
            if grid_distance(viewer_x, viewer_y, x, y) <= radius:
                dungeon.visible[y][x] = True
                dungeon.explored[y][x] = True
                seen += 1
    return seen
