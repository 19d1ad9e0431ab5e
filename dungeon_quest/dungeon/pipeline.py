"""Pipeline orchestration for dungeon generation.

``generate(width, height, level, rng)`` runs a strict linear sequence of
phases over a fresh ``DungeonState``:

    init_grids -> partition -> rooms -> features -> corridors
               -> entrance_exit -> doors

Each phase returns a (possibly empty) list of warnings. A phase that raises an
indexing/arithmetic error is recorded as a warning too and the pipeline moves
on, so a best-effort level is always produced. Callers (and tests) inspect
``dungeon.warnings`` instead of scraping logs.

Population (enemies, items, traps) is not a phase here; the game session runs
it right after generation so this module stays free of gameplay state.

Per-phase wall time lands in ``metrics['phase_ms']`` alongside simple
structural counters (see metrics.py).
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..logging_utils import get_logger
from .bsp import Partition, partition_level
from .corridors import connect_rooms
from .doors import place_doors
from .metrics import init_metrics
from .rooms import Room, carve_room, place_features
from .state import DungeonState
from .themes import RoomTemplate, templates_for, theme_for_level
from .tiles import CellType

log = get_logger("dungeon_quest.dungeon")

_PHASE_ERRORS = (IndexError, ValueError, TypeError, ZeroDivisionError)
FALLBACK_ROOM_SIDE = 7


@dataclass
class _Build:
    leaves: List[Partition] = field(default_factory=list)
    templates: List[Optional[RoomTemplate]] = field(default_factory=list)


def generate(width: int, height: int, level: int = 1, rng: Optional[random.Random] = None) -> DungeonState:
    r = rng or random
    start = time.perf_counter()
    early: List[str] = []
    if width < 1 or height < 1:
        early.append(f"invalid dimensions {width}x{height}; clamped to at least 1x1")
        width, height = max(1, width), max(1, height)
    level = max(1, int(level))
    dungeon = DungeonState(width, height, level, theme_for_level(level))
    dungeon.metrics = init_metrics()
    dungeon.warnings.extend(early)
    phase_times = dungeon.metrics["phase_ms"]
    build = _Build()

    def _phase(label, fn, *a):
        ps = time.perf_counter()
        try:
            problems = fn(*a) or []
        except _PHASE_ERRORS as exc:
            problems = [f"{label}: {exc}"]
            log.warn(event="generation_phase_failed", phase=label, error=str(exc), dungeon_level=level)
        phase_times[label] = int((time.perf_counter() - ps) * 1000)
        dungeon.warnings.extend(problems)

    _phase("init_grids", _init_grids, dungeon)
    _phase("partition", _partition, dungeon, build, r)
    _phase("rooms", _carve_rooms, dungeon, build, r)
    _phase("features", _decorate_rooms, dungeon, build, r)
    _phase("corridors", _connect, dungeon, r)
    _phase("entrance_exit", _place_entrance_exit, dungeon)
    _phase("doors", _place_doors, dungeon, r)

    dungeon.metrics["runtime_ms"] = round((time.perf_counter() - start) * 1000, 2)
    for msg in dungeon.warnings:
        log.warn(event="generation_warning", dungeon_level=level, detail=msg)
    log.info(
        event="dungeon_generated",
        dungeon_level=level,
        theme=dungeon.theme.value,
        width=width,
        height=height,
        rooms=len(dungeon.rooms),
        corridors=len(dungeon.corridors),
        runtime_ms=dungeon.metrics["runtime_ms"],
    )
    return dungeon


# --------------------------------------------------------------------- phases
def _init_grids(dungeon: DungeonState):
    dungeon.reset_grids()


def _partition(dungeon: DungeonState, build: _Build, rng):
    build.leaves = partition_level(dungeon.width, dungeon.height, rng)
    dungeon.metrics["leaves"] = len(build.leaves)


def _carve_rooms(dungeon: DungeonState, build: _Build, rng):
    templates = templates_for(dungeon.theme)
    for leaf in build.leaves:
        carved = carve_room(dungeon.grid, leaf, templates, dungeon.theme, rng)
        if carved is None:
            dungeon.metrics["rooms_skipped"] += 1
            continue
        room, tmpl = carved
        dungeon.rooms.append(room)
        build.templates.append(tmpl)
    warnings = []
    if not dungeon.rooms:
        room = _carve_fallback_room(dungeon)
        dungeon.rooms.append(room)
        build.templates.append(None)
        warnings.append(f"no leaf could host a room; carved fallback room at ({room.x},{room.y})")
    dungeon.metrics["rooms"] = len(dungeon.rooms)
    return warnings


def _carve_fallback_room(dungeon: DungeonState) -> Room:
    def span(total: int):
        if total >= 3:
            side = min(FALLBACK_ROOM_SIDE, total - 2)
            return (total - side) // 2, side
        return 0, total

    x, w = span(dungeon.width)
    y, h = span(dungeon.height)
    room = Room.create(x, y, w, h, "fallback", dungeon.theme)
    for cx, cy in room.cells():
        dungeon.grid[cy][cx] = CellType.FLOOR
    return room


def _decorate_rooms(dungeon: DungeonState, build: _Build, rng):
    for room, tmpl in zip(dungeon.rooms, build.templates):
        if tmpl is None:
            continue
        placed, reverted = place_features(dungeon.grid, room, tmpl, rng)
        dungeon.metrics["features"] += placed
        dungeon.metrics["features_reverted"] += reverted


def _connect(dungeon: DungeonState, rng):
    corridors, carved = connect_rooms(dungeon.grid, dungeon.rooms, rng)
    dungeon.corridors = corridors
    dungeon.metrics["corridors"] = len(corridors)
    dungeon.metrics["corridor_cells"] = carved


def _far_interior_corner(room: Room):
    if room.width >= 3 and room.height >= 3:
        xs = (room.x + 1, room.x + room.width - 2)
        ys = (room.y + 1, room.y + room.height - 2)
    else:
        xs = (room.x, room.x + room.width - 1)
        ys = (room.y, room.y + room.height - 1)
    corners = [(x, y) for y in ys for x in xs]
    return max(corners, key=lambda c: abs(c[0] - room.center_x) + abs(c[1] - room.center_y))


def _place_entrance_exit(dungeon: DungeonState):
    if not dungeon.rooms:
        return ["no rooms available for entrance/exit"]
    first, last = dungeon.rooms[0], dungeon.rooms[-1]
    warnings = []
    entrance = first.center
    exit_ = last.center
    if len(dungeon.rooms) == 1:
        exit_ = _far_interior_corner(first)
        warnings.append("single room level; exit placed in the far interior corner")
    dungeon.grid[entrance[1]][entrance[0]] = CellType.ENTRANCE
    dungeon.entrance = entrance
    if exit_ == entrance:
        warnings.append("level too small to hold a separate exit")
        return warnings
    dungeon.grid[exit_[1]][exit_[0]] = CellType.EXIT
    dungeon.exit = exit_
    return warnings


def _place_doors(dungeon: DungeonState, rng):
    dungeon.metrics["doors"] = place_doors(dungeon.grid, dungeon.corridors, rng)
