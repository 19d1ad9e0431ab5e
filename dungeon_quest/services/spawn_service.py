"""Level population: enemies, hidden traps and the occasional NPC.

Enemy count is ``5 + floor(level * 1.5)``. The enemy pool grows with depth
(rat always, skeleton from level 2, archer from 3, mage from 4) and each
enemy type is drawn uniformly from the pool. Enemies are placed in the
interior of rooms other than the first (entrance) and last (exit) room,
falling back to wider room sets on very small levels.

Placement draws a room and an interior cell per attempt and gives up after
``ATTEMPTS_PER_ENEMY`` x count attempts, so a crowded level may end up with
fewer enemies than requested (logged).
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from ..dungeon.rooms import Room
from ..logging_utils import get_logger
from ..models.entities import Npc, Trap, create_enemy

log = get_logger("dungeon_quest.spawn")

ATTEMPTS_PER_ENEMY = 20
TRAP_MIN_LEVEL = 2
NPC_LEVEL_INTERVAL = 3

ENEMY_LEVEL_GATES: Tuple[Tuple[str, int], ...] = (("rat", 1), ("skeleton", 2), ("archer", 3), ("mage", 4))

NPC_LINES = (
    "The deeper you go, the stranger the halls become.",
    "Rest when you can. The mages below hit hard.",
    "Watch your step; not every flagstone is what it seems.",
)


def enemy_count(level: int) -> int:
    return 5 + int(math.floor(level * 1.5))


def available_enemy_types(level: int) -> List[str]:
    return [key for key, min_level in ENEMY_LEVEL_GATES if level >= min_level]


def trap_count(level: int) -> int:
    return level // 2 if level >= TRAP_MIN_LEVEL else 0


def spawn_rooms(rooms: Sequence[Room]) -> Sequence[Room]:
    """Rooms eligible for spawns: skip the first and last when possible."""
    return rooms[1:-1] or rooms[1:] or rooms


def _random_interior(rng, room: Room) -> Tuple[int, int]:
    x = rng.randint(room.x + 1, max(room.x + 1, room.x + room.width - 2))
    y = rng.randint(room.y + 1, max(room.y + 1, room.y + room.height - 2))
    return x, y


def _free_cell(session, x: int, y: int) -> bool:
    return (
        session.dungeon.is_walkable(x, y)
        and not session.entities.is_occupied(x, y)
        and (x, y) != (session.player.x, session.player.y)
    )


def _find_cell(session, rooms: Sequence[Room], attempts: int) -> Optional[Tuple[int, int]]:
    for _ in range(attempts):
        room = session.rng.choice(list(rooms))
        x, y = _random_interior(session.rng, room)
        if _free_cell(session, x, y):
            return x, y
    return None


def populate_dungeon(session, level: int) -> int:
    """Clear the entity list and place enemies, traps and NPCs. Returns enemies placed."""
    session.entities.clear()
    rooms = spawn_rooms(session.dungeon.rooms)
    if not rooms:
        log.warn(event="spawn_no_rooms", dungeon_level=level)
        return 0
    rng = session.rng
    wanted = enemy_count(level)
    pool = available_enemy_types(level)
    budget = wanted * ATTEMPTS_PER_ENEMY
    placed = 0
    while placed < wanted and budget > 0:
        budget -= 1
        room = rng.choice(list(rooms))
        x, y = _random_interior(rng, room)
        if not _free_cell(session, x, y):
            continue
        enemy = create_enemy(rng.choice(pool), x, y)
        if enemy is None:
            continue
        session.entities.add(enemy)
        placed += 1
    if placed < wanted:
        log.warn(event="spawn_shortfall", dungeon_level=level, wanted=wanted, placed=placed)

    traps = 0
    for _ in range(trap_count(level)):
        cell = _find_cell(session, rooms, ATTEMPTS_PER_ENEMY)
        if cell is None:
            break
        session.entities.add(Trap(name="Spike Trap", x=cell[0], y=cell[1], damage=3 + level))
        traps += 1

    if level % NPC_LEVEL_INTERVAL == 0:
        cell = _find_cell(session, rooms, ATTEMPTS_PER_ENEMY)
        if cell is not None:
            line = NPC_LINES[(level // NPC_LEVEL_INTERVAL - 1) % len(NPC_LINES)]
            session.entities.add(Npc(name="Hermit", x=cell[0], y=cell[1], dialogue=line))

    log.info(event="dungeon_populated", dungeon_level=level, enemies=placed, traps=traps)
    return placed
