"""Enemy turn logic.

Per enemy, once per game turn:
  * act only when ``turn % move_speed == 0`` (slow enemies skip turns);
  * aggressive enemies within their detection radius attack when adjacent
    (Manhattan distance <= 1), otherwise take one greedy step toward the
    player: horizontal first, then vertical, then the diagonal;
  * everyone else wanders: 30% of the time, one step in the first open
    cardinal direction of a shuffled order.

The chase is a greedy heuristic, not pathfinding; an enemy behind a wall
simply stays put until the geometry lets it through.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from ..models.entities import Enemy
from ..utils.geometry import CARDINAL_DIRECTIONS, grid_distance, step_toward
from . import combat_service
from .combat_service import PLAYER

WANDER_CHANCE = 0.3

Coord = Tuple[int, int]


def can_move_to(session, x: int, y: int) -> bool:
    """Walkable, free of entities (traps included) and not the player's cell."""
    if not session.dungeon.is_walkable(x, y):
        return False
    if session.entities.is_occupied(x, y):
        return False
    return (x, y) != (session.player.x, session.player.y)


def _chase_steps(enemy: Enemy, px: int, py: int) -> Iterable[Coord]:
    dx = step_toward(enemy.x, px)
    dy = step_toward(enemy.y, py)
    if dx:
        yield enemy.x + dx, enemy.y
    if dy:
        yield enemy.x, enemy.y + dy
    if dx and dy:
        yield enemy.x + dx, enemy.y + dy


def _try_steps(session, enemy: Enemy, steps: Iterable[Coord]) -> bool:
    for nx, ny in steps:
        if can_move_to(session, nx, ny):
            enemy.x, enemy.y = nx, ny
            return True
    return False


def process_enemy_turn(session, enemy: Enemy) -> str:
    """Run one enemy's turn. Returns what it did: idle, attack, chase, wander."""
    if enemy.move_speed > 0 and session.turn % enemy.move_speed != 0:
        return "idle"
    player = session.player
    distance = grid_distance(enemy.x, enemy.y, player.x, player.y)
    if enemy.aggressive and distance <= enemy.detection_radius:
        if distance <= 1:
            combat_service.attack(session, enemy, PLAYER)
            return "attack"
        return "chase" if _try_steps(session, enemy, _chase_steps(enemy, player.x, player.y)) else "idle"
    if session.rng.random() < WANDER_CHANCE:
        directions = list(CARDINAL_DIRECTIONS)
        session.rng.shuffle(directions)
        steps = [(enemy.x + dx, enemy.y + dy) for dx, dy in directions]
        if _try_steps(session, enemy, steps):
            return "wander"
    return "idle"


def process_turn(session) -> int:
    """Run every enemy in list order. Returns how many enemies acted.

    Enemies removed earlier in the same turn are skipped, and processing stops
    as soon as the player is dead.
    """
    acted = 0
    for entity in list(session.entities):
        if not session.player.is_alive:
            break
        if not isinstance(entity, Enemy) or entity not in session.entities:
            continue
        if process_enemy_turn(session, entity) != "idle":
            acted += 1
    return acted
