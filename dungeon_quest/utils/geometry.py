"""Small integer geometry and randomness helpers shared by every subsystem.

All random helpers take an optional ``rng`` (anything exposing the
``random.Random`` API). Passing a seeded ``random.Random`` makes generation,
AI and combat reproducible; omitting it falls back to the module-level
``random`` functions.
"""

from __future__ import annotations

import random
from typing import Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")
Coord = Tuple[int, int]

CARDINAL_DIRECTIONS: Tuple[Coord, ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
ALL_DIRECTIONS: Tuple[Coord, ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


def random_int(lo: int, hi: int, rng: Optional[random.Random] = None) -> int:
    """Uniform integer in the inclusive range [lo, hi]."""
    r = rng or random
    return r.randint(lo, hi)


def chance(probability: float, rng: Optional[random.Random] = None) -> bool:
    r = rng or random
    return r.random() < probability


def grid_distance(x1: int, y1: int, x2: int, y2: int) -> int:
    """Manhattan distance; the metric used for sight, aggro and adjacency."""
    return abs(x1 - x2) + abs(y1 - y2)


def chebyshev_distance(x1: int, y1: int, x2: int, y2: int) -> int:
    return max(abs(x1 - x2), abs(y1 - y2))


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def in_bounds(x: int, y: int, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def in_range(x1: int, y1: int, x2: int, y2: int, radius: int) -> bool:
    return grid_distance(x1, y1, x2, y2) <= radius


def make_grid(width: int, height: int, fill: T) -> List[List[T]]:
    """Row-major grid: ``grid[y][x]``."""
    return [[fill for _ in range(width)] for _ in range(height)]


def neighbors8(x: int, y: int) -> Iterator[Coord]:
    for dx, dy in ALL_DIRECTIONS:
        yield x + dx, y + dy


def step_toward(value: int, target: int) -> int:
    if value < target:
        return 1
    if value > target:
        return -1
    return 0
