import random

import pytest

from dungeon_quest.dungeon import CellType, generate
from dungeon_quest.dungeon.connectivity import count_cells, flood_accessibility, unreachable_cells

from tests.dungeon_test_utils import bfs_reachable, walkable_cells

SEEDS = [1, 2, 3, 42, 777, 2024, 31337]
LEVELS = [1, 4, 7, 10, 13]


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("level", LEVELS)
def test_every_walkable_cell_reachable_from_entrance(seed, level):
    d = generate(50, 50, level, random.Random(seed))
    reachable = bfs_reachable(d, d.entrance)
    missing = walkable_cells(d) - reachable
    assert not missing, f"seed={seed} level={level} unreachable={sorted(missing)[:10]}"


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("level", LEVELS)
def test_exactly_one_entrance_and_exit(seed, level):
    d = generate(50, 50, level, random.Random(seed))
    assert count_cells(d, CellType.ENTRANCE) == 1
    assert count_cells(d, CellType.EXIT) == 1
    assert d.exit in bfs_reachable(d, d.entrance)


@pytest.mark.parametrize("size", [(30, 30), (80, 40), (40, 80), (120, 120)])
def test_connectivity_across_sizes(size):
    w, h = size
    for seed in range(5):
        d = generate(w, h, 8, random.Random(seed))
        assert unreachable_cells(d) == []


def test_flood_accessibility_matches_test_bfs():
    d = generate(60, 45, 5, random.Random(11))
    assert flood_accessibility(d) == bfs_reachable(d, d.entrance)


def test_flood_accessibility_without_entrance_is_empty():
    d = generate(50, 50, 1, random.Random(11))
    d.entrance = None
    assert flood_accessibility(d) == set()
