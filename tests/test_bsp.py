import random

import pytest

from dungeon_quest.dungeon.bsp import MAX_DEPTH, MIN_SPLIT_SIZE, Partition, depth_budget, partition_level, split_partition


@pytest.mark.parametrize(
    "w,h,expected",
    [(5, 50, 0), (10, 10, 0), (19, 40, 0), (20, 20, 1), (50, 50, 2), (80, 80, 3), (160, 160, 4), (1000, 1000, MAX_DEPTH)],
)
def test_depth_budget(w, h, expected):
    assert depth_budget(w, h) == expected


def _covers(leaves, w, h):
    seen = set()
    for p in leaves:
        for y in range(p.y, p.y + p.h):
            for x in range(p.x, p.x + p.w):
                assert (x, y) not in seen, "leaves overlap"
                seen.add((x, y))
    return len(seen) == w * h


@pytest.mark.parametrize("seed", range(6))
def test_leaves_tile_the_level(seed):
    leaves = partition_level(50, 50, random.Random(seed))
    assert _covers(leaves, 50, 50)
    assert len(leaves) <= 2 ** depth_budget(50, 50)


def test_split_cuts_longer_side_within_middle_band():
    part = Partition(0, 0, 40, 20)
    first, second = split_partition(part, 1, random.Random(3))
    assert first.h == second.h == 20
    assert 12 <= first.w <= 28
    assert first.w + second.w == 40
    assert second.x == first.w


def test_small_partition_is_a_leaf():
    part = Partition(0, 0, MIN_SPLIT_SIZE - 1, 60)
    assert split_partition(part, 3, random.Random(0)) == [part]


def test_zero_depth_is_a_leaf():
    part = Partition(2, 3, 40, 40)
    assert split_partition(part, 0, random.Random(0)) == [part]


def test_leaves_in_depth_first_order():
    leaves = partition_level(80, 80, random.Random(9))
    # depth-first order starts at the origin corner
    assert (leaves[0].x, leaves[0].y) == (0, 0)
