import random

from dungeon_quest.dungeon import generate
from dungeon_quest.dungeon.visibility import ensure_explored, update_visibility


def _count(grid):
    return sum(1 for row in grid for v in row if v)


def test_visible_cells_form_a_diamond(make_dungeon):
    d = make_dungeon()
    seen = update_visibility(d, 25, 25, 3)
    # diamond of radius r holds 2r^2 + 2r + 1 cells
    assert seen == 25
    assert d.is_visible(25, 22) and d.is_visible(28, 25)
    assert not d.is_visible(27, 27)  # Manhattan 4
    assert _count(d.visible) == 25


def test_visibility_clipped_at_edges(make_dungeon):
    d = make_dungeon()
    seen = update_visibility(d, 0, 0, 2)
    assert seen == 6
    assert d.is_visible(0, 0) and d.is_visible(2, 0) and d.is_visible(1, 1)


def test_visible_resets_but_explored_accumulates(make_dungeon):
    d = make_dungeon()
    d.update_visibility(10, 10, 2)
    d.update_visibility(30, 30, 2)
    assert not d.is_visible(10, 10)
    assert d.is_explored(10, 10)
    assert d.is_explored(30, 30)


def test_explored_is_monotonic_over_random_walk():
    d = generate(40, 40, 1, random.Random(8))
    r = random.Random(2)
    before = [row[:] for row in d.explored]
    for _ in range(50):
        d.update_visibility(r.randrange(40), r.randrange(40), r.randint(1, 6))
        for y in range(40):
            for x in range(40):
                if before[y][x]:
                    assert d.explored[y][x]
        before = [row[:] for row in d.explored]


def test_ensure_explored_repairs_bad_shape(make_dungeon):
    d = make_dungeon()
    d.explored = [[True]]
    assert ensure_explored(d) is True
    assert len(d.explored) == d.height and not any(any(row) for row in d.explored)
    assert ensure_explored(d) is False
