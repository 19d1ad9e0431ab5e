"""Binary space partitioning of the level rectangle.

The whole grid starts as one partition and is cut recursively along its longer
side (ties broken by a coin flip) somewhere in the middle 30-70% of that side.
Recursion stops at the depth budget or once a partition is narrower than
``MIN_SPLIT_SIZE`` on either axis. Leaves come back in depth-first order, so
neighbouring leaves in the list tend to be neighbours on the map, which keeps
the consecutive-room corridors short.
"""

from __future__ import annotations

import math
import random
from typing import List, NamedTuple, Optional

MIN_SPLIT_SIZE = 15
MAX_DEPTH = 4


class Partition(NamedTuple):
    x: int
    y: int
    w: int
    h: int


def depth_budget(width: int, height: int) -> int:
    """floor(log2(min(width, height) / 10)), kept within [0, MAX_DEPTH]."""
    smallest = min(width, height)
    if smallest < 10:
        return 0
    return max(0, min(MAX_DEPTH, int(math.floor(math.log2(smallest / 10)))))


def split_partition(part: Partition, depth: int, rng: Optional[random.Random] = None) -> List[Partition]:
    r = rng or random
    if depth <= 0 or part.w < MIN_SPLIT_SIZE or part.h < MIN_SPLIT_SIZE:
        return [part]
    if part.w == part.h:
        cut_x = r.random() < 0.5
    else:
        cut_x = part.w > part.h
    length = part.w if cut_x else part.h
    lo = math.ceil(length * 0.3)
    hi = math.floor(length * 0.7)
    if lo < 1 or lo > hi:
        # bounds collapsed; keep it as a leaf
        return [part]
    cut = r.randint(lo, hi)
    if cut_x:
        first = Partition(part.x, part.y, cut, part.h)
        second = Partition(part.x + cut, part.y, part.w - cut, part.h)
    else:
        first = Partition(part.x, part.y, part.w, cut)
        second = Partition(part.x, part.y + cut, part.w, part.h - cut)
    return split_partition(first, depth - 1, r) + split_partition(second, depth - 1, r)


def partition_level(width: int, height: int, rng: Optional[random.Random] = None) -> List[Partition]:
    return split_partition(Partition(0, 0, width, height), depth_budget(width, height), rng)
