"""Experience point (XP) progression utilities.

Thresholds are per level, not cumulative: a fresh character needs 100 XP to
reach level 2, and each following threshold is the previous one times 1.5,
rounded down. Excess XP carries over when a level is gained.
"""

import math

BASE_THRESHOLD = 100
GROWTH = 1.5


def next_threshold(current: int) -> int:
    """Threshold for the next level after one with ``current``."""
    return int(math.floor(current * GROWTH))


def threshold_for_level(level: int) -> int:
    """XP needed to advance *from* ``level`` (levels < 1 are treated as 1).

    >>> threshold_for_level(1), threshold_for_level(2), threshold_for_level(3)
    (100, 150, 225)
    """
    threshold = BASE_THRESHOLD
    for _ in range(max(1, level) - 1):
        threshold = next_threshold(threshold)
    return threshold
