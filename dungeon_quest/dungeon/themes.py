"""Level themes and their room templates.

A theme is chosen purely from the level number. Each theme owns a handful of
room templates; a template bounds the room size, sets the edge erosion
probability (``irregularity``) and lists decorative feature rules that may
stamp special cells (water, pillars, lava...) inside the carved room.

Every template keeps its minimum sides at 5 or more so a room always has a
3x3 interior once the perimeter is accounted for.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional, Tuple

from .tiles import CellType


class Theme(str, Enum):
    DUNGEON = "dungeon"
    CAVE = "cave"
    SEWER = "sewer"
    RUINS = "ruins"
    CRYPT = "crypt"


@dataclass(frozen=True)
class FeatureRule:
    cell_type: CellType
    chance: float
    count_range: Tuple[int, int]


@dataclass(frozen=True)
class RoomTemplate:
    name: str
    min_width: int
    max_width: int
    min_height: int
    max_height: int
    irregularity: float = 0.0
    features: Tuple[FeatureRule, ...] = ()


_W = CellType

THEME_TEMPLATES = MappingProxyType(
    {
        Theme.DUNGEON: (
            RoomTemplate("chamber", 6, 10, 6, 10, 0.0, (FeatureRule(_W.PILLAR, 0.3, (1, 2)),)),
            RoomTemplate("hall", 8, 14, 5, 7, 0.0, (FeatureRule(_W.PILLAR, 0.5, (2, 4)),)),
            RoomTemplate("cell", 5, 6, 5, 6, 0.0, (FeatureRule(_W.RUBBLE, 0.4, (1, 2)),)),
            RoomTemplate(
                "shrine",
                6,
                8,
                6,
                8,
                0.0,
                (FeatureRule(_W.ALTAR, 0.8, (1, 1)), FeatureRule(_W.PILLAR, 0.3, (1, 2))),
            ),
        ),
        Theme.CAVE: (
            RoomTemplate("grotto", 6, 12, 6, 12, 0.35, (FeatureRule(_W.RUBBLE, 0.6, (2, 5)),)),
            RoomTemplate("tunnel_den", 5, 9, 5, 9, 0.25, (FeatureRule(_W.RUBBLE, 0.4, (1, 3)),)),
            RoomTemplate("pool_cavern", 7, 12, 7, 12, 0.3, (FeatureRule(_W.WATER, 0.8, (3, 6)),)),
            RoomTemplate(
                "magma_vent",
                7,
                11,
                7,
                11,
                0.3,
                (FeatureRule(_W.LAVA, 0.7, (1, 3)), FeatureRule(_W.CHASM, 0.3, (1, 2))),
            ),
        ),
        Theme.SEWER: (
            RoomTemplate("cistern", 7, 12, 7, 12, 0.1, (FeatureRule(_W.WATER, 0.9, (4, 8)),)),
            RoomTemplate("junction", 5, 8, 5, 8, 0.05, (FeatureRule(_W.WATER, 0.5, (1, 3)),)),
            RoomTemplate(
                "drain",
                6,
                10,
                5,
                7,
                0.1,
                (FeatureRule(_W.WATER, 0.7, (2, 4)), FeatureRule(_W.RUBBLE, 0.3, (1, 2))),
            ),
        ),
        Theme.RUINS: (
            RoomTemplate(
                "collapsed_hall",
                7,
                13,
                5,
                8,
                0.2,
                (FeatureRule(_W.RUBBLE, 0.8, (3, 6)), FeatureRule(_W.PILLAR, 0.4, (1, 3))),
            ),
            RoomTemplate("courtyard", 8, 14, 8, 14, 0.15, (FeatureRule(_W.PILLAR, 0.6, (2, 4)),)),
            RoomTemplate(
                "ruined_shrine",
                6,
                9,
                6,
                9,
                0.2,
                (FeatureRule(_W.ALTAR, 0.6, (1, 1)), FeatureRule(_W.RUBBLE, 0.5, (1, 3))),
            ),
        ),
        Theme.CRYPT: (
            RoomTemplate("tomb", 5, 8, 5, 8, 0.0, (FeatureRule(_W.ALTAR, 0.5, (1, 1)),)),
            RoomTemplate(
                "ossuary",
                6,
                10,
                6,
                10,
                0.05,
                (FeatureRule(_W.RUBBLE, 0.6, (2, 4)), FeatureRule(_W.PILLAR, 0.3, (1, 2))),
            ),
            RoomTemplate(
                "catacomb",
                8,
                14,
                5,
                7,
                0.1,
                (FeatureRule(_W.PILLAR, 0.6, (2, 4)), FeatureRule(_W.CHASM, 0.2, (1, 1))),
            ),
        ),
    }
)

# (upper level bound inclusive, theme); anything deeper is a crypt
_LEVEL_BANDS = ((3, Theme.DUNGEON), (6, Theme.CAVE), (9, Theme.SEWER), (12, Theme.RUINS))


def theme_for_level(level: int) -> Theme:
    lvl = max(1, int(level))
    for upper, theme in _LEVEL_BANDS:
        if lvl <= upper:
            return theme
    return Theme.CRYPT


def templates_for(theme: Theme) -> Tuple[RoomTemplate, ...]:
    return THEME_TEMPLATES[theme]


def find_template(theme: Theme, name: str) -> Optional[RoomTemplate]:
    for tmpl in THEME_TEMPLATES.get(theme, ()):
        if tmpl.name == name:
            return tmpl
    return None
