"""Game settings with environment overrides.

Defaults mirror the classic game: a 50x50 level, an 8 cell sight radius and a
ten slot backpack. Each field can be overridden with a ``DQ_*`` environment
variable (typically from a ``.env`` file loaded by python-dotenv at startup).
Values that fail to parse are ignored and logged.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Optional

from .logging_utils import get_logger

log = get_logger("dungeon_quest.config")

ENV_PREFIX = "DQ_"
MIN_DIMENSION = 10
MAX_DIMENSION = 200


@dataclass(frozen=True)
class GameSettings:
    dungeon_width: int = 50
    dungeon_height: int = 50
    visibility_radius: int = 8
    max_inventory: int = 10
    seed: Optional[int] = None

    @classmethod
    def from_env(cls, environ=None) -> "GameSettings":
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[f.name] = int(raw)
            except ValueError:
                log.warn(event="config_invalid", key=ENV_PREFIX + f.name.upper(), value=raw)
        return replace(cls(), **overrides).normalized()

    def normalized(self) -> "GameSettings":
        """Clamp values into playable ranges (dimensions 10..200, radius >= 1)."""
        return replace(
            self,
            dungeon_width=min(MAX_DIMENSION, max(MIN_DIMENSION, self.dungeon_width)),
            dungeon_height=min(MAX_DIMENSION, max(MIN_DIMENSION, self.dungeon_height)),
            visibility_radius=max(1, self.visibility_radius),
            max_inventory=max(1, self.max_inventory),
        )
