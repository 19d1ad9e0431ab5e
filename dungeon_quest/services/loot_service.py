"""World items: floor placement at level start and enemy drops."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..dungeon.tiles import CellType
from ..logging_utils import get_logger
from ..loot.generator import random_item
from ..models.item import Item

log = get_logger("dungeon_quest.loot")

_DEFAULT_DROP_CHANCE = 0.25
PLACEMENT_ATTEMPTS = 10


def items_for_level(level: int) -> int:
    return 3 + max(1, level) // 2


@dataclass
class ItemManager:
    items: List[Item] = field(default_factory=list)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def clear(self) -> None:
        self.items.clear()

    def add_item(self, item: Item, x: int, y: int) -> Item:
        item.x, item.y = x, y
        self.items.append(item)
        return item

    def get_item_at(self, x: int, y: int) -> Optional[Item]:
        for item in self.items:
            if item.x == x and item.y == y:
                return item
        return None

    def remove_item_at(self, x: int, y: int) -> Optional[Item]:
        item = self.get_item_at(x, y)
        if item is not None:
            self.items.remove(item)
        return item

    def get_save_data(self) -> List[Dict[str, Any]]:
        return [it.to_dict() for it in self.items]

    @classmethod
    def load_save_data(cls, records) -> "ItemManager":
        return cls([Item.from_dict(r) for r in records or []])


def _free_floor(session, x: int, y: int) -> bool:
    return (
        session.dungeon.get_cell_type(x, y) == CellType.FLOOR
        and session.items.get_item_at(x, y) is None
        and (x, y) != (session.player.x, session.player.y)
    )


def populate_items(session, level: int) -> int:
    """Scatter floor loot over the interiors of every room but the first."""
    session.items.clear()
    rooms = session.dungeon.rooms[1:] or session.dungeon.rooms
    if not rooms:
        return 0
    rng = session.rng
    placed = 0
    for _ in range(items_for_level(level)):
        for _attempt in range(PLACEMENT_ATTEMPTS):
            room = rng.choice(rooms)
            x = rng.randint(room.x + 1, max(room.x + 1, room.x + room.width - 2))
            y = rng.randint(room.y + 1, max(room.y + 1, room.y + room.height - 2))
            if not _free_floor(session, x, y):
                continue
            item = random_item(level, rng)
            if item is not None:
                session.items.add_item(item, x, y)
                placed += 1
            break
        else:
            log.warn(event="item_placement_failed", dungeon_level=level, attempts=PLACEMENT_ATTEMPTS)
    log.debug(event="items_populated", dungeon_level=level, placed=placed)
    return placed


def maybe_drop(session, x: int, y: int, chance: float = _DEFAULT_DROP_CHANCE) -> Optional[Item]:
    """Roll an enemy drop at (x, y); skipped if the cell already holds an item."""
    rng = session.rng
    if rng.random() >= chance:
        return None
    if session.items.get_item_at(x, y) is not None or not session.dungeon.is_walkable(x, y):
        log.debug(event="drop_skipped", x=x, y=y)
        return None
    item = random_item(session.level, rng)
    if item is None:
        return None
    session.items.add_item(item, x, y)
    session.messages.add(f"The enemy dropped {item.display_name}.", "item")
    return item
