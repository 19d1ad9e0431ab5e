"""Player character: class baselines, progression, equipment and inventory.

Attribute fields (``strength`` ...) hold the base values; gear bonuses are
added on read through ``effective()``. Broken gear contributes nothing.

The player is one side of the combatant interface shared with ``Enemy``
(see services/combat_service.py): ``attack_power``, ``take_damage``,
``total_defense``, ``effective_agility``, ``is_alive`` and ``is_player``.

Inventory methods report success as a bool and never raise on bad indexes;
player-facing messages are written by the game session.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Optional

from ..logging_utils import get_logger
from .item import Item
from .xp import BASE_THRESHOLD, next_threshold

log = get_logger("dungeon_quest.player")

ATTRIBUTES = ("strength", "agility", "intelligence", "constitution")
EQUIP_SLOTS = ("weapon", "armor", "helmet", "accessory")
DEFENSE_SLOTS = ("armor", "helmet")


@dataclass(frozen=True)
class ClassBaseline:
    max_hp: int
    max_energy: int
    strength: int
    agility: int
    intelligence: int
    constitution: int


CLASS_TABLE = MappingProxyType(
    {
        "warrior": ClassBaseline(120, 40, 14, 8, 6, 12),
        "rogue": ClassBaseline(80, 60, 8, 14, 10, 8),
        "mage": ClassBaseline(70, 100, 6, 8, 14, 6),
        "cleric": ClassBaseline(90, 80, 8, 6, 12, 10),
    }
)

CLASS_GROWTH = MappingProxyType(
    {
        "warrior": {"strength": 2, "constitution": 1},
        "rogue": {"agility": 2, "strength": 1},
        "mage": {"intelligence": 2, "agility": 1},
        "cleric": {"intelligence": 1, "constitution": 2},
    }
)

LEVEL_HP_GAIN = 10
LEVEL_ENERGY_GAIN = 5
DEFAULT_INVENTORY_SIZE = 10


def _empty_equipment() -> Dict[str, Optional[Item]]:
    return {slot: None for slot in EQUIP_SLOTS}


@dataclass
class Player:
    char_class: str
    hp: int
    max_hp: int
    energy: int
    max_energy: int
    strength: int
    agility: int
    intelligence: int
    constitution: int
    x: int = 0
    y: int = 0
    level: int = 1
    xp: int = 0
    xp_to_next_level: int = BASE_THRESHOLD
    inventory: List[Item] = field(default_factory=list)
    max_inventory_size: int = DEFAULT_INVENTORY_SIZE
    gold: int = 0
    equipment: Dict[str, Optional[Item]] = field(default_factory=_empty_equipment)

    is_player: ClassVar[bool] = True
    name: ClassVar[str] = "you"

    @classmethod
    def create(cls, char_class: str = "warrior", x: int = 0, y: int = 0, max_inventory_size: int = DEFAULT_INVENTORY_SIZE) -> "Player":
        key = (char_class or "").lower()
        if key not in CLASS_TABLE:
            log.warn(event="unknown_class", char_class=char_class, fallback="warrior")
            key = "warrior"
        base = CLASS_TABLE[key]
        return cls(
            char_class=key,
            hp=base.max_hp,
            max_hp=base.max_hp,
            energy=base.max_energy,
            max_energy=base.max_energy,
            strength=base.strength,
            agility=base.agility,
            intelligence=base.intelligence,
            constitution=base.constitution,
            x=x,
            y=y,
            max_inventory_size=max_inventory_size,
        )

    # ---------------------------------------------------------------- stats
    def equipped_items(self) -> List[Item]:
        return [it for it in self.equipment.values() if it is not None]

    def gear_bonus(self, stat: str) -> int:
        return sum(it.active_stats().get(stat, 0) for it in self.equipped_items())

    def effective(self, attribute: str) -> int:
        return getattr(self, attribute) + self.gear_bonus(attribute)

    def effective_agility(self) -> int:
        return self.effective("agility")

    def weapon_damage(self) -> int:
        weapon = self.equipment.get("weapon")
        return weapon.active_stats().get("damage", 0) if weapon else 0

    def weapon_range(self) -> int:
        weapon = self.equipment.get("weapon")
        return weapon.active_stats().get("range", 0) if weapon else 0

    def total_defense(self) -> int:
        total = 0
        for slot in DEFENSE_SLOTS:
            item = self.equipment.get(slot)
            if item is not None:
                total += item.active_stats().get("defense", 0)
        return total

    def effect_total(self, effect_type: str) -> int:
        return sum(it.effect_value(effect_type) for it in self.equipped_items())

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    # --------------------------------------------------------------- combat
    def attack_power(self, rng: Optional[random.Random] = None) -> int:
        """(strength / 2 + weapon damage) x uniform(0.8, 1.2), floored, at least 1."""
        r = rng or random
        base = self.effective("strength") / 2 + self.weapon_damage()
        return max(1, int(math.floor(base * r.randint(80, 120) / 100)))

    def take_damage(self, amount: int, mitigate: bool = True) -> int:
        dealt = max(1, amount - self.total_defense()) if mitigate else max(1, amount)
        self.hp = max(0, self.hp - dealt)
        return dealt

    def heal(self, amount: int) -> int:
        before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, amount))
        return self.hp - before

    def restore_energy(self, amount: int) -> int:
        before = self.energy
        self.energy = min(self.max_energy, self.energy + max(0, amount))
        return self.energy - before

    def spend_energy(self, amount: int) -> bool:
        if self.energy < amount:
            return False
        self.energy -= amount
        return True

    # ---------------------------------------------------------- progression
    def add_experience(self, amount: int) -> int:
        """Add XP and apply every level-up it pays for. Returns levels gained."""
        self.xp += max(0, int(amount))
        gained = 0
        while self.xp >= self.xp_to_next_level:
            self.xp -= self.xp_to_next_level
            self._level_up()
            gained += 1
        return gained

    def _level_up(self) -> None:
        self.level += 1
        self.xp_to_next_level = next_threshold(self.xp_to_next_level)
        self.max_hp += LEVEL_HP_GAIN
        self.max_energy += LEVEL_ENERGY_GAIN
        self.hp = self.max_hp
        self.energy = self.max_energy
        for attr, delta in CLASS_GROWTH.get(self.char_class, {}).items():
            setattr(self, attr, getattr(self, attr) + delta)
        log.info(event="level_up", char_class=self.char_class, player_level=self.level)

    # ------------------------------------------------------------ inventory
    @property
    def inventory_full(self) -> bool:
        return len(self.inventory) >= self.max_inventory_size

    def _valid_index(self, index) -> bool:
        return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(self.inventory)

    def pickup(self, item: Item) -> bool:
        if self.inventory_full:
            return False
        item.x = item.y = None
        self.inventory.append(item)
        return True

    def use_item(self, index: int) -> bool:
        """Drink a consumable: applies ``heal``/``energy`` stats then removes it."""
        if not self._valid_index(index):
            return False
        item = self.inventory[index]
        if not item.is_consumable:
            return False
        self.heal(item.stats.get("heal", 0))
        self.restore_energy(item.stats.get("energy", 0))
        self.inventory.pop(index)
        return True

    def equip_item(self, index: int) -> bool:
        """Move an inventory item into its slot.

        A previously equipped item goes back into the inventory without a
        capacity check (the slot being vacated keeps the count balanced).
        """
        if not self._valid_index(index):
            return False
        item = self.inventory[index]
        slot = item.equip_slot
        if slot not in self.equipment:
            return False
        self.inventory.pop(index)
        previous = self.equipment.get(slot)
        if previous is not None:
            self.inventory.append(previous)
        item.is_identified = True
        self.equipment[slot] = item
        return True

    def unequip_item(self, slot: str) -> bool:
        item = self.equipment.get(slot)
        if item is None or self.inventory_full:
            return False
        self.equipment[slot] = None
        self.inventory.append(item)
        return True

    # ------------------------------------------------------------ save/load
    def get_save_data(self) -> Dict[str, Any]:
        return {
            "char_class": self.char_class,
            "x": self.x,
            "y": self.y,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "energy": self.energy,
            "max_energy": self.max_energy,
            "level": self.level,
            "xp": self.xp,
            "xp_to_next_level": self.xp_to_next_level,
            "strength": self.strength,
            "agility": self.agility,
            "intelligence": self.intelligence,
            "constitution": self.constitution,
            "inventory": [it.to_dict() for it in self.inventory],
            "max_inventory_size": self.max_inventory_size,
            "gold": self.gold,
            "equipment": {slot: (it.to_dict() if it else None) for slot, it in self.equipment.items()},
        }

    @classmethod
    def load_save_data(cls, data: Dict[str, Any]) -> "Player":
        player = cls.create(data.get("char_class", "warrior"))
        for key in (
            "x",
            "y",
            "hp",
            "max_hp",
            "energy",
            "max_energy",
            "level",
            "xp",
            "xp_to_next_level",
            "max_inventory_size",
            "gold",
        ) + ATTRIBUTES:
            if key in data:
                setattr(player, key, int(data[key]))
        player.hp = min(player.hp, player.max_hp)
        player.inventory = [Item.from_dict(it) for it in data.get("inventory", [])]
        equipment = _empty_equipment()
        for slot, raw in (data.get("equipment") or {}).items():
            if slot in equipment and raw:
                equipment[slot] = Item.from_dict(raw)
        player.equipment = equipment
        return player
