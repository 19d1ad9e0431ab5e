"""Non-player entities and the per-level entity collection.

Enemy kinds live in an immutable template registry; ``template.spawn(x, y)``
builds a fresh mutable ``Enemy``. NPCs block movement and talk when bumped.
Traps hide on the floor: the player can step onto them (and trigger them),
enemies treat them as occupied cells.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Optional

from ..logging_utils import get_logger
from ..utils.geometry import grid_distance

log = get_logger("dungeon_quest.entities")


@dataclass
class Entity:
    name: str
    x: int
    y: int

    kind: ClassVar[str] = "entity"
    blocks_player: ClassVar[bool] = True

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.kind, "name": self.name, "x": self.x, "y": self.y}
        data.update(self._extra_fields())
        return data

    def _extra_fields(self) -> Dict[str, Any]:
        return {}


@dataclass
class Enemy(Entity):
    template: str = ""
    subtype: str = "melee"
    hp: int = 1
    max_hp: int = 1
    damage: int = 1
    defense: int = 0
    xp_value: int = 0
    move_speed: int = 1
    detection_radius: int = 5
    aggressive: bool = True
    attack_range: Optional[int] = None
    icon: str = "e"

    kind: ClassVar[str] = "enemy"
    is_player: ClassVar[bool] = False

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    def effective_agility(self) -> int:
        return 0

    def total_defense(self) -> int:
        return self.defense

    def attack_power(self, rng: Optional[random.Random] = None) -> int:
        """damage x uniform(0.8, 1.2), floored, at least 1."""
        r = rng or random
        return max(1, int(math.floor(self.damage * r.randint(80, 120) / 100)))

    def take_damage(self, amount: int, mitigate: bool = True) -> int:
        dealt = max(1, amount - self.defense) if mitigate else max(1, amount)
        self.hp = max(0, self.hp - dealt)
        return dealt

    def _extra_fields(self) -> Dict[str, Any]:
        return {
            "template": self.template,
            "subtype": self.subtype,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "damage": self.damage,
            "defense": self.defense,
            "xp_value": self.xp_value,
            "move_speed": self.move_speed,
            "detection_radius": self.detection_radius,
            "aggressive": self.aggressive,
            "attack_range": self.attack_range,
            "icon": self.icon,
        }


@dataclass
class Npc(Entity):
    dialogue: str = "..."
    icon: str = "@"

    kind: ClassVar[str] = "npc"

    def _extra_fields(self) -> Dict[str, Any]:
        return {"dialogue": self.dialogue, "icon": self.icon}


@dataclass
class Trap(Entity):
    damage: int = 3
    hidden: bool = True
    icon: str = "^"

    kind: ClassVar[str] = "trap"
    blocks_player: ClassVar[bool] = False

    def _extra_fields(self) -> Dict[str, Any]:
        return {"damage": self.damage, "hidden": self.hidden, "icon": self.icon}


@dataclass(frozen=True)
class EnemyTemplate:
    key: str
    name: str
    subtype: str
    hp: int
    damage: int
    defense: int
    xp_value: int
    move_speed: int
    detection_radius: int
    aggressive: bool = True
    attack_range: Optional[int] = None
    icon: str = "e"

    def spawn(self, x: int, y: int) -> Enemy:
        return Enemy(
            name=self.name,
            x=x,
            y=y,
            template=self.key,
            subtype=self.subtype,
            hp=self.hp,
            max_hp=self.hp,
            damage=self.damage,
            defense=self.defense,
            xp_value=self.xp_value,
            move_speed=self.move_speed,
            detection_radius=self.detection_radius,
            aggressive=self.aggressive,
            attack_range=self.attack_range,
            icon=self.icon,
        )


ENEMY_TEMPLATES = MappingProxyType(
    {
        "rat": EnemyTemplate("rat", "Rat", "melee", 10, 2, 0, 5, 1, 5, icon="r"),
        "skeleton": EnemyTemplate("skeleton", "Skeleton", "melee", 20, 4, 1, 10, 2, 6, icon="s"),
        "archer": EnemyTemplate("archer", "Archer", "ranged", 15, 5, 0, 12, 2, 7, attack_range=4, icon="a"),
        "mage": EnemyTemplate("mage", "Mage", "magic", 12, 7, 0, 15, 3, 8, attack_range=3, icon="m"),
    }
)


def create_enemy(key: str, x: int, y: int) -> Optional[Enemy]:
    template = ENEMY_TEMPLATES.get(key)
    if template is None:
        log.warn(event="unknown_enemy_template", template=key)
        return None
    return template.spawn(x, y)


_KINDS = {"enemy": Enemy, "npc": Npc, "trap": Trap}


def entity_from_dict(data: Dict[str, Any]) -> Optional[Entity]:
    cls = _KINDS.get(data.get("kind"))
    if cls is None:
        log.warn(event="unknown_entity_kind", kind=data.get("kind"))
        return None
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class EntityManager:
    """Ordered entity list for one level. Order is the enemy turn order."""

    entities: List[Entity] = field(default_factory=list)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)

    def __len__(self) -> int:
        return len(self.entities)

    def __contains__(self, entity) -> bool:
        return any(e is entity for e in self.entities)

    def clear(self) -> None:
        self.entities.clear()

    def add(self, entity: Entity) -> Entity:
        self.entities.append(entity)
        return entity

    def remove(self, entity: Entity) -> bool:
        for i, e in enumerate(self.entities):
            if e is entity:
                del self.entities[i]
                return True
        return False

    def get_entity_at(self, x: int, y: int) -> Optional[Entity]:
        for e in self.entities:
            if e.x == x and e.y == y:
                return e
        return None

    def enemy_at(self, x: int, y: int) -> Optional[Enemy]:
        e = self.get_entity_at(x, y)
        return e if isinstance(e, Enemy) else None

    def is_occupied(self, x: int, y: int) -> bool:
        return self.get_entity_at(x, y) is not None

    def enemies(self) -> List[Enemy]:
        return [e for e in self.entities if isinstance(e, Enemy)]

    def enemies_within(self, x: int, y: int, radius: int) -> List[Enemy]:
        return [e for e in self.enemies() if grid_distance(x, y, e.x, e.y) <= radius]

    def get_save_data(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.entities]

    @classmethod
    def load_save_data(cls, records) -> "EntityManager":
        manager = cls()
        for rec in records or []:
            entity = entity_from_dict(rec)
            if entity is not None:
                manager.add(entity)
        return manager
