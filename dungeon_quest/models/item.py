"""Item instance model.

World items carry a position; inventory and equipped items have ``x``/``y``
set to None. ``max_durability == 0`` marks an indestructible item. An item at
zero durability with a positive maximum is broken and contributes no stats.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Item:
    id: str
    category: str
    type: str
    name: str
    level: int = 1
    rarity: str = "common"
    description: str = ""
    stats: Dict[str, int] = field(default_factory=dict)
    value: int = 0
    equip_slot: Optional[str] = None
    is_identified: bool = True
    durability: int = 0
    max_durability: int = 0
    effects: List[Dict[str, Any]] = field(default_factory=list)
    icon: str = "?"
    x: Optional[int] = None
    y: Optional[int] = None

    @property
    def is_equippable(self) -> bool:
        return self.equip_slot is not None

    @property
    def is_consumable(self) -> bool:
        return self.category == "consumable"

    @property
    def is_broken(self) -> bool:
        return self.max_durability > 0 and self.durability <= 0

    @property
    def display_name(self) -> str:
        if self.is_identified:
            return self.name
        return f"Unidentified {self.type.replace('_', ' ')}"

    def active_stats(self) -> Dict[str, int]:
        return {} if self.is_broken else dict(self.stats)

    def effect_value(self, effect_type: str) -> int:
        if self.is_broken:
            return 0
        return sum(int(e.get("value", 0)) for e in self.effects if e.get("type") == effect_type)

    def wear(self, amount: int = 1) -> bool:
        """Reduce durability. Returns True when this call broke the item."""
        if self.max_durability <= 0 or self.durability <= 0:
            return False
        self.durability = max(0, self.durability - amount)
        return self.durability == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        known = {f for f in cls.__dataclass_fields__}
        payload = {k: v for k, v in data.items() if k in known}
        payload["stats"] = dict(payload.get("stats") or {})
        payload["effects"] = [dict(e) for e in payload.get("effects") or []]
        return cls(**payload)
