"""Static item tables: rarities, categories, per-type templates and effects."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

RARITIES = ("common", "uncommon", "rare", "epic", "legendary")

RARITY_MULTIPLIERS = MappingProxyType(
    {"common": 1.0, "uncommon": 1.25, "rare": 1.5, "epic": 2.0, "legendary": 3.0}
)

# Rarity weight configuration (higher = more common)
RARITY_WEIGHTS = MappingProxyType({"common": 60, "uncommon": 25, "rare": 10, "epic": 4, "legendary": 1})

RARITY_PREFIXES = MappingProxyType(
    {"common": "", "uncommon": "Fine", "rare": "Superior", "epic": "Masterwork", "legendary": "Legendary"}
)

# World placement mix by category
CATEGORY_WEIGHTS = MappingProxyType({"consumable": 35, "weapon": 20, "armor": 20, "accessory": 15, "charm": 10})

# Rarities at or above this one roll an effect and spawn unidentified
EFFECT_RARITY_FLOOR = "rare"

# Stats that describe geometry rather than power; never scaled
UNSCALED_STATS = frozenset({"range"})

DURABILITY_BY_CATEGORY = MappingProxyType({"weapon": 40, "armor": 60})


@dataclass(frozen=True)
class ItemTemplate:
    type: str
    category: str
    name: str
    base_stats: Mapping[str, int]
    base_value: int
    icon: str
    description: str = ""
    equip_slot: Optional[str] = None


@dataclass(frozen=True)
class EffectSpec:
    type: str
    value_range: Tuple[int, int]
    label: str


def _t(type_, category, name, stats, value, icon, description, slot=None):
    return ItemTemplate(type_, category, name, MappingProxyType(dict(stats)), value, icon, description, slot)


ITEM_TEMPLATES = MappingProxyType(
    {
        "weapon": MappingProxyType(
            {
                "dagger": _t("dagger", "weapon", "Dagger", {"damage": 3, "agility": 1}, 8, "/", "A short, quick blade.", "weapon"),
                "sword": _t("sword", "weapon", "Sword", {"damage": 5}, 15, "/", "A reliable steel sword.", "weapon"),
                "axe": _t("axe", "weapon", "Axe", {"damage": 7, "agility": -1}, 18, "/", "Heavy and brutal.", "weapon"),
                "mace": _t("mace", "weapon", "Mace", {"damage": 6}, 16, "/", "Flanged head for cracking bone.", "weapon"),
                "staff": _t("staff", "weapon", "Staff", {"damage": 3, "intelligence": 2}, 14, "/", "Carved wood humming with power.", "weapon"),
                "bow": _t("bow", "weapon", "Bow", {"damage": 4, "range": 5}, 20, "}", "Strikes foes from afar.", "weapon"),
            }
        ),
        "armor": MappingProxyType(
            {
                "leather_armor": _t("leather_armor", "armor", "Leather Armor", {"defense": 2}, 12, "[", "Supple hide armor.", "armor"),
                "chainmail": _t("chainmail", "armor", "Chainmail", {"defense": 4, "agility": -1}, 25, "[", "Interlocking iron rings.", "armor"),
                "plate_armor": _t("plate_armor", "armor", "Plate Armor", {"defense": 6, "agility": -2}, 40, "[", "Full plate, slow but sturdy.", "armor"),
                "cap": _t("cap", "armor", "Leather Cap", {"defense": 1}, 6, "^", "Keeps the rain off, mostly.", "helmet"),
                "helm": _t("helm", "armor", "Helm", {"defense": 2}, 14, "^", "A dented iron helm.", "helmet"),
            }
        ),
        "accessory": MappingProxyType(
            {
                "ring": _t("ring", "accessory", "Ring", {"agility": 1, "strength": 1}, 20, "=", "A plain band.", "accessory"),
                "amulet": _t("amulet", "accessory", "Amulet", {"intelligence": 2, "constitution": 1}, 25, '"', "A pendant on a chain.", "accessory"),
            }
        ),
        "consumable": MappingProxyType(
            {
                "health_potion": _t("health_potion", "consumable", "Health Potion", {"heal": 25}, 10, "!", "Restores health."),
                "energy_potion": _t("energy_potion", "consumable", "Energy Potion", {"energy": 20}, 10, "!", "Restores energy."),
                "elixir": _t("elixir", "consumable", "Elixir", {"heal": 15, "energy": 15}, 25, "!", "Restores health and energy."),
            }
        ),
        "charm": MappingProxyType(
            {
                "talisman": _t("talisman", "charm", "Talisman", {"constitution": 1}, 30, "*", "Warm to the touch.", "accessory"),
                "totem": _t("totem", "charm", "Totem", {"strength": 1}, 30, "*", "A small carved idol.", "accessory"),
            }
        ),
    }
)

EFFECTS_BY_CATEGORY = MappingProxyType(
    {
        "weapon": (EffectSpec("lifesteal", (10, 25), "of Leeching"),),
        "armor": (EffectSpec("regeneration", (1, 2), "of Mending"),),
        "charm": (
            EffectSpec("regeneration", (1, 2), "of Mending"),
            EffectSpec("vigor", (1, 2), "of Vigor"),
        ),
    }
)


def get_template(category: str, item_type: str) -> Optional[ItemTemplate]:
    table = ITEM_TEMPLATES.get(category)
    if table is None:
        return None
    return table.get(item_type)
