"""Item instance factory.

Rolls rarity by spawn weight, scales template stats by rarity and level,
attaches special effects to rare-and-better gear and names the result.

Stat scaling: ``round(base * rarity_multiplier * (1 + (level - 1) * 0.1))``
with halves rounded up. Stats listed in ``UNSCALED_STATS`` and negative
stats (penalties) keep their template value.
"""

from __future__ import annotations

import math
import random
from typing import Dict, Mapping, Optional, Sequence

from ..logging_utils import get_logger
from ..models.item import Item
from .catalog import (
    CATEGORY_WEIGHTS,
    DURABILITY_BY_CATEGORY,
    EFFECT_RARITY_FLOOR,
    EFFECTS_BY_CATEGORY,
    ITEM_TEMPLATES,
    RARITIES,
    RARITY_MULTIPLIERS,
    RARITY_PREFIXES,
    RARITY_WEIGHTS,
    UNSCALED_STATS,
    get_template,
)

log = get_logger("dungeon_quest.loot")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _weighted_choice(weights: Mapping[str, int], rng) -> str:
    # Weighted roulette wheel
    keys = list(weights.keys())
    total = sum(weights.values())
    roll = rng.randint(1, total)
    upto = 0
    for key in keys:
        upto += weights[key]
        if roll <= upto:
            return key
    return keys[-1]


def roll_rarity(rng: Optional[random.Random] = None) -> str:
    return _weighted_choice(RARITY_WEIGHTS, rng or random)


def roll_category(rng: Optional[random.Random] = None) -> str:
    return _weighted_choice(CATEGORY_WEIGHTS, rng or random)


def level_factor(level: int) -> float:
    return 1 + (max(1, level) - 1) * 0.1


def scale_stats(base: Mapping[str, int], rarity: str, level: int) -> Dict[str, int]:
    mult = RARITY_MULTIPLIERS.get(rarity, 1.0)
    factor = level_factor(level)
    out = {}
    for stat, value in base.items():
        if stat in UNSCALED_STATS or value < 0:
            out[stat] = value
        else:
            out[stat] = _round_half_up(value * mult * factor)
    return out


def _rolls_effect(category: str, rarity: str) -> bool:
    if category == "charm":
        return True
    if category not in EFFECTS_BY_CATEGORY:
        return False
    return RARITIES.index(rarity) >= RARITIES.index(EFFECT_RARITY_FLOOR)


def create_item(
    category: str,
    item_type: str,
    level: int = 1,
    rarity: Optional[str] = None,
    rng: Optional[random.Random] = None,
    x: Optional[int] = None,
    y: Optional[int] = None,
) -> Optional[Item]:
    """Build an item instance, or None (logged) for an unknown category/type/rarity."""
    r = rng or random
    tmpl = get_template(category, item_type)
    if tmpl is None:
        log.warn(event="unknown_item_template", category=category, type=item_type)
        return None
    if rarity is None:
        rarity = roll_rarity(r)
    elif rarity not in RARITY_MULTIPLIERS:
        log.warn(event="unknown_item_rarity", rarity=rarity, type=item_type)
        return None
    level = max(1, int(level))
    mult = RARITY_MULTIPLIERS[rarity]

    effects = []
    suffix = ""
    if _rolls_effect(category, rarity):
        spec = r.choice(EFFECTS_BY_CATEGORY[category])
        effects.append({"type": spec.type, "value": r.randint(*spec.value_range)})
        suffix = spec.label

    base_durability = DURABILITY_BY_CATEGORY.get(category, 0)
    durability = _round_half_up(base_durability * mult) if base_durability else 0

    prefix = RARITY_PREFIXES.get(rarity, "")
    name = " ".join(p for p in (prefix, tmpl.name, suffix) if p)
    equippable = tmpl.equip_slot is not None
    identified = not (equippable and RARITIES.index(rarity) >= RARITIES.index(EFFECT_RARITY_FLOOR))

    return Item(
        id=f"item-{r.getrandbits(32):08x}",
        category=category,
        type=item_type,
        name=name,
        level=level,
        rarity=rarity,
        description=tmpl.description,
        stats=scale_stats(tmpl.base_stats, rarity, level),
        value=_round_half_up(tmpl.base_value * mult * level_factor(level)),
        equip_slot=tmpl.equip_slot,
        is_identified=identified,
        durability=durability,
        max_durability=durability,
        effects=effects,
        icon=tmpl.icon,
        x=x,
        y=y,
    )


def random_item(
    level: int,
    rng: Optional[random.Random] = None,
    x: Optional[int] = None,
    y: Optional[int] = None,
    categories: Optional[Sequence[str]] = None,
) -> Optional[Item]:
    """Roll category (by placement weight), type and rarity, then build the item."""
    r = rng or random
    if categories:
        category = r.choice(list(categories))
        if category not in ITEM_TEMPLATES:
            log.warn(event="unknown_item_category", category=category)
            return None
    else:
        category = roll_category(r)
    item_type = r.choice(sorted(ITEM_TEMPLATES[category].keys()))
    return create_item(category, item_type, level, rng=r, x=x, y=y)
