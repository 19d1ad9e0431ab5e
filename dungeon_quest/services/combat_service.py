"""Combat resolution: hit and crit rolls, damage, special attacks, kills.

Responsibilities:
    * Resolve attacks between the player and enemies in either direction.
    * Gate special attacks (power / precise / sweep) on player energy.
    * Award XP, gold and item drops when an enemy dies.
    * Apply gear side effects (weapon lifesteal, durability wear).

Design notes:
    - Combatants are passed as tagged references: the ``PLAYER`` sentinel or
      an ``Enemy`` instance. Both resolve to objects exposing the combatant
      interface (``attack_power``, ``take_damage``, ``total_defense``,
      ``effective_agility``, ``is_alive``, ``is_player``).
    - Every function takes the game session first; it supplies the rng, the
      player, the entity list and the message log.
    - ``attack`` keeps direction-dependent return values: player -> enemy
      reports "enemy killed", enemy -> player reports "player survived".
    - All rolls are integer 1-100 draws from ``session.rng``.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import List, NamedTuple, Optional

from ..logging_utils import get_logger
from ..models.entities import Enemy
from ..utils.geometry import clamp, neighbors8
from . import loot_service

log = get_logger("dungeon_quest.combat")

BASE_HIT_CHANCE = 85
BASE_CRIT_CHANCE = 5
CRIT_MULTIPLIER = 1.5
RANGE_PENALTY_START = 3
RANGE_PENALTY_PER_CELL = 10

SPECIAL_ATTACK_COSTS = MappingProxyType({"power": 10, "precise": 8, "sweep": 15})
POWER_HIT_CHANCE = 70
POWER_MULTIPLIER = 1.8
PRECISE_HIT_CHANCE = 95
PRECISE_CRIT_CHANCE = 40
PRECISE_CRIT_MULTIPLIER = 2
SWEEP_MULTIPLIER = 0.7


class SpecialAttackResult(NamedTuple):
    spent: bool
    landed: bool


_NOT_SPENT = SpecialAttackResult(spent=False, landed=False)


class _PlayerRef:
    __slots__ = ()

    def __repr__(self) -> str:
        return "PLAYER"


PLAYER = _PlayerRef()


def resolve(session, ref):
    return session.player if ref is PLAYER else ref


def _roll(session) -> int:
    return session.rng.randint(1, 100)


# ----------------------------------------------------------------- formulas
def hit_chance(attacker, defender) -> float:
    raw = BASE_HIT_CHANCE + attacker.effective_agility() - 0.5 * defender.effective_agility()
    return clamp(raw, 5, 95)


def crit_chance(attacker) -> int:
    agility = attacker.effective_agility()
    bonus = math.floor(agility * 0.5) if attacker.is_player else math.floor(agility * 0.2)
    return clamp(BASE_CRIT_CHANCE + bonus, 1, 25)


def ranged_hit_chance(distance: int) -> int:
    penalty = RANGE_PENALTY_PER_CELL * max(0, distance - RANGE_PENALTY_START)
    return clamp(BASE_HIT_CHANCE - penalty, 5, 95)


def check_hit(session, attacker, defender) -> bool:
    return _roll(session) <= hit_chance(resolve(session, attacker), resolve(session, defender))


def check_critical(session, attacker) -> bool:
    return _roll(session) <= crit_chance(resolve(session, attacker))


def calculate_damage(session, attacker, defender, is_critical: bool = False) -> int:
    """Rolled attack power (x1.5 on a crit) minus the defender's defense, at least 1."""
    a = resolve(session, attacker)
    d = resolve(session, defender)
    base = a.attack_power(session.rng)
    if is_critical:
        base = int(math.floor(base * CRIT_MULTIPLIER))
    return max(1, base - d.total_defense())


# -------------------------------------------------------------- application
def _apply_damage(session, attacker, defender, amount: int, *, mitigate: bool = True, verb: str = "hit") -> bool:
    if defender.is_player:
        dealt = defender.take_damage(amount, mitigate)
        session.messages.add(f"The {attacker.name} attacks you for {dealt} damage!", "combat")
        _wear_armor(session)
        if not defender.is_alive:
            session.handle_player_death(attacker.name)
        return defender.is_alive
    dealt = defender.take_damage(amount, mitigate)
    session.messages.add(f"You {verb} the {defender.name} for {dealt} damage!", "combat")
    if attacker.is_player:
        _after_player_hit(session, dealt)
    if not defender.is_alive:
        return kill_enemy(session, defender)
    return False


def _after_player_hit(session, dealt: int) -> None:
    player = session.player
    pct = player.effect_total("lifesteal")
    if pct > 0:
        healed = player.heal(max(1, dealt * pct // 100))
        if healed:
            session.messages.add(f"You drain {healed} health.", "combat")
    weapon = player.equipment.get("weapon")
    if weapon is not None and weapon.wear():
        session.messages.add(f"Your {weapon.display_name} breaks!", "item")


def _wear_armor(session) -> None:
    for slot in ("armor", "helmet"):
        item = session.player.equipment.get(slot)
        if item is not None and item.wear():
            session.messages.add(f"Your {item.display_name} breaks!", "item")


def kill_enemy(session, enemy: Enemy) -> bool:
    """Remove a dead enemy and pay out XP, gold and a possible drop. Always True."""
    session.messages.add(f"You defeated the {enemy.name}!", "combat")
    session.entities.remove(enemy)
    player = session.player
    gained = player.add_experience(enemy.xp_value)
    gold = session.rng.randint(0, enemy.xp_value)
    player.gold += gold
    if gold:
        session.messages.add(f"You find {gold} gold.", "item")
    if gained:
        session.messages.add(f"You reached level {player.level}!", "system")
    loot_service.maybe_drop(session, enemy.x, enemy.y)
    log.info(event="enemy_killed", enemy=enemy.template, xp=enemy.xp_value, player_level=player.level)
    return True


# ------------------------------------------------------------------ actions
def attack(session, attacker, defender) -> bool:
    """Basic attack without hit/crit rolls.

    Player -> enemy: returns True if the enemy died.
    Enemy -> player: returns True if the player survived.
    """
    a = resolve(session, attacker)
    d = resolve(session, defender)
    return _apply_damage(session, a, d, a.attack_power(session.rng))


def melee_strike(session, attacker, defender) -> bool:
    """Full melee resolution: hit roll, crit roll, damage. Returns True on a hit."""
    a = resolve(session, attacker)
    d = resolve(session, defender)
    if not check_hit(session, a, d):
        if a.is_player:
            session.messages.add(f"You miss the {d.name}.", "combat")
        else:
            session.messages.add(f"The {a.name} misses you.", "combat")
        return False
    critical = check_critical(session, a)
    if critical and a.is_player:
        session.messages.add("Critical hit!", "combat")
    damage = calculate_damage(session, a, d, critical)
    _apply_damage(session, a, d, damage, mitigate=False)
    return True


def ranged_attack(session, attacker, defender, distance: int) -> bool:
    """Range-penalised hit roll, then a standard ``attack`` on a hit."""
    a = resolve(session, attacker)
    if _roll(session) > ranged_hit_chance(distance):
        if a.is_player:
            session.messages.add("Your ranged attack misses!", "combat")
        else:
            session.messages.add(f"The {a.name}'s ranged attack misses!", "combat")
        return False
    return attack(session, attacker, defender)


def adjacent_enemies(session) -> List[Enemy]:
    player = session.player
    found = []
    for x, y in neighbors8(player.x, player.y):
        enemy = session.entities.enemy_at(x, y)
        if enemy is not None:
            found.append(enemy)
    return found


def special_attack(session, attacker, defender: Optional[Enemy], kind: str) -> SpecialAttackResult:
    """Energy-gated player attack.

    ``spent`` reports whether energy was paid (and so a turn used); ``landed``
    whether at least one enemy was hit.

    Nothing is spent when the kind is unknown, the attacker is not the player,
    there is no target, or energy is short.
    """
    cost = SPECIAL_ATTACK_COSTS.get(kind)
    if cost is None:
        log.warn(event="unknown_special_attack", kind=kind)
        return _NOT_SPENT
    a = resolve(session, attacker)
    if not a.is_player:
        log.warn(event="special_attack_not_player", kind=kind, attacker=a.name)
        return _NOT_SPENT
    targets = adjacent_enemies(session) if kind == "sweep" else ([defender] if defender is not None else [])
    if not targets:
        if kind == "sweep":
            session.messages.add("No enemies in range for sweep attack!", "combat")
        return _NOT_SPENT
    if not a.spend_energy(cost):
        session.messages.add("Not enough energy for this special attack!", "system")
        return _NOT_SPENT
    if kind == "power":
        landed = _power_attack(session, a, targets[0])
    elif kind == "precise":
        landed = _precise_attack(session, a, targets[0])
    else:
        landed = _sweep_attack(session, a, targets)
    return SpecialAttackResult(spent=True, landed=landed)


def _power_attack(session, player, enemy: Enemy) -> bool:
    if _roll(session) > POWER_HIT_CHANCE:
        session.messages.add("Your power attack misses!", "combat")
        return False
    damage = int(math.floor(player.attack_power(session.rng) * POWER_MULTIPLIER))
    _apply_damage(session, player, enemy, damage, verb="smash")
    return True


def _precise_attack(session, player, enemy: Enemy) -> bool:
    if _roll(session) > PRECISE_HIT_CHANCE:
        session.messages.add("Your precise attack misses!", "combat")
        return False
    critical = _roll(session) <= PRECISE_CRIT_CHANCE
    damage = player.attack_power(session.rng)
    if critical:
        damage = damage * PRECISE_CRIT_MULTIPLIER
        session.messages.add("Critical hit!", "combat")
    _apply_damage(session, player, enemy, damage, verb="pierce")
    return True


def _sweep_attack(session, player, enemies: List[Enemy]) -> bool:
    damage = int(math.floor(player.attack_power(session.rng) * SWEEP_MULTIPLIER))
    for enemy in enemies:
        _apply_damage(session, player, enemy, damage, verb="sweep")
    return True
