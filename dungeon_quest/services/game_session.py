"""Turn engine: one game in progress and the intents that drive it.

A ``GameSession`` owns everything a running game mutates: the level, the
player, the entity and item lists, the rng and the message log. External
layers (HTTP routes, the CLI, tests) only call intent methods and read
``render_state()`` snapshots.

Turn order for every action that costs time:
    1. the player's action resolves completely (including its own rolls);
    2. ``turn`` increments;
    3. enemies act in entity-list order (stopping if the player dies);
    4. equipped regeneration / vigor effects tick;
    5. visibility is recomputed last.

Intents return True when the action was performed and False when it was
rejected. A rejected intent changes nothing except, at most, the message log.
"""

from __future__ import annotations

import random
import threading
from types import MappingProxyType
from typing import Any, Dict, Optional

from ..config import GameSettings
from ..dungeon import generate
from ..dungeon.state import DungeonState
from ..dungeon.tiles import CellType
from ..logging_utils import get_logger
from ..models.entities import EntityManager, Npc, Trap
from ..models.player import EQUIP_SLOTS, Player
from ..utils.geometry import CARDINAL_DIRECTIONS, grid_distance
from . import combat_service, loot_service, monster_ai, spawn_service
from .combat_service import PLAYER
from .loot_service import ItemManager
from .message_log import MessageLog

log = get_logger("dungeon_quest.session")

# Turns consumed per action; zero-cost actions do not advance the clock
ACTION_TURN_COSTS = MappingProxyType(
    {
        "move": 1,
        "attack": 1,
        "wait": 1,
        "pickup": 1,
        "use_item": 1,
        "special": 1,
        "fire": 1,
        "equip": 0,
        "unequip": 0,
        "talk": 0,
        "descend": 0,
    }
)

SCREENS = ("title", "game", "inventory", "gameover")


class GameSession:
    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        char_class: str = "warrior",
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or GameSettings()
        self.seed = seed if seed is not None else self.settings.seed
        self.rng = rng or random.Random(self.seed)
        self.player = Player.create(char_class, max_inventory_size=self.settings.max_inventory)
        self.entities = EntityManager()
        self.items = ItemManager()
        self.messages = MessageLog()
        self.dungeon: Optional[DungeonState] = None
        self.turn = 0
        self.level = 1
        self.current_screen = "title"
        self.running = False
        self.lock = threading.RLock()

    @classmethod
    def new_game(cls, char_class: str = "warrior", seed: Optional[int] = None, settings: Optional[GameSettings] = None, rng=None) -> "GameSession":
        session = cls(settings=settings, char_class=char_class, seed=seed, rng=rng)
        session.start()
        return session

    # --------------------------------------------------------------- lifecycle
    def start(self) -> None:
        self.turn = 0
        self.running = True
        self.current_screen = "game"
        self.enter_level(1)
        self.messages.add("Welcome to the dungeon! Find the stairs to descend deeper.", "system")
        log.info(event="game_started", char_class=self.player.char_class, seed=self.seed)

    def enter_level(self, level: int) -> None:
        self.level = level
        self.dungeon = generate(self.settings.dungeon_width, self.settings.dungeon_height, level, self.rng)
        start = self.dungeon.entrance or (self.dungeon.rooms[0].center if self.dungeon.rooms else (0, 0))
        self.player.x, self.player.y = start
        spawn_service.populate_dungeon(self, level)
        loot_service.populate_items(self, level)
        self.refresh_visibility()

    def refresh_visibility(self) -> None:
        if self.dungeon is not None:
            self.dungeon.update_visibility(self.player.x, self.player.y, self.settings.visibility_radius)

    @property
    def accepts_input(self) -> bool:
        return self.running and self.dungeon is not None and self.player.is_alive

    def handle_player_death(self, cause: str) -> None:
        if self.current_screen == "gameover":
            return
        self.running = False
        self.current_screen = "gameover"
        self.messages.add(f"You were slain by the {cause}. Game over.", "system")
        log.info(event="player_died", cause=cause, dungeon_level=self.level, turn=self.turn, player_level=self.player.level)

    # ------------------------------------------------------------------ turns
    def advance_turn(self) -> None:
        self.turn += 1
        self.messages.turn = self.turn
        monster_ai.process_turn(self)
        if self.player.is_alive:
            self._tick_effects()
        self.refresh_visibility()

    def _tick_effects(self) -> None:
        regen = self.player.effect_total("regeneration")
        if regen:
            self.player.heal(regen)
        vigor = self.player.effect_total("vigor")
        if vigor:
            self.player.restore_energy(vigor)

    def _finish(self, action: str) -> bool:
        for _ in range(ACTION_TURN_COSTS.get(action, 1)):
            if not self.player.is_alive:
                break
            self.advance_turn()
        return True

    # ---------------------------------------------------------------- intents
    def move(self, dx: int, dy: int) -> bool:
        if not self.accepts_input:
            return False
        if dx not in (-1, 0, 1) or dy not in (-1, 0, 1) or (dx == 0 and dy == 0):
            return False
        nx, ny = self.player.x + dx, self.player.y + dy
        if not self.dungeon.is_walkable(nx, ny):
            self.messages.add("You can't move there.", "system")
            return False
        entity = self.entities.get_entity_at(nx, ny)
        if entity is not None and entity.blocks_player:
            if isinstance(entity, Npc):
                self.messages.add(f'{entity.name}: "{entity.dialogue}"', "system")
                return self._finish("talk")
            combat_service.melee_strike(self, PLAYER, entity)
            return self._finish("attack")
        self.player.x, self.player.y = nx, ny
        if isinstance(entity, Trap):
            self._trigger_trap(entity)
        self._describe_cell()
        return self._finish("move")

    def move_toward(self, target_x: int, target_y: int) -> bool:
        """Step one cell toward a target, along whichever axis is farther off."""
        dx = target_x - self.player.x
        dy = target_y - self.player.y
        if dx == 0 and dy == 0:
            return False
        if abs(dx) >= abs(dy):
            return self.move((dx > 0) - (dx < 0), 0)
        return self.move(0, (dy > 0) - (dy < 0))

    def _trigger_trap(self, trap: Trap) -> None:
        dealt = self.player.take_damage(trap.damage)
        self.entities.remove(trap)
        self.messages.add(f"You trigger a {trap.name} and take {dealt} damage!", "combat")
        if not self.player.is_alive:
            self.handle_player_death(trap.name)

    def _describe_cell(self) -> None:
        if self.dungeon.get_cell_type(self.player.x, self.player.y) == CellType.EXIT:
            self.messages.add("You found the exit! Act here to descend.", "system")
        item = self.items.get_item_at(self.player.x, self.player.y)
        if item is not None:
            self.messages.add(f"You see {item.display_name} here.", "item")

    def perform_action(self) -> bool:
        """Context action: descend on the exit, else pick up, else attack, else wait."""
        if not self.accepts_input:
            return False
        px, py = self.player.x, self.player.y
        if self.dungeon.get_cell_type(px, py) == CellType.EXIT:
            return self._descend()
        item = self.items.get_item_at(px, py)
        if item is not None:
            if self.player.inventory_full:
                self.messages.add("Your inventory is full!", "system")
                return False
            self.items.remove_item_at(px, py)
            self.player.pickup(item)
            self.messages.add(f"You picked up {item.display_name}.", "item")
            return self._finish("pickup")
        for dx, dy in CARDINAL_DIRECTIONS:
            enemy = self.entities.enemy_at(px + dx, py + dy)
            if enemy is not None:
                combat_service.melee_strike(self, PLAYER, enemy)
                return self._finish("attack")
        self.messages.add("You wait.", "system")
        return self._finish("wait")

    def _descend(self) -> bool:
        next_level = self.level + 1
        self.enter_level(next_level)
        self.messages.add(f"You descend to level {next_level}.", "system")
        log.info(event="descend", dungeon_level=next_level, turn=self.turn)
        return self._finish("descend")

    def use_item(self, index: int) -> bool:
        if not self.accepts_input or not self.player._valid_index(index):
            return False
        item = self.player.inventory[index]
        if not item.is_consumable:
            self.messages.add(f"You can't use the {item.display_name}.", "system")
            return False
        hp_before, energy_before = self.player.hp, self.player.energy
        self.player.use_item(index)
        parts = []
        if self.player.hp > hp_before:
            parts.append(f"{self.player.hp - hp_before} health")
        if self.player.energy > energy_before:
            parts.append(f"{self.player.energy - energy_before} energy")
        restored = " and ".join(parts) if parts else "nothing"
        self.messages.add(f"You used {item.display_name} and restored {restored}.", "item")
        return self._finish("use_item")

    def equip_item(self, index: int) -> bool:
        if not self.accepts_input or not self.player._valid_index(index):
            return False
        item = self.player.inventory[index]
        if not item.is_equippable:
            self.messages.add(f"You can't equip the {item.display_name}.", "system")
            return False
        self.player.equip_item(index)
        self.messages.add(f"You equip {item.display_name}.", "item")
        return self._finish("equip")

    def unequip_item(self, slot: str) -> bool:
        if not self.accepts_input or slot not in EQUIP_SLOTS or self.player.equipment.get(slot) is None:
            return False
        if not self.player.unequip_item(slot):
            self.messages.add("Your inventory is full!", "system")
            return False
        self.messages.add(f"You unequip your {self.player.inventory[-1].display_name}.", "item")
        return self._finish("unequip")

    def special_attack(self, kind: str, dx: int = 0, dy: int = 0) -> bool:
        """Energy-gated attack; power and precise target (dx, dy) or the first adjacent enemy."""
        if not self.accepts_input:
            return False
        target = None
        if kind != "sweep":
            if dx or dy:
                target = self.entities.enemy_at(self.player.x + dx, self.player.y + dy)
            else:
                adjacent = combat_service.adjacent_enemies(self)
                target = adjacent[0] if adjacent else None
        result = combat_service.special_attack(self, PLAYER, target, kind)
        if not result.spent:
            return False
        return self._finish("special")

    def fire(self, target_x: int, target_y: int) -> bool:
        """Ranged attack with a bow-type weapon at a visible enemy within weapon range."""
        if not self.accepts_input:
            return False
        reach = self.player.weapon_range()
        if reach <= 0:
            self.messages.add("You have no ranged weapon equipped.", "system")
            return False
        enemy = self.entities.enemy_at(target_x, target_y)
        if enemy is None or not self.dungeon.is_visible(target_x, target_y):
            return False
        distance = grid_distance(self.player.x, self.player.y, target_x, target_y)
        if distance > reach:
            self.messages.add("That target is out of range.", "system")
            return False
        combat_service.ranged_attack(self, PLAYER, enemy, distance)
        return self._finish("fire")

    # --------------------------------------------------------------- snapshots
    def render_state(self) -> Dict[str, Any]:
        """Read-only snapshot for renderers. Entities and items only on visible cells."""
        d = self.dungeon
        p = self.player
        if d is None:
            return {"screen": self.current_screen, "running": self.running, "turn": self.turn, "level": self.level}
        entities = []
        for e in self.entities:
            if not d.is_visible(e.x, e.y) or (isinstance(e, Trap) and e.hidden):
                continue
            entities.append(e.to_dict())
        items = [
            {"id": it.id, "name": it.display_name, "icon": it.icon, "rarity": it.rarity, "x": it.x, "y": it.y}
            for it in self.items
            if d.is_visible(it.x, it.y)
        ]
        return {
            "screen": self.current_screen,
            "running": self.running,
            "turn": self.turn,
            "level": self.level,
            "theme": d.theme.value,
            "width": d.width,
            "height": d.height,
            "grid": d.render_rows(),
            "visible": [list(row) for row in d.visible],
            "explored": [list(row) for row in d.explored],
            "rooms": [r.to_dict() for r in d.rooms],
            "player": {
                "x": p.x,
                "y": p.y,
                "char_class": p.char_class,
                "hp": p.hp,
                "max_hp": p.max_hp,
                "energy": p.energy,
                "max_energy": p.max_energy,
                "level": p.level,
                "xp": p.xp,
                "xp_to_next_level": p.xp_to_next_level,
                "strength": p.effective("strength"),
                "agility": p.effective("agility"),
                "intelligence": p.effective("intelligence"),
                "constitution": p.effective("constitution"),
                "defense": p.total_defense(),
                "gold": p.gold,
                "inventory": [{"name": it.display_name, "category": it.category, "icon": it.icon} for it in p.inventory],
                "equipment": {slot: (it.display_name if it else None) for slot, it in p.equipment.items()},
            },
            "entities": entities,
            "items": items,
            "messages": self.messages.recent(),
        }

    # ---------------------------------------------------------------- save/load
    def get_save_data(self) -> Dict[str, Any]:
        return {
            "player": self.player.get_save_data(),
            "dungeon": self.dungeon.get_save_data() if self.dungeon else None,
            "entities": self.entities.get_save_data(),
            "items": self.items.get_save_data(),
            "state": {
                "turn": self.turn,
                "level": self.level,
                "current_screen": self.current_screen,
                "running": self.running,
            },
        }

    @classmethod
    def load_save_data(cls, data: Dict[str, Any], settings: Optional[GameSettings] = None, rng=None) -> "GameSession":
        """Rebuild a session from ``get_save_data`` output; ``visible`` starts all-false."""
        session = cls(settings=settings, rng=rng)
        state = data.get("state") or {}
        session.player = Player.load_save_data(data["player"])
        session.dungeon = DungeonState.load_save_data(data["dungeon"]) if data.get("dungeon") else None
        session.entities = EntityManager.load_save_data(data.get("entities"))
        session.items = ItemManager.load_save_data(data.get("items"))
        session.turn = int(state.get("turn", 0))
        session.level = int(state.get("level", 1))
        session.messages.turn = session.turn
        screen = state.get("current_screen", "game")
        session.current_screen = screen if screen in SCREENS else "game"
        session.running = bool(state.get("running", True)) and session.player.is_alive
        session.messages.add("Game loaded.", "system")
        return session
