import random

from dungeon_quest.dungeon.tiles import CellType
from dungeon_quest.loot import create_item
from dungeon_quest.models.entities import Npc, Trap, create_enemy
from dungeon_quest.models.item import Item
from dungeon_quest.services.game_session import ACTION_TURN_COSTS, GameSession
from tests.dungeon_test_utils import ScriptedRng


def _item(category, type_):
    return create_item(category, type_, level=1, rarity="common", rng=random.Random(0))


def _spawn(game, key, x, y):
    return game.entities.add(create_enemy(key, x, y))


def _last(game):
    return game.messages.texts()[-1]


def test_new_game_starts_on_the_entrance(make_session):
    game = make_session()
    assert game.running and game.current_screen == "game"
    assert (game.player.x, game.player.y) == game.dungeon.entrance
    assert game.turn == 0 and game.level == 1
    assert game.dungeon.is_visible(game.player.x, game.player.y)
    assert game.messages.texts()[0] == "Welcome to the dungeon! Find the stairs to descend deeper."


def test_same_seed_same_game():
    a = GameSession.new_game(seed=5)
    b = GameSession.new_game(seed=5)
    assert a.dungeon.render_rows() == b.dungeon.render_rows()
    assert [(e.x, e.y, e.name) for e in a.entities] == [(e.x, e.y, e.name) for e in b.entities]
    assert [(i.x, i.y, i.name) for i in a.items] == [(i.x, i.y, i.name) for i in b.items]


def test_render_state_before_start():
    assert GameSession().render_state() == {"screen": "title", "running": False, "turn": 0, "level": 1}


def test_turn_costs():
    assert ACTION_TURN_COSTS["move"] == 1
    assert ACTION_TURN_COSTS["equip"] == 0
    assert ACTION_TURN_COSTS["talk"] == 0


# --------------------------------------------------------------- movement
def test_move_advances_turn(arena):
    assert arena.move(1, 0) is True
    assert (arena.player.x, arena.player.y) == (11, 10)
    assert arena.turn == 1
    assert arena.dungeon.is_visible(19, 10)


def test_move_rejects_bad_directions(arena):
    assert arena.move(2, 0) is False
    assert arena.move(0, 0) is False
    assert arena.turn == 0


def test_move_into_wall(arena):
    arena.dungeon.set_cell(11, 10, CellType.WALL)
    assert arena.move(1, 0) is False
    assert _last(arena) == "You can't move there."
    assert (arena.player.x, arena.player.y) == (10, 10)
    assert arena.turn == 0


def test_bump_attack_kills_and_costs_a_turn(arena):
    rat = _spawn(arena, "rat", 11, 10)
    rat.hp = 1
    arena.rng = ScriptedRng(ints=[1, 100, 100])
    assert arena.move(1, 0) is True
    assert rat not in arena.entities
    assert (arena.player.x, arena.player.y) == (10, 10)
    assert arena.turn == 1


def test_enemies_act_after_the_player(arena):
    _spawn(arena, "rat", 12, 10)
    arena.move(1, 0)
    assert arena.player.hp < arena.player.max_hp
    assert any("attacks you" in t for t in arena.messages.texts())


def test_talking_to_npc_is_free(arena):
    arena.entities.add(Npc(name="Hermit", x=11, y=10, dialogue="Stay a while."))
    assert arena.move(1, 0) is True
    assert _last(arena) == 'Hermit: "Stay a while."'
    assert (arena.player.x, arena.player.y) == (10, 10)
    assert arena.turn == 0


def test_non_blocking_entities_can_be_walked_onto(arena, monkeypatch):
    monkeypatch.setattr(Npc, "blocks_player", False)
    arena.entities.add(Npc(name="Hermit", x=11, y=10, dialogue="Stay a while."))
    assert arena.move(1, 0) is True
    assert (arena.player.x, arena.player.y) == (11, 10)
    assert arena.turn == 1


def test_trap_triggers_once(arena):
    trap = arena.entities.add(Trap(name="Spike Trap", x=11, y=10, damage=5))
    assert arena.move(1, 0) is True
    assert arena.player.hp == 115
    assert trap not in arena.entities
    assert "You trigger a Spike Trap and take 5 damage!" in arena.messages.texts()


def test_fatal_trap_ends_game(arena):
    arena.entities.add(Trap(name="Spike Trap", x=11, y=10, damage=5))
    arena.player.hp = 3
    arena.move(1, 0)
    assert arena.current_screen == "gameover"
    assert _last(arena) == "You were slain by the Spike Trap. Game over."
    assert arena.move(1, 0) is False


def test_move_toward_steps_on_longer_axis(arena):
    assert arena.move_toward(15, 12) is True
    assert (arena.player.x, arena.player.y) == (11, 10)
    assert arena.move_toward(11, 5) is True
    assert (arena.player.x, arena.player.y) == (11, 9)
    assert arena.move_toward(11, 9) is False


def test_stepping_on_exit_and_items_is_announced(arena):
    arena.dungeon.set_cell(11, 10, CellType.EXIT)
    arena.items.add_item(_item("consumable", "health_potion"), 11, 10)
    arena.move(1, 0)
    texts = arena.messages.texts()
    assert "You found the exit! Act here to descend." in texts
    assert "You see Health Potion here." in texts


# ------------------------------------------------------------ context action
def test_action_picks_up_item(arena):
    potion = arena.items.add_item(_item("consumable", "health_potion"), 10, 10)
    assert arena.perform_action() is True
    assert arena.player.inventory == [potion]
    assert len(arena.items) == 0
    assert _last(arena) == "You picked up Health Potion."
    assert arena.turn == 1


def test_action_with_full_inventory(arena):
    arena.items.add_item(_item("consumable", "health_potion"), 10, 10)
    arena.player.max_inventory_size = 0
    assert arena.perform_action() is False
    assert _last(arena) == "Your inventory is full!"
    assert len(arena.items) == 1
    assert arena.turn == 0


def test_action_attacks_cardinal_enemy(arena):
    _spawn(arena, "rat", 10, 11)
    arena.rng = ScriptedRng(ints=[94])
    assert arena.perform_action() is True
    assert "You miss the Rat." in arena.messages.texts()
    assert arena.turn == 1


def test_action_waits_otherwise(arena):
    _spawn(arena, "rat", 11, 11)  # diagonal does not count
    assert arena.perform_action() is True
    assert "You wait." in arena.messages.texts()
    assert arena.turn == 1


def test_action_on_exit_descends(arena):
    arena.dungeon.set_cell(10, 10, CellType.EXIT)
    assert arena.perform_action() is True
    assert arena.level == 2
    assert arena.dungeon.level == 2
    assert (arena.player.x, arena.player.y) == arena.dungeon.entrance
    assert len(arena.entities.enemies()) <= 8
    assert _last(arena) == "You descend to level 2."
    assert arena.turn == 0


# --------------------------------------------------------------- inventory
def test_use_potion(arena):
    arena.player.hp = 50
    arena.player.pickup(_item("consumable", "health_potion"))
    assert arena.use_item(0) is True
    assert arena.player.hp == 75
    assert _last(arena) == "You used Health Potion and restored 25 health."
    assert arena.turn == 1


def test_use_at_full_health_restores_nothing(arena):
    arena.player.pickup(_item("consumable", "elixir"))
    assert arena.use_item(0) is True
    assert _last(arena) == "You used Elixir and restored nothing."


def test_use_rejects_gear_and_bad_index(arena):
    arena.player.pickup(_item("weapon", "sword"))
    assert arena.use_item(0) is False
    assert _last(arena) == "You can't use the Sword."
    assert arena.use_item(4) is False
    assert arena.turn == 0


def test_equip_and_unequip_are_free(arena):
    sword = _item("weapon", "sword")
    arena.player.pickup(sword)
    assert arena.equip_item(0) is True
    assert arena.player.equipment["weapon"] is sword
    assert _last(arena) == "You equip Sword."
    assert arena.unequip_item("weapon") is True
    assert arena.player.inventory == [sword]
    assert _last(arena) == "You unequip your Sword."
    assert arena.unequip_item("weapon") is False
    assert arena.unequip_item("cape") is False
    assert arena.turn == 0


def test_equip_rejects_consumables(arena):
    arena.player.pickup(_item("consumable", "health_potion"))
    assert arena.equip_item(0) is False
    assert _last(arena) == "You can't equip the Health Potion."


def test_unequip_into_full_inventory(arena):
    arena.player.max_inventory_size = 1
    arena.player.equipment["weapon"] = _item("weapon", "sword")
    arena.player.pickup(_item("consumable", "elixir"))
    assert arena.unequip_item("weapon") is False
    assert _last(arena) == "Your inventory is full!"


# --------------------------------------------------------------- attacks
def test_fire_requires_ranged_weapon(arena):
    _spawn(arena, "rat", 13, 10)
    assert arena.fire(13, 10) is False
    assert _last(arena) == "You have no ranged weapon equipped."


def test_fire_hits_visible_enemy_in_range(arena):
    arena.player.equipment["weapon"] = _item("weapon", "bow")
    rat = _spawn(arena, "rat", 13, 10)
    arena.rng = ScriptedRng(ints=[85, 100])
    assert arena.fire(13, 10) is True
    assert rat not in arena.entities
    assert arena.turn == 1


def test_fire_out_of_range_or_at_nothing(arena):
    arena.player.equipment["weapon"] = _item("weapon", "bow")
    _spawn(arena, "rat", 10, 16)
    assert arena.fire(10, 16) is False
    assert _last(arena) == "That target is out of range."
    assert arena.fire(12, 12) is False
    assert arena.turn == 0


def test_special_costs_a_turn_only_when_spent(arena):
    assert arena.special_attack("sweep") is False
    assert arena.turn == 0
    rat = _spawn(arena, "rat", 11, 10)
    assert arena.special_attack("power", 0, 1) is False
    arena.rng = ScriptedRng(ints=[1, 100])
    assert arena.special_attack("power") is True
    assert rat not in arena.entities
    assert arena.player.energy == 30
    assert arena.turn == 1


def test_missed_special_still_uses_the_turn(arena):
    skeleton = _spawn(arena, "skeleton", 11, 10)
    arena.rng = ScriptedRng(ints=[71])
    assert arena.special_attack("power") is True
    assert skeleton.hp == 20
    assert arena.player.energy == 30
    assert arena.turn == 1


def test_special_that_spends_nothing_keeps_the_turn(arena):
    _spawn(arena, "rat", 11, 10)
    arena.player.energy = 5
    assert arena.special_attack("power") is False
    assert arena.player.energy == 5
    assert arena.turn == 0


# ------------------------------------------------------------------ effects
def test_regeneration_and_vigor_tick_each_turn(arena):
    arena.player.equipment["armor"] = Item(
        id="t-armor",
        category="armor",
        type="leather_armor",
        name="Leather Armor of Mending",
        stats={"defense": 2},
        equip_slot="armor",
        durability=60,
        max_durability=60,
        effects=[{"type": "regeneration", "value": 2}],
    )
    arena.player.equipment["accessory"] = Item(
        id="t-charm",
        category="charm",
        type="totem",
        name="Totem of Vigor",
        stats={"strength": 1},
        equip_slot="accessory",
        effects=[{"type": "vigor", "value": 1}],
    )
    arena.player.hp, arena.player.energy = 50, 10
    arena.perform_action()
    assert arena.player.hp == 52
    assert arena.player.energy == 11


# ---------------------------------------------------------------- game over
def test_dead_player_input_is_ignored(arena):
    arena.player.pickup(_item("consumable", "health_potion"))
    arena.player.hp = 0
    arena.handle_player_death("Rat")
    assert arena.current_screen == "gameover"
    assert not arena.accepts_input
    assert arena.move(1, 0) is False
    assert arena.perform_action() is False
    assert arena.use_item(0) is False
    assert arena.special_attack("sweep") is False
    assert _last(arena) == "You were slain by the Rat. Game over."


# ----------------------------------------------------------------- snapshot
def test_render_state_filters_by_visibility(arena):
    arena.entities.add(Trap(name="Spike Trap", x=11, y=10))
    arena.entities.add(Trap(name="Spike Trap", x=12, y=10, hidden=False))
    _spawn(arena, "rat", 9, 10)
    _spawn(arena, "rat", 40, 40)
    arena.items.add_item(_item("consumable", "elixir"), 10, 12)
    arena.items.add_item(_item("consumable", "elixir"), 45, 45)
    state = arena.render_state()
    assert sorted((e["kind"], e["x"]) for e in state["entities"]) == [("enemy", 9), ("trap", 12)]
    assert [(i["x"], i["y"]) for i in state["items"]] == [(10, 12)]
    assert state["screen"] == "game"
    assert len(state["grid"]) == state["height"] == 50
    assert state["player"]["hp"] == 120
    assert state["player"]["strength"] == 14
    assert state["player"]["equipment"]["weapon"] is None
    assert state["messages"][-1]["text"]
