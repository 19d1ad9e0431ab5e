import unittest

import pytest

from dungeon_quest.dungeon.tiles import CellType
from dungeon_quest.models.entities import Npc, Trap, create_enemy
from dungeon_quest.services import monster_ai
from tests.dungeon_test_utils import ScriptedRng


def _spawn(game, key, x, y):
    return game.entities.add(create_enemy(key, x, y))


def _wall(game, x, y):
    game.dungeon.set_cell(x, y, CellType.WALL)


def test_can_move_to_checks_walls_entities_and_player(arena):
    _wall(arena, 12, 10)
    arena.entities.add(Trap(name="Spike Trap", x=13, y=10))
    assert monster_ai.can_move_to(arena, 11, 10)
    assert not monster_ai.can_move_to(arena, 12, 10)
    assert not monster_ai.can_move_to(arena, 13, 10)
    assert not monster_ai.can_move_to(arena, 10, 10)


def test_slow_enemies_skip_off_turns(arena):
    skeleton = _spawn(arena, "skeleton", 11, 10)
    arena.turn = 1
    assert monster_ai.process_enemy_turn(arena, skeleton) == "idle"
    assert arena.player.hp == arena.player.max_hp
    arena.turn = 2
    assert monster_ai.process_enemy_turn(arena, skeleton) == "attack"
    assert arena.player.hp < arena.player.max_hp


def test_adjacent_enemy_attacks(arena):
    rat = _spawn(arena, "rat", 10, 11)
    arena.turn = 1
    arena.rng = ScriptedRng(ints=[100])
    assert monster_ai.process_enemy_turn(arena, rat) == "attack"
    assert arena.player.hp == 118
    assert (rat.x, rat.y) == (10, 11)


def test_diagonal_enemy_steps_instead_of_attacking(arena):
    rat = _spawn(arena, "rat", 11, 11)
    arena.turn = 1
    assert monster_ai.process_enemy_turn(arena, rat) == "chase"
    assert (rat.x, rat.y) == (10, 11)
    assert arena.player.hp == arena.player.max_hp


@pytest.mark.parametrize(
    "walls,expected",
    [
        ([], (12, 12)),
        ([(12, 12)], (13, 11)),
        ([(12, 12), (13, 11)], (12, 11)),
    ],
)
def test_chase_prefers_horizontal_then_vertical_then_diagonal(arena, walls, expected):
    rat = _spawn(arena, "rat", 13, 12)
    for x, y in walls:
        _wall(arena, x, y)
    arena.turn = 1
    assert monster_ai.process_enemy_turn(arena, rat) == "chase"
    assert (rat.x, rat.y) == expected


def test_cornered_chaser_stays_put(arena):
    rat = _spawn(arena, "rat", 13, 12)
    for x, y in ((12, 12), (13, 11), (12, 11)):
        _wall(arena, x, y)
    arena.turn = 1
    assert monster_ai.process_enemy_turn(arena, rat) == "idle"
    assert (rat.x, rat.y) == (13, 12)


def test_enemy_outside_detection_wanders(arena):
    rat = _spawn(arena, "rat", 20, 20)
    arena.turn = 1
    arena.rng = ScriptedRng(floats=[0.5])
    assert monster_ai.process_enemy_turn(arena, rat) == "idle"
    assert (rat.x, rat.y) == (20, 20)
    arena.rng = ScriptedRng(floats=[0.1])
    assert monster_ai.process_enemy_turn(arena, rat) == "wander"
    assert abs(rat.x - 20) + abs(rat.y - 20) == 1


def test_passive_enemy_never_attacks(arena):
    rat = _spawn(arena, "rat", 11, 10)
    rat.aggressive = False
    arena.turn = 1
    arena.rng = ScriptedRng(floats=[0.9])
    assert monster_ai.process_enemy_turn(arena, rat) == "idle"
    assert arena.player.hp == arena.player.max_hp


class TestProcessTurn(unittest.TestCase):
    @pytest.fixture(autouse=True)
    def _arena(self, arena):
        self.game = arena
        self.game.turn = 1

    def test_only_enemies_act(self):
        self.game.entities.add(Trap(name="Spike Trap", x=11, y=10))
        self.game.entities.add(Npc(name="Hermit", x=9, y=10))
        self.assertEqual(monster_ai.process_turn(self.game), 0)

    def test_stops_once_the_player_dies(self):
        _spawn(self.game, "rat", 11, 10)
        _spawn(self.game, "rat", 9, 10)
        self.game.player.hp = 1
        self.assertEqual(monster_ai.process_turn(self.game), 1)
        self.assertEqual(self.game.current_screen, "gameover")
        attacks = [t for t in self.game.messages.texts() if "attacks you" in t]
        self.assertEqual(len(attacks), 1)

    def test_enemies_removed_mid_turn_are_skipped(self):
        first = _spawn(self.game, "rat", 11, 10)
        second = _spawn(self.game, "rat", 9, 10)
        calls = []

        def fake_turn(session, enemy):
            calls.append(enemy)
            session.entities.remove(second)
            return "attack"

        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(monster_ai, "process_enemy_turn", fake_turn)
            self.assertEqual(monster_ai.process_turn(self.game), 1)
        self.assertEqual(len(calls), 1)
        self.assertIs(calls[0], first)
