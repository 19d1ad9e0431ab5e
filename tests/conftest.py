import os
import random
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from dungeon_quest import create_app  # noqa: E402
from dungeon_quest.config import GameSettings  # noqa: E402
from dungeon_quest.dungeon import generate  # noqa: E402
from dungeon_quest.routes.game_api import clear_sessions  # noqa: E402
from dungeon_quest.services.game_session import GameSession  # noqa: E402
from tests.dungeon_test_utils import carve_open_field  # noqa: E402


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def make_dungeon():
    def _make(width=50, height=50, level=1, seed=42):
        return generate(width, height, level, random.Random(seed))

    return _make


@pytest.fixture()
def make_session():
    """Start a seeded game. Extra keyword arguments go to GameSettings."""

    def _make(char_class="warrior", seed=7, **settings):
        return GameSession.new_game(char_class=char_class, seed=seed, settings=GameSettings(**settings))

    return _make


@pytest.fixture()
def arena(make_session):
    """A started session on an open floor field with the player at (10, 10).

    Entities and items are cleared; tests place exactly what they need.
    """
    game = make_session()
    game.entities.clear()
    game.items.clear()
    game.player.x, game.player.y = 10, 10
    carve_open_field(game)
    return game


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture()
def client(test_app):
    clear_sessions()
    return test_app.test_client()
