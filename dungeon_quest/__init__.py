"""
project: Dungeon Quest
module: __init__.py
License: MIT

Flask application factory for the Dungeon Quest JSON API.

The game engine (``dungeon_quest.dungeon``, ``dungeon_quest.models``,
``dungeon_quest.services``) has no web dependencies of its own; this module
only wires the game blueprint into a Flask app. Settings come from the
environment, with ``.env`` loaded if present.
"""

import os

from dotenv import load_dotenv
from flask import Flask

from .config import GameSettings

# Load .env if present so DQ_* settings can be supplied without exporting
# shell variables during development.
load_dotenv()

app = Flask(__name__)
# Keep render snapshots in insertion order
app.json.sort_keys = False
app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    GAME_SETTINGS=GameSettings.from_env(),
    MAX_SESSIONS=int(os.getenv("DQ_MAX_SESSIONS", "32")),
)

from .routes.game_api import bp_game  # noqa: E402

app.register_blueprint(bp_game)


def create_app():
    """Return the Flask app, refreshing settings from the current environment."""
    app.config["GAME_SETTINGS"] = GameSettings.from_env()
    return app
