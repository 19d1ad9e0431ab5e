"""
project: Dungeon Quest
module: game_api.py
License: MIT

JSON API over in-process game sessions.

Each ``POST /api/game`` creates a ``GameSession`` keyed by a random id. Every
intent endpoint takes the session's lock, applies the intent, and answers
``{"ok": <bool>, "state": <render snapshot>}``. Unknown session ids answer
404 and malformed bodies 400. Saves are plain JSON records the client keeps;
``POST /api/game/load`` turns one back into a fresh session.
"""

import threading
import uuid

from flask import Blueprint, current_app, jsonify, request

from ..config import MAX_DIMENSION, GameSettings
from ..logging_utils import get_logger
from ..models.player import CLASS_TABLE, EQUIP_SLOTS
from ..services import save_service
from ..services.combat_service import SPECIAL_ATTACK_COSTS
from ..services.game_session import GameSession

log = get_logger("dungeon_quest.api")

# In-process session registry. Guarded by a lock because the dev server runs
# threaded; each session additionally carries its own lock for intents.
_sessions = {}
_sessions_lock = threading.Lock()
_DEFAULT_MAX_SESSIONS = 32

bp_game = Blueprint("game", __name__)


def _settings(overrides=None) -> GameSettings:
    base = current_app.config.get("GAME_SETTINGS") or GameSettings()
    if not overrides:
        return base
    return GameSettings(
        dungeon_width=overrides.get("width", base.dungeon_width),
        dungeon_height=overrides.get("height", base.dungeon_height),
        visibility_radius=base.visibility_radius,
        max_inventory=base.max_inventory,
        seed=overrides.get("seed", base.seed),
    ).normalized()


def _register(game: GameSession) -> str:
    sid = uuid.uuid4().hex
    cap = int(current_app.config.get("MAX_SESSIONS", _DEFAULT_MAX_SESSIONS))
    with _sessions_lock:
        _sessions[sid] = game
        # oldest session goes first once the cap is exceeded
        while len(_sessions) > cap:
            evicted = next(iter(_sessions))
            _sessions.pop(evicted, None)
            log.info(event="session_evicted", sid=evicted)
    return sid


def _lookup(sid: str):
    with _sessions_lock:
        return _sessions.get(sid)


def clear_sessions() -> None:
    with _sessions_lock:
        _sessions.clear()


def _unknown():
    return jsonify({"error": "unknown session"}), 404


def _bad_request(message: str):
    return jsonify({"error": message}), 400


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _int_field(data: dict, key: str):
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _run_intent(sid: str, fn):
    game = _lookup(sid)
    if game is None:
        return _unknown()
    with game.lock:
        ok = bool(fn(game))
        state = game.render_state()
    return jsonify({"ok": ok, "state": state})


@bp_game.route("/api/game", methods=["POST"])
def new_game():
    """Create a session. Body (all optional): {class, seed, width, height}."""
    data = _body()
    char_class = data.get("class", "warrior")
    if char_class not in CLASS_TABLE:
        return _bad_request(f"unknown class: {char_class}")
    overrides = {}
    for key in ("seed", "width", "height"):
        if key in data:
            value = _int_field(data, key)
            if value is None:
                return _bad_request(f"{key} must be an integer")
            if key != "seed" and value > MAX_DIMENSION:
                return _bad_request(f"{key} must be at most {MAX_DIMENSION}")
            overrides[key] = value
    settings = _settings(overrides)
    game = GameSession.new_game(char_class=char_class, seed=settings.seed, settings=settings)
    sid = _register(game)
    log.info(event="session_created", sid=sid, char_class=char_class, seed=settings.seed)
    with game.lock:
        state = game.render_state()
    return jsonify({"id": sid, "state": state}), 201


@bp_game.route("/api/game/<sid>", methods=["GET"])
def get_state(sid):
    game = _lookup(sid)
    if game is None:
        return _unknown()
    with game.lock:
        return jsonify({"id": sid, "state": game.render_state()})


@bp_game.route("/api/game/<sid>", methods=["DELETE"])
def end_game(sid):
    with _sessions_lock:
        game = _sessions.pop(sid, None)
    if game is None:
        return _unknown()
    log.info(event="session_closed", sid=sid)
    return jsonify({"ok": True})


@bp_game.route("/api/game/<sid>/move", methods=["POST"])
def move(sid):
    data = _body()
    if "target" in data:
        target = data.get("target")
        if not (isinstance(target, list) and len(target) == 2 and all(isinstance(v, int) for v in target)):
            return _bad_request("target must be [x, y]")
        return _run_intent(sid, lambda g: g.move_toward(target[0], target[1]))
    dx, dy = _int_field(data, "dx"), _int_field(data, "dy")
    if dx is None or dy is None:
        return _bad_request("dx and dy must be integers")
    return _run_intent(sid, lambda g: g.move(dx, dy))


@bp_game.route("/api/game/<sid>/action", methods=["POST"])
def action(sid):
    return _run_intent(sid, lambda g: g.perform_action())


@bp_game.route("/api/game/<sid>/use", methods=["POST"])
def use_item(sid):
    index = _int_field(_body(), "index")
    if index is None:
        return _bad_request("index must be an integer")
    return _run_intent(sid, lambda g: g.use_item(index))


@bp_game.route("/api/game/<sid>/equip", methods=["POST"])
def equip_item(sid):
    index = _int_field(_body(), "index")
    if index is None:
        return _bad_request("index must be an integer")
    return _run_intent(sid, lambda g: g.equip_item(index))


@bp_game.route("/api/game/<sid>/unequip", methods=["POST"])
def unequip_item(sid):
    slot = _body().get("slot")
    if slot not in EQUIP_SLOTS:
        return _bad_request("slot must be one of: " + ", ".join(EQUIP_SLOTS))
    return _run_intent(sid, lambda g: g.unequip_item(slot))


@bp_game.route("/api/game/<sid>/special", methods=["POST"])
def special(sid):
    data = _body()
    kind = data.get("kind")
    if kind not in SPECIAL_ATTACK_COSTS:
        return _bad_request("kind must be one of: " + ", ".join(SPECIAL_ATTACK_COSTS))
    dx = _int_field(data, "dx") or 0
    dy = _int_field(data, "dy") or 0
    return _run_intent(sid, lambda g: g.special_attack(kind, dx, dy))


@bp_game.route("/api/game/<sid>/fire", methods=["POST"])
def fire(sid):
    data = _body()
    x, y = _int_field(data, "x"), _int_field(data, "y")
    if x is None or y is None:
        return _bad_request("x and y must be integers")
    return _run_intent(sid, lambda g: g.fire(x, y))


@bp_game.route("/api/game/<sid>/save", methods=["GET"])
def save(sid):
    game = _lookup(sid)
    if game is None:
        return _unknown()
    with game.lock:
        record = save_service.save_game(game)
    return jsonify(record)


@bp_game.route("/api/game/load", methods=["POST"])
def load():
    record = request.get_json(silent=True)
    game = save_service.load_game(record, settings=_settings())
    if game is None:
        return _bad_request("invalid save record")
    sid = _register(game)
    with game.lock:
        state = game.render_state()
    return jsonify({"id": sid, "state": state}), 201
