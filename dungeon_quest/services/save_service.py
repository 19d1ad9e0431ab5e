"""Save record encoding.

The save record shape is ``{player, dungeon, entities, items, state}`` (see
``GameSession.get_save_data``). Where it is stored is up to the caller; this
module only turns sessions into JSON text and back, rejecting malformed
records with a logged error and a None result.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..config import GameSettings
from ..logging_utils import get_logger
from .game_session import GameSession

log = get_logger("dungeon_quest.save")

SAVE_FORMAT_VERSION = 1
REQUIRED_KEYS = ("player", "dungeon", "entities", "state")


def save_game(session: GameSession) -> Dict[str, Any]:
    record = session.get_save_data()
    record["format"] = SAVE_FORMAT_VERSION
    return record


def load_game(record: Dict[str, Any], settings: Optional[GameSettings] = None) -> Optional[GameSession]:
    if not isinstance(record, dict):
        log.error(event="save_invalid", reason="not_an_object")
        return None
    missing = [k for k in REQUIRED_KEYS if k not in record]
    if missing:
        log.error(event="save_invalid", reason="missing_keys", keys=",".join(missing))
        return None
    try:
        session = GameSession.load_save_data(record, settings=settings)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        log.error(event="save_invalid", reason="malformed", error=str(exc))
        return None
    log.info(event="game_loaded", dungeon_level=session.level, turn=session.turn)
    return session


def dumps(session: GameSession) -> str:
    return json.dumps(save_game(session), separators=(",", ":"))


def loads(text: str, settings: Optional[GameSettings] = None) -> Optional[GameSession]:
    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        log.error(event="save_invalid", reason="bad_json", error=str(exc))
        return None
    return load_game(record, settings)
