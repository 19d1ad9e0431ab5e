"""Minimal structured logging helper.

Emits one key=value line (or a compact JSON object) per event with a level and
timestamp. Gameplay code logs machine-readable events here; player-facing text
goes to the session message log instead.

Usage:
    from dungeon_quest.logging_utils import log
    log.info(event="level_generated", dungeon_level=3, rooms=7)

Environment:
    DQ_LOG_LEVEL   debug | info | warn | error   (default: info)
    DQ_LOG_JSON    1/true/yes/on to emit JSON lines

All non-numeric values are str()'d with spaces replaced by underscores in
key=value mode. Reserved keys: level, ts (passed values are emitted as field_level, field_ts).
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
CURRENT_LEVEL = LEVELS.get(os.getenv("DQ_LOG_LEVEL", "info").lower(), 20)
JSON_MODE = os.getenv("DQ_LOG_JSON", "0").lower() in ("1", "true", "yes", "on")


_RESERVED = ("level", "ts")


def _format(lvl: str, **fields) -> str:
    # Reserved names collide with the envelope; keep the value under a prefixed key
    fields = {(f"field_{k}" if k in _RESERVED else k): v for k, v in fields.items()}
    if JSON_MODE:
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = lvl
        rec["ts"] = int(time.time())
        try:
            return json.dumps(rec, separators=(",", ":"))
        except (TypeError, ValueError):
            return json.dumps({"level": lvl, "ts": int(time.time()), "error": "json_encode_failed"})
    parts = [f"level={lvl}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            parts.append(f"{k}={str(v).replace(' ', '_')}")
    return " ".join(parts)


class _Logger:
    def __init__(self, name: str | None = None):
        self.name = name or "dungeon_quest"

    def _log(self, lvl: str, **fields):
        if LEVELS[lvl] < CURRENT_LEVEL:
            return
        fields.setdefault("logger", self.name)
        print(_format(lvl, **fields), file=sys.stderr if lvl == "error" else sys.stdout)

    def debug(self, **fields):
        self._log("debug", **fields)

    def info(self, **fields):
        self._log("info", **fields)

    def warn(self, **fields):
        self._log("warn", **fields)

    def error(self, **fields):
        self._log("error", **fields)


_LOGGER_CACHE: dict[str, _Logger] = {}


def get_logger(name: str) -> _Logger:
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = _Logger(name)
    return _LOGGER_CACHE[name]


log = get_logger("dungeon_quest")
