import json

from dungeon_quest import logging_utils
from dungeon_quest.logging_utils import get_logger


def test_key_value_format(monkeypatch):
    monkeypatch.setattr(logging_utils, "JSON_MODE", False)
    line = logging_utils._format("info", event="level_generated", rooms=4, theme="dark cave", skipped=None)
    parts = line.split(" ")
    assert parts[0] == "level=info"
    assert parts[1].startswith("ts=")
    assert "event=level_generated" in parts
    assert "rooms=4" in parts
    assert "theme=dark_cave" in parts
    assert not any(p.startswith("skipped=") for p in parts)


def test_json_format(monkeypatch):
    monkeypatch.setattr(logging_utils, "JSON_MODE", True)
    rec = json.loads(logging_utils._format("warn", event="spawn_shortfall", wanted=6, placed=4, note=None))
    assert rec["level"] == "warn"
    assert rec["event"] == "spawn_shortfall"
    assert rec["placed"] == 4
    assert "note" not in rec
    assert isinstance(rec["ts"], int)


def test_json_format_survives_unencodable_values(monkeypatch):
    monkeypatch.setattr(logging_utils, "JSON_MODE", True)
    rec = json.loads(logging_utils._format("info", event="x", blob=object()))
    assert rec["error"] == "json_encode_failed"


def test_level_threshold_and_streams(monkeypatch, capsys):
    monkeypatch.setattr(logging_utils, "JSON_MODE", False)
    monkeypatch.setattr(logging_utils, "CURRENT_LEVEL", logging_utils.LEVELS["warn"])
    log = get_logger("dungeon_quest.test")
    log.debug(event="hidden")
    log.info(event="hidden")
    log.warn(event="shown_warn")
    log.error(event="shown_error")
    out = capsys.readouterr()
    assert "hidden" not in out.out and "hidden" not in out.err
    assert "event=shown_warn" in out.out
    assert "logger=dungeon_quest.test" in out.out
    assert "event=shown_error" in out.err


def test_loggers_are_cached_by_name():
    assert get_logger("dungeon_quest.a") is get_logger("dungeon_quest.a")
    assert get_logger("dungeon_quest.a") is not get_logger("dungeon_quest.b")
    assert logging_utils.log.name == "dungeon_quest"


def test_level_fields_do_not_clash_with_severity(monkeypatch, capsys):
    monkeypatch.setattr(logging_utils, "JSON_MODE", False)
    monkeypatch.setattr(logging_utils, "CURRENT_LEVEL", logging_utils.LEVELS["info"])
    log = get_logger("dungeon_quest.test")
    log.info(event="descend", dungeon_level=3, level=2, ts=7)
    parts = capsys.readouterr().out.strip().split(" ")
    assert parts[0] == "level=info"
    assert "dungeon_level=3" in parts
    assert "field_level=2" in parts
    assert "field_ts=7" in parts
    assert sum(p.startswith("level=") for p in parts) == 1


def test_json_mode_keeps_severity_over_level_field(monkeypatch, capsys):
    monkeypatch.setattr(logging_utils, "JSON_MODE", True)
    monkeypatch.setattr(logging_utils, "CURRENT_LEVEL", logging_utils.LEVELS["info"])
    get_logger("dungeon_quest.test").warn(event="spawn_shortfall", level=4)
    rec = json.loads(capsys.readouterr().out)
    assert rec["level"] == "warn"
    assert rec["field_level"] == 4
