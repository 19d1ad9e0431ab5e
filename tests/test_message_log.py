from dungeon_quest.services.message_log import MAX_MESSAGES, MessageLog


def test_messages_carry_turn_and_category():
    log = MessageLog()
    log.turn = 3
    log.add("You hit the Rat for 4 damage!", "combat")
    log.add("odd", "shouting")
    assert log.entries[0] == {"turn": 3, "text": "You hit the Rat for 4 damage!", "category": "combat"}
    assert log.entries[1]["category"] == "system"


def test_log_is_capped():
    log = MessageLog()
    for i in range(MAX_MESSAGES + 25):
        log.add(f"m{i}")
    assert len(log.entries) == MAX_MESSAGES
    assert log.texts()[0] == "m25"
    assert [e["text"] for e in log.recent(2)] == [f"m{MAX_MESSAGES + 23}", f"m{MAX_MESSAGES + 24}"]


def test_recent_returns_copies():
    log = MessageLog()
    log.add("hello")
    log.recent()[0]["text"] = "changed"
    assert log.texts() == ["hello"]
