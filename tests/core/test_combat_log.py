"""
Tests for the per-encounter combat log.
"""

import pytest

from jrpg_combat.core.combat_log import CombatLog


@pytest.fixture
def log():
    return CombatLog()


def test_messages_keep_order(log):
    """
    Test that messages are returned in the order they were added.
    """
    log.add("first")
    log.add("second")
    assert log.get_messages() == ["first", "second"]
    assert len(log) == 2


def test_turn_start_tags_following_entries(log):
    """
    Test that entries after a turn banner carry the turn number.
    """
    log.add("setup")
    log.add_turn_start(3)
    log.add("hit")

    entries = log.get_all()
    assert entries[0].turn_number == 0
    assert entries[1].message == "--- Turn 3 ---"
    assert entries[2].turn_number == 3


def test_get_last(log):
    """
    Test retrieving the most recent entries.
    """
    for i in range(5):
        log.add(f"m{i}")
    assert [e.message for e in log.get_last(2)] == ["m3", "m4"]
    assert log.get_last(0) == []


def test_clear(log):
    """
    Test that clearing empties the log and resets the turn.
    """
    log.set_turn(4)
    log.add("x")
    log.clear()
    assert len(log) == 0
    log.add("y")
    assert log.get_all()[0].turn_number == 0


def test_logs_are_independent():
    """
    Test that two encounters never share messages.
    """
    first, second = CombatLog(), CombatLog()
    first.add("only here")
    assert second.get_messages() == []


def test_print_writes_every_message(log, mocker):
    """
    Test that printing sends each message to the console.
    """
    mock_cprint = mocker.patch("jrpg_combat.core.combat_log.cprint")
    log.add("a [b]")
    log.add("c")
    log.print()
    assert mock_cprint.call_count == 2
    mock_cprint.assert_any_call("a [b]", markup=False)
