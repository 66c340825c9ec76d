"""
Tests for the status effect ledger.
"""

import pytest

from jrpg_combat.core.constants import StackRule, StatusType, TimingWindow
from jrpg_combat.effects.status import (
    StatusEffect,
    StatusPayload,
    add_status,
    apply_payload,
    attack_modifier,
    clear_statuses,
    get_status,
    has_status,
    remove_status,
    tick_statuses_by_phase,
)


@pytest.fixture
def target(make_character):
    return make_character("target", hp=15, max_hp=20)


def test_add_status_uses_default_timing(target):
    """
    Test that a status without explicit timing gets its per-type window.
    """
    poison = add_status(target, StatusType.POISONED, 3, 2)
    stun = add_status(target, StatusType.STUNNED, 1)
    assert poison.timing_window == TimingWindow.TURN_START
    assert stun.timing_window == TimingWindow.TURN_END
    assert has_status(target, StatusType.POISONED)
    assert has_status(target, StatusType.STUNNED)


def test_replace_keeps_single_instance(target):
    """
    Test that reapplying with the replace rule swaps the effect.
    """
    add_status(target, StatusType.BUFFED, 3, 2)
    add_status(target, StatusType.BUFFED, 1, 5)

    buffs = [s for s in target.statuses if s.type == StatusType.BUFFED]
    assert len(buffs) == 1
    assert buffs[0].duration == 1
    assert buffs[0].value == 5


def test_stack_duration_extends(target):
    """
    Test that the stack-duration rule adds up durations.
    """
    add_status(target, StatusType.BURNING, 2, 1, stack_rule=StackRule.STACK_DURATION)
    effect = add_status(
        target, StatusType.BURNING, 3, 1, stack_rule=StackRule.STACK_DURATION
    )
    assert effect.duration == 5
    assert len(target.statuses) == 1


def test_stack_intensity_adds_stacks(target):
    """
    Test that the stack-intensity rule raises stacks and refreshes duration.
    """
    add_status(target, StatusType.POISONED, 3, 2, stack_rule=StackRule.STACK_INTENSITY)
    effect = add_status(
        target, StatusType.POISONED, 2, 2, stack_rule=StackRule.STACK_INTENSITY
    )
    assert effect.stacks == 2
    assert effect.duration == 3
    assert effect.magnitude == 4
    assert len(target.statuses) == 1


def test_remove_and_clear(target):
    """
    Test removing a single status and clearing all of them.
    """
    add_status(target, StatusType.BUFFED, 2, 1)
    add_status(target, StatusType.WEAKENED, 2, 1)
    remove_status(target, StatusType.BUFFED)
    assert not has_status(target, StatusType.BUFFED)
    assert get_status(target, StatusType.WEAKENED) is not None

    clear_statuses(target)
    assert target.statuses == []


def test_tick_only_matching_phase(target):
    """
    Test that ticking one phase leaves the other phase untouched.
    """
    add_status(target, StatusType.POISONED, 2, 1)
    add_status(target, StatusType.STUNNED, 2)

    tick_statuses_by_phase(target, TimingWindow.TURN_END)

    assert get_status(target, StatusType.STUNNED).duration == 1
    assert get_status(target, StatusType.POISONED).duration == 2
    assert target.hp == 15


def test_poison_ticks_damage_and_expires(target):
    """
    Test that poison deals its value per tick and expires at zero duration.
    """
    add_status(target, StatusType.POISONED, 2, 3)

    first = tick_statuses_by_phase(target, TimingWindow.TURN_START)
    assert target.hp == 12
    assert first[0].damage == 3
    assert not first[0].expired

    second = tick_statuses_by_phase(target, TimingWindow.TURN_START)
    assert target.hp == 9
    assert second[0].expired
    assert not has_status(target, StatusType.POISONED)


def test_periodic_damage_clamps_at_zero(target):
    """
    Test that periodic damage never takes HP below zero.
    """
    target.hp = 2
    add_status(target, StatusType.BURNING, 3, 5)
    tick_statuses_by_phase(target, TimingWindow.TURN_START)
    assert target.hp == 0


def test_intensity_scales_tick_damage(target):
    """
    Test that stacked poison deals value times stacks.
    """
    for _ in range(3):
        add_status(
            target, StatusType.POISONED, 3, 2, stack_rule=StackRule.STACK_INTENSITY
        )
    tick_statuses_by_phase(target, TimingWindow.TURN_START)
    assert target.hp == 15 - 6


def test_regeneration_heals_up_to_max(target):
    """
    Test that regeneration heals and reports only the HP actually restored.
    """
    add_status(target, StatusType.REGENERATING, 2, 10)
    results = tick_statuses_by_phase(target, TimingWindow.TURN_START)
    assert target.hp == 20
    assert results[0].healing == 5


def test_attack_modifier(target):
    """
    Test the net attack bonus of buffs and weakening.
    """
    assert attack_modifier(target) == 0
    add_status(target, StatusType.BUFFED, 2, 3)
    add_status(target, StatusType.WEAKENED, 2, 1)
    assert attack_modifier(target) == 2


def test_apply_payload(target):
    """
    Test applying a skill payload with explicit timing and stack rule.
    """
    payload = StatusPayload(
        type=StatusType.STUNNED,
        duration=1,
        timing_window=TimingWindow.TURN_START,
        stack_rule=StackRule.STACK_DURATION,
    )
    effect = apply_payload(target, payload)
    assert effect.timing_window == TimingWindow.TURN_START
    assert effect.stack_rule == StackRule.STACK_DURATION


def test_negative_duration_rejected():
    """
    Test that an effect cannot be built with a negative duration.
    """
    with pytest.raises(ValueError):
        StatusEffect(type=StatusType.STUNNED, duration=-1)
    with pytest.raises(ValueError):
        StatusPayload(type=StatusType.STUNNED, duration=0)
