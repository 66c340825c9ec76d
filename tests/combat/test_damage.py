"""
Tests for damage resolution.
"""

import pytest

from jrpg_combat.combat.damage import DamageFormula, effective_armor, resolve_damage
from jrpg_combat.core.constants import StatusType
from jrpg_combat.effects.status import add_status


@pytest.fixture
def attacker(make_character):
    return make_character("attacker", attack=5)


@pytest.fixture
def target(make_enemy):
    return make_enemy("target", armor=2)


def test_basic_attack_scenario(attacker, target, fixed_rng):
    """
    Test a 1d6 attack rolling 4 with attack 5 against armor 2.
    """
    result = resolve_damage(
        attacker, target, DamageFormula(dice_expression="1d6"), fixed_rng(rolls=[4])
    )
    assert result.roll_total == 4
    assert result.raw_damage == 9
    assert result.blocked == 2
    assert result.final_damage == 7


def test_resolution_is_pure(attacker, target, fixed_rng):
    """
    Test that resolving damage never mutates the combatants and is repeatable.
    """
    formula = DamageFormula(dice_expression="2d6", flat_power=1)
    before = (attacker.model_dump(), target.model_dump())
    first = resolve_damage(attacker, target, formula, fixed_rng(rolls=[3, 5]))
    second = resolve_damage(attacker, target, formula, fixed_rng(rolls=[3, 5]))
    assert first == second
    assert (attacker.model_dump(), target.model_dump()) == before


def test_guard_doubles_armor(attacker, target, fixed_rng):
    """
    Test that a guarding target blocks twice its armor.
    """
    target.is_guarding = True
    assert effective_armor(target) == 4
    result = resolve_damage(
        attacker, target, DamageFormula(dice_expression="1d6"), fixed_rng(rolls=[4])
    )
    assert result.blocked == 4
    assert result.final_damage == 5


def test_ignore_armor(attacker, target, fixed_rng):
    """
    Test that armor-piercing damage is never blocked.
    """
    result = resolve_damage(
        attacker,
        target,
        DamageFormula(dice_expression="1d6", ignore_armor=True),
        fixed_rng(rolls=[4]),
    )
    assert result.blocked == 0
    assert result.final_damage == 9


def test_blocked_never_exceeds_raw(make_character, make_enemy):
    """
    Test that armor absorbs at most the raw damage.
    """
    weak = make_character("weak", attack=1)
    wall = make_enemy("wall", armor=10)
    result = resolve_damage(weak, wall, DamageFormula())
    assert result.raw_damage == 1
    assert result.blocked == 1
    assert result.final_damage == 0


def test_minimum_damage(make_character, make_enemy):
    """
    Test that the final damage honors the minimum.
    """
    weak = make_character("weak", attack=1)
    wall = make_enemy("wall", armor=10)
    result = resolve_damage(weak, wall, DamageFormula(minimum_damage=1))
    assert result.final_damage == 1


def test_stat_scale_is_floored(attacker, target):
    """
    Test that the scaled attack stat is rounded down.
    """
    result = resolve_damage(
        attacker, target, DamageFormula(flat_power=3, attacker_stat_scale=0.5)
    )
    assert result.roll_total == 0
    assert result.raw_damage == 3 + 2


def test_negative_raw_clamped(attacker, target):
    """
    Test that a negative total becomes zero raw damage.
    """
    result = resolve_damage(
        attacker, target, DamageFormula(flat_power=-20, attacker_stat_scale=0)
    )
    assert result.raw_damage == 0
    assert result.final_damage == 0
    assert result.blocked == 0


def test_shield_adds_to_armor(attacker, target, fixed_rng):
    """
    Test that a shield status raises the armor by its value.
    """
    add_status(target, StatusType.SHIELDED, 2, 3)
    assert effective_armor(target) == 5
    result = resolve_damage(
        attacker, target, DamageFormula(dice_expression="1d6"), fixed_rng(rolls=[4])
    )
    assert result.blocked == 5
    assert result.final_damage == 4


def test_shield_stacks_on_guard(attacker, target):
    """
    Test that the shield value is added after the guard multiplier.
    """
    target.is_guarding = True
    add_status(target, StatusType.SHIELDED, 2, 3)
    assert effective_armor(target) == 2 * 2 + 3


def test_shield_blocks_at_most_raw(make_character, make_enemy):
    """
    Test that a large shield still blocks no more than the raw damage.
    """
    weak = make_character("weak", attack=2)
    wall = make_enemy("wall", armor=0)
    add_status(wall, StatusType.SHIELDED, 2, 10)
    result = resolve_damage(weak, wall, DamageFormula())
    assert result.blocked == result.raw_damage == 2
    assert result.final_damage == 0
