"""
Tests for dice parsing and rolling.
"""

import random

import pytest

from jrpg_combat.core.constants import DiceType
from jrpg_combat.core.dice_parser import (
    DiceExpression,
    get_max_roll,
    get_min_roll,
    parse_dice_expression,
    roll_and_describe,
    roll_dice_expression,
    roll_dice_type,
    roll_die,
    roll_multiple,
    roll_with_advantage,
    roll_with_disadvantage,
)
from jrpg_combat.core.errors import DiceError, InvalidDie, InvalidExpression


@pytest.fixture
def rng():
    return random.Random(1234)


def test_roll_die_stays_in_range(rng):
    """
    Test that a die roll is always between 1 and the number of sides.
    """
    for sides in (1, 4, 6, 20, 100):
        for _ in range(200):
            assert 1 <= roll_die(sides, rng) <= sides


def test_roll_die_one_side_always_one(rng):
    """
    Test that a single-sided die always rolls 1.
    """
    assert all(roll_die(1, rng) == 1 for _ in range(20))


@pytest.mark.parametrize("sides", [0, -1, -20])
def test_roll_die_rejects_invalid_sides(sides):
    """
    Test that a die with fewer than one side is rejected.
    """
    with pytest.raises(InvalidDie):
        roll_die(sides)


def test_invalid_die_is_value_error():
    """
    Test that dice errors can be caught as ValueError.
    """
    with pytest.raises(ValueError):
        roll_die(0)
    assert issubclass(InvalidDie, DiceError)


def test_roll_dice_type_uses_sides(fixed_rng):
    """
    Test that named dice roll with their number of sides.
    """
    rng = fixed_rng(rolls=[7])
    assert roll_dice_type(DiceType.D8, rng) == 7
    assert DiceType.D20.sides == 20


def test_roll_multiple_returns_each_die(fixed_rng):
    """
    Test that rolling several dice returns the individual results.
    """
    assert roll_multiple(3, 6, fixed_rng(rolls=[1, 5, 6])) == [1, 5, 6]


@pytest.mark.parametrize("count", [0, -3, 101])
def test_roll_multiple_rejects_bad_count(count):
    """
    Test that the dice count must be between 1 and 100.
    """
    with pytest.raises(InvalidExpression):
        roll_multiple(count, 6)


@pytest.mark.parametrize(
    "expression, count, sides, modifier",
    [
        ("2d6+3", 2, 6, 3),
        ("d20", 1, 20, 0),
        ("1d4-1", 1, 4, -1),
        (" 3D8 + 2 ", 3, 8, 2),
    ],
)
def test_parse_dice_expression(expression, count, sides, modifier):
    """
    Test parsing of valid dice expressions.
    """
    parsed = parse_dice_expression(expression)
    assert (parsed.count, parsed.sides, parsed.modifier) == (count, sides, modifier)


@pytest.mark.parametrize(
    "expression", ["", "abc", "2d", "d", "2x6", "2d6+", "1d6+1d4", "0d6", "2d0", "101d6"]
)
def test_parse_rejects_malformed_expressions(expression):
    """
    Test that malformed or out of range expressions are rejected.
    """
    with pytest.raises(InvalidExpression):
        parse_dice_expression(expression)


def test_roll_dice_expression_range(rng):
    """
    Test that 2d6+3 always lands between 5 and 15.
    """
    results = {roll_dice_expression("2d6+3", rng) for _ in range(500)}
    assert min(results) >= 5
    assert max(results) <= 15


def test_roll_dice_expression_sums_rolls(fixed_rng):
    """
    Test that the total is the sum of the dice plus the modifier.
    """
    assert roll_dice_expression("2d6+3", fixed_rng(rolls=[2, 6])) == 11
    assert roll_dice_expression("1d4-1", fixed_rng(rolls=[1])) == 0


def test_roll_and_describe(fixed_rng):
    """
    Test the breakdown used in log messages.
    """
    breakdown = roll_and_describe("2d6+2", fixed_rng(rolls=[3, 5]))
    assert breakdown.value == 10
    assert breakdown.get_roll() == 10
    assert breakdown.rolls == [3, 5]
    assert breakdown.description == "2d6(3+5)+2"

    single = roll_and_describe("d6", fixed_rng(rolls=[4]))
    assert single.description == "d6(4)"


def test_same_seed_same_rolls():
    """
    Test that an injected seeded generator makes rolls reproducible.
    """
    first = [roll_dice_expression("3d6", random.Random(7)) for _ in range(5)]
    second = [roll_dice_expression("3d6", random.Random(7)) for _ in range(5)]
    assert first == second


def test_min_and_max_roll():
    """
    Test the bounds of dice expressions.
    """
    assert get_min_roll("2d6+3") == 5
    assert get_max_roll("2d6+3") == 15
    assert get_min_roll("d20") == 1
    assert get_max_roll("3d4-2") == 10


def test_dice_expression_str():
    """
    Test the canonical text form of a parsed expression.
    """
    assert str(DiceExpression(count=2, sides=6, modifier=-1)) == "2d6-1"
    assert str(parse_dice_expression("d8")) == "1d8"


def test_advantage_and_disadvantage(fixed_rng):
    """
    Test that advantage keeps the higher roll and disadvantage the lower.
    """
    assert roll_with_advantage(20, fixed_rng(rolls=[4, 17])) == 17
    assert roll_with_disadvantage(20, fixed_rng(rolls=[4, 17])) == 4
