"""
Dice parser module for the simulator.

Parses and rolls dice expressions of the form ``NdM+K`` ("2d6+3", "d20",
"3d8-2"). Every rolling function accepts an optional random source with the
``random.Random`` interface so that outcomes can be reproduced in tests; when
none is given, an OS-seeded module level generator is used.
"""

import random
import re
from typing import Any, Protocol

from pydantic import BaseModel, Field

from .constants import MAX_DICE_COUNT, MAX_DICE_SIDES, DiceType
from .errors import InvalidDie, InvalidExpression
from .logging import log_debug


class RandomSource(Protocol):
    """The subset of ``random.Random`` consumed by the simulator."""

    def randint(self, a: int, b: int) -> int: ...

    def random(self) -> float: ...


# Non-deterministic source used when the caller injects none.
_default_rng = random.Random()


def resolve_rng(rng: RandomSource | None) -> RandomSource:
    return rng if rng is not None else _default_rng


class DiceExpression(BaseModel):
    """A parsed dice expression."""

    count: int = Field(description="Number of dice rolled")
    sides: int = Field(description="Number of sides of each die")
    modifier: int = Field(0, description="Flat modifier added to the sum")

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if self.count < 1 or self.sides < 1:
            raise InvalidExpression(
                f"Invalid dice expression: {self} (must have at least 1 die with 1 side)"
            )
        if self.count > MAX_DICE_COUNT:
            raise InvalidExpression(
                f"Too many dice: {self.count} (max {MAX_DICE_COUNT})"
            )
        if self.sides > MAX_DICE_SIDES:
            raise InvalidExpression(
                f"Too many sides: {self.sides} (max {MAX_DICE_SIDES})"
            )

    @property
    def min_roll(self) -> int:
        return self.count + self.modifier

    @property
    def max_roll(self) -> int:
        return self.count * self.sides + self.modifier

    def __str__(self) -> str:
        text = f"{self.count}d{self.sides}"
        if self.modifier:
            text += f"{self.modifier:+d}"
        return text


class RollBreakdown(BaseModel):
    """Class to hold roll breakdown information."""

    value: int = Field(
        description="Total roll result",
    )
    description: str = Field(
        description="Description of the roll",
    )
    rolls: list[int] = Field(
        description="List of individual dice rolls",
        default_factory=list,
    )

    def get_roll(self) -> int:
        """
        Returns the total roll value.

        Returns:
            int: The total roll value.

        """
        return self.value


class DiceParser:
    """Strict parser for single-term dice expressions."""

    DICE_PATTERN = re.compile(r"^(\d*)d(\d+)([+-]\d+)?$", re.IGNORECASE)

    @staticmethod
    def parse(expression: str) -> DiceExpression:
        """
        Parse a dice expression without rolling it.

        Args:
            expression: Dice expression like "1d20+5", "2d6" or "d8".

        Returns:
            DiceExpression: The parsed count, sides and modifier.

        Raises:
            InvalidExpression: If the expression is malformed or out of range.

        """
        if not expression or not isinstance(expression, str):
            raise InvalidExpression(f"Invalid dice expression: {expression!r}")

        cleaned = re.sub(r"\s", "", expression).lower()
        match = DiceParser.DICE_PATTERN.match(cleaned)
        if not match:
            raise InvalidExpression(f"Invalid dice expression: {expression}")

        count_str, sides_str, modifier_str = match.groups()
        try:
            return DiceExpression(
                count=int(count_str) if count_str else 1,
                sides=int(sides_str),
                modifier=int(modifier_str) if modifier_str else 0,
            )
        except InvalidExpression:
            raise
        except ValueError as e:
            # Pydantic wraps errors raised in model_post_init.
            raise InvalidExpression(f"Invalid dice expression: {expression} ({e})")


def parse_dice_expression(expression: str) -> DiceExpression:
    """
    Parses a dice expression into its components.

    Args:
        expression (str): The dice expression to parse.

    Returns:
        DiceExpression: The parsed expression.

    """
    return DiceParser.parse(expression)


def roll_die(sides: int, rng: RandomSource | None = None) -> int:
    """
    Rolls a single die.

    Args:
        sides (int): Number of sides of the die.
        rng (RandomSource | None): Random source, defaults to the module one.

    Returns:
        int: A uniform integer in ``[1, sides]``.

    Raises:
        InvalidDie: If ``sides`` is lower than 1.

    """
    if sides < 1:
        raise InvalidDie(f"Invalid die: must have at least 1 side (got {sides})")
    return resolve_rng(rng).randint(1, sides)


def roll_dice_type(die_type: DiceType, rng: RandomSource | None = None) -> int:
    """Rolls one of the named dice (d4, d6, ...)."""
    return roll_die(die_type.sides, rng)


def roll_multiple(count: int, sides: int, rng: RandomSource | None = None) -> list[int]:
    """
    Rolls several dice of the same size and returns the individual results.

    Args:
        count (int): Number of dice to roll.
        sides (int): Number of sides of each die.
        rng (RandomSource | None): Random source, defaults to the module one.

    Returns:
        list[int]: The individual rolls.

    Raises:
        InvalidExpression: If ``count`` is outside ``[1, MAX_DICE_COUNT]``.

    """
    if count < 1:
        raise InvalidExpression(f"Invalid count: {count} (must be at least 1)")
    if count > MAX_DICE_COUNT:
        raise InvalidExpression(f"Too many dice: {count} (max {MAX_DICE_COUNT})")
    return [roll_die(sides, rng) for _ in range(count)]


def roll_dice_expression(expression: str, rng: RandomSource | None = None) -> int:
    """
    Rolls a dice expression and returns the total.

    Args:
        expression (str): The dice expression to roll.
        rng (RandomSource | None): Random source, defaults to the module one.

    Returns:
        int: Sum of the independent rolls plus the modifier.

    """
    return roll_and_describe(expression, rng).value


def roll_and_describe(expression: str, rng: RandomSource | None = None) -> RollBreakdown:
    """
    Rolls a dice expression and provides a breakdown for log messages.

    Args:
        expression (str): The dice expression to roll.
        rng (RandomSource | None): Random source, defaults to the module one.

    Returns:
        RollBreakdown: Total value, a description such as ``2d6(3+5)+2`` and
        the individual dice.

    """
    parsed = DiceParser.parse(expression)
    rolls = roll_multiple(parsed.count, parsed.sides, rng)
    total = sum(rolls) + parsed.modifier

    if parsed.count == 1:
        description = f"d{parsed.sides}({rolls[0]})"
    else:
        description = f"{parsed.count}d{parsed.sides}({'+'.join(map(str, rolls))})"
    if parsed.modifier:
        description += f"{parsed.modifier:+d}"

    log_debug(f"Rolled {expression} → {total} ({description})")
    return RollBreakdown(value=total, description=description, rolls=rolls)


def get_min_roll(expression: str) -> int:
    """Returns the minimum possible result of a dice expression."""
    return DiceParser.parse(expression).min_roll


def get_max_roll(expression: str) -> int:
    """Returns the maximum possible result of a dice expression."""
    return DiceParser.parse(expression).max_roll


def roll_with_advantage(sides: int, rng: RandomSource | None = None) -> int:
    """Rolls the die twice and keeps the higher result."""
    return max(roll_die(sides, rng), roll_die(sides, rng))


def roll_with_disadvantage(sides: int, rng: RandomSource | None = None) -> int:
    """Rolls the die twice and keeps the lower result."""
    return min(roll_die(sides, rng), roll_die(sides, rng))
