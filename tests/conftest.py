"""
Shared fixtures for the combat simulator tests.
"""

import random
from collections.abc import Iterable

import pytest

from jrpg_combat.character.combatant import Character, Enemy, TurnResources


class FixedRandom(random.Random):
    """
    Random source replaying scripted values.

    ``randint`` returns the scripted rolls in order, then the lower bound.
    ``random`` returns the scripted floats in order, then 0.99 so that no
    optional branch of a weighted choice is taken.
    """

    def __init__(self, rolls: Iterable[int] = (), floats: Iterable[float] = ()):
        super().__init__(0)
        self.rolls = list(rolls)
        self.floats = list(floats)

    def randint(self, a: int, b: int) -> int:
        if self.rolls:
            return self.rolls.pop(0)
        return a

    def random(self) -> float:
        if self.floats:
            return self.floats.pop(0)
        return 0.99


@pytest.fixture
def fixed_rng():
    """Factory building a ``FixedRandom`` from scripted values."""

    def _make(rolls: Iterable[int] = (), floats: Iterable[float] = ()) -> FixedRandom:
        return FixedRandom(rolls, floats)

    return _make


@pytest.fixture
def make_character():
    """Factory building a party member with sensible defaults."""

    def _make(char_id: str = "hero", **overrides) -> Character:
        ap = overrides.pop("ap", 1)
        data = {
            "id": char_id,
            "name": char_id.capitalize(),
            "hp": 20,
            "max_hp": 20,
            "attack": 5,
            "armor": 1,
            "resources": TurnResources(action_points=ap, max_action_points=ap),
        }
        data.update(overrides)
        return Character(**data)

    return _make


@pytest.fixture
def make_enemy():
    """Factory building an enemy with sensible defaults."""

    def _make(enemy_id: str = "goblin", **overrides) -> Enemy:
        ap = overrides.pop("ap", 1)
        data = {
            "id": enemy_id,
            "name": enemy_id.capitalize(),
            "hp": 20,
            "max_hp": 20,
            "attack": 3,
            "armor": 2,
            "resources": TurnResources(action_points=ap, max_action_points=ap),
        }
        data.update(overrides)
        return Enemy(**data)

    return _make
