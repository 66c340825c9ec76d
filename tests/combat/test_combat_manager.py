"""
Tests for the encounter orchestration.
"""

import random

import pytest

from jrpg_combat.character.combatant import Character
from jrpg_combat.combat.actions import CombatAction
from jrpg_combat.combat.combat_engine import CombatEngine, CombatState
from jrpg_combat.combat.combat_manager import CombatManager, attack_enemy_controller
from jrpg_combat.core.combat_log import CombatLog
from jrpg_combat.core.constants import Side, StatusType
from jrpg_combat.core.content import ContentRepository
from jrpg_combat.effects.status import add_status


@pytest.fixture(scope="module")
def content():
    return ContentRepository.from_directory()


@pytest.fixture
def party(content):
    return [
        content.create_character("warrior", "hero1", "Knight"),
        content.create_character("mage", "hero2", "Mage"),
        content.create_character("ranger", "hero3", "Ranger"),
    ]


def test_party_defeats_goblin(content, party):
    """
    Test a full encounter won by the party, with rewards.
    """
    engine = CombatEngine(party, content.create_enemy("goblin"), rng=random.Random(5))
    result = CombatManager(engine, content).run()

    assert result.victor == Side.PARTY
    assert result.turns >= 1
    assert result.xp_awarded == 20
    assert result.gold_awarded == 5
    assert result.level_ups == []
    assert all(c.xp == 6 for c in engine.party)


def test_victory_levels_up_party(content, make_enemy, fixed_rng):
    """
    Test that a rich reward levels up the survivors.
    """
    knight = content.create_character("warrior", "hero1", "Knight")
    slime = make_enemy("slime", hp=1, armor=0, xp_reward=300)
    log = CombatLog()
    engine = CombatEngine([knight], slime, log=log, rng=fixed_rng())

    result = CombatManager(engine, content).run()

    assert result.victor == Side.PARTY
    assert [r.new_level for r in result.level_ups] == [2, 3, 4]
    assert engine.party[0].level == 4
    assert any("reached level 4" in m for m in log.get_messages())


def test_enemy_victory(content, make_character, make_enemy, fixed_rng):
    """
    Test that a defeated party earns nothing.
    """
    hero = make_character("hero", hp=1, attack=0)
    brute = make_enemy("brute", attack=50)
    brute.resources.initiative = 5
    engine = CombatEngine([hero], brute, rng=fixed_rng())

    result = CombatManager(engine, content).run()

    assert result.victor == Side.ENEMY
    assert result.turns == 1
    assert result.xp_awarded == 0
    assert result.level_ups == []


def test_turn_limit(content, make_character, make_enemy, fixed_rng):
    """
    Test that a stalemate stops at the turn limit without a victor.
    """
    hero = make_character("hero", attack=0, armor=100)
    wall = make_enemy("wall", attack=0, armor=100)
    engine = CombatEngine([hero], wall, rng=fixed_rng())

    result = CombatManager(engine, content, max_turns=3).run()

    assert result.victor is None
    assert result.turns == 3
    assert engine.find_combatant("hero").hp == 20


def test_controller_receives_state(content, make_character, make_enemy, mocker):
    """
    Test that party actions come from the controller.
    """
    controller = mocker.Mock(side_effect=lambda c, state: CombatAction.guard(c.id))
    engine = CombatEngine([make_character("hero")], make_enemy("goblin", attack=0))
    manager = CombatManager(engine, content, party_controller=controller)

    assert manager.run_turn()

    controller.assert_called_once()
    character, state = controller.call_args.args
    assert isinstance(character, Character)
    assert isinstance(state, CombatState)


def test_wait_ends_the_members_turn(content, make_character, make_enemy, mocker):
    """
    Test that waiting hands the turn over even with AP left.
    """
    controller = mocker.Mock(side_effect=lambda c, state: CombatAction.wait(c.id))
    engine = CombatEngine([make_character("hero", ap=3)], make_enemy("goblin", attack=0))

    CombatManager(engine, content, party_controller=controller).run_turn()

    assert controller.call_count == 1
    assert engine.find_combatant("hero").resources.action_points == 3


def test_stunned_member_loses_turn(content, make_character, make_enemy, mocker):
    """
    Test that a stunned member submits once and does not loop.
    """
    controller = mocker.Mock(side_effect=attack_enemy_controller)
    engine = CombatEngine(
        [make_character("hero", ap=2)], make_enemy("goblin", attack=0, armor=0)
    )
    add_status(engine.find_combatant("hero"), StatusType.STUNNED, 3)

    CombatManager(engine, content, party_controller=controller).run_turn()

    assert controller.call_count == 1
    assert engine.find_combatant("goblin").hp == 20


def test_default_controller_attacks_enemy(make_character, make_enemy):
    """
    Test the default party behavior.
    """
    hero = make_character("hero")
    state = CombatState(party=[hero], enemy=make_enemy("goblin"))
    action = attack_enemy_controller(hero, state)
    assert action == CombatAction.attack("hero", "goblin")

    state.enemy.hp = 0
    assert attack_enemy_controller(hero, state) == CombatAction.wait("hero")
