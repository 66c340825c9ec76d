"""
Tests for experience distribution and level-ups.
"""

import pytest

from jrpg_combat.character.leveling import award_xp, calculate_xp_to_next
from jrpg_combat.character.templates import (
    ClassTemplate,
    LearnableSkill,
    SkillEffect,
    SkillTemplate,
)
from jrpg_combat.core.constants import DamageType


@pytest.fixture
def warrior_class():
    return ClassTemplate(
        id="warrior",
        name="Warrior",
        base_hp=20,
        base_attack=5,
        base_armor=2,
        hp_growth=5,
        mp_growth=1,
        attack_growth=2,
        armor_growth=1,
        learnable_skills=[LearnableSkill(level=2, skill_id="cleave")],
    )


@pytest.fixture
def classes(warrior_class):
    return {"warrior": warrior_class}


@pytest.fixture
def skills():
    return {
        "cleave": SkillTemplate(
            id="cleave",
            name="Cleave",
            targeting="all_enemies",
            effect=SkillEffect(damage_type=DamageType.PHYSICAL, dice_expression="1d6"),
        )
    }


@pytest.fixture
def party(make_character):
    return [
        make_character("a", character_class="warrior", xp_to_next=50),
        make_character("b", character_class="warrior", xp_to_next=50),
    ]


def test_xp_curve():
    """
    Test the experience curve.
    """
    assert calculate_xp_to_next(1) == 50
    assert calculate_xp_to_next(2) == 75
    assert calculate_xp_to_next(3) == 112


def test_split_between_living_members(party, classes):
    """
    Test that experience is split evenly with floor division.
    """
    results = award_xp(party, 41, classes)
    assert results == []
    assert [c.xp for c in party] == [20, 20]


def test_defeated_members_get_nothing(party, classes):
    """
    Test that only living members share the experience.
    """
    party[1].hp = 0
    award_xp(party, 30, classes)
    assert party[0].xp == 30
    assert party[1].xp == 0


def test_no_living_members_is_noop(party, classes):
    """
    Test that awarding to a defeated party changes nothing.
    """
    for member in party:
        member.hp = 0
    assert award_xp(party, 100, classes) == []
    assert all(c.xp == 0 for c in party)


def test_single_level_up_applies_growth(party, classes):
    """
    Test that a level-up raises current and max values.
    """
    hero = party[0]
    hero.hp = 10
    results = award_xp([hero], 55, classes)

    assert len(results) == 1
    assert results[0].old_level == 1
    assert results[0].new_level == 2
    assert results[0].hp_gain == 5
    assert hero.level == 2
    assert hero.max_hp == 25
    assert hero.hp == 15
    assert hero.attack == 7
    assert hero.armor == 2
    assert hero.xp == 5
    assert hero.xp_to_next == 75


def test_multiple_level_ups_in_one_award(party, classes):
    """
    Test that a large award produces one result per level gained.
    """
    hero = party[0]
    results = award_xp([hero], 50 + 75 + 112, classes)

    assert [r.new_level for r in results] == [2, 3, 4]
    assert hero.level == 4
    assert hero.max_hp == 20 + 5 * 3
    assert hero.xp == 0


def test_learns_skill_at_level(party, classes, skills):
    """
    Test that reaching a level grants its learnable skill once.
    """
    hero = party[0]
    results = award_xp([hero], 50, classes, skills=skills)

    assert results[0].new_skills == ["cleave"]
    assert "cleave" in hero.skill_ids
    assert hero.find_skill("cleave") is not None


def test_missing_class_skips_member(make_character, classes, mocker):
    """
    Test that a member with an unknown class is skipped with a warning.
    """
    mock_warning = mocker.patch("jrpg_combat.character.leveling.log_warning")
    stray = make_character("stray", character_class="bard")
    assert award_xp([stray], 100, classes) == []
    assert stray.xp == 0
    mock_warning.assert_called_once()


def test_custom_curve(party, classes):
    """
    Test that the experience curve can be replaced.
    """
    hero = party[0]
    award_xp([hero], 50, classes, xp_curve=lambda level: 10)
    assert hero.xp_to_next == 10
