"""
Leveling module for the simulator.

Distributes experience among the surviving party members and applies the
class growth of every level gained.
"""

import math
from collections.abc import Callable, Mapping

from pydantic import BaseModel, Field

from jrpg_combat.core.constants import XP_CURVE_BASE, XP_CURVE_GROWTH
from jrpg_combat.core.logging import log_debug, log_warning

from .combatant import Character
from .templates import ClassTemplate, SkillTemplate


class LevelUpResult(BaseModel):
    """Report of a single level gained by a character, for UI display."""

    character_id: str = Field(description="Id of the character.")
    old_level: int = Field(description="Level before the gain.")
    new_level: int = Field(description="Level after the gain.")
    hp_gain: int = 0
    mp_gain: int = 0
    attack_gain: int = 0
    armor_gain: int = 0
    speed_gain: int = 0
    new_skills: list[str] = Field(default_factory=list)


def calculate_xp_to_next(level: int) -> int:
    """
    Returns the experience required to advance past ``level``.

    Args:
        level (int): The current level (1-based).

    Returns:
        int: ``floor(50 * 1.5 ** (level - 1))``.

    """
    return math.floor(XP_CURVE_BASE * XP_CURVE_GROWTH ** (level - 1))


def award_xp(
    party: list[Character],
    total_xp: int,
    classes: Mapping[str, ClassTemplate],
    *,
    skills: Mapping[str, SkillTemplate] | None = None,
    xp_curve: Callable[[int], int] = calculate_xp_to_next,
) -> list[LevelUpResult]:
    """
    Splits ``total_xp`` evenly among the living party members and levels
    them up as many times as their experience allows.

    Args:
        party (list[Character]):
            The party; defeated members receive nothing.
        total_xp (int):
            Experience to share (floor division per member).
        classes (Mapping[str, ClassTemplate]):
            Class templates by id, providing the growth per level.
        skills (Mapping[str, SkillTemplate] | None):
            Skill templates; when given, learned skills are also added to
            the character's usable skill definitions.
        xp_curve (Callable[[int], int]):
            Maps a level to the experience needed for the next one.

    Returns:
        list[LevelUpResult]:
            One result per level gained, in party order.

    """
    living = [c for c in party if c.is_alive()]
    if not living or total_xp <= 0:
        return []

    share = total_xp // len(living)
    results: list[LevelUpResult] = []

    for character in living:
        class_template = classes.get(character.character_class)
        if class_template is None:
            log_warning(
                "Missing class template, skipping experience award",
                {"character": character.id, "class": character.character_class},
            )
            continue

        character.xp += share
        while character.xp_to_next > 0 and character.xp >= character.xp_to_next:
            character.xp -= character.xp_to_next
            results.append(_level_up(character, class_template, skills, xp_curve))

    return results


def _level_up(
    character: Character,
    class_template: ClassTemplate,
    skills: Mapping[str, SkillTemplate] | None,
    xp_curve: Callable[[int], int],
) -> LevelUpResult:
    old_level = character.level
    character.level += 1

    # Growth raises current and max values alike.
    character.max_hp += class_template.hp_growth
    character.hp += class_template.hp_growth
    character.max_mp += class_template.mp_growth
    character.mp += class_template.mp_growth
    character.attack += class_template.attack_growth
    character.armor += class_template.armor_growth
    character.speed += class_template.speed_growth
    character.xp_to_next = xp_curve(character.level)

    new_skills: list[str] = []
    for learnable in class_template.learnable_skills:
        if learnable.level != character.level:
            continue
        if learnable.skill_id in character.skill_ids:
            continue
        character.skill_ids.append(learnable.skill_id)
        new_skills.append(learnable.skill_id)
        template = skills.get(learnable.skill_id) if skills else None
        if template is not None and character.find_skill(template.id) is None:
            character.skills.append(template.to_definition())

    log_debug(
        f"{character.name} reached level {character.level}",
        {"new_skills": new_skills},
    )
    return LevelUpResult(
        character_id=character.id,
        old_level=old_level,
        new_level=character.level,
        hp_gain=class_template.hp_growth,
        mp_gain=class_template.mp_growth,
        attack_gain=class_template.attack_growth,
        armor_gain=class_template.armor_growth,
        speed_gain=class_template.speed_growth,
        new_skills=new_skills,
    )
