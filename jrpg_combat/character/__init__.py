"""
Character system module for the JRPG combat simulator.

This module handles the combatant models (party characters and enemies),
the content templates they are built from, and experience and leveling.
"""

from .combatant import (
    AnyCombatant,
    Character,
    Combatant,
    Enemy,
    ItemDefinition,
    SkillDefinition,
    TurnResources,
)
from .leveling import LevelUpResult, award_xp, calculate_xp_to_next
from .templates import (
    ClassTemplate,
    EnemyTemplate,
    ItemEffect,
    ItemTemplate,
    LearnableSkill,
    SkillEffect,
    SkillTemplate,
)

__all__ = [
    # Import from combatant.py
    "AnyCombatant",
    "Character",
    "Combatant",
    "Enemy",
    "ItemDefinition",
    "SkillDefinition",
    "TurnResources",
    # Import from leveling.py
    "LevelUpResult",
    "award_xp",
    "calculate_xp_to_next",
    # Import from templates.py
    "ClassTemplate",
    "EnemyTemplate",
    "ItemEffect",
    "ItemTemplate",
    "LearnableSkill",
    "SkillEffect",
    "SkillTemplate",
]
