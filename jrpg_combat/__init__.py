"""
JRPG combat simulator package.

This package contains the turn-based combat core: dice, status effects,
damage resolution, the combat engine, the enemy AI and character leveling.
"""
