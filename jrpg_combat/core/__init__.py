"""
Core system module for the JRPG combat simulator.

This module contains the fundamental components shared by every other
subsystem: game constants, errors, dice rolling, the combat log and display
utilities. Content loading lives in ``core.content``.
"""

from .combat_log import CombatLog, LogEntry, LogSink
from .constants import (
    ActionType,
    AIRole,
    DamageType,
    DiceType,
    EffectType,
    Side,
    SkillTargeting,
    StackRule,
    StatusType,
    TargetType,
    TimingWindow,
)
from .dice_parser import (
    DiceExpression,
    DiceParser,
    RandomSource,
    RollBreakdown,
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
from .errors import (
    CombatSimulatorError,
    ContentError,
    DiceError,
    InvalidDie,
    InvalidExpression,
)

__all__ = [
    # Import from combat_log.py
    "CombatLog",
    "LogEntry",
    "LogSink",
    # Import from constants.py
    "ActionType",
    "AIRole",
    "DamageType",
    "DiceType",
    "EffectType",
    "Side",
    "SkillTargeting",
    "StackRule",
    "StatusType",
    "TargetType",
    "TimingWindow",
    # Import from dice_parser.py
    "DiceExpression",
    "DiceParser",
    "RandomSource",
    "RollBreakdown",
    "get_max_roll",
    "get_min_roll",
    "parse_dice_expression",
    "roll_and_describe",
    "roll_dice_expression",
    "roll_dice_type",
    "roll_die",
    "roll_multiple",
    "roll_with_advantage",
    "roll_with_disadvantage",
    # Import from errors.py
    "CombatSimulatorError",
    "ContentError",
    "DiceError",
    "InvalidDie",
    "InvalidExpression",
]
