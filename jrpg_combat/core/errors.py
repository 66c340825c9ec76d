"""
Exception hierarchy for the combat simulator.

Only programmer errors are raised: malformed dice input and broken content
files. Invalid runtime actions are recovered inside the combat engine and
never surface as exceptions.
"""


class CombatSimulatorError(Exception):
    """Base class for every error raised by the simulator."""


class DiceError(CombatSimulatorError, ValueError):
    """Raised when dice input cannot be rolled."""


class InvalidDie(DiceError):
    """Raised when a die has fewer than one side."""


class InvalidExpression(DiceError):
    """Raised when a dice expression is malformed or out of range."""


class ContentError(CombatSimulatorError):
    """Raised when a content file is missing or cannot be parsed."""
