"""
Combat log module for the simulator.

The combat log is the ordered, human-readable message stream produced by the
combat engine for one encounter. It is passed to the engine explicitly and
is never shared between encounters.
"""

import time
from typing import Protocol

from pydantic import BaseModel, Field

from .logging import log_debug
from .utils import cprint


class LogSink(Protocol):
    """Anything able to receive combat messages."""

    def add(self, message: str) -> None: ...


class LogEntry(BaseModel):
    """A single combat log message."""

    message: str = Field(description="Human-readable message")
    timestamp: float = Field(
        default_factory=time.time,
        description="Wall-clock time the message was recorded",
    )
    turn_number: int = Field(0, description="Turn during which it was recorded")


class CombatLog:
    """Per-encounter combat log tagging each message with the current turn."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._current_turn: int = 0

    def set_turn(self, turn: int) -> None:
        self._current_turn = turn

    def add(self, message: str) -> None:
        """
        Appends a message to the log.

        Args:
            message (str): The message to record.

        """
        self._entries.append(LogEntry(message=message, turn_number=self._current_turn))
        log_debug(message, {"turn": self._current_turn})

    def add_turn_start(self, turn: int) -> None:
        """Records the turn banner and makes ``turn`` the current turn."""
        self._current_turn = turn
        self.add(f"--- Turn {turn} ---")

    def get_all(self) -> list[LogEntry]:
        return list(self._entries)

    def get_messages(self) -> list[str]:
        return [entry.message for entry in self._entries]

    def get_last(self, count: int) -> list[LogEntry]:
        if count <= 0:
            return []
        return self._entries[-count:]

    def clear(self) -> None:
        self._entries = []
        self._current_turn = 0

    def print(self) -> None:
        """Prints every message to the console."""
        for entry in self._entries:
            cprint(entry.message, markup=False)

    def __len__(self) -> int:
        return len(self._entries)
