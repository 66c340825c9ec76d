"""
Snapshot module for the simulator.

Serializes a ``CombatState`` to plain data and back. Restored data is
trusted only when its version tag matches; anything else is discarded.
"""

from typing import Any

from catchery import log_warning

from .combat_engine import CombatState

SNAPSHOT_VERSION = 1


def take_snapshot(state: CombatState) -> dict[str, Any]:
    """
    Serializes the state of an encounter.

    Args:
        state (CombatState): The state to serialize.

    Returns:
        dict[str, Any]: JSON-compatible data tagged with ``version``.

    """
    return {"version": SNAPSHOT_VERSION, "state": state.model_dump(mode="json")}


def restore_snapshot(data: Any) -> CombatState | None:
    """
    Rebuilds an encounter state from a snapshot.

    Args:
        data (Any): Data previously produced by ``take_snapshot``.

    Returns:
        CombatState | None: The restored state, or None if the data has an
        unknown version or does not describe a valid state.

    """
    if not isinstance(data, dict):
        log_warning(
            "Discarding snapshot: expected a mapping.",
            {"type": type(data).__name__},
        )
        return None
    version = data.get("version")
    if version != SNAPSHOT_VERSION:
        log_warning(
            f"Discarding snapshot with unsupported version '{version}'.",
            {"expected": SNAPSHOT_VERSION, "found": version},
        )
        return None
    try:
        return CombatState.model_validate(data.get("state"))
    except ValueError as e:
        log_warning(
            "Discarding malformed snapshot.",
            {"error": str(e)},
        )
        return None
