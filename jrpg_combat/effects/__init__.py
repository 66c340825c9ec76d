"""
Effects system module for the JRPG combat simulator.

This module contains the status effect ledger: application under the
replace and stacking rules, queries, and the per-phase ticking of timed
effects such as poison, burning and regeneration.
"""

from .status import (
    StatusEffect,
    StatusPayload,
    StatusTickResult,
    add_status,
    apply_payload,
    attack_modifier,
    clear_statuses,
    get_status,
    has_status,
    remove_status,
    tick_statuses_by_phase,
)

__all__ = [
    "StatusEffect",
    "StatusPayload",
    "StatusTickResult",
    "add_status",
    "apply_payload",
    "attack_modifier",
    "clear_statuses",
    "get_status",
    "has_status",
    "remove_status",
    "tick_statuses_by_phase",
]
