"""
Status effect ledger for the simulator.

Each combatant keeps a list of timed status effects. This module holds the
status models and the operations that add, query, remove and tick them.
At most one effect of a given type lives on a combatant at any time; the
effect's stack rule decides how a reapplication is merged.
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from jrpg_combat.core.constants import (
    STATUS_DEFAULT_TIMING,
    StackRule,
    StatusType,
    TimingWindow,
)
from jrpg_combat.core.logging import log_debug

if TYPE_CHECKING:
    from jrpg_combat.character.combatant import Combatant


class StatusEffect(BaseModel):
    """
    A timed modifier attached to a combatant.

    The effect ticks once per matching timing window and is removed when its
    duration reaches zero.
    """

    type: StatusType = Field(
        description="The status tag.",
    )
    duration: int = Field(
        description="Remaining ticks before the effect expires.",
    )
    value: int | None = Field(
        default=None,
        description="Magnitude, e.g. damage per tick or attack bonus.",
    )
    stacks: int = Field(
        default=1,
        description="Intensity count for stack-by-intensity effects.",
    )
    timing_window: TimingWindow = Field(
        default=TimingWindow.TURN_END,
        description="Turn phase at which the effect ticks.",
    )
    stack_rule: StackRule = Field(
        default=StackRule.REPLACE,
        description="How a reapplication of the same type is resolved.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.duration < 0:
            raise ValueError("Duration must be a non-negative integer.")
        if self.stacks < 1:
            raise ValueError("Stacks must be at least 1.")

    @property
    def magnitude(self) -> int:
        """The effect value scaled by its stacks."""
        return (self.value or 0) * self.stacks

    def __str__(self) -> str:
        text = f"{self.type.value}({self.duration})"
        if self.stacks > 1:
            text += f"x{self.stacks}"
        return text


class StatusPayload(BaseModel):
    """Status a skill or item applies to its target."""

    type: StatusType = Field(
        description="The status tag to apply.",
    )
    duration: int = Field(
        description="Duration of the applied status.",
    )
    value: int | None = Field(
        default=None,
        description="Optional magnitude of the applied status.",
    )
    timing_window: TimingWindow | None = Field(
        default=None,
        description="Tick phase, None for the per-type default.",
    )
    stack_rule: StackRule | None = Field(
        default=None,
        description="Stack rule, None for replace.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.duration < 1:
            raise ValueError("Duration must be a positive integer.")


class StatusTickResult(BaseModel):
    """Outcome of ticking a single status effect."""

    status: StatusType = Field(description="The status that ticked.")
    damage: int | None = Field(
        default=None, description="Periodic damage dealt, if any."
    )
    healing: int | None = Field(
        default=None, description="Periodic healing applied, if any."
    )
    expired: bool = Field(
        default=False, description="Whether the status was removed."
    )


def add_status(
    holder: "Combatant",
    status_type: StatusType,
    duration: int,
    value: int | None = None,
    *,
    timing_window: TimingWindow | None = None,
    stack_rule: StackRule | None = None,
) -> StatusEffect:
    """
    Adds a status effect to the holder, merging it with any existing effect
    of the same type according to the stack rule.

    Args:
        holder (Combatant):
            The combatant receiving the status.
        status_type (StatusType):
            The status tag.
        duration (int):
            Number of ticks before expiry.
        value (int | None):
            Optional magnitude.
        timing_window (TimingWindow | None):
            Tick phase, defaults to the per-type window.
        stack_rule (StackRule | None):
            Merge policy, defaults to replace.

    Returns:
        StatusEffect:
            The effect now held by the combatant.

    """
    rule = stack_rule or StackRule.REPLACE
    window = timing_window or STATUS_DEFAULT_TIMING.get(
        status_type, TimingWindow.TURN_END
    )
    existing = get_status(holder, status_type)

    if existing is not None and rule == StackRule.STACK_DURATION:
        existing.duration += duration
        log_debug(
            f"{holder.name}: {status_type.value} extended to {existing.duration}",
        )
        return existing

    if existing is not None and rule == StackRule.STACK_INTENSITY:
        existing.stacks += 1
        existing.duration = max(existing.duration, duration)
        if value is not None:
            existing.value = value
        log_debug(
            f"{holder.name}: {status_type.value} intensified to {existing.stacks}",
        )
        return existing

    remove_status(holder, status_type)
    effect = StatusEffect(
        type=status_type,
        duration=duration,
        value=value,
        timing_window=window,
        stack_rule=rule,
    )
    holder.statuses.append(effect)
    return effect


def apply_payload(holder: "Combatant", payload: StatusPayload) -> StatusEffect:
    """Applies a skill or item status payload to the holder."""
    return add_status(
        holder,
        payload.type,
        payload.duration,
        payload.value,
        timing_window=payload.timing_window,
        stack_rule=payload.stack_rule,
    )


def remove_status(holder: "Combatant", status_type: StatusType) -> None:
    holder.statuses[:] = [s for s in holder.statuses if s.type != status_type]


def has_status(holder: "Combatant", status_type: StatusType) -> bool:
    return any(s.type == status_type for s in holder.statuses)


def get_status(holder: "Combatant", status_type: StatusType) -> StatusEffect | None:
    return next((s for s in holder.statuses if s.type == status_type), None)


def clear_statuses(holder: "Combatant") -> None:
    holder.statuses.clear()


def tick_statuses_by_phase(
    holder: "Combatant",
    phase: TimingWindow,
) -> list[StatusTickResult]:
    """
    Ticks every status of the holder whose timing window matches ``phase``.

    Each matching effect loses one duration point. Periodic damage effects
    deal their magnitude to the holder's HP (clamped at zero) and periodic
    healing effects restore it (clamped at max HP). Effects reaching zero
    duration are removed. Must be called exactly once per combatant per
    phase per turn.

    Args:
        holder (Combatant):
            The combatant whose statuses tick.
        phase (TimingWindow):
            The turn phase being processed.

    Returns:
        list[StatusTickResult]:
            One result per ticked effect, in ledger order.

    """
    results: list[StatusTickResult] = []
    remaining: list[StatusEffect] = []

    for status in holder.statuses:
        if status.timing_window != phase:
            remaining.append(status)
            continue

        status.duration = max(0, status.duration - 1)
        result = StatusTickResult(status=status.type)

        if status.type.is_periodic_damage() and status.value:
            damage = status.magnitude
            holder.hp = max(0, holder.hp - damage)
            result.damage = damage
        elif status.type.is_periodic_healing() and status.value:
            before = holder.hp
            holder.hp = min(holder.max_hp, holder.hp + status.magnitude)
            result.healing = holder.hp - before

        if status.duration == 0:
            result.expired = True
        else:
            remaining.append(status)
        results.append(result)

    holder.statuses[:] = remaining
    return results


def attack_modifier(holder: "Combatant") -> int:
    """
    Returns the net attack bonus granted by buffs and weakening statuses.

    Args:
        holder (Combatant):
            The combatant whose statuses are inspected.

    Returns:
        int:
            ``buffed`` magnitude minus ``weakened`` magnitude.

    """
    bonus = 0
    buff = get_status(holder, StatusType.BUFFED)
    if buff is not None:
        bonus += buff.magnitude
    debuff = get_status(holder, StatusType.WEAKENED)
    if debuff is not None:
        bonus -= debuff.magnitude
    return bonus
