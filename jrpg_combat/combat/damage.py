"""
Damage module for the simulator.

Pure damage resolution: combines a dice roll, flat power and the attacker's
scaled attack stat, then mitigates the result with the target's armor and
shield. Nothing here mutates a combatant; applying the result is the
combat engine's job.
"""

import math
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from jrpg_combat.core.constants import GUARD_ARMOR_MULTIPLIER, StatusType
from jrpg_combat.core.dice_parser import RandomSource, roll_dice_expression
from jrpg_combat.effects.status import get_status

if TYPE_CHECKING:
    from jrpg_combat.character.combatant import Combatant


class DamageFormula(BaseModel):
    """Inputs of a damage resolution, apart from the two combatants."""

    dice_expression: str | None = Field(
        default=None,
        description="Dice rolled for the base damage (e.g. '1d6').",
    )
    flat_power: int | None = Field(
        default=None,
        description="Flat amount added to the roll.",
    )
    attacker_stat_scale: float | None = Field(
        default=None,
        description="Multiplier of the attacker's attack stat, 1 when omitted.",
    )
    ignore_armor: bool = Field(
        default=False,
        description="Skip armor mitigation entirely.",
    )
    minimum_damage: int | None = Field(
        default=None,
        description="Lower bound of the final damage.",
    )


class ResolvedDamage(BaseModel):
    """Outcome of a damage resolution."""

    roll_total: int = Field(description="Result of the dice roll, 0 if none.")
    raw_damage: int = Field(description="Damage before armor.")
    final_damage: int = Field(description="Damage after armor and minimum.")
    blocked: int = Field(description="Damage absorbed by armor.")


def effective_armor(target: "Combatant") -> int:
    """
    Returns the armor used against an incoming hit.

    Args:
        target (Combatant): The combatant being hit.

    Returns:
        int: The target's armor, doubled while guarding, plus the value of
        its shield status.

    """
    armor = target.armor
    if target.is_guarding:
        armor *= GUARD_ARMOR_MULTIPLIER
    shield = get_status(target, StatusType.SHIELDED)
    if shield is not None:
        armor += shield.magnitude
    return armor


def resolve_damage(
    attacker: "Combatant",
    target: "Combatant",
    formula: DamageFormula,
    rng: RandomSource | None = None,
) -> ResolvedDamage:
    """
    Resolves the damage a single hit would deal.

    Args:
        attacker (Combatant):
            The combatant dealing the damage.
        target (Combatant):
            The combatant receiving the damage.
        formula (DamageFormula):
            Dice, flat power, scaling and armor handling of the hit.
        rng (RandomSource | None):
            Random source for the dice roll.

    Returns:
        ResolvedDamage:
            The roll, raw damage, final damage and blocked amount.

    """
    roll_total = (
        roll_dice_expression(formula.dice_expression, rng)
        if formula.dice_expression
        else 0
    )
    scale = formula.attacker_stat_scale if formula.attacker_stat_scale is not None else 1
    scaled_attack = math.floor(attacker.attack * scale)
    raw_damage = max(0, roll_total + (formula.flat_power or 0) + scaled_attack)
    minimum = formula.minimum_damage or 0

    if formula.ignore_armor:
        return ResolvedDamage(
            roll_total=roll_total,
            raw_damage=raw_damage,
            final_damage=max(minimum, raw_damage),
            blocked=0,
        )

    blocked = min(raw_damage, effective_armor(target))
    return ResolvedDamage(
        roll_total=roll_total,
        raw_damage=raw_damage,
        final_damage=max(minimum, raw_damage - blocked),
        blocked=blocked,
    )
