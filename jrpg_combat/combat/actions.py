"""
Combat action module for the simulator.

A ``CombatAction`` is the immutable instruction submitted to the combat
engine, either by the player interface (party) or by the enemy AI.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from jrpg_combat.core.constants import ActionType


class CombatAction(BaseModel):
    """An instruction consumed exactly once by the combat engine."""

    model_config = ConfigDict(frozen=True)

    type: ActionType = Field(description="The kind of action.")
    actor_id: str = Field(description="Id of the acting combatant.")
    target_id: str | None = Field(default=None, description="Id of the target.")
    skill_id: str | None = Field(default=None, description="Skill used.")
    item_id: str | None = Field(default=None, description="Item used.")
    bonus_dice_count: int = Field(
        default=0,
        description="Dice requested from the party's bonus pool.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.bonus_dice_count < 0:
            raise ValueError("bonus_dice_count must be non-negative")

    @classmethod
    def attack(
        cls, actor_id: str, target_id: str | None, bonus_dice_count: int = 0
    ) -> "CombatAction":
        return cls(
            type=ActionType.ATTACK,
            actor_id=actor_id,
            target_id=target_id,
            bonus_dice_count=bonus_dice_count,
        )

    @classmethod
    def guard(cls, actor_id: str) -> "CombatAction":
        return cls(type=ActionType.GUARD, actor_id=actor_id)

    @classmethod
    def skill(
        cls,
        actor_id: str,
        skill_id: str,
        target_id: str | None = None,
        bonus_dice_count: int = 0,
    ) -> "CombatAction":
        return cls(
            type=ActionType.SKILL,
            actor_id=actor_id,
            skill_id=skill_id,
            target_id=target_id,
            bonus_dice_count=bonus_dice_count,
        )

    @classmethod
    def item(
        cls, actor_id: str, item_id: str, target_id: str | None = None
    ) -> "CombatAction":
        return cls(
            type=ActionType.ITEM,
            actor_id=actor_id,
            item_id=item_id,
            target_id=target_id,
        )

    @classmethod
    def wait(cls, actor_id: str) -> "CombatAction":
        return cls(type=ActionType.WAIT, actor_id=actor_id)

    def __str__(self) -> str:
        parts = [self.type.value, self.actor_id]
        if self.skill_id:
            parts.append(f"skill={self.skill_id}")
        if self.item_id:
            parts.append(f"item={self.item_id}")
        if self.bonus_dice_count:
            parts.append(f"bonus={self.bonus_dice_count}")
        if self.target_id:
            parts.append(f"-> {self.target_id}")
        return " ".join(parts)
