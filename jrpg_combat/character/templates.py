"""
Content templates for the simulator.

Templates are the validated, static records of the content layer (classes,
skills, items, enemies). The combat core never mutates them; combatants and
their skill and item definitions are built from them once per encounter.
"""

from typing import Any

from pydantic import BaseModel, Field

from jrpg_combat.core.constants import (
    DEFAULT_MAX_ACTION_POINTS,
    AIRole,
    DamageType,
    EffectType,
    SkillTargeting,
    StatusType,
    TargetType,
)
from jrpg_combat.effects.status import StatusPayload

from .combatant import ItemDefinition, SkillDefinition


class SkillEffect(BaseModel):
    """Effect block of a skill template, the AI decision surface."""

    damage_type: DamageType = Field(
        default=DamageType.NONE,
        description="Damage category (physical, magical, heal, none).",
    )
    dice_expression: str | None = Field(
        default=None,
        description="Damage dice.",
    )
    heal_dice: str | None = Field(
        default=None,
        description="Healing dice for heal skills.",
    )
    stat_scaling: str | None = Field(
        default=None,
        description="Stat the skill scales from ('attack').",
    )
    scaling_factor: float | None = Field(
        default=None,
        description="Multiplier applied to the scaling stat.",
    )
    status_applied: StatusType | None = Field(
        default=None,
        description="Status applied to the target.",
    )
    status_duration: int | None = Field(
        default=None,
        description="Duration of the applied status.",
    )
    status_value: int | None = Field(
        default=None,
        description="Magnitude of the applied status.",
    )


class SkillTemplate(BaseModel):
    """A skill as declared by the content files."""

    id: str
    name: str
    description: str = ""
    mp_cost: int = 0
    ap_cost: int = 1
    targeting: SkillTargeting = SkillTargeting.SINGLE_ENEMY
    effect: SkillEffect = Field(default_factory=SkillEffect)

    def status_payload(self) -> StatusPayload | None:
        if self.effect.status_applied is None or not self.effect.status_duration:
            return None
        return StatusPayload(
            type=self.effect.status_applied,
            duration=self.effect.status_duration,
            value=self.effect.status_value,
        )

    def to_definition(self) -> SkillDefinition:
        """
        Builds the engine-level definition of this skill.

        Returns:
            SkillDefinition:
                The definition carried by combatants knowing this skill.

        """
        effect = self.effect
        payload = self.status_payload()

        if effect.damage_type.is_damaging():
            effect_type = EffectType.DAMAGE
        elif effect.damage_type == DamageType.HEAL:
            effect_type = EffectType.HEAL
        elif payload is not None:
            effect_type = EffectType.STATUS
        else:
            effect_type = EffectType.UTILITY

        scale: float | None = None
        if effect_type == EffectType.DAMAGE:
            # Skills without attack scaling deal their dice only.
            if effect.stat_scaling == "attack":
                scale = effect.scaling_factor if effect.scaling_factor is not None else 1.0
            else:
                scale = 0.0

        return SkillDefinition(
            id=self.id,
            name=self.name,
            ap_cost=self.ap_cost,
            mp_cost=self.mp_cost,
            effect_type=effect_type,
            target=self.targeting.to_target_type(),
            dice_expression=(
                effect.heal_dice if effect_type == EffectType.HEAL else effect.dice_expression
            ),
            attacker_stat_scale=scale,
            status_payload=payload,
        )


class ItemEffect(BaseModel):
    """Effect block of an item template."""

    type: str = Field(description="One of 'heal', 'damage', 'buff'.")
    value: int = Field(default=0, description="Amount healed or dealt.")
    dice_expression: str | None = None
    status_applied: StatusType | None = None
    status_duration: int | None = None


class ItemTemplate(BaseModel):
    """A consumable as declared by the content files."""

    id: str
    name: str
    description: str = ""
    ap_cost: int = 1
    effect: ItemEffect

    def model_post_init(self, _: Any) -> None:
        if self.effect.type not in ("heal", "damage", "buff"):
            raise ValueError(f"Unknown item effect type: {self.effect.type}")

    def to_definition(self, quantity: int) -> ItemDefinition:
        """Builds an inventory entry holding ``quantity`` uses of this item."""
        payload = None
        if self.effect.status_applied is not None and self.effect.status_duration:
            payload = StatusPayload(
                type=self.effect.status_applied,
                duration=self.effect.status_duration,
                value=self.effect.value or None,
            )
        is_damage = self.effect.type == "damage"
        return ItemDefinition(
            id=self.id,
            name=self.name,
            ap_cost=self.ap_cost,
            quantity=quantity,
            target=TargetType.ENEMY if is_damage else TargetType.ALLY,
            dice_expression=self.effect.dice_expression,
            flat_power=self.effect.value if self.effect.type != "buff" else None,
            status_payload=payload,
        )


class EnemyTemplate(BaseModel):
    """An enemy as declared by the content files."""

    id: str
    name: str
    hp: int
    mp: int = 0
    attack: int
    armor: int
    speed: int = 0
    ai_role: AIRole = AIRole.BASIC
    skill_ids: list[str] = Field(default_factory=list)
    action_points: int = DEFAULT_MAX_ACTION_POINTS
    xp_reward: int = 0
    gold_reward: int = 0


class LearnableSkill(BaseModel):
    """A skill a class learns on reaching ``level``."""

    level: int
    skill_id: str


class ClassTemplate(BaseModel):
    """A party class with base stats and flat per-level growth."""

    id: str
    name: str
    base_hp: int
    base_mp: int = 0
    base_attack: int
    base_armor: int
    base_speed: int = 0
    hp_growth: int = 0
    mp_growth: int = 0
    attack_growth: int = 0
    armor_growth: int = 0
    speed_growth: int = 0
    action_points: int = DEFAULT_MAX_ACTION_POINTS
    starting_skills: list[str] = Field(default_factory=list)
    learnable_skills: list[LearnableSkill] = Field(default_factory=list)
