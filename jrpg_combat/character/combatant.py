"""
Combatant models for the simulator.

Defines the tagged combatant variants (party ``Character`` and ``Enemy``),
their per-turn resources and the skill and item definitions they carry
into an encounter.
"""

from abc import abstractmethod
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from jrpg_combat.core.constants import (
    DEFAULT_MAX_ACTION_POINTS,
    AIRole,
    EffectType,
    Side,
    TargetType,
)
from jrpg_combat.core.utils import make_bar
from jrpg_combat.effects.status import StatusEffect, StatusPayload


class TurnResources(BaseModel):
    """Per-turn resources of a combatant."""

    action_points: int = Field(
        default=DEFAULT_MAX_ACTION_POINTS,
        description="Action points left this turn.",
    )
    max_action_points: int = Field(
        default=DEFAULT_MAX_ACTION_POINTS,
        description="Action points restored at the start of every turn.",
    )
    initiative: int = Field(
        default=0,
        description="Turn order priority, higher acts first.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.max_action_points < 0:
            raise ValueError("max_action_points must be non-negative")
        if not 0 <= self.action_points <= self.max_action_points:
            raise ValueError("action_points must be within [0, max_action_points]")

    def can_spend(self, cost: int) -> bool:
        return self.action_points >= cost

    def spend(self, cost: int) -> bool:
        """Spends ``cost`` action points, returning False if not affordable."""
        if not self.can_spend(cost):
            return False
        self.action_points -= cost
        return True

    def refund(self, cost: int) -> None:
        self.action_points = min(self.max_action_points, self.action_points + cost)

    def restore(self) -> None:
        self.action_points = self.max_action_points


class SkillDefinition(BaseModel):
    """A skill known by a combatant for the duration of an encounter."""

    id: str = Field(description="Unique skill id.")
    name: str = Field(description="Display name.")
    ap_cost: int = Field(default=1, description="Action points spent on use.")
    mp_cost: int = Field(default=0, description="MP spent on use.")
    effect_type: EffectType = Field(description="Effect shape of the skill.")
    target: TargetType = Field(description="Targeting rule.")
    dice_expression: str | None = Field(
        default=None,
        description="Dice rolled for damage or healing (e.g. '2d6+1').",
    )
    flat_power: int | None = Field(
        default=None,
        description="Flat amount added to the roll.",
    )
    attacker_stat_scale: float | None = Field(
        default=None,
        description="Multiplier applied to the user's attack stat.",
    )
    ignore_armor: bool = Field(
        default=False,
        description="Whether the damage pierces armor.",
    )
    status_payload: StatusPayload | None = Field(
        default=None,
        description="Status applied by status skills, or as a rider on damage.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.ap_cost < 0 or self.mp_cost < 0:
            raise ValueError("Skill costs must be non-negative")
        if self.effect_type == EffectType.STATUS and self.status_payload is None:
            raise ValueError("Status skills require a status_payload")


class ItemDefinition(BaseModel):
    """A consumable carried by a combatant."""

    id: str = Field(description="Unique item id.")
    name: str = Field(description="Display name.")
    ap_cost: int = Field(default=1, description="Action points spent on use.")
    quantity: int = Field(default=1, description="Remaining uses.")
    target: TargetType = Field(
        default=TargetType.ALLY,
        description="Targeting rule, the user when no ally is chosen.",
    )
    dice_expression: str | None = Field(
        default=None,
        description="Dice rolled for damage items.",
    )
    flat_power: int | None = Field(
        default=None,
        description="Healing for ally items, damage for offensive ones.",
    )
    status_payload: StatusPayload | None = Field(
        default=None,
        description="Status applied on use.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.quantity < 0:
            raise ValueError("quantity must be non-negative")
        if self.ap_cost < 0:
            raise ValueError("ap_cost must be non-negative")


class Combatant(BaseModel):
    """
    Shared state of every unit taking part in an encounter.

    Constructed once per encounter and mutated in place by the combat engine.
    ``hp == 0`` means defeated.
    """

    id: str = Field(description="Unique id within the encounter.")
    name: str = Field(description="Display name.")
    hp: int = Field(description="Current hit points.")
    max_hp: int = Field(description="Maximum hit points.")
    mp: int = Field(default=0, description="Current magic points.")
    max_mp: int = Field(default=0, description="Maximum magic points.")
    attack: int = Field(default=0, description="Attack stat.")
    armor: int = Field(default=0, description="Flat damage mitigation.")
    speed: int = Field(default=0, description="Speed stat, turn order tie-break.")
    is_guarding: bool = Field(default=False, description="Guard stance flag.")
    statuses: list[StatusEffect] = Field(default_factory=list)
    resources: TurnResources = Field(default_factory=TurnResources)
    skills: list[SkillDefinition] = Field(default_factory=list)
    items: list[ItemDefinition] = Field(default_factory=list)

    def model_post_init(self, _: Any) -> None:
        if not self.id:
            raise ValueError("id must be a non-empty string")
        if self.max_hp < 1:
            raise ValueError("max_hp must be positive")
        if not 0 <= self.hp <= self.max_hp:
            raise ValueError("hp must be within [0, max_hp]")
        if not 0 <= self.mp <= max(self.max_mp, 0):
            raise ValueError("mp must be within [0, max_mp]")

    @property
    @abstractmethod
    def side(self) -> Side:
        """The side the combatant fights for."""

    @property
    def colored_name(self) -> str:
        return self.side.colorize(self.name)

    def is_alive(self) -> bool:
        return self.hp > 0

    def is_dead(self) -> bool:
        return self.hp <= 0

    def hp_ratio(self) -> float:
        return self.hp / self.max_hp if self.max_hp > 0 else 1.0

    def find_skill(self, skill_id: str | None) -> SkillDefinition | None:
        return next((s for s in self.skills if s.id == skill_id), None)

    def find_item(self, item_id: str | None) -> ItemDefinition | None:
        return next((i for i in self.items if i.id == item_id), None)

    def get_status_line(self) -> str:
        """Returns a compact one-line summary for console output."""
        line = f"{self.colored_name} {make_bar(self.hp, self.max_hp, color='green')}"
        line += f" {self.hp}/{self.max_hp} HP"
        if self.max_mp:
            line += f" {self.mp}/{self.max_mp} MP"
        if self.is_guarding:
            line += " [cyan](guarding)[/]"
        if self.statuses:
            line += " " + " ".join(s.type.colorize(str(s)) for s in self.statuses)
        return line


class Character(Combatant):
    """A party member controlled by the player."""

    kind: Literal["character"] = "character"
    character_class: str = Field(default="", description="Class template id.")
    level: int = Field(default=1, description="Current level.")
    xp: int = Field(default=0, description="Experience towards the next level.")
    xp_to_next: int = Field(default=50, description="Experience needed to level.")
    skill_ids: list[str] = Field(
        default_factory=list,
        description="Ids of every skill the character knows.",
    )

    @property
    def side(self) -> Side:
        return Side.PARTY


class Enemy(Combatant):
    """An opponent driven by the enemy AI."""

    kind: Literal["enemy"] = "enemy"
    ai_role: AIRole = Field(default=AIRole.BASIC, description="AI policy.")
    skill_ids: list[str] = Field(
        default_factory=list,
        description="Ids of the skills the AI may choose from.",
    )
    xp_reward: int = Field(default=0, description="XP granted on defeat.")
    gold_reward: int = Field(default=0, description="Gold granted on defeat.")

    @property
    def side(self) -> Side:
        return Side.ENEMY


AnyCombatant = Annotated[Union[Character, Enemy], Field(discriminator="kind")]
