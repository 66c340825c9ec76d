"""
Constants and enumerations for the combat simulator.

Defines the game-rule tunables, enumerations for action types, status
effects, targeting, enemy roles and the other closed sets shared by the
combat engine, the status ledger and the enemy AI.
"""

from enum import Enum

# Global verbose level for combat output:
# 0 - Minimal (only the combat log)
# 1 - Moderate (combat log plus turn banners)
# 2 - Full detail (diagnostic debug logging of engine internals)
GLOBAL_VERBOSE_LEVEL = 0

# Action points granted to a combatant when none are specified.
DEFAULT_MAX_ACTION_POINTS = 1

# Dice rolled by a plain attack, before adding the attacker's attack stat.
BASIC_ATTACK_DICE = "1d6"

# Skill id reserved for the generic basic attack; never picked as a skill.
BASIC_ATTACK_SKILL_ID = "basic-attack"

# Armor multiplier applied while a combatant is guarding.
GUARD_ARMOR_MULTIPLIER = 2

# Shared pool of extra dice the party earns and spends on attacks and skills.
MAX_BONUS_DICE = 10
BONUS_DIE_SIDES = 6

# Limits enforced by the dice parser.
MAX_DICE_COUNT = 100
MAX_DICE_SIDES = 1000

# Experience curve: xp_to_next = floor(XP_CURVE_BASE * XP_CURVE_GROWTH ** (level - 1)).
XP_CURVE_BASE = 50
XP_CURVE_GROWTH = 1.5

# Hard cap on rounds run by the combat manager.
DEFAULT_MAX_TURNS = 50


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class Side(NiceEnum):
    """The two sides of an encounter."""

    PARTY = "party"
    ENEMY = "enemy"

    @property
    def color(self) -> str:
        """Returns the color string associated with this side."""
        return {
            Side.PARTY: "bold blue",
            Side.ENEMY: "bold red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies side color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class DiceType(NiceEnum):
    """Named polyhedral dice."""

    D4 = "d4"
    D6 = "d6"
    D8 = "d8"
    D10 = "d10"
    D12 = "d12"
    D20 = "d20"

    @property
    def sides(self) -> int:
        return int(self.value[1:])


class ActionType(NiceEnum):
    """Defines the kinds of action a combatant can submit."""

    ATTACK = "attack"
    GUARD = "guard"
    SKILL = "skill"
    ITEM = "item"
    WAIT = "wait"


class EffectType(NiceEnum):
    """Defines the effect shape of a skill."""

    DAMAGE = "damage"
    STATUS = "status"
    HEAL = "heal"
    UTILITY = "utility"


class TargetType(NiceEnum):
    """Engine-level targeting rule of a skill or item."""

    ENEMY = "enemy"
    ALL_ENEMIES = "all_enemies"
    ALLY = "ally"
    ALL_ALLIES = "all_allies"
    SELF = "self"

    def is_offensive(self) -> bool:
        return self in (TargetType.ENEMY, TargetType.ALL_ENEMIES)


class SkillTargeting(NiceEnum):
    """Content-level targeting declared by skill templates."""

    SINGLE_ENEMY = "single_enemy"
    ALL_ENEMIES = "all_enemies"
    SINGLE_ALLY = "single_ally"
    ALL_ALLIES = "all_allies"
    SELF = "self"

    def to_target_type(self) -> TargetType:
        """Maps the content-level targeting to the engine-level one."""
        return {
            SkillTargeting.SINGLE_ENEMY: TargetType.ENEMY,
            SkillTargeting.ALL_ENEMIES: TargetType.ALL_ENEMIES,
            SkillTargeting.SINGLE_ALLY: TargetType.ALLY,
            SkillTargeting.ALL_ALLIES: TargetType.ALL_ALLIES,
            SkillTargeting.SELF: TargetType.SELF,
        }[self]


class DamageType(NiceEnum):
    """Damage category declared by skill templates."""

    PHYSICAL = "physical"
    MAGICAL = "magical"
    HEAL = "heal"
    NONE = "none"

    def is_damaging(self) -> bool:
        return self in (DamageType.PHYSICAL, DamageType.MAGICAL)


class StatusType(NiceEnum):
    """Closed set of status effect tags."""

    STUNNED = "stunned"
    POISONED = "poisoned"
    BURNING = "burning"
    BUFFED = "buffed"
    WEAKENED = "weakened"
    SHIELDED = "shielded"
    GUARDING = "guarding"
    REGENERATING = "regenerating"

    @property
    def color(self) -> str:
        """Returns the color string associated with this status."""
        return {
            StatusType.STUNNED: "bold yellow",
            StatusType.POISONED: "bold magenta",
            StatusType.BURNING: "bold red",
            StatusType.BUFFED: "bold green",
            StatusType.WEAKENED: "dim red",
            StatusType.SHIELDED: "bold cyan",
            StatusType.GUARDING: "cyan",
            StatusType.REGENERATING: "green",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies status color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    def is_periodic_damage(self) -> bool:
        return self in (StatusType.POISONED, StatusType.BURNING)

    def is_periodic_healing(self) -> bool:
        return self == StatusType.REGENERATING


class TimingWindow(NiceEnum):
    """Turn phase at which a status effect ticks."""

    TURN_START = "turn_start"
    TURN_END = "turn_end"


class StackRule(NiceEnum):
    """Resolution policy when a status of the same type is reapplied."""

    REPLACE = "replace"
    STACK_DURATION = "stack_duration"
    STACK_INTENSITY = "stack_intensity"


class AIRole(NiceEnum):
    """Behavioural policy tag of an enemy."""

    BASIC = "basic"
    TANK = "tank"
    BRUISER = "bruiser"
    CASTER = "caster"
    HEALER = "healer"
    SNIPER = "sniper"
    BOSS = "boss"


# Phase at which each status ticks when the caller does not say otherwise.
STATUS_DEFAULT_TIMING: dict[StatusType, TimingWindow] = {
    StatusType.STUNNED: TimingWindow.TURN_END,
    StatusType.POISONED: TimingWindow.TURN_START,
    StatusType.BURNING: TimingWindow.TURN_START,
    StatusType.BUFFED: TimingWindow.TURN_END,
    StatusType.WEAKENED: TimingWindow.TURN_END,
    StatusType.SHIELDED: TimingWindow.TURN_END,
    StatusType.GUARDING: TimingWindow.TURN_END,
    StatusType.REGENERATING: TimingWindow.TURN_START,
}
