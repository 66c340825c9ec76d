"""
Enemy AI module for the simulator.

Each AI role is a weighted-random policy over the skills an enemy can
currently afford. Policies look at the declared effect of a skill (damage
type, applied status, targeting) rather than at its identity, and fall back
to a basic attack when no skill is chosen.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Protocol

from jrpg_combat.character.combatant import Character, Combatant, Enemy
from jrpg_combat.character.templates import SkillTemplate
from jrpg_combat.core.constants import (
    BASIC_ATTACK_SKILL_ID,
    AIRole,
    DamageType,
    SkillTargeting,
    StatusType,
)
from jrpg_combat.core.dice_parser import RandomSource, resolve_rng
from jrpg_combat.core.logging import log_debug
from jrpg_combat.effects.status import has_status

from .actions import CombatAction

# =============================================================================
# Policy thresholds
# =============================================================================

BASIC_SKILL_CHANCE = 0.25

HEALER_HEAL_THRESHOLD = 0.6
HEALER_BUFF_CHANCE = 0.5
HEALER_ATTACK_SKILL_CHANCE = 0.3

CASTER_AOE_MIN_TARGETS = 2
CASTER_AOE_CHANCE = 0.6
CASTER_DEBUFF_CHANCE = 0.4
CASTER_SINGLE_TARGET_CHANCE = 0.7

SNIPER_SKILL_CHANCE = 0.65

TANK_SELF_BUFF_CHANCE = 0.4
TANK_STUN_CHANCE = 0.45
TANK_GUARD_THRESHOLD = 0.3
TANK_GUARD_CHANCE = 0.5
TANK_PHYSICAL_SKILL_CHANCE = 0.4

BRUISER_EXECUTE_THRESHOLD = 0.25
BRUISER_SKILL_CHANCE = 0.55

BOSS_ENRAGE_THRESHOLD = 0.4
BOSS_AOE_MIN_TARGETS = 3
BOSS_AOE_CHANCE = 0.5
BOSS_BUFF_CHANCE = 0.3
BOSS_DEBUFF_CHANCE = 0.35
BOSS_SINGLE_TARGET_CHANCE = 0.6

# Classes the boss tries to debuff first, in order.
BOSS_DEBUFF_PRIORITY = ("cleric", "mage")


class SkillSource(Protocol):
    """Anything exposing skill templates keyed by id."""

    skills: Mapping[str, SkillTemplate]


# =============================================================================
# Support Functions
# =============================================================================


def _hp_ratio(combatant: Combatant) -> float:
    return combatant.hp / combatant.max_hp if combatant.max_hp > 0 else 1.0


def _roll(rng: RandomSource, chance: float) -> bool:
    """Returns True with probability ``chance``."""
    return rng.random() < chance


def _pick_random(rng: RandomSource, candidates: Sequence[Combatant]) -> Combatant:
    if not candidates:
        raise ValueError("Cannot pick from an empty list of candidates.")
    return candidates[rng.randint(0, len(candidates) - 1)]


def _pick_weakest(candidates: Sequence[Combatant]) -> Combatant:
    if not candidates:
        raise ValueError("Cannot pick from an empty list of candidates.")
    return min(candidates, key=lambda c: c.hp)


def _is_attack(skill: SkillTemplate) -> bool:
    return skill.effect.damage_type in (DamageType.PHYSICAL, DamageType.MAGICAL)


def _applies(skill: SkillTemplate, *statuses: StatusType) -> bool:
    return skill.effect.status_applied in statuses


def _by_scaling(skills: list[SkillTemplate]) -> list[SkillTemplate]:
    """Sorts skills by descending scaling factor, strongest first."""
    return sorted(skills, key=lambda s: s.effect.scaling_factor or 0, reverse=True)


def _first(
    skills: Sequence[SkillTemplate], predicate: Callable[[SkillTemplate], bool]
) -> SkillTemplate | None:
    return next((s for s in skills if predicate(s)), None)


def _use(enemy: Enemy, skill: SkillTemplate, target: Combatant) -> CombatAction:
    return CombatAction.skill(enemy.id, skill.id, target.id)


def _attack(enemy: Enemy, target: Combatant) -> CombatAction:
    return CombatAction.attack(enemy.id, target.id)


def available_skills(enemy: Enemy, content: SkillSource) -> list[SkillTemplate]:
    """
    Returns the skills an enemy may choose from: known to the content,
    affordable with its current MP and not the generic basic attack.
    """
    skills: list[SkillTemplate] = []
    for skill_id in enemy.skill_ids:
        skill = content.skills.get(skill_id)
        if skill is None or skill.id == BASIC_ATTACK_SKILL_ID:
            continue
        if enemy.mp >= skill.mp_cost:
            skills.append(skill)
    return skills


# =============================================================================
# Role policies
# =============================================================================


def _basic_ai(
    enemy: Enemy,
    skills: list[SkillTemplate],
    party: list[Character],
    allies: list[Enemy],
    rng: RandomSource,
) -> CombatAction:
    target = _pick_random(rng, party)
    if skills and _roll(rng, BASIC_SKILL_CHANCE):
        skill = skills[rng.randint(0, len(skills) - 1)]
        return _use(enemy, skill, target)
    return _attack(enemy, target)


def _healer_ai(
    enemy: Enemy,
    skills: list[SkillTemplate],
    party: list[Character],
    allies: list[Enemy],
    rng: RandomSource,
) -> CombatAction:
    living_allies = [a for a in allies if a.is_alive()] or [enemy]

    wounded = [a for a in living_allies if _hp_ratio(a) < HEALER_HEAL_THRESHOLD]
    if wounded:
        heal_skill = _first(skills, lambda s: s.effect.damage_type == DamageType.HEAL)
        if heal_skill is not None:
            return _use(enemy, heal_skill, min(wounded, key=_hp_ratio))

    buff_skill = _first(
        skills, lambda s: _applies(s, StatusType.BUFFED, StatusType.SHIELDED)
    )
    if buff_skill is not None and _roll(rng, HEALER_BUFF_CHANCE):
        buff_target = next(
            (a for a in living_allies if not has_status(a, StatusType.BUFFED)),
            living_allies[0],
        )
        return _use(enemy, buff_skill, buff_target)

    target = _pick_weakest(party)
    attack_skill = _first(skills, _is_attack)
    if attack_skill is not None and _roll(rng, HEALER_ATTACK_SKILL_CHANCE):
        return _use(enemy, attack_skill, target)
    return _attack(enemy, target)


def _caster_ai(
    enemy: Enemy,
    skills: list[SkillTemplate],
    party: list[Character],
    allies: list[Enemy],
    rng: RandomSource,
) -> CombatAction:
    if len(party) >= CASTER_AOE_MIN_TARGETS:
        aoe_skill = _first(skills, lambda s: s.targeting == SkillTargeting.ALL_ENEMIES)
        if aoe_skill is not None and _roll(rng, CASTER_AOE_CHANCE):
            return _use(enemy, aoe_skill, party[0])

    debuff_skill = _first(
        skills, lambda s: _applies(s, StatusType.WEAKENED, StatusType.POISONED)
    )
    if debuff_skill is not None and _roll(rng, CASTER_DEBUFF_CHANCE):
        target = next(
            (
                c
                for c in party
                if not has_status(c, StatusType.POISONED)
                and not has_status(c, StatusType.WEAKENED)
            ),
            party[0],
        )
        return _use(enemy, debuff_skill, target)

    damage_skill = _first(
        skills,
        lambda s: s.targeting == SkillTargeting.SINGLE_ENEMY and _is_attack(s),
    )
    if damage_skill is not None and _roll(rng, CASTER_SINGLE_TARGET_CHANCE):
        return _use(enemy, damage_skill, _pick_weakest(party))

    return _attack(enemy, _pick_random(rng, party))


def _sniper_ai(
    enemy: Enemy,
    skills: list[SkillTemplate],
    party: list[Character],
    allies: list[Enemy],
    rng: RandomSource,
) -> CombatAction:
    target = min(party, key=lambda c: (c.armor, c.hp))
    single_damage = _by_scaling(
        [
            s
            for s in skills
            if s.targeting == SkillTargeting.SINGLE_ENEMY
            and s.effect.damage_type != DamageType.NONE
        ]
    )
    if single_damage and _roll(rng, SNIPER_SKILL_CHANCE):
        return _use(enemy, single_damage[0], target)
    return _attack(enemy, target)


def _tank_ai(
    enemy: Enemy,
    skills: list[SkillTemplate],
    party: list[Character],
    allies: list[Enemy],
    rng: RandomSource,
) -> CombatAction:
    self_buff = _first(
        skills,
        lambda s: s.targeting in (SkillTargeting.SELF, SkillTargeting.SINGLE_ALLY)
        and _applies(s, StatusType.SHIELDED, StatusType.BUFFED),
    )
    if (
        self_buff is not None
        and not has_status(enemy, StatusType.SHIELDED)
        and _roll(rng, TANK_SELF_BUFF_CHANCE)
    ):
        return _use(enemy, self_buff, enemy)

    stun_skill = _first(skills, lambda s: _applies(s, StatusType.STUNNED))
    if stun_skill is not None:
        biggest_threat = max(party, key=lambda c: c.attack)
        if not has_status(biggest_threat, StatusType.STUNNED) and _roll(
            rng, TANK_STUN_CHANCE
        ):
            return _use(enemy, stun_skill, biggest_threat)

    if (
        _hp_ratio(enemy) < TANK_GUARD_THRESHOLD
        and not enemy.is_guarding
        and _roll(rng, TANK_GUARD_CHANCE)
    ):
        return CombatAction.guard(enemy.id)

    target = _pick_random(rng, party)
    physical_skill = _first(
        skills, lambda s: s.effect.damage_type == DamageType.PHYSICAL
    )
    if physical_skill is not None and _roll(rng, TANK_PHYSICAL_SKILL_CHANCE):
        return _use(enemy, physical_skill, target)
    return _attack(enemy, target)


def _bruiser_ai(
    enemy: Enemy,
    skills: list[SkillTemplate],
    party: list[Character],
    allies: list[Enemy],
    rng: RandomSource,
) -> CombatAction:
    low_hp = next(
        (c for c in party if _hp_ratio(c) < BRUISER_EXECUTE_THRESHOLD), None
    )
    target = low_hp if low_hp is not None else _pick_random(rng, party)

    damage_skills = _by_scaling([s for s in skills if _is_attack(s)])
    if damage_skills and _roll(rng, BRUISER_SKILL_CHANCE):
        return _use(enemy, damage_skills[0], target)
    return _attack(enemy, target)


def _boss_ai(
    enemy: Enemy,
    skills: list[SkillTemplate],
    party: list[Character],
    allies: list[Enemy],
    rng: RandomSource,
) -> CombatAction:
    if _hp_ratio(enemy) < BOSS_ENRAGE_THRESHOLD:
        strongest = _by_scaling(
            [
                s
                for s in skills
                if s.effect.damage_type not in (DamageType.NONE, DamageType.HEAL)
            ]
        )
        if strongest:
            log_debug(f"{enemy.name} is enraged", {"hp": enemy.hp})
            return _use(enemy, strongest[0], _pick_weakest(party))

    if len(party) >= BOSS_AOE_MIN_TARGETS:
        aoe_skill = _first(skills, lambda s: s.targeting == SkillTargeting.ALL_ENEMIES)
        if aoe_skill is not None and _roll(rng, BOSS_AOE_CHANCE):
            return _use(enemy, aoe_skill, party[0])

    buff_skill = _first(
        skills,
        lambda s: _applies(s, StatusType.BUFFED)
        and s.targeting in (SkillTargeting.ALL_ALLIES, SkillTargeting.SINGLE_ALLY),
    )
    living_allies = [a for a in allies if a.is_alive()]
    if buff_skill is not None and len(living_allies) > 1 and _roll(rng, BOSS_BUFF_CHANCE):
        return _use(enemy, buff_skill, enemy)

    debuff_skill = _first(
        skills, lambda s: _applies(s, StatusType.WEAKENED, StatusType.POISONED)
    )
    if debuff_skill is not None and _roll(rng, BOSS_DEBUFF_CHANCE):
        target = None
        for character_class in BOSS_DEBUFF_PRIORITY:
            target = next(
                (c for c in party if c.character_class == character_class), None
            )
            if target is not None:
                break
        if target is None:
            target = _pick_random(rng, party)
        status = debuff_skill.effect.status_applied
        if status is not None and not has_status(target, status):
            return _use(enemy, debuff_skill, target)

    single_damage = _by_scaling(
        [
            s
            for s in skills
            if s.targeting == SkillTargeting.SINGLE_ENEMY
            and s.effect.damage_type != DamageType.NONE
        ]
    )
    if single_damage and _roll(rng, BOSS_SINGLE_TARGET_CHANCE):
        return _use(enemy, single_damage[0], _pick_weakest(party))

    return _attack(enemy, _pick_random(rng, party))


_POLICIES: dict[AIRole, Callable[..., CombatAction]] = {
    AIRole.BASIC: _basic_ai,
    AIRole.HEALER: _healer_ai,
    AIRole.CASTER: _caster_ai,
    AIRole.SNIPER: _sniper_ai,
    AIRole.TANK: _tank_ai,
    AIRole.BRUISER: _bruiser_ai,
    AIRole.BOSS: _boss_ai,
}


def decide_enemy_action(
    enemy: Enemy,
    role: AIRole,
    party: list[Character],
    allies: list[Enemy],
    content: SkillSource,
    rng: RandomSource | None = None,
) -> CombatAction:
    """
    Decides the next action of an enemy.

    Args:
        enemy (Enemy):
            The acting enemy.
        role (AIRole):
            The policy to follow.
        party (list[Character]):
            The opposing party; defeated members are ignored.
        allies (list[Enemy]):
            The enemy's side, itself included.
        content (SkillSource):
            Provider of the skill templates referenced by the enemy.
        rng (RandomSource | None):
            Random source for the weighted choices.

    Returns:
        CombatAction:
            The chosen action. ``guard`` when no party member is alive.

    """
    living_party = [c for c in party if c.is_alive()]
    if not living_party:
        return CombatAction.guard(enemy.id)

    skills = available_skills(enemy, content)
    policy = _POLICIES.get(role, _basic_ai)
    action = policy(enemy, skills, living_party, allies, resolve_rng(rng))
    log_debug(f"{enemy.name} ({role}) decided: {action}")
    return action
