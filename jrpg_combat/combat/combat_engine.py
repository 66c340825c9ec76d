"""
Combat engine module for the simulator.

The engine owns the state of one encounter and is the only component that
mutates it. A round goes through three phases: turn start (AP restored,
turn-start statuses ticked), actions (one ``execute_action`` call per
submitted ``CombatAction``) and turn end (turn-end statuses ticked).

Invalid actions never raise: the reason is written to the combat log and
the action is consumed as a no-op.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from jrpg_combat.character.combatant import Character, Combatant, Enemy
from jrpg_combat.core.combat_log import CombatLog, LogSink
from jrpg_combat.core.constants import (
    BASIC_ATTACK_DICE,
    BONUS_DIE_SIDES,
    MAX_BONUS_DICE,
    ActionType,
    EffectType,
    Side,
    StatusType,
    TargetType,
    TimingWindow,
)
from jrpg_combat.core.dice_parser import (
    RandomSource,
    roll_dice_expression,
    roll_multiple,
)
from jrpg_combat.core.logging import log_debug, log_warning
from jrpg_combat.effects.status import (
    StatusPayload,
    apply_payload,
    attack_modifier,
    has_status,
    tick_statuses_by_phase,
)

from .actions import CombatAction
from .damage import DamageFormula, ResolvedDamage, resolve_damage


class CombatState(BaseModel):
    """The aggregate state of one encounter."""

    party: list[Character] = Field(default_factory=list)
    enemy: Enemy | None = Field(default=None)
    turn_number: int = Field(default=0)
    is_active: bool = Field(default=True)
    bonus_dice_pool: int = Field(
        default=0,
        description="Bonus dice held by the party.",
    )
    max_bonus_dice: int = Field(
        default=MAX_BONUS_DICE,
        description="Capacity of the bonus dice pool.",
    )

    def model_post_init(self, _: Any) -> None:
        if not 0 <= self.bonus_dice_pool <= self.max_bonus_dice:
            raise ValueError("bonus_dice_pool must be within [0, max_bonus_dice]")

    def combatants(self) -> list[Combatant]:
        """Returns the party members followed by the enemy, if any."""
        everyone: list[Combatant] = list(self.party)
        if self.enemy is not None:
            everyone.append(self.enemy)
        return everyone


class CombatEngine:
    """Turn and action state machine over a single ``CombatState``."""

    def __init__(
        self,
        party: list[Character],
        enemy: Enemy | None,
        log: LogSink | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        """
        Initialize the engine for a new encounter.

        Args:
            party (list[Character]): The party members.
            enemy (Enemy | None): The opponent.
            log (LogSink | None): Sink for combat messages, a fresh
                ``CombatLog`` when omitted.
            rng (RandomSource | None): Random source used for every roll.

        """
        self._state = CombatState(party=party, enemy=enemy)
        self.log: LogSink = log if log is not None else CombatLog()
        self.rng = rng

        self._handlers: dict[ActionType, Callable[[Combatant, CombatAction], bool]] = {
            ActionType.ATTACK: self._execute_attack,
            ActionType.GUARD: self._execute_guard,
            ActionType.SKILL: self._execute_skill,
            ActionType.ITEM: self._execute_item,
            ActionType.WAIT: self._execute_wait,
        }

    # ============================================================================
    # STATE ACCESS
    # ============================================================================

    def get_state(self) -> CombatState:
        """Returns a read-only snapshot of the encounter state."""
        return self._state.model_copy(deep=True)

    @property
    def turn_number(self) -> int:
        return self._state.turn_number

    @property
    def party(self) -> list[Character]:
        return self._state.party

    @property
    def enemy(self) -> Enemy | None:
        return self._state.enemy

    def find_combatant(self, combatant_id: str | None) -> Combatant | None:
        if combatant_id is None:
            return None
        return next(
            (c for c in self._state.combatants() if c.id == combatant_id), None
        )

    def is_party_member(self, combatant_id: str) -> bool:
        return any(c.id == combatant_id for c in self._state.party)

    def side_of(self, combatant: Combatant) -> Side:
        return Side.PARTY if self.is_party_member(combatant.id) else Side.ENEMY

    def living_allies(self, combatant: Combatant) -> list[Combatant]:
        side = self.side_of(combatant)
        return [
            c
            for c in self._state.combatants()
            if c.is_alive() and self.side_of(c) == side
        ]

    def living_opponents(self, combatant: Combatant) -> list[Combatant]:
        side = self.side_of(combatant)
        return [
            c
            for c in self._state.combatants()
            if c.is_alive() and self.side_of(c) != side
        ]

    def turn_order(self) -> list[str]:
        """
        Returns the ids of the living combatants in acting order: initiative
        first, then speed, then declaration order.
        """
        indexed = list(enumerate(self._state.combatants()))
        indexed.sort(
            key=lambda pair: (
                -pair[1].resources.initiative,
                -pair[1].speed,
                pair[0],
            )
        )
        return [c.id for _, c in indexed if c.is_alive()]

    def get_total_xp_reward(self) -> int:
        enemy = self._state.enemy
        return enemy.xp_reward if enemy is not None else 0

    def get_total_gold_reward(self) -> int:
        enemy = self._state.enemy
        return enemy.gold_reward if enemy is not None else 0

    # ============================================================================
    # BONUS DICE
    # ============================================================================

    @property
    def bonus_dice_pool(self) -> int:
        return self._state.bonus_dice_pool

    def add_bonus_dice(self, count: int, reason: str) -> int:
        """
        Adds dice to the party's bonus pool, up to its capacity.

        Args:
            count (int): Dice to add.
            reason (str): Why the dice were earned, for the combat log.

        Returns:
            int: The number of dice actually added.

        """
        before = self._state.bonus_dice_pool
        self._state.bonus_dice_pool = min(
            self._state.max_bonus_dice, before + max(0, count)
        )
        gained = self._state.bonus_dice_pool - before
        if gained > 0:
            self.log.add(
                f"  +{gained} bonus dice! ({reason}) "
                f"[Pool: {self._state.bonus_dice_pool}/{self._state.max_bonus_dice}]"
            )
        return gained

    def spend_bonus_dice(self, count: int) -> list[int]:
        """
        Removes up to ``count`` dice from the pool and rolls them.

        Args:
            count (int): Dice requested.

        Returns:
            list[int]: The rolls of the dice actually spent, empty when the
            pool is empty or nothing was requested.

        """
        spent = min(max(0, count), self._state.bonus_dice_pool)
        if spent == 0:
            return []
        self._state.bonus_dice_pool -= spent
        return roll_multiple(spent, BONUS_DIE_SIDES, self.rng)

    def _spend_action_bonus(self, actor: Combatant, action: CombatAction) -> list[int]:
        # Only the party draws from its own pool.
        if not self.is_party_member(actor.id):
            return []
        return self.spend_bonus_dice(action.bonus_dice_count)

    @staticmethod
    def _describe_bonus(rolls: list[int]) -> str:
        if not rolls:
            return ""
        return " +bonus[" + "][".join(map(str, rolls)) + "]"

    # ============================================================================
    # TURN LIFECYCLE
    # ============================================================================

    def start_turn(self) -> None:
        """
        Begins a new round: increments the turn counter, restores the action
        points of every living combatant and ticks turn-start statuses.
        """
        self._state.turn_number += 1
        turn = self._state.turn_number
        if isinstance(self.log, CombatLog):
            self.log.add_turn_start(turn)
        else:
            self.log.add(f"--- Turn {turn} ---")

        living = [c for c in self._state.combatants() if c.is_alive()]
        for combatant in living:
            combatant.resources.restore()
        for combatant in living:
            self._tick_statuses(combatant, TimingWindow.TURN_START)

    def end_turn(self) -> None:
        """Closes the round by ticking turn-end statuses."""
        for combatant in self._state.combatants():
            if combatant.is_alive():
                self._tick_statuses(combatant, TimingWindow.TURN_END)

    def is_over(self) -> bool:
        """
        Checks whether one side has no living members left. Once true, the
        encounter is frozen as inactive.
        """
        party_alive = any(c.is_alive() for c in self._state.party)
        enemy = self._state.enemy
        enemy_alive = enemy is not None and enemy.is_alive()
        if not party_alive or not enemy_alive:
            self._state.is_active = False
            return True
        return False

    def get_victor(self) -> Side | None:
        if not self.is_over():
            return None
        if any(c.is_alive() for c in self._state.party):
            return Side.PARTY
        return Side.ENEMY

    def _tick_statuses(self, combatant: Combatant, phase: TimingWindow) -> None:
        for result in tick_statuses_by_phase(combatant, phase):
            label = result.status.value
            if result.damage:
                self.log.add(
                    f"  {combatant.name} takes {result.damage} {label} damage "
                    f"(HP: {combatant.hp}/{combatant.max_hp})"
                )
                if combatant.is_dead():
                    self.log.add(f"  {combatant.name} is defeated by {label}!")
            if result.healing:
                self.log.add(
                    f"  {combatant.name} regenerates {result.healing} HP "
                    f"(HP: {combatant.hp}/{combatant.max_hp})"
                )
            if result.expired:
                self.log.add(f"  {combatant.name}'s {label} wore off.")

    # ============================================================================
    # ACTIONS
    # ============================================================================

    def execute_action(self, action: CombatAction) -> bool:
        """
        Validates and resolves a single action.

        Args:
            action (CombatAction): The action to resolve.

        Returns:
            bool: True if the action took effect, False if it was consumed
            as a no-op.

        """
        actor = self.find_combatant(action.actor_id)
        if actor is None:
            self.log.add(f"Error: Actor {action.actor_id} not found")
            log_warning("Action submitted for unknown actor", {"action": str(action)})
            return False

        if not self._state.is_active:
            self.log.add(f"{actor.name} cannot act, the battle is over!")
            return False

        if actor.is_dead():
            self.log.add(f"{actor.name} is defeated and cannot act!")
            return False

        if has_status(actor, StatusType.STUNNED):
            self.log.add(f"{actor.name} is stunned and cannot act!")
            return False

        log_debug("Executing action", {"action": str(action)})
        return self._handlers[action.type](actor, action)

    def _spend_ap(self, actor: Combatant, cost: int, label: str) -> bool:
        if actor.resources.spend(cost):
            return True
        self.log.add(
            f"{actor.name} doesn't have enough AP for {label}! "
            f"({actor.resources.action_points}/{cost})"
        )
        return False

    def _execute_attack(self, actor: Combatant, action: CombatAction) -> bool:
        if not self._spend_ap(actor, 1, "an attack"):
            return False
        target = self.validate_opposing_target(actor, action.target_id)
        if target is None:
            actor.resources.refund(1)
            return False

        bonus = self._spend_action_bonus(actor, action)
        formula = DamageFormula(
            dice_expression=BASIC_ATTACK_DICE,
            flat_power=attack_modifier(actor) + sum(bonus),
            attacker_stat_scale=1,
        )
        result = resolve_damage(actor, target, formula, self.rng)
        self.log.add(
            f"{actor.name} attacks {target.name}! "
            f"{BASIC_ATTACK_DICE} rolled {result.roll_total}"
            f"{self._describe_bonus(bonus)}"
        )
        self._strike(actor, target, result)
        return True

    def _execute_guard(self, actor: Combatant, action: CombatAction) -> bool:
        if not self._spend_ap(actor, 1, "guarding"):
            return False
        if actor.is_guarding:
            self.log.add(f"{actor.name} keeps a defensive stance.")
        else:
            actor.is_guarding = True
            self.log.add(f"{actor.name} takes a defensive stance!")
        if self.is_party_member(actor.id):
            self.add_bonus_dice(1, "guard stance")
        return True

    def _execute_wait(self, actor: Combatant, action: CombatAction) -> bool:
        self.log.add(f"{actor.name} waits.")
        return True

    def _execute_skill(self, actor: Combatant, action: CombatAction) -> bool:
        skill = actor.find_skill(action.skill_id)
        if skill is None:
            self.log.add(f"Unknown skill: {action.skill_id}")
            return False
        if actor.mp < skill.mp_cost:
            self.log.add(
                f"{actor.name} doesn't have enough MP for {skill.name}! "
                f"({actor.mp}/{skill.mp_cost})"
            )
            return False
        if not self._spend_ap(actor, skill.ap_cost, skill.name):
            return False

        targets = self._resolve_targets(actor, skill.target, action.target_id)
        if not targets:
            actor.resources.refund(skill.ap_cost)
            self.log.add(
                f"{actor.name} tries to use {skill.name} but there are no valid targets!"
            )
            return False

        actor.mp -= skill.mp_cost
        bonus: list[int] = []
        if skill.effect_type in (EffectType.DAMAGE, EffectType.HEAL):
            bonus = self._spend_action_bonus(actor, action)
        cost = f" ({skill.mp_cost} MP)" if skill.mp_cost else ""
        self.log.add(
            f"{actor.name} uses {skill.name}!{cost}{self._describe_bonus(bonus)}"
        )

        for target in targets:
            if skill.effect_type == EffectType.DAMAGE:
                formula = DamageFormula(
                    dice_expression=skill.dice_expression,
                    flat_power=(
                        (skill.flat_power or 0) + attack_modifier(actor) + sum(bonus)
                    ),
                    attacker_stat_scale=skill.attacker_stat_scale,
                    ignore_armor=skill.ignore_armor,
                )
                result = resolve_damage(actor, target, formula, self.rng)
                self._strike(actor, target, result)
                if skill.status_payload is not None and target.is_alive():
                    self._apply_status(target, skill.status_payload)
            elif skill.effect_type == EffectType.STATUS and skill.status_payload:
                self._apply_status(target, skill.status_payload)
            elif skill.effect_type == EffectType.HEAL:
                amount = (skill.flat_power or 0) + sum(bonus)
                if skill.dice_expression:
                    amount += roll_dice_expression(skill.dice_expression, self.rng)
                self._heal(target, amount)
            else:
                self.log.add(f"  {skill.name} has no effect on {target.name}.")
        return True

    def _execute_item(self, actor: Combatant, action: CombatAction) -> bool:
        item = actor.find_item(action.item_id)
        if item is None or item.quantity <= 0:
            label = item.name if item is not None else action.item_id
            self.log.add(f"{actor.name} has no {label} left!")
            return False
        if not self._spend_ap(actor, item.ap_cost, item.name):
            return False

        targets = self._resolve_targets(actor, item.target, action.target_id)
        if not targets:
            actor.resources.refund(item.ap_cost)
            self.log.add(f"{actor.name} cannot use {item.name} on that target!")
            return False

        item.quantity -= 1
        for target in targets:
            self.log.add(f"{actor.name} uses {item.name} on {target.name}!")
            power = item.flat_power or 0
            if not item.target.is_offensive() and power > 0:
                self._heal(target, power)
            elif item.target.is_offensive() or item.dice_expression:
                # Items never scale off the user's attack.
                formula = DamageFormula(
                    dice_expression=item.dice_expression,
                    flat_power=item.flat_power,
                    attacker_stat_scale=0,
                )
                self.apply_damage(target, resolve_damage(actor, target, formula, self.rng))
            if item.status_payload is not None and target.is_alive():
                self._apply_status(target, item.status_payload)
        return True

    # ============================================================================
    # TARGETING
    # ============================================================================

    def validate_opposing_target(
        self, actor: Combatant, target_id: str | None
    ) -> Combatant | None:
        """
        Returns the target if it exists, is alive and stands on the side
        opposing the actor; logs the reason and returns None otherwise.
        """
        if not target_id:
            self.log.add(f"{actor.name} has no target!")
            return None
        target = self.find_combatant(target_id)
        if target is None:
            self.log.add(f"Target {target_id} not found")
            return None
        if target.is_dead():
            self.log.add(f"{target.name} is already defeated!")
            return None
        if self.is_party_member(actor.id) == self.is_party_member(target.id):
            self.log.add(f"{actor.name} cannot attack {target.name}!")
            return None
        return target

    def _validate_allied_target(
        self, actor: Combatant, target_id: str | None
    ) -> Combatant | None:
        if not target_id:
            return actor
        target = self.find_combatant(target_id)
        if target is None:
            self.log.add(f"Target {target_id} not found")
            return None
        if target.is_dead():
            self.log.add(f"{target.name} is defeated and cannot be helped!")
            return None
        if self.is_party_member(actor.id) != self.is_party_member(target.id):
            self.log.add(f"{target.name} is not an ally of {actor.name}!")
            return None
        return target

    def _resolve_targets(
        self, actor: Combatant, target_type: TargetType, target_id: str | None
    ) -> list[Combatant]:
        if target_type == TargetType.SELF:
            return [actor]
        if target_type == TargetType.ENEMY:
            target = self.validate_opposing_target(actor, target_id)
            return [target] if target is not None else []
        if target_type == TargetType.ALL_ENEMIES:
            return self.living_opponents(actor)
        if target_type == TargetType.ALLY:
            target = self._validate_allied_target(actor, target_id)
            return [target] if target is not None else []
        return self.living_allies(actor)

    # ============================================================================
    # STATE MUTATION
    # ============================================================================

    def apply_damage(self, target: Combatant, damage: ResolvedDamage) -> None:
        """
        Subtracts the resolved damage from the target's HP. This is the only
        place where combat actions lower HP.
        """
        target.hp = max(0, target.hp - damage.final_damage)
        blocked = f", {damage.blocked} blocked" if damage.blocked else ""
        self.log.add(
            f"  {target.name} takes {damage.final_damage} damage "
            f"(raw {damage.raw_damage}{blocked}) (HP: {target.hp}/{target.max_hp})"
        )
        if damage.final_damage > 0 and target.is_guarding:
            self._break_guard(target)
        if target.is_dead():
            self.log.add(f"  {target.name} is defeated!")

    def _strike(
        self, actor: Combatant, target: Combatant, damage: ResolvedDamage
    ) -> None:
        was_alive = target.is_alive()
        self.apply_damage(target, damage)
        if was_alive and target.is_dead() and self.is_party_member(actor.id):
            self.add_bonus_dice(1, "enemy defeated")

    def clear_guard(self, combatant_id: str) -> bool:
        """Explicitly drops the guard stance of a combatant."""
        combatant = self.find_combatant(combatant_id)
        if combatant is None or not combatant.is_guarding:
            return False
        combatant.is_guarding = False
        self.log.add(f"{combatant.name} lowers their guard.")
        return True

    def _break_guard(self, target: Combatant) -> None:
        target.is_guarding = False
        self.log.add(f"  {target.name}'s guard is broken!")

    def _heal(self, target: Combatant, amount: int) -> None:
        before = target.hp
        target.hp = min(target.max_hp, target.hp + max(0, amount))
        self.log.add(
            f"  {target.name} recovers {target.hp - before} HP "
            f"(HP: {target.hp}/{target.max_hp})"
        )

    def _apply_status(self, target: Combatant, payload: StatusPayload) -> None:
        apply_payload(target, payload)
        self.log.add(
            f"  {target.name} is {payload.type.value}! ({payload.duration} turns)"
        )
