"""
Combat manager module for the simulator.

Drives an encounter to its end on top of a ``CombatEngine``: each round
every living combatant, in turn order, submits actions until it runs out of
action points or waits. Party actions come from a controller callable and
enemy actions from the enemy AI.
"""

from collections.abc import Callable

from pydantic import BaseModel, Field

from jrpg_combat.character.combatant import Character, Combatant, Enemy
from jrpg_combat.character.leveling import LevelUpResult, award_xp
from jrpg_combat.core.constants import DEFAULT_MAX_TURNS, ActionType, Side
from jrpg_combat.core.content import ContentRepository
from jrpg_combat.core.logging import log_debug, log_info

from .actions import CombatAction
from .combat_engine import CombatEngine, CombatState
from .npc_ai import decide_enemy_action

# Chooses the next action of a party member given a snapshot of the state.
PartyController = Callable[[Character, CombatState], CombatAction]


def attack_enemy_controller(character: Character, state: CombatState) -> CombatAction:
    """Default party controller: attack the enemy while it stands."""
    if state.enemy is not None and state.enemy.is_alive():
        return CombatAction.attack(character.id, state.enemy.id)
    return CombatAction.wait(character.id)


class EncounterResult(BaseModel):
    """Outcome of a full encounter."""

    victor: Side | None = Field(
        default=None,
        description="Winning side, None if the turn limit was reached.",
    )
    turns: int = Field(default=0, description="Rounds played.")
    xp_awarded: int = Field(default=0, description="Experience shared by the party.")
    gold_awarded: int = Field(default=0, description="Gold earned by the party.")
    level_ups: list[LevelUpResult] = Field(default_factory=list)


class CombatManager:
    """Manages the flow of an encounter, round after round."""

    def __init__(
        self,
        engine: CombatEngine,
        content: ContentRepository,
        party_controller: PartyController | None = None,
        max_turns: int = DEFAULT_MAX_TURNS,
    ) -> None:
        """
        Initialize the CombatManager.

        Args:
            engine (CombatEngine):
                The engine owning the encounter state.
            content (ContentRepository):
                Content used by the enemy AI and for level-ups.
            party_controller (PartyController | None):
                Chooses party actions, attacks the enemy when omitted.
            max_turns (int):
                Rounds played before the encounter is called off.

        """
        self.engine = engine
        self.content = content
        self.party_controller: PartyController = (
            party_controller or attack_enemy_controller
        )
        self.max_turns = max_turns

    def run_turn(self) -> bool:
        """
        Runs a full round.

        Returns:
            bool: True if the encounter continues, False once it is over.

        """
        if self.engine.is_over():
            return False

        self.engine.start_turn()
        for combatant_id in self.engine.turn_order():
            if self.engine.is_over():
                break
            combatant = self.engine.find_combatant(combatant_id)
            if combatant is not None:
                self.run_participant_turn(combatant)

        if self.engine.is_over():
            return False
        self.engine.end_turn()
        return not self.engine.is_over()

    def run_participant_turn(self, combatant: Combatant) -> None:
        """
        Lets a combatant act until it runs out of action points, waits, or
        submits an action that has no effect.

        Args:
            combatant (Combatant):
                The acting combatant.

        """
        while combatant.is_alive() and not self.engine.is_over():
            action_points = combatant.resources.action_points
            if action_points <= 0:
                break

            action = self._decide(combatant)
            resolved = self.engine.execute_action(action)
            if not resolved or action.type == ActionType.WAIT:
                break
            # Zero-cost actions end the combatant's turn.
            if combatant.resources.action_points >= action_points:
                break

    def _decide(self, combatant: Combatant) -> CombatAction:
        state = self.engine.get_state()
        if isinstance(combatant, Enemy):
            return decide_enemy_action(
                combatant,
                combatant.ai_role,
                state.party,
                [state.enemy] if state.enemy is not None else [],
                self.content,
                rng=self.engine.rng,
            )
        character = next(c for c in state.party if c.id == combatant.id)
        return self.party_controller(character, state)

    def run(self) -> EncounterResult:
        """
        Runs the encounter until one side falls or the turn limit is reached,
        then rewards a victorious party.

        Returns:
            EncounterResult: The winner, rounds played and rewards.

        """
        while self.engine.turn_number < self.max_turns and self.run_turn():
            pass

        victor = self.engine.get_victor()
        result = EncounterResult(victor=victor, turns=self.engine.turn_number)

        if victor == Side.PARTY:
            result.xp_awarded = self.engine.get_total_xp_reward()
            result.gold_awarded = self.engine.get_total_gold_reward()
            result.level_ups = award_xp(
                self.engine.party,
                result.xp_awarded,
                self.content.classes,
                skills=self.content.skills,
            )
            for level_up in result.level_ups:
                self.engine.log.add(
                    f"{level_up.character_id} reached level {level_up.new_level}!"
                )
        elif victor is None:
            log_debug(f"Encounter stopped after {result.turns} turns without a victor.")

        log_info(
            "Encounter finished",
            {"victor": victor, "turns": result.turns, "xp": result.xp_awarded},
        )
        return result
