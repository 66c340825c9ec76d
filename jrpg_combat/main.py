"""
Main entry point for the JRPG combat simulator.

Loads the bundled content, builds a party and an enemy, then runs the
encounter to its end and prints the combat log:
- party members act through the default controller (attack the enemy)
- the enemy acts through its AI role
- a victorious party shares the enemy's experience and may level up
"""

import logging
import random

from jrpg_combat.combat.combat_engine import CombatEngine
from jrpg_combat.combat.combat_manager import CombatManager
from jrpg_combat.core.combat_log import CombatLog
from jrpg_combat.core.constants import GLOBAL_VERBOSE_LEVEL
from jrpg_combat.core.content import ContentRepository
from jrpg_combat.core.logging import setup_logging
from jrpg_combat.core.utils import cprint, crule


def main(enemy_id: str = "goblin-chief", seed: int | None = None) -> None:
    setup_logging(logging.DEBUG if GLOBAL_VERBOSE_LEVEL > 1 else logging.WARNING)

    crule("Combat Simulator", style="bold green")

    cprint("Loading repository...", style="bold green")
    content = ContentRepository.from_directory()

    party = [
        content.create_character("warrior", "hero1", "Knight", {"potion": 2}),
        content.create_character("mage", "hero2", "Mage"),
        content.create_character("ranger", "hero3", "Ranger", {"fire-bomb": 1}),
    ]
    enemy = content.create_enemy(enemy_id)

    log = CombatLog()
    engine = CombatEngine(party, enemy, log=log, rng=random.Random(seed))
    manager = CombatManager(engine, content)

    crule("Participants", style="bold yellow", characters="-")
    for combatant in [*party, enemy]:
        cprint(combatant.get_status_line())

    result = manager.run()

    crule("Combat Log", style="bold yellow", characters="-")
    log.print()

    crule("Final Report", style="bold green")
    for combatant in [*engine.party, engine.enemy]:
        if combatant is not None:
            cprint(combatant.get_status_line())
    if result.victor is None:
        cprint(f"No victor after {result.turns} turns.", style="bold yellow")
    else:
        cprint(
            f"{result.victor.colorize(result.victor.display_name)} wins in "
            f"{result.turns} turns!"
        )
    if result.xp_awarded:
        cprint(f"XP awarded: {result.xp_awarded}, gold: {result.gold_awarded}")
    for level_up in result.level_ups:
        skills = f" (learned: {', '.join(level_up.new_skills)})" if level_up.new_skills else ""
        cprint(
            f"  {level_up.character_id}: level {level_up.old_level} -> "
            f"{level_up.new_level}{skills}"
        )


if __name__ == "__main__":
    main()
