"""logic/combat — Combat subpackage.

Modules
-------
resolver  — CombatResolver: player attack damage, crits, multi-hit
rewards   — resolve_kill(): removal, bestiary, quests, XP/gold/loot,
            boss key and world tier

Public symbols are re-exported here for ``from logic.combat import X``.
"""

from logic.combat.resolver import CombatResolver, AttackResult   # noqa: F401
from logic.combat.rewards import resolve_kill                    # noqa: F401
