"""logic/combat/resolver.py — Player attacks on enemies and spawners.

Damage model (the only one in the game)::

    damage = floor(min_dmg + uniform(0, max_dmg - min_dmg) + stat)
    crit   = Bernoulli(crit_chance) → floor(damage * crit_mult)

``stat`` is STR, DEX or INT depending on the equipped weapon's category
(``[categories]`` in ``data/weapons.toml``).  Attacks always land; there
is no separate accuracy or defense roll.  Weapons with a multi-hit
chance may strike a second time with an independent roll.  Without a
weapon the player punches with ``[combat] unarmed_*`` stats.
"""

from __future__ import annotations
import math
import random
from dataclasses import dataclass

from core.content import Content
from core.registry import WorldRegistry, GameMap
from core.tuning import get as _tun
from components.entities import Combatant
from components.items import WeaponStats
from components.world_state import WorldState
from logic.loot_generator import LootGenerator
from logic.loot_tables import LootTableManager
from logic.combat.rewards import resolve_kill


@dataclass
class AttackResult:
    damage: int = 0
    crit: bool = False
    hits: int = 1
    killed: bool = False


class CombatResolver:
    def __init__(self, registry: WorldRegistry, state: WorldState, content: Content,
                 loot: LootGenerator, tables: LootTableManager):
        self.registry = registry
        self.state = state
        self.content = content
        self.loot = loot
        self.tables = tables

    def weapon(self) -> WeaponStats:
        w = self.state.weapon()
        if w is not None:
            return w
        return WeaponStats(
            category=str(_tun("combat", "unarmed_category", "mace")),
            min_dmg=int(_tun("combat", "unarmed_min", 1)),
            max_dmg=int(_tun("combat", "unarmed_max", 3)),
            crit_chance=float(_tun("combat", "unarmed_crit", 0.05)),
            crit_mult=1.5,
        )

    def roll_damage(self, w: WeaponStats | None = None) -> tuple[int, bool]:
        """One hit: ``(damage, is_crit)``.  Never negative."""
        w = w or self.weapon()
        spread = max(0, w.max_dmg - w.min_dmg)
        stat = self.state.stat(self.content.stat_for_category(w.category))
        dmg = max(0, math.floor(w.min_dmg + random.uniform(0, spread) + stat))
        crit = random.random() < w.crit_chance
        if crit:
            dmg = math.floor(dmg * w.crit_mult)
        return dmg, crit

    def attack(self, gm: GameMap, target: Combatant) -> AttackResult:
        st = self.state
        w = self.weapon()
        dmg, crit = self.roll_damage(w)
        result = AttackResult(damage=dmg, crit=crit)
        if w.multi_hit_chance > 0 and random.random() < w.multi_hit_chance:
            extra, extra_crit = self.roll_damage(w)
            result.damage += extra
            result.crit = result.crit or extra_crit
            result.hits = 2

        target.set_hp(target.hp - result.damage)
        st.anims["player"] = "attack"
        st.anims[target.id] = "hurt"
        st.bump("damage_dealt", result.damage)
        word = "CRIT " if result.crit else ""
        st.message("combat", f"You {word}hit {target.name} for {result.damage}!",
                   damage=result.damage, crit=result.crit, hits=result.hits)

        if target.dead:
            result.killed = resolve_kill(self, gm, target)
        return result
