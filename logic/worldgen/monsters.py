"""logic/worldgen/monsters.py — Build Enemy entities from templates.

Shared by zone population, dungeon population and spawners so every
creature gets its stats from the same scaling formulas.
"""

from __future__ import annotations
import math
import random

from components.entities import Enemy, AiType, new_id
from core.content import Content, MonsterTemplate
from core.tuning import get as _tun
from logic import scaling


def build_enemy(tmpl: MonsterTemplate, level: int, x: int, y: int, *,
                name: str = "", elite: bool = False, boss: bool = False,
                tier: int = 0, spawned: bool = False,
                aggro_bonus: int = 0) -> Enemy:
    hp = scaling.hp(tmpl.base_hp, level, elite=elite, boss=boss, tier=tier)
    aggro = int(_tun("ai", "default_aggro", 5)) + aggro_bonus
    if boss:
        aggro += int(_tun("dungeon", "boss_aggro_bonus", 3))
    return Enemy(
        id=new_id("boss" if boss else "enemy"),
        name=name or tmpl.name,
        x=x, y=y,
        hp=hp, max_hp=hp, level=max(1, level),
        template=tmpl.name,
        ai=AiType(tmpl.ai),
        aggro_range=aggro,
        attack_range=max(1, tmpl.attack_range),
        is_boss=boss, is_elite=elite, is_spawned=spawned,
    )


def roll_wild_enemy(content: Content, difficulty: int, level_mod: float,
                    x: int, y: int) -> Enemy | None:
    """A zone enemy: jittered level, level-gated base, optional prefix."""
    level = max(1, math.floor(difficulty * level_mod + random.random() * 4 - 2))
    pool = content.pool_for_level(level)
    if not pool:
        return None
    base = random.choice(pool)
    tmpl = content.monster(base)
    if tmpl is None:
        print(f"[WORLDGEN] no template for {base!r}, enemy skipped")
        return None

    prefix = ""
    if content.monster_prefixes and random.random() < float(_tun("zone", "prefix_chance", 0.5)):
        prefix = random.choice(content.monster_prefixes)
    big = {str(p) for p in _tun("zone", "wide_aggro_prefixes", ["Giant", "King"])}
    return build_enemy(
        tmpl, level, x, y,
        name=f"{prefix} {base}".strip(),
        elite=prefix in content.elite_prefixes,
        aggro_bonus=3 if prefix in big else 0,
    )
