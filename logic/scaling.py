"""logic/scaling.py — Exponential level / difficulty growth.

One growth factor (``[scaling] growth``, default 1.15) drives every
creature on every map: wild enemies, spawner summons, dungeon mobs and
bosses.  Relative power therefore depends only on level, whatever the
context.

    hp(15, 3)                      → floor(15 * 1.15**3) = 22
    hp(15, 3, boss=True, tier=2)   → floor(15 * 1.15**3 * 1.5 * 2.0)

All functions are pure and read tuning values at call time.
"""

from __future__ import annotations
import math

from core.tuning import get as _tun


def growth() -> float:
    return float(_tun("scaling", "growth", 1.15))


def world_tier_mult(tier: int) -> float:
    """``1 + tier * step`` (step 0.5 by default)."""
    return 1.0 + max(0, tier) * float(_tun("scaling", "world_tier_step", 0.5))


def boss_mult() -> float:
    return float(_tun("scaling", "boss_mult", 1.5))


def elite_mult() -> float:
    return float(_tun("scaling", "elite_mult", 1.5))


def hp(base_hp: float, level: int, *, elite: bool = False,
       boss: bool = False, tier: int = 0) -> int:
    value = base_hp * growth() ** level
    if elite:
        value *= elite_mult()
    if boss:
        value *= boss_mult()
    if tier:
        value *= world_tier_mult(tier)
    return max(1, math.floor(value))


def dmg(base_dmg: float, level: int) -> int:
    return max(1, math.floor(base_dmg * growth() ** level))


def xp(xp_mod: float, level: int) -> int:
    """Kill XP: ``floor(xp_mod * xp_constant * growth**level)``."""
    const = float(_tun("scaling", "xp_constant", 50))
    return math.floor(xp_mod * const * growth() ** level)


def gold(xp_mod: float, level: int, roll: float) -> int:
    """Kill gold; *roll* in [0, 1) widens it to 50–150 % of the base."""
    const = float(_tun("scaling", "gold_constant", 10))
    return math.floor(const * xp_mod * growth() ** level * (0.5 + roll))


def xp_to_next_level(level: int) -> int:
    """Player XP needed to leave *level*."""
    return math.floor(100 * growth() ** level)


def skill_level(skill_xp: int) -> int:
    """Gathering / crafting skill level from accumulated XP (1.12 curve)."""
    return max(1, math.floor(math.log(max(skill_xp, 10) / 10) / math.log(1.12)) + 1)
