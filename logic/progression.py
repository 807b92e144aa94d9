"""logic/progression.py — Player XP, levels and skill XP."""

from __future__ import annotations

from core.tuning import get as _tun
from components.world_state import WorldState
from logic import scaling


def grant_xp(state: WorldState, amount: int) -> int:
    """Add XP and apply any level-ups.  Returns levels gained."""
    st = state.stats
    st.xp += max(0, int(amount))
    gained = 0
    while st.xp >= scaling.xp_to_next_level(st.level):
        st.xp -= scaling.xp_to_next_level(st.level)
        st.level += 1
        gained += 1
        st.max_hp += int(_tun("progression", "hp_per_level", 10))
        st.str += int(_tun("progression", "stat_per_level", 1))
        st.dex += int(_tun("progression", "stat_per_level", 1))
        st.int += int(_tun("progression", "stat_per_level", 1))
        st.hp = st.max_hp
    if gained:
        state.message("level", f"Level up! You are now level {st.level}.")
        print(f"[LEVEL] player reached level {st.level}")
    return gained


def grant_skill_xp(state: WorldState, skill: str, amount: int) -> bool:
    """Add skill XP; returns True if the skill level went up."""
    before = scaling.skill_level(state.skills.get(skill, 0))
    state.skills[skill] = state.skills.get(skill, 0) + amount
    after = scaling.skill_level(state.skills[skill])
    if after > before:
        state.message("skill", f"{skill} is now level {after}.")
        return True
    return False
