"""logic/ai/enemy_turns.py — One enemy pass per qualifying player turn.

For every living enemy on the active map, against the player's *new*
position:

    in attack range (ranged also needs line of sight)
        → roll to hit: base + level bonus.  Hit deals ``dmg(level)``,
          marks the player "hurt"; a miss marks "dodge".  No move.
    within aggro radius
        → one greedy step: larger-|delta| axis first, other axis if that
          is blocked, else stay.
    otherwise
        → idle.

Distances are Manhattan.  An occupied-cell set is rebuilt at the start
of every pass and updated as enemies move, so two enemies never end a
pass on the same tile.  Spawners are charged separately, once per
committed turn, by the movement resolver.
"""

from __future__ import annotations
import random

from core.constants import BLOCKED_TILES, ENTRANCE_TILES, Tile, facing_for
from core.content import Content
from core.registry import WorldRegistry, GameMap
from core.tuning import get as _tun
from components.entities import Enemy, AiType
from components.world_state import WorldState
from logic import scaling
from logic.ai.perception import manhattan, has_line_of_sight


def _walkable(gm: GameMap, x: int, y: int) -> bool:
    t = gm.tiles.get(x, y)
    return (t is not None and t not in BLOCKED_TILES
            and t not in ENTRANCE_TILES and t != Tile.STAIRS_UP)


class EnemyAIController:
    def __init__(self, registry: WorldRegistry, state: WorldState, content: Content):
        self.registry = registry
        self.state = state
        self.content = content

    # ── Pass ─────────────────────────────────────────────────────────

    def run(self, map_id: str | None = None) -> None:
        gm = self.registry.get(map_id or self.state.map_id)
        if gm is None:
            return
        st = self.state
        occupied = {e.pos for e in gm.entities}
        occupied.add(st.pos)

        for enemy in gm.enemies():
            if st.dead:
                break
            if enemy.dead:
                continue
            occupied.discard(enemy.pos)
            if self._in_attack_range(gm, enemy):
                self._attack(enemy)
            elif manhattan(enemy.x, enemy.y, st.x, st.y) <= enemy.aggro_range:
                self._step_toward(gm, enemy, occupied)
            occupied.add(enemy.pos)

    # ── Decisions ────────────────────────────────────────────────────

    def _in_attack_range(self, gm: GameMap, enemy: Enemy) -> bool:
        st = self.state
        dist = manhattan(enemy.x, enemy.y, st.x, st.y)
        if dist > enemy.attack_range:
            return False
        if enemy.ai == AiType.RANGED and dist > 1:
            return has_line_of_sight(gm.tiles, enemy.x, enemy.y, st.x, st.y)
        return True

    def hit_chance(self, enemy: Enemy) -> float:
        base = float(_tun("ai", "hit_base", 0.5))
        per_level = float(_tun("ai", "hit_per_level", 0.02))
        cap = float(_tun("ai", "hit_cap", 0.95))
        return min(cap, base + enemy.level * per_level)

    def _attack(self, enemy: Enemy) -> None:
        st = self.state
        enemy.facing = facing_for(st.x - enemy.x, st.y - enemy.y, enemy.facing)
        verb = "shoots" if enemy.ai == AiType.RANGED else "hits"
        st.anims[enemy.id] = "shoot" if enemy.ai == AiType.RANGED else "attack"

        if random.random() >= self.hit_chance(enemy):
            st.anims["player"] = "dodge"
            st.message("combat", f"You dodge {enemy.name}'s attack.")
            return

        tmpl = self.content.template_for(enemy.template or enemy.name)
        base_dmg = tmpl.base_dmg if tmpl is not None else int(_tun("ai", "fallback_dmg", 2))
        dmg = scaling.dmg(base_dmg, enemy.level)
        before = st.stats.hp
        st.set_hp(before - dmg)
        st.bump("damage_taken", before - st.stats.hp)
        st.anims["player"] = "hurt"
        st.message("combat", f"{enemy.name} {verb} you for {dmg}!", damage=dmg)
        if st.dead:
            st.message("combat", f"You were slain by {enemy.name}.")
            print(f"[COMBAT] player killed by {enemy.name} (L{enemy.level})")

    def _step_toward(self, gm: GameMap, enemy: Enemy,
                     occupied: set[tuple[int, int]]) -> None:
        dx = self.state.x - enemy.x
        dy = self.state.y - enemy.y
        sx = (dx > 0) - (dx < 0)
        sy = (dy > 0) - (dy < 0)
        horizontal = (sx, 0)
        vertical = (0, sy)
        order = (horizontal, vertical) if abs(dx) >= abs(dy) else (vertical, horizontal)

        for mx, my in order:
            if mx == 0 and my == 0:
                continue
            nx, ny = enemy.x + mx, enemy.y + my
            if _walkable(gm, nx, ny) and (nx, ny) not in occupied:
                enemy.x, enemy.y = nx, ny
                enemy.facing = facing_for(mx, my, enemy.facing)
                return
