"""logic/ai/spawners.py — Mob spawner readiness and summoning.

Spawners charge one tick per committed turn on the active map and stay
frozen while the player is elsewhere.  When the charge reaches
``[spawner] cooldown_ticks`` and a free 4-neighbor exists, the spawner
summons one "Spawned <type>" enemy (reduced rewards) and starts over.
"""

from __future__ import annotations

from core.constants import BLOCKED_TILES, ENTRANCE_TILES, Tile
from core.content import Content
from core.registry import GameMap
from core.tuning import get as _tun
from components.entities import MobSpawner, Enemy
from components.world_state import WorldState
from logic.worldgen.monsters import build_enemy

_NEIGHBORS = ((0, -1), (0, 1), (-1, 0), (1, 0))


def free_neighbor(gm: GameMap, sp: MobSpawner,
                  player: tuple[int, int]) -> tuple[int, int] | None:
    for dx, dy in _NEIGHBORS:
        x, y = sp.x + dx, sp.y + dy
        t = gm.tiles.get(x, y)
        if t is None or t in BLOCKED_TILES or t in ENTRANCE_TILES or t == Tile.STAIRS_UP:
            continue
        if (x, y) == player or gm.entity_at(x, y) is not None:
            continue
        return (x, y)
    return None


def process_spawners(gm: GameMap, state: WorldState, content: Content) -> list[Enemy]:
    """Advance every spawner on *gm* by one tick; return newly spawned enemies."""
    cooldown = int(_tun("spawner", "cooldown_ticks", 30))
    spawned: list[Enemy] = []
    for sp in gm.spawners():
        sp.elapsed += 1
        if sp.elapsed < cooldown:
            continue
        cell = free_neighbor(gm, sp, state.pos)
        if cell is None:
            continue
        tmpl = content.monster(sp.spawn_type)
        if tmpl is None:
            print(f"[SPAWNER] {sp.id}: unknown type {sp.spawn_type!r}")
            continue
        enemy = gm.add(build_enemy(tmpl, sp.level, *cell,
                                   name=f"Spawned {tmpl.name}", spawned=True))
        sp.elapsed = 0
        spawned.append(enemy)
        state.message("spawner", f"A {enemy.name} crawls out of the spawner.")
        print(f"[SPAWNER] {sp.id} → {enemy.name} at {cell} (tick {state.tick})")
    return spawned
