"""logic/worldgen/dungeons.py — Drunkard's-walk dungeons.

``generate_dungeon`` carves an all-wall grid with a bounded random walk
from the centre until it has enough floor or runs out of steps.  The
walk's start gets the stairs up and a return portal; its last cell is
the boss room (a forced-clear 3×3) holding the boss and a locked chest
that opens with the boss's key.

Enemy level floor::

    max(ceil(zone_difficulty * 1.5), player_level + 1) + world_tier * tier_levels

Decor never goes on floor cells that could cut the walk: walkable decor
(bones, moss) sits on floor, blocking decor (tombstones, rocks, lava,
obsidian) replaces wall cells that touch floor.
"""

from __future__ import annotations
import math
import random

from core.constants import Tile
from core.content import Content
from core.registry import GameMap, MapKind, Biome
from core.tiles import TileGrid
from core.tuning import get as _tun
from components.entities import Portal, Container, ContainerState, new_id
from logic.worldgen.monsters import build_enemy


KIND_BIOME: dict[str, Biome] = {
    "crypt": Biome.CRYPT,
    "cave": Biome.CAVE,
    "magma": Biome.MAGMA,
}

FLOOR_DECOR: dict[str, Tile] = {
    "crypt": Tile.BONES,
    "cave": Tile.MOSS,
}

WALL_DECOR: dict[str, tuple[Tile, ...]] = {
    "crypt": (Tile.TOMBSTONE,),
    "cave": (Tile.ROCK,),
    "magma": (Tile.LAVA, Tile.OBSIDIAN),
}


def dungeon_id(parent_id: str, x: int, y: int) -> str:
    return f"dungeon_{parent_id}_{x}_{y}"


def level_floor(zone_difficulty: int, player_level: int, world_tier: int) -> int:
    base = max(math.ceil(zone_difficulty * 1.5), player_level + 1)
    return base + world_tier * int(_tun("dungeon", "tier_levels", 5))


def _carve(grid: TileGrid) -> tuple[list[tuple[int, int]], tuple[int, int], tuple[int, int]]:
    """Random walk inside the 1-tile wall border.

    Returns ``(floor_cells_in_carve_order, start, end)``.
    """
    w, h = grid.width, grid.height
    target = min(int(_tun("dungeon", "floor_target", 220)), (w - 2) * (h - 2))
    budget = int(_tun("dungeon", "step_budget", 4000))

    x, y = w // 2, h // 2
    start = (x, y)
    grid.set_base(x, y, Tile.FLOOR)
    carved = [start]
    seen = {start}
    steps = 0
    while len(carved) < target and steps < budget:
        dx, dy = random.choice(((1, 0), (-1, 0), (0, 1), (0, -1)))
        x = min(w - 2, max(1, x + dx))
        y = min(h - 2, max(1, y + dy))
        steps += 1
        if (x, y) not in seen:
            seen.add((x, y))
            carved.append((x, y))
            grid.set_base(x, y, Tile.FLOOR)
    return carved, start, (x, y)


def generate_dungeon(map_id: str, zone_difficulty: int, kind: str, parent_id: str,
                     entry_pos: tuple[int, int], player_level: int, world_tier: int,
                     content: Content) -> GameMap:
    w = int(_tun("dungeon", "w", 30))
    h = int(_tun("dungeon", "h", 30))
    grid = TileGrid(w, h, fill=Tile.WALL)
    carved, start, end = _carve(grid)

    kdef = content.dungeons.get(kind)
    gm = GameMap(
        id=map_id, name=kdef.name if kdef else "Dungeon", kind=MapKind.DUNGEON,
        biome=KIND_BIOME.get(kind, Biome.CAVE), tiles=grid,
        difficulty=zone_difficulty, parent_id=parent_id, entry=entry_pos,
    )

    # ── Entrance ──
    grid.set_base(*start, Tile.STAIRS_UP)
    gm.add(Portal(id=new_id("exit"), name="Stairs Up", x=start[0], y=start[1],
                  dest_map=parent_id, dest_x=entry_pos[0], dest_y=entry_pos[1]))

    # ── Boss room ──
    ex, ey = end
    room = []
    for y in range(max(1, ey - 1), min(h - 2, ey + 1) + 1):
        for x in range(max(1, ex - 1), min(w - 2, ex + 1) + 1):
            if (x, y) != start:
                grid.set_base(x, y, Tile.FLOOR)
                room.append((x, y))

    floor_lvl = level_floor(zone_difficulty, player_level, world_tier)
    boss_name = kdef.boss if kdef else "Ogre"
    boss_tmpl = content.monster(boss_name)
    if end != start and boss_tmpl is not None:
        gm.add(build_enemy(boss_tmpl, floor_lvl + 2, ex, ey, boss=True, tier=world_tier))
    else:
        print(f"[DUNGEON] {map_id}: no boss placed (template {boss_name!r})")

    chest_cell = next((c for c in room if c != end), None)
    if chest_cell is not None:
        gm.add(Container(id=new_id("boss_chest"), name="Boss Chest",
                         x=chest_cell[0], y=chest_cell[1],
                         state=ContainerState.LOCKED, key_id="boss_key",
                         loot_table="boss_chest", level=floor_lvl))

    # ── Decor and enemies ──
    protected = set(room) | {
        (start[0] + dx, start[1] + dy) for dx in range(-2, 3) for dy in range(-2, 3)
    }
    decor_chance = float(_tun("dungeon", "decor_chance", 0.06))
    enemy_chance = float(_tun("dungeon", "enemy_chance", 0.04))
    max_enemies = int(_tun("dungeon", "max_enemies", 12))
    pool = [n for n in (kdef.enemies if kdef else []) if content.monster(n)]
    enemies = 0
    for x, y in carved:
        if (x, y) in protected or gm.entity_at(x, y) is not None:
            continue
        r = random.random()
        if r < decor_chance:
            if kind in FLOOR_DECOR:
                grid.set_base(x, y, FLOOR_DECOR[kind])
        elif r < decor_chance + enemy_chance and pool and enemies < max_enemies:
            name = random.choice(pool)
            level = floor_lvl + random.randint(0, 2)
            gm.add(build_enemy(content.monster(name), level, x, y, tier=world_tier))
            enemies += 1

    wall_decor = WALL_DECOR.get(kind, ())
    if wall_decor:
        for y in range(1, h - 1):
            for x in range(1, w - 1):
                if grid.base(x, y) != Tile.WALL:
                    continue
                touches_floor = any(
                    grid.base(x + dx, y + dy) not in (Tile.WALL, None)
                    for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1))
                )
                if touches_floor and random.random() < decor_chance:
                    grid.set_base(x, y, random.choice(wall_decor))

    print(f"[DUNGEON] {map_id} ({kind}) floor={len(carved)} lvl>={floor_lvl} "
          f"enemies={enemies} boss_at={end}")
    return gm
