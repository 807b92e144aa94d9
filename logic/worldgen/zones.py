"""logic/worldgen/zones.py — Overworld zone maps.

``generate_zone_map(id, biome, difficulty, is_town, content)`` builds one
20×15 zone:

  1. Biome-weighted random terrain, with a two-tile border forced clear.
  2. Border gates: each edge that has a neighbor gets a dirt-path gate
     (radius 2 around the edge centre); edges without one become wall.
  3. Towns get a fixed layout: path cross, plaza, shrine, NPCs, crafting
     stations and a house door leading to an interior.
  4. Wild zones get fishing spots on water, a difficulty-scaled pack of
     enemies, maybe a crate, a dungeon entrance and a mob spawner.
"""

from __future__ import annotations
import random

from core.constants import Tile
from core.content import Content
from core.registry import GameMap, MapKind, Biome
from core.tiles import TileGrid
from core.tuning import get as _tun
from components.entities import (
    Npc, Station, StationKind, Crate, Portal, MobSpawner, new_id,
)
from logic import scaling
from logic.worldgen import free_cells, take_cell
from logic.worldgen.monsters import roll_wild_enemy


GROUND: dict[Biome, Tile] = {
    Biome.GRASS: Tile.GRASS,
    Biome.SNOW: Tile.SNOW,
    Biome.DESERT: Tile.SAND,
}

LEVEL_MOD: dict[Biome, float] = {
    Biome.GRASS: 1.0,
    Biome.SNOW: 1.2,
    Biome.DESERT: 1.5,
}

ENTRANCE_FOR_BIOME: dict[Biome, tuple[Tile, ...]] = {
    Biome.GRASS: (Tile.CAVE_ENTRANCE, Tile.CRYPT_ENTRANCE),
    Biome.SNOW: (Tile.CRYPT_ENTRANCE, Tile.CAVE_ENTRANCE),
    Biome.DESERT: (Tile.MAGMA_ENTRANCE,),
}


def _terrain(biome: Biome, r: float) -> Tile:
    """Biome-weighted tile for one uniform roll *r*."""
    if biome == Biome.DESERT:
        if r > 0.98:
            return Tile.CACTUS
        if r > 0.96:
            return Tile.ROCK
        return Tile.SAND
    if biome == Biome.SNOW:
        if r > 0.90:
            return Tile.PINE_TREE
        if r > 0.87:
            return Tile.ROCK
        return Tile.SNOW
    if r > 0.85:
        return random.choice((Tile.OAK_TREE, Tile.BIRCH_TREE))
    if r > 0.82:
        return Tile.ROCK
    if r > 0.78:
        return Tile.FLOWER
    return Tile.GRASS


def generate_zone_map(map_id: str, biome: Biome, difficulty: int, is_town: bool,
                      content: Content, *, name: str = "",
                      neighbors: dict[str, str] | None = None) -> GameMap:
    w = int(_tun("world", "zone_w", 20))
    h = int(_tun("world", "zone_h", 15))
    ground = GROUND.get(biome, Tile.GRASS)
    grid = TileGrid(w, h, fill=ground)

    for y in range(h):
        for x in range(w):
            edge = x <= 1 or x >= w - 2 or y <= 1 or y >= h - 2
            grid.set_base(x, y, ground if (edge or is_town) else _terrain(biome, random.random()))

    gm = GameMap(
        id=map_id, name=name or map_id, kind=MapKind.ZONE, biome=biome,
        tiles=grid, difficulty=difficulty, neighbors=dict(neighbors or {}),
        is_town=is_town,
    )

    if not is_town and biome != Biome.DESERT and random.random() < float(_tun("zone", "pond_chance", 0.3)):
        _place_pond(gm)

    _border_gates(gm)

    if is_town:
        _build_town(gm)
    else:
        _populate_wild(gm, content)

    print(f"[WORLDGEN] {map_id} ({biome.value}, d={difficulty}"
          f"{', town' if is_town else ''}): {len(gm.entities)} entities")
    return gm


# ── Terrain features ─────────────────────────────────────────────────

def _place_pond(gm: GameMap) -> None:
    pw, ph = random.randint(2, 4), random.randint(2, 3)
    x0 = random.randint(3, gm.width - 4 - pw)
    y0 = random.randint(3, gm.height - 4 - ph)
    gm.tiles.fill_rect(x0, y0, x0 + pw - 1, y0 + ph - 1, Tile.WATER)


def _border_gates(gm: GameMap) -> None:
    w, h = gm.width, gm.height
    radius = int(_tun("world", "gate_radius", 2))
    cx, cy = w // 2, h // 2
    edges = {
        "north": [(x, 0) for x in range(w)],
        "south": [(x, h - 1) for x in range(w)],
        "west": [(0, y) for y in range(h)],
        "east": [(w - 1, y) for y in range(h)],
    }
    for edge, cells in edges.items():
        if edge not in gm.neighbors:
            for x, y in cells:
                gm.tiles.set_base(x, y, Tile.WALL)

    for edge, cells in edges.items():
        if edge not in gm.neighbors:
            continue
        for x, y in cells:
            along = x if edge in ("north", "south") else y
            centre = cx if edge in ("north", "south") else cy
            if abs(along - centre) <= radius and gm.tiles.get(x, y) != Tile.WALL:
                gm.tiles.set_base(x, y, Tile.DIRT_PATH)


# ── Towns ────────────────────────────────────────────────────────────

def _build_town(gm: GameMap) -> None:
    w, h = gm.width, gm.height
    cx, cy = w // 2, h // 2
    for x in range(1, w - 1):
        gm.tiles.set_base(x, cy, Tile.DIRT_PATH)
    for y in range(1, h - 1):
        gm.tiles.set_base(cx, y, Tile.DIRT_PATH)
    gm.tiles.fill_rect(cx - 1, cy - 1, cx + 1, cy + 1, Tile.DIRT_PATH)
    gm.tiles.set_base(cx, cy, Tile.SHRINE)

    # House in the north-west block; the door cell stays walkable.
    gm.tiles.fill_rect(2, 2, 6, 4, Tile.WALL)
    door = (4, 4)
    gm.tiles.set_base(*door, Tile.PLANK)
    gm.add(Portal(id=new_id("door"), name="House Door", x=door[0], y=door[1],
                  dest_map=f"interior_{gm.id}_{door[0]}_{door[1]}",
                  dest_x=int(_tun("interior", "w", 10)) // 2, dest_y=int(_tun("interior", "h", 8)) - 2))

    gm.add(Npc(id="mayor", name="Mayor", x=cx, y=cy - 1, role="mayor",
               line="Welcome, traveller. The rats have been bad lately.",
               quest_id="rat_catcher"))
    gm.add(Npc(id="merchant", name="Merchant", x=cx + 2, y=cy + 1, role="merchant",
               line="Finest goods this side of the dunes."))
    gm.add(Station(id=new_id("anvil"), name="Anvil", x=cx - 2, y=cy + 1,
                   station=StationKind.ANVIL))
    gm.add(Station(id=new_id("workbench"), name="Workbench", x=cx - 2, y=cy + 3,
                   station=StationKind.WORKBENCH))
    gm.add(Station(id=new_id("sign"), name="Signpost", x=cx + 2, y=cy - 2,
                   station=StationKind.SIGNPOST,
                   text=f"{gm.name}. Snow to the north, desert to the south."))


# ── Wild zones ───────────────────────────────────────────────────────

def _populate_wild(gm: GameMap, content: Content) -> None:
    diff = gm.difficulty

    for x, y in gm.tiles.find(Tile.WATER):
        if random.random() < float(_tun("zone", "fishing_chance", 0.3)):
            gm.add(Station(id=new_id("fish"), name="Fishing Spot", x=x, y=y,
                           station=StationKind.FISHING_SPOT))

    cells = free_cells(gm)

    if random.random() < float(_tun("zone", "entrance_chance", 0.1)):
        cell = take_cell(cells)
        if cell is not None:
            tile = random.choice(ENTRANCE_FOR_BIOME.get(gm.biome, (Tile.CAVE_ENTRANCE,)))
            gm.tiles.set_base(*cell, tile)

    count = min(int(_tun("zone", "enemy_cap", 8)),
                int(_tun("zone", "enemy_base", 2)) + diff // 2)
    level_mod = LEVEL_MOD.get(gm.biome, 1.0)
    for _ in range(count):
        cell = take_cell(cells)
        if cell is None:
            break
        enemy = roll_wild_enemy(content, diff, level_mod, *cell)
        if enemy is not None:
            gm.add(enemy)

    if random.random() < float(_tun("zone", "crate_chance", 0.4)):
        cell = take_cell(cells)
        if cell is not None:
            gm.add(Crate(id=new_id("crate"), name="Crate", x=cell[0], y=cell[1],
                         level=max(1, diff)))

    if diff >= int(_tun("zone", "spawner_min_difficulty", 3)) and \
            random.random() < float(_tun("zone", "spawner_chance", 0.05)):
        cell = take_cell(cells)
        pool = content.pool_for_level(diff)
        if cell is not None and pool:
            level = max(1, diff)
            hp = scaling.hp(float(_tun("spawner", "base_hp", 50)), level)
            gm.add(MobSpawner(id=new_id("spawner"), name="Mob Spawner",
                              x=cell[0], y=cell[1], hp=hp, max_hp=hp, level=level,
                              spawn_type=random.choice(pool)))
