"""core/constants.py — Shared constants used across the codebase.

Centralises tile identities and tile groupings so there's exactly one
place to change them.

Unit System
-----------
Everything is measured in **tiles** on an integer grid.  ``x`` grows
east, ``y`` grows south.  Map ``(0, 0)`` is the north-west corner.

Time is measured in **ticks**: one tick per committed player turn.
Nothing in the simulation reads the wall clock, so a seeded run is
fully reproducible.

Grid access is always ``grid[y][x]`` (row-major).
"""

from __future__ import annotations
from enum import IntEnum


# ═══════════════════════════════════════════════════════════════════
#  Tiles
# ═══════════════════════════════════════════════════════════════════

class Tile(IntEnum):
    """Terrain tag for one grid cell.

    IntEnum so grids serialize as plain ints (NBT byte arrays, JSON).
    """
    VOID = 0
    GRASS = 1
    DIRT_PATH = 2
    SAND = 3
    SNOW = 4
    WATER = 5
    LAVA = 6
    WALL = 7
    FLOOR = 8
    PLANK = 9
    FLOWER = 10
    OAK_TREE = 11
    BIRCH_TREE = 12
    PINE_TREE = 13
    CACTUS = 14
    ROCK = 15
    STUMP = 16
    SHRINE = 17
    STAIRS_UP = 18
    CRYPT_ENTRANCE = 19
    CAVE_ENTRANCE = 20
    MAGMA_ENTRANCE = 21
    BONES = 22
    TOMBSTONE = 23
    MOSS = 24
    OBSIDIAN = 25


TREE_TILES = frozenset({Tile.OAK_TREE, Tile.BIRCH_TREE, Tile.PINE_TREE})
ROCK_TILES = frozenset({Tile.ROCK})
HARVESTABLE_TILES = TREE_TILES | ROCK_TILES

# Terrain a walker cannot enter.  Harvestables are blocking too; the
# movement resolver checks them before the generic block rule.
BLOCKED_TILES = frozenset({
    Tile.VOID, Tile.WALL, Tile.WATER, Tile.LAVA, Tile.CACTUS,
    Tile.TOMBSTONE, Tile.OBSIDIAN,
}) | HARVESTABLE_TILES

# Tiles that stop a line-of-sight ray.  Water and lava are see-through.
OPAQUE_TILES = frozenset({
    Tile.VOID, Tile.WALL, Tile.TOMBSTONE, Tile.OBSIDIAN,
}) | HARVESTABLE_TILES

PATH_TILES = frozenset({Tile.DIRT_PATH})

# What a harvested tile turns into in the depletion overlay.
DEPLETED_FORM: dict[Tile, Tile] = {
    Tile.OAK_TREE: Tile.STUMP,
    Tile.BIRCH_TREE: Tile.STUMP,
    Tile.PINE_TREE: Tile.STUMP,
    Tile.ROCK: Tile.FLOOR,
}


# ═══════════════════════════════════════════════════════════════════
#  Dungeons
# ═══════════════════════════════════════════════════════════════════

ENTRANCE_KINDS: dict[Tile, str] = {
    Tile.CRYPT_ENTRANCE: "crypt",
    Tile.CAVE_ENTRANCE: "cave",
    Tile.MAGMA_ENTRANCE: "magma",
}
ENTRANCE_TILES = frozenset(ENTRANCE_KINDS)


# ═══════════════════════════════════════════════════════════════════
#  Directions
# ═══════════════════════════════════════════════════════════════════

DIRECTIONS: dict[str, tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}

# Neighbor-link keys used by overworld zones.
EDGE_FOR_DELTA: dict[tuple[int, int], str] = {
    (0, -1): "north",
    (0, 1): "south",
    (-1, 0): "west",
    (1, 0): "east",
}


def facing_for(dx: int, dy: int, current: str = "down") -> str:
    """Facing name for a move delta; horizontal wins ties."""
    if dx > 0:
        return "right"
    if dx < 0:
        return "left"
    if dy > 0:
        return "down"
    if dy < 0:
        return "up"
    return current


# ═══════════════════════════════════════════════════════════════════
#  Rendering (debug viewer only)
# ═══════════════════════════════════════════════════════════════════

TILE_SIZE = 24   # px per tile in the viewer

TILE_COLORS: dict[Tile, tuple[int, int, int]] = {
    Tile.VOID: (0, 0, 0),
    Tile.GRASS: (60, 130, 50),
    Tile.DIRT_PATH: (140, 110, 70),
    Tile.SAND: (210, 190, 120),
    Tile.SNOW: (225, 230, 240),
    Tile.WATER: (40, 80, 170),
    Tile.LAVA: (220, 80, 20),
    Tile.WALL: (70, 70, 75),
    Tile.FLOOR: (110, 105, 100),
    Tile.PLANK: (150, 110, 60),
    Tile.FLOWER: (190, 90, 160),
    Tile.OAK_TREE: (30, 90, 30),
    Tile.BIRCH_TREE: (120, 160, 90),
    Tile.PINE_TREE: (20, 70, 50),
    Tile.CACTUS: (70, 140, 60),
    Tile.ROCK: (120, 120, 120),
    Tile.STUMP: (100, 70, 40),
    Tile.SHRINE: (230, 210, 90),
    Tile.STAIRS_UP: (200, 200, 200),
    Tile.CRYPT_ENTRANCE: (80, 60, 90),
    Tile.CAVE_ENTRANCE: (50, 45, 40),
    Tile.MAGMA_ENTRANCE: (150, 40, 20),
    Tile.BONES: (200, 195, 170),
    Tile.TOMBSTONE: (90, 90, 100),
    Tile.MOSS: (70, 110, 60),
    Tile.OBSIDIAN: (30, 20, 40),
}
