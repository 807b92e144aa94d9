"""logic.worldgen — Procedural maps: overworld layout, zones, dungeons, interiors."""

from __future__ import annotations
import random

from core.constants import Tile, BLOCKED_TILES, ENTRANCE_TILES
from core.registry import GameMap


def is_open(gm: GameMap, x: int, y: int) -> bool:
    """Walkable terrain with no entity on it."""
    t = gm.tiles.get(x, y)
    return (t is not None and t not in BLOCKED_TILES and t not in ENTRANCE_TILES
            and t != Tile.STAIRS_UP and gm.entity_at(x, y) is None)


def free_cells(gm: GameMap, margin: int = 2,
               avoid: set[tuple[int, int]] | None = None) -> list[tuple[int, int]]:
    """Open cells at least *margin* tiles from the map edge."""
    avoid = avoid or set()
    out = []
    for y in range(margin, gm.height - margin):
        for x in range(margin, gm.width - margin):
            if (x, y) not in avoid and is_open(gm, x, y):
                out.append((x, y))
    return out


def take_cell(cells: list[tuple[int, int]]) -> tuple[int, int] | None:
    """Pop a random cell from *cells* (None when exhausted)."""
    if not cells:
        return None
    return cells.pop(random.randrange(len(cells)))
