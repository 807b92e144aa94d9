"""logic/worldgen/overworld.py — The overworld cell layout.

``generate_overworld_grid`` decides, for every cell of the overworld,
its biome (latitude bands: north snow, south desert, grass between),
its difficulty (Manhattan distance from the town cell plus a biome
bonus), a display name and its four cardinal neighbor links.  The
layout is cheap and built once; the tile maps themselves are built
lazily by ``ensure_map`` the first time something asks for them.

Map id scheme
-------------
    map_{x}_{y}                    overworld zone at grid cell (x, y)
    dungeon_{parent}_{x}_{y}       dungeon entered at (x, y) of parent
    interior_{parent}_{x}_{y}      building entered through door (x, y)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from core.registry import WorldRegistry, GameMap, Biome
from core.content import Content
from core.tuning import get as _tun
from logic.worldgen import names


@dataclass
class ZoneCell:
    id: str
    gx: int
    gy: int
    biome: Biome
    difficulty: int
    name: str
    is_town: bool = False
    neighbors: dict[str, str] = field(default_factory=dict)


@dataclass
class Overworld:
    width: int
    height: int
    town_id: str
    cells: dict[str, ZoneCell] = field(default_factory=dict)

    def cell(self, map_id: str) -> ZoneCell | None:
        return self.cells.get(map_id)


def zone_id(gx: int, gy: int) -> str:
    return f"map_{gx}_{gy}"


def biome_for_row(gy: int, height: int) -> Biome:
    band = max(1, height // 4)
    if gy < band:
        return Biome.SNOW
    if gy >= height - band:
        return Biome.DESERT
    return Biome.GRASS


def generate_overworld_grid(size_x: int | None = None,
                            size_y: int | None = None) -> Overworld:
    """Lay out every overworld cell and link cardinal neighbors."""
    w = int(size_x if size_x is not None else _tun("world", "grid_w", 20))
    h = int(size_y if size_y is not None else _tun("world", "grid_h", 20))
    if w <= 0 or h <= 0:
        raise ValueError(f"overworld size must be positive, got {w}×{h}")
    tx = min(w - 1, int(_tun("world", "town_x", w // 2)))
    ty = min(h - 1, int(_tun("world", "town_y", h // 2)))
    bonus = _tun("world", "biome_bonus", {})
    bonus = bonus if isinstance(bonus, dict) else {}

    world = Overworld(width=w, height=h, town_id=zone_id(tx, ty))
    for gy in range(h):
        for gx in range(w):
            biome = biome_for_row(gy, h)
            is_town = (gx, gy) == (tx, ty)
            diff = abs(gx - tx) + abs(gy - ty) + int(bonus.get(biome.value, 0))
            cell = ZoneCell(
                id=zone_id(gx, gy), gx=gx, gy=gy, biome=biome,
                difficulty=0 if is_town else diff,
                name=names.town_name() if is_town else names.zone_name(biome.value),
                is_town=is_town,
            )
            world.cells[cell.id] = cell

    for cell in world.cells.values():
        for edge, (dx, dy) in (("north", (0, -1)), ("south", (0, 1)),
                               ("west", (-1, 0)), ("east", (1, 0))):
            nx, ny = cell.gx + dx, cell.gy + dy
            if 0 <= nx < w and 0 <= ny < h:
                cell.neighbors[edge] = zone_id(nx, ny)

    print(f"[WORLDGEN] Overworld {w}×{h}, town {world.town_id}")
    return world


def ensure_map(registry: WorldRegistry, map_id: str, content: Content) -> GameMap | None:
    """Return the live map for *map_id*, generating zones/interiors on demand.

    Dungeons are never built here: they need their entry context and are
    created by the movement resolver.  Unknown ids return ``None``.
    """
    existing = registry.get(map_id)
    if existing is not None:
        return existing

    # Local imports: zones and interiors import this module for ids.
    if map_id.startswith("map_"):
        overworld = registry.overworld
        cell = overworld.cell(map_id) if overworld is not None else None
        if cell is None:
            return None
        from logic.worldgen.zones import generate_zone_map
        return registry.get_or_create(map_id, lambda: generate_zone_map(
            cell.id, cell.biome, cell.difficulty, cell.is_town, content,
            name=cell.name, neighbors=cell.neighbors))

    if map_id.startswith("interior_"):
        parent_id, x, y = _split_child_id(map_id, "interior_")
        if parent_id is None:
            return None
        from logic.worldgen.interiors import generate_interior
        return registry.get_or_create(map_id, lambda: generate_interior(
            map_id, parent_id, (x, y)))

    return None


def _split_child_id(map_id: str, prefix: str) -> tuple[str | None, int, int]:
    """``interior_map_10_10_4_4`` → ``("map_10_10", 4, 4)``."""
    parts = map_id[len(prefix):].rsplit("_", 2)
    if len(parts) != 3 or not parts[1].isdigit() or not parts[2].isdigit():
        return None, 0, 0
    return parts[0], int(parts[1]), int(parts[2])
