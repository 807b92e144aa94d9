"""logic/worldgen/interiors.py — Building interiors behind town doors."""

from __future__ import annotations

from core.constants import Tile
from core.registry import GameMap, MapKind, Biome
from core.tiles import TileGrid
from core.tuning import get as _tun
from components.entities import Portal, Station, StationKind, Container, new_id


def generate_interior(map_id: str, parent_id: str, door: tuple[int, int]) -> GameMap:
    """Walled plank room with a bed, a chest and an exit door.

    The exit sits in the bottom wall and leads to the tile just south of
    the door the player came through.
    """
    w = int(_tun("interior", "w", 10))
    h = int(_tun("interior", "h", 8))
    grid = TileGrid(w, h, fill=Tile.PLANK)
    for x in range(w):
        grid.set_base(x, 0, Tile.WALL)
        grid.set_base(x, h - 1, Tile.WALL)
    for y in range(h):
        grid.set_base(0, y, Tile.WALL)
        grid.set_base(w - 1, y, Tile.WALL)

    exit_x = w // 2
    grid.set_base(exit_x, h - 1, Tile.PLANK)

    gm = GameMap(id=map_id, name="House", kind=MapKind.INTERIOR, biome=Biome.INTERIOR,
                 tiles=grid, parent_id=parent_id, entry=door)
    gm.add(Portal(id=new_id("exit"), name="Exit", x=exit_x, y=h - 1,
                  dest_map=parent_id, dest_x=door[0], dest_y=door[1] + 1))
    gm.add(Station(id=new_id("bed"), name="Bed", x=2, y=2, station=StationKind.BED))
    gm.add(Container(id=new_id("chest"), name="Chest", x=w - 3, y=2,
                     loot_table="house_chest"))
    print(f"[WORLDGEN] interior {map_id} ({w}×{h})")
    return gm
