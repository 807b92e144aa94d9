"""logic/ai/perception.py — Grid line of sight and distance helpers."""

from __future__ import annotations

from core.constants import OPAQUE_TILES
from core.tiles import TileGrid


def manhattan(ax: int, ay: int, bx: int, by: int) -> int:
    return abs(ax - bx) + abs(ay - by)


def bresenham(x1: int, y1: int, x2: int, y2: int) -> list[tuple[int, int]]:
    """Grid cells on the line from (x1, y1) to (x2, y2), both ends included."""
    cells = []
    dx, dy = abs(x2 - x1), abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy
    x, y = x1, y1
    while True:
        cells.append((x, y))
        if x == x2 and y == y2:
            return cells
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def has_line_of_sight(tiles: TileGrid, x1: int, y1: int, x2: int, y2: int) -> bool:
    """True if no opaque tile lies strictly between the two cells.

    The ray stops at the first opaque cell.  The endpoints themselves are
    never tested, so a target standing in a doorway or on a tree tile is
    still visible.
    """
    for x, y in bresenham(x1, y1, x2, y2)[1:-1]:
        t = tiles.get(x, y)
        if t is None or t in OPAQUE_TILES:
            return False
    return True
