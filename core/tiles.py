"""core/tiles.py — Two-layer tile grid.

A ``TileGrid`` holds a fixed-size base terrain layer plus a sparse
depletion overlay keyed by ``(x, y)``.  Harvesting never edits the base
layer; it writes the depleted form into the overlay, so the original
terrain is always recoverable and each cell can be depleted once.

    grid = TileGrid(20, 15, fill=Tile.GRASS)
    grid.set_base(3, 4, Tile.OAK_TREE)
    grid.deplete(3, 4, Tile.STUMP)
    grid.get(3, 4)        # → Tile.STUMP
    grid.base(3, 4)       # → Tile.OAK_TREE

Out-of-bounds reads return ``None``; callers treat that as blocked.
"""

from __future__ import annotations
from typing import Iterator

from core.constants import Tile


class TileGrid:
    def __init__(self, width: int, height: int, fill: Tile = Tile.WALL):
        if width <= 0 or height <= 0:
            raise ValueError(f"TileGrid size must be positive, got {width}×{height}")
        self.width = width
        self.height = height
        self._base: list[list[Tile]] = [[fill] * width for _ in range(height)]
        self._overlay: dict[tuple[int, int], Tile] = {}

    # -- Bounds --

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    # -- Base layer --

    def base(self, x: int, y: int) -> Tile | None:
        if not self.in_bounds(x, y):
            return None
        return self._base[y][x]

    def set_base(self, x: int, y: int, tile: Tile) -> None:
        """Write base terrain.  Silently ignores out-of-bounds writes."""
        if self.in_bounds(x, y):
            self._base[y][x] = tile

    def fill_rect(self, x0: int, y0: int, x1: int, y1: int, tile: Tile) -> None:
        """Fill the inclusive rectangle, clipped to the grid."""
        for y in range(max(0, y0), min(self.height - 1, y1) + 1):
            for x in range(max(0, x0), min(self.width - 1, x1) + 1):
                self._base[y][x] = tile

    # -- Effective (base + overlay) --

    def get(self, x: int, y: int) -> Tile | None:
        """Effective tile at ``(x, y)``: overlay if present, else base."""
        if not self.in_bounds(x, y):
            return None
        return self._overlay.get((x, y), self._base[y][x])

    def __getitem__(self, pos: tuple[int, int]) -> Tile | None:
        return self.get(pos[0], pos[1])

    # -- Depletion overlay --

    def deplete(self, x: int, y: int, tile: Tile) -> bool:
        """Record *tile* as the depleted form at ``(x, y)``.

        Returns False (and changes nothing) if the cell is out of bounds
        or already depleted.
        """
        if not self.in_bounds(x, y) or (x, y) in self._overlay:
            return False
        self._overlay[(x, y)] = tile
        return True

    def is_depleted(self, x: int, y: int) -> bool:
        return (x, y) in self._overlay

    def overlay(self) -> dict[tuple[int, int], Tile]:
        """Shallow copy of the overlay."""
        return dict(self._overlay)

    # -- Iteration / plain data --

    def cells(self) -> Iterator[tuple[int, int, Tile]]:
        """Yield ``(x, y, effective_tile)`` for every cell, row-major."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self._overlay.get((x, y), self._base[y][x])

    def find(self, tile: Tile) -> list[tuple[int, int]]:
        """All coordinates whose effective tile equals *tile*."""
        return [(x, y) for x, y, t in self.cells() if t == tile]

    def base_rows(self) -> list[list[int]]:
        return [[int(t) for t in row] for row in self._base]

    def overlay_list(self) -> list[list[int]]:
        """Overlay as ``[[x, y, tile], ...]`` sorted by coordinate."""
        return [[x, y, int(t)] for (x, y), t in sorted(self._overlay.items())]

    @classmethod
    def from_rows(cls, rows: list[list[int]],
                  overlay: list[list[int]] | None = None) -> "TileGrid":
        height = len(rows)
        width = len(rows[0]) if height else 0
        grid = cls(width, height)
        for y, row in enumerate(rows):
            for x, value in enumerate(row):
                grid._base[y][x] = Tile(value)
        for x, y, value in overlay or ():
            grid.deplete(int(x), int(y), Tile(value))
        return grid

    def __repr__(self) -> str:
        return f"TileGrid({self.width}×{self.height}, overlay={len(self._overlay)})"
