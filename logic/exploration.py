"""logic/exploration.py — Fog of war.

Each map gets a boolean grid (same size as the map) the first time it is
referenced.  ``reveal_area`` flips every cell within Euclidean distance
``radius`` of a centre to revealed and reports whether anything changed;
revealing an already-visible region is a no-op.

Grids are stored on ``WorldState.exploration`` so they save with the run.
Interiors are revealed in full when the player first enters them.
"""

from __future__ import annotations

from core.registry import WorldRegistry, MapKind
from core.tuning import get as _tun
from components.world_state import WorldState


class ExplorationTracker:
    def __init__(self, state: WorldState, registry: WorldRegistry):
        self.state = state
        self.registry = registry

    def radius(self) -> int:
        r = int(_tun("exploration", "radius", 4))
        if "vision_plus" in self.state.perks:
            r += int(_tun("exploration", "vision_bonus", 2))
        return r

    def grid(self, map_id: str) -> list[list[bool]] | None:
        """The map's exploration grid, allocated all-hidden on first use."""
        grid = self.state.exploration.get(map_id)
        if grid is not None:
            return grid
        gm = self.registry.get(map_id)
        if gm is None:
            return None
        grid = [[False] * gm.width for _ in range(gm.height)]
        self.state.exploration[map_id] = grid
        if gm.kind == MapKind.INTERIOR:
            for row in grid:
                row[:] = [True] * gm.width
        return grid

    def reveal_area(self, map_id: str, center: tuple[int, int],
                    radius: int | None = None) -> bool:
        """Reveal a disc; returns False when nothing new became visible."""
        grid = self.grid(map_id)
        if grid is None:
            return False
        r = self.radius() if radius is None else radius
        cx, cy = center
        h, w = len(grid), len(grid[0]) if grid else 0
        changed = False
        for y in range(max(0, cy - r), min(h - 1, cy + r) + 1):
            row = grid[y]
            for x in range(max(0, cx - r), min(w - 1, cx + r) + 1):
                if not row[x] and (x - cx) ** 2 + (y - cy) ** 2 <= r * r:
                    row[x] = True
                    changed = True
        return changed

    def reveal_all(self, map_id: str) -> bool:
        grid = self.grid(map_id)
        if grid is None:
            return False
        changed = False
        for row in grid:
            if not all(row):
                row[:] = [True] * len(row)
                changed = True
        return changed

    def is_revealed(self, map_id: str, x: int, y: int) -> bool:
        grid = self.state.exploration.get(map_id)
        if grid is None or not (0 <= y < len(grid) and 0 <= x < len(grid[0])):
            return False
        return grid[y][x]

    def revealed_count(self, map_id: str | None = None) -> int:
        grids = ([self.state.exploration.get(map_id, [])] if map_id
                 else self.state.exploration.values())
        return sum(sum(row) for g in grids for row in g)
