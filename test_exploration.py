"""test_exploration.py — Fog-of-war grids.

Run:  python test_exploration.py      (or: pytest test_exploration.py)
"""
from __future__ import annotations
import sys, copy, traceback

passed = 0
failed = 0


def ok(label: str):
    global passed
    passed += 1
    print(f"  [PASS] {label}")


def fail(label: str, detail: str = ""):
    global failed
    failed += 1
    print(f"  [FAIL] {label}")
    if detail:
        for line in detail.strip().splitlines():
            print(f"         {line}")


import core.tuning as _tuning
_tuning.load()

from core.constants import Tile
from core.registry import WorldRegistry, GameMap, MapKind, Biome
from core.tiles import TileGrid
from components.world_state import WorldState
from logic.exploration import ExplorationTracker


def _setup(kind: MapKind = MapKind.ZONE, w: int = 20, h: int = 15):
    reg = WorldRegistry()
    reg.add(GameMap(id="m", name="M", kind=kind, biome=Biome.GRASS,
                    tiles=TileGrid(w, h, fill=Tile.GRASS)))
    state = WorldState(map_id="m")
    return ExplorationTracker(state, reg), state


def test_grid_allocated_lazily_all_hidden():
    tracker, state = _setup()
    assert "m" not in state.exploration
    grid = tracker.grid("m")
    assert len(grid) == 15 and len(grid[0]) == 20
    assert not any(any(row) for row in grid)
    assert tracker.grid("nowhere") is None
    ok("grid matches map size and starts hidden")


def test_reveal_is_euclidean_disc():
    tracker, _ = _setup()
    assert tracker.reveal_area("m", (10, 7), 2)
    assert tracker.is_revealed("m", 12, 7)
    assert tracker.is_revealed("m", 11, 8)
    assert not tracker.is_revealed("m", 12, 8)     # 2² + 1² > 2²
    assert tracker.revealed_count("m") == 13
    ok("radius 2 reveals the 13 cells within distance 2")


def test_re_reveal_is_noop():
    tracker, state = _setup()
    tracker.reveal_area("m", (5, 5), 3)
    before = copy.deepcopy(state.exploration["m"])
    assert tracker.reveal_area("m", (5, 5), 3) is False
    assert tracker.reveal_area("m", (5, 5), 1) is False
    assert state.exploration["m"] == before
    ok("revealing a visible region reports no change")


def test_reveal_clips_at_edges():
    tracker, _ = _setup(w=6, h=4)
    assert tracker.reveal_area("m", (0, 0), 10)
    assert tracker.revealed_count("m") == 24
    ok("huge radius at a corner stays inside the grid")


def test_vision_perk_widens_radius():
    tracker, state = _setup()
    assert tracker.radius() == 4
    state.perks.add("vision_plus")
    assert tracker.radius() == 6
    ok("vision_plus adds 2 tiles of sight")


def test_interior_revealed_on_creation():
    tracker, _ = _setup(kind=MapKind.INTERIOR, w=10, h=8)
    assert all(all(row) for row in tracker.grid("m"))
    assert tracker.reveal_area("m", (3, 3), 2) is False
    ok("interiors start fully revealed")


if __name__ == "__main__":
    tests = [(name, fn) for name, fn in list(globals().items())
             if name.startswith("test_") and callable(fn)]
    print("\n=== Exploration ===")
    for name, fn in tests:
        try:
            fn()
        except Exception:
            fail(name, traceback.format_exc())

    total = passed + failed
    print(f"\n{'='*50}")
    print(f" Exploration Tests: {passed}/{total} passed")
    if failed:
        print(f" {failed} FAILED")
    print(f"{'='*50}")
    sys.exit(0 if failed == 0 else 1)
