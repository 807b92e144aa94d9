"""test_worldgen.py — Overworld layout, zones, dungeons, interiors, registry.

Run:  python test_worldgen.py      (or: pytest test_worldgen.py)
"""
from __future__ import annotations
import sys, random, traceback

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

from core.constants import Tile, PATH_TILES
from core.content import Content
from core.registry import WorldRegistry, Biome, MapKind
from components.entities import Container, ContainerState, Portal, Npc
from logic.worldgen.overworld import generate_overworld_grid, ensure_map
from logic.worldgen.zones import generate_zone_map
from logic.worldgen.dungeons import generate_dungeon, dungeon_id, level_floor

CONTENT = Content.load()


def _all_in_bounds(gm) -> bool:
    return all(gm.in_bounds(e.x, e.y) for e in gm.entities)


# ═══════════════════════════════════════════════════════════════════
#  Overworld
# ═══════════════════════════════════════════════════════════════════

def test_overworld_layout():
    random.seed(1)
    world = generate_overworld_grid(20, 20)
    assert len(world.cells) == 400
    town = world.cell(world.town_id)
    assert town.is_town and town.difficulty == 0 and (town.gx, town.gy) == (10, 10)
    assert world.cell("map_10_0").biome == Biome.SNOW
    assert world.cell("map_10_19").biome == Biome.DESERT
    assert world.cell("map_3_10").biome == Biome.GRASS
    ok("400 cells, town at (10,10), snow north, desert south")


def test_overworld_neighbors_bidirectional():
    world = generate_overworld_grid(6, 5)
    opposite = {"north": "south", "south": "north", "east": "west", "west": "east"}
    for cell in world.cells.values():
        for edge, other_id in cell.neighbors.items():
            other = world.cell(other_id)
            assert other.neighbors[opposite[edge]] == cell.id
    corner = world.cell("map_0_0")
    assert set(corner.neighbors) == {"east", "south"}
    ok("every neighbor link has a matching link back")


def test_difficulty_grows_with_distance():
    world = generate_overworld_grid(20, 20)
    near = world.cell("map_11_10").difficulty
    far = world.cell("map_16_10").difficulty
    assert near == 1 and far == 6
    assert world.cell("map_10_19").difficulty == 9 + 4   # desert bonus
    ok("difficulty = distance from town + biome bonus")


def test_bad_overworld_size_raises():
    try:
        generate_overworld_grid(0, 5)
    except ValueError:
        ok("non-positive overworld size raises ValueError")
        return
    raise AssertionError("expected ValueError")


# ═══════════════════════════════════════════════════════════════════
#  Zones
# ═══════════════════════════════════════════════════════════════════

def test_zone_dimensions_and_bounds():
    random.seed(2)
    for biome in (Biome.GRASS, Biome.SNOW, Biome.DESERT):
        for diff in (1, 5, 12):
            gm = generate_zone_map(f"map_t_{biome.value}_{diff}", biome, diff, False,
                                   CONTENT, neighbors={"east": "x", "west": "y"})
            assert (gm.width, gm.height) == (20, 15)
            assert _all_in_bounds(gm)
            enemies = gm.enemies()
            assert len(enemies) <= 8
            assert all(0 <= e.hp <= e.max_hp for e in enemies)
    ok("zones are 20×15 with every entity in bounds")


def test_zone_border_gates():
    random.seed(3)
    gm = generate_zone_map("map_gate", Biome.GRASS, 2, False, CONTENT,
                           neighbors={"east": "map_e"})
    w, h = gm.width, gm.height
    east = [gm.tiles.get(w - 1, y) for y in range(h)]
    assert [y for y, t in enumerate(east) if t in PATH_TILES] == [5, 6, 7, 8, 9]
    assert all(gm.tiles.get(0, y) == Tile.WALL for y in range(h))
    assert all(gm.tiles.get(x, 0) == Tile.WALL for x in range(w))
    ok("linked edge gets a radius-2 path gate, unlinked edges are walls")


def test_town_layout():
    random.seed(4)
    gm = generate_zone_map("map_town", Biome.GRASS, 0, True, CONTENT,
                           neighbors={"north": "a", "south": "b", "east": "c", "west": "d"})
    cx, cy = gm.width // 2, gm.height // 2
    assert gm.tiles.get(cx, cy) == Tile.SHRINE
    assert not gm.enemies()
    npcs = {n.id: n for n in gm.of_type(Npc)}
    assert npcs["mayor"].pos == (cx, cy - 1)
    assert npcs["mayor"].quest_id == "rat_catcher"
    doors = gm.of_type(Portal)
    assert len(doors) == 1 and doors[0].dest_map == "interior_map_town_4_4"
    ok("town has shrine, NPCs, no enemies and a house door")


# ═══════════════════════════════════════════════════════════════════
#  Dungeons
# ═══════════════════════════════════════════════════════════════════

def _dungeon(seed: int, kind: str = "crypt", world_tier: int = 0):
    random.seed(seed)
    did = dungeon_id("map_5_5", 7, 7)
    return generate_dungeon(did, 4, kind, "map_5_5", (7, 7), 3, world_tier, CONTENT)


def test_dungeon_dimensions_and_structure():
    for seed, kind in ((10, "crypt"), (11, "cave"), (12, "magma")):
        gm = _dungeon(seed, kind)
        assert (gm.width, gm.height) == (30, 30)
        assert gm.kind == MapKind.DUNGEON
        assert _all_in_bounds(gm)
        stairs = gm.tiles.find(Tile.STAIRS_UP)
        assert len(stairs) == 1
        portal = gm.entity_at(*stairs[0])
        assert isinstance(portal, Portal) and portal.dest_map == "map_5_5"
        assert (portal.dest_x, portal.dest_y) == (7, 7)
        # the outer ring is never carved
        for x in range(30):
            assert gm.tiles.get(x, 0) not in (Tile.FLOOR, Tile.STAIRS_UP)
            assert gm.tiles.get(x, 29) not in (Tile.FLOOR, Tile.STAIRS_UP)
    ok("dungeons are 30×30 with stairs up and a return portal")


def test_dungeon_boss_and_locked_chest():
    gm = _dungeon(20, "cave")
    bosses = [e for e in gm.enemies() if e.is_boss]
    assert len(bosses) == 1
    boss = bosses[0]
    assert boss.template == "Ice Golem"
    floor_lvl = level_floor(4, 3, 0)
    assert floor_lvl == 6 and boss.level == 8
    chests = gm.of_type(Container)
    assert len(chests) == 1
    chest = chests[0]
    assert chest.state == ContainerState.LOCKED and chest.key_id == "boss_key"
    assert abs(chest.x - boss.x) <= 1 and abs(chest.y - boss.y) <= 1
    for e in gm.enemies():
        if not e.is_boss:
            assert e.level >= floor_lvl
    ok("one boss in the end room, a locked chest beside it")


def test_world_tier_raises_level_floor():
    assert level_floor(4, 3, 1) == level_floor(4, 3, 0) + 5
    assert level_floor(10, 1, 0) == 15
    assert level_floor(1, 9, 0) == 10
    ok("level floor = max(ceil(d*1.5), player+1) + tier bonus")


# ═══════════════════════════════════════════════════════════════════
#  Registry
# ═══════════════════════════════════════════════════════════════════

def test_cached_dungeon_is_reused():
    random.seed(30)
    reg = WorldRegistry()
    calls = []

    def factory(x, y):
        did = dungeon_id("map_1_1", x, y)
        calls.append(did)
        return generate_dungeon(did, 3, "crypt", "map_1_1", (x, y), 1, 0, CONTENT)

    a = reg.get_or_create(dungeon_id("map_1_1", 4, 4), lambda: factory(4, 4))
    snapshot = (a.tiles.base_rows(), [e.to_dict() for e in a.entities])
    again = reg.get_or_create(dungeon_id("map_1_1", 4, 4), lambda: factory(4, 4))
    assert again is a and len(calls) == 1
    assert (again.tiles.base_rows(), [e.to_dict() for e in again.entities]) == snapshot

    b = reg.get_or_create(dungeon_id("map_1_1", 9, 6), lambda: factory(9, 6))
    assert b is not a and len(calls) == 2
    assert b.tiles.base_rows() != a.tiles.base_rows()
    ok("same id returns the same map; another entry point builds a new one")


def test_registry_rejects_duplicates_and_reentry():
    reg = WorldRegistry()
    random.seed(31)
    gm = generate_zone_map("map_dup", Biome.GRASS, 1, False, CONTENT)
    reg.add(gm)
    try:
        reg.add(gm)
        raise AssertionError("duplicate add accepted")
    except ValueError:
        pass

    def recursive():
        return reg.get_or_create("map_loop", recursive)
    try:
        reg.get_or_create("map_loop", recursive)
        raise AssertionError("re-entrant generation accepted")
    except RuntimeError:
        pass
    assert "map_loop" not in reg
    ok("duplicate ids and re-entrant generation are refused")


def test_ensure_map_is_lazy():
    random.seed(32)
    reg = WorldRegistry()
    reg.overworld = generate_overworld_grid(5, 5)
    assert len(reg) == 0
    zone = ensure_map(reg, "map_1_1", CONTENT)
    assert zone is not None and len(reg) == 1
    assert ensure_map(reg, "map_1_1", CONTENT) is zone
    assert ensure_map(reg, "map_99_99", CONTENT) is None
    assert ensure_map(reg, "dungeon_map_1_1_3_3", CONTENT) is None
    interior = ensure_map(reg, "interior_map_2_2_4_4", CONTENT)
    assert interior.kind == MapKind.INTERIOR and interior.parent_id == "map_2_2"
    ok("zones and interiors are built on first request only")


if __name__ == "__main__":
    tests = [(name, fn) for name, fn in list(globals().items())
             if name.startswith("test_") and callable(fn)]
    print("\n=== World generation ===")
    for name, fn in tests:
        try:
            fn()
        except Exception:
            fail(name, traceback.format_exc())

    total = passed + failed
    print(f"\n{'='*50}")
    print(f" Worldgen Tests: {passed}/{total} passed")
    if failed:
        print(f" {failed} FAILED")
    print(f"{'='*50}")
    sys.exit(0 if failed == 0 else 1)
