"""test_movement.py — The per-turn movement state machine.

Every branch of ``MovementResolver.move``: edges, dungeon entrances,
harvesting, blocking terrain, entity bumps and plain steps, plus the
tick / facing bookkeeping around them.

Run:  python test_movement.py      (or: pytest test_movement.py)
"""
from __future__ import annotations
import sys, random, traceback

# ── Test framework ──────────────────────────────────────────────────

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


# ── Imports ──────────────────────────────────────────────────────────

import core.tuning as _tuning
_tuning.load()

from core.constants import Tile, PATH_TILES
from core.content import Content
from core.registry import WorldRegistry, GameMap, MapKind, Biome
from core.tiles import TileGrid
from components.entities import ItemDrop, Collectible, Npc, Crate, Enemy, MobSpawner, new_id
from components.world_state import WorldState
from logic.loot_generator import LootGenerator
from logic.loot_tables import LootTableManager
from logic.movement import MovementResolver, Outcome, find_entry
from logic.session import GameSession

CONTENT = Content.load()
TABLES = LootTableManager.from_file()


def _arena(w: int = 10, h: int = 8, difficulty: int = 3):
    """Open grass map with the player in the middle and nothing else."""
    reg = WorldRegistry()
    gm = reg.add(GameMap(id="arena", name="Arena", kind=MapKind.ZONE, biome=Biome.GRASS,
                         tiles=TileGrid(w, h, fill=Tile.GRASS), difficulty=difficulty))
    st = WorldState(map_id="arena", x=5, y=4)
    mover = MovementResolver(reg, st, CONTENT, LootGenerator(CONTENT), TABLES)
    return reg, gm, st, mover


# ═══════════════════════════════════════════════════════════════════
#  Plain steps and rejections
# ═══════════════════════════════════════════════════════════════════

def test_step_moves_and_ticks():
    _, gm, st, mover = _arena()
    res = mover.move(1, 0)
    assert res.outcome == Outcome.MOVED and res.moved and res.ai_ran
    assert st.pos == (6, 4) and st.facing == "right"
    assert st.tick == 1 and st.counters["steps_taken"] == 1
    assert mover.exploration.is_revealed("arena", 6, 4)
    ok("open tile: step, facing, tick, fog")


def test_diagonal_and_bad_deltas():
    _, _, st, mover = _arena()
    assert mover.move(1, 1).outcome == Outcome.MOVED
    assert st.pos == (6, 5)
    for dx, dy in ((0, 0), (2, 0), (0, -3)):
        assert mover.move(dx, dy).outcome == Outcome.REJECTED
    assert st.pos == (6, 5) and st.tick == 1
    ok("diagonals step, zero / long deltas are rejected")


def test_wall_only_turns_player():
    _, gm, st, mover = _arena()
    gm.tiles.set_base(6, 4, Tile.WALL)
    res = mover.move(1, 0)
    assert res.outcome == Outcome.BLOCKED and not res.moved
    assert st.pos == (5, 4) and st.facing == "right"
    assert st.tick == 0
    ok("wall: facing updates, position and tick unchanged")


def test_dead_player_cannot_move():
    _, _, st, mover = _arena()
    st.set_hp(0)
    assert mover.move(1, 0).outcome == Outcome.REJECTED
    assert st.pos == (5, 4)
    ok("dead player input is rejected")


def test_edge_without_neighbor():
    _, _, st, mover = _arena()
    st.x = 0
    res = mover.move(-1, 0)
    assert res.outcome == Outcome.EDGE_BLOCKED
    assert st.pos == (0, 4) and st.map_id == "arena" and st.tick == 0
    ok("edge with no neighbor: stay, face the edge")


def test_shrine_step_records_waypoint():
    _, gm, st, mover = _arena()
    gm.tiles.set_base(6, 4, Tile.SHRINE)
    assert mover.move(1, 0).outcome == Outcome.MOVED
    assert "arena" in st.waypoints
    ok("stepping on a shrine attunes the waypoint")


# ═══════════════════════════════════════════════════════════════════
#  Harvesting
# ═══════════════════════════════════════════════════════════════════

def test_tree_harvest_then_walk_onto_stump():
    _, gm, st, mover = _arena()
    gm.tiles.set_base(6, 4, Tile.OAK_TREE)
    res = mover.move(1, 0)
    assert res.outcome == Outcome.HARVEST and not res.moved
    assert st.pos == (5, 4) and st.tick == 1
    assert st.item_count("oak_log") == 1
    assert gm.tiles.overlay_list() == [[6, 4, int(Tile.STUMP)]]
    assert gm.tiles.base(6, 4) == Tile.OAK_TREE
    assert st.skills["Logging"] > 0 and st.counters["trees_cut"] == 1

    res = mover.move(1, 0)
    assert res.outcome == Outcome.MOVED and st.pos == (6, 4)
    assert st.item_count("oak_log") == 1
    assert len(gm.tiles.overlay_list()) == 1
    ok("tree: one log, stump overlay; second move walks onto the stump")


def test_rock_at_level_one_gives_stone():
    random.seed(11)
    _, gm, st, mover = _arena()
    gm.tiles.set_base(5, 3, Tile.ROCK)
    assert mover.move(0, -1).outcome == Outcome.HARVEST
    assert st.item_count("stone") == 1
    assert gm.tiles.get(5, 3) == Tile.FLOOR and st.facing == "up"
    assert st.skills["Mining"] > 0
    ok("rock at level 1 yields stone and leaves floor")


def test_harvest_and_blocked_moves_skip_enemy_pass():
    _, gm, st, mover = _arena()
    foe = gm.add(Enemy(id=new_id("enemy"), name="Golem", x=4, y=4,
                       hp=500, max_hp=500, level=5, template="Golem"))
    gm.tiles.set_base(6, 4, Tile.OAK_TREE)
    gm.tiles.set_base(5, 3, Tile.WALL)

    assert mover.move(1, 0).outcome == Outcome.HARVEST
    assert st.stats.hp == 100 and foe.id not in st.anims and "player" not in st.anims
    assert mover.move(0, -1).outcome == Outcome.BLOCKED
    assert st.stats.hp == 100 and foe.id not in st.anims and "player" not in st.anims
    assert foe.pos == (4, 4)
    ok("adjacent enemy stays still through a harvest and a blocked move")


def test_spawner_charges_on_harvest_turns():
    random.seed(14)
    _, gm, st, mover = _arena()
    sp = gm.add(MobSpawner(id=new_id("spawner"), name="Mob Spawner", x=1, y=1,
                           hp=50, max_hp=50, level=1, spawn_type="Slime"))
    gm.tiles.set_base(6, 4, Tile.OAK_TREE)
    for turn in range(1, 31):
        assert mover.move(1, 0).outcome == Outcome.HARVEST
        assert st.tick == turn
        if turn < 30:
            assert sp.elapsed == turn and not gm.enemies()
            gm.tiles._overlay.pop((6, 4))     # regrow
    spawned = gm.enemies()
    assert len(spawned) == 1 and spawned[0].name == "Spawned Slime"
    assert sp.elapsed == 0

    mover.interact()
    assert sp.elapsed == 0
    ok("spawner charges once per harvest turn and summons on the 30th")


# ═══════════════════════════════════════════════════════════════════
#  Entity bumps
# ═══════════════════════════════════════════════════════════════════

def test_item_drop_and_collectible_pickup():
    _, gm, st, mover = _arena()
    loot = LootGenerator(CONTENT)
    gm.add(ItemDrop(id=new_id("drop"), name="Potion", x=6, y=4, item=loot.item("potion")))
    gm.add(Collectible(id=new_id("coin"), name="Ancient Coin", x=7, y=4,
                       item_id="ancient_coin"))

    assert mover.move(1, 0).outcome == Outcome.PICKUP
    assert st.pos == (6, 4) and st.item_count("potion") == 1
    assert mover.move(1, 0).outcome == Outcome.PICKUP
    assert st.pos == (7, 4) and st.item_count("ancient_coin") == 1
    assert gm.entities == []
    assert st.counters.get("steps_taken", 0) == 0 and st.tick == 2
    ok("walking onto a drop picks it up and steps there")


def test_npc_blocks_without_a_turn():
    _, gm, st, mover = _arena()
    gm.add(Npc(id="bob", name="Bob", x=6, y=4))
    assert mover.move(1, 0).outcome == Outcome.REJECTED
    assert st.pos == (5, 4) and st.tick == 0
    ok("bumping an NPC does nothing")


def test_crate_breaks_into_loot():
    random.seed(12)
    _, gm, st, mover = _arena()
    gm.add(Crate(id=new_id("crate"), name="Crate", x=6, y=4))
    res = mover.move(1, 0)
    assert res.outcome == Outcome.BREAK and res.moved and not res.ai_ran
    assert st.pos == (6, 4) and not gm.entities
    assert st.counters["crates_broken"] == 1
    assert sum(i.count for i in st.inventory.values()) >= 1
    ok("crate: removed, loot granted, player steps in")


def test_enemy_bump_attacks_in_place():
    random.seed(13)
    _, gm, st, mover = _arena()
    foe = gm.add(Enemy(id=new_id("enemy"), name="Golem", x=6, y=4,
                       hp=5000, max_hp=5000, level=1, template="Golem"))
    res = mover.move(1, 0)
    assert res.outcome == Outcome.ATTACK and res.ai_ran and not res.moved
    assert st.pos == (5, 4) and foe.hp < 5000
    assert st.tick == 1
    ok("bumping an enemy attacks it and runs the enemy pass")


# ═══════════════════════════════════════════════════════════════════
#  Map changes
# ═══════════════════════════════════════════════════════════════════

def test_east_edge_into_next_zone():
    random.seed(20)
    session = GameSession.new_game(CONTENT, TABLES)
    st = session.state
    assert st.map_id == "map_10_10"
    st.x, st.y = 19, 7
    res = session.move(1, 0)
    assert res.outcome == Outcome.MAP_CHANGE
    assert st.map_id == "map_11_10"
    zone = session.current_map
    assert st.x == 0 and st.y == 7
    assert zone.tiles.get(st.x, st.y) in PATH_TILES
    assert session.exploration.is_revealed("map_11_10", 0, 7)
    ok("crossing east lands on the west path gate of map_11_10")


def test_map_change_skips_enemy_pass():
    reg, gm, st, mover = _arena()
    gm.neighbors["east"] = "beyond"
    beyond = reg.add(GameMap(id="beyond", name="Beyond", kind=MapKind.ZONE, biome=Biome.GRASS,
                             tiles=TileGrid(10, 8, fill=Tile.GRASS)))
    foe = beyond.add(Enemy(id=new_id("enemy"), name="Golem", x=1, y=4,
                           hp=500, max_hp=500, level=5, template="Golem"))
    st.x = 9
    res = mover.move(1, 0)
    assert res.outcome == Outcome.MAP_CHANGE and not res.ai_ran
    assert st.map_id == "beyond" and st.pos == (0, 4)
    assert st.stats.hp == 100 and foe.id not in st.anims and "player" not in st.anims
    ok("arriving next to an enemy does not give it a turn")


def test_find_entry_falls_back_to_open_then_centre():
    _, gm, _, _ = _arena()
    assert find_entry(gm, "north") == (5, 0)
    for x in range(gm.width):
        gm.tiles.set_base(x, 0, Tile.WALL)
    assert find_entry(gm, "north") == (5, 4)
    gm.tiles.set_base(2, 7, Tile.DIRT_PATH)
    assert find_entry(gm, "south") == (2, 7)
    ok("entry scan: path, then open tile, then centre")


def test_town_door_leads_to_revealed_interior_and_back():
    random.seed(21)
    session = GameSession.new_game(CONTENT, TABLES)
    st = session.state
    st.x, st.y = 4, 5
    assert session.move(0, -1).outcome == Outcome.TELEPORT
    assert st.map_id == "interior_map_10_10_4_4"
    house = session.current_map
    assert house.kind == MapKind.INTERIOR
    assert all(all(row) for row in session.exploration.grid(house.id))
    assert st.pos == (5, 6)

    assert session.move(0, 1).outcome == Outcome.TELEPORT
    assert st.map_id == "map_10_10" and st.pos == (4, 5)
    ok("door → fully revealed interior → exit back below the door")


def test_dungeon_entrance_is_generated_once():
    random.seed(22)
    reg, gm, st, mover = _arena()
    gm.tiles.set_base(6, 4, Tile.CRYPT_ENTRANCE)
    res = mover.move(1, 0)
    assert res.outcome == Outcome.DUNGEON and not res.ai_ran
    assert st.map_id == "dungeon_arena_6_4"
    dungeon = reg.get(st.map_id)
    assert dungeon.tiles.get(*st.pos) == Tile.STAIRS_UP
    assert dungeon.name == "Forgotten Crypt"
    assert st.counters["dungeons_entered"] == 1

    st.map_id, st.x, st.y = "arena", 5, 4
    mover.move(1, 0)
    assert reg.get("dungeon_arena_6_4") is dungeon and len(reg) == 2

    gm.tiles.set_base(4, 4, Tile.CAVE_ENTRANCE)
    st.map_id, st.x, st.y = "arena", 5, 4
    mover.move(-1, 0)
    assert st.map_id == "dungeon_arena_4_4"
    assert reg.get(st.map_id) is not dungeon and len(reg) == 3
    ok("same entrance reuses its dungeon, another entrance builds a new one")


def test_dungeon_stairs_return_to_entrance():
    random.seed(23)
    reg, gm, st, mover = _arena()
    gm.tiles.set_base(6, 4, Tile.MAGMA_ENTRANCE)
    mover.move(1, 0)
    dungeon = reg.get(st.map_id)
    sx, sy = st.pos
    # step off the stairs onto any open neighbour, then back onto them
    for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
        if mover.move(dx, dy).outcome == Outcome.MOVED:
            break
    else:
        raise AssertionError("no open tile next to the stairs")
    res = mover.move(sx - st.x, sy - st.y)
    assert res.outcome == Outcome.TELEPORT
    assert st.map_id == "arena" and st.pos == (6, 4)
    assert reg.get(dungeon.id) is dungeon
    ok("stairs up lead back to the entrance tile")


# ═══════════════════════════════════════════════════════════════════
#  Runner
# ═══════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    tests = [(name, fn) for name, fn in list(globals().items())
             if name.startswith("test_") and callable(fn)]
    print("\n=== Movement ===")
    for name, fn in tests:
        try:
            fn()
        except Exception:
            fail(name, traceback.format_exc())

    total = passed + failed
    print(f"\n{'='*50}")
    print(f" Movement Tests: {passed}/{total} passed")
    if failed:
        print(f" {failed} FAILED")
    print(f"{'='*50}")
    sys.exit(0 if failed == 0 else 1)
