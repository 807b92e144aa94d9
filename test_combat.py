"""test_combat.py — Player attacks, kill resolution and rewards.

Run:  python test_combat.py      (or: pytest test_combat.py)
"""
from __future__ import annotations
import sys, math, random, traceback

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
from core.content import Content
from core.registry import WorldRegistry, GameMap, MapKind, Biome
from core.tiles import TileGrid
from components.entities import Enemy, MobSpawner, ItemDrop, new_id
from components.items import LootItem, WeaponStats
from components.world_state import WorldState
from logic import scaling
from logic.combat import CombatResolver, resolve_kill
from logic.loot_generator import LootGenerator
from logic.loot_tables import LootTableManager
from logic.quests import start_quest
from logic.worldgen.monsters import build_enemy

CONTENT = Content.load()
TABLES = LootTableManager.from_file()


def _setup(kind: MapKind = MapKind.ZONE):
    reg = WorldRegistry()
    gm = reg.add(GameMap(id="pit", name="Pit", kind=kind, biome=Biome.GRASS,
                         tiles=TileGrid(12, 10, fill=Tile.GRASS)))
    st = WorldState(map_id="pit", x=5, y=5)
    cr = CombatResolver(reg, st, CONTENT, LootGenerator(CONTENT), TABLES)
    return gm, st, cr


def _equip_sword(st: WorldState, crit: float = 0.0) -> None:
    st.equipment["weapon"] = LootItem(
        item_id="sword", name="Test Sword", type="weapon", slot="weapon",
        weapon=WeaponStats(category="sword", min_dmg=3, max_dmg=6, crit_chance=crit),
    )


# ═══════════════════════════════════════════════════════════════════
#  Damage
# ═══════════════════════════════════════════════════════════════════

def test_sword_on_level_three_slime():
    random.seed(40)
    gm, st, cr = _setup()
    _equip_sword(st)
    for _ in range(100):
        slime = build_enemy(CONTENT.monster("Slime"), 3, 6, 5)
        assert slime.hp == 22
        gm.add(slime)
        result = cr.attack(gm, slime)
        assert 8 <= result.damage <= 11 and not result.crit
        assert slime.hp == 22 - result.damage
        assert not result.killed and slime in gm.entities
        gm.remove(slime)
    ok("sword 3–6 + STR 5 deals 8–11 to a 22 HP slime")


def test_weapon_category_picks_stat():
    random.seed(41)
    gm, st, cr = _setup()
    st.equipment["weapon"] = LootItem(
        item_id="bow", name="Bow", type="weapon", slot="weapon",
        weapon=WeaponStats(category="bow", min_dmg=2, max_dmg=2, crit_chance=0.0))
    st.stats.dex = 20
    dmg, _ = cr.roll_damage()
    assert dmg == 22
    ok("bow damage adds DEX")


def test_damage_never_negative():
    random.seed(42)
    gm, st, cr = _setup()
    st.stats.str = -50
    for _ in range(200):
        dmg, _ = cr.roll_damage()
        assert dmg >= 0
    ok("huge negative stat clamps damage at 0")


def test_crit_multiplies():
    random.seed(43)
    gm, st, cr = _setup()
    st.equipment["weapon"] = LootItem(
        item_id="axe", name="Axe", type="weapon", slot="weapon",
        weapon=WeaponStats(category="axe", min_dmg=5, max_dmg=5, crit_chance=1.0, crit_mult=2.0))
    dmg, crit = cr.roll_damage()
    assert crit and dmg == math.floor((5 + 5) * 2.0)
    ok("guaranteed crit doubles a flat 10 to 20")


def test_unarmed_uses_tuned_fists():
    w = _setup()[2].weapon()
    assert (w.min_dmg, w.max_dmg) == (1, 3)
    ok("no weapon → unarmed 1–3")


# ═══════════════════════════════════════════════════════════════════
#  Kills
# ═══════════════════════════════════════════════════════════════════

def test_kill_is_resolved_exactly_once():
    random.seed(44)
    gm, st, cr = _setup()
    _equip_sword(st)
    slime = gm.add(build_enemy(CONTENT.monster("Slime"), 3, 6, 5))
    slime.set_hp(1)
    result = cr.attack(gm, slime)
    assert result.killed and slime.hp == 0
    assert slime not in gm.entities
    assert resolve_kill(cr, gm, slime) is False
    assert st.counters["enemies_killed"] == 1
    assert st.bestiary == {"Slime"}
    assert st.stats.gold > 0 and (st.stats.xp > 0 or st.stats.level > 1)
    ok("dead slime removed once, one bestiary entry, one kill")


def test_spawned_enemies_pay_less():
    random.seed(45)
    gm, st, cr = _setup()
    tmpl = CONTENT.monster("Wolf")
    spawned = gm.add(build_enemy(tmpl, 4, 6, 5, name="Spawned Wolf", spawned=True))
    spawned.set_hp(1)
    cr.attack(gm, spawned)
    assert st.stats.xp == scaling.xp(tmpl.xp_mod, 4) // 2
    ok("spawned enemies give half XP")


def test_boss_kill_raises_world_tier_and_drops_key():
    random.seed(46)
    gm, st, cr = _setup(MapKind.DUNGEON)
    boss = gm.add(build_enemy(CONTENT.monster("Lich"), 5, 7, 5, boss=True))
    boss.set_hp(1)
    assert cr.attack(gm, boss).killed
    assert st.world_tier == 1
    assert st.counters["bosses_killed"] == 1
    drops = gm.of_type(ItemDrop)
    assert len(drops) == 1 and drops[0].item.item_id == "boss_key"
    assert drops[0].pos == (7, 5)
    assert any(i.slot for i in st.inventory.values())
    ok("boss: world tier +1, boss key on the floor, guaranteed equipment")


def test_kill_quest_matches_display_substring():
    random.seed(47)
    gm, st, cr = _setup()
    assert start_quest(st, CONTENT, "rat_catcher")
    for i in range(5):
        rat = gm.add(build_enemy(CONTENT.monster("Rat"), 1, 6, 5, name="Angry Rat"))
        rat.set_hp(1)
        cr.attack(gm, rat)
        if i < 4:
            assert st.active_quest.count == i + 1
    assert st.active_quest is None
    assert "rat_catcher" in st.completed_quests
    assert st.item_count("potion") == 2
    ok("'Angry Rat' counts for the Rat quest; reward paid on completion")


def test_unknown_template_gives_no_rewards():
    gm, st, cr = _setup()
    mystery = gm.add(Enemy(id=new_id("enemy"), name="Mystery", x=6, y=5, hp=1, max_hp=1))
    cr.attack(gm, mystery)
    assert mystery not in gm.entities
    assert st.counters["enemies_killed"] == 1
    assert st.stats.xp == 0 and st.stats.gold == 0
    assert not st.bestiary and not st.inventory
    ok("missing template: removed and counted, no rewards")


def test_spawner_kill_rewards():
    random.seed(48)
    gm, st, cr = _setup()
    sp = gm.add(MobSpawner(id=new_id("spawner"), name="Mob Spawner", x=6, y=5,
                           hp=1, max_hp=50, level=2))
    assert cr.attack(gm, sp).killed
    assert st.counters["spawners_destroyed"] == 1
    xp = math.floor(100 * 1.15 ** 2)
    assert st.stats.level == 2 and st.stats.xp == xp - scaling.xp_to_next_level(1)
    assert st.item_count("iron_ore") >= 2
    assert st.stats.gold == 0
    ok("spawner: fixed XP, spawner_kill loot, no gold")


if __name__ == "__main__":
    tests = [(name, fn) for name, fn in list(globals().items())
             if name.startswith("test_") and callable(fn)]
    print("\n=== Combat ===")
    for name, fn in tests:
        try:
            fn()
        except Exception:
            fail(name, traceback.format_exc())

    total = passed + failed
    print(f"\n{'='*50}")
    print(f" Combat Tests: {passed}/{total} passed")
    if failed:
        print(f" {failed} FAILED")
    print(f"{'='*50}")
    sys.exit(0 if failed == 0 else 1)
