"""
core/content.py — Read-only content tables (TOML → dataclasses)

Monster templates, weapon archetypes, equipment slots, loot tiers,
rarity weights, affixes, item definitions, quests and secrets all live
as TOML under ``data/``.  This module parses them once into plain
dataclasses and hands out lookups.  Nothing in the simulation mutates
these tables.

Usage:
    content = Content.load()             # data/*.toml
    slime = content.monster("Slime")
    tmpl = content.template_for("Angry Slime")   # display name → template

Missing ids return ``None``; callers decide whether that fails closed.
"""

from __future__ import annotations
try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

from components.items import Rarity, STACKABLE_TYPES


DATA_DIR = Path(__file__).resolve().parent.parent / "data"


# ═══════════════════════════════════════════════════════════════════
#  Records
# ═══════════════════════════════════════════════════════════════════

@dataclass
class MonsterTemplate:
    name: str
    base_hp: int = 10
    base_dmg: int = 2
    xp_mod: float = 1.0
    ai: str = "melee"           # "melee" | "ranged"
    attack_range: int = 1       # tiles
    drop: str = ""              # item id of the trophy material


@dataclass
class WeaponArchetype:
    name: str
    category: str = "sword"
    min_dmg: int = 1
    max_dmg: int = 2
    crit_chance: float = 0.05
    crit_mult: float = 1.5
    range: int = 1


@dataclass
class LootTier:
    name: str
    min_level: int
    mult: float


@dataclass
class SlotDef:
    slot: str
    names: list[str] = field(default_factory=list)
    stat_bias: list[str] = field(default_factory=list)


@dataclass
class Affix:
    name: str
    stat: str
    mod: float = 1.0


@dataclass
class ItemDef:
    id: str
    name: str
    type: str = "material"
    description: str = ""
    heal: int = 0

    @property
    def stackable(self) -> bool:
        return self.type in STACKABLE_TYPES


@dataclass
class QuestDef:
    id: str
    title: str
    type: str = "kill"          # "kill" | "collect"
    target: str = ""
    count: int = 1
    reward_xp: int = 0
    reward_gold: int = 0
    reward_item: str = ""
    reward_count: int = 0
    giver: str = ""


@dataclass
class SecretDef:
    """A boolean predicate over world state.

    ``kind`` picks the predicate:
      counter   — ``counters[key] >= threshold``
      explored  — revealed tiles across all maps ``> threshold``
      biome     — current map biome equals ``key``
      world_tier — ``world_tier >= threshold``
      bestiary  — discovered enemy names ``>= threshold``
    """
    id: str
    title: str
    kind: str = "counter"
    key: str = ""
    threshold: int = 1
    stat_bonus: dict[str, int] = field(default_factory=dict)
    perk: str = ""


@dataclass
class DungeonKind:
    kind: str
    name: str = "Dungeon"
    enemies: list[str] = field(default_factory=list)
    boss: str = "Ogre"
    decor: list[str] = field(default_factory=list)


def _build(cls, key_field: str, key: str, raw: dict):
    """Build a dataclass from a TOML table, skipping unknown keys."""
    valid = {f.name for f in fields(cls)}
    kwargs = {k: v for k, v in raw.items() if k in valid}
    kwargs[key_field] = key
    return cls(**kwargs)


def _read(path: Path) -> dict:
    if not path.exists():
        print(f"[CONTENT] {path.name} not found, table left empty")
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)


# ═══════════════════════════════════════════════════════════════════
#  Content
# ═══════════════════════════════════════════════════════════════════

class Content:
    """All static tables, loaded once and shared read-only."""

    def __init__(self):
        self.monsters: dict[str, MonsterTemplate] = {}
        self.weapons: dict[str, WeaponArchetype] = {}
        self.category_stat: dict[str, str] = {}
        self.tiers: list[LootTier] = []
        self.slots: dict[str, SlotDef] = {}
        self.rarity_weights: list[tuple[Rarity, float]] = []
        self.prefixes: list[Affix] = []
        self.suffixes: list[Affix] = []
        self.items: dict[str, ItemDef] = {}
        self.quests: dict[str, QuestDef] = {}
        self.secrets: dict[str, SecretDef] = {}
        self.dungeons: dict[str, DungeonKind] = {}
        # Zone enemy naming
        self.level_pools: list[tuple[int, list[str]]] = []
        self.monster_prefixes: list[str] = []
        self.elite_prefixes: list[str] = []
        self.boss_sources: list[str] = []
        self.tier_up_sources: list[str] = []

    # -- Loading --

    @classmethod
    def load(cls, data_dir: str | Path | None = None) -> "Content":
        root = Path(data_dir) if data_dir is not None else DATA_DIR
        c = cls()

        mon = _read(root / "monsters.toml")
        for name, raw in mon.get("monsters", {}).items():
            c.monsters[name] = _build(MonsterTemplate, "name", name, raw)
        pools = mon.get("pools", {})
        c.level_pools = sorted(
            (int(p["below_level"]), list(p["names"])) for p in pools.get("level", [])
        )
        c.monster_prefixes = list(pools.get("prefixes", []))
        c.elite_prefixes = list(pools.get("elite_prefixes", []))
        for kind, raw in mon.get("dungeons", {}).items():
            c.dungeons[kind] = _build(DungeonKind, "kind", kind, raw)

        wpn = _read(root / "weapons.toml")
        for name, raw in wpn.get("weapons", {}).items():
            c.weapons[name] = _build(WeaponArchetype, "name", name, raw)
        c.category_stat = dict(wpn.get("categories", {}))

        eq = _read(root / "equipment.toml")
        c.tiers = sorted(
            (LootTier(t["name"], int(t["min_level"]), float(t["mult"]))
             for t in eq.get("tiers", [])),
            key=lambda t: t.min_level,
        )
        for slot, raw in eq.get("slots", {}).items():
            c.slots[slot] = _build(SlotDef, "slot", slot, raw)
        weights = eq.get("rarity_weights", {})
        c.rarity_weights = [(r, float(weights.get(r.name.lower(), 0.0))) for r in Rarity]
        c.prefixes = [Affix(a["name"], a["stat"], float(a.get("mod", 1.0)))
                      for a in eq.get("prefixes", [])]
        c.suffixes = [Affix(a["name"], a["stat"], float(a.get("mod", 1.0)))
                      for a in eq.get("suffixes", [])]
        c.boss_sources = list(eq.get("boss_sources", []))
        c.tier_up_sources = list(eq.get("tier_up_sources", []))

        itm = _read(root / "items.toml")
        for item_id, raw in itm.get("items", {}).items():
            c.items[item_id] = _build(ItemDef, "id", item_id, raw)

        qst = _read(root / "quests.toml")
        for qid, raw in qst.get("quests", {}).items():
            c.quests[qid] = _build(QuestDef, "id", qid, raw)
        for sid, raw in qst.get("secrets", {}).items():
            c.secrets[sid] = _build(SecretDef, "id", sid, raw)

        print(f"[CONTENT] Loaded {len(c.monsters)} monsters, {len(c.weapons)} weapons, "
              f"{len(c.items)} items, {len(c.quests)} quests from {root}")
        return c

    # -- Lookups --

    def monster(self, name: str) -> MonsterTemplate | None:
        return self.monsters.get(name)

    def template_for(self, display_name: str) -> MonsterTemplate | None:
        """Resolve a display name that may carry random prefixes.

        Tries the longest trailing word run first ("Angry Ice Golem" →
        "Ice Golem" before "Golem"), then any template name contained
        in the display name.
        """
        words = display_name.split()
        for i in range(len(words)):
            hit = self.monsters.get(" ".join(words[i:]))
            if hit is not None:
                return hit
        for name in sorted(self.monsters, key=len, reverse=True):
            if name in display_name:
                return self.monsters[name]
        return None

    def weapon(self, name: str) -> WeaponArchetype | None:
        return self.weapons.get(name)

    def item(self, item_id: str) -> ItemDef | None:
        return self.items.get(item_id)

    def quest(self, quest_id: str) -> QuestDef | None:
        return self.quests.get(quest_id)

    def stat_for_category(self, category: str) -> str:
        return self.category_stat.get(category, "str")

    def pool_for_level(self, level: int) -> list[str]:
        """Base-name pool for the first gate whose ``below_level`` exceeds *level*."""
        for below, names in self.level_pools:
            if level < below:
                return names
        return self.level_pools[-1][1] if self.level_pools else []


_default: Content | None = None


def default_content() -> Content:
    """Process-wide content tables, loaded on first use."""
    global _default
    if _default is None:
        _default = Content.load()
    return _default
