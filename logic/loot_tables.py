"""Loot table system — weighted pools of content-table item ids.

Crates, chests, spawner kills, boss chests and rock harvesting all roll
named tables from ``data/loot_tables.toml``.  Entries may be gated by
the roller's level, so the same table yields better materials deeper
into the world.

Usage:
    mgr = LootTableManager.from_file("data/loot_tables.toml")
    items = mgr.roll("crate", level=7)   # → {"wood": 2, "copper_ore": 1}
"""

from __future__ import annotations
import random
try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class _Entry:
    item: str
    weight: float = 1.0
    min_count: int = 1
    max_count: int = 1
    min_level: int = 0
    max_level: int = 10**9

    def allowed(self, level: int) -> bool:
        return self.min_level <= level <= self.max_level


@dataclass
class _Pool:
    name: str = ""
    rolls: int = 1
    chance: float = 1.0          # probability the pool rolls at all
    entries: list[_Entry] = field(default_factory=list)

    def roll(self, level: int, out: dict[str, int]) -> None:
        entries = [e for e in self.entries if e.allowed(level)]
        if not entries or random.random() >= self.chance:
            return
        for _ in range(self.rolls):
            entry = _weighted_choice(entries)
            if entry.item == "nothing":
                continue
            n = random.randint(entry.min_count, entry.max_count)
            out[entry.item] = out.get(entry.item, 0) + n


def _weighted_choice(entries: list[_Entry]) -> _Entry:
    total = sum(e.weight for e in entries)
    r = random.uniform(0, total)
    cur = 0.0
    for e in entries:
        cur += e.weight
        if r <= cur:
            return e
    return entries[-1]


@dataclass
class _Table:
    name: str = ""
    description: str = ""
    pools: list[_Pool] = field(default_factory=list)

    def roll(self, level: int) -> dict[str, int]:
        out: dict[str, int] = {}
        for pool in self.pools:
            pool.roll(level, out)
        return out


class LootTableManager:
    """Named loot tables loaded from TOML."""

    def __init__(self):
        self.tables: dict[str, _Table] = {}

    # ── public API ──────────────────────────────────────────────────

    def has(self, table_name: str) -> bool:
        return table_name in self.tables

    def roll(self, table_name: str, level: int = 1) -> dict[str, int]:
        """Roll a table and return ``{item_id: count}``."""
        tbl = self.tables.get(table_name)
        if tbl is None:
            print(f"[LOOT] unknown table: {table_name}")
            return {}
        return tbl.roll(level)

    # ── loading ─────────────────────────────────────────────────────

    @classmethod
    def from_file(cls, filepath: str | Path | None = None) -> "LootTableManager":
        mgr = cls()
        if filepath is None:
            filepath = Path(__file__).parent.parent / "data" / "loot_tables.toml"
        filepath = Path(filepath)
        if not filepath.exists():
            print(f"[LOOT] file not found: {filepath}")
            return mgr

        with open(filepath, "rb") as f:
            data = tomllib.load(f)

        for tname, tdata in data.get("tables", {}).items():
            pools = []
            for pdata in tdata.get("pools", []):
                entries = [
                    _Entry(
                        item=e.get("item", "nothing"),
                        weight=float(e.get("weight", 1)),
                        min_count=int(e.get("min_count", 1)),
                        max_count=int(e.get("max_count", 1)),
                        min_level=int(e.get("min_level", 0)),
                        max_level=int(e.get("max_level", 10**9)),
                    )
                    for e in pdata.get("entries", [])
                ]
                pools.append(_Pool(
                    name=pdata.get("name", ""),
                    rolls=int(pdata.get("rolls", 1)),
                    chance=float(pdata.get("chance", 1.0)),
                    entries=entries,
                ))
            mgr.tables[tname] = _Table(name=tname, description=tdata.get("description", ""), pools=pools)

        print(f"[LOOT] loaded {len(mgr.tables)} tables")
        return mgr
