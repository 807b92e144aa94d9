"""components.world_state — Everything about the player's run that is not a map.

``WorldState`` is plain data: player position, stats, skills, inventory,
equipment, counters, flags, quest progress, exploration grids,
waypoints, the bestiary, the global world tier, and the simulated tick.
Maps live in the ``WorldRegistry``; this object only refers to them by
id.  ``to_dict`` / ``from_dict`` round-trip through JSON.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict

from components.items import LootItem, WeaponStats
from core.log import GameLog


@dataclass
class Stats:
    str: int = 5
    dex: int = 5
    int: int = 5
    regen: int = 1            # HP per regen pulse
    hp: int = 100
    max_hp: int = 100
    xp: int = 0
    level: int = 1
    gold: int = 0


@dataclass
class QuestProgress:
    quest_id: str
    count: int = 0
    completed: bool = False


@dataclass
class WorldState:
    map_id: str = ""
    x: int = 0
    y: int = 0
    facing: str = "down"

    stats: Stats = field(default_factory=Stats)
    skills: dict[str, int] = field(default_factory=dict)          # skill → xp
    inventory: dict[str, LootItem] = field(default_factory=dict)  # LootItem.key → item
    equipment: dict[str, LootItem] = field(default_factory=dict)  # slot → item

    counters: dict[str, int] = field(default_factory=dict)
    flags: dict[str, bool] = field(default_factory=dict)
    active_quest: QuestProgress | None = None
    completed_quests: list[str] = field(default_factory=list)

    exploration: dict[str, list[list[bool]]] = field(default_factory=dict)
    waypoints: list[str] = field(default_factory=list)
    anims: dict[str, str] = field(default_factory=dict)            # entity id → tag
    bestiary: set[str] = field(default_factory=set)
    perks: set[str] = field(default_factory=set)

    world_tier: int = 0
    tick: int = 0
    time_of_day: int = 800         # 0–2399, hhmm
    log: GameLog = field(default_factory=GameLog)

    # -- Small helpers --

    @property
    def pos(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def dead(self) -> bool:
        return self.stats.hp <= 0

    def bump(self, counter: str, n: int = 1) -> int:
        self.counters[counter] = self.counters.get(counter, 0) + n
        return self.counters[counter]

    def set_hp(self, value: int) -> int:
        self.stats.hp = max(0, min(self.stats.max_hp, int(value)))
        return self.stats.hp

    def stat(self, name: str) -> int:
        """Base stat plus every equipped item's bonus."""
        total = int(getattr(self.stats, name, 0))
        for item in self.equipment.values():
            total += int(item.stats.get(name, 0))
        return total

    def weapon(self) -> WeaponStats | None:
        item = self.equipment.get("weapon")
        return item.weapon if item else None

    def item_count(self, item_id: str) -> int:
        return sum(i.count for i in self.inventory.values() if i.item_id == item_id)

    def message(self, cat: str, msg: str, **details) -> None:
        self.log.record(cat, msg, tick=self.tick, details=details or None)

    # -- Plain data --

    def to_dict(self) -> dict:
        return {
            "map_id": self.map_id, "x": self.x, "y": self.y, "facing": self.facing,
            "stats": asdict(self.stats),
            "skills": dict(self.skills),
            "inventory": [i.to_dict() for i in self.inventory.values()],
            "equipment": {slot: i.to_dict() for slot, i in self.equipment.items()},
            "counters": dict(self.counters),
            "flags": dict(self.flags),
            "active_quest": asdict(self.active_quest) if self.active_quest else None,
            "completed_quests": list(self.completed_quests),
            "exploration": {k: [list(r) for r in g] for k, g in self.exploration.items()},
            "waypoints": list(self.waypoints),
            "bestiary": sorted(self.bestiary),
            "perks": sorted(self.perks),
            "world_tier": self.world_tier,
            "tick": self.tick,
            "time_of_day": self.time_of_day,
            "log": list(self.log.entries),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "WorldState":
        inv = [LootItem.from_dict(i) for i in d.get("inventory", [])]
        quest = d.get("active_quest")
        return cls(
            map_id=d.get("map_id", ""), x=int(d.get("x", 0)), y=int(d.get("y", 0)),
            facing=d.get("facing", "down"),
            stats=Stats(**d.get("stats", {})),
            skills=dict(d.get("skills", {})),
            inventory={i.key: i for i in inv},
            equipment={s: LootItem.from_dict(i) for s, i in d.get("equipment", {}).items()},
            counters=dict(d.get("counters", {})),
            flags=dict(d.get("flags", {})),
            active_quest=QuestProgress(**quest) if quest else None,
            completed_quests=list(d.get("completed_quests", [])),
            exploration={k: [list(r) for r in g] for k, g in d.get("exploration", {}).items()},
            waypoints=list(d.get("waypoints", [])),
            bestiary=set(d.get("bestiary", [])),
            perks=set(d.get("perks", [])),
            world_tier=int(d.get("world_tier", 0)),
            tick=int(d.get("tick", 0)),
            time_of_day=int(d.get("time_of_day", 800)),
            log=GameLog(entries=list(d.get("log", []))),
        )
