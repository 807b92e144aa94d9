"""components.entities — Map entities as a tagged variant.

Every thing that stands on a map tile is one concrete dataclass below.
Systems dispatch on the class (``isinstance(ent, Enemy)``) rather than
on string type tags, and ``kind`` is only used for plain-data export.

Common fields live on ``Entity``.  Positions are tile coordinates and
must lie inside the owning map (``GameMap.add`` enforces it).  Anything
with hit points clamps them to ``[0, max_hp]`` through ``set_hp``.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import ClassVar

from components.items import LootItem


class AiType(str, Enum):
    MELEE = "melee"
    RANGED = "ranged"


class ContainerState(str, Enum):
    CLOSED = "closed"
    LOCKED = "locked"
    OPEN = "open"


class StationKind(str, Enum):
    ANVIL = "anvil"
    WORKBENCH = "workbench"
    BED = "bed"
    SHRINE = "shrine"
    SIGNPOST = "signpost"
    WAYPOINT = "waypoint"
    FISHING_SPOT = "fishing_spot"
    CAMPFIRE = "campfire"


# ═══════════════════════════════════════════════════════════════════
#  Base
# ═══════════════════════════════════════════════════════════════════

@dataclass
class Entity:
    id: str
    name: str
    x: int
    y: int
    facing: str = "down"

    kind: ClassVar[str] = "entity"
    walkable: ClassVar[bool] = False

    @property
    def pos(self) -> tuple[int, int]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind
        for k, v in d.items():
            if isinstance(v, Enum):
                d[k] = v.value
        return d


@dataclass
class Combatant(Entity):
    """Shared hit-point handling for enemies and spawners."""
    hp: int = 1
    max_hp: int = 1
    level: int = 1

    def set_hp(self, value: int) -> int:
        self.hp = max(0, min(self.max_hp, int(value)))
        return self.hp

    @property
    def dead(self) -> bool:
        return self.hp <= 0


# ═══════════════════════════════════════════════════════════════════
#  Variants
# ═══════════════════════════════════════════════════════════════════

@dataclass
class Npc(Entity):
    role: str = "villager"      # "mayor", "merchant", …
    line: str = ""
    quest_id: str = ""

    kind: ClassVar[str] = "npc"


@dataclass
class Enemy(Combatant):
    template: str = ""          # monster template name
    ai: AiType = AiType.MELEE
    aggro_range: int = 5        # tiles (Manhattan)
    attack_range: int = 1
    is_boss: bool = False
    is_elite: bool = False
    is_spawned: bool = False

    kind: ClassVar[str] = "enemy"


@dataclass
class MobSpawner(Combatant):
    spawn_type: str = "Slime"
    elapsed: int = 0            # ticks accumulated while its map is active

    kind: ClassVar[str] = "spawner"


@dataclass
class Portal(Entity):
    """Door, exit or stair that jumps to a linked map position."""
    dest_map: str = ""
    dest_x: int = 0
    dest_y: int = 0

    kind: ClassVar[str] = "portal"


@dataclass
class Container(Entity):
    state: ContainerState = ContainerState.CLOSED
    key_id: str = ""            # item required when LOCKED
    loot_table: str = ""
    level: int = 1

    kind: ClassVar[str] = "container"


@dataclass
class Crate(Entity):
    loot_table: str = "crate"
    level: int = 1

    kind: ClassVar[str] = "crate"


@dataclass
class Station(Entity):
    station: StationKind = StationKind.SIGNPOST
    text: str = ""

    kind: ClassVar[str] = "station"


@dataclass
class ItemDrop(Entity):
    item: LootItem | None = None

    kind: ClassVar[str] = "item_drop"
    walkable: ClassVar[bool] = True

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["item"] = self.item.to_dict() if self.item else None
        return d


@dataclass
class Collectible(Entity):
    item_id: str = ""
    count: int = 1

    kind: ClassVar[str] = "collectible"
    walkable: ClassVar[bool] = True


ENTITY_TYPES: dict[str, type[Entity]] = {
    cls.kind: cls for cls in (
        Npc, Enemy, MobSpawner, Portal, Container, Crate, Station, ItemDrop, Collectible,
    )
}

_ENUM_FIELDS = {"ai": AiType, "state": ContainerState, "station": StationKind}
_BOOL_FIELDS = ("is_boss", "is_elite", "is_spawned")


def entity_from_dict(d: dict) -> Entity | None:
    """Rebuild an entity from ``to_dict`` output.  Unknown kinds → None."""
    cls = ENTITY_TYPES.get(d.get("kind", ""))
    if cls is None:
        print(f"[ENTITY] unknown kind {d.get('kind')!r}, skipped")
        return None
    valid = {f.name for f in fields(cls)}
    kwargs = {k: v for k, v in d.items() if k in valid}
    for key, enum_cls in _ENUM_FIELDS.items():
        if key in kwargs:
            kwargs[key] = enum_cls(kwargs[key])
    # NBT has no boolean tag; flags come back as bytes
    for key in _BOOL_FIELDS:
        if key in kwargs:
            kwargs[key] = bool(kwargs[key])
    if cls is ItemDrop and kwargs.get("item"):
        kwargs["item"] = LootItem.from_dict(kwargs["item"])
    return cls(**kwargs)


_next_uid = 0


def new_id(prefix: str) -> str:
    """Process-unique entity id like ``enemy_17``."""
    global _next_uid
    _next_uid += 1
    return f"{prefix}_{_next_uid}"


def reserve_ids(ids) -> None:
    """Move the id counter past every ``prefix_N`` in *ids* (after a load)."""
    global _next_uid
    for eid in ids:
        tail = str(eid).rsplit("_", 1)[-1]
        if tail.isdigit():
            _next_uid = max(_next_uid, int(tail))
