"""
core/registry.py — Live maps and the registry that owns them

A ``GameMap`` is one explorable grid (overworld zone, dungeon or
interior): a two-layer ``TileGrid`` plus the entities standing on it.
The ``WorldRegistry`` maps map id → live ``GameMap``.  It is created by
the session and passed by reference into every system; nothing reads
it from a global.

    reg = WorldRegistry()
    zone = reg.get_or_create("map_10_10", lambda: generate_zone_map(...))
    zone.add(Enemy(...))

Once a map id is registered it is never generated again: later lookups
return the same object, including every kill and harvest applied to it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, TypeVar

from core.tiles import TileGrid
from components.entities import Entity, Enemy, MobSpawner, entity_from_dict


class MapKind(str, Enum):
    ZONE = "zone"
    DUNGEON = "dungeon"
    INTERIOR = "interior"


class Biome(str, Enum):
    GRASS = "grass"
    SNOW = "snow"
    DESERT = "desert"
    CRYPT = "crypt"
    CAVE = "cave"
    MAGMA = "magma"
    INTERIOR = "interior"


E = TypeVar("E", bound=Entity)


@dataclass
class GameMap:
    id: str
    name: str
    kind: MapKind
    biome: Biome
    tiles: TileGrid
    difficulty: int = 0
    entities: list[Entity] = field(default_factory=list)
    neighbors: dict[str, str] = field(default_factory=dict)   # "north" → map id
    is_town: bool = False
    parent_id: str = ""
    entry: tuple[int, int] | None = None                      # where it was entered from

    @property
    def width(self) -> int:
        return self.tiles.width

    @property
    def height(self) -> int:
        return self.tiles.height

    def in_bounds(self, x: int, y: int) -> bool:
        return self.tiles.in_bounds(x, y)

    # -- Entities --

    def add(self, ent: E) -> E:
        if not self.in_bounds(ent.x, ent.y):
            raise ValueError(f"{ent.id} at {ent.pos} outside {self.id} "
                             f"({self.width}×{self.height})")
        self.entities.append(ent)
        return ent

    def remove(self, ent: Entity) -> bool:
        """Remove *ent* by identity.  Returns False if it was already gone."""
        for i, other in enumerate(self.entities):
            if other is ent:
                del self.entities[i]
                return True
        return False

    def entity_at(self, x: int, y: int, exclude: Entity | None = None) -> Entity | None:
        for ent in self.entities:
            if ent.x == x and ent.y == y and ent is not exclude:
                return ent
        return None

    def of_type(self, cls: type[E]) -> list[E]:
        return [e for e in self.entities if isinstance(e, cls)]

    def enemies(self) -> list[Enemy]:
        return self.of_type(Enemy)

    def spawners(self) -> list[MobSpawner]:
        return self.of_type(MobSpawner)

    def by_id(self, eid: str) -> Entity | None:
        for ent in self.entities:
            if ent.id == eid:
                return ent
        return None

    # -- Plain data --

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "biome": self.biome.value,
            "difficulty": self.difficulty,
            "width": self.width,
            "height": self.height,
            "tiles": self.tiles.base_rows(),
            "overlay": self.tiles.overlay_list(),
            "entities": [e.to_dict() for e in self.entities],
            "neighbors": dict(self.neighbors),
            "is_town": self.is_town,
            "parent_id": self.parent_id,
            "entry": list(self.entry) if self.entry else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "GameMap":
        gm = cls(
            id=d["id"],
            name=d.get("name", d["id"]),
            kind=MapKind(d.get("kind", "zone")),
            biome=Biome(d.get("biome", "grass")),
            tiles=TileGrid.from_rows(d["tiles"], d.get("overlay")),
            difficulty=int(d.get("difficulty", 0)),
            neighbors=dict(d.get("neighbors", {})),
            is_town=bool(d.get("is_town", False)),
            parent_id=d.get("parent_id", ""),
            entry=tuple(d["entry"]) if d.get("entry") else None,
        )
        for raw in d.get("entities", []):
            ent = entity_from_dict(raw)
            if ent is not None:
                gm.add(ent)
        return gm


class WorldRegistry:
    """Map id → live ``GameMap``.  One per session."""

    def __init__(self):
        self._maps: dict[str, GameMap] = {}
        self._generating: set[str] = set()
        # Overworld cell layout (logic.worldgen.overworld.Overworld), set by the session
        self.overworld = None

    def get(self, map_id: str) -> GameMap | None:
        return self._maps.get(map_id)

    def __contains__(self, map_id: str) -> bool:
        return map_id in self._maps

    def __len__(self) -> int:
        return len(self._maps)

    def __iter__(self) -> Iterator[GameMap]:
        return iter(self._maps.values())

    def ids(self) -> list[str]:
        return list(self._maps)

    def add(self, gm: GameMap) -> GameMap:
        """Register a freshly built map.  Re-registering an id is an error."""
        if gm.id in self._maps:
            raise ValueError(f"map {gm.id!r} already registered")
        self._maps[gm.id] = gm
        return gm

    def get_or_create(self, map_id: str, factory: Callable[[], GameMap]) -> GameMap:
        """Return the cached map, or build it exactly once with *factory*."""
        existing = self._maps.get(map_id)
        if existing is not None:
            return existing
        if map_id in self._generating:
            raise RuntimeError(f"re-entrant generation of {map_id!r}")
        self._generating.add(map_id)
        try:
            gm = factory()
        finally:
            self._generating.discard(map_id)
        if gm.id != map_id:
            raise ValueError(f"factory built {gm.id!r}, expected {map_id!r}")
        return self.add(gm)

    def debug_dump(self) -> str:
        lines = [f"WorldRegistry: {len(self._maps)} maps"]
        for gm in self._maps.values():
            lines.append(f"  {gm.id:<28} {gm.kind.value:<9} {gm.biome.value:<8} "
                         f"d={gm.difficulty:<3} ents={len(gm.entities)}")
        return "\n".join(lines)
