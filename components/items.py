"""components.items — Loot items, rarities, and inventory stacks."""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from enum import IntEnum


class Rarity(IntEnum):
    """Eight rarity tiers, lowest first.  Order matters for comparisons."""
    COMMON = 0
    UNCOMMON = 1
    RARE = 2
    EPIC = 3
    LEGENDARY = 4
    MYTHIC = 5
    GODLY = 6
    DIVINE = 7

    @property
    def label(self) -> str:
        return self.name.capitalize()


STAT_KEYS = ("str", "dex", "int", "max_hp", "regen")

# Item types that merge into an existing inventory stack on pickup.
STACKABLE_TYPES = frozenset({
    "material", "consumable", "junk", "key", "collectible", "gadget", "blueprint",
})


@dataclass
class WeaponStats:
    category: str = "sword"
    min_dmg: int = 1
    max_dmg: int = 2
    crit_chance: float = 0.05   # 0–1
    crit_mult: float = 1.5
    range: int = 1              # tiles
    multi_hit_chance: float = 0.0


@dataclass
class LootItem:
    """A generated or content-table item.

    ``uid`` is unique per non-stackable instance; stackables share their
    ``item_id`` and only ``count`` changes after creation.
    """
    item_id: str
    name: str
    type: str = "material"
    count: int = 1
    uid: str = ""
    slot: str = ""
    rarity: Rarity = Rarity.COMMON
    stats: dict[str, int] = field(default_factory=dict)
    weapon: WeaponStats | None = None
    value: int = 0

    @property
    def stackable(self) -> bool:
        return self.type in STACKABLE_TYPES

    @property
    def key(self) -> str:
        """Inventory key: item id for stackables, uid otherwise."""
        return self.item_id if self.stackable else (self.uid or self.item_id)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["rarity"] = int(self.rarity)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "LootItem":
        d = dict(d)
        weapon = d.pop("weapon", None)
        rarity = Rarity(d.pop("rarity", 0))
        return cls(**d, rarity=rarity,
                   weapon=WeaponStats(**weapon) if weapon else None)
