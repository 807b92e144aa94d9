"""logic/loot_generator.py — Procedural equipment synthesis.

``LootGenerator.generate(level, source, rarity_bias)`` runs the full
pipeline:

    1. drop gate        — Bernoulli(drop_chance); 1.0 for boss-class sources
    2. tier             — highest tier whose min_level ≤ level (+1 for bosses)
    3. slot / base name — uniform slot, uniform name (weapons use archetypes)
    4. rarity           — weighted cumulative draw over 8 tiers, shifted by bias
    5. affixes          — prefix above Common, suffix from Rare, base slot stats
    6. weapon scaling   — archetype damage × tier mult, Rare+ / Mythic+ bumps
    7. name and value   — "[prefix] tier base [suffix]", level × 10 × mult

It also turns content-table item ids into ``LootItem`` stacks
(``item(...)``) so every item in the game is built here.  Unknown ids
return ``None``.
"""

from __future__ import annotations
import math
import random

from components.items import LootItem, Rarity, WeaponStats
from core.content import Content, LootTier
from core.tuning import get as _tun


_next_uid = 0


def _uid() -> str:
    global _next_uid
    _next_uid += 1
    return f"item_{_next_uid}"


class LootGenerator:
    def __init__(self, content: Content):
        self.content = content

    # ── Building blocks ──────────────────────────────────────────────

    def is_boss_source(self, source: str) -> bool:
        return any(name in source for name in self.content.boss_sources)

    def drop_chance(self, source: str) -> float:
        if self.is_boss_source(source):
            return 1.0
        return float(_tun("loot", "drop_chance", 0.4))

    def tier_index(self, level: int, *, boss: bool = False, source: str = "") -> int:
        """Index into ``content.tiers``; monotonic non-decreasing in *level*."""
        tiers = self.content.tiers
        idx = 0
        for i, tier in enumerate(tiers):
            if tier.min_level <= level:
                idx = i
        if boss or any(name in source for name in self.content.tier_up_sources):
            idx = min(idx + 1, len(tiers) - 1)
        return idx

    def pick_tier(self, level: int, *, boss: bool = False, source: str = "") -> LootTier:
        return self.content.tiers[self.tier_index(level, boss=boss, source=source)]

    def roll_rarity(self, bias: float = 0.0) -> Rarity:
        """Weighted draw; *bias* (0–1) shifts the roll toward rarer tiers."""
        weights = self.content.rarity_weights
        total = sum(w for _, w in weights)
        if total <= 0:
            return Rarity.COMMON
        roll = min(total, random.uniform(0, total) + bias * total)
        cum = 0.0
        for rarity, w in weights:
            cum += w
            if roll < cum:
                return rarity
        return weights[-1][0]

    # ── Full pipeline ────────────────────────────────────────────────

    def generate(self, level: int, source: str = "", rarity_bias: float = 0.0, *,
                 boss: bool = False, guaranteed: bool = False) -> LootItem | None:
        if not self.content.tiers or not self.content.slots:
            print("[LOOT] no tiers/slots loaded, nothing generated")
            return None

        if not guaranteed and random.random() >= self.drop_chance(source):
            return None

        tier = self.pick_tier(level, boss=boss, source=source)
        mult = tier.mult

        slot_name = random.choice(list(self.content.slots))
        slot = self.content.slots[slot_name]
        archetype = None
        if slot_name == "weapon" and self.content.weapons:
            archetype = self.content.weapons[random.choice(list(self.content.weapons))]
            base_name = archetype.name
        else:
            base_name = random.choice(slot.names) if slot.names else slot_name.title()

        rarity = self.roll_rarity(rarity_bias)
        stats: dict[str, int] = {}
        prefix = suffix = ""

        if rarity > Rarity.COMMON and self.content.prefixes:
            affix = random.choice(self.content.prefixes)
            prefix = affix.name
            stats[affix.stat] = stats.get(affix.stat, 0) + math.floor(mult * 10 * affix.mod)

        suffix_from = Rarity[str(_tun("loot", "suffix_from", "RARE")).upper()]
        if rarity >= suffix_from and self.content.suffixes:
            affix = random.choice(self.content.suffixes)
            suffix = affix.name
            stats[affix.stat] = stats.get(affix.stat, 0) + math.floor(mult * 5 * affix.mod)

        if slot.stat_bias:
            for _ in range(max(1, math.floor(mult))):
                key = random.choice(slot.stat_bias)
                stats[key] = stats.get(key, 0) + math.floor(mult * 3)

        weapon = None
        if archetype is not None:
            weapon = WeaponStats(
                category=archetype.category,
                min_dmg=math.ceil(archetype.min_dmg * mult),
                max_dmg=math.ceil(archetype.max_dmg * mult),
                crit_chance=archetype.crit_chance,
                crit_mult=archetype.crit_mult,
                range=archetype.range,
            )
            if Rarity.RARE <= rarity <= Rarity.LEGENDARY:
                weapon.min_dmg = math.floor(weapon.min_dmg * 1.2)
                weapon.max_dmg = math.floor(weapon.max_dmg * 1.2)
                weapon.crit_chance += 0.05
            elif rarity >= Rarity.MYTHIC:
                weapon.min_dmg *= 2
                weapon.max_dmg *= 2
                weapon.crit_mult += 1.0
                weapon.multi_hit_chance = 0.5

        name = " ".join(p for p in (prefix, tier.name, base_name, suffix) if p)
        item = LootItem(
            item_id=f"{tier.name}_{base_name}".lower().replace(" ", "_"),
            name=name,
            type="equipment",
            uid=_uid(),
            slot=slot_name,
            rarity=rarity,
            stats=stats,
            weapon=weapon,
            value=math.floor(level * 10 * mult),
        )
        print(f"[LOOT] {source or 'drop'} L{level}: {item.name} ({rarity.label})")
        return item

    # ── Content-table items ──────────────────────────────────────────

    def item(self, item_id: str, count: int = 1) -> LootItem | None:
        """A stack of a content-table item, or None for unknown ids."""
        idef = self.content.item(item_id)
        if idef is None:
            print(f"[LOOT] unknown item id: {item_id}")
            return None
        return LootItem(
            item_id=idef.id,
            name=idef.name,
            type=idef.type,
            count=count,
            uid="" if idef.stackable else _uid(),
        )

    def items(self, rolled: dict[str, int]) -> list[LootItem]:
        """Turn a loot-table roll into items, dropping unknown ids."""
        out = []
        for item_id, count in rolled.items():
            stack = self.item(item_id, count)
            if stack is not None:
                out.append(stack)
        return out
