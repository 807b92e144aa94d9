"""components — Plain-data records shared by every system.

Submodules
----------
entities     Entity variants: Npc, Enemy, MobSpawner, Portal, Container,
             Crate, Station, ItemDrop, Collectible
items        Rarity, WeaponStats, LootItem
world_state  Stats, QuestProgress, WorldState

Import from the submodules directly, e.g.
``from components.entities import Enemy``.
"""
