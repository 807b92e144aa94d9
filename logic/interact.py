"""logic/interact.py — The "interact" command.

Resolves whatever is on the tile the player faces.  Interacting never
moves the player and never runs the enemy pass.

    Container  CLOSED → roll its table, becomes OPEN
               LOCKED → needs ``key_id`` in the inventory; the key is
                        used up and the chest opens for good.  Without
                        the key nothing changes.
               OPEN   → already looted, nothing changes
    Station    bed heals, shrine/waypoint is remembered, signpost reads,
               fishing spot rolls the fishing table
    Npc        says their line and offers their quest
"""

from __future__ import annotations

from core.constants import DIRECTIONS, Tile
from core.content import Content
from core.registry import WorldRegistry
from core.tuning import get as _tun
from components.entities import Container, ContainerState, Station, StationKind, Npc
from components.world_state import WorldState
from logic.inventory_ops import add_item, consume_item
from logic.loot_generator import LootGenerator
from logic.loot_tables import LootTableManager
from logic.quests import start_quest, on_collect


class Interactor:
    def __init__(self, registry: WorldRegistry, state: WorldState, content: Content,
                 loot: LootGenerator, tables: LootTableManager):
        self.registry = registry
        self.state = state
        self.content = content
        self.loot = loot
        self.tables = tables

    def facing_cell(self) -> tuple[int, int]:
        dx, dy = DIRECTIONS.get(self.state.facing, (0, 1))
        return self.state.x + dx, self.state.y + dy

    def interact(self) -> bool:
        st = self.state
        gm = self.registry.get(st.map_id)
        if gm is None:
            return False
        x, y = self.facing_cell()
        ent = gm.entity_at(x, y)
        if isinstance(ent, Container):
            return self.open_container(ent)
        if isinstance(ent, Station):
            return self._use_station(ent, gm.id)
        if isinstance(ent, Npc):
            st.message("dialogue", f"{ent.name}: {ent.line}")
            if ent.quest_id:
                start_quest(st, self.content, ent.quest_id)
            return True
        if gm.tiles.get(x, y) == Tile.SHRINE:
            return self.remember_waypoint(gm.id)
        return False

    # ── Containers ───────────────────────────────────────────────────

    def open_container(self, chest: Container) -> bool:
        st = self.state
        if chest.state == ContainerState.OPEN:
            st.message("interact", f"The {chest.name} is empty.")
            return False
        if chest.state == ContainerState.LOCKED:
            if st.item_count(chest.key_id) < 1:
                st.message("interact", f"The {chest.name} is locked.")
                return False
            consume_item(st, chest.key_id, 1)

        chest.state = ContainerState.OPEN
        st.bump("chests_opened")
        st.message("interact", f"You open the {chest.name}.")
        self.give(self.tables.roll(chest.loot_table, chest.level))
        if chest.key_id:
            for _ in range(int(_tun("loot", "boss_chest_items", 2))):
                item = self.loot.generate(chest.level, "Boss Chest",
                                          float(_tun("loot", "boss_bias", 0.5)),
                                          guaranteed=True)
                if item is not None:
                    add_item(st, item)
                    st.message("loot", f"You found {item.name}!")
        return True

    def give(self, rolled: dict[str, int]) -> None:
        for item in self.loot.items(rolled):
            add_item(self.state, item)
            on_collect(self.state, self.content, self.loot, item.item_id, item.count)
            self.state.message("loot", f"You got {item.count}× {item.name}.")

    # ── Stations ─────────────────────────────────────────────────────

    def remember_waypoint(self, map_id: str) -> bool:
        if map_id in self.state.waypoints:
            return False
        self.state.waypoints.append(map_id)
        self.state.message("world", "Waypoint attuned.")
        return True

    def _use_station(self, station: Station, map_id: str) -> bool:
        st = self.state
        kind = station.station
        if kind == StationKind.BED:
            st.set_hp(st.stats.max_hp)
            st.message("interact", "You rest and feel refreshed.")
            return True
        if kind in (StationKind.SHRINE, StationKind.WAYPOINT):
            return self.remember_waypoint(map_id)
        if kind == StationKind.SIGNPOST:
            st.message("interact", station.text or "The sign is blank.")
            return True
        if kind == StationKind.FISHING_SPOT:
            rolled = self.tables.roll("fishing", st.stats.level)
            st.bump("fish_attempts")
            if not rolled:
                st.message("interact", "Nothing bites.")
                return True
            self.give(rolled)
            return True
        st.message("interact", f"The {station.name} awaits a craftsman.")
        return False
