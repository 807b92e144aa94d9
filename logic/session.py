"""logic/session.py — One running game: registry, state, systems, turn queue.

``GameSession`` owns the ``WorldRegistry`` and the ``WorldState`` and
wires every system to them.  All mutations go through one serialized
command queue, so a passive timer pulse can never land in the middle
of a player turn::

    session = GameSession.new_game(content)
    session.submit("move", 1, 0)
    session.submit("interact")
    session.update(dt)          # queues regen / clock pulses, drains queue

Commands
--------
    move dx dy    movement state machine (one turn)
    attack        hit whatever stands on the faced tile (one turn)
    interact      use the faced chest / station / NPC (no enemy pass)
    equip key     wear an inventory item in its slot (no turn)
    regen         passive HP pulse
    clock         passive time-of-day advance
    respawn       back to the town shrine after death

``snapshot()`` flattens the active map into plain data for a renderer.
"""

from __future__ import annotations
from collections import deque
from typing import Any

from core.content import Content, default_content
from core.registry import WorldRegistry, GameMap
from core.tuning import get as _tun
from components.entities import Combatant
from components.world_state import WorldState
from logic.loot_generator import LootGenerator
from logic.inventory_ops import equip as equip_item
from logic.loot_tables import LootTableManager
from logic.movement import MovementResolver, MoveResult, Outcome
from logic.worldgen.overworld import generate_overworld_grid, ensure_map, Overworld


class GameSession:
    def __init__(self, content: Content | None = None,
                 tables: LootTableManager | None = None,
                 registry: WorldRegistry | None = None,
                 state: WorldState | None = None):
        self.content = content or default_content()
        self.tables = tables or LootTableManager.from_file()
        self.registry = registry or WorldRegistry()
        self.state = state or WorldState()
        self.loot = LootGenerator(self.content)
        self.movement = MovementResolver(self.registry, self.state, self.content,
                                         self.loot, self.tables)
        self._queue: deque[tuple[str, tuple]] = deque()
        self._busy = False
        self._regen_acc = 0.0
        self._clock_acc = 0.0

    # ── Shortcuts to the systems ─────────────────────────────────────

    @property
    def exploration(self):
        return self.movement.exploration

    @property
    def combat(self):
        return self.movement.combat

    @property
    def ai(self):
        return self.movement.ai

    @property
    def current_map(self) -> GameMap | None:
        return self.registry.get(self.state.map_id)

    # ── Setup ────────────────────────────────────────────────────────

    @classmethod
    def new_game(cls, content: Content | None = None,
                 tables: LootTableManager | None = None,
                 size: tuple[int, int] | None = None) -> "GameSession":
        """Lay out the overworld and drop the player next to the town shrine."""
        session = cls(content, tables)
        w, h = size if size is not None else (None, None)
        session.registry.overworld = generate_overworld_grid(w, h)
        session.place_in_town()
        return session

    def town(self) -> GameMap | None:
        overworld: Overworld | None = self.registry.overworld
        if overworld is None:
            return None
        return ensure_map(self.registry, overworld.town_id, self.content)

    def place_in_town(self) -> None:
        town = self.town()
        if town is None:
            raise RuntimeError("session has no overworld; call new_game() or load one")
        st = self.state
        st.map_id = town.id
        st.x, st.y = town.width // 2, town.height // 2 + 1
        st.facing = "up"
        self.exploration.reveal_area(town.id, st.pos)
        if town.id not in st.waypoints:
            st.waypoints.append(town.id)

    # ── Serialized queue ─────────────────────────────────────────────

    def submit(self, command: str, *args) -> Any:
        """Queue a command and drain the queue.  Returns the command's result
        when it ran immediately, else ``None``."""
        self._queue.append((command, args))
        if self._busy:
            return None
        return self.process()

    def process(self) -> Any:
        self._busy = True
        result = None
        try:
            while self._queue:
                command, args = self._queue.popleft()
                result = self._dispatch(command, args)
        finally:
            self._busy = False
        return result

    def _dispatch(self, command: str, args: tuple) -> Any:
        if command == "move":
            return self.movement.move(*args)
        if command == "attack":
            return self.movement.attack()
        if command == "interact":
            return self.movement.interact()
        if command == "equip":
            return equip_item(self.state, *args)
        if command == "regen":
            return self._regen()
        if command == "clock":
            return self._advance_clock()
        if command == "respawn":
            return self.respawn()
        print(f"[SESSION] unknown command {command!r}")
        return None

    # Convenience wrappers

    def move(self, dx: int, dy: int) -> MoveResult:
        return self.submit("move", dx, dy)

    def attack(self) -> MoveResult:
        return self.submit("attack")

    def interact(self) -> bool:
        return self.submit("interact")

    def equip(self, key: str) -> bool:
        return self.submit("equip", key)

    # ── Passive timers ───────────────────────────────────────────────

    def update(self, dt: float) -> None:
        """Advance wall-clock timers by *dt* seconds and queue their pulses."""
        self._regen_acc += dt
        self._clock_acc += dt
        regen_every = float(_tun("timers", "regen_interval", 5.0))
        clock_every = float(_tun("timers", "clock_interval", 1.0))
        while self._regen_acc >= regen_every:
            self._regen_acc -= regen_every
            self._queue.append(("regen", ()))
        while self._clock_acc >= clock_every:
            self._clock_acc -= clock_every
            self._queue.append(("clock", ()))
        if not self._busy:
            self.process()

    def _regen(self) -> int:
        st = self.state
        if st.dead or st.stats.hp >= st.stats.max_hp:
            return 0
        before = st.stats.hp
        st.set_hp(before + max(0, st.stat("regen")))
        return st.stats.hp - before

    def _advance_clock(self) -> int:
        st = self.state
        step = int(_tun("timers", "clock_step", 10))
        hours, minutes = divmod(st.time_of_day, 100)
        minutes += step
        hours += minutes // 60
        st.time_of_day = (hours % 24) * 100 + minutes % 60
        return st.time_of_day

    def respawn(self) -> bool:
        st = self.state
        if not st.dead:
            return False
        lost = st.stats.gold // 2
        st.stats.gold -= lost
        st.set_hp(st.stats.max_hp)
        st.anims.clear()
        st.bump("deaths")
        self.place_in_town()
        st.message("world", f"You wake at the shrine. Lost {lost} gold.")
        print(f"[SESSION] respawn in {st.map_id}, lost {lost} gold")
        return True

    # ── Renderer view ────────────────────────────────────────────────

    def snapshot(self) -> dict:
        """Plain-data view of the active map for drawing."""
        st = self.state
        gm = self.current_map
        if gm is None:
            return {}
        entities = []
        for ent in gm.entities:
            rec = {
                "id": ent.id, "kind": ent.kind, "name": ent.name,
                "x": ent.x, "y": ent.y, "facing": ent.facing,
                "anim": st.anims.get(ent.id, ""),
            }
            if isinstance(ent, Combatant):
                rec.update(hp=ent.hp, max_hp=ent.max_hp, level=ent.level)
            entities.append(rec)
        return {
            "map_id": gm.id,
            "name": gm.name,
            "width": gm.width,
            "height": gm.height,
            "tiles": gm.tiles.base_rows(),
            "overlay": gm.tiles.overlay_list(),
            "explored": self.exploration.grid(gm.id),
            "entities": entities,
            "player": {
                "x": st.x, "y": st.y, "facing": st.facing,
                "hp": st.stats.hp, "max_hp": st.stats.max_hp,
                "level": st.stats.level, "anim": st.anims.get("player", ""),
            },
            "tick": st.tick,
            "time_of_day": st.time_of_day,
            "world_tier": st.world_tier,
        }


__all__ = ["GameSession", "MoveResult", "Outcome"]
