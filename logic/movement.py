"""logic/movement.py — The per-turn movement / interaction state machine.

``MovementResolver.move(dx, dy)`` classifies one directional input and
fires exactly one branch, in this priority order:

    1. out of bounds      → neighbor zone via entry scan, or facing only
    2. dungeon entrance   → enter (generate on first visit) at stairs up
    3. harvestable tile   → gather one item, deplete tile, stay put
    4. other blocked tile → facing only
    5. entity on tile     → pickup / teleport / attack / break / reject
    6. open tile          → step, reveal fog, enemy pass

Only a plain step (6) and an attack (5) hand the turn to the enemy AI.
Any branch that does something advances the simulated tick and charges
the spawners on the map the player ends up on; rejected moves do not.
Secrets are evaluated after every committed turn.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from core.constants import (
    Tile, BLOCKED_TILES, HARVESTABLE_TILES, ENTRANCE_TILES, ENTRANCE_KINDS,
    PATH_TILES, EDGE_FOR_DELTA, facing_for,
)
from core.content import Content
from core.registry import WorldRegistry, GameMap, MapKind
from components.entities import (
    Entity, ItemDrop, Collectible, Portal, Enemy, MobSpawner, Crate,
)
from components.world_state import WorldState
from logic.ai.enemy_turns import EnemyAIController
from logic.ai.spawners import process_spawners
from logic.combat import CombatResolver
from logic.exploration import ExplorationTracker
from logic.gathering import harvest
from logic.interact import Interactor
from logic.inventory_ops import add_item
from logic.loot_generator import LootGenerator
from logic.loot_tables import LootTableManager
from logic.quests import on_collect, check_secrets
from logic.worldgen.dungeons import dungeon_id, generate_dungeon
from logic.worldgen.overworld import ensure_map


OPPOSITE_EDGE = {"east": "west", "west": "east", "north": "south", "south": "north"}


class Outcome(str, Enum):
    EDGE_BLOCKED = "edge_blocked"
    MAP_CHANGE = "map_change"
    DUNGEON = "dungeon"
    HARVEST = "harvest"
    BLOCKED = "blocked"
    PICKUP = "pickup"
    TELEPORT = "teleport"
    ATTACK = "attack"
    BREAK = "break"
    REJECTED = "rejected"
    MOVED = "moved"


@dataclass
class MoveResult:
    outcome: Outcome
    moved: bool = False
    ai_ran: bool = False


def find_entry(gm: GameMap, edge: str) -> tuple[int, int]:
    """Deterministic arrival cell on *edge* of *gm*.

    Path tiles first, then any open tile, else the map centre; the
    median candidate wins.
    """
    w, h = gm.width, gm.height
    cells = {
        "north": [(x, 0) for x in range(w)],
        "south": [(x, h - 1) for x in range(w)],
        "west": [(0, y) for y in range(h)],
        "east": [(w - 1, y) for y in range(h)],
    }[edge]

    def free(x: int, y: int) -> bool:
        ent = gm.entity_at(x, y)
        return ent is None or ent.walkable

    paths = [(x, y) for x, y in cells if gm.tiles.get(x, y) in PATH_TILES and free(x, y)]
    if paths:
        return paths[len(paths) // 2]
    open_cells = [(x, y) for x, y in cells
                  if gm.tiles.get(x, y) not in BLOCKED_TILES
                  and gm.tiles.get(x, y) not in ENTRANCE_TILES and free(x, y)]
    if open_cells:
        return open_cells[len(open_cells) // 2]
    return (w // 2, h // 2)


class MovementResolver:
    def __init__(self, registry: WorldRegistry, state: WorldState, content: Content,
                 loot: LootGenerator, tables: LootTableManager):
        self.registry = registry
        self.state = state
        self.content = content
        self.loot = loot
        self.tables = tables
        self.exploration = ExplorationTracker(state, registry)
        self.combat = CombatResolver(registry, state, content, loot, tables)
        self.ai = EnemyAIController(registry, state, content)
        self.interactor = Interactor(registry, state, content, loot, tables)

    # ── Entry point ──────────────────────────────────────────────────

    def move(self, dx: int, dy: int) -> MoveResult:
        st = self.state
        if st.dead or (dx, dy) == (0, 0) or dx not in (-1, 0, 1) or dy not in (-1, 0, 1):
            return MoveResult(Outcome.REJECTED)
        gm = self.registry.get(st.map_id)
        if gm is None:
            print(f"[MOVE] current map {st.map_id!r} missing")
            return MoveResult(Outcome.REJECTED)

        st.anims.clear()
        st.facing = facing_for(dx, dy, st.facing)
        result = self._resolve(gm, dx, dy)
        if result.outcome not in (Outcome.REJECTED, Outcome.BLOCKED, Outcome.EDGE_BLOCKED):
            self._end_turn()
        return result

    def attack(self) -> MoveResult:
        """Attack whatever stands on the faced tile."""
        st = self.state
        gm = self.registry.get(st.map_id)
        if gm is None or st.dead:
            return MoveResult(Outcome.REJECTED)
        st.anims.clear()
        x, y = self.interactor.facing_cell()
        target = gm.entity_at(x, y)
        if not isinstance(target, (Enemy, MobSpawner)):
            st.message("combat", "You swing at nothing.")
            return MoveResult(Outcome.REJECTED)
        self.combat.attack(gm, target)
        self.ai.run(gm.id)
        self._end_turn()
        return MoveResult(Outcome.ATTACK, ai_ran=True)

    def interact(self) -> bool:
        st = self.state
        st.anims.clear()
        done = self.interactor.interact()
        if done:
            check_secrets(st, self.content, self.registry)
        return done

    # ── Branches ─────────────────────────────────────────────────────

    def _resolve(self, gm: GameMap, dx: int, dy: int) -> MoveResult:
        st = self.state
        nx, ny = st.x + dx, st.y + dy

        # 1. Off the map edge
        if not gm.in_bounds(nx, ny):
            return self._cross_edge(gm, nx, ny)

        tile = gm.tiles.get(nx, ny)

        # 2. Dungeon entrance
        if tile in ENTRANCE_TILES:
            return self._enter_dungeon(gm, nx, ny, tile)

        # 3. Harvestable resource
        if tile in HARVESTABLE_TILES:
            if harvest(st, gm, nx, ny, self.content, self.loot, self.tables):
                return MoveResult(Outcome.HARVEST)
            return MoveResult(Outcome.BLOCKED)

        # 4. Other blocking terrain
        if tile in BLOCKED_TILES:
            return MoveResult(Outcome.BLOCKED)

        # 5. Occupied tile
        ent = gm.entity_at(nx, ny)
        if ent is not None:
            return self._bump(gm, ent, nx, ny)

        # 6. Open ground
        self._commit_step(gm, nx, ny)
        self.ai.run(gm.id)
        return MoveResult(Outcome.MOVED, moved=True, ai_ran=True)

    def _cross_edge(self, gm: GameMap, nx: int, ny: int) -> MoveResult:
        st = self.state
        if not (0 <= nx < gm.width):
            delta = (1 if nx >= gm.width else -1, 0)
        else:
            delta = (0, 1 if ny >= gm.height else -1)
        edge = EDGE_FOR_DELTA[delta]
        target_id = gm.neighbors.get(edge)
        if target_id is None:
            return MoveResult(Outcome.EDGE_BLOCKED)
        target = ensure_map(self.registry, target_id, self.content)
        if target is None:
            print(f"[MOVE] neighbor {target_id!r} of {gm.id} could not be resolved")
            return MoveResult(Outcome.REJECTED)
        x, y = find_entry(target, OPPOSITE_EDGE[edge])
        self._switch_map(target, x, y)
        return MoveResult(Outcome.MAP_CHANGE, moved=True)

    def _enter_dungeon(self, gm: GameMap, nx: int, ny: int, tile: Tile) -> MoveResult:
        st = self.state
        did = dungeon_id(gm.id, nx, ny)
        dungeon = self.registry.get_or_create(did, lambda: generate_dungeon(
            did, gm.difficulty, ENTRANCE_KINDS[tile], gm.id, (nx, ny),
            st.stats.level, st.world_tier, self.content))
        stairs = dungeon.tiles.find(Tile.STAIRS_UP)
        x, y = stairs[0] if stairs else (dungeon.width // 2, dungeon.height // 2)
        st.bump("dungeons_entered")
        st.message("world", f"You descend into the {dungeon.name}.")
        self._switch_map(dungeon, x, y)
        return MoveResult(Outcome.DUNGEON, moved=True)

    def _bump(self, gm: GameMap, ent: Entity, nx: int, ny: int) -> MoveResult:
        st = self.state
        if isinstance(ent, (ItemDrop, Collectible)):
            item = ent.item if isinstance(ent, ItemDrop) else self.loot.item(ent.item_id, ent.count)
            if item is None:
                return MoveResult(Outcome.REJECTED)
            add_item(st, item)
            gm.remove(ent)
            st.message("loot", f"Picked up {item.count}× {item.name}.")
            on_collect(st, self.content, self.loot, item.item_id, item.count)
            self._commit_step(gm, nx, ny, count_step=False)
            return MoveResult(Outcome.PICKUP, moved=True)

        if isinstance(ent, Portal):
            target = ensure_map(self.registry, ent.dest_map, self.content)
            if target is None or not target.in_bounds(ent.dest_x, ent.dest_y):
                print(f"[MOVE] portal {ent.id} → {ent.dest_map!r} unresolved")
                return MoveResult(Outcome.REJECTED)
            self._switch_map(target, ent.dest_x, ent.dest_y)
            return MoveResult(Outcome.TELEPORT, moved=True)

        if isinstance(ent, (Enemy, MobSpawner)):
            self.combat.attack(gm, ent)
            self.ai.run(gm.id)
            return MoveResult(Outcome.ATTACK, ai_ran=True)

        if isinstance(ent, Crate):
            gm.remove(ent)
            st.bump("crates_broken")
            st.message("interact", "You smash the crate.")
            rolled = self.tables.roll(ent.loot_table, ent.level) or {"wood": 1}
            self.interactor.give(rolled)
            self._commit_step(gm, nx, ny, count_step=False)
            return MoveResult(Outcome.BREAK, moved=True)

        return MoveResult(Outcome.REJECTED)

    # ── Commit helpers ───────────────────────────────────────────────

    def _end_turn(self) -> None:
        """Tick the clock, charge spawners where the player now stands, check secrets."""
        st = self.state
        st.tick += 1
        gm = self.registry.get(st.map_id)
        if gm is not None:
            process_spawners(gm, st, self.content)
        check_secrets(st, self.content, self.registry)

    def _commit_step(self, gm: GameMap, x: int, y: int, count_step: bool = True) -> None:
        st = self.state
        st.x, st.y = x, y
        if count_step:
            st.bump("steps_taken")
        self.exploration.reveal_area(gm.id, (x, y))
        if gm.tiles.get(x, y) == Tile.SHRINE:
            self.interactor.remember_waypoint(gm.id)

    def _switch_map(self, target: GameMap, x: int, y: int) -> None:
        st = self.state
        st.map_id = target.id
        st.x, st.y = x, y
        if target.kind == MapKind.INTERIOR:
            self.exploration.reveal_all(target.id)
        else:
            self.exploration.reveal_area(target.id, (x, y))
        print(f"[MOVE] → {target.id} at ({x}, {y})")
