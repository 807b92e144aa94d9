"""logic/gathering.py — Harvesting trees and rocks.

A harvest consumes the player's turn without moving them: one material
item goes into the inventory, the skill gains XP, and the tile's
depletion overlay records the stump / rubble.  A cell can be harvested
once; its base terrain is never touched.

Trees always give their species' log.  Rocks roll the level-gated
``harvest_rock`` table (stone early, ores later).
"""

from __future__ import annotations

from core.constants import Tile, TREE_TILES, ROCK_TILES, DEPLETED_FORM
from core.content import Content
from core.registry import GameMap
from core.tuning import get as _tun
from components.world_state import WorldState
from logic.inventory_ops import add_item
from logic.loot_generator import LootGenerator
from logic.loot_tables import LootTableManager
from logic.progression import grant_skill_xp
from logic.quests import on_collect


LOG_FOR_TREE: dict[Tile, str] = {
    Tile.OAK_TREE: "oak_log",
    Tile.BIRCH_TREE: "birch_log",
    Tile.PINE_TREE: "pine_log",
}


def harvest(state: WorldState, gm: GameMap, x: int, y: int, content: Content,
            loot: LootGenerator, tables: LootTableManager) -> bool:
    """Harvest the resource at ``(x, y)``.  Returns False with no mutation
    if the tile is not harvestable, already depleted, or yields an
    unknown item."""
    tile = gm.tiles.get(x, y)
    if tile in TREE_TILES:
        skill, counter = "Logging", "trees_cut"
        item_id = LOG_FOR_TREE[tile]
    elif tile in ROCK_TILES:
        skill, counter = "Mining", "rocks_mined"
        rolled = tables.roll("harvest_rock", state.stats.level)
        item_id = next(iter(rolled), "stone")
    else:
        return False

    item = loot.item(item_id, 1)
    if item is None:
        return False
    if not gm.tiles.deplete(x, y, DEPLETED_FORM[tile]):
        return False

    add_item(state, item)
    grant_skill_xp(state, skill, int(_tun("gathering", "xp_per_harvest", 10)))
    state.bump(counter)
    state.message("gather", f"You gather 1× {item.name}. (+{skill} XP)")
    on_collect(state, content, loot, item.item_id, 1)
    return True
