"""core/save.py — Game state persistence (JSON).

A save file is the whole running game reduced to plain data:

- ``state``      the WorldState (player, inventory, counters, quests,
                 exploration grids, world tier, tick…)
- ``overworld``  the overworld cell layout (biomes, difficulty, names,
                 neighbor links)
- ``maps``       every map generated so far, with its base tiles,
                 depletion overlay and the entities still standing on it

Maps are stored as they are *now* (kills, harvests and opened chests
included), so loading never regenerates anything that already existed.
Maps not yet visited are still generated lazily after a load.

Single maps can also be exported on their own to NBT (see core/nbt.py).
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, TYPE_CHECKING

from core.registry import WorldRegistry, GameMap, Biome
from components.entities import reserve_ids
from components.world_state import WorldState

if TYPE_CHECKING:
    from logic.session import GameSession


SAVES_DIR = Path("saves")


def get_save_file(slot: int = 0, saves_dir: Path | None = None) -> Path:
    """Get the path for a save slot."""
    base = Path(saves_dir) if saves_dir is not None else SAVES_DIR
    base.mkdir(parents=True, exist_ok=True)
    return base / f"slot{slot}.json"


# ── Overworld layout ─────────────────────────────────────────────────

def _overworld_to_dict(overworld) -> dict[str, Any] | None:
    if overworld is None:
        return None
    return {
        "width": overworld.width,
        "height": overworld.height,
        "town_id": overworld.town_id,
        "cells": [
            {
                "id": c.id, "gx": c.gx, "gy": c.gy, "biome": c.biome.value,
                "difficulty": c.difficulty, "name": c.name, "is_town": c.is_town,
                "neighbors": dict(c.neighbors),
            }
            for c in overworld.cells.values()
        ],
    }


def _overworld_from_dict(d: dict[str, Any] | None):
    if not d:
        return None
    from logic.worldgen.overworld import Overworld, ZoneCell
    world = Overworld(width=int(d["width"]), height=int(d["height"]), town_id=d["town_id"])
    for raw in d.get("cells", []):
        cell = ZoneCell(
            id=raw["id"], gx=int(raw["gx"]), gy=int(raw["gy"]),
            biome=Biome(raw["biome"]), difficulty=int(raw["difficulty"]),
            name=raw.get("name", raw["id"]), is_town=bool(raw.get("is_town", False)),
            neighbors=dict(raw.get("neighbors", {})),
        )
        world.cells[cell.id] = cell
    return world


# ── Whole game ───────────────────────────────────────────────────────

def game_to_dict(registry: WorldRegistry, state: WorldState) -> dict[str, Any]:
    return {
        "state": state.to_dict(),
        "overworld": _overworld_to_dict(registry.overworld),
        "maps": [gm.to_dict() for gm in registry],
    }


def game_from_dict(data: dict[str, Any]) -> tuple[WorldRegistry, WorldState]:
    registry = WorldRegistry()
    registry.overworld = _overworld_from_dict(data.get("overworld"))
    for raw in data.get("maps", []):
        registry.add(GameMap.from_dict(raw))
    reserve_ids(ent.id for gm in registry for ent in gm.entities)
    state = WorldState.from_dict(data.get("state", {}))
    return registry, state


def save_game_state(session: "GameSession", slot: int = 0,
                    saves_dir: Path | None = None) -> Path:
    """Write the session to a save slot.  Returns the path written."""
    save_path = get_save_file(slot, saves_dir)
    with open(save_path, "w") as f:
        json.dump(game_to_dict(session.registry, session.state), f, indent=1)
    print(f"[SAVE] Wrote {len(session.registry)} maps to {save_path}")
    return save_path


def load_game_state(slot: int = 0, saves_dir: Path | None = None
                    ) -> tuple[WorldRegistry, WorldState] | None:
    """Read a save slot.  Returns ``None`` if the slot is empty.

    A corrupt file is reported and treated as empty, so a new game can
    start instead.
    """
    save_path = get_save_file(slot, saves_dir)
    if not save_path.exists():
        return None
    try:
        with open(save_path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as ex:
        print(f"[SAVE] Error loading save file: {ex}")
        return None
    registry, state = game_from_dict(data)
    print(f"[SAVE] Loaded {len(registry)} maps from {save_path}")
    return registry, state
