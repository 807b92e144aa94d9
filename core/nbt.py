"""core/nbt.py — NBT export / import of single maps.

Writes one ``GameMap`` to an NBT file with `nbtlib`, so a generated zone
or dungeon can be inspected with standard NBT tools or shipped as a
hand-edited fixture.

Structure (TAG_Compound):
  - id, name, kind, biome, parent_id: TAG_String
  - width, height, difficulty: TAG_Int
  - is_town: TAG_Byte
  - tiles: TAG_Byte_Array (base layer, row-major)
  - overlay: TAG_Int_Array (flattened x, y, tile triples)
  - entry: TAG_Int_Array (x, y), absent when unknown
  - neighbors: TAG_Compound { edge: TAG_String }
  - entities: TAG_List of TAG_Compound (one per entity, ``to_dict`` keys)
"""
from __future__ import annotations
from pathlib import Path

import nbtlib
from nbtlib import tag

from core.registry import GameMap


_INT_MIN, _INT_MAX = -(2 ** 31), 2 ** 31 - 1


def _to_tag(value):
    """Plain Python value → NBT tag.  ``None`` has no tag; callers skip it."""
    if isinstance(value, bool):
        return tag.Byte(int(value))
    if isinstance(value, int):
        return tag.Int(value) if _INT_MIN <= value <= _INT_MAX else tag.Long(value)
    if isinstance(value, float):
        return tag.Double(value)
    if isinstance(value, str):
        return tag.String(value)
    if isinstance(value, dict):
        return tag.Compound({k: _to_tag(v) for k, v in value.items() if v is not None})
    if isinstance(value, (list, tuple)):
        return tag.List([_to_tag(v) for v in value if v is not None])
    raise TypeError(f"cannot store {type(value).__name__} in NBT")


def map_to_nbt(gm: GameMap) -> nbtlib.Compound:
    d = gm.to_dict()
    flat = bytearray()
    for row in d["tiles"]:
        for v in row:
            flat.append(int(v) & 0xFF)

    root = nbtlib.Compound()
    root["id"] = tag.String(d["id"])
    root["name"] = tag.String(d["name"])
    root["kind"] = tag.String(d["kind"])
    root["biome"] = tag.String(d["biome"])
    root["parent_id"] = tag.String(d["parent_id"])
    root["width"] = tag.Int(d["width"])
    root["height"] = tag.Int(d["height"])
    root["difficulty"] = tag.Int(d["difficulty"])
    root["is_town"] = tag.Byte(int(d["is_town"]))
    root["tiles"] = tag.ByteArray(flat)
    root["overlay"] = tag.IntArray([v for triple in d["overlay"] for v in triple])
    if d["entry"]:
        root["entry"] = tag.IntArray(d["entry"])
    root["neighbors"] = _to_tag(d["neighbors"])
    root["entities"] = tag.List[tag.Compound]([_to_tag(e) for e in d["entities"]])
    return root


def map_from_nbt(root) -> GameMap:
    w = int(root["width"])
    h = int(root["height"])
    ba = bytes(root["tiles"])
    if len(ba) < w * h:
        raise ValueError(f"tile array holds {len(ba)} cells, expected {w * h}")
    rows = [[int(ba[y * w + x]) for x in range(w)] for y in range(h)]
    flat = [int(v) for v in root.get("overlay", [])]
    overlay = [flat[i:i + 3] for i in range(0, len(flat) - 2, 3)]
    entry = [int(v) for v in root["entry"]] if "entry" in root else None

    return GameMap.from_dict({
        "id": str(root["id"]),
        "name": str(root.get("name", root["id"])),
        "kind": str(root.get("kind", "zone")),
        "biome": str(root.get("biome", "grass")),
        "parent_id": str(root.get("parent_id", "")),
        "difficulty": int(root.get("difficulty", 0)),
        "is_town": bool(root.get("is_town", 0)),
        "tiles": rows,
        "overlay": overlay,
        "entry": entry,
        "neighbors": root["neighbors"].unpack() if "neighbors" in root else {},
        "entities": [e.unpack() for e in root.get("entities", [])],
    })


def save_map_nbt(gm: GameMap, dir_path: Path | None = None) -> Path:
    """Write *gm* to ``<dir_path>/<map id>.nbt`` and return the path."""
    dir_path = Path(dir_path) if dir_path is not None else Path("zones")
    dir_path.mkdir(parents=True, exist_ok=True)
    out_path = dir_path / f"{gm.id}.nbt"
    # Remove old file if exists to ensure clean overwrite
    if out_path.exists():
        out_path.unlink()
    nbtlib.File(map_to_nbt(gm)).save(out_path)
    print(f"[SAVE] Exported {gm.id} to {out_path}")
    return out_path


def load_map_nbt(path: Path) -> GameMap:
    """Load a map written by ``save_map_nbt``."""
    return map_from_nbt(nbtlib.load(Path(path)))
