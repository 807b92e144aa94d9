"""logic/inventory_ops.py — Canonical inventory item operations.

Every pickup, harvest, reward and key use goes through these helpers so
stacking rules live in one place:

  - stackable types merge into the stack keyed by ``item_id``
  - everything else keeps its own entry keyed by ``uid``

Public API
----------
``add_item``      — add a LootItem (stacking when allowed)
``consume_item``  — decrement by item id, delete the entry at zero
``equip``         — move an inventory item into its equipment slot
"""

from __future__ import annotations

from components.items import LootItem
from components.world_state import WorldState


def add_item(state: WorldState, item: LootItem) -> LootItem:
    """Put *item* in the inventory; returns the stack it ended up in."""
    key = item.key
    existing = state.inventory.get(key)
    if existing is not None and item.stackable:
        existing.count += item.count
        return existing
    if existing is not None:
        # Same uid twice would overwrite; give the newcomer a distinct key.
        n = 2
        while f"{key}#{n}" in state.inventory:
            n += 1
        item.uid = f"{key}#{n}"
        key = item.uid
    state.inventory[key] = item
    return item


def consume_item(state: WorldState, item_id: str, count: int = 1) -> bool:
    """Remove *count* of *item_id*.  Returns False (no change) if short."""
    if state.item_count(item_id) < count:
        return False
    remaining = count
    for key in [k for k, i in state.inventory.items() if i.item_id == item_id]:
        stack = state.inventory[key]
        take = min(stack.count, remaining)
        stack.count -= take
        remaining -= take
        if stack.count <= 0:
            del state.inventory[key]
        if remaining == 0:
            break
    return True


def equip(state: WorldState, key: str) -> bool:
    """Equip the inventory entry *key*; the previous item goes back to the bag."""
    item = state.inventory.get(key)
    if item is None or not item.slot:
        return False
    del state.inventory[key]
    old = state.equipment.get(item.slot)
    state.equipment[item.slot] = item
    if old is not None:
        add_item(state, old)
    state.message("inventory", f"Equipped {item.name}.")
    return True
