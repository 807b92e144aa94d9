"""logic/combat/rewards.py — What happens when a combatant reaches 0 HP.

``resolve_kill`` removes the entity from its map (exactly once), updates
counters, bestiary and kill quests, and pays XP, gold and loot:

    enemy     xp  = floor(xp_const * xp_mod * growth**level)
              gold = floor(10 * xp_mod * growth**level * (0.5 + r))
    spawned   xp / 2, gold / 4, reduced equipment drop chance
    boss      xp × 2, gold × 2, +1 loot tier, boss key on the floor,
              world tier +1 (permanent)
    spawner   xp = floor(100 * growth**level), no gold, spawner loot table

Equipment rolls get a rarity bias: bosses 0.5, anything in a dungeon 0.2.
"""

from __future__ import annotations
import math
import random
from typing import TYPE_CHECKING

from core.registry import GameMap, MapKind
from core.tuning import get as _tun
from components.entities import Combatant, Enemy, MobSpawner, ItemDrop, new_id
from logic import scaling
from logic.inventory_ops import add_item
from logic.progression import grant_xp
from logic.quests import on_kill, on_collect

if TYPE_CHECKING:
    from logic.combat.resolver import CombatResolver


def resolve_kill(cr: "CombatResolver", gm: GameMap, target: Combatant) -> bool:
    """Pay out for a dead *target*.  Returns False if it was already removed."""
    if not gm.remove(target):
        return False
    st = cr.state
    st.anims.pop(target.id, None)
    if isinstance(target, MobSpawner):
        _spawner_rewards(cr, target)
    elif isinstance(target, Enemy):
        _enemy_rewards(cr, gm, target)
    return True


def _give(cr: "CombatResolver", rolled: dict[str, int]) -> None:
    for item in cr.loot.items(rolled):
        add_item(cr.state, item)
        on_collect(cr.state, cr.content, cr.loot, item.item_id, item.count)
        cr.state.message("loot", f"You got {item.count}× {item.name}.")


def _enemy_rewards(cr: "CombatResolver", gm: GameMap, enemy: Enemy) -> None:
    st, content = cr.state, cr.content
    st.bump("enemies_killed")
    if enemy.is_boss:
        st.bump("bosses_killed")

    tmpl = content.template_for(enemy.template or enemy.name)
    if tmpl is None:
        st.message("combat", f"{enemy.name} is defeated.")
        print(f"[COMBAT] no template for {enemy.name!r}, no rewards")
        return

    if tmpl.name not in st.bestiary:
        st.bestiary.add(tmpl.name)
        st.message("bestiary", f"New bestiary entry: {tmpl.name}")
    on_kill(st, content, cr.loot, enemy.name)

    xp = scaling.xp(tmpl.xp_mod, enemy.level)
    gold = scaling.gold(tmpl.xp_mod, enemy.level, random.random())
    if enemy.is_spawned:
        xp //= 2
        gold //= 4
    if enemy.is_boss:
        xp *= 2
        gold *= 2

    st.stats.gold += gold
    st.message("combat", f"{enemy.name} is defeated! +{xp} XP, +{gold} gold.",
               xp=xp, gold=gold)
    grant_xp(st, xp)

    if tmpl.drop and random.random() < float(_tun("loot", "trophy_chance", 0.5)):
        _give(cr, {tmpl.drop: 1})

    bias = 0.0
    if enemy.is_boss:
        bias = float(_tun("loot", "boss_bias", 0.5))
    elif gm.kind == MapKind.DUNGEON:
        bias = float(_tun("loot", "dungeon_bias", 0.2))
    gate_ok = not enemy.is_spawned or random.random() < float(_tun("loot", "spawned_drop_chance", 0.25))
    if gate_ok:
        item = cr.loot.generate(enemy.level, enemy.name, bias, boss=enemy.is_boss)
        if item is not None:
            add_item(st, item)
            st.message("loot", f"You found {item.name}!", rarity=item.rarity.label)

    if enemy.is_boss:
        key = cr.loot.item("boss_key")
        if key is not None:
            gm.add(ItemDrop(id=new_id("drop"), name=key.name, x=enemy.x, y=enemy.y, item=key))
        st.world_tier += 1
        st.message("world", f"The world grows more dangerous... (World Tier {st.world_tier})")
        print(f"[COMBAT] boss {enemy.name} down, world tier → {st.world_tier}")


def _spawner_rewards(cr: "CombatResolver", sp: MobSpawner) -> None:
    st = cr.state
    st.bump("spawners_destroyed")
    xp = math.floor(float(_tun("spawner", "xp_base", 100)) * scaling.growth() ** sp.level)
    st.message("combat", f"The spawner crumbles! +{xp} XP.", xp=xp)
    grant_xp(st, xp)
    _give(cr, cr.tables.roll("spawner_kill", sp.level))
