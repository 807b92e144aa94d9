"""logic/quests.py — Quest progress and secrets.

Quests are declarative records from ``data/quests.toml``; their only
mutable part is the ``QuestProgress`` on ``WorldState``.  Combat and
movement call ``on_kill`` / ``on_collect`` as side effects; nothing
advances a quest on its own.

    KILL     progress when a killed enemy's display name contains the target
    COLLECT  progress when an item with exactly the target id is obtained

Progress is capped at the target count.  Reaching it completes the
quest once and pays its reward.

Secrets are boolean predicates over the world state, evaluated after
every turn by ``check_secrets``; each unlocks once and grants its stat
bonus and perk.
"""

from __future__ import annotations

from core.content import Content, SecretDef
from core.registry import WorldRegistry
from components.world_state import WorldState, QuestProgress
from logic.inventory_ops import add_item
from logic.loot_generator import LootGenerator
from logic.progression import grant_xp


def start_quest(state: WorldState, content: Content, quest_id: str) -> bool:
    if content.quest(quest_id) is None:
        print(f"[QUEST] unknown quest: {quest_id}")
        return False
    if quest_id in state.completed_quests:
        return False
    if state.active_quest is not None and not state.active_quest.completed:
        return False
    state.active_quest = QuestProgress(quest_id=quest_id)
    state.message("quest", f"Quest started: {content.quest(quest_id).title}")
    print(f"[QUEST] Started: {quest_id}")
    return True


def _advance(state: WorldState, content: Content, loot: LootGenerator, n: int) -> bool:
    prog = state.active_quest
    qdef = content.quest(prog.quest_id)
    prog.count = min(qdef.count, prog.count + n)
    state.message("quest", f"{qdef.title}: {prog.count}/{qdef.count}")
    if prog.count < qdef.count:
        return False

    prog.completed = True
    state.completed_quests.append(qdef.id)
    state.active_quest = None
    state.stats.gold += qdef.reward_gold
    grant_xp(state, qdef.reward_xp)
    if qdef.reward_item and qdef.reward_count > 0:
        item = loot.item(qdef.reward_item, qdef.reward_count)
        if item is not None:
            add_item(state, item)
    state.message("quest", f"Quest complete: {qdef.title}!")
    print(f"[QUEST] Completed: {qdef.id}")
    return True


def _active(state: WorldState, content: Content, kind: str):
    prog = state.active_quest
    if prog is None or prog.completed:
        return None
    qdef = content.quest(prog.quest_id)
    if qdef is None or qdef.type != kind:
        return None
    return qdef


def on_kill(state: WorldState, content: Content, loot: LootGenerator,
            display_name: str) -> bool:
    qdef = _active(state, content, "kill")
    if qdef is None or qdef.target not in display_name:
        return False
    _advance(state, content, loot, 1)
    return True


def on_collect(state: WorldState, content: Content, loot: LootGenerator,
               item_id: str, count: int = 1) -> bool:
    qdef = _active(state, content, "collect")
    if qdef is None or qdef.target != item_id:
        return False
    _advance(state, content, loot, count)
    return True


# ── Secrets ──────────────────────────────────────────────────────────

def secret_met(secret: SecretDef, state: WorldState, registry: WorldRegistry) -> bool:
    if secret.kind == "counter":
        return state.counters.get(secret.key, 0) >= secret.threshold
    if secret.kind == "explored":
        total = sum(sum(row) for g in state.exploration.values() for row in g)
        return total > secret.threshold
    if secret.kind == "biome":
        gm = registry.get(state.map_id)
        return gm is not None and gm.biome.value == secret.key
    if secret.kind == "world_tier":
        return state.world_tier >= secret.threshold
    if secret.kind == "bestiary":
        return len(state.bestiary) >= secret.threshold
    return False


def check_secrets(state: WorldState, content: Content, registry: WorldRegistry) -> list[str]:
    unlocked = []
    for secret in content.secrets.values():
        flag = f"secret:{secret.id}"
        if state.flags.get(flag) or not secret_met(secret, state, registry):
            continue
        state.flags[flag] = True
        for stat, bonus in secret.stat_bonus.items():
            setattr(state.stats, stat, getattr(state.stats, stat) + int(bonus))
        if secret.perk:
            state.perks.add(secret.perk)
        state.message("secret", f"Secret found: {secret.title}!")
        print(f"[SECRET] {secret.id}")
        unlocked.append(secret.id)
    return unlocked
