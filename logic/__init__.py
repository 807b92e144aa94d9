"""logic — Game systems package.

Subpackages
-----------
worldgen/   — overworld layout, zones, towns, dungeons, interiors, monsters
ai/         — enemy turns, line of sight, mob spawners
combat/     — player attacks and kill rewards

Top-level modules
-----------------
session         — GameSession: registry + state + serialized command queue
movement        — per-turn movement / interaction state machine
interact        — chests, stations and NPCs on the faced tile
gathering       — harvesting trees and rocks
exploration     — fog-of-war grids
quests          — quest progress and secrets
progression     — player XP, levels and skill XP
inventory_ops   — stacking inventory helpers
scaling         — shared level-scaling formulas
loot_generator  — procedural equipment and content-table items
loot_tables     — loot table manager
"""
