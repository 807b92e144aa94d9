"""logic/ai — Enemy AI subpackage.

Modules
-------
perception   — Bresenham line of sight, Manhattan distance
enemy_turns  — EnemyAIController: attack / chase / idle per enemy
spawners     — tick-driven mob spawner summoning
"""
