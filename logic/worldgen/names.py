"""logic/worldgen/names.py — Name fragments for generated places."""

from __future__ import annotations
import random

TOWN_PREFIXES = ["Haven", "Oak", "Stone", "River", "Ember", "Frost", "Gold", "Willow"]
TOWN_SUFFIXES = ["'s Rest", "ford", "wick", "hollow", "stead", "brook", "gate"]

ZONE_NAMES = {
    "grass": (["Green", "Quiet", "Windy", "Sunny", "Old"],
              ["Meadow", "Fields", "Glade", "Woods", "Hills"]),
    "snow": (["Frozen", "Bitter", "White", "Howling", "Pale"],
             ["Wastes", "Tundra", "Peaks", "Drifts", "Pines"]),
    "desert": (["Scorching", "Dry", "Red", "Endless", "Sunken"],
               ["Dunes", "Flats", "Sands", "Mesa", "Barrens"]),
}


def town_name() -> str:
    return random.choice(TOWN_PREFIXES) + random.choice(TOWN_SUFFIXES)


def zone_name(biome: str) -> str:
    adjectives, nouns = ZONE_NAMES.get(biome, ZONE_NAMES["grass"])
    return f"{random.choice(adjectives)} {random.choice(nouns)}"
