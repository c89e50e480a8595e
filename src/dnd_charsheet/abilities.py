"""Ability scores, proficiency bonus and racial adjustments."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .models import ABILITIES


# Ability score abbreviation → full name mapping
ABILITY_ABBREV = MappingProxyType({
    "STR": "strength",
    "DEX": "dexterity",
    "CON": "constitution",
    "INT": "intelligence",
    "WIS": "wisdom",
    "CHA": "charisma",
})

_ALL_PLUS_ONE = {ability: 1 for ability in ABILITIES}

# Race (lowercase) → ability increases, per the SRD
RACIAL_BONUSES: Mapping[str, Mapping[str, int]] = MappingProxyType({
    "dwarf": {"constitution": 2},
    "hill dwarf": {"constitution": 2, "wisdom": 1},
    "elf": {"dexterity": 2},
    "high elf": {"dexterity": 2, "intelligence": 1},
    "halfling": {"dexterity": 2},
    "lightfoot halfling": {"dexterity": 2, "charisma": 1},
    "lightfoot": {"dexterity": 2, "charisma": 1},
    "human": _ALL_PLUS_ONE,
    "dragonborn": {"strength": 2, "charisma": 1},
    "gnome": {"intelligence": 2},
    "rock gnome": {"intelligence": 2, "constitution": 1},
    "half-elf": {"charisma": 2, "dexterity": 1, "constitution": 1},
    "half orc": {"strength": 2, "constitution": 1},
    "half-orc": {"strength": 2, "constitution": 1},
    "tiefling": {"intelligence": 1, "charisma": 2},
})

# Racial traits simplified to plain skill proficiencies:
# Stonecunning -> history, Keen Senses -> perception, Menacing -> intimidation
RACIAL_SKILLS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "dwarf": ("history",),
    "hill dwarf": ("history",),
    "mountain dwarf": ("history",),
    "elf": ("perception",),
    "high elf": ("perception",),
    "wood elf": ("perception",),
    "dark elf": ("perception",),
    "drow": ("perception",),
    "half orc": ("intimidation",),
})


def ability_modifier(score: int) -> int:
    """Ability modifier, floor((score - 10) / 2). A score of 8 gives -1."""
    return (score - 10) // 2


def proficiency_bonus(level: int) -> int:
    """Proficiency bonus for a character level; 0 below level 1."""
    if level < 1:
        return 0
    if level >= 17:
        return 6
    return 2 + (level - 1) // 4


def normalize_race(race: str) -> str:
    """Lowercase, trimmed, hyphens as spaces ("Half-Orc" → "half orc")."""
    return race.strip().lower().replace("-", " ")


def racial_bonuses(race: str) -> Mapping[str, int]:
    """Ability increases granted by a race, empty for unknown races."""
    key = race.strip().lower()
    return RACIAL_BONUSES.get(key, {})


def apply_racial_bonuses(scores: Mapping[str, int], race: str) -> dict[str, int]:
    """Return a copy of ``scores`` with the race's ability increases added."""
    adjusted = dict(scores)
    for ability, bonus in racial_bonuses(race).items():
        adjusted[ability] = adjusted.get(ability, 0) + bonus
    return adjusted


def racial_skill_proficiencies(race: str) -> list[str]:
    """Skill proficiencies a race grants, from the local table."""
    return list(RACIAL_SKILLS.get(normalize_race(race), ()))
