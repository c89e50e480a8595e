"""Static spellcasting tables: caster archetypes, spell slots and cantrips.

All tables follow the 5e SRD progression and are read-only mappings. Lookups
return fresh dicts so callers can never mutate a table.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..models import CasterArchetype


MIN_LEVEL = 1
MAX_LEVEL = 20
MAX_SLOT_LEVEL = 9


def _freeze(table: dict[int, dict[int, int]]) -> Mapping[int, Mapping[int, int]]:
    return MappingProxyType({lvl: MappingProxyType(slots) for lvl, slots in table.items()})


CASTER_ARCHETYPES: Mapping[str, CasterArchetype] = MappingProxyType({
    "wizard": CasterArchetype.FULL,
    "cleric": CasterArchetype.FULL,
    "druid": CasterArchetype.FULL,
    "bard": CasterArchetype.KNOWN,
    "sorcerer": CasterArchetype.KNOWN,
    "paladin": CasterArchetype.HALF,
    "ranger": CasterArchetype.HALF,
    "warlock": CasterArchetype.PACT,
})

# character level -> {spell level: slots}
FULL_CASTER_SLOTS = _freeze({
    1:  {1: 2},
    2:  {1: 3},
    3:  {1: 4, 2: 2},
    4:  {1: 4, 2: 3},
    5:  {1: 4, 2: 3, 3: 2},
    6:  {1: 4, 2: 3, 3: 3},
    7:  {1: 4, 2: 3, 3: 3, 4: 1},
    8:  {1: 4, 2: 3, 3: 3, 4: 2},
    9:  {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    10: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    11: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    12: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    13: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    16: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1, 9: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 1, 7: 1, 8: 1, 9: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 1, 8: 1, 9: 1},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 1, 9: 1},
})

# Paladin / Ranger: no slots at level 1
HALF_CASTER_SLOTS = _freeze({
    1:  {},
    2:  {1: 2},
    3:  {1: 3},
    4:  {1: 3},
    5:  {1: 4, 2: 2},
    6:  {1: 4, 2: 2},
    7:  {1: 4, 2: 3},
    8:  {1: 4, 2: 3},
    9:  {1: 4, 2: 3, 3: 2},
    10: {1: 4, 2: 3, 3: 2},
    11: {1: 4, 2: 3, 3: 3},
    12: {1: 4, 2: 3, 3: 3},
    13: {1: 4, 2: 3, 3: 3, 4: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 2},
    16: {1: 4, 2: 3, 3: 3, 4: 2},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
})

# Warlock Pact Magic: all slots share one level
PACT_CASTER_SLOTS = _freeze({
    1:  {1: 1},
    2:  {1: 2},
    3:  {2: 2},
    4:  {2: 2},
    5:  {3: 2},
    6:  {3: 2},
    7:  {4: 2},
    8:  {4: 2},
    9:  {5: 2},
    10: {5: 2},
    11: {5: 3},
    12: {5: 3},
    13: {5: 3},
    14: {5: 3},
    15: {5: 3},
    16: {5: 3},
    17: {5: 4},
    18: {5: 4},
    19: {5: 4},
    20: {5: 4},
})

# Known casters (bard, sorcerer) follow the full progression
SLOT_TABLES: Mapping[CasterArchetype, Mapping[int, Mapping[int, int]]] = MappingProxyType({
    CasterArchetype.FULL: FULL_CASTER_SLOTS,
    CasterArchetype.KNOWN: FULL_CASTER_SLOTS,
    CasterArchetype.HALF: HALF_CASTER_SLOTS,
    CasterArchetype.PACT: PACT_CASTER_SLOTS,
})

# class -> cantrips known, indexed by level (index 0 unused)
CANTRIPS_KNOWN: Mapping[str, tuple[int, ...]] = MappingProxyType({
    "bard":     (0, 2, 2, 2, 3, 3, 3, 3, 3, 3, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4),
    "cleric":   (0, 3, 3, 3, 4, 4, 4, 4, 4, 4, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5),
    "druid":    (0, 2, 2, 2, 3, 3, 3, 3, 3, 3, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4),
    "sorcerer": (0, 4, 4, 4, 5, 5, 5, 5, 5, 5, 6, 6, 6, 6, 6, 6, 6, 6, 6, 6, 6),
    "warlock":  (0, 2, 2, 2, 3, 3, 3, 3, 3, 3, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4),
    "wizard":   (0, 3, 3, 3, 4, 4, 4, 4, 4, 4, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5),
})


def caster_archetype_for(class_name: str) -> CasterArchetype:
    """Caster archetype for a class name (case-insensitive), NONE if unknown."""
    return CASTER_ARCHETYPES.get(class_name.strip().lower(), CasterArchetype.NONE)


def spell_slots_for(archetype: CasterArchetype | str, level: int) -> dict[int, int]:
    """Spell slots by spell level for an archetype at a character level.

    Levels outside 1-20 and the NONE archetype give an empty dict.
    """
    table = SLOT_TABLES.get(CasterArchetype(archetype))
    if table is None or not MIN_LEVEL <= level <= MAX_LEVEL:
        return {}
    return {
        slot_level: count
        for slot_level, count in table.get(level, {}).items()
        if 1 <= slot_level <= MAX_SLOT_LEVEL
    }


def cantrips_known_for(class_name: str, level: int) -> int:
    """Number of cantrips a class knows at a level.

    Levels past the end of the table use the last entry; classes without
    cantrips and levels below 1 give 0.
    """
    counts = CANTRIPS_KNOWN.get(class_name.strip().lower())
    if counts is None or level < 1:
        return 0
    if level >= len(counts):
        return counts[-1]
    return counts[level]
