"""Derived-stats calculator: modifiers, armor class, initiative, passive
perception and spellcasting numbers.

Armor data comes from an ``armor_lookup`` callable. It may be backed by the
enrichment API, but the calculator never fails because of it: a lookup that
returns None or raises EnrichmentUnavailableError falls back to 10 + DEX.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from .abilities import ability_modifier, proficiency_bonus
from .exceptions import EnrichmentUnavailableError
from .logutils import logger
from .models import ABILITIES, ArmorInfo, Character, SpellcastingStats
from .reference_data import to_index


ArmorLookup = Callable[[str], "ArmorInfo | None"]

BASE_AC = 10
DEFAULT_SHIELD_BONUS = 2
PASSIVE_BASE = 10
SPELL_SAVE_BASE = 8

# SRD armor: index -> (base AC, adds DEX)
LOCAL_ARMOR_TABLE: Mapping[str, tuple[int, bool]] = MappingProxyType({
    "padded-armor": (11, True),
    "padded": (11, True),
    "leather-armor": (11, True),
    "leather": (11, True),
    "studded-leather-armor": (12, True),
    "studded-leather": (12, True),
    "hide-armor": (12, True),
    "hide": (12, True),
    "chain-shirt": (13, True),
    "scale-mail": (14, True),
    "breastplate": (14, True),
    "half-plate-armor": (15, True),
    "half-plate": (15, True),
    "ring-mail": (14, False),
    "chain-mail": (16, False),
    "splint-armor": (17, False),
    "splint": (17, False),
    "plate-armor": (18, False),
    "plate": (18, False),
    "shield": (2, False),
})

SPELLCASTING_ABILITY: Mapping[str, str] = MappingProxyType({
    "wizard": "intelligence",
    "cleric": "wisdom",
    "druid": "wisdom",
    "ranger": "wisdom",
    "bard": "charisma",
    "sorcerer": "charisma",
    "warlock": "charisma",
    "paladin": "charisma",
})


def local_armor_lookup(name: str) -> ArmorInfo | None:
    """Look up armor in the built-in SRD table."""
    entry = LOCAL_ARMOR_TABLE.get(to_index(name))
    if entry is None:
        return None
    base_ac, dex_bonus = entry
    return ArmorInfo(name=name.strip().lower(), base_ac=base_ac, dex_bonus=dex_bonus)


def chain_armor_lookups(*lookups: ArmorLookup) -> ArmorLookup:
    """Combine lookups; the first one that returns data wins.

    Lookups raising EnrichmentUnavailableError are treated as misses.
    """
    def lookup(name: str) -> ArmorInfo | None:
        for candidate in lookups:
            try:
                info = candidate(name)
            except EnrichmentUnavailableError as e:
                logger.debug(f"Armor lookup for '{name}' unavailable: {e}")
                continue
            if info is not None:
                return info
        return None

    return lookup


def _safe_lookup(lookup: ArmorLookup | None, name: str) -> ArmorInfo | None:
    if lookup is None:
        return None
    try:
        return lookup(name)
    except EnrichmentUnavailableError as e:
        logger.warning(f"⚠️ Armor data for '{name}' unavailable, using fallback: {e}")
        return None


def calculate_armor_class(character: Character, armor_lookup: ArmorLookup | None = None) -> int:
    """Armor class, with Barbarian and Monk unarmored defense.

    Args:
        character: Character whose *_mod fields are already computed.
        armor_lookup: Resolves armor/shield names to ArmorInfo.
    """
    class_name = character.character_class.strip().lower()
    dex_mod = character.dexterity_mod

    if class_name == "barbarian" and not character.armor:
        ac = BASE_AC + dex_mod + character.constitution_mod
        if character.shield:
            ac += DEFAULT_SHIELD_BONUS
        return ac

    if class_name == "monk" and not character.armor and not character.shield:
        return BASE_AC + dex_mod + character.wisdom_mod

    ac = BASE_AC + dex_mod
    if character.armor:
        info = _safe_lookup(armor_lookup, character.armor)
        if info is not None:
            ac = info.base_ac + (dex_mod if info.dex_bonus else 0)

    if character.shield:
        shield_bonus = DEFAULT_SHIELD_BONUS
        info = _safe_lookup(armor_lookup, character.shield)
        if info is not None and info.base_ac > DEFAULT_SHIELD_BONUS:
            shield_bonus = info.base_ac
        ac += shield_bonus

    return ac


def calculate_passive_perception(character: Character) -> int:
    """10 + WIS modifier, plus proficiency when proficient in Perception."""
    passive = PASSIVE_BASE + character.wisdom_mod
    if character.has_skill("perception"):
        passive += character.proficiency_bonus
    return passive


def spellcasting_ability_for(class_name: str) -> str:
    """Spellcasting ability for a class, intelligence when unknown."""
    return SPELLCASTING_ABILITY.get(class_name.strip().lower(), "intelligence")


def spellcasting_stats(character: Character) -> SpellcastingStats:
    """Spellcasting ability, save DC and spell attack bonus."""
    ability = spellcasting_ability_for(character.character_class)
    ability_mod = ability_modifier(getattr(character, ability))
    return SpellcastingStats(
        ability=ability,
        ability_mod=ability_mod,
        spell_save_dc=SPELL_SAVE_BASE + character.proficiency_bonus + ability_mod,
        spell_attack_bonus=character.proficiency_bonus + ability_mod,
    )


def format_spellcasting_stats(character: Character) -> str:
    stats = spellcasting_stats(character)
    return (
        f"Spellcasting ability: {stats.ability}\n"
        f"Spell save DC: {stats.spell_save_dc}\n"
        f"Spell attack bonus: {stats.spell_attack_bonus:+d}\n"
    )


def recalculate_derived(character: Character, armor_lookup: ArmorLookup | None = None) -> Character:
    """Recompute every derived field of ``character`` in place.

    Also refreshes the proficiency bonus from the level.

    Returns:
        The same character, for chaining.
    """
    for ability in ABILITIES:
        setattr(character, f"{ability}_mod", ability_modifier(getattr(character, ability)))

    character.proficiency_bonus = proficiency_bonus(character.level)
    character.initiative = character.dexterity_mod
    character.passive_perception = calculate_passive_perception(character)
    character.armor_class = calculate_armor_class(character, armor_lookup)
    character.spell_attack_bonus = spellcasting_stats(character).spell_attack_bonus
    return character
