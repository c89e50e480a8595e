"""Spellcasting state machine.

A character either has no spellcasting or an assigned SpellcastingState.
Known casters (bard, sorcerer) and pact casters (warlock) *learn* spells;
full casters (wizard, cleric, druid) and half casters (paladin, ranger)
*prepare* them. Preparing does not require the spell to be known first:
prepared casters pick directly from their class list, as in the SRD.

Every transition either succeeds and mutates the state in place, or raises
a SpellcastingError and leaves the state untouched.
"""

from __future__ import annotations

from ..exceptions import (
    AlreadyKnownError,
    AlreadyPreparedError,
    SlotTooHighError,
    WrongCasterTypeError,
)
from ..logutils import logger
from ..models import CasterArchetype, SpellcastingState
from .tables import MAX_SLOT_LEVEL, caster_archetype_for, cantrips_known_for, spell_slots_for


LEARNING_ARCHETYPES = frozenset({CasterArchetype.KNOWN, CasterArchetype.PACT})
PREPARING_ARCHETYPES = frozenset({CasterArchetype.FULL, CasterArchetype.HALF})


def can_cast(archetype: CasterArchetype) -> bool:
    return archetype != CasterArchetype.NONE


def learns_spells(archetype: CasterArchetype) -> bool:
    return archetype in LEARNING_ARCHETYPES


def prepares_spells(archetype: CasterArchetype) -> bool:
    return archetype in PREPARING_ARCHETYPES


def assign_spellcasting(
    class_name: str,
    level: int,
    existing: SpellcastingState | None = None,
) -> SpellcastingState:
    """Create or refresh the spellcasting state for a class and level.

    Args:
        class_name: The character's class.
        level: The character's level.
        existing: The character's current state, if any.

    Returns:
        ``existing`` unchanged when its archetype and slots already match the
        class and level. Otherwise a state with re-derived archetype and
        slots; spell lists from ``existing`` are carried over, except that
        prepared spells are dropped when the new archetype cannot prepare.
    """
    archetype = caster_archetype_for(class_name)
    slots = spell_slots_for(archetype, level)

    if existing is None:
        return SpellcastingState(archetype=archetype, slots=slots)

    if existing.archetype == archetype and existing.slots == slots:
        return existing

    logger.debug(
        f"🔄 Re-deriving spellcasting for {class_name} {level}: "
        f"{existing.archetype.value} -> {archetype.value}"
    )
    return SpellcastingState(
        archetype=archetype,
        known_spells=list(existing.known_spells),
        prepared_spells=list(existing.prepared_spells) if prepares_spells(archetype) else [],
        slots=slots,
    )


def learn_spell(state: SpellcastingState, spell_name: str) -> str:
    """Add a spell to the known list of a known or pact caster.

    Returns:
        A confirmation message.

    Raises:
        WrongCasterTypeError: The archetype prepares spells or cannot cast.
        AlreadyKnownError: The spell is already known (case-insensitive).
    """
    if prepares_spells(state.archetype):
        raise WrongCasterTypeError(
            "this class prepares spells and can't learn them", spell_name
        )
    if not learns_spells(state.archetype):
        raise WrongCasterTypeError("this class can't cast spells", spell_name)

    if state.knows(spell_name):
        raise AlreadyKnownError("Already learned this spell", spell_name)

    state.known_spells.append(spell_name)
    return f"Learned spell {spell_name.lower()}"


def prepare_spell(state: SpellcastingState, spell_name: str, spell_level: int) -> str:
    """Add a spell to the prepared list of a full or half caster.

    Cantrips (level 0) skip the slot check.

    Returns:
        A confirmation message.

    Raises:
        WrongCasterTypeError: The archetype learns spells or cannot cast.
        AlreadyPreparedError: The spell is already prepared (case-insensitive).
        SlotTooHighError: The spell's level exceeds the highest available slot.
    """
    if learns_spells(state.archetype):
        raise WrongCasterTypeError(
            "this class learns spells and can't prepare them", spell_name
        )
    if not prepares_spells(state.archetype):
        raise WrongCasterTypeError("this class can't cast spells", spell_name)

    if state.has_prepared(spell_name):
        raise AlreadyPreparedError("spell is already prepared", spell_name)

    if spell_level > 0:
        max_slot = state.max_slot_level
        if spell_level > max_slot:
            raise SlotTooHighError(
                "the spell has higher level than the available spell slots",
                spell_name,
                spell_level=spell_level,
                max_slot_level=max_slot,
            )

    state.prepared_spells.append(spell_name)
    return f"Prepared spell {spell_name.lower()}"


def format_spell_slots(state: SpellcastingState | None, class_name: str, level: int) -> str:
    """Render cantrips and spell slots, one line per populated level."""
    if state is None:
        return ""

    lines = ["Spell slots:"]
    cantrips = cantrips_known_for(class_name, level)
    if cantrips > 0:
        lines.append(f"  Level 0: {cantrips}")
    for slot_level in range(1, MAX_SLOT_LEVEL + 1):
        if slot_level in state.slots:
            lines.append(f"  Level {slot_level}: {state.slots[slot_level]}")
    return "\n".join(lines) + "\n"


def format_cantrips(state: SpellcastingState | None) -> str:
    """Render cantrips from a level-0 slot entry, else from known spell names."""
    if state is None:
        return ""

    if 0 in state.slots:
        return f"Spell slots:\n  Level 0: {state.slots[0]}\n"

    cantrips = [
        name for name in state.known_spells
        if "cantrip" in name.lower() or "level 0" in name.lower()
    ]
    if cantrips:
        return f"Cantrips: {', '.join(cantrips)}\n"
    return ""
