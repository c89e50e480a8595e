"""Spellcasting rules: archetype and slot tables plus the learn/prepare state machine."""

from .tables import (
    CASTER_ARCHETYPES,
    CANTRIPS_KNOWN,
    FULL_CASTER_SLOTS,
    HALF_CASTER_SLOTS,
    PACT_CASTER_SLOTS,
    caster_archetype_for,
    cantrips_known_for,
    spell_slots_for,
)
from .engine import (
    assign_spellcasting,
    can_cast,
    format_cantrips,
    format_spell_slots,
    learn_spell,
    learns_spells,
    prepare_spell,
    prepares_spells,
)

__all__ = [
    "CASTER_ARCHETYPES",
    "CANTRIPS_KNOWN",
    "FULL_CASTER_SLOTS",
    "HALF_CASTER_SLOTS",
    "PACT_CASTER_SLOTS",
    "caster_archetype_for",
    "cantrips_known_for",
    "spell_slots_for",
    "assign_spellcasting",
    "can_cast",
    "format_cantrips",
    "format_spell_slots",
    "learn_spell",
    "learns_spells",
    "prepare_spell",
    "prepares_spells",
]
