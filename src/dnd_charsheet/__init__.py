"""
dnd-charsheet: D&D 5e character sheets with a spellcasting rules engine.
"""

__version__ = "0.1.0"

from .models import Character, CasterArchetype, SpellcastingState
from .exceptions import CharsheetError

__all__ = [
    "Character",
    "CasterArchetype",
    "SpellcastingState",
    "CharsheetError",
]
