"""
Exception hierarchy for dnd-charsheet.

Every error raised on purpose by the package derives from CharsheetError so
the CLI can turn it into a short message and a non-zero exit code.
"""

from __future__ import annotations

from typing import Any


class CharsheetError(Exception):
    """Base exception for all dnd-charsheet errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary of additional error context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(CharsheetError):
    """A character, spell, class or background could not be found."""
    pass


class ValidationError(CharsheetError):
    """User input failed validation (bad slot, missing argument, ...)."""
    pass


class SpellcastingError(CharsheetError):
    """A learn/prepare transition was rejected.

    Attributes:
        spell_name: The spell involved in the rejected transition
    """

    def __init__(
        self,
        message: str,
        spell_name: str = "",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.spell_name = spell_name


class WrongCasterTypeError(SpellcastingError):
    """The character's caster archetype does not allow this transition."""
    pass


class AlreadyKnownError(SpellcastingError):
    """The spell is already in the known list."""
    pass


class AlreadyPreparedError(SpellcastingError):
    """The spell is already in the prepared list."""
    pass


class SlotTooHighError(SpellcastingError):
    """The spell's level exceeds the highest spell slot available.

    Attributes:
        spell_level: Level of the spell being prepared
        max_slot_level: Highest slot level currently available (0 if none)
    """

    def __init__(
        self,
        message: str,
        spell_name: str = "",
        spell_level: int = 0,
        max_slot_level: int = 0,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, spell_name, details)
        self.spell_level = spell_level
        self.max_slot_level = max_slot_level


class EnrichmentUnavailableError(CharsheetError):
    """The enrichment API could not provide data.

    Always recoverable: callers fall back to local tables.

    Attributes:
        url: The URL that failed, when known
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.url = url


class StorageError(CharsheetError):
    """Reading or writing the character file failed.

    Attributes:
        path: The storage file involved
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.path = path


__all__ = [
    "CharsheetError",
    "NotFoundError",
    "ValidationError",
    "SpellcastingError",
    "WrongCasterTypeError",
    "AlreadyKnownError",
    "AlreadyPreparedError",
    "SlotTooHighError",
    "EnrichmentUnavailableError",
    "StorageError",
]
