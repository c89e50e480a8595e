"""
Data models for dnd-charsheet.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


ABILITIES = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)


class CasterArchetype(str, Enum):
    """How a class gains and uses spells."""
    NONE = "none"
    FULL = "full"
    HALF = "half"
    PACT = "pact"
    KNOWN = "known"


class SpellcastingState(BaseModel):
    """A character's spellcasting progress: known/prepared spells and slots."""
    archetype: CasterArchetype = CasterArchetype.NONE
    known_spells: list[str] = Field(default_factory=list)
    prepared_spells: list[str] = Field(default_factory=list)
    slots: dict[int, int] = Field(default_factory=dict)  # slot level: count

    @field_validator("known_spells", "prepared_spells")
    @classmethod
    def _drop_duplicates(cls, v: list[str]) -> list[str]:
        """Keep the first spelling of each case-insensitive duplicate."""
        seen: set[str] = set()
        unique: list[str] = []
        for name in v:
            key = name.strip().lower()
            if key and key not in seen:
                seen.add(key)
                unique.append(name)
        return unique

    def knows(self, spell_name: str) -> bool:
        key = spell_name.strip().lower()
        return any(s.lower() == key for s in self.known_spells)

    def has_prepared(self, spell_name: str) -> bool:
        key = spell_name.strip().lower()
        return any(s.lower() == key for s in self.prepared_spells)

    @property
    def max_slot_level(self) -> int:
        """Highest spell level with at least one slot, 0 if none."""
        levels = [lvl for lvl, count in self.slots.items() if lvl > 0 and count > 0]
        return max(levels, default=0)


class Character(BaseModel):
    """Complete character sheet.

    ``name`` is the only identifier; saving another character with the same
    name replaces it.
    """
    model_config = ConfigDict(populate_by_name=True)

    # Basic Info
    name: str
    race: str = ""
    character_class: str = Field(default="", alias="class")
    level: int = Field(default=1, ge=1, le=20)
    background: str = ""

    # Core Stats
    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10

    # Skills & Proficiencies
    proficiency_bonus: int = 0
    skill_proficiencies: list[str] = Field(default_factory=list)

    # Equipment
    main_hand: str | None = None
    off_hand: str | None = None
    armor: str | None = None
    shield: str | None = None

    # Spellcasting
    spellcasting: SpellcastingState | None = None

    # Derived stats, recomputed by derived_stats.recalculate_derived
    strength_mod: int = 0
    dexterity_mod: int = 0
    constitution_mod: int = 0
    intelligence_mod: int = 0
    wisdom_mod: int = 0
    charisma_mod: int = 0
    armor_class: int = 0
    initiative: int = 0
    passive_perception: int = 0
    spell_attack_bonus: int = 0

    @field_validator("main_hand", "off_hand", "armor", "shield", mode="before")
    @classmethod
    def _empty_slot_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_fields(cls, data: Any) -> Any:
        """Accept the short ability keys (str, dex, ...) older files used."""
        if isinstance(data, dict):
            legacy = {
                "str": "strength",
                "dex": "dexterity",
                "con": "constitution",
                "int": "intelligence",
                "wis": "wisdom",
                "cha": "charisma",
                "proficiency": "proficiency_bonus",
            }
            for old, new in legacy.items():
                if old in data and new not in data:
                    data[new] = data.pop(old)
        return data

    @property
    def ability_scores(self) -> dict[str, int]:
        return {ability: getattr(self, ability) for ability in ABILITIES}

    @property
    def ability_modifiers(self) -> dict[str, int]:
        return {ability: getattr(self, f"{ability}_mod") for ability in ABILITIES}

    def has_skill(self, skill: str) -> bool:
        """Case-insensitive check against skill_proficiencies."""
        key = skill.strip().lower()
        return any(s.strip().lower() == key for s in self.skill_proficiencies)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the on-disk field names."""
        return self.model_dump(mode="json", by_alias=True)


# ----------------------------------------------------------------------
# Enrichment DTOs
# ----------------------------------------------------------------------

class WeaponInfo(BaseModel):
    """Weapon details from the enrichment API."""
    name: str
    category: str = ""
    range: int = 0
    two_handed: bool = False


class ArmorInfo(BaseModel):
    """Armor details used for armor class."""
    name: str
    base_ac: int
    dex_bonus: bool = False


class SpellInfo(BaseModel):
    """Spell details from the enrichment API."""
    name: str
    range: str = ""
    school: str = ""


class TraitInfo(BaseModel):
    """Racial trait details from the enrichment API."""
    index: str
    name: str
    desc: list[str] = Field(default_factory=list)


class SpellcastingStats(BaseModel):
    """Spellcasting ability, save DC and attack bonus for a character."""
    ability: str
    ability_mod: int
    spell_save_dc: int
    spell_attack_bonus: int


# ----------------------------------------------------------------------
# Reference data
# ----------------------------------------------------------------------

class ClassDefinition(BaseModel):
    """Class reference data: which skills it offers and how many to take."""
    name: str
    skill_proficiencies: list[str] = Field(default_factory=list)
    skill_count: int = 0


class BackgroundDefinition(BaseModel):
    """Background reference data."""
    name: str
    skill_proficiencies: list[str] = Field(default_factory=list)


class SpellEntry(BaseModel):
    """One row of the spell list."""
    index: str
    name: str
    level: int = Field(ge=0, le=9)
    classes: list[str] = Field(default_factory=list)

    def available_to(self, class_name: str) -> bool:
        key = class_name.strip().lower()
        return any(c.lower() == key for c in self.classes)


__all__ = [
    "ABILITIES",
    "CasterArchetype",
    "SpellcastingState",
    "Character",
    "WeaponInfo",
    "ArmorInfo",
    "SpellInfo",
    "TraitInfo",
    "SpellcastingStats",
    "ClassDefinition",
    "BackgroundDefinition",
    "SpellEntry",
]
