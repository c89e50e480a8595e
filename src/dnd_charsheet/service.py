"""
Character use cases: create, list, view, delete, equip, learn and prepare.

The service owns the order of operations; the rules themselves live in
``spellcasting`` and ``derived_stats``. Enrichment is optional and never
required for a use case to succeed.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, Mapping, TypeVar

from .abilities import racial_skill_proficiencies
from .character_builder import CharacterBuilder
from .derived_stats import ArmorLookup, chain_armor_lookups, local_armor_lookup, recalculate_derived
from .enrichment import DEFAULT_MAX_PER_SECOND, EnrichmentGateway
from .exceptions import EnrichmentUnavailableError, ValidationError
from .logutils import logger
from .models import ArmorInfo, Character, SpellcastingState, WeaponInfo
from .reference_data import SpellRepository
from .spellcasting import assign_spellcasting, learn_spell, learns_spells, prepare_spell, prepares_spells
from .storage import CharacterRepository


T = TypeVar("T")

MAIN_HAND = "main hand"
OFF_HAND = "off hand"

_SLOT_ALIASES = {
    "main hand": MAIN_HAND,
    "main": MAIN_HAND,
    "mh": MAIN_HAND,
    "off hand": OFF_HAND,
    "off": OFF_HAND,
    "oh": OFF_HAND,
}


def normalize_slot(slot: str | None) -> str:
    """Map a user-supplied weapon slot to "main hand" or "off hand".

    Anything unrecognized, including no slot at all, means the main hand.
    """
    if not slot:
        return MAIN_HAND
    return _SLOT_ALIASES.get(slot.strip().lower(), MAIN_HAND)


class CharacterService:
    """Orchestrates character use cases over a repository and optional enrichment."""

    def __init__(
        self,
        repository: CharacterRepository,
        gateway: EnrichmentGateway | None = None,
        spells: SpellRepository | None = None,
        builder: CharacterBuilder | None = None,
        max_per_second: int = DEFAULT_MAX_PER_SECOND,
    ):
        self.repository = repository
        self.gateway = gateway
        self.spells = spells or SpellRepository()
        self.builder = builder or CharacterBuilder()
        self.max_per_second = max_per_second

    # ------------------------------------------------------------------
    # Enrichment helpers
    # ------------------------------------------------------------------

    def _enrich(self, coro: Awaitable[T]) -> T | None:
        """Run one gateway coroutine; None when the API is unavailable."""
        try:
            return asyncio.run(coro)
        except EnrichmentUnavailableError as e:
            logger.warning(f"⚠️ Enrichment unavailable, using local data: {e}")
            return None

    def _fetch_armors(self, names: Iterable[str | None]) -> dict[str, ArmorInfo]:
        wanted = [n for n in names if n]
        if self.gateway is None or not wanted:
            return {}
        fetched: Mapping[str, ArmorInfo] = self._enrich(
            self.gateway.get_armors_batch(wanted, self.max_per_second)
        ) or {}
        return {name.strip().lower(): info for name, info in fetched.items()}

    def _fetch_weapons(self, names: Iterable[str | None]) -> dict[str, WeaponInfo]:
        wanted = [n for n in names if n]
        if self.gateway is None or not wanted:
            return {}
        fetched: Mapping[str, WeaponInfo] = self._enrich(
            self.gateway.get_weapons_batch(wanted, self.max_per_second)
        ) or {}
        return {name.strip().lower(): info for name, info in fetched.items()}

    def armor_lookup_for(
        self,
        names: Iterable[str | None],
        fetched: Mapping[str, ArmorInfo] | None = None,
    ) -> ArmorLookup:
        """Armor lookup preloaded from the API, backed by the local table."""
        by_name = self._fetch_armors(names) if fetched is None else fetched
        if not by_name:
            return local_armor_lookup
        return chain_armor_lookups(
            lambda name: by_name.get(name.strip().lower()),
            local_armor_lookup,
        )

    def racial_skills_for(self, race: str) -> list[str]:
        """Racial skills from the local table, plus any the API reports."""
        skills = racial_skill_proficiencies(race)
        if self.gateway is not None:
            remote = self._enrich(self.gateway.get_racial_skill_proficiencies(race)) or []
            skills.extend(s for s in remote if s not in skills)
        return skills

    def recalculate(self, character: Character) -> Character:
        """Refresh every derived stat, using enriched armor data when available."""
        lookup = self.armor_lookup_for([character.armor, character.shield])
        return recalculate_derived(character, lookup)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        race: str,
        class_name: str,
        level: int = 1,
        scores: Mapping[str, int] | None = None,
        background: str = "",
        skills: Iterable[str] = (),
        main_hand: str | None = None,
        off_hand: str | None = None,
        armor: str | None = None,
        shield: str | None = None,
    ) -> Character:
        """Build and save a new character. An existing one with the same name is replaced."""
        character = self.builder.build(
            name=name,
            race=race,
            class_name=class_name,
            level=level,
            scores=scores,
            background=background,
            skills=skills,
            main_hand=main_hand,
            off_hand=off_hand,
            armor=armor,
            shield=shield,
            racial_skills=self.racial_skills_for(race),
            armor_lookup=self.armor_lookup_for([armor, shield]),
        )
        self.repository.save(character)
        logger.info(f"✅ Saved character '{character.name}'")
        return character

    def list(self) -> list[Character]:
        return self.repository.get_all()

    def get(self, name: str) -> Character:
        return self.repository.get_by_id(name)

    def view(self, name: str) -> tuple[Character, dict[str, str]]:
        """Load a character with fresh derived stats, plus equipment display names.

        Display names are the API's names, lowercased, for every item the
        API knows; other items show their stored name. Nothing is saved.
        """
        character = self.repository.get_by_id(name)
        armors = self._fetch_armors([character.armor, character.shield])
        character = recalculate_derived(
            character, self.armor_lookup_for([character.armor, character.shield], fetched=armors)
        )
        weapons = self._fetch_weapons([character.main_hand, character.off_hand])

        names: dict[str, str] = {}
        for field, fetched in (
            ("main_hand", weapons),
            ("off_hand", weapons),
            ("armor", armors),
            ("shield", armors),
        ):
            item = getattr(character, field)
            if not item:
                continue
            info = fetched.get(item.strip().lower())
            names[field] = (info.name if info else item).lower()
        return character, names

    def delete(self, name: str) -> None:
        self.repository.delete(name)

    # ------------------------------------------------------------------
    # Equipment
    # ------------------------------------------------------------------

    def equip_weapon(self, name: str, weapon: str, slot: str | None = None) -> str:
        """Equip a weapon to a free hand.

        Raises:
            NotFoundError: No such character.
            ValidationError: The slot already holds a weapon.
        """
        character = self.repository.get_by_id(name)
        slot = normalize_slot(slot)
        field = "main_hand" if slot == MAIN_HAND else "off_hand"
        if getattr(character, field):
            raise ValidationError(f"{slot} already occupied", {"slot": slot})

        item = weapon.strip().lower()
        if self.gateway is not None:
            info = self._enrich(self.gateway.get_weapon(weapon))
            if info is not None:
                item = info.name.lower()

        setattr(character, field, item)
        self.repository.save(character)
        return f"Equipped weapon {weapon.strip().lower()} to {slot}"

    def equip_armor(self, name: str, armor: str) -> str:
        """Equip body armor and recompute armor class.

        Raises:
            NotFoundError: No such character.
            ValidationError: Armor is already worn.
        """
        character = self.repository.get_by_id(name)
        if character.armor:
            raise ValidationError("armor already occupied", {"slot": "armor"})

        character.armor = armor.strip().lower()
        self.recalculate(character)
        self.repository.save(character)
        return f"Equipped armor {character.armor}"

    def equip_shield(self, name: str, shield: str) -> str:
        character = self.repository.get_by_id(name)
        if character.shield:
            raise ValidationError("shield already occupied", {"slot": "shield"})

        character.shield = shield.strip().lower()
        self.recalculate(character)
        self.repository.save(character)
        return f"Equipped shield {character.shield}"

    # ------------------------------------------------------------------
    # Spellcasting
    # ------------------------------------------------------------------

    def _spellcasting_for(self, character: Character) -> SpellcastingState:
        return assign_spellcasting(character.character_class, character.level, character.spellcasting)

    def _validate_remote_spell(self, spell_name: str) -> None:
        if self.gateway is not None:
            self._enrich(self.gateway.get_spell(spell_name))

    def learn_spell(self, name: str, spell_name: str) -> str:
        """Add a spell to a known or pact caster's known list.

        The spell must be on the class's spell list. Nothing is saved when
        the transition is rejected.

        Raises:
            NotFoundError: No such character, or the spell is not on the class list.
            SpellcastingError: The learn transition was rejected.
        """
        character = self.repository.get_by_id(name)
        state = self._spellcasting_for(character).model_copy(deep=True)
        if not learns_spells(state.archetype):
            learn_spell(state, spell_name)  # raises WrongCasterTypeError

        entry = self.spells.find_for_class(spell_name, character.character_class)
        self._validate_remote_spell(entry.name)

        message = learn_spell(state, entry.name)
        character.spellcasting = state
        self.repository.save(character)
        return message

    def prepare_spell(self, name: str, spell_name: str) -> str:
        """Add a spell to a full or half caster's prepared list.

        Raises:
            NotFoundError: No such character, or the spell is not on the class list.
            SpellcastingError: The prepare transition was rejected.
        """
        character = self.repository.get_by_id(name)
        state = self._spellcasting_for(character).model_copy(deep=True)
        if not prepares_spells(state.archetype):
            prepare_spell(state, spell_name, 0)  # raises WrongCasterTypeError

        entry = self.spells.find_for_class(spell_name, character.character_class)
        self._validate_remote_spell(entry.name)

        message = prepare_spell(state, entry.name, entry.level)
        character.spellcasting = state
        self.repository.save(character)
        return message

