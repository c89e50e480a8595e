"""Character Builder: turn creation inputs into a complete Character.

Given a name, race, class, level, ability scores and background, the builder
looks up class and background reference data, combines skill proficiencies,
applies racial bonuses, attaches spellcasting for casters and computes every
derived stat.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from .abilities import apply_racial_bonuses, racial_skill_proficiencies
from .derived_stats import ArmorLookup, recalculate_derived
from .exceptions import NotFoundError, ValidationError
from .logutils import logger
from .models import ABILITIES, BackgroundDefinition, Character, ClassDefinition
from .reference_data import BackgroundRepository, ClassRepository
from .spellcasting import assign_spellcasting, can_cast, caster_archetype_for


MIN_SCORE = 1
MAX_SCORE = 30
MIN_LEVEL = 1
MAX_LEVEL = 20


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


def _skill_list(skills: Iterable[str]) -> list[str]:
    return [s.strip().lower() for s in skills if s and s.strip()]


class CharacterBuilderError(ValidationError):
    """Raised when the builder cannot create a character."""


class CharacterBuilder:
    """Build a fully populated Character from creation inputs."""

    def __init__(
        self,
        classes: ClassRepository | None = None,
        backgrounds: BackgroundRepository | None = None,
    ) -> None:
        self.classes = classes or ClassRepository()
        self.backgrounds = backgrounds or BackgroundRepository()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def combine_skill_proficiencies(
        background: BackgroundDefinition | None,
        class_def: ClassDefinition | None,
        user_skills: Iterable[str] = (),
    ) -> list[str]:
        """Merge class, user and background skills into one sorted list.

        Class skills come first, capped at the class's ``skill_count``; then
        the user's picks; then the background's. Everything is lowercased and
        duplicates are kept.
        """
        combined: list[str] = []
        if class_def is not None:
            combined.extend(_skill_list(class_def.skill_proficiencies)[:max(class_def.skill_count, 0)])
        combined.extend(_skill_list(user_skills))
        if background is not None:
            combined.extend(_skill_list(background.skill_proficiencies))
        return sorted(combined)

    def build(
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
        racial_skills: Iterable[str] | None = None,
        armor_lookup: ArmorLookup | None = None,
    ) -> Character:
        """Build a complete Character.

        Args:
            name: Character name; also the storage key.
            race: Race name; drives ability bonuses and racial skills.
            class_name: Class name; drives skills, spellcasting and AC rules.
            level: Character level (1-20).
            scores: Base ability scores by full ability name. Missing
                abilities default to 10.
            background: Background name; unknown backgrounds add no skills.
            skills: Extra skill proficiencies picked by the player.
            main_hand, off_hand, armor, shield: Equipped item names.
            racial_skills: Skills granted by the race. When None, the local
                racial skill table is used.
            armor_lookup: Resolves armor names for armor class.

        Returns:
            A Character with derived stats filled in.

        Raises:
            CharacterBuilderError: If the name is empty, the level is outside
                1-20 or an ability score is outside 1-30.
        """
        name = name.strip()
        if not name:
            raise CharacterBuilderError("name is required")
        if not MIN_LEVEL <= level <= MAX_LEVEL:
            raise CharacterBuilderError(
                f"level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}"
            )

        base_scores = self._resolve_abilities(scores or {})
        final_scores = apply_racial_bonuses(base_scores, race)

        class_def = self._get_class(class_name)
        bg_def = self._get_background(background) if background else None

        skill_list = self.combine_skill_proficiencies(bg_def, class_def, skills)
        if racial_skills is None:
            racial_skills = racial_skill_proficiencies(race)
        skill_list = sorted(skill_list + _skill_list(racial_skills))

        character = Character(
            name=name,
            race=race.strip(),
            character_class=class_name.strip(),
            level=level,
            background=bg_def.name if bg_def else background.strip(),
            skill_proficiencies=skill_list,
            main_hand=_clean(main_hand),
            off_hand=_clean(off_hand),
            armor=_clean(armor),
            shield=_clean(shield),
            **final_scores,
        )

        archetype = caster_archetype_for(class_name)
        if can_cast(archetype):
            character.spellcasting = assign_spellcasting(class_name, level)

        recalculate_derived(character, armor_lookup)
        logger.debug(
            f"🧙 Built {character.name}: level {character.level} {character.race} "
            f"{character.character_class}, AC {character.armor_class}"
        )
        return character

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_abilities(scores: Mapping[str, int]) -> dict[str, int]:
        unknown = set(scores) - set(ABILITIES)
        if unknown:
            raise CharacterBuilderError(f"Unknown abilities: {', '.join(sorted(unknown))}")

        resolved = {ability: 10 for ability in ABILITIES}
        for ability, score in scores.items():
            if not MIN_SCORE <= score <= MAX_SCORE:
                raise CharacterBuilderError(
                    f"{ability} must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
                )
            resolved[ability] = score
        return resolved

    def _get_class(self, name: str) -> ClassDefinition | None:
        """Look up a class definition; unknown classes contribute no skills."""
        try:
            return self.classes.find_by_name(name)
        except NotFoundError:
            logger.warning(f"⚠️ Class '{name}' not in reference data, no class skills added")
            return None

    def _get_background(self, name: str) -> BackgroundDefinition | None:
        try:
            return self.backgrounds.find_by_name(name)
        except NotFoundError:
            logger.warning(f"⚠️ Background '{name}' not in reference data, no background skills added")
            return None
