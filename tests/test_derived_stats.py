"""Tests for the derived-stats calculator."""

import pytest

from dnd_charsheet.derived_stats import (
    calculate_armor_class,
    calculate_passive_perception,
    chain_armor_lookups,
    format_spellcasting_stats,
    local_armor_lookup,
    recalculate_derived,
    spellcasting_ability_for,
    spellcasting_stats,
)
from dnd_charsheet.exceptions import EnrichmentUnavailableError
from dnd_charsheet.models import ArmorInfo, Character


def make_character(**overrides) -> Character:
    defaults = dict(name="Tester", race="human", character_class="fighter", level=1)
    defaults.update(overrides)
    character = Character(**defaults)
    return recalculate_derived(character, local_armor_lookup)


def failing_lookup(name: str) -> ArmorInfo | None:
    raise EnrichmentUnavailableError("offline")


class TestModifiersAndInitiative:

    def test_modifiers_and_proficiency(self):
        character = make_character(strength=8, dexterity=15, wisdom=16, level=5)
        assert character.strength_mod == -1
        assert character.dexterity_mod == 2
        assert character.wisdom_mod == 3
        assert character.proficiency_bonus == 3

    def test_initiative_is_dex_mod(self):
        assert make_character(dexterity=14).initiative == 2
        assert make_character(dexterity=7).initiative == -2


class TestPassivePerception:

    def test_with_perception_proficiency(self):
        character = make_character(wisdom=16, skill_proficiencies=["athletics", "perception"])
        assert character.passive_perception == 15

    def test_without_perception_proficiency(self):
        character = make_character(wisdom=16, skill_proficiencies=["athletics"])
        assert character.passive_perception == 13

    def test_skill_match_ignores_case_and_whitespace(self):
        character = make_character(wisdom=16, skill_proficiencies=["  Perception "])
        assert calculate_passive_perception(character) == 15


class TestArmorClass:

    def test_unarmored(self):
        assert make_character(dexterity=14).armor_class == 12

    def test_barbarian_unarmored_defense(self):
        character = make_character(character_class="barbarian", dexterity=14, constitution=16)
        assert character.armor_class == 15

    def test_barbarian_unarmored_defense_with_shield(self):
        character = make_character(
            character_class="Barbarian", dexterity=14, constitution=16, shield="shield",
        )
        assert character.armor_class == 17

    def test_barbarian_in_armor_uses_armor(self):
        character = make_character(
            character_class="barbarian", dexterity=14, constitution=16, armor="chain mail",
        )
        assert character.armor_class == 16

    def test_monk_unarmored_defense(self):
        character = make_character(character_class="monk", dexterity=16, wisdom=14)
        assert character.armor_class == 15

    def test_monk_with_shield_loses_unarmored_defense(self):
        character = make_character(character_class="monk", dexterity=16, wisdom=14, shield="shield")
        assert character.armor_class == 10 + 3 + 2

    def test_chain_mail_ignores_dex(self):
        assert make_character(dexterity=16, armor="chain mail").armor_class == 16

    def test_light_armor_adds_dex(self):
        assert make_character(dexterity=16, armor="Studded Leather").armor_class == 15

    def test_chain_mail_and_shield(self):
        assert make_character(armor="chain mail", shield="shield").armor_class == 18

    def test_unknown_armor_falls_back(self):
        assert make_character(dexterity=14, armor="mithral dreams").armor_class == 12

    def test_no_lookup_falls_back(self):
        character = Character(name="x", character_class="fighter", dexterity=14, armor="plate")
        recalculate_derived(character)
        assert character.armor_class == 12

    def test_failing_lookup_falls_back(self):
        character = Character(name="x", character_class="fighter", dexterity=14, armor="plate")
        recalculate_derived(character, failing_lookup)
        assert character.armor_class == 12

    def test_shield_with_larger_base_ac(self):
        def lookup(name):
            if name == "tower shield":
                return ArmorInfo(name=name, base_ac=3)
            return None

        character = make_character(dexterity=10, shield="tower shield")
        assert calculate_armor_class(character, lookup) == 13


class TestArmorLookups:

    def test_local_lookup(self):
        info = local_armor_lookup("Chain Mail")
        assert info == ArmorInfo(name="chain mail", base_ac=16, dex_bonus=False)

    def test_local_lookup_unknown(self):
        assert local_armor_lookup("banana") is None

    def test_chain_skips_failures_and_misses(self):
        lookup = chain_armor_lookups(failing_lookup, lambda name: None, local_armor_lookup)
        assert lookup("plate").base_ac == 18

    def test_first_hit_wins(self):
        remote = lambda name: ArmorInfo(name=name, base_ac=19)
        lookup = chain_armor_lookups(remote, local_armor_lookup)
        assert lookup("plate").base_ac == 19


class TestSpellcastingStats:

    @pytest.mark.parametrize("class_name,ability", [
        ("wizard", "intelligence"),
        ("cleric", "wisdom"),
        ("druid", "wisdom"),
        ("ranger", "wisdom"),
        ("bard", "charisma"),
        ("sorcerer", "charisma"),
        ("warlock", "charisma"),
        ("paladin", "charisma"),
        ("fighter", "intelligence"),
    ])
    def test_ability_by_class(self, class_name, ability):
        assert spellcasting_ability_for(class_name) == ability

    def test_wizard_numbers(self):
        character = make_character(character_class="wizard", level=3, intelligence=16)
        stats = spellcasting_stats(character)
        assert stats.ability_mod == 3
        assert stats.spell_save_dc == 13
        assert stats.spell_attack_bonus == 5
        assert character.spell_attack_bonus == 5

    def test_format(self):
        character = make_character(character_class="cleric", level=1, wisdom=14)
        assert format_spellcasting_stats(character) == (
            "Spellcasting ability: wisdom\n"
            "Spell save DC: 12\n"
            "Spell attack bonus: +4\n"
        )
