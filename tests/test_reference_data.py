"""Tests for class, background and spell reference data."""

import json

import pytest

from dnd_charsheet.exceptions import NotFoundError, StorageError
from dnd_charsheet.reference_data import (
    BackgroundRepository,
    ClassRepository,
    SpellRepository,
    to_index,
)


@pytest.fixture
def spells_csv(tmp_path):
    path = tmp_path / "spells.csv"
    path.write_text(
        "name,level,classes\n"
        'Magic Missile,1,"sorcerer,wizard"\n'
        "Cure Wounds,1,\"bard, cleric\"\n"
        "Fire Bolt,0,wizard\n"
        "Broken,x,wizard\n"
        "\n",
        encoding="utf-8",
    )
    return path


class TestToIndex:

    def test_spaces_become_hyphens(self):
        assert to_index("  Chain Mail ") == "chain-mail"

    def test_already_indexed(self):
        assert to_index("longsword") == "longsword"


class TestPackagedData:
    """The files shipped with the package load and cover the SRD basics."""

    def test_classes(self):
        names = {c.name.lower() for c in ClassRepository().load_classes()}
        assert {"barbarian", "bard", "cleric", "wizard", "warlock"} <= names
        assert len(names) == 12

    def test_backgrounds(self):
        acolyte = BackgroundRepository().find_by_name("acolyte")
        assert acolyte.skill_proficiencies == ["Insight", "Religion"]

    def test_spells(self):
        spell = SpellRepository().find_for_class("magic missile", "Wizard")
        assert spell.level == 1
        assert spell.index == "magic-missile"


class TestClassRepository:

    def test_find_by_name(self, tmp_path):
        path = tmp_path / "classes.json"
        path.write_text(json.dumps([{"name": "Rogue", "skill_proficiencies": ["Stealth"], "skill_count": 4}]))
        rogue = ClassRepository(path).find_by_name("ROGUE")
        assert rogue.skill_count == 4

    def test_missing_class(self, tmp_path):
        path = tmp_path / "classes.json"
        path.write_text("[]")
        with pytest.raises(NotFoundError):
            ClassRepository(path).find_by_name("Artificer")

    def test_missing_file(self, tmp_path):
        with pytest.raises(StorageError):
            ClassRepository(tmp_path / "nope.json").load_classes()

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "classes.json"
        path.write_text('{"name": "Rogue"}')
        with pytest.raises(StorageError):
            ClassRepository(path).load_classes()


class TestBackgroundRepository:

    def test_missing_background(self, tmp_path):
        path = tmp_path / "backgrounds.json"
        path.write_text('[{"name": "Sage", "skill_proficiencies": ["Arcana", "History"]}]')
        with pytest.raises(NotFoundError):
            BackgroundRepository(path).find_by_name("Pirate")

    def test_invalid_entry(self, tmp_path):
        path = tmp_path / "backgrounds.json"
        path.write_text('[{"skill_proficiencies": []}]')
        with pytest.raises(StorageError):
            BackgroundRepository(path).load_backgrounds()


class TestSpellRepository:

    def test_load_skips_bad_rows(self, spells_csv):
        spells = SpellRepository(spells_csv).load_spells()
        assert [s.name for s in spells] == ["Magic Missile", "Cure Wounds", "Fire Bolt"]

    def test_classes_are_split_and_trimmed(self, spells_csv):
        spells = SpellRepository(spells_csv).load_spells()
        assert spells[1].classes == ["bard", "cleric"]

    def test_filter_by_class(self, spells_csv):
        repo = SpellRepository(spells_csv)
        wizard = repo.filter_by_class(repo.load_spells(), "Wizard")
        assert [s.name for s in wizard] == ["Magic Missile", "Fire Bolt"]

    def test_find_for_class(self, spells_csv):
        spell = SpellRepository(spells_csv).find_for_class("fire bolt", "wizard")
        assert spell.level == 0

    def test_spell_not_on_class_list(self, spells_csv):
        with pytest.raises(NotFoundError) as exc_info:
            SpellRepository(spells_csv).find_for_class("Magic Missile", "cleric")
        assert exc_info.value.message == "spell 'Magic Missile' not found for class cleric"

    def test_missing_file(self, tmp_path):
        with pytest.raises(StorageError):
            SpellRepository(tmp_path / "missing.csv").load_spells()
