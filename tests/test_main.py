"""Tests for the dnd-charsheet command line interface."""

import json

import pytest

from dnd_charsheet.main import build_parser, format_character_sheet, main
from dnd_charsheet.models import Character


@pytest.fixture
def run(storage_file, capsys):
    """Run the CLI against a temporary character file, offline."""

    def _run(*argv: str) -> tuple[int, str, str]:
        code = main(["--storage-file", str(storage_file), "--no-enrich", *argv])
        out, err = capsys.readouterr()
        return code, out, err

    return _run


def create_wizard(run, name="Lyra"):
    return run(
        "create", "--name", name, "--race", "high elf", "--class", "wizard",
        "--level", "3", "--int", "14", "--dex", "12", "--background", "sage",
    )


class TestCreateAndList:

    def test_create(self, run, storage_file):
        code, out, _ = create_wizard(run)
        assert code == 0
        assert out == "saved character Lyra\n"
        data = json.loads(storage_file.read_text())
        assert data["characters"][0]["class"] == "wizard"

    def test_list_empty(self, run):
        assert run("list") == (0, "No characters found.\n", "")

    def test_list(self, run):
        create_wizard(run)
        run("create", "--name", "Brom", "--race", "dwarf", "--class", "fighter")
        code, out, _ = run("list")
        assert code == 0
        assert out == (
            "Characters:\n"
            "  Lyra - Level 3 high elf wizard\n"
            "  Brom - Level 1 dwarf fighter\n"
        )

    def test_skill_proficiencies_flag(self, run, storage_file):
        run("create", "--name", "Brom", "--class", "fighter", "--skill-proficiencies", "Stealth, acrobatics")
        skills = json.loads(storage_file.read_text())["characters"][0]["skill_proficiencies"]
        assert "stealth" in skills
        assert "acrobatics" in skills

    def test_invalid_level_exits_1(self, run):
        code, _, err = run("create", "--name", "X", "--class", "wizard", "--level", "25")
        assert code == 1
        assert "level must be between 1 and 20" in err


class TestView:

    def test_view_wizard(self, run):
        create_wizard(run)
        code, out, _ = run("view", "--name", "Lyra")
        assert code == 0
        assert "Name: Lyra\n" in out
        assert "Class: wizard\n" in out
        assert "  INT: 15 (+2)\n" in out
        assert "  DEX: 14 (+2)\n" in out  # high elf +2 DEX
        assert "Proficiency bonus: +2\n" in out
        assert "Spell slots:\n  Level 0: 3\n  Level 1: 4\n  Level 2: 2\n" in out
        assert "Spell save DC: 12\n" in out
        assert "Armor class: 12\n" in out
        assert "Initiative bonus: 2\n" in out

    def test_view_fighter_has_no_spell_section(self, run):
        run("create", "--name", "Brom", "--class", "fighter", "--mainhand", "Longsword")
        _, out, _ = run("view", "--name", "Brom")
        assert "Spell slots" not in out
        assert "Main hand: longsword\n" in out

    def test_view_missing(self, run):
        code, _, err = run("view", "--name", "Ghost")
        assert code == 1
        assert "character not found: Ghost" in err


class TestDeleteAndEquip:

    def test_delete(self, run):
        create_wizard(run)
        assert run("delete", "--name", "Lyra")[:2] == (0, "deleted Lyra\n")
        assert run("list")[1] == "No characters found.\n"

    def test_delete_missing(self, run):
        assert run("delete", "--name", "Ghost")[0] == 1

    def test_equip_weapon_and_occupied(self, run):
        run("create", "--name", "Brom", "--class", "fighter")
        code, out, _ = run("equip", "--name", "Brom", "--weapon", "Longsword", "--slot", "mh")
        assert (code, out) == (0, "Equipped weapon longsword to main hand\n")
        code, _, err = run("equip", "--name", "Brom", "--weapon", "Dagger")
        assert code == 1
        assert err == "main hand already occupied\n"

    def test_equip_armor(self, run, storage_file):
        run("create", "--name", "Brom", "--class", "fighter")
        code, out, _ = run("equip", "--name", "Brom", "--armor", "Chain Mail")
        assert (code, out) == (0, "Equipped armor chain mail\n")
        assert json.loads(storage_file.read_text())["characters"][0]["armor_class"] == 16

    def test_equip_needs_exactly_one_item(self, run):
        with pytest.raises(SystemExit) as exc_info:
            run("equip", "--name", "Brom")
        assert exc_info.value.code == 2


class TestSpells:

    def test_prepare_and_learn(self, run):
        create_wizard(run)
        assert run("prepare-spell", "--name", "Lyra", "--spell", "Magic Missile")[:2] == (
            0, "Prepared spell magic missile\n",
        )
        code, _, err = run("learn-spell", "--name", "Lyra", "--spell", "Magic Missile")
        assert code == 1
        assert "prepares spells" in err

    def test_unknown_spell(self, run):
        create_wizard(run)
        code, _, err = run("prepare-spell", "--name", "Lyra", "--spell", "Cure Wounds")
        assert code == 1
        assert err == "spell 'Cure Wounds' not found for class wizard\n"

    def test_learn_requires_spell(self, run):
        with pytest.raises(SystemExit) as exc_info:
            run("learn-spell", "--name", "Lyra")
        assert exc_info.value.code == 2


class TestParser:

    def test_no_command_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_ability_flags(self):
        args = build_parser().parse_args(["create", "--name", "X", "--str", "16", "--cha", "8"])
        assert args.strength == 16
        assert args.charisma == 8
        assert args.wisdom == 10


def test_format_character_sheet_equipment_and_stats():
    character = Character(
        name="Brom", race="Dwarf", character_class="Fighter", level=5, background="Soldier",
        armor="chain mail", shield="shield", armor_class=18, initiative=1, passive_perception=11,
        proficiency_bonus=3, skill_proficiencies=["athletics", "history"],
    )
    text = format_character_sheet(character)
    assert text.startswith("Name: Brom\nClass: fighter\nRace: dwarf\nBackground: Soldier\nLevel: 5\n")
    assert "Skill proficiencies: athletics, history\n" in text
    assert "Armor: chain mail\nShield: shield\n" in text
    assert text.endswith("Armor class: 18\nInitiative bonus: 1\nPassive perception: 11\n")


def test_bad_environment_value_exits_1(monkeypatch, capsys, storage_file):
    monkeypatch.setenv("DND_CHARSHEET_API_TIMEOUT", "abc")
    assert main(["--storage-file", str(storage_file), "list"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("invalid configuration: DND_CHARSHEET_API_TIMEOUT:")


def test_format_character_sheet_display_names():
    character = Character(name="Brom", character_class="Fighter", main_hand="longsword", armor="chain mail")
    text = format_character_sheet(character, {"main_hand": "long sword"})
    assert "Main hand: long sword\n" in text
    assert "Armor: chain mail\n" in text
