"""
dnd-charsheet command line interface.

Subcommands: create, view, list, delete, equip, learn-spell, prepare-spell.
Exit codes: 0 on success, 1 when a command fails, 2 on usage errors.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping

from .config import Settings, load_settings
from .derived_stats import format_spellcasting_stats
from .enrichment import EnrichmentGateway
from .exceptions import CharsheetError
from .logutils import configure_logging, logger
from .models import ABILITIES, Character
from .character_builder import CharacterBuilder
from .reference_data import BackgroundRepository, ClassRepository, SpellRepository
from .service import CharacterService
from .spellcasting import assign_spellcasting, can_cast, caster_archetype_for, format_cantrips, format_spell_slots
from .storage import CharacterRepository


ABILITY_FLAGS = {
    "str": "strength",
    "dex": "dexterity",
    "con": "constitution",
    "int": "intelligence",
    "wis": "wisdom",
    "cha": "charisma",
}


def format_character_sheet(character: Character, display_names: Mapping[str, str] | None = None) -> str:
    """Render a character the way ``view`` prints it.

    ``display_names`` maps equipment fields (main_hand, off_hand, armor,
    shield) to the name to show in place of the stored one.
    """
    display_names = display_names or {}
    lines = [
        f"Name: {character.name}",
        f"Class: {character.character_class.lower()}",
        f"Race: {character.race.lower()}",
        f"Background: {character.background}",
        f"Level: {character.level}",
        "Ability scores:",
    ]
    for ability in ABILITIES:
        score = getattr(character, ability)
        mod = getattr(character, f"{ability}_mod")
        lines.append(f"  {ability[:3].upper()}: {score} ({mod:+d})")
    lines.append(f"Proficiency bonus: +{character.proficiency_bonus}")
    lines.append(f"Skill proficiencies: {', '.join(character.skill_proficiencies)}")

    for label, field in (
        ("Main hand", "main_hand"),
        ("Off hand", "off_hand"),
        ("Armor", "armor"),
        ("Shield", "shield"),
    ):
        item = getattr(character, field)
        if item:
            lines.append(f"{label}: {display_names.get(field, item)}")

    text = "\n".join(lines) + "\n"

    if can_cast(caster_archetype_for(character.character_class)):
        state = assign_spellcasting(character.character_class, character.level, character.spellcasting)
        text += format_spell_slots(state, character.character_class, character.level)
        text += format_cantrips(state)
        if state.known_spells:
            text += f"Known spells: {', '.join(state.known_spells)}\n"
        if state.prepared_spells:
            text += f"Prepared spells: {', '.join(state.prepared_spells)}\n"
        text += format_spellcasting_stats(character)

    text += (
        f"Armor class: {character.armor_class}\n"
        f"Initiative bonus: {character.initiative}\n"
        f"Passive perception: {character.passive_perception}\n"
    )
    return text


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every subcommand."""
    parser = argparse.ArgumentParser(
        prog="dnd-charsheet",
        description="Create and manage D&D 5e character sheets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dnd-charsheet create --name Elminster --race "high elf" --class wizard --level 3 --int 15
  dnd-charsheet learn-spell --name Lyra --spell "Magic Missile"
  dnd-charsheet equip --name Brom --weapon longsword --slot main
        """,
    )
    parser.add_argument(
        "--storage-file",
        type=Path,
        help="Character file (default: $DND_CHARSHEET_STORAGE_FILE or characters.json)"
    )
    parser.add_argument(
        "--api-base",
        help="Base URL of the 5e SRD API"
    )
    parser.add_argument(
        "--no-enrich",
        action="store_true",
        help="Do not call the SRD API; use local tables only"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    create = sub.add_parser("create", help="Create a character")
    create.add_argument("--name", required=True, help="Character name (required)")
    create.add_argument("--race", default="", help="Race, e.g. 'hill dwarf'")
    create.add_argument("--class", dest="class_name", default="", help="Class, e.g. wizard")
    create.add_argument("--level", type=int, default=1, help="Level 1-20 (default: 1)")
    for flag, ability in ABILITY_FLAGS.items():
        create.add_argument(f"--{flag}", dest=ability, type=int, default=10, help=f"{ability.title()} score (default: 10)")
    create.add_argument("--background", default="", help="Background, e.g. acolyte")
    create.add_argument("--skill-proficiencies", default="", help="Comma-separated extra skills")
    create.add_argument("--mainhand", default="", help="Main hand weapon")
    create.add_argument("--offhand", default="", help="Off hand weapon")
    create.add_argument("--armor", default="", help="Armor")
    create.add_argument("--shield", default="", help="Shield")

    view = sub.add_parser("view", help="Show a character sheet")
    view.add_argument("--name", required=True, help="Character name (required)")

    sub.add_parser("list", help="List saved characters")

    delete = sub.add_parser("delete", help="Delete a character")
    delete.add_argument("--name", required=True, help="Character name (required)")

    equip = sub.add_parser("equip", help="Equip a weapon, armor or shield")
    equip.add_argument("--name", required=True, help="Character name (required)")
    item = equip.add_mutually_exclusive_group(required=True)
    item.add_argument("--weapon", help="Weapon name")
    item.add_argument("--armor", help="Armor name")
    item.add_argument("--shield", help="Shield name")
    equip.add_argument("--slot", default="", help="Weapon slot: main (default) or off")

    for command, verb in (("learn-spell", "Learn"), ("prepare-spell", "Prepare")):
        spell = sub.add_parser(command, help=f"{verb} a spell")
        spell.add_argument("--name", required=True, help="Character name (required)")
        spell.add_argument("--spell", required=True, help="Spell name (required)")

    return parser


def build_service(settings: Settings) -> CharacterService:
    """Wire the repositories, builder and (optionally) the enrichment gateway."""
    gateway = None
    if settings.enrich:
        gateway = EnrichmentGateway(base_url=settings.api_base, timeout=settings.api_timeout)

    builder = CharacterBuilder(
        classes=ClassRepository(settings.classes_file),
        backgrounds=BackgroundRepository(settings.backgrounds_file),
    )
    return CharacterService(
        repository=CharacterRepository(settings.storage_file),
        gateway=gateway,
        spells=SpellRepository(settings.spells_file),
        builder=builder,
        max_per_second=settings.max_per_second,
    )


def _run(args: argparse.Namespace, service: CharacterService) -> int:
    if args.command == "create":
        character = service.create(
            name=args.name,
            race=args.race,
            class_name=args.class_name,
            level=args.level,
            scores={ability: getattr(args, ability) for ability in ABILITIES},
            background=args.background,
            skills=args.skill_proficiencies.split(","),
            main_hand=args.mainhand,
            off_hand=args.offhand,
            armor=args.armor,
            shield=args.shield,
        )
        print(f"saved character {character.name}")

    elif args.command == "view":
        character, display_names = service.view(args.name)
        print(format_character_sheet(character, display_names), end="")

    elif args.command == "list":
        characters = service.list()
        if not characters:
            print("No characters found.")
            return 0
        print("Characters:")
        for c in characters:
            print(f"  {c.name} - Level {c.level} {c.race} {c.character_class}")

    elif args.command == "delete":
        service.delete(args.name)
        print(f"deleted {args.name}")

    elif args.command == "equip":
        if args.weapon:
            print(service.equip_weapon(args.name, args.weapon, args.slot))
        elif args.armor:
            print(service.equip_armor(args.name, args.armor))
        else:
            print(service.equip_shield(args.name, args.shield))

    elif args.command == "learn-spell":
        print(service.learn_spell(args.name, args.spell))

    elif args.command == "prepare-spell":
        print(service.prepare_spell(args.name, args.spell))

    return 0


def _settings_for(args: argparse.Namespace) -> Settings:
    """Environment settings with the global command line flags applied."""
    settings = load_settings()
    overrides: dict[str, object] = {}
    if args.storage_file is not None:
        overrides["storage_file"] = args.storage_file
    if args.api_base:
        overrides["api_base"] = args.api_base.rstrip("/")
    if args.no_enrich:
        overrides["enrich"] = False
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the dnd-charsheet CLI."""
    args = build_parser().parse_args(argv)

    try:
        settings = _settings_for(args)
        configure_logging(settings.log_level)
        logger.debug(f"📂 Storage file: {settings.storage_file}")
        return _run(args, build_service(settings))
    except CharsheetError as e:
        print(e.message, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
