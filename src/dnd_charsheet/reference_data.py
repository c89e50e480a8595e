"""
Reference data repositories: classes, backgrounds and the spell list.

Classes and backgrounds are JSON arrays; spells are a CSV with the header
``name,level,classes`` where ``classes`` is a comma-separated list. Default
files ship in the package ``data`` directory.
"""

import csv
import json
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from .exceptions import NotFoundError, StorageError
from .logutils import logger
from .models import BackgroundDefinition, ClassDefinition, SpellEntry


DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CLASSES_FILE = DATA_DIR / "classes.json"
DEFAULT_BACKGROUNDS_FILE = DATA_DIR / "backgrounds.json"
DEFAULT_SPELLS_FILE = DATA_DIR / "spells.csv"


def to_index(name: str) -> str:
    """Convert a display name to a lookup index ("Chain Mail" → "chain-mail")."""
    return name.strip().lower().replace(" ", "-")


def _load_json_list(path: Path) -> list[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise StorageError(f"Reference file not found: {path}", path=str(path)) from e
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Could not read reference file {path}: {e}", path=str(path)) from e
    if not isinstance(data, list):
        raise StorageError(f"Expected a JSON array in {path}", path=str(path))
    return data


class ClassRepository:
    """Class definitions loaded from a JSON file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else DEFAULT_CLASSES_FILE

    def load_classes(self) -> list[ClassDefinition]:
        try:
            return [ClassDefinition.model_validate(item) for item in _load_json_list(self.path)]
        except PydanticValidationError as e:
            raise StorageError(f"Invalid class data in {self.path}: {e}", path=str(self.path)) from e

    def find_by_name(self, name: str) -> ClassDefinition:
        """Find a class by name (case-insensitive).

        Raises:
            NotFoundError: No class with that name.
        """
        key = name.strip().lower()
        for class_def in self.load_classes():
            if class_def.name.lower() == key:
                return class_def
        raise NotFoundError(f"class not found: {name}")


class BackgroundRepository:
    """Background definitions loaded from a JSON file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else DEFAULT_BACKGROUNDS_FILE

    def load_backgrounds(self) -> list[BackgroundDefinition]:
        try:
            return [BackgroundDefinition.model_validate(item) for item in _load_json_list(self.path)]
        except PydanticValidationError as e:
            raise StorageError(f"Invalid background data in {self.path}: {e}", path=str(self.path)) from e

    def find_by_name(self, name: str) -> BackgroundDefinition:
        """Find a background by name (case-insensitive).

        Raises:
            NotFoundError: No background with that name.
        """
        key = name.strip().lower()
        for background in self.load_backgrounds():
            if background.name.lower() == key:
                return background
        raise NotFoundError(f"background not found: {name}")


def _parse_classes(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class SpellRepository:
    """Spell list loaded from a CSV file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else DEFAULT_SPELLS_FILE

    def load_spells(self) -> list[SpellEntry]:
        """Read every spell row, skipping the header and malformed rows."""
        try:
            with open(self.path, newline="", encoding="utf-8") as f:
                rows = list(csv.reader(f))
        except FileNotFoundError as e:
            raise StorageError(f"Spell file not found: {self.path}", path=str(self.path)) from e
        except (OSError, csv.Error) as e:
            raise StorageError(f"Could not read spell file {self.path}: {e}", path=str(self.path)) from e

        spells: list[SpellEntry] = []
        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) < 3 or not row[0].strip():
                continue
            try:
                level = int(row[1])
            except ValueError:
                logger.warning(f"Skipping spell row {line_no} in {self.path}: bad level '{row[1]}'")
                continue
            spells.append(SpellEntry(
                index=to_index(row[0]),
                name=row[0].strip(),
                level=level,
                classes=_parse_classes(row[2]),
            ))
        return spells

    @staticmethod
    def filter_by_class(spells: list[SpellEntry], class_name: str) -> list[SpellEntry]:
        """Spells available to a class (case-insensitive)."""
        return [spell for spell in spells if spell.available_to(class_name)]

    def find_for_class(self, spell_name: str, class_name: str) -> SpellEntry:
        """Find a spell by name that the class can cast.

        Raises:
            NotFoundError: The spell does not exist for that class.
        """
        key = spell_name.strip().lower()
        for spell in self.filter_by_class(self.load_spells(), class_name):
            if spell.name.lower() == key:
                return spell
        raise NotFoundError(f"spell '{spell_name}' not found for class {class_name}")
