"""
Storage layer for dnd-charsheet.
Persists every character in a single JSON document: {"characters": [...]}.
"""

import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from .exceptions import NotFoundError, StorageError
from .logutils import logger
from .models import Character


class CharacterRepository:
    """Handles storage and retrieval of characters.

    The whole file is read and rewritten on every change. Names are the
    keys and are matched case-sensitively, as they were entered.
    """

    def __init__(self, path: str | Path = "characters.json"):
        self.path = Path(path)
        logger.debug(f"📂 Initializing CharacterRepository with file: {self.path.resolve()}")

    def _read(self) -> list[Character]:
        if not self.path.exists():
            logger.debug(f"📂 No character file at {self.path}, starting empty")
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not read {self.path}: {e}", path=str(self.path)) from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Corrupt character file {self.path}: {e}")
            raise StorageError(f"Corrupt character file {self.path}: {e}", path=str(self.path)) from e

        if not isinstance(data, dict):
            raise StorageError(f"Unexpected layout in {self.path}", path=str(self.path))

        entries = data.get("characters") or []
        try:
            return [Character.model_validate(entry) for entry in entries]
        except PydanticValidationError as e:
            raise StorageError(f"Invalid character data in {self.path}: {e}", path=str(self.path)) from e

    def _write(self, characters: list[Character]) -> None:
        payload = {"characters": [c.to_dict() for c in characters]}
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}", path=str(self.path)) from e
        logger.debug(f"💾 Wrote {len(characters)} character(s) to {self.path}")

    def get_all(self) -> list[Character]:
        """All stored characters in file order."""
        return self._read()

    def get_by_id(self, name: str) -> Character:
        """Load one character by name.

        Raises:
            NotFoundError: No character with that name.
        """
        for character in self._read():
            if character.name == name:
                return character
        raise NotFoundError(f"character not found: {name}")

    def exists(self, name: str) -> bool:
        return any(c.name == name for c in self._read())

    def save(self, character: Character) -> None:
        """Insert or replace the character with the same name."""
        characters = self._read()
        for i, existing in enumerate(characters):
            if existing.name == character.name:
                characters[i] = character
                logger.debug(f"✏️ Replacing character '{character.name}'")
                break
        else:
            characters.append(character)
            logger.debug(f"✅ Adding character '{character.name}'")
        self._write(characters)

    def delete(self, name: str) -> None:
        """Remove a character by name.

        Raises:
            NotFoundError: No character with that name.
        """
        characters = self._read()
        remaining = [c for c in characters if c.name != name]
        if len(remaining) == len(characters):
            raise NotFoundError(f"character not found: {name}")
        self._write(remaining)
        logger.debug(f"🗑️ Deleted character '{name}'")

    def list_summaries(self) -> list[str]:
        """One "NAME - Level N RACE CLASS" line per character."""
        return [
            f"{c.name} - Level {c.level} {c.race} {c.character_class}"
            for c in self._read()
        ]
