"""
Pytest configuration and fixtures for dnd-charsheet tests.
"""

import os
import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing dnd_charsheet
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dnd_charsheet.storage import CharacterRepository


# Configure anyio to only use asyncio (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep DND_CHARSHEET_* variables and stray .env files out of tests."""
    for key in list(os.environ):
        if key.startswith("DND_CHARSHEET_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def storage_file(tmp_path) -> Path:
    return tmp_path / "characters.json"


@pytest.fixture
def repository(storage_file) -> CharacterRepository:
    return CharacterRepository(storage_file)
