"""
Runtime configuration for dnd-charsheet.

Values come from the environment, optionally seeded from a ``.env`` file.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .logutils import logger


ENV_PREFIX = "DND_CHARSHEET_"
DEFAULT_API_BASE = "http://localhost:3000/api/2014"


class Settings(BaseModel):
    """Configuration settings for the character sheet CLI."""

    storage_file: Path = Field(
        default=Path("characters.json"),
        description="JSON file holding every saved character"
    )
    api_base: str = Field(
        default=DEFAULT_API_BASE,
        description="Base URL of the 5e SRD API used for enrichment"
    )
    api_timeout: float = Field(
        default=5.0,
        gt=0.0,
        description="Per-request timeout in seconds"
    )
    max_per_second: int = Field(
        default=5,
        ge=1,
        description="Request ceiling for batch enrichment"
    )
    enrich: bool = Field(
        default=True,
        description="Whether to call the enrichment API at all"
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level name for the dnd-charsheet logger"
    )
    classes_file: Path | None = Field(
        default=None,
        description="Override for the packaged classes.json"
    )
    backgrounds_file: Path | None = Field(
        default=None,
        description="Override for the packaged backgrounds.json"
    )
    spells_file: Path | None = Field(
        default=None,
        description="Override for the packaged spells.csv"
    )

    @field_validator("api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()


def _env(name: str) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Build Settings from the environment.

    Args:
        env_file: Optional path to a .env file. Defaults to searching the
            working directory the way python-dotenv does.

    Returns:
        Settings populated from DND_CHARSHEET_* variables, defaults elsewhere.

    Raises:
        ValidationError: If an environment value cannot be used.
    """
    if not load_dotenv(dotenv_path=env_file):
        logger.debug("📄 No .env file found, using process environment only")

    data: dict[str, object] = {}
    mapping = {
        "STORAGE_FILE": "storage_file",
        "API_BASE": "api_base",
        "API_TIMEOUT": "api_timeout",
        "MAX_PER_SECOND": "max_per_second",
        "LOG_LEVEL": "log_level",
        "CLASSES_FILE": "classes_file",
        "BACKGROUNDS_FILE": "backgrounds_file",
        "SPELLS_FILE": "spells_file",
    }
    for env_name, field_name in mapping.items():
        value = _env(env_name)
        if value is not None:
            data[field_name] = value

    enrich = _env("ENRICH")
    if enrich is not None:
        data["enrich"] = enrich.lower() not in {"0", "false", "no", "off"}

    try:
        settings = Settings(**data)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{ENV_PREFIX}{str(err['loc'][0]).upper()}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"invalid configuration: {problems}", details={"errors": e.errors()}) from e
    logger.debug(f"⚙️ Settings loaded: storage_file={settings.storage_file}, api_base={settings.api_base}")
    return settings
