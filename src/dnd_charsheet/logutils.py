"""
Logging helpers for dnd-charsheet.
"""

import logging

logger = logging.getLogger("dnd-charsheet")


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Configure the root handler and the project logger level.

    Args:
        level: A logging level name ("DEBUG", "INFO", ...) or numeric level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logger.setLevel(level)
