"""Logging configuration for the CLI."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging; unknown level names fall back to INFO."""
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, force=True)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
