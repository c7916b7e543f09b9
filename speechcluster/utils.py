"""Utility helpers: logging, natural sort."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Union


def setup_logging() -> logging.Logger:
    """Configure the root logger and return the ``speechcluster`` logger.

    Safe to call multiple times; ``logging.basicConfig`` is a no-op if
    the root logger already has handlers.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%H:%M:%S",
        level=logging.INFO,
    )
    return logging.getLogger("speechcluster")


def ensure_logging() -> None:
    """Ensure the ``speechcluster`` logger has at least one handler.

    For library callers that never went through the CLI.
    """
    logger = logging.getLogger("speechcluster")
    if not logger.handlers and not logging.getLogger().handlers:
        setup_logging()


def natural_sort_key(path: Path) -> list[Union[int, str]]:
    """Split filename on digit groups so speech_2 sorts before speech_10."""
    parts = re.split(r"(\d+)", path.stem)
    return [int(p) if p.isdigit() else p.lower() for p in parts]
