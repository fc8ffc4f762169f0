"""
Logging configuration for the compliance helper scripts.

Diagnostics go to stderr through rich so they never mix with report output
printed to stdout.
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from config import DEFAULT_LOG_LEVEL

_configured = False


def setup_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure the root logger once per process.

    Args:
        level: Level name or number (defaults to DEFAULT_LOG_LEVEL)
    """
    global _configured
    level = level or DEFAULT_LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger()
    if not _configured:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
        _configured = True
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
