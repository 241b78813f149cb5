"""
Logging setup shared by the CLI and any embedding application.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(log_level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger.

    Records go to stderr through rich, and additionally to ``log_file``
    when one is given. Calling this again replaces the handlers.
    """
    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
    ]

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )
