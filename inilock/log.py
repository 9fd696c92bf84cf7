"""Logging setup for the inilock CLI.

Library modules only create module loggers; handlers are installed here,
by the entry point, so embedding applications keep control of logging.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "inilock"
FILE_FORMAT = "%(asctime)s %(levelname)s [%(process)d] %(name)s: %(message)s"


def setup_logging(verbose: bool = False, log_file: str | Path | None = None) -> logging.Logger:
    """Configure the ``inilock`` logger hierarchy.

    Warnings (such as stale lock reclaims) always reach stderr; ``verbose``
    lowers the threshold to DEBUG. A ``log_file`` additionally receives
    every record with timestamps and the process id, which is what you
    want when several scripts share one INI file.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(logging.DEBUG if log_file else level)

    # Repeated calls (one per CLI invocation in tests) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger
