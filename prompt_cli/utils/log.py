"""Logging helpers built on :mod:`rich`.

Prompt frames own stdout, so records go to stderr (or a file) and stay at
DEBUG level on the normal path.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "prompt_cli"


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the ``prompt_cli`` hierarchy."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Attach a handler to the package logger and return it.

    Repeated calls only adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return logger

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
