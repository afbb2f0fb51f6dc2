from .ansi import (
    Ansi,
    Palette,
    Glyphs,
    glyphs_for,
    ERROR_LABEL,
    WARNING_LABEL,
    console,
)
from .escapes import BEEP, Cursor, Erase
from .log import get_logger, setup_logging
from .spinner import Spinner, loading_indicator
from .text import strip_ansi, visible_length, rows_for

__all__ = [
    "Ansi",
    "Palette",
    "Glyphs",
    "glyphs_for",
    "ERROR_LABEL",
    "WARNING_LABEL",
    "console",
    "BEEP",
    "Cursor",
    "Erase",
    "get_logger",
    "setup_logging",
    "Spinner",
    "loading_indicator",
    "strip_ansi",
    "visible_length",
    "rows_for",
]
