"""Visible-width helpers for strings that carry ANSI escape sequences."""

import re
from typing import List


# Matches CSI/OSC style escape sequences, including colour codes such as
# "\033[92m" and hyperlinks terminated by BEL.
_ANSI_PATTERN = re.compile(
    r"[\x1b\x9b][\[\]()#;?]*"
    r"(?:(?:(?:(?:;[-a-zA-Z\d/#&.:=?%@~_]+)*"
    r"|[a-zA-Z\d]+(?:;[-a-zA-Z\d/#&.:=?%@~_]*)*)?\x07)"
    r"|(?:(?:\d{1,4}(?:;\d{0,4})*)?[\dA-PRZcf-ntqry=><~]))"
)

_LINE_BREAK = re.compile(r"\r?\n")


def strip_ansi(text: str) -> str:
    """Return *text* with every escape sequence removed."""
    if "\x1b" not in text and "\x9b" not in text:  # fast-path – plain text
        return text
    # Removing one sequence can join a stray ESC with the text after it
    while True:
        stripped = _ANSI_PATTERN.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def visible_length(text: str) -> int:
    """Number of characters of *text* that actually reach the screen."""
    return len(strip_ansi(text))


def split_lines(text: str) -> List[str]:
    return _LINE_BREAK.split(text)


def rows_for(text: str, columns: int) -> int:
    """Return how many terminal rows *text* occupies at *columns* width.

    Each logical line takes one row plus one more for every full width it
    wraps past. ``columns == 0`` means the width is unknown, in which case
    the text is treated as a single row.
    """
    if not columns:
        return 1
    rows = 0
    for line in split_lines(text):
        rows += 1 + max(visible_length(line) - 1, 0) // columns
    return rows


def end_column(text: str, columns: int) -> int:
    """Column (0-based) the cursor sits on after writing *text*."""
    width = visible_length(split_lines(text)[-1])
    if not columns or not width:
        return width
    return width - ((width - 1) // columns) * columns
