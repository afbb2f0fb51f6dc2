"""In-place redraw of prompt frames."""
from __future__ import annotations

import os
from typing import NamedTuple, Optional

from ..utils.escapes import BEEP, Cursor, Erase
from ..utils.text import end_column, rows_for, split_lines, visible_length


class Frame(NamedTuple):
    """One rendering of a prompt.

    ``text`` ends on the line holding the edit point. ``below`` is drawn
    underneath it (validation errors) without moving the edit point, and
    ``cursor_shift`` moves the caret horizontally from the end of ``text``.
    """

    text: str
    below: str = ""
    cursor_shift: int = 0
    hide_cursor: bool = False


def stream_columns(stream) -> int:
    """Terminal width behind *stream*, or 0 when it is not a terminal."""
    try:
        return os.get_terminal_size(stream.fileno()).columns
    except (AttributeError, OSError, ValueError):
        return 0


def caret_move(text: str, shift: int, columns: int) -> str:
    """Move the caret from the end of *text* back by *shift* columns.

    The last line of *text* may wrap, so the target can sit on an earlier
    row than the end of the text.
    """
    if not columns:
        return Cursor.move(shift, 0)
    width = visible_length(split_lines(text)[-1])
    target = max(width + shift, 0)
    end_row = max(width - 1, 0) // columns
    row = min(target // columns, end_row)
    seq = Cursor.up(end_row - row) if end_row > row else ""
    return seq + Cursor.to(target - row * columns)


class Renderer:
    """Own what a prompt last drew and replace it on every redraw."""

    def __init__(self, out, columns: Optional[int] = None):
        self.out = out
        self._columns = columns
        self._previous: Optional[Frame] = None

    @property
    def columns(self) -> int:
        if self._columns is not None:
            return self._columns
        return stream_columns(self.out)

    def clear_sequence(self) -> str:
        """Sequence that erases the previous frame, leaving the cursor at
        column 0 of its first row."""
        previous = self._previous
        if previous is None:
            return ""
        columns = self.columns
        if not columns:
            return Erase.line + Cursor.to(0)
        rows = rows_for(previous.text, columns)
        below = rows_for(previous.below, columns) if previous.below else 0
        seq = Cursor.down(below) if below else ""
        return seq + Erase.lines(rows + below)

    def draw(self, frame: Frame, bell: bool = False) -> None:
        columns = self.columns
        parts = []
        if self._previous is None:
            if frame.hide_cursor:
                parts.append(Cursor.hide)
        else:
            parts.append(self.clear_sequence())
        if bell:
            parts.append(BEEP)
        parts.append(Erase.line + Cursor.to(0) + frame.text)
        if frame.below:
            # Relative moves only; the lines below may have scrolled the
            # screen, which invalidates a saved absolute position.
            parts.append(
                "\n"
                + frame.below
                + Cursor.up(rows_for(frame.below, columns))
                + Cursor.to(end_column(frame.text, columns))
            )
        if frame.cursor_shift:
            parts.append(caret_move(frame.text, frame.cursor_shift, columns))
        self._write("".join(parts))
        self._previous = frame

    def finish(self, frame: Frame) -> None:
        """Draw the final frame and hand the terminal back."""
        self.draw(frame)
        self.close()

    def close(self) -> None:
        self._write("\n" + Cursor.show)

    def _write(self, data: str) -> None:
        self.out.write(data)
        flush = getattr(self.out, "flush", None)
        if flush is not None:
            flush()
