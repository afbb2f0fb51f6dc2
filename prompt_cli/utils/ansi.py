"""Colour and styling helpers built on :mod:`rich`."""

import os
from dataclasses import dataclass

from rich.color import ColorSystem
from rich.console import Console
from rich.style import Style


console = Console()


class Ansi:
    """Lightweight collection of style names used throughout the app."""

    BOLD = "bold"
    DIM = "dim"
    UNDERLINE = "underline"
    INVERSE = "reverse"

    FG_GREEN = "green"
    FG_RED = "red"
    FG_YELLOW = "yellow"
    FG_BRIGHT_RED = "bright_red"
    FG_BRIGHT_CYAN = "bright_cyan"
    FG_BRIGHT_WHITE = "bright_white"
    BG_BRIGHT_BLUE = "on bright_blue"

    @staticmethod
    def style(text: str, *codes: str) -> str:
        """Return *text* wrapped in rich markup unless ``NO_COLOR`` is set."""
        if os.getenv("NO_COLOR") is not None:
            return text
        style = " ".join(codes)
        return f"[{style}]{text}[/]"


class Palette:
    """Render styled prompt fragments straight to ANSI escape codes.

    Prompt frames are written to the terminal by hand rather than through
    :data:`console`, so styles are rendered eagerly. With ``color=False``
    every method returns the text untouched.
    """

    def __init__(self, color: bool = True):
        self.color = color
        self._system = ColorSystem.STANDARD if color else None

    def paint(self, text: str, *codes: str) -> str:
        return Style.parse(" ".join(codes)).render(text, color_system=self._system)

    def dim(self, text: str) -> str:
        return self.paint(text, Ansi.DIM)

    def green(self, text: str) -> str:
        return self.paint(text, Ansi.FG_GREEN)

    def error(self, text: str) -> str:
        return self.paint(text, Ansi.FG_BRIGHT_RED)

    def pointer(self, text: str) -> str:
        return self.paint(text, Ansi.FG_BRIGHT_CYAN)

    def bright(self, text: str) -> str:
        return self.paint(text, Ansi.FG_BRIGHT_WHITE)

    def underline(self, text: str) -> str:
        return self.paint(text, Ansi.UNDERLINE)

    def inverse(self, text: str) -> str:
        return self.paint(text, Ansi.INVERSE)

    def badge(self, text: str) -> str:
        return self.paint(text, Ansi.FG_BRIGHT_WHITE, Ansi.BG_BRIGHT_BLUE)


@dataclass(frozen=True)
class Glyphs:
    """Marker characters drawn by the prompts."""

    error: str
    pointer: str
    pointer_off: str
    radio_on: str
    radio_off: str
    focus: str
    checked: str
    unchecked: str
    tick: str


UNICODE_GLYPHS = Glyphs(
    error="▶",
    pointer="●",
    pointer_off="○",
    radio_on="●",
    radio_off="○",
    focus="▶",
    checked="■",
    unchecked="□",
    tick="✔",
)

ASCII_GLYPHS = Glyphs(
    error=">",
    pointer=">",
    pointer_off="-",
    radio_on="(*)",
    radio_off="( )",
    focus=">",
    checked="[x]",
    unchecked="[ ]",
    tick="v",
)


def glyphs_for(ascii_only: bool) -> Glyphs:
    return ASCII_GLYPHS if ascii_only else UNICODE_GLYPHS


# Common labels used throughout the application
ERROR_LABEL = Ansi.style("error", Ansi.FG_RED, Ansi.BOLD)
WARNING_LABEL = Ansi.style("warning", Ansi.FG_YELLOW, Ansi.BOLD)
