"""Spinner and loading indicator built on yaspin."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Optional, TypeVar

from yaspin import yaspin

from .ansi import Ansi, console, glyphs_for


T = TypeVar("T")

# Work that finishes faster than this never shows a spinner.
SLOW_WORK_DELAY = 0.5


class Spinner:
    """Display a small spinner next to a label while work is done."""

    def __init__(self, text: str = "", color: Optional[str] = "green"):
        self._spinner = yaspin(text=text, color=color)
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._spinner.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._spinner.stop()
        self._started = False

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()


def loading_indicator(
    start: str,
    end: str,
    work: Callable[[], T],
    *,
    no_motion: bool = False,
    ascii_only: bool = False,
    delay: float = SLOW_WORK_DELAY,
) -> T:
    """Run *work* and report completion with a ticked *end* line.

    A spinner labelled *start* appears only when *work* outlasts *delay*;
    with *no_motion* the label is printed once instead.
    """
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(work)
        try:
            result = future.result(timeout=delay)
        except FutureTimeout:
            if no_motion:
                console.print(f"     {start}")
                result = future.result()
            else:
                with Spinner(start):
                    result = future.result()

    tick = glyphs_for(ascii_only).tick
    console.print(
        f"     {Ansi.style(tick, Ansi.FG_GREEN)}  {Ansi.style(end, Ansi.FG_GREEN)}"
    )
    return result
