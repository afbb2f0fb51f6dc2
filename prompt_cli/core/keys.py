"""Keystroke decoding and raw terminal mode handling.

:class:`KeyDecoder` turns the byte stream coming from a terminal into
:class:`KeyEvent` objects, one per physical keystroke. While a prompt is
active the decoder holds :class:`RawMode` on the input stream: echo and
line buffering are off and Ctrl-C arrives as a byte instead of SIGINT.
The previous terminal mode is restored on every exit path.
"""
from __future__ import annotations

import atexit
import codecs
import os
import select
import signal
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Union

from ..utils.log import get_logger

_IS_WINDOWS = os.name == "nt"

if not _IS_WINDOWS:
    import termios


logger = get_logger(__name__)


@dataclass(frozen=True)
class KeyEvent:
    """A single decoded keystroke.

    ``name`` follows the usual readline naming ("up", "return", "a", ...),
    ``char`` is the printable character the key produced, if any.
    """

    name: str
    char: str = ""
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def printable(self) -> bool:
        return bool(self.char) and self.char.isprintable()


# Escape sequences (without the leading ESC) mapped to key names. Several
# entries per key cover xterm, rxvt, tmux and application cursor mode.
_ESCAPE_SEQUENCES: Dict[str, str] = {
    "[A": "up",
    "OA": "up",
    "[B": "down",
    "OB": "down",
    "[C": "right",
    "OC": "right",
    "[D": "left",
    "OD": "left",
    "[5~": "pageup",
    "[6~": "pagedown",
    "[H": "home",
    "OH": "home",
    "[1~": "home",
    "[7~": "home",
    "[F": "end",
    "OF": "end",
    "[4~": "end",
    "[8~": "end",
    "[2~": "insert",
    "[3~": "delete",
    "[Z": "tab",
    "OP": "f1",
    "OQ": "f2",
    "OR": "f3",
    "OS": "f4",
}

# xterm encodes modifiers as 1 + (shift=1 | alt=2 | ctrl=4 | meta=8).
_MOD_SHIFT = 1
_MOD_ALT = 2
_MOD_CTRL = 4
_MOD_META = 8


def _plain_key(ch: str) -> KeyEvent:
    """Decode a character that is not part of an escape sequence."""
    if ch == "\r":
        return KeyEvent("return")
    if ch == "\n":
        return KeyEvent("enter")
    if ch == "\t":
        return KeyEvent("tab")
    if ch in ("\x7f", "\x08"):
        return KeyEvent("backspace")
    if ch == "\x1b":
        return KeyEvent("escape")
    if ch == " ":
        return KeyEvent("space", char=" ")
    if ch == "\x00":
        return KeyEvent("space", ctrl=True)
    if "\x01" <= ch <= "\x1a":
        return KeyEvent(chr(ord(ch) + 96), ctrl=True)
    if ch.isprintable():
        return KeyEvent(ch.lower(), char=ch, shift=ch != ch.lower())
    return KeyEvent("unknown")


def _sequence_key(seq: str) -> KeyEvent:
    """Decode a complete escape sequence such as ``"\\x1b[1;5A"``."""
    body = seq[1:]
    modifier = 0
    if body.startswith("["):
        params, final = body[1:-1], body[-1]
        parts = params.split(";") if params else []
        if final == "~":
            base = "[" + (parts[0] if parts else "") + "~"
        else:
            base = "[" + final
        if len(parts) > 1 and parts[1].isdigit():
            modifier = max(int(parts[1]) - 1, 0)
    else:
        base = body

    name = _ESCAPE_SEQUENCES.get(base)
    if name is None:
        logger.debug("unknown escape sequence %r", seq)
        return KeyEvent("unknown")
    return KeyEvent(
        name,
        ctrl=bool(modifier & _MOD_CTRL),
        meta=bool(modifier & (_MOD_ALT | _MOD_META)),
        shift=bool(modifier & _MOD_SHIFT) or base == "[Z",
    )


def _stream_fileno(stream) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _tty_fileno(stream) -> Optional[int]:
    fd = _stream_fileno(stream)
    if fd is None or _IS_WINDOWS or not os.isatty(fd):
        return None
    return fd


def _set_raw(fd: int) -> None:
    """Apply raw input settings: no echo, no canonical mode, no signals."""
    new = termios.tcgetattr(fd)
    # LFLAG: clear ICANON, ECHO, IEXTEN and ISIG so Ctrl-C/Ctrl-D are keys
    new[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN | termios.ISIG)
    # IFLAG: clear IXON, IXOFF, ICRNL, INLCR, IGNCR
    new[1] &= ~(
        termios.IXON | termios.IXOFF | termios.ICRNL | termios.INLCR | termios.IGNCR
    )
    new[6][termios.VMIN] = 1
    new[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSANOW, new)


class RawMode:
    """Scoped raw input mode on a terminal stream.

    Acquiring twice is a no-op, as is releasing twice. On a stream that is
    not a terminal (a pipe, an in-memory buffer) no termios calls are made
    but the hold is still counted in :attr:`holds`, the number of raw-mode
    holds currently active in the process.
    """

    holds = 0

    _SIGNALS = tuple(
        getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
    )

    def __init__(self, stream):
        self.stream = stream
        self._fd = _tty_fileno(stream)
        self._saved = None
        self._old_handlers: Dict[int, object] = {}
        self.active = False

    def acquire(self) -> None:
        if self.active:
            return
        if self._fd is not None:
            self._saved = termios.tcgetattr(self._fd)
            _set_raw(self._fd)
            self._install_signal_handlers()
            # Safety net in case the interpreter exits with the hold taken
            atexit.register(self.release)
        self.active = True
        RawMode.holds += 1
        logger.debug("raw mode acquired (holds=%d)", RawMode.holds)

    def release(self) -> None:
        if not self.active:
            return
        self.active = False
        RawMode.holds -= 1
        if self._fd is not None:
            atexit.unregister(self.release)
            termios.tcsetattr(self._fd, termios.TCSANOW, self._saved)
            self._restore_signal_handlers()
        logger.debug("raw mode released (holds=%d)", RawMode.holds)

    def _install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in self._SIGNALS:
            self._old_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, self._on_signal)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._old_handlers.items():
            signal.signal(signum, handler)
        self._old_handlers.clear()

    def _on_signal(self, signum, frame) -> None:
        self.release()
        raise SystemExit(128 + signum)

    def __enter__(self) -> "RawMode":
        self.acquire()
        return self

    def __exit__(self, *exc) -> None:
        self.release()


class KeyDecoder:
    """Read and decode keystrokes from an input stream.

    Used as a context manager it holds raw mode on the stream for the
    duration of the block. Events decoded but not yet consumed survive
    across blocks, so one decoder can serve a whole sequence of prompts.
    """

    def __init__(self, stream, escape_timeout: float = 0.05):
        self.stream = stream
        self.escape_timeout = escape_timeout
        self.raw = RawMode(stream)
        self._fd = None if _IS_WINDOWS else _stream_fileno(stream)
        self._decoder = codecs.getincrementaldecoder("utf-8")("replace")
        self._pending = ""  # partial escape sequence
        self._events: Deque[KeyEvent] = deque()
        self._eof = False

    def __enter__(self) -> "KeyDecoder":
        self.raw.acquire()
        return self

    def __exit__(self, *exc) -> None:
        self.raw.release()

    @property
    def at_eof(self) -> bool:
        """True once the stream is exhausted and every event was consumed."""
        return self._eof and not self._events and not self._pending

    # --- Decoding ---

    def decode(self, data: Union[bytes, str]) -> List[KeyEvent]:
        """Decode a chunk of input, returning the keystrokes it completed.

        An escape sequence split across chunks is kept until the rest
        arrives or :meth:`flush` is called.
        """
        chars = self._decoder.decode(data) if isinstance(data, bytes) else data
        events: List[KeyEvent] = []
        for ch in chars:
            event = self._feed(ch)
            if event is not None:
                events.append(event)
        return events

    def flush(self) -> List[KeyEvent]:
        """Resolve a partial escape sequence once no more input follows."""
        pending, self._pending = self._pending, ""
        if not pending:
            return []
        if pending == "\x1b":
            return [KeyEvent("escape")]
        if len(pending) == 2:
            # Alt+[ or Alt+O typed on its own
            return [_meta(_plain_key(pending[1]))]
        logger.debug("dropping incomplete escape sequence %r", pending)
        return [KeyEvent("unknown")]

    def _feed(self, ch: str) -> Optional[KeyEvent]:
        if not self._pending:
            if ch == "\x1b":
                self._pending = ch
                return None
            return _plain_key(ch)

        seq = self._pending + ch
        if len(seq) == 2:
            if ch in "[O":
                self._pending = seq
                return None
            self._pending = ""
            if ch == "\x1b":
                return KeyEvent("escape", meta=True)
            return _meta(_plain_key(ch))

        if seq[1] == "O" or "\x40" <= ch <= "\x7e":
            self._pending = ""
            return _sequence_key(seq)
        self._pending = seq
        return None

    # --- Reading ---

    def read_key(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Return the next keystroke, or ``None`` on timeout or end of input.

        ``timeout=None`` blocks until a key arrives. A lone ESC is reported
        as the Escape key once :attr:`escape_timeout` passes without more
        input.
        """
        while not self._events:
            if self._eof:
                self._events.extend(self.flush())
                if not self._events:
                    return None
                break
            wait = self.escape_timeout if self._pending else timeout
            data = self._read(wait)
            if data is None:
                if not self._pending:
                    return None
                self._events.extend(self.flush())
            elif not data:
                self._eof = True
            else:
                self._events.extend(self.decode(data))
        key = self._events.popleft()
        logger.debug("key %s", key)
        return key

    def unread(self, key: KeyEvent) -> None:
        """Push *key* back so the next :meth:`read_key` returns it."""
        self._events.appendleft(key)

    def _read(self, timeout: Optional[float]):
        if self._fd is None:
            return self.stream.read(1024)
        if timeout is not None:
            ready, _, _ = select.select([self._fd], [], [], timeout)
            if not ready:
                return None
        try:
            return os.read(self._fd, 1024)
        except InterruptedError:
            return None


def _meta(key: KeyEvent) -> KeyEvent:
    return KeyEvent(key.name, key.char, key.ctrl, True, key.shift)
