"""Prompt state machines: text, confirm, select and multiselect.

Every prompt kind implements the same small contract used by the runner:
``transition(key_action)`` applies one action, ``frame(columns)`` renders
the current state and ``is_terminal()`` reports whether it reached Done
or Aborted. A finished prompt ignores further actions.
"""
from __future__ import annotations

import inspect
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from ..utils.ansi import Palette, glyphs_for
from ..utils.log import get_logger
from ..utils.text import visible_length
from .actions import Action, KeyAction
from .config import EngineOptions
from .render import Frame

logger = get_logger(__name__)


DEFAULT_ERROR = "Please enter a valid value"

# Hints move to their own line on terminals narrower than this
NARROW_COLUMNS = 80
HINT_INDENT = 8


class PromptError(Exception):
    """Base class for prompt configuration errors."""


class InvalidPromptKind(PromptError):
    """Raised when a prompt spec names a kind no prompt implements."""


class EmptyChoicesError(PromptError, ValueError):
    """Raised when a select or multiselect prompt has no choices."""


class Status(Enum):
    ACTIVE = "active"
    DONE = "done"
    ABORTED = "aborted"


class Outcome(Enum):
    SUBMITTED = "submitted"
    ABORTED = "aborted"
    EXITED = "exited"


class PromptResult(NamedTuple):
    outcome: Outcome
    value: Any = None

    @property
    def submitted(self) -> bool:
        return self.outcome is Outcome.SUBMITTED


class PromptSnapshot(NamedTuple):
    value: Any
    done: bool
    aborted: bool


@dataclass
class Choice:
    value: Any
    label: str
    hint: Optional[str] = None
    selected: bool = False

    @classmethod
    def coerce(cls, item: Union["Choice", Dict[str, Any], str]) -> "Choice":
        """Accept a :class:`Choice`, a mapping or a bare string."""
        if isinstance(item, Choice):
            return item
        if isinstance(item, dict):
            label = item.get("label", str(item.get("value", "")))
            return cls(
                value=item.get("value", label),
                label=label,
                hint=item.get("hint"),
                selected=bool(item.get("selected", False)),
            )
        return cls(value=item, label=str(item))


ValidationResult = Union[bool, str]
Validator = Callable[[Any], Union[ValidationResult, Awaitable[ValidationResult]]]


@dataclass(frozen=True)
class PromptSpec:
    """Immutable description of one question."""

    kind: str
    name: str
    message: str
    label: str = ""
    initial: Any = None
    hint: Optional[str] = None
    choices: Tuple[Choice, ...] = ()
    validate: Optional[Validator] = None
    error: str = DEFAULT_ERROR
    on_state: Optional[Callable[[PromptSnapshot], None]] = field(
        default=None, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "choices", tuple(Choice.coerce(c) for c in self.choices or ())
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PromptSpec":
        """Build a spec from a plain mapping; ``type`` is accepted for ``kind``."""
        values = dict(data)
        if "kind" not in values and "type" in values:
            values["kind"] = values.pop("type")
        values.pop("type", None)
        return cls(**values)


def _index_of(choices: Sequence[Choice], value: Any) -> int:
    for i, choice in enumerate(choices):
        if choice.value == value:
            return i
    return 0


class Debounce:
    """A restartable one-shot deadline, polled by the runner's key loop."""

    def __init__(self, delay: float, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self._clock = clock
        self._deadline: Optional[float] = None

    def start(self) -> None:
        self._deadline = self._clock() + self.delay

    def cancel(self) -> None:
        self._deadline = None

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(self._deadline - self._clock(), 0.0)

    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline


class Prompt:
    """State shared by every prompt kind.

    Subclasses implement ``_handle``, ``value`` and ``frame``.
    """

    kind = ""
    list_style = False

    def __init__(self, spec: PromptSpec, options: Optional[EngineOptions] = None):
        self.spec = spec
        self.options = options or EngineOptions()
        self.palette = Palette(color=self.options.color)
        self.glyphs = glyphs_for(self.options.ascii)
        self.status = Status.ACTIVE
        self.exited = False
        self.error: Optional[str] = None
        # Awaitable returned by an async validator, resolved by the runner
        self.pending: Optional[Awaitable[ValidationResult]] = None
        self._bell = False

    # --- Lifecycle ---

    @property
    def done(self) -> bool:
        return self.status is not Status.ACTIVE

    @property
    def aborted(self) -> bool:
        return self.status is Status.ABORTED

    def is_terminal(self) -> bool:
        return self.status is not Status.ACTIVE

    @property
    def value(self) -> Any:
        raise NotImplementedError

    def transition(self, key_action: KeyAction) -> None:
        """Apply one action. Ignored once finished or while validating."""
        if self.is_terminal() or self.pending is not None:
            return
        logger.debug("%s %s: %s", self.kind, self.spec.name, key_action)
        self._handle(key_action.action, key_action.char)

    def _handle(self, action: Action, char: str) -> None:
        raise NotImplementedError

    def submit(self) -> None:
        self._finish(Status.DONE)

    def abort(self) -> None:
        self._finish(Status.ABORTED)

    def exit(self) -> None:
        """Finish because the input ran out."""
        self.exited = True
        self.abort()

    def _finish(self, status: Status) -> None:
        self.status = status
        self.pending = None
        self.error = None
        logger.debug("%s %s finished: %s", self.kind, self.spec.name, status.value)
        self.fire()

    def result(self) -> Optional[PromptResult]:
        if self.status is Status.ACTIVE:
            return None
        if self.status is Status.DONE:
            return PromptResult(Outcome.SUBMITTED, self.value)
        return PromptResult(Outcome.EXITED if self.exited else Outcome.ABORTED)

    def fire(self) -> None:
        """Report the current state to the spec's observer."""
        if self.spec.on_state is not None:
            self.spec.on_state(PromptSnapshot(self.value, self.done, self.aborted))

    # --- Validation ---

    def complete_validation(self, outcome: ValidationResult) -> None:
        """Hook for prompts that validate; a no-op elsewhere."""
        self.pending = None

    # --- Timers ---

    def timeout(self) -> Optional[float]:
        """Seconds until the prompt's next timer fires, if one is armed."""
        return None

    def tick(self) -> bool:
        """Run expired timers; True when the state changed."""
        return False

    # --- Rendering ---

    def bell(self) -> None:
        self._bell = True

    def take_bell(self) -> bool:
        bell, self._bell = self._bell, False
        return bell

    @property
    def prefix(self) -> str:
        return " " * visible_length(self.spec.label)

    def header(self, columns: int) -> str:
        parts = ["\n", self.spec.label, " ", self.spec.message]
        if not self.done and self.spec.hint:
            if columns and columns < NARROW_COLUMNS:
                parts.append("\n" + " " * HINT_INDENT)
            parts.append(self.palette.dim(f" ({self.spec.hint})"))
        parts.append("\n")
        return "".join(parts)

    def frame(self, columns: int) -> Frame:
        raise NotImplementedError


class TextPrompt(Prompt):
    """Single-line text entry with an optional placeholder default."""

    kind = "text"

    def __init__(self, spec: PromptSpec, options: Optional[EngineOptions] = None):
        super().__init__(spec, options)
        self.initial = "" if spec.initial is None else str(spec.initial)
        self.text = ""
        self.cursor = 0

    @property
    def value(self) -> str:
        return self.text

    @property
    def placeholder(self) -> bool:
        return not self.text and bool(self.initial)

    def _handle(self, action: Action, char: str) -> None:
        if action is Action.CHAR_INPUT:
            self._insert(char)
        elif action is Action.DELETE:
            self._delete_backward()
        elif action is Action.DELETE_FORWARD:
            self._delete_forward()
        elif action is Action.MOVE_LEFT:
            if self.cursor <= 0 or self.placeholder:
                return self.bell()
            self.cursor -= 1
        elif action is Action.MOVE_RIGHT:
            if self.cursor >= len(self.text) or self.placeholder:
                return self.bell()
            self.cursor += 1
        elif action is Action.FIRST:
            self.cursor = 0
        elif action is Action.LAST:
            self.cursor = len(self.text)
        elif action is Action.RESET:
            self._set_text("", 0)
        elif action is Action.NEXT:
            if not self.placeholder:
                return self.bell()
            self._set_text(self.initial, len(self.initial))
        elif action is Action.SUBMIT:
            self.submit()
        elif action is Action.ABORT:
            self.abort()

    def _set_text(self, text: str, cursor: int) -> None:
        self.text = text
        self.cursor = cursor
        self.error = None
        self.fire()

    def _insert(self, char: str) -> None:
        head, tail = self.text[: self.cursor], self.text[self.cursor :]
        self._set_text(head + char + tail, len(head) + len(char))

    def _delete_backward(self) -> None:
        if self.cursor == 0:
            return self.bell()
        head, tail = self.text[: self.cursor - 1], self.text[self.cursor :]
        self._set_text(head + tail, self.cursor - 1)

    def _delete_forward(self) -> None:
        if self.cursor >= len(self.text) or self.placeholder:
            return self.bell()
        head, tail = self.text[: self.cursor], self.text[self.cursor + 1 :]
        self._set_text(head + tail, self.cursor)

    def submit(self) -> None:
        self.text = self.text or self.initial
        self.cursor = len(self.text)
        self.error = None
        outcome: Any = True
        if self.spec.validate is not None:
            outcome = self.spec.validate(self.text)
        if inspect.isawaitable(outcome):
            logger.debug("text %s: awaiting validation", self.spec.name)
            self.pending = outcome
            return
        self.complete_validation(outcome)

    def complete_validation(self, outcome: ValidationResult) -> None:
        self.pending = None
        if self.is_terminal():
            # Aborted while the validator ran; the result is stale
            return
        if isinstance(outcome, str):
            self.error = outcome or self.spec.error
        elif not outcome:
            self.error = self.spec.error
        else:
            super().submit()
            return
        logger.debug("text %s rejected: %s", self.spec.name, self.error)
        self.fire()

    def abort(self) -> None:
        self.text = self.text or self.initial
        self.cursor = len(self.text)
        super().abort()

    def frame(self, columns: int) -> Frame:
        if self.placeholder:
            rendered = self.palette.dim(self.initial)
            shift = -len(self.initial)
        else:
            rendered = self.text
            shift = self.cursor - len(self.text)
        if self.done:
            rendered = self.palette.dim(rendered)
            shift = 0

        text = f"{self.header(columns)}{self.prefix} {rendered}"
        below = ""
        if self.error and not self.done:
            below = "  " + self.palette.error(f"{self.glyphs.error} {self.error}")
        return Frame(text, below, shift)


class ConfirmPrompt(Prompt):
    """Yes/No question answered with arrows, digits or y/n."""

    kind = "confirm"

    def __init__(self, spec: PromptSpec, options: Optional[EngineOptions] = None):
        super().__init__(spec, options)
        self.choices = (Choice(True, "Yes"), Choice(False, "No"))
        self.answer: Optional[bool] = spec.initial
        self.cursor = 0 if spec.initial else 1

    @property
    def value(self) -> Optional[bool]:
        return self.answer

    def _handle(self, action: Action, char: str) -> None:
        if action is Action.MOVE_LEFT:
            self._move((self.cursor - 1) % len(self.choices))
        elif action is Action.MOVE_RIGHT:
            self._move((self.cursor + 1) % len(self.choices))
        elif action in (Action.FIRST, Action.RESET):
            self._move(0)
        elif action is Action.LAST:
            self._move(len(self.choices) - 1)
        elif action is Action.CHAR_INPUT:
            self._char(char)
        elif action is Action.SUBMIT:
            self.submit()
        elif action is Action.ABORT:
            self.abort()

    def _char(self, char: str) -> None:
        if char.isdecimal():
            index = int(char) - 1
            if not 0 <= index < len(self.choices):
                return self.bell()
            self._move(index)
        elif char.lower() == "y":
            self.answer = True
            self.submit()
        elif char.lower() == "n":
            self.answer = False
            self.submit()

    def _move(self, index: int) -> None:
        self.cursor = index
        self.answer = self.choices[index].value
        self.fire()

    def submit(self) -> None:
        self.answer = bool(self.answer)
        self.cursor = 0 if self.answer else 1
        super().submit()

    def frame(self, columns: int) -> Frame:
        palette = self.palette
        if self.done:
            body = palette.dim(self.choices[self.cursor].label)
        else:
            options = []
            for i, choice in enumerate(self.choices):
                if i == self.cursor:
                    options.append(f"{palette.green(self.glyphs.radio_on)} {choice.label} ")
                else:
                    options.append(palette.dim(f"{self.glyphs.radio_off} {choice.label} "))
            body = palette.dim(" ").join(options)
        return Frame(f"{self.header(columns)}{self.prefix} {body}", hide_cursor=True)


class SelectPrompt(Prompt):
    """Pick one choice; digits jump and submit, letters search by label."""

    kind = "select"
    list_style = True

    def __init__(
        self,
        spec: PromptSpec,
        options: Optional[EngineOptions] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not spec.choices:
            raise EmptyChoicesError(f"select prompt {spec.name!r} must contain choices")
        super().__init__(spec, options)
        self.choices: List[Choice] = list(spec.choices)
        self.initial_index = _index_of(self.choices, spec.initial)
        self.cursor = self.initial_index
        self.search: Optional[str] = None
        self._debounce = Debounce(self.options.search_timeout, clock)

    @property
    def value(self) -> Any:
        return self.choices[self.cursor].value

    def _handle(self, action: Action, char: str) -> None:
        if action is Action.MOVE_UP:
            self._move((self.cursor - 1) % len(self.choices))
        elif action is Action.MOVE_DOWN:
            self._move((self.cursor + 1) % len(self.choices))
        elif action in (Action.FIRST, Action.RESET):
            self._move(0)
        elif action is Action.LAST:
            self._move(len(self.choices) - 1)
        elif action is Action.DELETE:
            self._clear_search()
        elif action is Action.CHAR_INPUT:
            self._char(char)
        elif action is Action.SUBMIT:
            self.submit()
        elif action is Action.ABORT:
            self.abort()

    def _char(self, char: str) -> None:
        self._debounce.cancel()
        if char.isdecimal():
            index = int(char) - 1
            if not 0 <= index < len(self.choices):
                return self.bell()
            self._move(index)
            self.submit()
            return

        started = not self.search
        self.search = (self.search or "") + char.lower()
        count = len(self.choices)
        start = self.cursor if started else 0
        for offset in range(count):
            index = (start + offset) % count
            if self.search in self.choices[index].label.lower():
                self._move(index)
                break
        else:
            self.bell()
        self._debounce.start()

    def _move(self, index: int) -> None:
        self.cursor = index
        self.fire()

    def _clear_search(self) -> None:
        self._debounce.cancel()
        self.search = None

    def timeout(self) -> Optional[float]:
        return self._debounce.remaining()

    def tick(self) -> bool:
        if not self._debounce.expired():
            return False
        self._clear_search()
        return True

    def submit(self) -> None:
        self._clear_search()
        super().submit()

    def abort(self) -> None:
        self._clear_search()
        self.cursor = self.initial_index
        super().abort()

    def highlight(self, label: str) -> str:
        """Underline the part of *label* matched by the search buffer."""
        if not self.search:
            return label
        start = label.lower().find(self.search)
        if start == -1:
            return label
        end = start + len(self.search)
        return label[:start] + self.palette.underline(label[start:end]) + label[end:]

    def frame(self, columns: int) -> Frame:
        palette, prefix = self.palette, self.prefix
        if self.done:
            body = f"{prefix} " + palette.dim(self.choices[self.cursor].label)
        else:
            rows = []
            for i, choice in enumerate(self.choices):
                if i == self.cursor:
                    hint = palette.dim(choice.hint) if choice.hint else ""
                    rows.append(
                        f"{prefix} {palette.green(self.glyphs.pointer)} "
                        f"{self.highlight(choice.label)} {hint}"
                    )
                else:
                    rows.append(
                        palette.dim(f"{prefix} {self.glyphs.pointer_off} {choice.label} ")
                    )
            body = "\n".join(rows)
        return Frame(self.header(columns) + body, hide_cursor=True)


class MultiSelectPrompt(Prompt):
    """Toggle any number of choices with space or Enter, finish with ``c``."""

    kind = "multiselect"
    list_style = True

    def __init__(self, spec: PromptSpec, options: Optional[EngineOptions] = None):
        if not spec.choices:
            raise EmptyChoicesError(f"multiselect prompt {spec.name!r} must contain choices")
        super().__init__(spec, options)
        # Copies, so toggling never touches the spec's choices
        self.choices: List[Choice] = [replace(c) for c in spec.choices]
        self.initial_index = _index_of(self.choices, spec.initial)
        self.cursor = self.initial_index

    @property
    def value(self) -> List[Any]:
        return [c.value for c in self.choices if c.selected]

    def _handle(self, action: Action, char: str) -> None:
        if action is Action.MOVE_UP:
            self._move((self.cursor - 1) % len(self.choices))
        elif action is Action.MOVE_DOWN:
            self._move((self.cursor + 1) % len(self.choices))
        elif action in (Action.FIRST, Action.RESET):
            self._move(0)
        elif action is Action.LAST:
            self._move(len(self.choices) - 1)
        elif action is Action.SUBMIT:
            # Enter toggles; only "c" finishes
            self.toggle()
        elif action is Action.CHAR_INPUT:
            if char == " ":
                self.toggle()
            elif char.lower() == "c":
                self.submit()
        elif action is Action.ABORT:
            self.abort()

    def _move(self, index: int) -> None:
        self.cursor = index
        self.fire()

    def toggle(self) -> None:
        choice = self.choices[self.cursor]
        choice.selected = not choice.selected
        self.fire()

    def abort(self) -> None:
        self.cursor = self.initial_index
        super().abort()

    def frame(self, columns: int) -> Frame:
        palette, glyphs = self.palette, self.glyphs
        # The focus marker replaces the last two prefix columns
        prefix = self.prefix.ljust(2)
        if self.done:
            body = "\n".join(
                f"{prefix} {palette.dim(c.label)}" for c in self.choices if c.selected
            )
            return Frame(self.header(columns) + body, hide_cursor=True)

        rows = []
        for i, choice in enumerate(self.choices):
            if i == self.cursor:
                box = palette.green(glyphs.checked) if choice.selected else palette.bright(glyphs.unchecked)
                hint = palette.dim(choice.hint) if choice.hint else ""
                rows.append(
                    f"{prefix[:-2]}{palette.pointer(glyphs.focus)}  {box} "
                    f"{palette.underline(choice.label)} {hint}"
                )
            elif choice.selected:
                rows.append(f"{prefix} {palette.green(glyphs.checked)} {choice.label} ")
            else:
                rows.append(palette.dim(f"{prefix} {glyphs.unchecked} {choice.label} "))
        footer = f"\n\n{prefix} Press {palette.inverse(' C ')} to continue"
        return Frame(self.header(columns) + "\n".join(rows) + footer, hide_cursor=True)


PROMPT_KINDS: Dict[str, type] = {
    TextPrompt.kind: TextPrompt,
    ConfirmPrompt.kind: ConfirmPrompt,
    SelectPrompt.kind: SelectPrompt,
    MultiSelectPrompt.kind: MultiSelectPrompt,
}


def create_prompt(spec: PromptSpec, options: Optional[EngineOptions] = None) -> Prompt:
    """Construct the prompt matching ``spec.kind``."""
    try:
        prompt_cls = PROMPT_KINDS[spec.kind]
    except KeyError:
        raise InvalidPromptKind(f"Invalid prompt kind: {spec.kind!r}") from None
    return prompt_cls(spec, options)
