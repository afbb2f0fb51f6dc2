"""Drive prompts from keystrokes to answers."""
from __future__ import annotations

import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple, Union

from ..utils.log import get_logger
from .actions import Action, map_key
from .config import EngineOptions
from .keys import KeyDecoder, KeyEvent
from .prompts import Outcome, Prompt, PromptResult, PromptSpec, create_prompt
from .render import Renderer

logger = get_logger(__name__)


Answers = Dict[str, Any]
SubmitHook = Callable[[PromptSpec, Any, Answers], Any]
CancelHook = Callable[[PromptSpec, Answers], Any]
SpecLike = Union[PromptSpec, Dict[str, Any]]

# Returned by the validation wait when an abort key cancelled it
_CANCELLED = object()


class PromptSession:
    """Run a single prompt until it is submitted, aborted or input ends.

    Raw mode is held on the decoder's stream for exactly the lifetime of
    :meth:`run` and released before it returns, whatever the exit path.
    """

    def __init__(
        self,
        prompt: Prompt,
        keys: KeyDecoder,
        renderer: Renderer,
        options: Optional[EngineOptions] = None,
    ):
        self.prompt = prompt
        self.keys = keys
        self.renderer = renderer
        self.options = options or prompt.options

    def run(self) -> PromptResult:
        with self.keys:
            try:
                self._loop()
            except BaseException:
                self.renderer.close()
                raise
            self.renderer.finish(self.prompt.frame(self.renderer.columns))
        return self.prompt.result()

    def _draw(self) -> None:
        prompt = self.prompt
        self.renderer.draw(prompt.frame(self.renderer.columns), bell=prompt.take_bell())

    def _loop(self) -> None:
        prompt = self.prompt
        self._draw()
        while not prompt.is_terminal():
            key = self.keys.read_key(timeout=prompt.timeout())
            if key is None:
                if self.keys.at_eof:
                    logger.debug("input ended during %s", prompt.spec.name)
                    prompt.exit()
                elif prompt.tick():
                    self._draw()
                continue

            prompt.transition(map_key(key, prompt.list_style))
            if prompt.pending is not None:
                self._validate()
            if not prompt.is_terminal():
                self._draw()

    # --- Async validation ---

    def _validate(self) -> None:
        """Wait for the prompt's pending validator.

        Key processing is suspended meanwhile: an abort key cancels the
        validation, the first other key is replayed afterwards and the
        rest are dropped.
        """
        outcome, held = asyncio.run(self._await_validation(self.prompt.pending))
        if outcome is _CANCELLED:
            return
        self.prompt.complete_validation(outcome)
        if held is not None and not self.prompt.is_terminal():
            self.keys.unread(held)

    async def _await_validation(self, awaitable: Awaitable) -> Tuple[Any, Optional[KeyEvent]]:
        task = asyncio.ensure_future(awaitable)
        held: Optional[KeyEvent] = None
        while True:
            done, _ = await asyncio.wait({task}, timeout=self.options.validation_poll)
            if done:
                return task.result(), held
            for key in self._drain_keys():
                if map_key(key, self.prompt.list_style).action is Action.ABORT:
                    logger.debug("validation of %s cancelled", self.prompt.spec.name)
                    task.cancel()
                    self.prompt.abort()
                    await asyncio.wait({task})
                    return _CANCELLED, None
                if held is None:
                    held = key
                else:
                    logger.debug("dropping %s typed during validation", key.name)

    def _drain_keys(self) -> Iterable[KeyEvent]:
        while True:
            key = self.keys.read_key(timeout=0)
            if key is None:
                return
            yield key


def ask(
    spec: SpecLike,
    *,
    stdin=None,
    stdout=None,
    options: Optional[EngineOptions] = None,
) -> PromptResult:
    """Run one prompt and return its :class:`PromptResult`."""
    options = options or EngineOptions.from_env()
    keys = KeyDecoder(stdin if stdin is not None else sys.stdin, options.escape_timeout)
    return _run_one(_coerce(spec), keys, stdout, options)


def run_prompts(
    specs: Union[SpecLike, Iterable[SpecLike]],
    *,
    stdin=None,
    stdout=None,
    on_submit: Optional[SubmitHook] = None,
    on_cancel: Optional[CancelHook] = None,
    options: Optional[EngineOptions] = None,
) -> Answers:
    """Ask every spec in order and collect the answers.

    ``on_submit(spec, value, answers)`` runs after each answer; a truthy
    return stops the run. When a prompt is aborted, the run stops unless
    ``on_cancel(spec, answers)`` returns a truthy value. The answers
    collected so far are returned in every case.
    """
    if isinstance(specs, (PromptSpec, dict)):
        specs = [specs]
    options = options or EngineOptions.from_env()
    keys = KeyDecoder(stdin if stdin is not None else sys.stdin, options.escape_timeout)

    answers: Answers = {}
    for spec in specs:
        spec = _coerce(spec)
        result = _run_one(spec, keys, stdout, options)
        if result.outcome is Outcome.SUBMITTED:
            answers[spec.name] = result.value
            stop = on_submit(spec, result.value, answers) if on_submit else False
        else:
            stop = not (on_cancel(spec, answers) if on_cancel else False)
        if stop:
            logger.debug("run stopped after %s (%s)", spec.name, result.outcome.value)
            return answers
    return answers


def _coerce(spec: SpecLike) -> PromptSpec:
    return spec if isinstance(spec, PromptSpec) else PromptSpec.from_dict(spec)


def _run_one(spec: PromptSpec, keys: KeyDecoder, stdout, options: EngineOptions) -> PromptResult:
    prompt = create_prompt(spec, options)
    renderer = Renderer(stdout if stdout is not None else sys.stdout, options.columns)
    return PromptSession(prompt, keys, renderer, options).run()
