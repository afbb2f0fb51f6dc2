from .actions import Action, KeyAction, map_key
from .config import EngineOptions
from .keys import KeyDecoder, KeyEvent, RawMode
from .prompts import (
    Choice,
    ConfirmPrompt,
    EmptyChoicesError,
    InvalidPromptKind,
    MultiSelectPrompt,
    Outcome,
    Prompt,
    PromptError,
    PromptResult,
    PromptSnapshot,
    PromptSpec,
    SelectPrompt,
    TextPrompt,
    create_prompt,
)
from .render import Frame, Renderer
from .runner import PromptSession, ask, run_prompts

__all__ = [
    "Action",
    "KeyAction",
    "map_key",
    "EngineOptions",
    "KeyDecoder",
    "KeyEvent",
    "RawMode",
    "Choice",
    "ConfirmPrompt",
    "EmptyChoicesError",
    "InvalidPromptKind",
    "MultiSelectPrompt",
    "Outcome",
    "Prompt",
    "PromptError",
    "PromptResult",
    "PromptSnapshot",
    "PromptSpec",
    "SelectPrompt",
    "TextPrompt",
    "create_prompt",
    "Frame",
    "Renderer",
    "PromptSession",
    "ask",
    "run_prompts",
]
