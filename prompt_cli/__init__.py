"""Interactive terminal prompts: text, confirm, select and multiselect.

Features
--------
1. In-place redraw: each prompt erases exactly what it drew last and
   repaints, with correct row accounting for coloured and wrapped text.
2. Raw keystroke handling: arrows, home/end, ctrl chords and escape
   sequences are decoded into actions; raw mode is always restored.
3. Sequenced questionnaires: `run_prompts` asks a list of questions and
   returns the answers in order, stopping early on cancel.

Run `python -m prompt_cli` or use the `prompt-cli` entry point.
"""
import logging

# Re-export useful symbols for convenience
from .core import (
    Choice,
    EngineOptions,
    Outcome,
    PromptResult,
    PromptSpec,
    ask,
    run_prompts,
)
from .cli import QuestionnaireCLI, run_cli

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Choice",
    "EngineOptions",
    "Outcome",
    "PromptResult",
    "PromptSpec",
    "ask",
    "run_prompts",
    "QuestionnaireCLI",
    "run_cli",
]
