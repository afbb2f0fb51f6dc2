"""Terminal questionnaire runner built on the prompt engine.

Without arguments it asks the built-in project setup questions; given a
JSON file it asks the questions listed there instead.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from rich.panel import Panel

from .core import EngineOptions, PromptError, PromptSpec, run_prompts
from .utils import (
    Ansi,
    ERROR_LABEL,
    Palette,
    WARNING_LABEL,
    console,
    loading_indicator,
    setup_logging,
    visible_length,
)

# Labels are right-aligned to this width so messages line up
LABEL_WIDTH = 7

# Entries that may already exist in a directory we are allowed to use
SAFE_DIRECTORY_ENTRIES = {
    ".DS_Store",
    ".git",
    ".gitkeep",
    ".gitattributes",
    ".gitignore",
    ".gitlab-ci.yml",
    ".hg",
    ".hgcheck",
    ".hgignore",
    ".idea",
    ".npmignore",
    ".travis.yml",
    "LICENSE",
    "Thumbs.db",
    "docs",
    "mkdocs.yml",
}


def title(text: str, palette: Palette) -> str:
    """Render *text* as a badge label, right-aligned to :data:`LABEL_WIDTH`."""
    badge = palette.badge(f" {text} ")
    return " " * max(LABEL_WIDTH - visible_length(badge), 0) + badge + " "


def is_empty_dir(path: Union[str, Path]) -> bool:
    """True when *path* is missing or holds only ignorable entries."""
    target = Path(path)
    if not target.exists():
        return True
    if not target.is_dir():
        return False
    return all(entry.name in SAFE_DIRECTORY_ENTRIES for entry in target.iterdir())


def validate_directory(value: str) -> Union[bool, str]:
    if not is_empty_dir(value):
        return "Directory is not empty!"
    return True


def validate_required(value: Any) -> Union[bool, str]:
    return bool(str(value).strip()) or "Required"


def default_questions(palette: Palette) -> List[PromptSpec]:
    return [
        PromptSpec(
            kind="text",
            name="dir",
            label=title("dir", palette),
            message="Where should we create your new project?",
            initial="./my-app",
            validate=validate_directory,
        ),
        PromptSpec(
            kind="select",
            name="how",
            label=title("how", palette),
            message="How would you like to start your new project?",
            initial="quick",
            choices=(
                {"value": "quick", "label": "Quick start"},
                {"value": "other", "label": "Use a template"},
            ),
        ),
        PromptSpec(
            kind="confirm",
            name="deps",
            label=title("deps", palette),
            message="Install dependencies?",
            hint="recommended",
            initial=True,
        ),
        PromptSpec(
            kind="confirm",
            name="git",
            label=title("git", palette),
            message="Initialize a new git repository?",
            hint="recommended",
            initial=True,
        ),
    ]


def load_questions(path: Union[str, Path], palette: Palette) -> List[PromptSpec]:
    """Read prompt specs from a JSON list of objects.

    Objects use the :class:`PromptSpec` field names (``type`` works as an
    alias for ``kind``); ``"required": true`` adds a non-empty validator
    and a missing ``label`` defaults to a badge of the question name.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of questions")

    specs = []
    for item in data:
        values = dict(item)
        if values.pop("required", False):
            values["validate"] = validate_required
        values.setdefault("label", title(str(values.get("name", "")), palette))
        specs.append(PromptSpec.from_dict(values))
    return specs


# ---------------------------------------------------------------------------
# Helper classes
# ---------------------------------------------------------------------------


class QuestionnaireCLI:
    """Ask a list of questions and report the answers."""

    def __init__(
        self,
        specs: List[PromptSpec],
        options: EngineOptions,
        no_motion: bool = False,
        stdin=None,
        stdout=None,
    ):
        self.specs = specs
        self.options = options
        self.no_motion = no_motion
        self.stdin = stdin
        self.stdout = stdout
        self.cancelled: Optional[str] = None

    def _on_cancel(self, spec: PromptSpec, answers: Dict[str, Any]) -> bool:
        self.cancelled = spec.name
        return False

    def run(self) -> Dict[str, Any]:
        """Ask every question; stops at the first cancelled one."""
        self.cancelled = None
        return run_prompts(
            self.specs,
            stdin=self.stdin,
            stdout=self.stdout,
            on_cancel=self._on_cancel,
            options=self.options,
        )

    def write_answers(self, answers: Dict[str, Any], output: Optional[str]) -> None:
        text = json.dumps(answers, ensure_ascii=False, indent=2, default=str)
        if not output:
            console.print_json(text)
            return

        path = Path(output)
        loading_indicator(
            "Writing answers...",
            f"Answers written to {path}",
            lambda: path.write_text(text + "\n", encoding="utf-8"),
            no_motion=self.no_motion,
            ascii_only=self.options.ascii,
        )


# ---------------------------------------------------------------------------
# Entrypoint helpers (keeping it separate simplifies __main__ handling)
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:  # pragma: no cover
    parser = argparse.ArgumentParser(
        description="Ask interactive terminal questions and print the answers as JSON."
    )
    parser.add_argument("questions", nargs="?", help="JSON file with the questions to ask")
    parser.add_argument("--output", "-o", help="Write the answers to this file instead of stdout")
    parser.add_argument("--no-color", action="store_true", help="Disable colours")
    parser.add_argument("--ascii", action="store_true", help="Use ASCII glyphs only")
    parser.add_argument("--no-motion", action="store_true", help="Disable the spinner")
    parser.add_argument("--debug", action="store_true", help="Log key handling to stderr")
    parser.add_argument("--log-file", help="Write debug logs to this file")
    return parser.parse_args(argv)


def run_cli(argv: Optional[List[str]] = None) -> None:  # pragma: no cover
    args = _parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.no_color:
        overrides["color"] = False
    if args.ascii:
        overrides["ascii"] = True
    if args.debug:
        overrides["debug"] = True
    options = EngineOptions.from_env(**overrides)
    setup_logging(options.debug or bool(args.log_file), args.log_file)

    palette = Palette(color=options.color)
    try:
        specs = load_questions(args.questions, palette) if args.questions else default_questions(palette)
    except (OSError, ValueError, TypeError, PromptError) as exc:
        console.print(f"{ERROR_LABEL}: {exc}")
        sys.exit(2)

    console.print(Panel.fit("prompt-cli", style="bold magenta"))
    cli = QuestionnaireCLI(specs, options, no_motion=args.no_motion)
    answers = cli.run()

    if cli.cancelled:
        console.print(
            f"{WARNING_LABEL}: cancelled at {Ansi.style(cli.cancelled, Ansi.BOLD)}"
        )
        sys.exit(1)
    cli.write_answers(answers, args.output)


if __name__ == "__main__":  # pragma: no cover
    run_cli()
