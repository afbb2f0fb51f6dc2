import io
import unittest
from typing import Any, Dict

from prompt_cli.core import EngineOptions, PromptSpec, RawMode, run_prompts

# Raw input bytes for the keys the tests press
UP = "\x1b[A"
DOWN = "\x1b[B"
RIGHT = "\x1b[C"
LEFT = "\x1b[D"
ENTER = "\r"
ESC = "\x1b"
TAB = "\t"
BACKSPACE = "\x7f"
CTRL_A = "\x01"
CTRL_C = "\x03"
CTRL_D = "\x04"
CTRL_E = "\x05"
CTRL_G = "\x07"


class BasePromptTest(unittest.TestCase):
    def setUp(self):
        # Fixed width and no colours keep frames predictable
        self.options = EngineOptions(color=False, ascii=False, columns=80)
        self.holds_before = RawMode.holds
        self.stdout = io.StringIO()

    def tearDown(self):
        self.assertEqual(RawMode.holds, self.holds_before)

    def spec(self, kind: str, name: str = "q", **kwargs) -> PromptSpec:
        kwargs.setdefault("message", f"{name}?")
        return PromptSpec(kind=kind, name=name, **kwargs)

    def run_keys(self, specs, keys: str, **hooks) -> Dict[str, Any]:
        """Run *specs* against the given keystrokes and return the answers."""
        stdin = io.BytesIO(keys.encode("utf-8"))
        return run_prompts(
            specs, stdin=stdin, stdout=self.stdout, options=self.options, **hooks
        )

    @property
    def output(self) -> str:
        return self.stdout.getvalue()
