import asyncio
import io
import unittest

from prompt_cli.core import (
    EmptyChoicesError,
    InvalidPromptKind,
    KeyDecoder,
    Outcome,
    PromptSession,
    RawMode,
    Renderer,
    TextPrompt,
    ask,
)
from prompt_cli.utils import Cursor

from .test_base import BACKSPACE, CTRL_C, DOWN, ENTER, ESC, UP, BasePromptTest


def required(value):
    return len(value) > 0 or "Required"


class TestScenarios(BasePromptTest):
    def test_select_down_enter(self):
        """Down then Enter picks the second choice"""
        spec = self.spec("select", "how", choices=["quick", "other"], initial="quick")
        self.assertEqual(self.run_keys([spec], DOWN + ENTER), {"how": "other"})

    def test_confirm_n(self):
        """'n' answers a confirm without Enter"""
        spec = self.spec("confirm", "deps", initial=True)
        self.assertEqual(self.run_keys([spec], "n"), {"deps": False})

    def test_multiselect_toggle_and_continue(self):
        """Down, Space, c selects only the second choice"""
        spec = self.spec("multiselect", "pick", choices=["a", "b", "c"])
        self.assertEqual(self.run_keys([spec], DOWN + " c"), {"pick": ["b"]})

    def test_text_validation_error(self):
        """An empty submit shows the error and resolves nothing"""
        spec = self.spec("text", "name", validate=required)
        self.assertEqual(self.run_keys([spec], ENTER), {})
        self.assertIn("Required", self.output)

    def test_text_corrected_after_error(self):
        spec = self.spec("text", "name", validate=required)
        self.assertEqual(self.run_keys([spec], ENTER + "bob" + ENTER), {"name": "bob"})

    def test_escape_restores_raw_mode(self):
        """Escape aborts every prompt kind and releases raw mode"""
        specs = [
            self.spec("text", initial="x"),
            self.spec("confirm"),
            self.spec("select", choices=["a", "b"]),
            self.spec("multiselect", choices=["a", "b"]),
        ]
        for spec in specs:
            with self.subTest(kind=spec.kind):
                result = ask(spec, stdin=io.BytesIO(b"j" + ESC.encode()), stdout=self.stdout, options=self.options)
                self.assertEqual(result.outcome, Outcome.ABORTED)
                self.assertEqual(RawMode.holds, self.holds_before)
                self.assertTrue(self.output.endswith("\n" + Cursor.show))


class TestPromptRunner(BasePromptTest):
    def test_answers_in_order(self):
        """Every spec is asked and keyed by name"""
        specs = [
            self.spec("text", "dir", initial="./my-app"),
            {"type": "select", "name": "how", "message": "How?", "choices": ["quick", "other"]},
            self.spec("confirm", "git", initial=True),
        ]
        answers = self.run_keys(specs, ENTER + UP + ENTER + ENTER)
        self.assertEqual(answers, {"dir": "./my-app", "how": "other", "git": True})
        self.assertEqual(list(answers), ["dir", "how", "git"])

    def test_single_spec(self):
        self.assertEqual(self.run_keys(self.spec("text", "t"), "hi" + ENTER), {"t": "hi"})

    def test_on_submit_can_stop(self):
        """A truthy on_submit return ends the run early"""
        seen = []

        def on_submit(spec, value, answers):
            seen.append((spec.name, value, dict(answers)))
            return spec.name == "a"

        specs = [self.spec("text", "a"), self.spec("text", "b")]
        answers = self.run_keys(specs, "1" + ENTER + "2" + ENTER, on_submit=on_submit)
        self.assertEqual(answers, {"a": "1"})
        self.assertEqual(seen, [("a", "1", {"a": "1"})])

    def test_cancel_stops_the_run(self):
        specs = [self.spec("text", "a"), self.spec("text", "b")]
        self.assertEqual(self.run_keys(specs, CTRL_C + "2" + ENTER), {})

    def test_on_cancel_can_continue(self):
        """A truthy on_cancel return moves on to the next prompt"""
        cancelled = []

        def on_cancel(spec, answers):
            cancelled.append(spec.name)
            return True

        specs = [self.spec("text", "a"), self.spec("text", "b")]
        answers = self.run_keys(specs, CTRL_C + "2" + ENTER, on_cancel=on_cancel)
        self.assertEqual(answers, {"b": "2"})
        self.assertEqual(cancelled, ["a"])

    def test_end_of_input_exits(self):
        """Running out of input ends the prompt as exited"""
        result = ask(self.spec("text"), stdin=io.BytesIO(b"abc"), stdout=self.stdout, options=self.options)
        self.assertEqual(result, (Outcome.EXITED, None))

    def test_select_type_ahead(self):
        spec = self.spec("select", choices=["apple", "banana", "cherry"])
        self.assertEqual(self.run_keys(spec, "ch" + ENTER), {"q": "cherry"})

    def test_digit_symbols_do_not_end_the_run(self):
        """Digit-like symbols are ordinary keys for select and confirm"""
        specs = [
            self.spec("select", "how", choices=["quick", "other"]),
            self.spec("confirm", "git", initial=True),
        ]
        answers = self.run_keys(specs, "²" + ENTER + "①" + ENTER)
        self.assertEqual(answers, {"how": "quick", "git": True})

    def test_bell_written(self):
        self.run_keys(self.spec("text"), "\x1b[D" + "a" + ENTER)
        self.assertIn("\x07", self.output)

    def test_invalid_kind(self):
        with self.assertRaises(InvalidPromptKind):
            self.run_keys([self.spec("password")], ENTER)

    def test_empty_choices(self):
        with self.assertRaises(EmptyChoicesError):
            self.run_keys([self.spec("select", choices=[])], ENTER)

    def test_validator_exception_releases_raw_mode(self):
        """Validator errors propagate after the terminal is restored"""

        def broken(value):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            self.run_keys(self.spec("text", validate=broken), "x" + ENTER)
        self.assertTrue(self.output.endswith("\n" + Cursor.show))


class TestAsyncValidation(BasePromptTest):
    def test_async_validator(self):
        """An async validator can reject and then accept"""

        async def check(value):
            await asyncio.sleep(0)
            return value == "ok" or "Nope"

        spec = self.spec("text", validate=check)
        answers = self.run_keys(spec, "no" + ENTER + BACKSPACE * 2 + "ok" + ENTER)
        self.assertEqual(answers, {"q": "ok"})
        self.assertIn("Nope", self.output)

    def test_abort_cancels_validation(self):
        """An abort key during validation aborts without waiting"""
        cancelled = []

        async def slow(value):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(value)
                raise
            return True

        result = ask(
            self.spec("text", validate=slow),
            stdin=io.BytesIO(("x" + ENTER + CTRL_C).encode()),
            stdout=self.stdout,
            options=self.options,
        )
        self.assertEqual(result.outcome, Outcome.ABORTED)
        self.assertEqual(cancelled, ["x"])

    def test_first_key_replayed(self):
        """The first key typed during validation is replayed, the rest dropped"""

        async def reject(value):
            await asyncio.sleep(0.1)
            return "bad"

        prompt = TextPrompt(self.spec("text", validate=reject), self.options)
        keys = KeyDecoder(io.BytesIO(("x" + ENTER + "ab").encode()))
        result = PromptSession(prompt, keys, Renderer(self.stdout, 80), self.options).run()
        self.assertEqual(result.outcome, Outcome.EXITED)
        self.assertEqual(prompt.text, "xa")
        self.assertEqual(prompt.error, None)


if __name__ == "__main__":
    unittest.main()
