import unittest

from prompt_cli.utils import Cursor, Erase
from prompt_cli.utils.text import end_column, rows_for, split_lines, strip_ansi, visible_length


class TestAnsiText(unittest.TestCase):
    def test_strip_removes_colour_codes(self):
        """Colour codes are removed and the text kept"""
        self.assertEqual(strip_ansi("\x1b[92mok\x1b[39m"), "ok")
        self.assertEqual(visible_length("\x1b[1m\x1b[4mbold\x1b[0m"), 4)

    def test_strip_removes_cursor_sequences(self):
        """Cursor and erase sequences have no visible width"""
        text = Erase.line + Cursor.to(0) + "abc" + Cursor.move(-2, 0)
        self.assertEqual(strip_ansi(text), "abc")

    def test_strip_is_idempotent(self):
        """Stripping twice equals stripping once and never grows the text"""
        samples = [
            "",
            "plain",
            "\x1b[31mred\x1b[0m and \x1b[2mdim\x1b[22m",
            "\x1b]8;;http://example.com\x07link\x1b]8;;\x07",
            "tab\tand ünïcödé ✔",
            "\x1b\x1b[0m[31mred",
            "\x1b\x1b\x1b[0m[0m[31mred",
        ]
        for sample in samples:
            once = strip_ansi(sample)
            self.assertEqual(strip_ansi(once), once)
            self.assertLessEqual(len(once), len(sample))

    def test_strip_rejoined_sequence(self):
        """A stray ESC that forms a sequence once the inner one is gone is removed too"""
        self.assertEqual(strip_ansi("\x1b\x1b[0m[31mred"), "red")

    def test_split_lines(self):
        """Both LF and CRLF break lines"""
        self.assertEqual(split_lines("a\nb\r\nc"), ["a", "b", "c"])

    def test_rows_for_short_line(self):
        """A line shorter than the terminal takes one row"""
        self.assertEqual(rows_for("hello", 80), 1)
        self.assertEqual(rows_for("", 80), 1)

    def test_rows_for_wrapped_line(self):
        """Exactly two widths fill two rows; one more character wraps again"""
        self.assertEqual(rows_for("x" * 80, 80), 1)
        self.assertEqual(rows_for("x" * 160, 80), 2)
        self.assertEqual(rows_for("x" * 161, 80), 3)

    def test_rows_for_multiple_lines(self):
        """Every logical line counts, escape codes do not"""
        text = "\nlabel message\n\x1b[2m" + "y" * 30 + "\x1b[0m"
        self.assertEqual(rows_for(text, 20), 1 + 1 + 2)

    def test_rows_for_unknown_width(self):
        """Zero columns means the width is unknown"""
        self.assertEqual(rows_for("a\nb\nc", 0), 1)

    def test_end_column(self):
        """Cursor column after writing the last line, wrapping included"""
        self.assertEqual(end_column("ab\ncdef", 80), 4)
        self.assertEqual(end_column("x" * 85, 80), 5)
        self.assertEqual(end_column("x" * 80, 80), 80)
        self.assertEqual(end_column("abc\n", 80), 0)
        self.assertEqual(end_column("\x1b[2mabc\x1b[0m", 0), 3)


if __name__ == "__main__":
    unittest.main()
