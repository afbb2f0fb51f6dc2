import io
import unittest

from prompt_cli.core import Frame, Renderer
from prompt_cli.utils import BEEP, Cursor, Erase


class TestRenderer(unittest.TestCase):
    def setUp(self):
        self.out = io.StringIO()
        self.renderer = Renderer(self.out, columns=20)

    def written(self) -> str:
        data = self.out.getvalue()
        self.out.seek(0)
        self.out.truncate()
        return data

    def test_first_frame_erases_nothing(self):
        """Only the current line is cleared before the first frame"""
        self.renderer.draw(Frame("\nhello"))
        self.assertEqual(self.written(), Erase.line + Cursor.to(0) + "\nhello")

    def test_list_frames_hide_the_cursor(self):
        self.renderer.draw(Frame("\nlist", hide_cursor=True))
        self.assertTrue(self.written().startswith(Cursor.hide))

    def test_redraw_erases_previous_rows(self):
        """The next frame erases every row the last one used"""
        self.renderer.draw(Frame("\nlabel\n" + "x" * 30))
        self.written()
        self.renderer.draw(Frame("\nnew"))
        self.assertTrue(self.written().startswith(Erase.lines(4) + Erase.line + Cursor.to(0)))

    def test_error_line_below(self):
        """Lines below are drawn and the caret returns to the edit point"""
        self.renderer.draw(Frame("\nname abc", below="  > Required"))
        self.assertTrue(
            self.written().endswith("\n  > Required" + Cursor.up(1) + Cursor.to(8))
        )
        self.renderer.draw(Frame("\nname abcd"))
        self.assertTrue(self.written().startswith(Cursor.down(1) + Erase.lines(3)))

    def test_cursor_shift(self):
        self.renderer.draw(Frame("\nabc", cursor_shift=-2))
        self.assertTrue(self.written().endswith("abc" + Cursor.to(1)))

    def test_cursor_shift_into_wrapped_row(self):
        """The caret can land on an earlier row of a wrapped line"""
        renderer = Renderer(self.out, columns=10)
        renderer.draw(Frame("\n" + "x" * 25, cursor_shift=-20))
        self.assertTrue(self.written().endswith("x" * 25 + Cursor.up(2) + Cursor.to(5)))

    def test_cursor_shift_unknown_width(self):
        renderer = Renderer(self.out, columns=0)
        renderer.draw(Frame("abc", cursor_shift=-2))
        self.assertTrue(self.written().endswith("abc" + Cursor.move(-2, 0)))

    def test_bell(self):
        self.renderer.draw(Frame("a"))
        self.written()
        self.renderer.draw(Frame("a"), bell=True)
        self.assertIn(BEEP, self.written())

    def test_unknown_width(self):
        """Without a width only the current line is erased"""
        renderer = Renderer(self.out, columns=0)
        renderer.draw(Frame("a\nb"))
        self.written()
        renderer.draw(Frame("c"))
        self.assertEqual(self.written(), Erase.line + Cursor.to(0) + Erase.line + Cursor.to(0) + "c")

    def test_finish_shows_cursor(self):
        """The final frame ends with a newline and a visible cursor"""
        self.renderer.finish(Frame("\ndone", hide_cursor=True))
        self.assertTrue(self.written().endswith("\ndone\n" + Cursor.show))

    def test_width_from_stream(self):
        """In-memory streams have no width"""
        self.assertEqual(Renderer(io.StringIO()).columns, 0)


if __name__ == "__main__":
    unittest.main()
