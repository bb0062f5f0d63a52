from pathlib import Path
import sys
import unittest

SERVER_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVER_DIR))

from ansi_colors import DEFAULT_BG, DEFAULT_FG, Ansi16, Ansi256, Rgb
from ansi_parser import MalformedEscapeError, parse


def _text(doc):
    return "".join(cell.char for cell in doc.cells)


class AnsiParserTests(unittest.TestCase):
    def test_basic_color_then_reset(self):
        doc = parse("\x1b[31mred\x1b[0m plain")
        self.assertEqual(_text(doc), "red plain")
        self.assertEqual(doc.cells[0].fg, Ansi16(31))
        self.assertEqual(doc.cells[0].bg, DEFAULT_BG)
        self.assertEqual(doc.cells[3].fg, DEFAULT_FG)

    def test_background_codes(self):
        doc = parse("\x1b[44;93mx\x1b[105my")
        self.assertEqual(doc.cells[0].fg.code, 93)
        self.assertEqual(doc.cells[0].bg.code, 44)
        self.assertEqual(doc.cells[1].bg.code, 105)

    def test_extended_colors(self):
        doc = parse("\x1b[38;5;51;48;2;1;2;3mx")
        self.assertEqual(doc.cells[0].fg, Ansi256(51))
        self.assertEqual(doc.cells[0].bg, Rgb(1, 2, 3))

    def test_colon_separators(self):
        doc = parse("\x1b[38:2:1:2:3mx")
        self.assertEqual(doc.cells[0].fg, Rgb(1, 2, 3))

    def test_extended_values_clamp(self):
        doc = parse("\x1b[38;5;300mx")
        self.assertEqual(doc.cells[0].fg, Ansi256(255))

    def test_empty_params_reset(self):
        doc = parse("\x1b[31;42m\x1b[mx")
        self.assertEqual(doc.cells[0].fg, DEFAULT_FG)
        self.assertEqual(doc.cells[0].bg, DEFAULT_BG)

    def test_newlines_carry_colors(self):
        doc = parse("\x1b[32ma\nb")
        self.assertEqual(_text(doc), "a\nb")
        self.assertEqual(doc.cells[1].fg, Ansi16(32))
        self.assertEqual(doc.cells[2].fg, Ansi16(32))

    def test_other_controls_are_dropped(self):
        self.assertEqual(_text(parse("a\tb\rc\x7fd")), "abcd")

    def test_strips_non_sgr_escapes(self):
        self.assertEqual(_text(parse("hello\x1b]0;title\x07 world")), "hello world")
        self.assertEqual(_text(parse("\x1b[2J\x1b[1;1Hx")), "x")
        self.assertEqual(_text(parse("\x1b[?25lx")), "x")
        self.assertEqual(_text(parse("\x1b]8;;http://example.com\x1b\\link")), "link")
        self.assertEqual(_text(parse("\x1b(Bx")), "x")
        self.assertEqual(_text(parse("\x1bPq#0;2;0;0;0\x1b\\y")), "y")

    def test_non_sgr_csi_does_not_change_colors(self):
        doc = parse("\x1b[31m\x1b[38;9Hx")
        self.assertEqual(doc.cells[0].fg, Ansi16(31))

    def test_cancel_aborts_sequence(self):
        doc = parse("\x1b[31\x18x")
        self.assertEqual(_text(doc), "x")
        self.assertEqual(doc.cells[0].fg, DEFAULT_FG)

    def test_trailing_colors(self):
        self.assertEqual(parse("x\x1b[32m").trailing_fg, Ansi16(32))
        doc = parse("\x1b[31mx\x1b[0m")
        self.assertEqual(doc.trailing_fg, DEFAULT_FG)
        self.assertEqual(doc.trailing_bg, DEFAULT_BG)

    def test_empty_input(self):
        doc = parse("")
        self.assertEqual(len(doc), 0)


class MalformedEscapeTests(unittest.TestCase):
    def test_unknown_color_mode(self):
        with self.assertRaises(MalformedEscapeError) as ctx:
            parse("ok\x1b[38;9m")
        self.assertIsInstance(ctx.exception, ValueError)
        self.assertEqual(ctx.exception.sequence, "\x1b[38;9m")
        self.assertEqual(ctx.exception.offset, 2)

    def test_missing_trailing_values(self):
        for text in ("\x1b[38m", "\x1b[38;5m", "\x1b[48;2;1;2m"):
            with self.subTest(text=text):
                with self.assertRaises(MalformedEscapeError):
                    parse(text)

    def test_unsupported_parameter(self):
        with self.assertRaises(MalformedEscapeError):
            parse("\x1b[1mbold")

    def test_skip_drops_whole_sequence(self):
        with self.assertLogs("ansi_parser", level="WARNING"):
            doc = parse("\x1b[31mA\x1b[44;38;9mB", errors="skip")
        self.assertEqual(_text(doc), "AB")
        self.assertEqual(doc.cells[1].fg, Ansi16(31))
        self.assertEqual(doc.cells[1].bg, DEFAULT_BG)

    def test_rejects_unknown_policy(self):
        with self.assertRaises(ValueError):
            parse("x", errors="ignore")


if __name__ == "__main__":
    unittest.main()
