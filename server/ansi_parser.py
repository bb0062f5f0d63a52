"""ANSI escape sequence parser.

Converts raw terminal text (with SGR color codes) into a document of cells,
one per printed character, each carrying the colors it was printed with:

  parse("\\x1b[31mhi").cells -> [Cell(Ansi16(31), Ansi16(40), "h"), Cell(..., "i")]

Only SGR color and reset parameters are interpreted. Every other escape
sequence (cursor movement, OSC titles, DCS strings, ...) is consumed and
dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from ansi_colors import DEFAULT_BG, DEFAULT_FG, Ansi16, Ansi256, Color, Rgb

logger = logging.getLogger(__name__)

ERROR_POLICIES = ("strict", "skip")

_ESC = "\x1b"
_BEL = "\x07"
_CAN = "\x18"
_SUB = "\x1a"
_DEL = "\x7f"
_ST = "\x9c"

_MAX_PARAM = 65535

# Scanner states
_GROUND = "ground"
_ESCAPE = "escape"
_ESCAPE_INTERMEDIATE = "escape_intermediate"
_CSI_PARAM = "csi_param"
_CSI_IGNORE = "csi_ignore"
_STRING = "string"

# ESC ] (OSC), ESC P (DCS), ESC X (SOS), ESC ^ (PM), ESC _ (APC)
_STRING_INTRODUCERS = frozenset("]PX^_")
_PRIVATE_MARKERS = frozenset("<=>?")


class MalformedEscapeError(ValueError):
    """An SGR sequence uses an unsupported parameter or is missing values."""

    def __init__(self, message: str, sequence: str = "", offset: int = -1) -> None:
        self.reason = message
        self.sequence = sequence
        self.offset = offset
        if sequence:
            message = f"{message} in {sequence!r} at offset {offset}"
        super().__init__(message)


@dataclass
class Cell:
    fg: Color
    bg: Color
    char: str


@dataclass
class Document:
    """Cells in reading order, plus the colors in effect after the last one."""

    cells: list[Cell] = field(default_factory=list)
    trailing_fg: Color = DEFAULT_FG
    trailing_bg: Color = DEFAULT_BG

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)


def _is_c0(ch: str) -> bool:
    return ch < " "


def _byte(value: int) -> int:
    return min(value, 255)


def _extended_color(params: list[int], i: int) -> tuple[Color, int]:
    """Decode a ``38;...``/``48;...`` color starting at ``params[i]``.

    Returns the color and the index of the last parameter consumed.
    """
    if i + 1 >= len(params):
        raise MalformedEscapeError(f"missing color mode after {params[i]}")
    mode = params[i + 1]
    if mode == 5:
        if i + 2 >= len(params):
            raise MalformedEscapeError("missing 256-color index")
        return Ansi256(_byte(params[i + 2])), i + 2
    if mode == 2:
        if i + 4 >= len(params):
            raise MalformedEscapeError("missing RGB components")
        r, g, b = (_byte(v) for v in params[i + 2:i + 5])
        return Rgb(r, g, b), i + 4
    raise MalformedEscapeError(f"unknown color mode {mode}")


def _apply_sgr(fg: Color, bg: Color, params: list[int]) -> tuple[Color, Color]:
    """Apply SGR parameter codes to a color pair and return the new pair."""
    i = 0
    while i < len(params):
        p = params[i]
        if p == 0:
            fg, bg = DEFAULT_FG, DEFAULT_BG
        elif 30 <= p <= 37 or 90 <= p <= 97:
            fg = Ansi16(p)
        elif 40 <= p <= 47 or 100 <= p <= 107:
            bg = Ansi16(p)
        elif p == 38:
            fg, i = _extended_color(params, i)
        elif p == 48:
            bg, i = _extended_color(params, i)
        else:
            raise MalformedEscapeError(f"unsupported SGR parameter {p}")
        i += 1
    return fg, bg


class _Scanner:
    __slots__ = (
        "doc", "errors", "fg", "bg", "state", "params", "param",
        "private", "intermediates", "seq_start",
    )

    def __init__(self, errors: str) -> None:
        self.doc = Document()
        self.errors = errors
        self.fg: Color = DEFAULT_FG
        self.bg: Color = DEFAULT_BG
        self.state = _GROUND
        self.params: list[int] = []
        self.param: int | None = None
        self.private = False
        self.intermediates = ""
        self.seq_start = 0

    def _print(self, ch: str) -> None:
        self.doc.cells.append(Cell(self.fg, self.bg, ch))

    def _execute(self, ch: str) -> None:
        # Newlines are kept so color runs can span lines; other C0 controls are dropped.
        if ch == "\n":
            self._print(ch)

    def _enter_escape(self, offset: int) -> None:
        self.state = _ESCAPE
        self.seq_start = offset
        self.intermediates = ""

    def _enter_csi(self) -> None:
        self.state = _CSI_PARAM
        self.params = []
        self.param = None
        self.private = False
        self.intermediates = ""

    def _dispatch(self, text: str, offset: int, final: str) -> None:
        self.state = _GROUND
        self.params.append(self.param if self.param is not None else 0)
        sequence = text[self.seq_start:offset + 1]
        if final != "m" or self.private or self.intermediates:
            logger.debug("Skipping non-SGR sequence %r", sequence)
            return
        try:
            self.fg, self.bg = _apply_sgr(self.fg, self.bg, self.params)
        except MalformedEscapeError as exc:
            if self.errors == "strict":
                raise MalformedEscapeError(exc.reason, sequence, self.seq_start) from None
            logger.warning("Dropping malformed SGR sequence %r at offset %d: %s",
                           sequence, self.seq_start, exc.reason)

    def advance(self, text: str, offset: int, ch: str) -> None:
        state = self.state

        if state != _GROUND:
            if ch in (_CAN, _SUB):
                self.state = _GROUND
                return
            if ch == _ESC:
                self._enter_escape(offset)
                return

        if state == _GROUND:
            if ch == _ESC:
                self._enter_escape(offset)
            elif _is_c0(ch):
                self._execute(ch)
            elif ch != _DEL:
                self._print(ch)

        elif state == _ESCAPE:
            if ch == "[":
                self._enter_csi()
            elif ch in _STRING_INTRODUCERS:
                self.state = _STRING
            elif " " <= ch <= "/":
                self.intermediates += ch
                self.state = _ESCAPE_INTERMEDIATE
            elif "0" <= ch <= "~":
                logger.debug("Skipping escape sequence %r", text[self.seq_start:offset + 1])
                self.state = _GROUND
            elif _is_c0(ch):
                self._execute(ch)
            elif ch != _DEL:
                self.state = _GROUND
                self._print(ch)

        elif state == _ESCAPE_INTERMEDIATE:
            if " " <= ch <= "/":
                self.intermediates += ch
            elif "0" <= ch <= "~":
                self.state = _GROUND
            elif _is_c0(ch):
                self._execute(ch)

        elif state == _CSI_PARAM:
            if "0" <= ch <= "9" and not self.intermediates:
                self.param = min((self.param or 0) * 10 + ord(ch) - 48, _MAX_PARAM)
            elif ch in ";:" and not self.intermediates:
                self.params.append(self.param if self.param is not None else 0)
                self.param = None
            elif ch in _PRIVATE_MARKERS and not self.intermediates:
                if self.params or self.param is not None or self.private:
                    self.state = _CSI_IGNORE
                else:
                    self.private = True
            elif " " <= ch <= "/":
                self.intermediates += ch
            elif "@" <= ch <= "~":
                self._dispatch(text, offset, ch)
            elif _is_c0(ch):
                self._execute(ch)
            elif ch != _DEL:
                self.state = _CSI_IGNORE

        elif state == _CSI_IGNORE:
            if "@" <= ch <= "~":
                logger.debug("Skipping invalid CSI sequence %r", text[self.seq_start:offset + 1])
                self.state = _GROUND
            elif _is_c0(ch):
                self._execute(ch)

        elif state == _STRING:
            if ch in (_BEL, _ST):
                self.state = _GROUND


def parse(text: str, errors: str = "strict") -> Document:
    """Parse ANSI text into a document of colored cells.

    *errors* decides what happens to a malformed SGR sequence: ``"strict"``
    raises :class:`MalformedEscapeError`, ``"skip"`` drops the whole sequence
    and keeps the colors that were in effect before it.
    """
    if errors not in ERROR_POLICIES:
        raise ValueError(f"errors must be one of {ERROR_POLICIES}, got {errors!r}")
    scanner = _Scanner(errors)
    for offset, ch in enumerate(text):
        scanner.advance(text, offset, ch)
    scanner.doc.trailing_fg = scanner.fg
    scanner.doc.trailing_bg = scanner.bg
    return scanner.doc
