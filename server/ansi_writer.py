"""Serialize a document of colored cells back into ANSI text.

Color codes are only written where the colors change between neighboring
cells, and a run that returns to the default colors is closed with a reset.
"""

from __future__ import annotations

from ansi_colors import ANSI_RESET, DEFAULT_BG, DEFAULT_FG, Color
from ansi_parser import Document


def _is_default(fg: Color, bg: Color) -> bool:
    return fg == DEFAULT_FG and bg == DEFAULT_BG


def _transition(fg: Color, bg: Color, cur_fg: Color, cur_bg: Color) -> str:
    """The shortest SGR sequence that moves from (cur_fg, cur_bg) to (fg, bg)."""
    if _is_default(fg, bg):
        return "" if _is_default(cur_fg, cur_bg) else ANSI_RESET
    if fg != cur_fg and bg != cur_bg:
        return f"\x1b[{fg.fg_code()};{bg.bg_code()}m"
    if fg != cur_fg:
        return f"\x1b[{fg.fg_code()}m"
    if bg != cur_bg:
        return f"\x1b[{bg.bg_code()}m"
    return ""


def serialize(doc: Document) -> str:
    out: list[str] = []
    cur_fg: Color = DEFAULT_FG
    cur_bg: Color = DEFAULT_BG

    for cell in doc.cells:
        sgr = _transition(cell.fg, cell.bg, cur_fg, cur_bg)
        if sgr:
            out.append(sgr)
        out.append(cell.char)
        cur_fg, cur_bg = cell.fg, cell.bg

    # A reset that closes the input is kept even though no cell follows it.
    if _is_default(doc.trailing_fg, doc.trailing_bg) and not _is_default(cur_fg, cur_bg):
        out.append(ANSI_RESET)

    return "".join(out)
