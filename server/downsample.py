"""Downsample an ANSI document from 256/RGB colors to the 16-color palette."""

from __future__ import annotations

from ansi_colors import DEFAULT_BG
from ansi_parser import Document, parse
from ansi_writer import serialize
from block_glyphs import FULL_BLOCK, can_invert_char, invert_char


def downsample_document(doc: Document) -> Document:
    """Rewrite every cell of *doc* in place to use only 16-color values.

    Beyond converting colors, cells are substituted where that reads better
    after the palette shrinks:

    - a cell whose ink and paper collapse to the same color becomes a full
      block (or a blank on the default background);
    - a colored space becomes a full block inked with its background color,
      sitting on the previous cell's background, so runs of colored spaces do
      not need background codes of their own;
    - a block glyph inked in the default background color is inverted and
      drawn with its background as ink instead.
    """
    prior_bg = DEFAULT_BG

    for cell in doc.cells:
        fg = cell.fg.to_ansi16()
        bg = cell.bg.to_ansi16()
        char = cell.char

        if char == "\n":
            # Line breaks keep their character; only their colors change.
            pass
        elif fg == bg:
            char = " " if bg == DEFAULT_BG else FULL_BLOCK
        elif char == " " and bg != DEFAULT_BG:
            fg, bg = bg, prior_bg
            char = FULL_BLOCK
        elif fg == DEFAULT_BG and can_invert_char(char):
            fg, bg = bg, DEFAULT_BG
            char = invert_char(char)

        cell.fg, cell.bg, cell.char = fg, bg, char
        prior_bg = bg

    doc.trailing_fg = doc.trailing_fg.to_ansi16()
    doc.trailing_bg = doc.trailing_bg.to_ansi16()
    return doc


def string_to_ansi16(text: str, errors: str = "strict") -> str:
    """Convert ANSI text using 256-color or RGB codes to 16-color ANSI text.

    >>> string_to_ansi16("\\x1b[38;2;0;255;255mHello, World!")
    '\\x1b[96mHello, World!'

    Raises :class:`ansi_parser.MalformedEscapeError` on an unsupported SGR
    sequence unless *errors* is ``"skip"``.
    """
    doc = parse(text, errors=errors)
    return serialize(downsample_document(doc))
