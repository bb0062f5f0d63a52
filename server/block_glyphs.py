"""Block-drawing glyph inversion.

Inverting a block glyph swaps its filled and unfilled regions, so that
``invert_char("▄") == "▀"``. Paired with swapping foreground and background
colors the cell renders the same picture.
"""

from __future__ import annotations

from types import MappingProxyType

FULL_BLOCK = "█"
MEDIUM_SHADE = "▒"

_PAIRS = (
    (" ", FULL_BLOCK),
    ("░", "▓"),
    # Lower n/8 <-> upper (8-n)/8
    ("▁", "\U0001FB86"),
    ("▂", "\U0001FB85"),
    ("▃", "\U0001FB84"),
    ("▄", "▀"),
    ("▅", "\U0001FB83"),
    ("▆", "\U0001FB82"),
    ("▇", "▔"),
    # Left n/8 <-> right (8-n)/8
    ("▏", "\U0001FB8B"),
    ("▎", "\U0001FB8A"),
    ("▍", "\U0001FB89"),
    ("▌", "▐"),
    ("▋", "\U0001FB88"),
    ("▊", "\U0001FB87"),
    ("▉", "▕"),
    # Quadrants
    ("▘", "▟"),
    ("▝", "▙"),
    ("▖", "▜"),
    ("▗", "▛"),
    ("▚", "▞"),
)

_INVERTED = MappingProxyType({
    **{a: b for a, b in _PAIRS},
    **{b: a for a, b in _PAIRS},
})


def invert_char(c: str) -> str:
    """Return the block glyph covering the complement of *c*, or *c* itself."""
    return _INVERTED.get(c, c)


def can_invert_char(c: str) -> bool:
    # The medium shade is its own inverse but swapping its colors is still valid.
    return c == MEDIUM_SHADE or c in _INVERTED


def invertible_chars() -> frozenset[str]:
    """All characters that ``invert_char`` maps to a different character."""
    return frozenset(_INVERTED)
