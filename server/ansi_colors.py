"""ANSI color model: 16-color, 256-color and 24-bit RGB representations.

Every color converts (lossily) to every other representation and renders
itself as the body of an SGR parameter list:

  Rgb(0, 255, 255).to_ansi16()  -> Ansi16(96)
  Ansi256(51).fg_code()         -> "38;5;51"
"""

from __future__ import annotations

import colorsys
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

# Offset between a 16-color foreground code and its background code.
_FG_TO_BG = 10

_FG_CODES = frozenset(range(30, 38)) | frozenset(range(90, 98))
_BG_CODES = frozenset(range(40, 48)) | frozenset(range(100, 108))

# Canonical RGB values for the 16-color palette, keyed by foreground code.
_ANSI16_RGB = MappingProxyType({
    30: (0, 0, 0),
    31: (128, 0, 0),
    32: (0, 128, 0),
    33: (128, 128, 0),
    34: (0, 0, 128),
    35: (128, 0, 128),
    36: (0, 128, 128),
    37: (192, 192, 192),
    90: (0, 0, 0),
    91: (255, 0, 0),
    92: (0, 255, 0),
    93: (255, 255, 0),
    94: (0, 0, 255),
    95: (255, 0, 255),
    96: (0, 255, 255),
    97: (255, 255, 255),
})

# Channel levels of the 6x6x6 cube (indices 16-231).
_CUBE_LEVELS = (0, 51, 102, 153, 204, 255)


def _round(x: float) -> int:
    """Round half away from zero; inputs are never negative."""
    whole = math.floor(x)
    return whole + 1 if x - whole >= 0.5 else whole


def _fg_code(code: int) -> int:
    return code - _FG_TO_BG if code in _BG_CODES else code


def _bg_code(code: int) -> int:
    return code + _FG_TO_BG if code in _FG_CODES else code


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in 0..255, got {value!r}")


@dataclass(frozen=True, eq=False)
class Ansi16:
    """A 16-color palette entry, stored as its SGR code (30-37, 40-47, 90-97, 100-107).

    A background code and its foreground counterpart name the same color and
    compare equal: ``Ansi16(30) == Ansi16(40)``.
    """

    code: int

    def __post_init__(self) -> None:
        if self.code not in _FG_CODES and self.code not in _BG_CODES:
            raise ValueError(f"Not a 16-color SGR code: {self.code!r}")

    @property
    def foreground(self) -> int:
        """The normalized foreground form of this code."""
        return _fg_code(self.code)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Ansi16):
            return self.foreground == other.foreground
        if isinstance(other, (Ansi256, Rgb)):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Ansi16, self.foreground))

    def to_ansi16(self) -> Ansi16:
        return Ansi16(self.foreground)

    def to_ansi256(self) -> Ansi256:
        fg = self.foreground
        return Ansi256(fg - 30 if fg < 90 else fg - 82)

    def to_rgb(self) -> Rgb:
        return Rgb(*_ANSI16_RGB[self.foreground])

    def fg_code(self) -> str:
        return str(self.foreground)

    def bg_code(self) -> str:
        return str(_bg_code(self.code))


@dataclass(frozen=True)
class Ansi256:
    """An entry of the 256-color palette."""

    index: int

    def __post_init__(self) -> None:
        _check_byte("index", self.index)

    def to_ansi16(self) -> Ansi16:
        # The first 16 entries are the system colors themselves.
        if self.index < 8:
            return Ansi16(self.index + 30)
        if self.index < 16:
            return Ansi16(self.index + 82)
        return self.to_rgb().to_ansi16()

    def to_ansi256(self) -> Ansi256:
        return self

    def to_rgb(self) -> Rgb:
        return Rgb(*_ansi256_to_rgb(self.index))

    def fg_code(self) -> str:
        return f"38;5;{self.index}"

    def bg_code(self) -> str:
        return f"48;5;{self.index}"


@dataclass(frozen=True)
class Rgb:
    """A 24-bit true color."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        _check_byte("r", self.r)
        _check_byte("g", self.g)
        _check_byte("b", self.b)

    def to_ansi16(self) -> Ansi16:
        return Ansi16(_rgb_to_ansi16(self.r, self.g, self.b))

    def to_ansi256(self) -> Ansi256:
        return Ansi256(_rgb_to_ansi256(self.r, self.g, self.b))

    def to_rgb(self) -> Rgb:
        return self

    def fg_code(self) -> str:
        return f"38;2;{self.r};{self.g};{self.b}"

    def bg_code(self) -> str:
        return f"48;2;{self.r};{self.g};{self.b}"


Color = Union[Ansi16, Ansi256, Rgb]

DEFAULT_FG = Ansi16(37)
DEFAULT_BG = Ansi16(40)

ANSI_RESET = "\x1b[0m"


def _ansi256_to_rgb(n: int) -> tuple[int, int, int]:
    if n < 16:
        return _ANSI16_RGB[n + 30 if n < 8 else n + 82]
    if n >= 232:
        v = 8 + (n - 232) * 10
        return (v, v, v)
    n -= 16
    return (_CUBE_LEVELS[n // 36], _CUBE_LEVELS[(n % 36) // 6], _CUBE_LEVELS[n % 6])


def _rgb_to_ansi256(r: int, g: int, b: int) -> int:
    # Near-greys use the 24-step ramp instead of the cube's diagonal,
    # except at the black and white ends which the cube already has.
    if r >> 4 == g >> 4 == b >> 4:
        if r < 8:
            return 16
        if r > 248:
            return 231
        return 232 + _round((r - 8) / 247 * 24)
    return (
        16
        + 36 * _round(r / 255 * 5)
        + 6 * _round(g / 255 * 5)
        + _round(b / 255 * 5)
    )


def _rgb_to_ansi16(r: int, g: int, b: int) -> int:
    """Pick a 16-color foreground code by brightness bucket and dominant channels."""
    _, _, value = colorsys.rgb_to_hsv(r / 255, g / 255, b / 255)
    brightness = _round(value * 100 / 50)
    if brightness == 0:
        return 30
    code = 30 + ((_round(b / 255) << 2) | (_round(g / 255) << 1) | _round(r / 255))
    if brightness == 2:
        code += 60
    return code
