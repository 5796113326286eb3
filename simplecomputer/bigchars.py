"""Box drawing and 8x8 big characters for the console."""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterable, Sequence

from simplecomputer.terminal import Color

BigChar = tuple[int, int]

BIG_SYMBOLS: dict[str, BigChar] = {
    "0": (1111638588, 1010975298),
    "1": (303306768, 2081427472),
    "2": (541213244, 2114193424),
    "3": (943866428, 1010975296),
    "4": (606613536, 538976382),
    "5": (1040319102, 1010974784),
    "6": (1040335420, 1010975298),
    "7": (270549118, 134744072),
    "8": (1010975292, 1010975298),
    "9": (1111638588, 1010974844),
    "+": (404226048, 1579134),
    "A": (2118263832, 1111638594),
    "B": (505553438, 2118271522),
    "C": (33702460, 1010975234),
    "D": (1111638590, 1044529730),
    "E": (503448126, 2114060802),
    "F": (503448126, 33686018),
}

_CHAR = struct.Struct("<II")


def box(x1: int, y1: int, x2: int, y2: int) -> str:
    """Frame of x2 rows by y2 columns whose corner is at row x1, column y1."""
    if min(x1, y1, x2, y2) < 0:
        raise ValueError("box coordinates must not be negative")
    inner = y2 - 1
    parts = [f"\033[{x1};{y1}H\033(0l", "q" * inner, f"k\n\033[{x1 + 1};{y1}H"]
    for row in range(1, x2):
        parts.append("x" + " " * inner + f"x\n\033[{x1 + row};{y1}H")
    parts.append("m" + "q" * inner + "j\n\033(B")
    return "".join(parts)


def print_a(text: str) -> str:
    """Text rendered in the line-drawing character set."""
    return f"\033(0{text}\033(B"


def big_char(
    symbol: Sequence[int],
    x: int,
    y: int,
    fg: Color | int = Color.DEFAULT,
    bg: Color | int = Color.DEFAULT,
) -> str:
    """Render an 8x8 big character with its top-left corner at row x, column y."""
    fg, bg = int(fg), int(bg)
    if not (Color.BLACK <= fg <= Color.DEFAULT and Color.BLACK <= bg <= Color.DEFAULT):
        raise ValueError("colour out of range")
    if x < 0 or y < 0:
        raise ValueError("negative position")
    blank = f"\033[4{bg}m \033[49m"
    pixel = f"\033[3{fg}m\033[4{bg}ma\033[39m\033[49m"
    parts = [f"\033[{x};{y}H\033(0"]
    for word in symbol[:2]:
        word &= 0xFFFFFFFF
        for _ in range(4):
            row = word & 0xFF
            parts.extend(pixel if (row >> bit) & 1 else blank for bit in range(8))
            x += 1
            parts.append(f"\n\033[{x};{y}H")
            word >>= 8
    parts.append("\033(B")
    parts.append(f"\033[{x};0H")
    return "".join(parts)


def _bit_position(x: int, y: int) -> tuple[int, int]:
    row, column = x - 1, y - 1
    if not (0 <= row <= 7 and 0 <= column <= 7):
        raise ValueError(f"position ({x}, {y}) outside 1..8")
    return (0 if row < 4 else 1), column + (row % 4) * 8


def get_big_char_pos(big: Sequence[int], x: int, y: int) -> int:
    """Return the pixel at row x, column y (both 1..8)."""
    index, shift = _bit_position(x, y)
    return (big[index] >> shift) & 1


def set_big_char_pos(big: Sequence[int], x: int, y: int, value: int) -> BigChar:
    """Return a copy of a big character with one pixel set to value (0 or 1)."""
    if value not in (0, 1):
        raise ValueError(f"pixel value must be 0 or 1, not {value!r}")
    index, shift = _bit_position(x, y)
    words = [big[0] & 0xFFFFFFFF, big[1] & 0xFFFFFFFF]
    if value:
        words[index] |= 1 << shift
    else:
        words[index] &= ~(1 << shift) & 0xFFFFFFFF
    return words[0], words[1]


def write_big_chars(stream: BinaryIO, chars: Iterable[Sequence[int]]) -> int:
    """Write big characters to a binary stream and return how many were written."""
    data = b"".join(_CHAR.pack(c[0] & 0xFFFFFFFF, c[1] & 0xFFFFFFFF) for c in chars)
    written = stream.write(data)
    if written is not None and written != len(data):
        raise OSError(f"short write: {written} of {len(data)} bytes")
    return len(data) // _CHAR.size


def read_big_chars(stream: BinaryIO, count: int) -> list[BigChar]:
    """Read up to count big characters from a binary stream."""
    if count <= 0:
        raise ValueError("count must be positive")
    data = stream.read(count * _CHAR.size)
    whole = len(data) // _CHAR.size * _CHAR.size
    return list(_CHAR.iter_unpack(data[:whole]))