"""Escape sequences for cursor movement, colours and screen clearing."""

from __future__ import annotations

import shutil
from enum import IntEnum


class Color(IntEnum):
    """Terminal colour numbers."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7
    DEFAULT = 9


def _color_code(color: Color | int) -> int:
    value = int(color)
    if not Color.BLACK <= value <= Color.DEFAULT:
        raise ValueError(f"colour {value} out of range")
    return value


def clear_screen() -> str:
    """Sequence that clears the screen and homes the cursor."""
    return "\033[H\033[2J\033[H"


def goto_xy(x: int, y: int) -> str:
    """Sequence that moves the cursor to column x, row y."""
    if x < 0 or y < 0:
        raise ValueError(f"negative position ({x}, {y})")
    return f"\033[{y};{x}H"


def fg_color(color: Color | int) -> str:
    """Sequence that sets the foreground colour."""
    return f"\033[3{_color_code(color)}m"


def bg_color(color: Color | int) -> str:
    """Sequence that sets the background colour."""
    return f"\033[4{_color_code(color)}m"


def screen_size() -> tuple[int, int]:
    """Return the terminal size as (rows, columns)."""
    size = shutil.get_terminal_size()
    return size.lines, size.columns