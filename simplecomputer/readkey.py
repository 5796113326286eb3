"""Key decoding and terminal mode control for the console."""

from __future__ import annotations

import os
import termios
from enum import IntEnum

_READ_SIZE = 8


class Key(IntEnum):
    """Key codes the console understands."""

    I = 9  # noqa: E741
    ENTER = 10
    L = 12
    R = 18
    S = 19
    T = 20
    ONE = 27
    ESCAPE = 27
    TWO = 28
    THREE = 29
    FOUR = 30
    FIVE = 31
    SIX = 32
    SEVEN = 33
    EIGHT = 34
    NINE = 35
    ZERO = 36
    UP = 37
    DOWN = 38
    LEFT = 39
    RIGHT = 40
    F5 = 41
    F6 = 42


_SINGLE: dict[int, Key] = {
    ord("i"): Key.I,
    ord("l"): Key.L,
    ord("r"): Key.R,
    ord("s"): Key.S,
    ord("t"): Key.T,
    ord("0"): Key.ZERO,
    ord("1"): Key.ONE,
    ord("2"): Key.TWO,
    ord("3"): Key.THREE,
    ord("4"): Key.FOUR,
    ord("5"): Key.FIVE,
    ord("6"): Key.SIX,
    ord("7"): Key.SEVEN,
    ord("8"): Key.EIGHT,
    ord("9"): Key.NINE,
    10: Key.ENTER,
    27: Key.ESCAPE,
}

_ARROWS: dict[int, Key] = {
    ord("A"): Key.UP,
    ord("B"): Key.DOWN,
    ord("C"): Key.RIGHT,
    ord("D"): Key.LEFT,
}

_FUNCTION: dict[int, Key] = {
    ord("5"): Key.F5,
    ord("6"): Key.F6,
}


def decode_key(data: bytes) -> Key:
    """Turn the bytes of one key press into a key code.

    Raises ValueError for an empty or unrecognised sequence.
    """
    data = bytes(data[:_READ_SIZE])
    if not data:
        raise ValueError("no key data")
    if len(data) == 1:
        table, position = _SINGLE, 0
    elif len(data) == 3:
        table, position = _ARROWS, 2
    elif len(data) >= 4:
        table, position = _FUNCTION, 3
    else:
        raise ValueError(f"unrecognised key sequence {data!r}")
    try:
        return table[data[position]]
    except KeyError:
        raise ValueError(f"unrecognised key sequence {data!r}") from None


def read_key(fd: int = 0) -> Key:
    """Read one key press from a file descriptor.

    Raises EOFError when nothing could be read, ValueError for an unknown key.
    """
    data = os.read(fd, _READ_SIZE)
    if not data:
        raise EOFError("no input")
    return decode_key(data)


def _flag(name: str, value: int | bool) -> bool:
    if value not in (0, 1):
        raise ValueError(f"{name} must be 0 or 1, not {value!r}")
    return bool(value)


class TerminalMode:
    """Saves, changes and restores the input mode of a terminal."""

    def __init__(self, fd: int = 0) -> None:
        self.fd = fd
        self._original: list | None = None

    def save(self) -> None:
        """Remember the terminal's current attributes."""
        self._original = termios.tcgetattr(self.fd)

    def restore(self) -> None:
        """Put back the attributes remembered by save()."""
        if self._original is None:
            raise RuntimeError("terminal attributes were never saved")
        termios.tcsetattr(self.fd, termios.TCSANOW, self._original)

    def set_regime(
        self,
        canonical: int | bool = False,
        vtime: int = 0,
        vmin: int = 1,
        echo: int | bool = False,
        sigint: int | bool = True,
    ) -> None:
        """Switch between canonical and raw input with the given options."""
        canonical = _flag("canonical", canonical)
        attrs = termios.tcgetattr(self.fd)
        lflag = attrs[3]
        if canonical:
            lflag |= termios.ICANON
        else:
            lflag &= ~termios.ICANON
            echo = _flag("echo", echo)
            sigint = _flag("sigint", sigint)
            cc = list(attrs[6])
            cc[termios.VTIME] = vtime
            cc[termios.VMIN] = vmin
            attrs[6] = cc
            lflag = lflag | termios.ECHO if echo else lflag & ~termios.ECHO
            lflag = lflag | termios.ISIG if sigint else lflag & ~termios.ISIG
        attrs[3] = lflag
        termios.tcsetattr(self.fd, termios.TCSANOW, attrs)