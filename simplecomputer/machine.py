"""Memory, flag register and line cache of the simple computer."""

from __future__ import annotations

import struct
import time
from enum import IntEnum
from pathlib import Path

MEMORY_SIZE = 100
REGISTER_SIZE = 5
MAX_WORD = 131071
LINE_SIZE = 10
CACHE_LINES = 5
EMPTY_LINE = -1

_IMAGE = struct.Struct(f"<{MEMORY_SIZE}i")
_CELL = struct.Struct("<i")


class Flag(IntEnum):
    """Bits of the flag register, numbered from 1."""

    MEMORY_OUT_OF_BOUNDS = 1
    COMMAND_NOT_FOUND = 2
    DIVISION_BY_ZERO = 3
    OVERFLOW = 4
    CLOCK_PULSES_IGNORED = 5


class MemoryAddressError(IndexError):
    """An address outside the machine's memory was used."""


class CommandDecodeError(ValueError):
    """A word could not be decoded into a command."""


def encode_command(command: int, operand: int) -> int:
    """Pack a command and an operand (each 0..127) into one word."""
    if not (0 <= command <= 127 and 0 <= operand <= 127):
        raise ValueError(f"command {command} or operand {operand} out of range 0..127")
    return (command << 7) | operand


def decode_command(value: int) -> tuple[int, int]:
    """Split a word into its command and operand bytes."""
    if value < 0 or value > MAX_WORD:
        raise CommandDecodeError(f"word {value} out of range 0..{MAX_WORD}")
    return (value >> 8) & 0xFF, value & 0xFF


def _to_int32(value: int) -> int:
    return (value + 2**31) % 2**32 - 2**31


class Machine:
    """Memory of 100 cells read through a five-line cache, plus the flag register."""

    def __init__(self, cache_delay: float = 3.0) -> None:
        self.cache_delay = cache_delay
        self.memory = [0] * MEMORY_SIZE
        self.registers = 0
        self.cache = [0] * (CACHE_LINES * LINE_SIZE)
        self.cache_lines = [EMPTY_LINE] * CACHE_LINES
        self.access_times = [0.0] * CACHE_LINES
        self._stamps = [0] * CACHE_LINES
        self._clock = 0
        self.reset_cache()

    # memory -------------------------------------------------------------

    def clear_memory(self) -> None:
        """Set every memory cell to zero."""
        self.memory = [0] * MEMORY_SIZE

    def _check_address(self, address: int) -> None:
        if not 0 <= address < MEMORY_SIZE:
            self.set_flag(Flag.MEMORY_OUT_OF_BOUNDS, 1)
            raise MemoryAddressError(f"address {address} out of range 0..{MEMORY_SIZE - 1}")

    def set(self, address: int, value: int) -> None:
        """Write a value straight into memory."""
        self._check_address(address)
        self.memory[address] = value

    def get(self, address: int) -> int:
        """Read a value through the cache, loading or replacing a line as needed."""
        self._check_address(address)
        base = address // LINE_SIZE * LINE_SIZE
        try:
            line = self.cache_lines.index(base)
        except ValueError:
            line = self._fill_line(base)
        self._touch(line)
        return self.cache[line * LINE_SIZE + address % LINE_SIZE]

    def _fill_line(self, base: int) -> int:
        try:
            line = self.cache_lines.index(EMPTY_LINE)
        except ValueError:
            line = min(
                range(CACHE_LINES),
                key=lambda i: (self.access_times[i], self._stamps[i]),
            )
            self._delay()
            old = self.cache_lines[line]
            self.memory[old:old + LINE_SIZE] = self._line(line)
        self._delay()
        start = line * LINE_SIZE
        self.cache[start:start + LINE_SIZE] = self.memory[base:base + LINE_SIZE]
        self.cache_lines[line] = base
        return line

    def _line(self, line: int) -> list[int]:
        start = line * LINE_SIZE
        return self.cache[start:start + LINE_SIZE]

    def _touch(self, line: int) -> None:
        self._clock += 1
        self._stamps[line] = self._clock
        self.access_times[line] = time.time()

    def _delay(self) -> None:
        if self.cache_delay > 0:
            time.sleep(self.cache_delay)

    def save(self, path: str | Path) -> None:
        """Write the memory image as 32-bit little-endian integers."""
        data = _IMAGE.pack(*(_to_int32(v) for v in self.memory))
        Path(path).write_bytes(data)

    def load(self, path: str | Path) -> None:
        """Read a memory image; a short file replaces only the cells it holds."""
        data = Path(path).read_bytes()[: _IMAGE.size]
        whole = len(data) // _CELL.size * _CELL.size
        values = [v for (v,) in _CELL.iter_unpack(data[:whole])]
        self.memory[: len(values)] = values

    # flags --------------------------------------------------------------

    def reset_registers(self) -> None:
        """Clear every flag."""
        self.registers = 0

    def set_flag(self, flag: Flag | int, value: int | bool) -> None:
        """Set (1) or clear (0) one flag."""
        bit = 1 << (Flag(flag) - 1)
        if value == 1:
            self.registers |= bit
        elif value == 0:
            self.registers &= ~bit
        else:
            raise ValueError(f"flag value must be 0 or 1, not {value!r}")

    def get_flag(self, flag: Flag | int) -> bool:
        """Return whether a flag is set."""
        return bool((self.registers >> (Flag(flag) - 1)) & 1)

    def decode(self, value: int) -> tuple[int, int]:
        """Decode a word, raising the command-not-found flag on failure."""
        try:
            return decode_command(value)
        except CommandDecodeError:
            self.set_flag(Flag.COMMAND_NOT_FOUND, 1)
            raise

    # cache --------------------------------------------------------------

    def reset_cache(self) -> None:
        """Empty every cache line and stamp it with the current time."""
        now = time.time()
        self.cache = [0] * (CACHE_LINES * LINE_SIZE)
        self.cache_lines = [EMPTY_LINE] * CACHE_LINES
        self.access_times = [now] * CACHE_LINES
        self._stamps = [0] * CACHE_LINES