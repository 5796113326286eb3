"""Interactive console of the simple computer."""

from __future__ import annotations

import contextlib
import os
import re
import sys
import termios
from typing import Callable, Iterator

from simplecomputer.alu import Processor
from simplecomputer.cpu import ClockGenerator, interrupt, reset
from simplecomputer.display import render_console
from simplecomputer.machine import MAX_WORD, MEMORY_SIZE, Flag, Machine
from simplecomputer.readkey import Key, TerminalMode, read_key

DEFAULT_IMAGE = "memory.bin"

ReadLine = Callable[[], str]
Write = Callable[[str], object]

_INT = re.compile(r"\s*([+-]?\d+)")
_STEPS: dict[int, int] = {Key.UP: -10, Key.DOWN: 10, Key.LEFT: -1, Key.RIGHT: 1}
_REPEAT = "Invalid value. Repeat input: "


def move_selection(direction: int, index: int) -> int:
    """Return the cell index after moving one step in a direction.

    A move that would leave memory keeps the index unchanged; a key that is
    not an arrow raises ValueError.
    """
    step = _STEPS.get(direction)
    if step is None:
        raise ValueError(f"key {direction} is not a direction")
    target = index + step
    return target if 0 <= target < MEMORY_SIZE else index


def _parse_int(line: str) -> int | None:
    match = _INT.match(line)
    return int(match.group(1)) if match else None


def _read(read_line: ReadLine) -> str:
    line = read_line()
    if not line:
        raise EOFError("input ended")
    return line


def prompt_memory_cell(
    machine: Machine, address: int, read_line: ReadLine, write: Write
) -> int:
    """Ask for a cell value until a valid one is given, store it and return it."""
    if not 0 <= address < MEMORY_SIZE:
        raise ValueError(f"address {address} out of range 0..{MEMORY_SIZE - 1}")
    write("Cell memory value: ")
    while True:
        value = _parse_int(_read(read_line))
        if value is not None and 0 <= value <= MAX_WORD:
            break
        write(_REPEAT)
    machine.set(address, value)
    return value


def prompt_accumulator(read_line: ReadLine, write: Write) -> int:
    """Ask for an accumulator value until a valid one is given and return it."""
    write("Accumulator value: ")
    while True:
        value = _parse_int(_read(read_line))
        if value is None:
            write("Invalid value. Numbers only: ")
        elif not 0 <= value <= MAX_WORD:
            write(_REPEAT)
        else:
            return value


def prompt_instruction_counter(read_line: ReadLine, write: Write) -> int:
    """Ask for a memory address; raise ValueError if the answer is not one."""
    write("Memory address: ")
    value = _parse_int(_read(read_line))
    if value is None or not 0 <= value <= MEMORY_SIZE - 1:
        raise ValueError(f"invalid memory address {value!r}")
    return value


def _write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


class _Terminal:
    """Input side of the console: raw keys, and cooked lines for prompts."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self.mode = TerminalMode(fd)
        try:
            self.mode.save()
            self.active = True
        except termios.error:
            self.active = False

    def raw(self) -> None:
        if self.active:
            self.mode.set_regime(0, 0, 1, 0, 1)

    def restore(self) -> None:
        if self.active:
            self.mode.restore()

    @contextlib.contextmanager
    def cooked(self) -> Iterator[None]:
        self.restore()
        try:
            yield
        finally:
            self.raw()

    def read_line(self) -> str:
        data = bytearray()
        while True:
            byte = os.read(self.fd, 1)
            if not byte:
                break
            data += byte
            if byte == b"\n":
                break
        return data.decode(errors="replace")


def main(argv: list[str] | None = None) -> int:
    """Run the interactive console on the terminal."""
    args = sys.argv[1:] if argv is None else list(argv)
    path = args[0] if args else DEFAULT_IMAGE

    processor = Processor(machine=Machine())
    machine = processor.machine
    reset(processor)
    _write(render_console(processor))

    fd = sys.stdin.fileno()
    term = _Terminal(fd)

    def read_cell(address: int) -> int:
        with term.cooked():
            return prompt_memory_cell(machine, address, term.read_line, _write)

    def handle(key: Key) -> None:
        if key in _STEPS:
            processor.selected_cell_index = move_selection(
                key, processor.selected_cell_index
            )
        elif key == Key.I:
            reset(processor)
        elif key == Key.ENTER:
            with term.cooked():
                prompt_memory_cell(
                    machine, processor.selected_cell_index, term.read_line, _write
                )
        elif key == Key.L:
            with contextlib.suppress(OSError):
                machine.load(path)
        elif key in (Key.R, Key.S):
            if key == Key.R:
                machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 0)
            with contextlib.suppress(OSError):
                machine.save(path)
        elif key == Key.F5:
            with term.cooked():
                processor.accumulator = prompt_accumulator(term.read_line, _write)
        elif key == Key.F6:
            with term.cooked(), contextlib.suppress(ValueError):
                processor.selected_cell_index = prompt_instruction_counter(
                    term.read_line, _write
                )

    term.raw()
    clock = ClockGenerator(lambda: interrupt(processor, read_cell, _write))
    try:
        with clock:
            while True:
                stopped = machine.get_flag(Flag.CLOCK_PULSES_IGNORED)
                with processor.lock:
                    _write(render_console(processor))
                try:
                    key = read_key(fd)
                except ValueError:
                    continue
                if key == Key.T:
                    machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
                elif stopped:
                    with processor.lock:
                        handle(key)
    except (KeyboardInterrupt, EOFError):
        pass
    finally:
        term.restore()
    return 0