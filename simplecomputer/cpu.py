"""Control unit, interrupt handler, reset and clock of the simple computer."""

from __future__ import annotations

import threading
from typing import Callable

from simplecomputer.alu import ALU_COMMANDS, AluError, Processor, alu
from simplecomputer.display import render_console
from simplecomputer.machine import MEMORY_SIZE, CommandDecodeError, Flag

READ = 10
WRITE = 11
LOAD = 20
STORE = 21
HALT = 43

_JUMPS: dict[int, Callable[[int], bool]] = {
    40: lambda acc: True,
    41: lambda acc: acc < 0,
    42: lambda acc: acc == 0,
    55: lambda acc: acc > 0,
}
_NO_OPS = frozenset({56, 57, 58, 59})
_MEMORY_COMMANDS = frozenset({READ, WRITE, LOAD, STORE}) | frozenset(_JUMPS)

ReadCell = Callable[[int], int]
Write = Callable[[str], object]


def _execute(p: Processor, value: int, read_cell: ReadCell, write: Write) -> bool:
    """Run one command word; return False when the machine halts."""
    machine = p.machine
    try:
        command, operand = machine.decode(value)
    except CommandDecodeError:
        machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
        return True

    if command in ALU_COMMANDS:
        try:
            alu(p, command, operand)
        except AluError:
            machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
        return True
    if command == HALT:
        machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
        return False
    if command in _NO_OPS:
        return True
    if command not in _MEMORY_COMMANDS:
        machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
        machine.set_flag(Flag.COMMAND_NOT_FOUND, 1)
        return True
    if not 0 <= operand < MEMORY_SIZE:
        machine.set_flag(Flag.MEMORY_OUT_OF_BOUNDS, 1)
        machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
        return True

    if command == READ:
        machine.set(operand, read_cell(operand))
    elif command == WRITE:
        write(f"Cell {operand} value: {machine.get(operand)}")
    elif command == LOAD:
        p.accumulator = machine.get(operand)
    elif command == STORE:
        machine.set(operand, p.accumulator)
    elif _JUMPS[command](p.accumulator):
        p.selected_cell_index = operand
    return True


def control_unit(processor: Processor, read_cell: ReadCell, write: Write) -> None:
    """Execute the command in the current cell, redraw, and step to the next cell.

    read_cell(address) supplies the value for a READ command; write receives
    output text. A HALT stops without redrawing or stepping.
    """
    with processor.lock:
        value = processor.machine.get(processor.selected_cell_index)
        if (value >> 16) & 1 == 1:
            if not _execute(processor, value, read_cell, write):
                return
        write(render_console(processor))
        if processor.selected_cell_index + 1 < MEMORY_SIZE:
            processor.selected_cell_index += 1
        else:
            processor.selected_cell_index = 0


def interrupt(processor: Processor, read_cell: ReadCell, write: Write) -> None:
    """Handle a clock pulse: run one step unless pulses are being ignored."""
    if not processor.machine.get_flag(Flag.CLOCK_PULSES_IGNORED):
        control_unit(processor, read_cell, write)


def reset(processor: Processor) -> None:
    """Clear memory, registers and cache, and stop the clock."""
    machine = processor.machine
    machine.clear_memory()
    processor.accumulator = 0
    processor.instruction_counter = 0
    processor.selected_cell_index = 0
    machine.set_flag(Flag.MEMORY_OUT_OF_BOUNDS, 0)
    machine.set_flag(Flag.COMMAND_NOT_FOUND, 0)
    machine.set_flag(Flag.DIVISION_BY_ZERO, 0)
    machine.set_flag(Flag.OVERFLOW, 0)
    machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
    machine.reset_cache()


class ClockGenerator:
    """Calls a function at a fixed period from a background thread."""

    def __init__(self, callback: Callable[[], object], period: float = 0.5) -> None:
        self.callback = callback
        self.period = period
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Begin ticking."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("clock is already running")
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop ticking and wait for the thread to finish."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        while not self._stop.wait(self.period):
            self.callback()

    def __enter__(self) -> ClockGenerator:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()