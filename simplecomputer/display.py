"""Text rendering of the console screen."""

from __future__ import annotations

import time
from typing import Sequence

from simplecomputer.alu import Processor
from simplecomputer.bigchars import BIG_SYMBOLS, big_char, box
from simplecomputer.machine import (
    CACHE_LINES,
    EMPTY_LINE,
    LINE_SIZE,
    MEMORY_SIZE,
    CommandDecodeError,
    Flag,
    Machine,
)
from simplecomputer.terminal import Color, bg_color, clear_screen, fg_color, goto_xy

_FLAG_LETTERS = {
    Flag.MEMORY_OUT_OF_BOUNDS: "M",
    Flag.COMMAND_NOT_FOUND: "E",
    Flag.DIVISION_BY_ZERO: "0",
    Flag.OVERFLOW: "P",
    Flag.CLOCK_PULSES_IGNORED: "T",
}

_BOXES = [
    (1, 1, 12, 61),
    (1, 63, 3, 30),
    (4, 63, 3, 30),
    (7, 63, 3, 30),
    (10, 63, 3, 30),
    (13, 1, 10, 42),
    (13, 44, 10, 49),
    (23, 1, 7, 92),
]

_LABELS = [
    (29, 1, "Memory"),
    (72, 1, "accumulator"),
    (70, 4, "instructionCounter"),
    (73, 7, "Operation"),
    (75, 10, "Flags"),
    (50, 13, "Keys:"),
    (46, 14, " l - load"),
    (46, 15, " s - save"),
    (46, 16, " r - run"),
    (46, 17, " t - stop"),
    (46, 18, " i - reset"),
    (46, 19, " F5 - accumulator"),
    (46, 20, " F6 - instructionCounter"),
    (43, 23, "CPU cache"),
]


def _sign(value: int) -> str:
    return "+" if (value >> 16) & 1 == 1 else " "


def _word(value: int) -> str:
    return f"{value & 0xFFFF:04X}"


def draw_frame(machine: Machine) -> str:
    """Boxes, captions and cache-line labels of the console."""
    parts = [box(*b) for b in _BOXES]
    parts.extend(goto_xy(x, y) + text for x, y, text in _LABELS)
    parts.extend(
        goto_xy(2, 24 + k) + f"{line:02d}:" for k, line in enumerate(machine.cache_lines)
    )
    parts.append(goto_xy(0, 29))
    return "".join(parts)


def render_memory(memory: Sequence[int], selected: int) -> str:
    """Memory grid with the selected cell highlighted, then its big-digit view."""
    parts = []
    for row, start in enumerate(range(0, MEMORY_SIZE, LINE_SIZE)):
        parts.append(goto_xy(2, 2 + row))
        for address, value in enumerate(memory[start:start + LINE_SIZE], start):
            cell = _sign(value) + _word(value)
            if address == selected:
                parts.append(
                    fg_color(Color.BLACK) + bg_color(Color.WHITE) + cell
                    + bg_color(Color.DEFAULT) + fg_color(Color.DEFAULT) + " "
                )
            else:
                parts.append(cell + " ")
        parts.append("\n")
    selected_value = memory[selected] if 0 <= selected < len(memory) else 0
    parts.append(render_big_value(selected_value))
    parts.append(goto_xy(0, 31))
    return "".join(parts)


def render_accumulator(accumulator: int) -> str:
    """Accumulator box contents."""
    sign = "+" if (accumulator >> 16) & 1 == 1 else ""
    return goto_xy(75, 2) + sign + f"{accumulator & 0xFFFFFFFF:04X}" + goto_xy(0, 31)


def render_instruction_counter(index: int) -> str:
    """Instruction counter box contents."""
    if not 0 <= index <= 99:
        raise ValueError(f"instruction counter {index} out of range 0..99")
    return goto_xy(77, 5) + str(index) + goto_xy(0, 31)


def render_operation(machine: Machine, index: int) -> str:
    """Command and operand of the cell at index, if it holds a command."""
    value = machine.memory[index]
    if (value >> 16) & 1 != 1:
        return ""
    try:
        command, operand = machine.decode(value)
    except CommandDecodeError:
        return ""
    return goto_xy(73, 8) + f"+{command} : {operand}" + goto_xy(0, 31)


def render_flags(machine: Machine) -> str:
    """Letters of the flags that are set."""
    parts = []
    column = 73
    for flag, letter in _FLAG_LETTERS.items():
        parts.append(goto_xy(column, 11))
        if machine.get_flag(flag):
            parts.append(f"{letter} ")
            column += 2
    parts.append(goto_xy(0, 31))
    return "".join(parts)


def render_big_value(value: int) -> str:
    """The low 16 bits of value as four big hex digits, with a big plus for commands."""
    parts = []
    if (value >> 16) & 1 == 1:
        parts.append(big_char(BIG_SYMBOLS["+"], 14, 2))
    digits = _word(value)
    for offset, digit in enumerate(reversed(digits)):
        parts.append(big_char(BIG_SYMBOLS[digit], 14, 34 - 8 * offset))
    return "".join(parts)


def render_cache(machine: Machine) -> str:
    """Contents of every loaded cache line."""
    parts = []
    for line in range(CACHE_LINES):
        parts.append(goto_xy(7, 24 + line))
        if machine.cache_lines[line] != EMPTY_LINE:
            start = line * LINE_SIZE
            parts.extend(
                _sign(v) + _word(v) + " " for v in machine.cache[start:start + LINE_SIZE]
            )
    parts.append(goto_xy(0, 29))
    return "".join(parts)


def render_cache_times(machine: Machine) -> str:
    """Last access time of every loaded cache line."""
    parts = []
    row = 24
    for line, stamp in zip(machine.cache_lines, machine.access_times):
        if line != EMPTY_LINE:
            parts.append(goto_xy(85, row) + time.strftime("%H:%M:%S", time.localtime(stamp)))
            row += 1
    parts.append(goto_xy(0, 29))
    return "".join(parts)


def render_console(processor: Processor) -> str:
    """The whole console screen for the processor's current state."""
    machine = processor.machine
    index = processor.selected_cell_index
    return "".join(
        [
            clear_screen(),
            draw_frame(machine),
            render_memory(machine.memory, index),
            render_accumulator(processor.accumulator),
            render_instruction_counter(index),
            render_operation(machine, index),
            render_cache(machine),
            render_cache_times(machine),
            render_flags(machine),
        ]
    )