"""Arithmetic and logic unit of the simple computer."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable

from simplecomputer.machine import MEMORY_SIZE, Flag, Machine

_WORD_BITS = 16


class AluError(RuntimeError):
    """An ALU command failed; the flag that records the cause is attached."""

    def __init__(self, flag: Flag, message: str) -> None:
        super().__init__(message)
        self.flag = flag


@dataclass
class Processor:
    """State the processor works on: memory, accumulator and the current cell."""

    machine: Machine = field(default_factory=Machine)
    accumulator: int = 0
    instruction_counter: int = 0
    selected_cell_index: int = 0
    lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False
    )


def _wrap(value: int) -> int:
    """Reduce a value to a signed 32-bit integer."""
    return (value + 2**31) % 2**32 - 2**31


def _shl(value: int, count: int) -> int:
    return _wrap(value << (count & 31))


def _shr(value: int, count: int) -> int:
    return _wrap(value) >> (count & 31)


def _c_mod(value: int, modulus: int) -> int:
    remainder = abs(value) % modulus
    return -remainder if value < 0 else remainder


def _c_div(dividend: int, divisor: int) -> int:
    quotient = abs(dividend) // abs(divisor)
    return _wrap(-quotient if (dividend < 0) != (divisor < 0) else quotient)


def _in_memory(address: int) -> bool:
    return 0 <= address < MEMORY_SIZE


def _is_address(value: int) -> bool:
    return ((value >> 16) & 1) == 0 and _in_memory(value)


def _is_data(value: int) -> bool:
    return ((value >> 16) & 1) == 0


def _fail(processor: Processor, flag: Flag, message: str) -> None:
    processor.machine.set_flag(flag, 1)
    processor.machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
    raise AluError(flag, message)


def _bad_address(processor: Processor, value: int) -> None:
    _fail(processor, Flag.MEMORY_OUT_OF_BOUNDS, f"address {value} out of range")


def _add(p: Processor, operand: int) -> None:
    p.accumulator = _wrap(p.accumulator + p.machine.get(operand))


def _sub(p: Processor, operand: int) -> None:
    p.accumulator = _wrap(p.accumulator - p.machine.get(operand))


def _divide(p: Processor, operand: int) -> None:
    divisor = p.machine.get(operand)
    if divisor == 0:
        _fail(p, Flag.DIVISION_BY_ZERO, f"division by zero in cell {operand}")
    p.accumulator = _c_div(p.accumulator, divisor)


def _mul(p: Processor, operand: int) -> None:
    p.accumulator = _wrap(p.accumulator * p.machine.get(operand))


def _not(p: Processor, operand: int) -> None:
    p.machine.set(operand, ~_wrap(p.accumulator))


def _and(p: Processor, operand: int) -> None:
    p.accumulator = _wrap(p.machine.get(operand) & p.accumulator)


def _or(p: Processor, operand: int) -> None:
    p.accumulator = _wrap(p.machine.get(operand) | p.accumulator)


def _xor(p: Processor, operand: int) -> None:
    p.accumulator = _wrap(p.machine.get(operand) ^ p.accumulator)


def _chl(p: Processor, operand: int) -> None:
    p.accumulator = _shl(1, p.machine.get(operand))


def _shr_cmd(p: Processor, operand: int) -> None:
    p.accumulator = _shr(1, p.machine.get(operand))


def _rcl(p: Processor, operand: int) -> None:
    count = _c_mod(p.machine.get(operand), _WORD_BITS)
    p.accumulator = _shl(1, count) | _shr(1, _WORD_BITS - count)


def _rcr(p: Processor, operand: int) -> None:
    count = _c_mod(p.machine.get(operand), _WORD_BITS)
    p.accumulator = _shr(1, count) | _shl(1, _WORD_BITS - count)


def _neg(p: Processor, operand: int) -> None:
    p.accumulator = _wrap(~p.machine.get(operand) + 1)


def _addc(p: Processor, operand: int) -> None:
    first = p.machine.get(operand)
    if not _is_address(p.accumulator):
        _bad_address(p, p.accumulator)
    p.accumulator = _wrap(first + p.machine.get(p.accumulator))


def _subc(p: Processor, operand: int) -> None:
    first = p.machine.get(operand)
    if not _is_address(p.accumulator):
        _bad_address(p, p.accumulator)
    p.accumulator = _wrap(first - p.machine.get(p.accumulator))


def _loglc(p: Processor, operand: int) -> None:
    value = p.machine.get(operand)
    if not _is_data(p.accumulator):
        _bad_address(p, p.accumulator)
    p.accumulator = _shl(value, p.accumulator)


def _logrc(p: Processor, operand: int) -> None:
    value = p.machine.get(operand)
    if not _is_data(p.accumulator):
        _bad_address(p, p.accumulator)
    p.accumulator = _shr(value, p.accumulator)


def _rccl(p: Processor, operand: int) -> None:
    value = p.machine.get(operand)
    if not _is_data(p.accumulator):
        _bad_address(p, p.accumulator)
    value = _c_mod(value, _WORD_BITS)
    shift = p.accumulator
    p.accumulator = _shl(value, shift) | _shr(value, _WORD_BITS - shift)


def _rccr(p: Processor, operand: int) -> None:
    value = p.machine.get(operand)
    if not _is_data(p.accumulator):
        _bad_address(p, p.accumulator)
    value = _c_mod(value, _WORD_BITS)
    shift = p.accumulator
    p.accumulator = _shr(value, shift) | _shl(value, _WORD_BITS - shift)


def _mova(p: Processor, operand: int) -> None:
    value = p.machine.get(operand)
    if not _is_address(p.accumulator):
        _bad_address(p, p.accumulator)
    p.machine.set(p.accumulator, value)


def _movr(p: Processor, operand: int) -> None:
    if not _is_address(p.accumulator):
        _bad_address(p, p.accumulator)
    p.machine.set(operand, p.machine.get(p.accumulator))


def _movca(p: Processor, operand: int) -> None:
    value = p.machine.get(operand)
    if not _is_address(p.accumulator):
        _bad_address(p, p.accumulator)
    target = p.machine.get(p.accumulator)
    if not _is_address(target):
        _bad_address(p, target)
    p.machine.set(target, value)


def _indirect_address(p: Processor) -> int:
    """Follow the accumulator to the address it points at, checking each step."""
    if not _is_address(p.accumulator):
        _bad_address(p, p.accumulator)
    first = p.machine.get(p.accumulator)
    if not _is_address(first):
        _bad_address(p, first)
    second = p.machine.get(p.accumulator)
    if not _is_address(second):
        _bad_address(p, second)
    return second


def _movcr(p: Processor, operand: int) -> None:
    address = _indirect_address(p)
    p.machine.set(operand, p.machine.get(address))


def _addc_indirect(p: Processor, operand: int) -> None:
    address = _indirect_address(p)
    first = p.machine.get(address)
    second = p.machine.get(operand)
    p.accumulator = _wrap(first + second)


def _subc_indirect(p: Processor, operand: int) -> None:
    address = _indirect_address(p)
    first = p.machine.get(address)
    second = p.machine.get(operand)
    p.accumulator = _wrap(second - first)


_COMMANDS: dict[int, Callable[[Processor, int], None]] = {
    30: _add,
    31: _sub,
    32: _divide,
    33: _mul,
    51: _not,
    52: _and,
    53: _or,
    54: _xor,
    60: _chl,
    61: _shr_cmd,
    62: _rcl,
    63: _rcr,
    64: _neg,
    65: _addc,
    66: _subc,
    67: _loglc,
    68: _logrc,
    69: _rccl,
    70: _rccr,
    71: _mova,
    72: _movr,
    73: _movca,
    74: _movcr,
    75: _addc_indirect,
    76: _subc_indirect,
}

# Commands whose out-of-range operand only raises the memory flag.
_SOFT_OPERAND_CHECK = frozenset({66, 67})

ALU_COMMANDS = frozenset(_COMMANDS)


def alu(processor: Processor, command: int, operand: int) -> None:
    """Execute one arithmetic or logic command; unknown commands do nothing.

    Raises AluError after setting the matching flags when the command fails.
    """
    handler = _COMMANDS.get(command)
    if handler is None:
        return
    if not _in_memory(operand):
        if command in _SOFT_OPERAND_CHECK:
            processor.machine.set_flag(Flag.MEMORY_OUT_OF_BOUNDS, 1)
            return
        _bad_address(processor, operand)
    handler(processor, operand)