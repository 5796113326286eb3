"""Translator from simple assembly text to a memory image."""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Iterable, MutableSequence

from simplecomputer.machine import MEMORY_SIZE, Machine

ASSIGN = 100
_MAX_DATA = 0xFFFF
_DECIMAL = re.compile(r"[+-]?\d+")
_HEX = re.compile(r"[+-]?(?:0[xX](?=[0-9a-fA-F]))?[0-9a-fA-F]+")

MNEMONICS: dict[str, int] = {
    "READ": 10,
    "WRITE": 11,
    "LOAD": 20,
    "STORE": 21,
    "ADD": 30,
    "SUB": 31,
    "DIVIDE": 32,
    "MUL": 33,
    "JUMP": 40,
    "JNEG": 41,
    "JZ": 42,
    "HALT": 43,
    "NOT": 51,
    "AND": 52,
    "OR": 53,
    "XOR": 54,
    "JNS": 55,
    "JC": 56,
    "JNC": 57,
    "JP": 58,
    "JNP": 59,
    "CHL": 60,
    "SHR": 61,
    "RCL": 62,
    "RCR": 63,
    "NEG": 64,
    "ADDC": 65,
    "SUBC": 66,
    "LOGLC": 67,
    "LOGRC": 68,
    "RCCL": 69,
    "RCCR": 70,
    "MOVA": 71,
    "MOVR": 72,
    "MOVCA": 73,
    "MOVCR": 74,
}


class AssemblerError(ValueError):
    """A line of assembly could not be translated."""


def command_number(mnemonic: str) -> int:
    """Return the command code of a mnemonic; "=" marks a data cell."""
    if mnemonic == "=":
        return ASSIGN
    try:
        return MNEMONICS[mnemonic]
    except KeyError:
        raise AssemblerError(f"unknown command {mnemonic!r}") from None


def _leading_int(token: str, pattern: re.Pattern[str], base: int) -> int | None:
    match = pattern.match(token)
    return int(match.group(0), base) if match else None


def translate_line(line: str, memory: MutableSequence[int]) -> None:
    """Translate one line of assembly into the memory it describes."""
    tokens = line.split()
    if len(tokens) < 2:
        raise AssemblerError(f"incomplete line {line!r}")
    index = _leading_int(tokens[0], _DECIMAL, 10)
    if index is None or not 0 <= index < len(memory):
        raise AssemblerError(f"bad address in line {line!r}")
    mnemonic = tokens[1]

    if "=" in line:
        if mnemonic != "=":
            raise AssemblerError(f"malformed data line {line!r}")
        operand = _leading_int(tokens[2], _HEX, 16) if len(tokens) > 2 else None
        operand = operand or 0
        if operand > _MAX_DATA:
            raise AssemblerError(f"value {operand:#x} does not fit in 16 bits")
        memory[index] = operand
        return

    number = command_number(mnemonic)
    operand = _leading_int(tokens[2], _DECIMAL, 10) if len(tokens) > 2 else None
    memory[index] = (1 << 16) | (number << 8) | (operand or 0)


def assemble(lines: Iterable[str]) -> list[int]:
    """Translate assembly lines into a memory image; bad lines are skipped."""
    memory = [0] * MEMORY_SIZE
    for line in lines:
        try:
            translate_line(line, memory)
        except AssemblerError:
            continue
    return memory


def _write_image(memory: list[int], target: str | Path) -> None:
    machine = Machine(cache_delay=0)
    machine.memory = list(memory)
    machine.save(target)


def assemble_file(source: str | Path, target: str | Path) -> list[int]:
    """Assemble a source file into a memory image file and return the image."""
    memory = assemble(Path(source).read_text().splitlines())
    _write_image(memory, target)
    return memory


def main(argv: list[str] | None = None) -> int:
    """Assemble SOURCE into the memory image TARGET."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print("usage: assembler SOURCE TARGET", file=sys.stderr)
        return 2
    source, target = args[0], args[1]
    if source == ".sa":
        print("File error.", end="")
        return 1
    try:
        text = Path(source).read_text()
    except OSError:
        print("File open error.", end="")
        return 1
    try:
        _write_image(assemble(text.splitlines()), target)
    except OSError:
        return 1
    return 0