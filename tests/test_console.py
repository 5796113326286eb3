import pytest

from simplecomputer.console import (
    move_selection,
    prompt_accumulator,
    prompt_instruction_counter,
    prompt_memory_cell,
)
from simplecomputer.machine import MAX_WORD, Machine
from simplecomputer.readkey import Key


def scripted(lines):
    feed = iter(lines)
    return lambda: next(feed, "")


class Recorder:
    def __init__(self):
        self.parts = []

    def __call__(self, text):
        self.parts.append(text)

    @property
    def text(self):
        return "".join(self.parts)


@pytest.mark.parametrize(
    "key, start, expected",
    [
        (Key.UP, 25, 15),
        (Key.UP, 5, 5),
        (Key.DOWN, 25, 35),
        (Key.DOWN, 95, 95),
        (Key.LEFT, 25, 24),
        (Key.LEFT, 0, 0),
        (Key.RIGHT, 25, 26),
        (Key.RIGHT, 99, 99),
    ],
)
def test_move_selection(key, start, expected):
    assert move_selection(key, start) == expected


def test_move_selection_rejects_other_keys():
    with pytest.raises(ValueError):
        move_selection(Key.ENTER, 10)


def test_prompt_memory_cell_stores_value():
    machine = Machine(cache_delay=0)
    out = Recorder()
    result = prompt_memory_cell(machine, 7, scripted(["42\n"]), out)
    assert result == 42
    assert machine.memory[7] == 42
    assert out.text == "Cell memory value: "


def test_prompt_memory_cell_repeats_on_bad_input():
    machine = Machine(cache_delay=0)
    out = Recorder()
    lines = ["abc\n", f"{MAX_WORD + 1}\n", "-1\n", "12abc\n"]
    result = prompt_memory_cell(machine, 3, scripted(lines), out)
    assert result == 12
    assert machine.memory[3] == 12
    assert out.text.count("Invalid value. Repeat input: ") == 3


def test_prompt_memory_cell_accepts_max_word():
    machine = Machine(cache_delay=0)
    prompt_memory_cell(machine, 0, scripted([f"{MAX_WORD}\n"]), Recorder())
    assert machine.memory[0] == MAX_WORD


@pytest.mark.parametrize("address", [-1, 100])
def test_prompt_memory_cell_rejects_bad_address(address):
    machine = Machine(cache_delay=0)
    with pytest.raises(ValueError):
        prompt_memory_cell(machine, address, scripted(["1\n"]), Recorder())


def test_prompt_memory_cell_end_of_input():
    machine = Machine(cache_delay=0)
    with pytest.raises(EOFError):
        prompt_memory_cell(machine, 0, scripted(["bad\n"]), Recorder())


def test_prompt_accumulator_messages():
    out = Recorder()
    result = prompt_accumulator(scripted(["x\n", "-5\n", "7\n"]), out)
    assert result == 7
    assert out.text.startswith("Accumulator value: ")
    assert "Invalid value. Numbers only: " in out.text
    assert "Invalid value. Repeat input: " in out.text


def test_prompt_accumulator_end_of_input():
    with pytest.raises(EOFError):
        prompt_accumulator(scripted([]), Recorder())


def test_prompt_instruction_counter_valid():
    out = Recorder()
    assert prompt_instruction_counter(scripted(["12\n"]), out) == 12
    assert out.text == "Memory address: "


@pytest.mark.parametrize("line", ["150\n", "-1\n", "abc\n"])
def test_prompt_instruction_counter_invalid(line):
    with pytest.raises(ValueError):
        prompt_instruction_counter(scripted([line]), Recorder())