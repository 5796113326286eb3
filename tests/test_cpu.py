import threading

import pytest

from simplecomputer.alu import Processor
from simplecomputer.cpu import ClockGenerator, control_unit, interrupt, reset
from simplecomputer.machine import Flag, Machine
from simplecomputer.terminal import clear_screen


def command(cmd, operand):
    return (1 << 16) | (cmd << 8) | operand


@pytest.fixture
def proc():
    return Processor(machine=Machine(cache_delay=0))


class Output:
    def __init__(self):
        self.items = []

    def __call__(self, text):
        self.items.append(text)


def no_input(address):
    raise AssertionError("no input expected")


def test_load_reads_into_accumulator(proc):
    proc.machine.set(0, command(20, 50))
    proc.machine.set(50, 42)
    out = Output()
    control_unit(proc, no_input, out)
    assert proc.accumulator == 42
    assert proc.selected_cell_index == 1
    assert len(out.items) == 1
    assert out.items[0].startswith(clear_screen())


def test_store_writes_accumulator(proc):
    proc.machine.set(0, command(21, 60))
    proc.accumulator = 17
    control_unit(proc, no_input, Output())
    assert proc.machine.memory[60] == 17


def test_read_uses_supplied_value(proc):
    proc.machine.set(0, command(10, 30))
    control_unit(proc, lambda address: address + 1, Output())
    assert proc.machine.memory[30] == 31


def test_write_prints_cell(proc):
    proc.machine.set(0, command(11, 50))
    proc.machine.set(50, 42)
    out = Output()
    control_unit(proc, no_input, out)
    assert out.items[0] == "Cell 50 value: 42"


def test_halt_stops_without_stepping(proc):
    proc.machine.set(4, command(43, 0))
    proc.selected_cell_index = 4
    out = Output()
    control_unit(proc, no_input, out)
    assert proc.machine.get_flag(Flag.CLOCK_PULSES_IGNORED)
    assert proc.selected_cell_index == 4
    assert out.items == []


def test_jump_lands_after_target(proc):
    proc.machine.set(0, command(40, 10))
    control_unit(proc, no_input, Output())
    assert proc.selected_cell_index == 11


@pytest.mark.parametrize(
    "cmd, accumulator, taken",
    [
        (41, -1, True),
        (41, 0, False),
        (42, 0, True),
        (42, 3, False),
        (55, 3, True),
        (55, -3, False),
    ],
)
def test_conditional_jumps(proc, cmd, accumulator, taken):
    proc.machine.set(0, command(cmd, 20))
    proc.accumulator = accumulator
    control_unit(proc, no_input, Output())
    assert proc.selected_cell_index == (21 if taken else 1)


def test_alu_command_through_control_unit(proc):
    proc.machine.set(0, command(30, 50))
    proc.machine.set(50, 5)
    control_unit(proc, no_input, Output())
    assert proc.accumulator == 5


def test_division_by_zero_sets_flags(proc):
    proc.machine.set(0, command(32, 50))
    proc.accumulator = 8
    control_unit(proc, no_input, Output())
    assert proc.machine.get_flag(Flag.DIVISION_BY_ZERO)
    assert proc.machine.get_flag(Flag.CLOCK_PULSES_IGNORED)
    assert proc.accumulator == 8


def test_unknown_command(proc):
    proc.machine.set(0, command(99, 1))
    control_unit(proc, no_input, Output())
    assert proc.machine.get_flag(Flag.COMMAND_NOT_FOUND)
    assert proc.machine.get_flag(Flag.CLOCK_PULSES_IGNORED)


def test_operand_out_of_range(proc):
    proc.machine.set(0, command(20, 150))
    control_unit(proc, no_input, Output())
    assert proc.machine.get_flag(Flag.MEMORY_OUT_OF_BOUNDS)
    assert proc.machine.get_flag(Flag.CLOCK_PULSES_IGNORED)
    assert proc.accumulator == 0


def test_plain_data_is_skipped(proc):
    proc.machine.set(0, 20 << 8 | 5)
    control_unit(proc, no_input, Output())
    assert proc.accumulator == 0
    assert proc.selected_cell_index == 1


def test_counter_wraps(proc):
    proc.selected_cell_index = 99
    control_unit(proc, no_input, Output())
    assert proc.selected_cell_index == 0


def test_interrupt_ignored_while_flag_set(proc):
    proc.machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 1)
    interrupt(proc, no_input, Output())
    assert proc.selected_cell_index == 0


def test_interrupt_runs_step(proc):
    proc.machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 0)
    interrupt(proc, no_input, Output())
    assert proc.selected_cell_index == 1


def test_reset(proc):
    proc.machine.set(5, 9)
    proc.machine.get(5)
    proc.accumulator = 3
    proc.selected_cell_index = 7
    proc.machine.set_flag(Flag.DIVISION_BY_ZERO, 1)
    reset(proc)
    assert proc.machine.memory == [0] * 100
    assert proc.accumulator == 0
    assert proc.selected_cell_index == 0
    assert not proc.machine.get_flag(Flag.DIVISION_BY_ZERO)
    assert proc.machine.get_flag(Flag.CLOCK_PULSES_IGNORED)
    assert proc.machine.cache_lines == [-1] * 5


def test_clock_generator_ticks_and_stops(proc):
    ticked = threading.Event()
    out = Output()

    def tick():
        interrupt(proc, no_input, out)
        ticked.set()

    proc.machine.set_flag(Flag.CLOCK_PULSES_IGNORED, 0)
    clock = ClockGenerator(tick, 0.01)
    clock.start()
    assert ticked.wait(2) is True
    clock.stop()
    steps = proc.selected_cell_index
    assert steps >= 1
    assert len(out.items) == steps
    threading.Event().wait(0.05)
    assert proc.selected_cell_index == steps


def test_clock_generator_double_start():
    with ClockGenerator(lambda: None, 0.01) as clock:
        with pytest.raises(RuntimeError):
            clock.start()