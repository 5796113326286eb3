import pytest

from simplecomputer.assembler import (
    AssemblerError,
    assemble,
    assemble_file,
    command_number,
    main,
    translate_line,
)
from simplecomputer.machine import MEMORY_SIZE, Machine, decode_command


@pytest.mark.parametrize(
    "mnemonic, code",
    [
        ("READ", 10),
        ("WRITE", 11),
        ("LOAD", 20),
        ("HALT", 43),
        ("JNS", 55),
        ("ADDC", 65),
        ("SUBC", 66),
        ("MOVCR", 74),
        ("=", 100),
    ],
)
def test_command_number(mnemonic, code):
    assert command_number(mnemonic) == code


def test_command_number_unknown():
    with pytest.raises(AssemblerError):
        command_number("NOPE")


def test_translate_command_line():
    memory = [0] * MEMORY_SIZE
    translate_line("00 READ 09\n", memory)
    assert (memory[0] >> 16) & 1 == 1
    assert decode_command(memory[0]) == (command_number("READ"), 9)


def test_translate_ignores_trailing_text():
    memory = [0] * MEMORY_SIZE
    translate_line("03 LOAD 12 ; comment\n", memory)
    assert decode_command(memory[3]) == (command_number("LOAD"), 12)


def test_translate_data_line_is_hex():
    memory = [0] * MEMORY_SIZE
    translate_line("07 = 1F\n", memory)
    assert memory[7] == 0x1F
    assert (memory[7] >> 16) & 1 == 0


def test_translate_data_line_too_large():
    memory = [0] * MEMORY_SIZE
    with pytest.raises(AssemblerError):
        translate_line("07 = 10000\n", memory)
    assert memory[7] == 0


def test_translate_equals_with_command_rejected():
    with pytest.raises(AssemblerError):
        translate_line("07 LOAD = 5\n", [0] * MEMORY_SIZE)


@pytest.mark.parametrize("line", ["100 READ 1\n", "-1 READ 1\n", "xx READ 1\n", "05\n"])
def test_translate_bad_lines(line):
    with pytest.raises(AssemblerError):
        translate_line(line, [0] * MEMORY_SIZE)


def test_assemble_skips_bad_lines():
    memory = assemble(["00 LOAD 05", "01 BOGUS 3", "02 HALT 00", "05 = 2A"])
    assert len(memory) == MEMORY_SIZE
    assert decode_command(memory[0]) == (20, 5)
    assert memory[1] == 0
    assert decode_command(memory[2]) == (43, 0)
    assert memory[5] == 0x2A


def test_assemble_file_round_trip(tmp_path):
    source = tmp_path / "prog.sa"
    source.write_text("00 READ 09\n01 ADD 09\n09 = 7\n")
    target = tmp_path / "prog.bin"
    memory = assemble_file(source, target)
    machine = Machine(cache_delay=0)
    machine.load(target)
    assert machine.memory == memory
    assert machine.memory[9] == 7


def test_main_success(tmp_path):
    source = tmp_path / "prog.sa"
    source.write_text("00 HALT 00\n")
    target = tmp_path / "out.bin"
    assert main([str(source), str(target)]) == 0
    machine = Machine(cache_delay=0)
    machine.load(target)
    assert machine.memory == assemble(["00 HALT 00"])


def test_main_rejects_bare_extension(capsys):
    assert main([".sa", "out.bin"]) == 1
    assert capsys.readouterr().out == "File error."


def test_main_missing_source(tmp_path, capsys):
    assert main([str(tmp_path / "missing.sa"), str(tmp_path / "out.bin")]) == 1
    assert capsys.readouterr().out == "File open error."
    assert not (tmp_path / "out.bin").exists()


def test_main_needs_two_arguments():
    assert main(["only.sa"]) == 2