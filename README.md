# simplecomputer

An emulator of a small educational computer that runs in a text terminal.
The machine has 100 memory cells, an accumulator, five flags (memory out
of bounds, unknown command, division by zero, overflow and "clock pulses
ignored") and a CPU cache of five lines of ten cells each. Programs are
written in a small assembly language and translated into a binary memory
image that the console loads.

The console needs a POSIX terminal (it uses `termios`).

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## The console

```
simplecomputer [memory.bin]
```

The argument names the memory image used by the load, save and run keys;
it defaults to `memory.bin` in the current directory. The screen shows the
memory grid with the selected cell highlighted, the accumulator, the
instruction counter, the decoded command of the selected cell, the flags
that are set, the selected cell in big hexadecimal digits, and the
contents of each loaded cache line with the time it was last used.

Keys, while the machine is stopped:

| Key          | Action                                                  |
|--------------|---------------------------------------------------------|
| arrow keys   | move the selected cell                                  |
| Enter        | type a new value for the selected cell                  |
| `l`          | load memory from the image file                         |
| `s`          | save memory to the image file                           |
| `r`          | start the clock, and save memory to the image file      |
| `i`          | reset memory, accumulator, flags and cache              |
| F5           | type a new accumulator value                            |
| F6           | type a new instruction counter (0..99)                  |

`t` stops a running program; Ctrl-C leaves the console. Cell and
accumulator values must lie in 0..131071; a set bit 16 marks a cell as a
command, whose command number is held in bits 8..15 and operand in bits
0..7.

While running, the clock ticks every half second and executes the
selected cell, then moves to the next one (wrapping from 99 to 0). `HALT`
stops the clock, as does any error (bad address, unknown command, division
by zero), which also sets its flag. `READ` prompts for a cell value and
`WRITE` prints `Cell N value: V`. Reads of memory go through the cache; a
miss waits three seconds by default, and evicting the least recently used
line waits three more while it is written back.

## The assembler

```
simplecomputer-asm program.sa memory.bin
```

Each line holds a decimal cell address, a mnemonic and a decimal operand:

```
00 READ 09
01 LOAD 09
02 ADD 10
03 STORE 11
04 HALT 00
10 = 0005
```

A line with `=` stores a hexadecimal constant (up to `FFFF`) in the cell.
The mnemonics are `READ`, `WRITE`, `LOAD`, `STORE`, `ADD`, `SUB`,
`DIVIDE`, `MUL`, `JUMP`, `JNEG`, `JZ`, `HALT`, `NOT`, `AND`, `OR`, `XOR`,
`JNS`, `JC`, `JNC`, `JP`, `JNP`, `CHL`, `SHR`, `RCL`, `RCR`, `NEG`,
`ADDC`, `SUBC`, `LOGLC`, `LOGRC`, `RCCL`, `RCCR`, `MOVA`, `MOVR`, `MOVCA`
and `MOVCR`. Lines that cannot be translated are skipped. The image is
written as 100 little-endian 32-bit integers.

## Using it from Python

```python
from simplecomputer.machine import Machine, encode_command, decode_command
from simplecomputer.assembler import assemble

memory = assemble(["00 LOAD 05", "01 HALT 00", "05 = 002A"])

machine = Machine(cache_delay=0)
for address, value in enumerate(memory):
    machine.set(address, value)
print(machine.get(5))  # 42
```

- `simplecomputer.machine` — `Machine` (memory, cache, flags, `save` and
  `load` of images), `Flag`, `encode_command`, `decode_command`.
- `simplecomputer.alu` — `Processor` and `alu()`, which raises `AluError`.
- `simplecomputer.cpu` — `control_unit`, `interrupt`, `reset` and
  `ClockGenerator`.
- `simplecomputer.display` — functions that render the screen as text.
- `simplecomputer.assembler` — `assemble`, `assemble_file`,
  `translate_line`, `command_number`.

Reading or writing outside the 100 cells raises `MemoryAddressError` and
sets the out-of-bounds flag.

## What it does not do

- The overflow flag is shown but no command ever sets it.
- `JC`, `JNC`, `JP` and `JNP` are accepted but do nothing.
- Commands 75 and 76 (indirect add and subtract) are executed by the ALU,
  but the assembler has no mnemonic for them; enter them as cell values.