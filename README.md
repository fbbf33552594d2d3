# rvemu

rvemu is a small emulator for the 32-bit RISC-V base integer instruction set (RV32I). It is made of these modules:

- `rvemu.memory`: a memory bus that maps RAM regions and memory-mapped devices into one 32-bit address space.
- `rvemu.decode`: an instruction decoder.
- `rvemu.cpu`: a CPU that runs the decoded instructions.
- `rvemu.vga`: an 80×25 text-mode VGA device, a ready-made machine and the `rvemu` command.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
rvemu [IMAGE] [--no-pause]
```

The command first clears the terminal and hides the cursor. It then builds the default machine, which has 1 MiB of RAM at `0x80000000` and the VGA text buffer at `0x80100000`.

If you give `IMAGE`, the file is read as a raw binary and copied to the start of RAM. The CPU then runs from `0x80000000` until it executes an `EBREAK`. Each write to the VGA buffer redraws the screen. If the file is larger than RAM, the command stops with a usage error.

When the program is over, the command restores the terminal. It then waits for Enter, unless you pass `--no-pause`.

If the run hits a memory or register error, the command prints the error to stderr and exits with status 1. Otherwise it exits with status 0.

## Library use

```python
from rvemu.memory import MemoryBus
from rvemu.cpu import Cpu

bus = MemoryBus()
ram = bytearray(1024)
bus.attach_ram(0x0, len(ram), ram)

# addi x1, x0, 5 ; ebreak
bus.write_32(0x0, 0x00500093)
bus.write_32(0x4, 0x00100073)

cpu = Cpu(bus, 0x0)
cpu.run()
print(cpu.read_register(1))  # 5
```

### Memory bus (`rvemu.memory`)

`MemoryBus.attach_ram(address, size, buffer=None)` maps a writable byte buffer into the address space and returns a `RamRegion`.
- If no buffer is given, a new zeroed `bytearray` is used.
- A buffer shorter than `size` raises `ValueError`.

`MemoryBus.attach_device(address, size, on_write, on_read)` maps a device and returns a `Device`. The bus reaches the device through two callbacks:

- `on_write(address, value, select)`
- `on_read(address, select)`

`select` is a byte-lane mask:

| Access | `select` |
|--------|----------|
| 8-bit  | `0b0001` |
| 16-bit | `0b0011` |
| 32-bit | `0b1111` |

Accesses go through `read_8`, `read_16`, `read_32`, `write_8`, `write_16` and `write_32`. All values are little-endian. Addresses are taken modulo 2³².

RAM regions are checked before devices. Within each kind, the first region or device that contains the address wins. The bus holds at most 32 devices and at most 32 RAM regions.

The bus raises `MemoryError_` in these cases:
- an access is unaligned;
- an address is unmapped;
- a RAM access would run past the end of its region;
- more devices or RAM regions are attached than the bus can hold.

### Decoder (`rvemu.decode`)

`decode(word)` takes a 32-bit instruction word and returns a frozen `Instruction` with these fields:
- `op`, an `Opcode`;
- `rd`, `rs1` and `rs2`;
- `funct3` and `funct7`;
- `imm`, the sign-extended immediate held as an unsigned 32-bit value.

Words that match no RV32I instruction decode to `Opcode.UNKNOWN`.

### CPU (`rvemu.cpu`)

`Cpu(bus, start_address=0)` is a single hart with registers `x0` to `x31`.
- `x0` always reads as zero, and writes to it are discarded.
- `read_register` and `write_register` raise `CpuError` for an index outside `0..31`.

The CPU runs code with these methods:
- `Cpu.execute(instruction)` carries out one decoded instruction and advances `pc`.
- `Cpu.step()` fetches the word at `pc`, decodes it, executes it and returns the `Instruction`.
- `Cpu.run()` resets `pc` to the start address and steps until an `EBREAK` is executed.

`ECALL`, `FENCE`, `FENCE.TSO`, `PAUSE` and unknown instructions have no effect beyond moving `pc` on by 4. Errors from the memory bus pass through to the caller.

### VGA device (`rvemu.vga`)

`VgaDevice(base=0x80100000, output=sys.stdout)` holds a 4000-byte text buffer with two bytes per cell: a character, then an attribute.

`read(address, select)` and `write(address, value, select)` are meant to be passed to `MemoryBus.attach_device`. An access outside the buffer raises `MemoryError_`.

Every write redraws the whole screen through `render()`. `render()` writes the frame to `output` and returns it as a string. The frame uses these rules:
- ANSI escape sequences set the colours.
- VGA colour nibbles map to the 16 ANSI foreground and background colours.
- Characters are decoded as code page 437.
- Control characters are drawn as spaces.

`build_machine(output=None)` returns a `(Cpu, VgaDevice)` pair. It sets up 1 MiB of RAM at `0x80000000` and the VGA buffer at `0x80100000`, and the CPU starts at `0x80000000`.

## What it does not do

The emulator covers RV32I only:
- There are no CSRs, privilege modes, interrupts or traps.
- There are no extensions such as M, A, F or C.
- `ECALL` does nothing.
- There is no keyboard or other input device.

The `rvemu` command loads raw binary images only. It does not read ELF files.