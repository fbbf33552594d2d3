"""A text-mode VGA buffer rendered to a terminal, and the machine that hosts it."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterator, Optional, TextIO

from rvemu.cpu import Cpu, CpuError
from rvemu.memory import MemoryBus, MemoryError_

SCREEN_WIDTH = 80
SCREEN_HEIGHT = 25
VGA_SIZE = SCREEN_WIDTH * SCREEN_HEIGHT * 2
VGA_BASE = 0x80100000
RAM_BASE = 0x80000000
RAM_SIZE = 1024 * 1024

_HOME = "\x1b[H"
_CLEAR = "\x1b[2J"
_RESET = "\x1b[0m"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"


def _ansi_colour(vga_colour: int) -> tuple[int, bool]:
    """Map a 4-bit VGA colour (bit0 blue, bit1 green, bit2 red, bit3 bright)."""
    blue = vga_colour & 1
    green = (vga_colour >> 1) & 1
    red = (vga_colour >> 2) & 1
    return red | green << 1 | blue << 2, bool(vga_colour & 0x8)


def _sgr(attribute: int) -> str:
    fg, fg_bright = _ansi_colour(attribute & 0x0F)
    bg, bg_bright = _ansi_colour((attribute >> 4) & 0x0F)
    fg_code = (90 if fg_bright else 30) + fg
    bg_code = (100 if bg_bright else 40) + bg
    return f"\x1b[{fg_code};{bg_code}m"


def _glyph(code: int) -> str:
    if code < 0x20 or code == 0x7F:
        return " "
    return bytes([code]).decode("cp437")


class VgaDevice:
    """80x25 character/attribute buffer, two bytes per cell."""

    def __init__(self, base: int = VGA_BASE, output: Optional[TextIO] = None) -> None:
        self.base = base
        self.output = output if output is not None else sys.stdout
        self.memory = bytearray(VGA_SIZE)

    def _lanes(self, address: int, select: int) -> Iterator[tuple[int, int]]:
        offset = address - self.base
        for lane in range(4):
            if select >> lane & 1:
                index = offset + lane
                if not 0 <= index < VGA_SIZE:
                    raise MemoryError_(
                        f"VGA access at 0x{address + lane:08X} is outside the buffer"
                    )
                yield lane, index

    def read(self, address: int, select: int) -> int:
        """Read the byte lanes chosen by ``select`` starting at ``address``."""
        value = 0
        for lane, index in self._lanes(address, select):
            value |= self.memory[index] << (8 * lane)
        return value

    def write(self, address: int, value: int, select: int) -> None:
        """Write the byte lanes chosen by ``select`` and redraw the screen."""
        for lane, index in self._lanes(address, select):
            self.memory[index] = (value >> (8 * lane)) & 0xFF
        self.render()

    def render(self) -> str:
        """Draw the whole buffer to the output and return what was written."""
        rows = []
        for y in range(SCREEN_HEIGHT):
            parts = []
            current = None
            row = self.memory[y * SCREEN_WIDTH * 2:(y + 1) * SCREEN_WIDTH * 2]
            for code, attribute in zip(row[::2], row[1::2]):
                if attribute != current:
                    parts.append(_sgr(attribute))
                    current = attribute
                parts.append(_glyph(code))
            parts.append(_RESET)
            rows.append("".join(parts))
        frame = _HOME + "\n".join(rows)
        self.output.write(frame)
        self.output.flush()
        return frame


def build_machine(output: Optional[TextIO] = None) -> tuple[Cpu, VgaDevice]:
    """Create a CPU with 1 MiB of RAM and the VGA buffer mapped into memory."""
    bus = MemoryBus()
    vga = VgaDevice(VGA_BASE, output)
    bus.attach_device(VGA_BASE, VGA_SIZE, vga.write, vga.read)
    bus.attach_ram(RAM_BASE, RAM_SIZE)
    return Cpu(bus, RAM_BASE), vga


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rvemu", description="Run an RV32I program with a text-mode screen."
    )
    parser.add_argument(
        "image", nargs="?", type=Path, help="raw binary loaded at the start of RAM"
    )
    parser.add_argument(
        "--no-pause", action="store_true", help="exit without waiting for Enter"
    )
    args = parser.parse_args(argv)

    image = None
    if args.image is not None:
        image = args.image.read_bytes()
        if len(image) > RAM_SIZE:
            parser.error(f"image is {len(image)} bytes, RAM holds {RAM_SIZE}")

    out = sys.stdout
    out.write(_CLEAR + _HIDE_CURSOR)
    cpu, _vga = build_machine(out)
    status = 0
    try:
        if image is not None:
            cpu.bus.rams[0].buffer[:len(image)] = image
            cpu.run()
    except (CpuError, MemoryError_) as exc:
        print(f"\nerror: {exc}", file=sys.stderr)
        status = 1
    finally:
        out.write(_RESET + _SHOW_CURSOR + "\n")
        out.flush()

    if not args.no_pause:
        try:
            input("Press Enter to continue . . .")
        except EOFError:
            pass
    return status