"""Physical address space made of RAM regions and memory-mapped devices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

WriteHandler = Callable[[int, int, int], None]
ReadHandler = Callable[[int, int], int]
Buffer = Union[bytearray, memoryview]

ADDRESS_MASK = 0xFFFFFFFF
MAX_DEVICES = 32
MAX_RAM_REGIONS = 32

# Byte-lane select masks handed to device handlers, keyed by access width.
_SELECT = {1: 0b0001, 2: 0b0011, 4: 0b1111}


class MemoryError_(Exception):
    """Raised on an unaligned or unmapped memory access."""


@dataclass
class Device:
    """A memory-mapped device occupying ``[start, end)``."""

    start: int
    end: int
    on_write: WriteHandler
    on_read: ReadHandler

    def __contains__(self, address: int) -> bool:
        return self.start <= address < self.end


@dataclass
class RamRegion:
    """A block of RAM backed by a writable byte buffer, occupying ``[start, end)``."""

    start: int
    end: int
    buffer: Buffer

    def __contains__(self, address: int) -> bool:
        return self.start <= address < self.end


class MemoryBus:
    """Routes 8/16/32-bit little-endian accesses to RAM first, then to devices."""

    def __init__(self) -> None:
        self.devices: list[Device] = []
        self.rams: list[RamRegion] = []

    def attach_device(
        self, address: int, size: int, on_write: WriteHandler, on_read: ReadHandler
    ) -> Device:
        """Map a device at ``address`` spanning ``size`` bytes."""
        if len(self.devices) >= MAX_DEVICES:
            raise MemoryError_(f"cannot attach more than {MAX_DEVICES} devices")
        start = address & ADDRESS_MASK
        device = Device(start, start + size, on_write, on_read)
        self.devices.append(device)
        return device

    def attach_ram(
        self, address: int, size: int, buffer: Optional[Buffer] = None
    ) -> RamRegion:
        """Map ``size`` bytes of RAM at ``address``; a fresh zeroed buffer is used if none is given."""
        if len(self.rams) >= MAX_RAM_REGIONS:
            raise MemoryError_(f"cannot attach more than {MAX_RAM_REGIONS} RAM regions")
        if buffer is None:
            buffer = bytearray(size)
        elif len(buffer) < size:
            raise ValueError(
                f"RAM buffer holds {len(buffer)} bytes, {size} are required"
            )
        start = address & ADDRESS_MASK
        region = RamRegion(start, start + size, buffer)
        self.rams.append(region)
        return region

    def write_8(self, address: int, value: int) -> None:
        self._write(address, value, 1)

    def write_16(self, address: int, value: int) -> None:
        self._write(address, value, 2)

    def write_32(self, address: int, value: int) -> None:
        self._write(address, value, 4)

    def read_8(self, address: int) -> int:
        return self._read(address, 1)

    def read_16(self, address: int) -> int:
        return self._read(address, 2)

    def read_32(self, address: int) -> int:
        return self._read(address, 4)

    def _find_ram(self, address: int) -> Optional[RamRegion]:
        return next((ram for ram in self.rams if address in ram), None)

    def _find_device(self, address: int) -> Optional[Device]:
        return next((dev for dev in self.devices if address in dev), None)

    def _write(self, address: int, value: int, width: int) -> None:
        bits = 8 * width
        address &= ADDRESS_MASK
        value &= (1 << bits) - 1
        if address % width:
            raise MemoryError_(
                f"attempt to write {bits}-bit value 0x{value:0{2 * width}X} "
                f"to unaligned address 0x{address:08X}"
            )
        ram = self._find_ram(address)
        if ram is not None:
            if address + width > ram.end:
                raise MemoryError_(
                    f"{bits}-bit write at 0x{address:08X} runs past the end of RAM"
                )
            offset = address - ram.start
            ram.buffer[offset:offset + width] = value.to_bytes(width, "little")
            return
        device = self._find_device(address)
        if device is not None:
            device.on_write(address, value, _SELECT[width])
            return
        raise MemoryError_(
            f"attempt to write {bits}-bit value 0x{value:0{2 * width}X} "
            f"to unmapped address 0x{address:08X}"
        )

    def _read(self, address: int, width: int) -> int:
        bits = 8 * width
        address &= ADDRESS_MASK
        if address % width:
            raise MemoryError_(
                f"attempt to read {bits}-bit value from unaligned address 0x{address:08X}"
            )
        ram = self._find_ram(address)
        if ram is not None:
            if address + width > ram.end:
                raise MemoryError_(
                    f"{bits}-bit read at 0x{address:08X} runs past the end of RAM"
                )
            offset = address - ram.start
            return int.from_bytes(ram.buffer[offset:offset + width], "little")
        device = self._find_device(address)
        if device is not None:
            return device.on_read(address, _SELECT[width]) & ((1 << bits) - 1)
        raise MemoryError_(
            f"attempt to read {bits}-bit value from unmapped address 0x{address:08X}"
        )