"""A small RV32I RISC-V emulator: memory bus, decoder, CPU and a text-mode VGA device."""

__version__ = "0.1.0"
__all__ = ["cpu", "decode", "memory", "vga"]