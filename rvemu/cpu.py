"""An RV32I hart that executes instructions against a :class:`MemoryBus`."""

from __future__ import annotations

from rvemu.decode import Instruction, Opcode, decode
from rvemu.memory import MemoryBus

WORD_MASK = 0xFFFFFFFF
REGISTER_COUNT = 32


class CpuError(Exception):
    """Raised on an invalid register access."""


def _signed(value: int) -> int:
    """Interpret an unsigned 32-bit value as two's complement."""
    value &= WORD_MASK
    return value - (1 << 32) if value & 0x80000000 else value


def _sign_extend_8(value: int) -> int:
    return (value - 0x100 if value & 0x80 else value) & WORD_MASK


def _sign_extend_16(value: int) -> int:
    return (value - 0x10000 if value & 0x8000 else value) & WORD_MASK


_BRANCH_TAKEN = {
    Opcode.BEQ: lambda a, b: a == b,
    Opcode.BNE: lambda a, b: a != b,
    Opcode.BLT: lambda a, b: _signed(a) < _signed(b),
    Opcode.BGE: lambda a, b: _signed(a) >= _signed(b),
    Opcode.BLTU: lambda a, b: a < b,
    Opcode.BGEU: lambda a, b: a >= b,
}

_NO_EFFECT = frozenset(
    {Opcode.ECALL, Opcode.FENCE, Opcode.FENCE_TSO, Opcode.PAUSE, Opcode.UNKNOWN}
)


class Cpu:
    """A single RV32I hart with 32 registers, x0 hard-wired to zero."""

    def __init__(self, bus: MemoryBus, start_address: int = 0) -> None:
        self.bus = bus
        self.start_address = start_address & WORD_MASK
        self.pc = self.start_address
        self.running = False
        self._registers = [0] * (REGISTER_COUNT - 1)

    def read_register(self, index: int) -> int:
        """Return the value of register ``x<index>``."""
        if index == 0:
            return 0
        if not 1 <= index < REGISTER_COUNT:
            raise CpuError(f"invalid register x{index}")
        return self._registers[index - 1]

    def write_register(self, index: int, value: int) -> None:
        """Store ``value`` in register ``x<index>``; writes to x0 are discarded."""
        if index == 0:
            return
        if not 1 <= index < REGISTER_COUNT:
            raise CpuError(f"invalid register x{index}")
        self._registers[index - 1] = value & WORD_MASK

    def execute(self, instruction: Instruction) -> None:
        """Carry out one decoded instruction and advance the program counter."""
        op = instruction.op
        rd = instruction.rd
        imm = instruction.imm
        pc = self.pc
        next_pc = (pc + 4) & WORD_MASK
        a = self.read_register(instruction.rs1)
        b = self.read_register(instruction.rs2)
        write = self.write_register
        bus = self.bus

        if op in _BRANCH_TAKEN:
            if _BRANCH_TAKEN[op](a, b):
                next_pc = pc + imm
        elif op in _NO_EFFECT:
            pass
        else:
            match op:
                case Opcode.LUI:
                    write(rd, imm)
                case Opcode.AUIPC:
                    write(rd, pc + imm)
                case Opcode.ADDI:
                    write(rd, a + imm)
                case Opcode.ADD:
                    write(rd, a + b)
                case Opcode.SUB:
                    write(rd, a - b)
                case Opcode.SLTI:
                    write(rd, int(_signed(a) < _signed(imm)))
                case Opcode.SLTIU:
                    write(rd, int(a < imm))
                case Opcode.SLT:
                    write(rd, int(_signed(a) < _signed(b)))
                case Opcode.SLTU:
                    write(rd, int(a < b))
                case Opcode.XORI:
                    write(rd, a ^ imm)
                case Opcode.XOR:
                    write(rd, a ^ b)
                case Opcode.ORI:
                    write(rd, a | imm)
                case Opcode.OR:
                    write(rd, a | b)
                case Opcode.ANDI:
                    write(rd, a & imm)
                case Opcode.AND:
                    write(rd, a & b)
                case Opcode.SLLI:
                    write(rd, a << (imm & 0x1F))
                case Opcode.SRLI:
                    write(rd, a >> (imm & 0x1F))
                case Opcode.SRAI:
                    write(rd, _signed(a) >> (imm & 0x1F))
                case Opcode.SLL:
                    write(rd, a << (b & 0x1F))
                case Opcode.SRL:
                    write(rd, a >> (b & 0x1F))
                case Opcode.SRA:
                    write(rd, _signed(a) >> (b & 0x1F))
                case Opcode.JAL:
                    write(rd, next_pc)
                    next_pc = pc + imm
                case Opcode.JALR:
                    target = (a + imm) & ~1
                    write(rd, next_pc)
                    next_pc = target
                case Opcode.LB:
                    write(rd, _sign_extend_8(bus.read_8(a + imm)))
                case Opcode.LH:
                    write(rd, _sign_extend_16(bus.read_16(a + imm)))
                case Opcode.LW:
                    write(rd, bus.read_32(a + imm))
                case Opcode.LBU:
                    write(rd, bus.read_8(a + imm))
                case Opcode.LHU:
                    write(rd, bus.read_16(a + imm))
                case Opcode.SB:
                    bus.write_8(a + imm, b & 0xFF)
                case Opcode.SH:
                    bus.write_16(a + imm, b & 0xFFFF)
                case Opcode.SW:
                    bus.write_32(a + imm, b)
                case Opcode.EBREAK:
                    self.running = False

        self.pc = next_pc & WORD_MASK

    def step(self) -> Instruction:
        """Fetch, decode and execute the instruction at the program counter."""
        instruction = decode(self.bus.read_32(self.pc))
        self.execute(instruction)
        return instruction

    def run(self) -> None:
        """Start at the start address and execute until an EBREAK."""
        self.pc = self.start_address
        self.running = True
        while self.running:
            self.step()