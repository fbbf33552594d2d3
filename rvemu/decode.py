"""Decoding of RV32I instruction words."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Opcode(Enum):
    LUI = auto()
    AUIPC = auto()
    JAL = auto()
    JALR = auto()
    BEQ = auto()
    BNE = auto()
    BLT = auto()
    BGE = auto()
    BLTU = auto()
    BGEU = auto()
    LB = auto()
    LH = auto()
    LW = auto()
    LBU = auto()
    LHU = auto()
    SB = auto()
    SH = auto()
    SW = auto()
    ADDI = auto()
    SLTI = auto()
    SLTIU = auto()
    XORI = auto()
    ORI = auto()
    ANDI = auto()
    SLLI = auto()
    SRLI = auto()
    SRAI = auto()
    ADD = auto()
    SUB = auto()
    SLL = auto()
    SLT = auto()
    SLTU = auto()
    XOR = auto()
    SRL = auto()
    SRA = auto()
    OR = auto()
    AND = auto()
    FENCE = auto()
    FENCE_TSO = auto()
    PAUSE = auto()
    ECALL = auto()
    EBREAK = auto()
    UNKNOWN = auto()


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction; ``imm`` is held as an unsigned 32-bit value."""

    op: Opcode
    rd: int = 0
    rs1: int = 0
    rs2: int = 0
    imm: int = 0
    funct3: int = 0
    funct7: int = 0


_BRANCHES = {
    0x0: Opcode.BEQ,
    0x1: Opcode.BNE,
    0x4: Opcode.BLT,
    0x5: Opcode.BGE,
    0x6: Opcode.BLTU,
    0x7: Opcode.BGEU,
}

_LOADS = {
    0x0: Opcode.LB,
    0x1: Opcode.LH,
    0x2: Opcode.LW,
    0x4: Opcode.LBU,
    0x5: Opcode.LHU,
}

_STORES = {0x0: Opcode.SB, 0x1: Opcode.SH, 0x2: Opcode.SW}

_ALU_IMM = {
    0x0: Opcode.ADDI,
    0x1: Opcode.SLLI,
    0x2: Opcode.SLTI,
    0x3: Opcode.SLTIU,
    0x4: Opcode.XORI,
    0x6: Opcode.ORI,
    0x7: Opcode.ANDI,
}

_ALU_REG = {
    0x1: Opcode.SLL,
    0x2: Opcode.SLT,
    0x3: Opcode.SLTU,
    0x4: Opcode.XOR,
    0x6: Opcode.OR,
    0x7: Opcode.AND,
}

_FENCE_TSO_WORD = 0x8330000F
_PAUSE_WORD = 0x0100000F


def _sign_extend(value: int, bits: int) -> int:
    """Sign-extend a ``bits``-wide field to an unsigned 32-bit value."""
    if value & (1 << (bits - 1)):
        value |= 0xFFFFFFFF ^ ((1 << bits) - 1)
    return value & 0xFFFFFFFF


def decode(word: int) -> Instruction:
    """Split a 32-bit instruction word into its opcode, registers and immediate."""
    word &= 0xFFFFFFFF
    opcode = word & 0x7F
    funct3 = (word >> 12) & 0x7
    alt = (word >> 30) & 0x1
    i_imm = _sign_extend((word >> 20) & 0xFFF, 12)

    imm = 0
    if opcode == 0x37:
        op, imm = Opcode.LUI, word & 0xFFFFF000
    elif opcode == 0x17:
        op, imm = Opcode.AUIPC, word & 0xFFFFF000
    elif opcode == 0x6F:
        op = Opcode.JAL
        raw = (
            ((word >> 31) & 0x1) << 20
            | ((word >> 21) & 0x3FF) << 1
            | ((word >> 20) & 0x1) << 11
            | ((word >> 12) & 0xFF) << 12
        )
        imm = _sign_extend(raw, 21)
    elif opcode == 0x67:
        op, imm = Opcode.JALR, i_imm
    elif opcode == 0x63:
        raw = (
            ((word >> 31) & 0x1) << 12
            | ((word >> 25) & 0x3F) << 5
            | ((word >> 8) & 0xF) << 1
            | ((word >> 7) & 0x1) << 11
        )
        imm = _sign_extend(raw, 13)
        op = _BRANCHES.get(funct3, Opcode.UNKNOWN)
    elif opcode == 0x03:
        imm = i_imm
        op = _LOADS.get(funct3, Opcode.UNKNOWN)
    elif opcode == 0x23:
        imm = _sign_extend(((word >> 25) & 0x7F) << 5 | ((word >> 7) & 0x1F), 12)
        op = _STORES.get(funct3, Opcode.UNKNOWN)
    elif opcode == 0x13:
        imm = i_imm
        if funct3 == 0x5:
            op = Opcode.SRAI if alt else Opcode.SRLI
        else:
            op = _ALU_IMM[funct3]
    elif opcode == 0x33:
        if funct3 == 0x0:
            op = Opcode.SUB if alt else Opcode.ADD
        elif funct3 == 0x5:
            op = Opcode.SRA if alt else Opcode.SRL
        else:
            op = _ALU_REG[funct3]
    elif opcode == 0x0F:
        if word == _FENCE_TSO_WORD:
            op = Opcode.FENCE_TSO
        elif word == _PAUSE_WORD:
            op = Opcode.PAUSE
        else:
            op = Opcode.FENCE
    elif opcode == 0x73:
        imm = (word >> 20) & 0xFFF
        op = {0: Opcode.ECALL, 1: Opcode.EBREAK}.get(imm, Opcode.UNKNOWN)
    else:
        op = Opcode.UNKNOWN

    return Instruction(
        op=op,
        rd=(word >> 7) & 0x1F,
        rs1=(word >> 15) & 0x1F,
        rs2=(word >> 20) & 0x1F,
        imm=imm,
        funct3=funct3,
        funct7=(word >> 25) & 0x7F,
    )