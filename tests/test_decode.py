import pytest

from rvemu.decode import Instruction, Opcode, decode


def encode_r(funct7, rs2, rs1, funct3, rd, opcode=0x33):
    return funct7 << 25 | rs2 << 20 | rs1 << 15 | funct3 << 12 | rd << 7 | opcode


def encode_i(imm, rs1, funct3, rd, opcode):
    return (imm & 0xFFF) << 20 | rs1 << 15 | funct3 << 12 | rd << 7 | opcode


def encode_s(imm, rs2, rs1, funct3):
    imm &= 0xFFF
    return (imm >> 5) << 25 | rs2 << 20 | rs1 << 15 | funct3 << 12 | (imm & 0x1F) << 7 | 0x23


def encode_b(imm, rs2, rs1, funct3):
    imm &= 0x1FFF
    return (
        ((imm >> 12) & 1) << 31
        | ((imm >> 5) & 0x3F) << 25
        | rs2 << 20
        | rs1 << 15
        | funct3 << 12
        | ((imm >> 1) & 0xF) << 8
        | ((imm >> 11) & 1) << 7
        | 0x63
    )


def encode_j(imm, rd):
    imm &= 0x1FFFFF
    return (
        ((imm >> 20) & 1) << 31
        | ((imm >> 1) & 0x3FF) << 21
        | ((imm >> 11) & 1) << 20
        | ((imm >> 12) & 0xFF) << 12
        | rd << 7
        | 0x6F
    )


def test_fields_are_extracted():
    word = encode_r(0x20, 7, 9, 0, 3)
    inst = decode(word)
    assert (inst.op, inst.rd, inst.rs1, inst.rs2, inst.funct3, inst.funct7) == (
        Opcode.SUB, 3, 9, 7, 0, 0x20,
    )


@pytest.mark.parametrize(
    "funct7,funct3,op",
    [
        (0x00, 0, Opcode.ADD),
        (0x20, 0, Opcode.SUB),
        (0x00, 1, Opcode.SLL),
        (0x00, 2, Opcode.SLT),
        (0x00, 3, Opcode.SLTU),
        (0x00, 4, Opcode.XOR),
        (0x00, 5, Opcode.SRL),
        (0x20, 5, Opcode.SRA),
        (0x00, 6, Opcode.OR),
        (0x00, 7, Opcode.AND),
    ],
)
def test_register_ops(funct7, funct3, op):
    assert decode(encode_r(funct7, 2, 1, funct3, 5)).op is op


@pytest.mark.parametrize(
    "funct3,op",
    [
        (0, Opcode.ADDI),
        (1, Opcode.SLLI),
        (2, Opcode.SLTI),
        (3, Opcode.SLTIU),
        (4, Opcode.XORI),
        (6, Opcode.ORI),
        (7, Opcode.ANDI),
    ],
)
def test_immediate_ops(funct3, op):
    inst = decode(encode_i(42, 1, funct3, 2, 0x13))
    assert inst.op is op
    assert inst.imm == 42


def test_shift_right_immediate_variants():
    assert decode(encode_i(0x400 | 3, 1, 5, 2, 0x13)).op is Opcode.SRAI
    assert decode(encode_i(3, 1, 5, 2, 0x13)).op is Opcode.SRLI


@pytest.mark.parametrize("imm", [0, 1, 2047, -1, -2048, -100])
def test_i_immediate_sign_extension(imm):
    inst = decode(encode_i(imm, 1, 0, 1, 0x13))
    assert inst.imm == imm & 0xFFFFFFFF


@pytest.mark.parametrize(
    "funct3,op",
    [(0, Opcode.LB), (1, Opcode.LH), (2, Opcode.LW), (4, Opcode.LBU), (5, Opcode.LHU), (3, Opcode.UNKNOWN)],
)
def test_loads(funct3, op):
    inst = decode(encode_i(-8, 4, funct3, 6, 0x03))
    assert inst.op is op
    assert inst.imm == -8 & 0xFFFFFFFF


@pytest.mark.parametrize("imm", [0, 4, 2047, -1, -2048])
def test_jalr_immediate(imm):
    inst = decode(encode_i(imm, 1, 0, 1, 0x67))
    assert inst.op is Opcode.JALR
    assert inst.imm == imm & 0xFFFFFFFF


@pytest.mark.parametrize(
    "funct3,op",
    [(0, Opcode.SB), (1, Opcode.SH), (2, Opcode.SW), (4, Opcode.UNKNOWN)],
)
@pytest.mark.parametrize("imm", [0, 12, 2047, -4, -2048])
def test_stores(funct3, op, imm):
    inst = decode(encode_s(imm, 5, 6, funct3))
    assert inst.op is op
    assert inst.imm == imm & 0xFFFFFFFF
    assert (inst.rs1, inst.rs2) == (6, 5)


@pytest.mark.parametrize(
    "funct3,op",
    [
        (0, Opcode.BEQ),
        (1, Opcode.BNE),
        (4, Opcode.BLT),
        (5, Opcode.BGE),
        (6, Opcode.BLTU),
        (7, Opcode.BGEU),
        (2, Opcode.UNKNOWN),
    ],
)
@pytest.mark.parametrize("imm", [0, 8, 4094, -2, -4096, 2048])
def test_branches(funct3, op, imm):
    inst = decode(encode_b(imm, 2, 1, funct3))
    assert inst.op is op
    assert inst.imm == imm & 0xFFFFFFFF


@pytest.mark.parametrize("imm", [0, 4, 2048, 0xFFFFE, -2, -0x100000, 0x7F000])
def test_jal_immediate(imm):
    inst = decode(encode_j(imm, 1))
    assert inst.op is Opcode.JAL
    assert inst.rd == 1
    assert inst.imm == imm & 0xFFFFFFFF


@pytest.mark.parametrize("opcode,op", [(0x37, Opcode.LUI), (0x17, Opcode.AUIPC)])
def test_upper_immediates(opcode, op):
    word = 0xABCDE000 | 5 << 7 | opcode
    inst = decode(word)
    assert inst.op is op
    assert inst.rd == 5
    assert inst.imm == 0xABCDE000


def test_fence_variants():
    assert decode(0x8330000F).op is Opcode.FENCE_TSO
    assert decode(0x0100000F).op is Opcode.PAUSE
    assert decode(0x0000000F).op is Opcode.FENCE


def test_system_instructions():
    assert decode(0x00000073).op is Opcode.ECALL
    assert decode(0x00100073).op is Opcode.EBREAK
    assert decode(0x00200073).op is Opcode.UNKNOWN


@pytest.mark.parametrize("word", [0x00000000, 0x0000007F, 0xFFFFFFFF])
def test_unknown_opcodes(word):
    assert decode(word).op is Opcode.UNKNOWN


def test_decode_masks_to_32_bits():
    word = encode_i(7, 1, 0, 2, 0x13)
    assert decode(word | 1 << 32) == decode(word)


def test_instruction_equality():
    word = encode_r(0, 2, 1, 0, 3)
    assert decode(word) == Instruction(op=Opcode.ADD, rd=3, rs1=1, rs2=2, imm=0, funct3=0, funct7=0)