"""
Instruction set of the Saiph core: a RV32I-like subset in mnemonic form.
"""
from enum import IntEnum
from typing import Dict, FrozenSet, NamedTuple


class Opcode(IntEnum):
    NOP   = 0
    HALT  = 1
    # register-register
    ADD   = 2
    SUB   = 3
    SLL   = 4
    SLT   = 5
    SLTU  = 6
    XOR   = 7
    SRL   = 8
    SRA   = 9
    OR    = 10
    AND   = 11
    # register-immediate
    ADDI  = 12
    SLTI  = 13
    SLTIU = 14
    XORI  = 15
    ORI   = 16
    ANDI  = 17
    SLLI  = 18
    SRLI  = 19
    SRAI  = 20
    # loads
    LB    = 21
    LH    = 22
    LW    = 23
    LBU   = 24
    LHU   = 25
    # stores
    SB    = 26
    SH    = 27
    SW    = 28
    # branches
    BEQ   = 29
    BNE   = 30
    BLT   = 31
    BGE   = 32
    BLTU  = 33
    BGEU  = 34
    # upper immediate / jumps
    LUI   = 35
    AUIPC = 36
    JAL   = 37
    JALR  = 38


ALU_REG: FrozenSet[Opcode] = frozenset({
    Opcode.ADD, Opcode.SUB, Opcode.SLL, Opcode.SLT, Opcode.SLTU,
    Opcode.XOR, Opcode.SRL, Opcode.SRA, Opcode.OR, Opcode.AND
})
ALU_IMM: FrozenSet[Opcode] = frozenset({
    Opcode.ADDI, Opcode.SLTI, Opcode.SLTIU, Opcode.XORI, Opcode.ORI,
    Opcode.ANDI, Opcode.SLLI, Opcode.SRLI, Opcode.SRAI
})
LOADS: FrozenSet[Opcode]    = frozenset({Opcode.LB, Opcode.LH, Opcode.LW, Opcode.LBU, Opcode.LHU})
STORES: FrozenSet[Opcode]   = frozenset({Opcode.SB, Opcode.SH, Opcode.SW})
BRANCHES: FrozenSet[Opcode] = frozenset({
    Opcode.BEQ, Opcode.BNE, Opcode.BLT, Opcode.BGE, Opcode.BLTU, Opcode.BGEU
})
UPPER: FrozenSet[Opcode]    = frozenset({Opcode.LUI, Opcode.AUIPC})
JUMPS: FrozenSet[Opcode]    = frozenset({Opcode.JAL, Opcode.JALR})
SYSTEM: FrozenSet[Opcode]   = frozenset({Opcode.NOP, Opcode.HALT})


class Control(NamedTuple):
    reg_write:  bool = False
    alu_src:    bool = False  # second ALU operand is the immediate
    mem_read:   bool = False
    mem_write:  bool = False
    mem_to_reg: bool = False  # write-back the loaded data instead of the ALU result
    branch:     bool = False
    jump:       bool = False


_GROUP_CONTROL = [
    (ALU_REG,  Control(reg_write=True)),
    (ALU_IMM,  Control(reg_write=True, alu_src=True)),
    (LOADS,    Control(reg_write=True, alu_src=True, mem_read=True, mem_to_reg=True)),
    (STORES,   Control(alu_src=True, mem_write=True)),
    (BRANCHES, Control(branch=True)),  # compares rs1 against rs2
    (UPPER,    Control(reg_write=True, alu_src=True)),
    (JUMPS,    Control(reg_write=True, jump=True)),
    (SYSTEM,   Control())
]

CONTROL: Dict[Opcode, Control] = {op: ctrl for group, ctrl in _GROUP_CONTROL for op in group}

assert len(CONTROL) == len(Opcode), 'Opcodes without control signals: {}'.format(set(Opcode) - set(CONTROL))


def control(op: Opcode) -> Control:
    return CONTROL[Opcode(op)]
