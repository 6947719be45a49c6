import re
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Tuple
from saiph.isa import Opcode


class Syntax(Enum):
    R      = 'rd,rs1,rs2'
    I      = 'rd,rs1,imm'  # noqa
    LOAD   = 'rd,imm(rs1)'
    STORE  = 'rs2,imm(rs1)'
    BRANCH = 'rs1,rs2,imm'
    UPPER  = 'rd,imm'
    NONE   = ''


class Instruction(NamedTuple):
    op:   Opcode = Opcode.NOP
    rd:   int    = 0
    rs1:  int    = 0
    rs2:  int    = 0
    imm:  int    = 0
    text: str    = ''

    def __str__(self) -> str:
        return self.text or self.op.name.lower()


MNEMONICS: Dict[str, Tuple[Opcode, Syntax]] = {
    'add':   (Opcode.ADD,   Syntax.R),
    'sub':   (Opcode.SUB,   Syntax.R),
    'sll':   (Opcode.SLL,   Syntax.R),
    'slt':   (Opcode.SLT,   Syntax.R),
    'sltu':  (Opcode.SLTU,  Syntax.R),
    'xor':   (Opcode.XOR,   Syntax.R),
    'srl':   (Opcode.SRL,   Syntax.R),
    'sra':   (Opcode.SRA,   Syntax.R),
    'or':    (Opcode.OR,    Syntax.R),
    'and':   (Opcode.AND,   Syntax.R),
    'addi':  (Opcode.ADDI,  Syntax.I),
    'slti':  (Opcode.SLTI,  Syntax.I),
    'sltiu': (Opcode.SLTIU, Syntax.I),
    'xori':  (Opcode.XORI,  Syntax.I),
    'ori':   (Opcode.ORI,   Syntax.I),
    'andi':  (Opcode.ANDI,  Syntax.I),
    'slli':  (Opcode.SLLI,  Syntax.I),
    'srli':  (Opcode.SRLI,  Syntax.I),
    'srai':  (Opcode.SRAI,  Syntax.I),
    'lb':    (Opcode.LB,    Syntax.LOAD),
    'lh':    (Opcode.LH,    Syntax.LOAD),
    'lw':    (Opcode.LW,    Syntax.LOAD),
    'lbu':   (Opcode.LBU,   Syntax.LOAD),
    'lhu':   (Opcode.LHU,   Syntax.LOAD),
    'sb':    (Opcode.SB,    Syntax.STORE),
    'sh':    (Opcode.SH,    Syntax.STORE),
    'sw':    (Opcode.SW,    Syntax.STORE),
    'beq':   (Opcode.BEQ,   Syntax.BRANCH),
    'bne':   (Opcode.BNE,   Syntax.BRANCH),
    'blt':   (Opcode.BLT,   Syntax.BRANCH),
    'bge':   (Opcode.BGE,   Syntax.BRANCH),
    'bltu':  (Opcode.BLTU,  Syntax.BRANCH),
    'bgeu':  (Opcode.BGEU,  Syntax.BRANCH),
    'lui':   (Opcode.LUI,   Syntax.UPPER),
    'auipc': (Opcode.AUIPC, Syntax.UPPER),
    'jal':   (Opcode.JAL,   Syntax.UPPER),
    'jalr':  (Opcode.JALR,  Syntax.I),
    'halt':  (Opcode.HALT,  Syntax.NONE),
    'nop':   (Opcode.NOP,   Syntax.NONE),
}


def _reg(name: str) -> str:
    return r'\s*x(?P<{}>\d+)\s*'.format(name)


_IMM = r'\s*(?P<imm>[-+]?(?:0[xX][0-9a-fA-F]+|\d+))\s*'

# one pattern per operand shape, built from the shape's textual form
_PATTERNS: Dict[Syntax, 're.Pattern[str]'] = {
    Syntax.R:      re.compile(_reg('rd') + ',' + _reg('rs1') + ',' + _reg('rs2')),
    Syntax.I:      re.compile(_reg('rd') + ',' + _reg('rs1') + ',' + _IMM),
    Syntax.LOAD:   re.compile(_reg('rd') + ',' + _IMM + r'\(' + _reg('rs1') + r'\)\s*'),
    Syntax.STORE:  re.compile(_reg('rs2') + ',' + _IMM + r'\(' + _reg('rs1') + r'\)\s*'),
    Syntax.BRANCH: re.compile(_reg('rs1') + ',' + _reg('rs2') + ',' + _IMM),
    Syntax.UPPER:  re.compile(_reg('rd') + ',' + _IMM),
    Syntax.NONE:   re.compile(r'\s*'),
}


def to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _parse_imm(text: str) -> int:
    sign = -1 if text.startswith('-') else 1
    digits = text.lstrip('+-')
    if digits[:2].lower() == '0x':
        return sign * int(digits[2:], 16)
    return sign * int(digits, 10)


def decode(text: str) -> Instruction:
    """
    Decode one line of program text.

    Malformed lines and unknown mnemonics decode to a NOP: a bad program
    degrades to idle cycles, it never aborts the simulation.
    """
    source = text.split('#', 1)[0].strip()
    mnemonic, operands = (source.split(None, 1) + ['', ''])[:2]
    try:
        op, syntax = MNEMONICS[mnemonic.lower()]
    except KeyError:
        return Instruction(text=source)

    match = _PATTERNS[syntax].fullmatch(operands)
    if match is None:
        return Instruction(text=source)

    fields = {}
    for name, value in match.groupdict().items():
        if name == 'imm':
            fields[name] = to_int32(_parse_imm(value))
        else:
            fields[name] = int(value)
            if fields[name] > 31:
                return Instruction(text=source)

    return Instruction(op=op, text=source, **fields)


def assemble(lines: Iterable[str]) -> List[Instruction]:
    # every line takes one slot, so branch offsets keep their meaning
    return [decode(line) for line in lines]
