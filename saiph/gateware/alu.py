from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth import signed
from amaranth.build import Platform
from saiph.isa import Opcode
from saiph.isa import LOADS
from saiph.isa import STORES
from saiph.isa import BRANCHES
from saiph.isa import JUMPS
from saiph.isa import SYSTEM


class ALUUnit(Elaboratable):
    def __init__(self) -> None:
        self.op     = Signal(Opcode)      # input
        self.dat1   = Signal(signed(32))  # input
        self.dat2   = Signal(signed(32))  # input (register or immediate)
        self.imm    = Signal(signed(32))  # input
        self.pc     = Signal(32)          # input
        self.result = Signal(signed(32))  # output

    def operation(self, op: Opcode):
        a, b  = self.dat1, self.dat2
        shamt = b[:5]

        if op in (Opcode.ADD, Opcode.ADDI):
            return a + b
        if op == Opcode.SUB:
            return a - b
        if op in (Opcode.AND, Opcode.ANDI):
            return a & b
        if op in (Opcode.OR, Opcode.ORI):
            return a | b
        if op in (Opcode.XOR, Opcode.XORI):
            return a ^ b
        if op in (Opcode.SLL, Opcode.SLLI):
            return a.as_unsigned() << shamt
        if op in (Opcode.SRL, Opcode.SRLI):
            return a.as_unsigned() >> shamt
        if op in (Opcode.SRA, Opcode.SRAI):
            return a >> shamt
        if op in (Opcode.SLT, Opcode.SLTI):
            return a < b
        if op in (Opcode.SLTU, Opcode.SLTIU):
            return a.as_unsigned() < b.as_unsigned()
        if op == Opcode.LUI:
            return self.imm << 12
        if op == Opcode.AUIPC:
            return self.pc + (self.imm << 12)
        if op in JUMPS:
            return self.pc + 4  # return address
        if op in LOADS | STORES | BRANCHES | SYSTEM:
            return a + b
        raise ValueError(f'The ALU does not handle {op.name}')

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        with m.Switch(self.op):
            for op in Opcode:
                with m.Case(op):
                    m.d.comb += self.result.eq(self.operation(op))

        return m
