from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth import signed
from amaranth.build import Platform
from saiph.isa import Opcode


class CompareUnit(Elaboratable):
    def __init__(self) -> None:
        self.op     = Signal(Opcode)      # Input
        self.dat1   = Signal(signed(32))  # Input (rs1)
        self.dat2   = Signal(signed(32))  # Input (rs2, never the immediate)
        self.cmp_ok = Signal()            # Output

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        with m.Switch(self.op):
            with m.Case(Opcode.BEQ):
                m.d.comb += self.cmp_ok.eq(self.dat1 == self.dat2)
            with m.Case(Opcode.BNE):
                m.d.comb += self.cmp_ok.eq(self.dat1 != self.dat2)
            with m.Case(Opcode.BLT):
                m.d.comb += self.cmp_ok.eq(self.dat1 < self.dat2)
            with m.Case(Opcode.BGE):
                m.d.comb += self.cmp_ok.eq(self.dat1 >= self.dat2)
            with m.Case(Opcode.BLTU):
                m.d.comb += self.cmp_ok.eq(self.dat1.as_unsigned() < self.dat2.as_unsigned())
            with m.Case(Opcode.BGEU):
                m.d.comb += self.cmp_ok.eq(self.dat1.as_unsigned() >= self.dat2.as_unsigned())
            with m.Default():
                m.d.comb += self.cmp_ok.eq(0)

        return m
