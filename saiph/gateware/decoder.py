from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth.build import Platform
from saiph.isa import CONTROL
from saiph.isa import Opcode
from saiph.gateware.layout import control_layout


class DecoderUnit(Elaboratable):
    def __init__(self) -> None:
        self.op   = Signal(Opcode)          # input
        self.ctrl = Signal(control_layout)  # output

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        with m.Switch(self.op):
            for op in Opcode:
                with m.Case(op):
                    m.d.comb += [getattr(self.ctrl, name).eq(value) for name, value in CONTROL[op]._asdict().items()]

        return m
