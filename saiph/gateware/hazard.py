from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth.build import Platform


class HazardUnit(Elaboratable):
    '''
    Load-use hazard detection, evaluated in the decode stage.

    A load in the execute stage produces its data one stage too late for
    the forwarding paths, so the instruction being decoded must wait one cycle.
    '''
    def __init__(self) -> None:
        self.d_valid    = Signal()    # input
        self.d_rs1      = Signal(5)   # input
        self.d_rs2      = Signal(5)   # input
        self.x_valid    = Signal()    # input
        self.x_mem_read = Signal()    # input
        self.x_rd       = Signal(5)   # input
        self.stall      = Signal()    # output

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        load_in_x = self.x_valid & self.x_mem_read & self.x_rd.any()
        m.d.comb += self.stall.eq(self.d_valid & load_in_x & ((self.x_rd == self.d_rs1) | (self.x_rd == self.d_rs2)))

        return m
