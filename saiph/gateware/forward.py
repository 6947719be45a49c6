from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth import signed
from amaranth.build import Platform
from enum import IntEnum


class Bypass(IntEnum):
    NONE    = 0
    EXECUTE = 1  # from the EX/MEM latch
    MEMORY  = 2  # from the MEM/WB latch


class ForwardingUnit(Elaboratable):
    def __init__(self) -> None:
        self.rs          = Signal(5)           # input
        self.rf_data     = Signal(signed(32))  # input (register file)
        self.m_valid     = Signal()            # input
        self.m_reg_write = Signal()            # input
        self.m_rd        = Signal(5)           # input
        self.m_result    = Signal(signed(32))  # input
        self.w_valid     = Signal()            # input
        self.w_reg_write = Signal()            # input
        self.w_rd        = Signal(5)           # input
        self.w_result    = Signal(signed(32))  # input (data to write back)
        self.data        = Signal(signed(32))  # output
        self.bypass      = Signal(Bypass)      # output

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        fwd_m = self.m_valid & self.m_reg_write & (self.m_rd == self.rs)
        fwd_w = self.w_valid & self.w_reg_write & (self.w_rd == self.rs)

        # the EX/MEM result is the youngest one: check it first
        with m.If(self.rs == 0):
            m.d.comb += self.data.eq(0)
        with m.Elif(fwd_m):
            m.d.comb += [
                self.data.eq(self.m_result),
                self.bypass.eq(Bypass.EXECUTE)
            ]
        with m.Elif(fwd_w):
            m.d.comb += [
                self.data.eq(self.w_result),
                self.bypass.eq(Bypass.MEMORY)
            ]
        with m.Else():
            m.d.comb += self.data.eq(self.rf_data)

        return m
