from amaranth import Const
from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth import signed
from amaranth.build import Platform
from saiph.isa import Opcode
from typing import Dict, List, Optional


class DataFormat(Elaboratable):
    def __init__(self) -> None:
        self.op         = Signal(Opcode)      # inputs
        self.offset     = Signal(2)           # inputs  (byte inside the word)
        self.word       = Signal(signed(32))  # inputs  (current value of the memory word)
        self.store_data = Signal(signed(32))  # inputs  (raw data to store)
        self.load_data  = Signal(signed(32))  # outputs (formatted data to pipeline)
        self.merged     = Signal(signed(32))  # outputs (word after the store)

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        shift = Signal(5)
        raw   = Signal(32)

        m.d.comb += [
            shift.eq(self.offset << 3),
            raw.eq(self.word.as_unsigned() >> shift)
        ]

        # format input data
        _byte = raw[:8]
        _half = raw[:16]

        with m.Switch(self.op):
            with m.Case(Opcode.LB):
                m.d.comb += self.load_data.eq(_byte.as_signed())
            with m.Case(Opcode.LBU):
                m.d.comb += self.load_data.eq(_byte)  # zero extended
            with m.Case(Opcode.LH):
                m.d.comb += self.load_data.eq(_half.as_signed())
            with m.Case(Opcode.LHU):
                m.d.comb += self.load_data.eq(_half)  # zero extended
            with m.Default():
                m.d.comb += self.load_data.eq(self.word)

        # read-modify-write for sub-word stores
        word = self.word.as_unsigned()
        with m.Switch(self.op):
            with m.Case(Opcode.SB):
                mask = Const(0xFF, 32) << shift
                m.d.comb += self.merged.eq((word & ~mask) | (self.store_data[:8] << shift))
            with m.Case(Opcode.SH):
                mask = Const(0xFFFF, 32) << shift
                m.d.comb += self.merged.eq((word & ~mask) | (self.store_data[:16] << shift))
            with m.Default():
                m.d.comb += self.merged.eq(self.store_data)

        return m


class DataMemory(Elaboratable):
    '''
    Word addressable data memory.

    Accesses outside of the memory do not wrap: they assert `fault` and
    stores are dropped.
    '''
    def __init__(self, depth: int, init: Optional[Dict[int, int]] = None) -> None:
        if depth <= 0:
            raise ValueError(f'Invalid depth for the data memory: {depth}')
        init = init or {}
        for index in init:
            if not 0 <= index < depth:
                raise ValueError(f'Initial value outside of the data memory: word {index}')

        self.depth = depth
        self.words: List[Signal] = [
            Signal(signed(32), init=init.get(i, 0), name=f'dmem_{i}') for i in range(depth)
        ]
        self.addr  = Signal(signed(32))  # input (byte address)
        self.re    = Signal()            # input
        self.we    = Signal()            # input
        self.dat_w = Signal(signed(32))  # input
        self.dat_r = Signal(signed(32))  # output
        self.fault = Signal()            # output

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        index = self.addr[2:]
        m.d.comb += self.fault.eq((self.re | self.we) & ((self.addr < 0) | (index >= self.depth)))

        with m.Switch(index):
            for i, word in enumerate(self.words):
                with m.Case(i):
                    m.d.comb += self.dat_r.eq(word)

        with m.If(self.we & ~self.fault):
            with m.Switch(index):
                for i, word in enumerate(self.words):
                    with m.Case(i):
                        m.d.sync += word.eq(self.dat_w)

        return m
