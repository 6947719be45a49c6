from amaranth import Mux
from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth.build import Platform
from saiph.isa import Opcode
from saiph.program import Instruction
from saiph.gateware.layout import _fd_layout
from typing import List


class FetchUnit(Elaboratable):
    def __init__(self, program: List[Instruction], depth: int) -> None:
        if len(program) > depth:
            raise ValueError(f'The program ({len(program)} instructions) does not fit in the instruction memory ({depth})')

        self.program   = program
        self.redirect  = Signal()             # input (taken jump/branch)
        self.target    = Signal(32)           # input
        self.stall     = Signal()             # input
        self.pc        = Signal(32)           # output (next sequential fetch address)
        self.f_pc      = Signal(32)           # output (address fetched in this cycle)
        self.fetched   = Signal(_fd_layout)   # output
        self.halt_seen = Signal()             # output
        self.exhausted = Signal()             # output

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        index    = self.f_pc[2:]
        in_range = index < len(self.program)
        # a halt on the wrong path is discarded by the redirect
        halt_seen = self.halt_seen & ~self.redirect
        enable    = ~halt_seen & in_range & ~self.stall

        m.d.comb += [
            self.f_pc.eq(Mux(self.redirect, self.target, self.pc)),
            self.exhausted.eq(~in_range),
            self.fetched.valid.eq(enable),
            self.fetched.pc.eq(self.f_pc)
        ]

        # instruction memory
        with m.Switch(index):
            for i, instruction in enumerate(self.program):
                with m.Case(i):
                    m.d.comb += [
                        self.fetched.op.eq(instruction.op),
                        self.fetched.rd.eq(instruction.rd),
                        self.fetched.rs1.eq(instruction.rs1),
                        self.fetched.rs2.eq(instruction.rs2),
                        self.fetched.imm.eq(instruction.imm)
                    ]

        with m.If(enable):
            m.d.sync += [
                self.pc.eq(self.f_pc + 4),
                self.halt_seen.eq(self.fetched.op == Opcode.HALT)
            ]
        with m.Elif(self.redirect):
            m.d.sync += [
                self.pc.eq(self.f_pc),
                self.halt_seen.eq(0)
            ]

        return m
