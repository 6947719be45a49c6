from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth.build import Platform
from amaranth.lib.data import StructLayout
from functools import reduce
from operator import or_
from typing import List


class PipelineLatch(Elaboratable):
    '''
    Register between two pipeline stages.

    The producing stage drives `source` (the "new" value) during the cycle; the
    consuming stage reads `sink` (the "old" value, produced by the previous
    cycle). All latches are updated on the same clock edge.

    - kill: the latch receives a bubble (valid = 0).
    - stall: the latch keeps its current value.
    '''
    def __init__(self, name: str, layout: StructLayout) -> None:
        if 'valid' not in (key for key, _ in layout):
            raise ValueError(f'The layout for latch {name} needs a valid bit')

        self.source = Signal(layout, name=f'{name}_source')  # input
        self.sink   = Signal(layout, name=f'{name}_sink')    # output
        self.kill   = Signal(name=f'{name}_kill')            # output
        self.stall  = Signal(name=f'{name}_stall')           # output

        self._kill_sources: List[Signal]  = []
        self._stall_sources: List[Signal] = []

    def add_kill_source(self, source: Signal) -> None:
        self._kill_sources.append(source)

    def add_stall_source(self, source: Signal) -> None:
        self._stall_sources.append(source)

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        m.d.comb += [
            self.kill.eq(reduce(or_, self._kill_sources, 0)),
            self.stall.eq(reduce(or_, self._stall_sources, 0))
        ]

        with m.If(self.kill):
            m.d.sync += self.sink.valid.eq(0)
        with m.Elif(~self.stall):
            m.d.sync += self.sink.eq(self.source)

        return m
