from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth import signed
from amaranth.build import Platform
from typing import List


class ReadPort:
    def __init__(self, name: str) -> None:
        self.addr = Signal(5, name=f'{name}_addr')          # input
        self.data = Signal(signed(32), name=f'{name}_data')  # output


class RegisterFile(Elaboratable):
    def __init__(self, nread: int = 2) -> None:
        # x0 is not a storage element: it always reads as zero
        self.gpr: List[Signal] = [Signal(signed(32), name=f'x{i}') for i in range(1, 32)]
        self.read_ports        = [ReadPort(f'gprf_rp{i + 1}') for i in range(nread)]
        self.wp_addr           = Signal(5)           # input
        self.wp_data           = Signal(signed(32))  # input
        self.wp_en             = Signal()            # input

    def __getitem__(self, index: int) -> Signal:
        if not 0 < index < 32:
            raise IndexError(f'Invalid register: x{index}')
        return self.gpr[index - 1]

    def elaborate(self, platform: Platform) -> Module:
        m = Module()

        for port in self.read_ports:
            with m.Switch(port.addr):
                for i, reg in enumerate(self.gpr, start=1):
                    with m.Case(i):
                        m.d.comb += port.data.eq(reg)

        with m.If(self.wp_en):
            with m.Switch(self.wp_addr):
                for i, reg in enumerate(self.gpr, start=1):
                    with m.Case(i):
                        m.d.sync += reg.eq(self.wp_data)

        return m
