from enum import Enum
from amaranth.sim import Simulator
from saiph.errors import ProgramError
from saiph.errors import MemoryAccessError
from saiph.isa import Opcode
from saiph.program import Instruction
from saiph.program import decode
from saiph.program import to_int32
from saiph.trace import Sample
from saiph.trace import CycleTrace
from saiph.trace import build_trace
from saiph.gateware.forward import Bypass
from saiph.gateware.core import Saiph
from typing import Dict, List, NamedTuple, Optional, Sequence, Union


class Outcome(Enum):
    HALTED      = 'halted'       # halt retired and the pipeline drained
    DRAINED     = 'drained'      # no halt: ran past the end of the program
    CYCLE_LIMIT = 'cycle limit'  # exceeded the cycle budget


class Result(NamedTuple):
    outcome:   Outcome
    cycles:    int
    retired:   int
    stalls:    int
    flushes:   int
    forwards:  int
    registers: List[int]
    memory:    List[int]
    trace:     List[CycleTrace]

    @property
    def cpi(self) -> float:
        return self.cycles / self.retired if self.retired else 0.0

    def word(self, address: int) -> int:
        if address < 0:
            raise IndexError(f'Invalid address: {address}')
        return self.memory[address // 4]


class Driver:
    def __init__(self,
                 # Memory
                 memory_data_depth: int = 256,
                 memory_instruction_depth: int = 256,
                 # Simulation
                 simulation_max_cycles: int = 10000,
                 simulation_trace: bool = False,
                 # eat extra arguments. Do nothing with it
                 **kwargs
                 ) -> None:
        # ----------------------------------------------------------------------
        if len(kwargs) != 0:
            print(f'Warning: Got unused kwargs: {kwargs.keys()}')
        if memory_data_depth <= 0 or memory_instruction_depth <= 0:
            raise ValueError('The memory depth must be a positive number')
        if simulation_max_cycles <= 0:
            raise ValueError('The cycle limit must be a positive number')

        self.data_depth        = memory_data_depth
        self.instruction_depth = memory_instruction_depth
        self.max_cycles        = simulation_max_cycles
        self.trace             = simulation_trace

    def _check_program(self, program: Sequence[Union[str, Instruction]]) -> List[Instruction]:
        if not program:
            raise ProgramError('No instructions to execute')
        instructions = [line if isinstance(line, Instruction) else decode(line) for line in program]
        if len(instructions) > self.instruction_depth:
            raise ProgramError(f'The program has {len(instructions)} instructions, '
                               f'the instruction memory holds {self.instruction_depth}')
        return instructions

    def _check_data(self, data: Optional[Dict[int, int]]) -> Dict[int, int]:
        image = {}
        for address, value in (data or {}).items():
            if address % 4 != 0:
                raise ProgramError(f'Misaligned address in the data image: {address}')
            if not 0 <= address < 4 * self.data_depth:
                raise ProgramError(f'Address outside of the data memory: {address}')
            image[address // 4] = to_int32(value)
        return image

    def run(self,
            program: Sequence[Union[str, Instruction]],
            data: Optional[Dict[int, int]] = None) -> Result:
        """
        Execute a program until it halts, runs past its end, or exceeds the
        cycle limit.

        Args:
        - program: program lines (or decoded instructions). Line N is at address 4*N.
        - data:    initial data memory, as {byte address: value}.
        """
        instructions = self._check_program(program)
        image        = self._check_data(data)

        core = Saiph(instructions, image,
                     memory_data_depth=self.data_depth,
                     memory_instruction_depth=self.instruction_depth)

        state = dict(outcome=None, cycles=0, retired=0, stalls=0, flushes=0, forwards=0,
                     fault=None, registers=[], memory=[], trace=[])

        async def bench(ctx):
            while True:
                if state['cycles'] >= self.max_cycles:
                    state['outcome'] = Outcome.CYCLE_LIMIT
                    break

                cycle  = state['cycles'] + 1
                sample = self._sample(ctx, core)
                if sample.m_fault:
                    state['fault'] = MemoryAccessError(cycle, sample.m_addr)
                    break

                state['retired']  += sample.w_valid
                state['stalls']   += sample.d_stall
                state['flushes']  += sample.x_flush
                state['forwards'] += sample.forwards
                if self.trace:
                    state['trace'].append(build_trace(cycle, sample, instructions))

                await ctx.tick()
                state['cycles'] = cycle

                # the pipeline is empty: nothing else can happen
                if not any(ctx.get(latch.sink.valid) for latch in core.latches):
                    if ctx.get(core.halted):
                        state['outcome'] = Outcome.HALTED
                        break
                    if ctx.get(core.fetch.exhausted):
                        state['outcome'] = Outcome.DRAINED
                        break

            state['registers'] = [0] + [ctx.get(core.gprf[i]) for i in range(1, 32)]
            state['memory']    = [ctx.get(word) for word in core.dmem.words]

        sim = Simulator(core)
        sim.add_clock(1e-6)
        sim.add_testbench(bench)
        sim.run()

        if state['fault'] is not None:
            raise state['fault']

        return Result(outcome=state['outcome'],
                      cycles=state['cycles'],
                      retired=state['retired'],
                      stalls=state['stalls'],
                      flushes=state['flushes'],
                      forwards=state['forwards'],
                      registers=state['registers'],
                      memory=state['memory'],
                      trace=state['trace'])

    @staticmethod
    def _sample(ctx, core: Saiph) -> Sample:
        w = core.mw.sink
        m = core.xm.sink
        x = core.dx.sink
        d = core.fd.sink
        f = core.fetch.fetched

        x_fwd = tuple(
            (ctx.get(fwd.rs), Bypass(ctx.get(fwd.bypass)), ctx.get(fwd.data))
            for fwd in (core.fwd_rs1, core.fwd_rs2)
        )

        return Sample(
            w_valid=bool(ctx.get(w.valid)),
            w_pc=ctx.get(w.pc),
            w_op=Opcode(ctx.get(w.op)),
            w_rd=ctx.get(w.rd),
            w_result=ctx.get(core.w_result),
            w_write=bool(ctx.get(core.w_write)),
            m_valid=bool(ctx.get(m.valid)),
            m_pc=ctx.get(m.pc),
            m_op=Opcode(ctx.get(m.op)),
            m_addr=ctx.get(m.result),
            m_read=bool(ctx.get(core.dmem.re)),
            m_write=bool(ctx.get(core.dmem.we)),
            m_load=ctx.get(core.data_sel.load_data),
            m_store=ctx.get(m.store_data),
            m_fault=bool(ctx.get(core.m_fault)),
            x_valid=bool(ctx.get(x.valid)),
            x_pc=ctx.get(x.pc),
            x_op=Opcode(ctx.get(x.op)),
            x_result=ctx.get(core.alu.result),
            x_flush=bool(ctx.get(core.x_flush)),
            x_target=ctx.get(core.x_target),
            x_fwd=x_fwd,
            d_valid=bool(ctx.get(d.valid)),
            d_pc=ctx.get(d.pc),
            d_stall=bool(ctx.get(core.d_stall)),
            f_valid=bool(ctx.get(f.valid)),
            f_pc=ctx.get(core.fetch.f_pc)
        )
