from typing import List, NamedTuple, Tuple
from saiph.isa import Opcode
from saiph.program import Instruction
from saiph.gateware.forward import Bypass

_bypass_source = {
    Bypass.EXECUTE: 'EX/MEM',
    Bypass.MEMORY:  'MEM/WB'
}


class Sample(NamedTuple):
    """Values of the pipeline during one cycle, before the clock edge."""
    # write back
    w_valid:  bool
    w_pc:     int
    w_op:     Opcode
    w_rd:     int
    w_result: int
    w_write:  bool
    # memory
    m_valid:  bool
    m_pc:     int
    m_op:     Opcode
    m_addr:   int
    m_read:   bool
    m_write:  bool
    m_load:   int
    m_store:  int
    m_fault:  bool
    # execute
    x_valid:  bool
    x_pc:     int
    x_op:     Opcode
    x_result: int
    x_flush:  bool
    x_target: int
    x_fwd:    Tuple[Tuple[int, Bypass, int], ...]  # (rs, bypass, data) per operand
    # decode
    d_valid:  bool
    d_pc:     int
    d_stall:  bool
    # fetch
    f_valid:  bool
    f_pc:     int

    @property
    def forwards(self) -> int:
        if not self.x_valid:
            return 0
        return sum(1 for _, bypass, _ in self.x_fwd if bypass != Bypass.NONE)


class CycleTrace(NamedTuple):
    cycle:    int
    stages:   List[Tuple[str, str]]  # (stage, event), in execution order
    forwards: List[str]

    def lines(self) -> List[str]:
        lines = [f'--- CYCLE {self.cycle} ---']
        lines += [f'{stage:<4}: {event}' for stage, event in self.stages]
        lines += [f'[FWD] {event}' for event in self.forwards]
        return lines


def _text(program: List[Instruction], pc: int) -> str:
    index = pc // 4
    if 0 <= index < len(program):
        return str(program[index]) or 'nop'
    return f'<pc {pc}>'


def build_trace(cycle: int, sample: Sample, program: List[Instruction]) -> CycleTrace:
    s = sample
    stages = []

    if not s.w_valid:
        stages.append(('WB', 'IDLE'))
    elif s.w_op == Opcode.HALT:
        stages.append(('WB', 'HALT retired'))
    elif s.w_write:
        stages.append(('WB', f'x{s.w_rd} = {s.w_result} | {_text(program, s.w_pc)}'))
    else:
        stages.append(('WB', f'no write | {_text(program, s.w_pc)}'))

    if not s.m_valid:
        stages.append(('MEM', 'IDLE'))
    elif s.m_read:
        stages.append(('MEM', f'LOAD mem[{s.m_addr}] = {s.m_load}'))
    elif s.m_write:
        stages.append(('MEM', f'STORE mem[{s.m_addr}] = {s.m_store}'))
    else:
        stages.append(('MEM', f'pass | {_text(program, s.m_pc)}'))

    if not s.x_valid:
        stages.append(('EX', 'BUBBLE'))
    elif s.x_flush:
        stages.append(('EX', f'CONTROL HAZARD | Redirecting PC to {s.x_target} | Flushed IF/ID | {_text(program, s.x_pc)}'))
    else:
        stages.append(('EX', f'ALU = {s.x_result} | {_text(program, s.x_pc)}'))

    if not s.d_valid:
        stages.append(('ID', 'IDLE'))
    elif s.d_stall:
        stages.append(('ID', f'STALL (Load-Use Hazard detected) | {_text(program, s.d_pc)}'))
    else:
        stages.append(('ID', _text(program, s.d_pc)))

    if s.f_valid:
        stages.append(('IF', f'pc = {s.f_pc} | {_text(program, s.f_pc)}'))
    else:
        stages.append(('IF', 'IDLE'))

    forwards = []
    if s.x_valid:
        for rs, bypass, data in s.x_fwd:
            if bypass != Bypass.NONE:
                forwards.append(f'x{rs} = {data} from {_bypass_source[bypass]}')

    return CycleTrace(cycle, stages, forwards)
