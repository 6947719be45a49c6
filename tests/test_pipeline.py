import pytest
from saiph.driver import Driver
from saiph.driver import Outcome
from saiph.errors import ProgramError
from saiph.errors import MemoryAccessError
from saiph.program import assemble
from saiph.program import decode


def run(program, data=None, **kwargs):
    config = dict(memory_data_depth=16, memory_instruction_depth=16)
    config.update(kwargs)
    return Driver(**config).run(program, data)


def test_forwarding_without_stalls():
    result = run([
        'addi x1,x0,5',
        'addi x2,x0,10',
        'add x3,x1,x2',
        'halt'
    ])
    assert result.outcome == Outcome.HALTED
    assert result.registers[1:4] == [5, 10, 15]
    assert result.stalls == 0
    assert result.forwards == 2
    assert result.cycles == 4 + 4
    assert result.retired == 4


def test_independent_instructions_fill_and_drain():
    program = [f'addi x{i},x0,{i}' for i in range(1, 7)] + ['halt']
    result  = run(program)
    assert result.cycles == len(program) + 4
    assert result.stalls == result.flushes == result.forwards == 0
    assert result.cpi == pytest.approx(result.cycles / len(program))


def test_newest_result_wins():
    result = run([
        'addi x1,x0,1',
        'addi x1,x0,2',
        'add x2,x1,x0',
        'halt'
    ])
    assert result.registers[2] == 2


def test_load_use_stalls_one_cycle():
    result = run([
        'lw x1,0(x0)',
        'add x2,x1,x1',
        'halt'
    ], {0: 7})
    assert result.registers[1] == 7
    assert result.registers[2] == 14
    assert result.stalls == 1
    assert result.cycles == 3 + 4 + 1


def test_load_use_on_store_data():
    result = run([
        'lw x1,0(x0)',
        'sw x1,4(x0)',
        'halt'
    ], {0: -3})
    assert result.stalls == 1
    assert result.memory[:2] == [-3, -3]


def test_load_followed_by_independent_instruction():
    result = run([
        'lw x1,0(x0)',
        'addi x2,x0,1',
        'add x3,x1,x2',
        'halt'
    ], {0: 40})
    assert result.stalls == 0
    assert result.registers[3] == 41


def test_taken_branch_flushes_one_instruction():
    result = run([
        'addi x1,x0,1',
        'beq x0,x0,8',
        'addi x2,x0,99',
        'addi x3,x0,3',
        'halt'
    ], simulation_trace=True)
    assert result.registers[2] == 0
    assert result.registers[3] == 3
    assert result.flushes == 1
    assert result.cycles == 9
    # the branch resolves in cycle 4 and fetch goes to the target
    assert result.trace[3].stages[-1] == ('IF', 'pc = 12 | addi x3,x0,3')


def test_not_taken_branch_keeps_sequential_order():
    result = run([
        'addi x1,x0,1',
        'bne x0,x0,8',
        'addi x2,x0,99',
        'addi x3,x0,3',
        'halt'
    ])
    assert result.registers[2] == 99
    assert result.registers[3] == 3
    assert result.flushes == 0
    assert result.cycles == 9


def test_backward_branch_loop():
    result = run([
        'addi x1,x0,3',
        'addi x2,x2,2',
        'addi x1,x1,-1',
        'bne x1,x0,-8',
        'halt'
    ])
    assert result.outcome == Outcome.HALTED
    assert result.registers[1] == 0
    assert result.registers[2] == 6
    assert result.flushes == 2


def test_byte_store_and_load():
    result = run([
        'addi x1,x0,255',
        'sb x1,1(x0)',
        'lb x2,1(x0)',
        'lbu x3,1(x0)',
        'halt'
    ])
    assert result.registers[2] == -1
    assert result.registers[3] == 255
    assert result.memory[0] == 0xFF00


def test_half_word_store_and_load():
    result = run([
        'lui x1,8',
        'sh x1,6(x0)',
        'lh x2,6(x0)',
        'lhu x3,6(x0)',
        'halt'
    ])
    assert result.registers[1] == 0x8000
    assert result.word(4) == -2 ** 31
    assert result.registers[2] == -0x8000
    assert result.registers[3] == 0x8000


def test_halt_stops_later_instructions():
    result = run([
        'addi x1,x0,1',
        'halt',
        'addi x2,x0,2'
    ])
    assert result.outcome == Outcome.HALTED
    assert result.registers[1] == 1
    assert result.registers[2] == 0
    assert result.cycles == 2 + 4


def test_halt_on_the_wrong_path_is_discarded():
    result = run([
        'beq x0,x0,8',
        'halt',
        'addi x1,x0,1',
        'halt'
    ])
    assert result.outcome == Outcome.HALTED
    assert result.registers[1] == 1


def test_jal():
    result = run([
        'jal x1,8',
        'addi x2,x0,5',
        'addi x3,x1,0',
        'halt'
    ])
    assert result.registers[1] == 4
    assert result.registers[2] == 0
    assert result.registers[3] == 4
    assert result.flushes == 1


def test_jalr_clears_the_low_bit():
    result = run([
        'addi x5,x0,12',
        'jalr x1,x5,1',
        'addi x2,x0,7',
        'addi x3,x0,9',
        'halt'
    ])
    assert result.registers[1] == 8
    assert result.registers[2] == 0
    assert result.registers[3] == 9


def test_upper_immediates_and_shifts():
    result = run([
        'lui x1,1',
        'auipc x2,1',
        'addi x3,x0,-8',
        'srai x4,x3,1',
        'srli x5,x3,28',
        'slt x6,x3,x0',
        'sltu x7,x3,x0',
        'slli x8,x3,1',
        'halt'
    ])
    assert result.registers[1:9] == [4096, 4100, -8, -4, 15, 1, 0, -16]


def test_writes_to_x0_are_discarded():
    result = run([
        'addi x0,x0,5',
        'add x1,x0,x0',
        'halt'
    ])
    assert result.registers[0] == 0
    assert result.registers[1] == 0


def test_malformed_lines_are_idle_slots():
    result = run([
        'addi x1,x0,1',
        '',
        'this is not an instruction',
        'addi x2,x1,1   # uses x1',
        'halt'
    ])
    assert result.registers[2] == 2
    assert result.cycles == 5 + 4


def test_cycle_limit_is_a_distinct_outcome():
    result = run(['beq x0,x0,0'], simulation_max_cycles=50)
    assert result.outcome == Outcome.CYCLE_LIMIT
    assert result.cycles == 50


def test_program_without_halt_drains():
    result = run(['addi x1,x0,1'])
    assert result.outcome == Outcome.DRAINED
    assert result.registers[1] == 1
    assert result.cycles == 5


@pytest.mark.parametrize('line, address', [
    ('lw x1,4096(x0)', 4096),
    ('sw x1,-4(x0)',   -4),
])
def test_out_of_range_access_stops_the_simulation(line, address):
    with pytest.raises(MemoryAccessError) as excinfo:
        run([line, 'halt'])
    assert excinfo.value.address == address
    assert excinfo.value.cycle == 4


def test_program_checks():
    with pytest.raises(ProgramError):
        run([])
    with pytest.raises(ProgramError):
        run(['nop'] * 3, memory_instruction_depth=2)


@pytest.mark.parametrize('data', [{2: 1}, {64: 1}, {-4: 1}])
def test_data_image_checks(data):
    with pytest.raises(ProgramError):
        run(['halt'], data)


def test_decoded_programs_are_accepted():
    result = run(assemble(['addi x1,x0,3', 'halt']))
    assert result.registers[1] == 3


def test_text_and_decoded_lines_can_be_mixed():
    result = run(['addi x1,x0,1', decode('addi x2,x1,1'), 'halt'])
    assert result.outcome == Outcome.HALTED
    assert result.registers[1:3] == [1, 2]


def test_word_rejects_negative_addresses():
    result = run(['halt'], {4: 9})
    assert result.word(4) == 9
    with pytest.raises(IndexError):
        result.word(-4)


def test_trace_reports_every_stage():
    result = run([
        'lw x1,0(x0)',
        'add x2,x1,x1',
        'halt'
    ], {0: 7}, simulation_trace=True)
    assert len(result.trace) == result.cycles
    assert [stage for stage, _ in result.trace[0].stages] == ['WB', 'MEM', 'EX', 'ID', 'IF']
    # the add waits in decode while the load is in execute
    assert result.trace[2].stages[3][1].startswith('STALL')
    assert result.trace[3].stages[1] == ('MEM', 'LOAD mem[0] = 7')
    assert result.trace[4].forwards == ['x1 = 7 from MEM/WB', 'x1 = 7 from MEM/WB']
    assert result.trace[0].lines()[0] == '--- CYCLE 1 ---'
