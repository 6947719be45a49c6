import pytest
from saiph.isa import Opcode
from saiph.isa import Control
from saiph.isa import CONTROL
from saiph.isa import LOADS
from saiph.isa import STORES
from saiph.isa import control


def test_every_opcode_has_control_signals():
    assert set(CONTROL) == set(Opcode)


def test_nop_and_halt_have_no_control_signals():
    assert control(Opcode.NOP) == Control()
    assert control(Opcode.HALT) == Control()


@pytest.mark.parametrize('op', sorted(LOADS))
def test_loads(op):
    ctrl = control(op)
    assert ctrl.reg_write and ctrl.alu_src and ctrl.mem_read and ctrl.mem_to_reg
    assert not ctrl.mem_write


@pytest.mark.parametrize('op', sorted(STORES))
def test_stores(op):
    ctrl = control(op)
    assert ctrl.mem_write and ctrl.alu_src
    assert not (ctrl.reg_write or ctrl.mem_read)


def test_branches_compare_registers():
    ctrl = control(Opcode.BLTU)
    assert ctrl == Control(branch=True)


def test_jumps_write_the_return_address():
    for op in (Opcode.JAL, Opcode.JALR):
        assert control(op) == Control(reg_write=True, jump=True)


def test_control_accepts_plain_integers():
    assert control(int(Opcode.ADD)) == Control(reg_write=True)
