from amaranth import signed
from amaranth.lib.data import StructLayout
from saiph.isa import Opcode

# control signals, as produced by the decoder
control_layout = StructLayout({
    'reg_write':  1,
    'alu_src':    1,
    'mem_read':   1,
    'mem_write':  1,
    'mem_to_reg': 1,
    'branch':     1,
    'jump':       1
})

# layout for pipeline latches
_fd_layout = StructLayout({
    'valid':     1,
    'pc':       32,
    'op':   Opcode,
    'rd':        5,
    'rs1':       5,
    'rs2':       5,
    'imm':  signed(32)
})

_dx_layout = StructLayout({
    'valid':     1,
    'pc':       32,
    'op':   Opcode,
    'rd':        5,
    'rs1':       5,
    'rs2':       5,
    'imm':  signed(32),
    'ctrl': control_layout
})

_xm_layout = StructLayout({
    'valid':         1,
    'pc':           32,
    'op':       Opcode,
    'rd':            5,
    'result':   signed(32),
    'store_data': signed(32),
    'ctrl':     control_layout
})

_mw_layout = StructLayout({
    'valid':        1,
    'pc':          32,
    'op':      Opcode,
    'rd':           5,
    'result':  signed(32),
    'ld_result': signed(32),
    'ctrl':    control_layout
})
