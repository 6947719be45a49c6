from amaranth import Mux
from amaranth import Module
from amaranth import Signal
from amaranth import Elaboratable
from amaranth import signed
from amaranth.build import Platform
from saiph.isa import Opcode
from saiph.program import Instruction
from saiph.gateware.alu import ALUUnit
from saiph.gateware.compare import CompareUnit
from saiph.gateware.decoder import DecoderUnit
from saiph.gateware.fetch import FetchUnit
from saiph.gateware.forward import ForwardingUnit
from saiph.gateware.hazard import HazardUnit
from saiph.gateware.lsu import DataFormat
from saiph.gateware.lsu import DataMemory
from saiph.gateware.regfile import RegisterFile
from saiph.gateware.stage import PipelineLatch
from saiph.gateware.layout import _fd_layout
from saiph.gateware.layout import _dx_layout
from saiph.gateware.layout import _xm_layout
from saiph.gateware.layout import _mw_layout
from typing import Dict, List, Optional


class Saiph(Elaboratable):
    def __init__(self,
                 program: List[Instruction],
                 data: Optional[Dict[int, int]] = None,
                 # Memory
                 memory_data_depth: int = 256,
                 memory_instruction_depth: int = 256
                 ) -> None:
        # ----------------------------------------------------------------------
        # pipeline latches
        self.fd = PipelineLatch('fd', _fd_layout)
        self.dx = PipelineLatch('dx', _dx_layout)
        self.xm = PipelineLatch('xm', _xm_layout)
        self.mw = PipelineLatch('mw', _mw_layout)
        # ----------------------------------------------------------------------
        # units
        self.fetch    = FetchUnit(program, memory_instruction_depth)
        self.decoder  = DecoderUnit()
        self.hazard   = HazardUnit()
        self.fwd_rs1  = ForwardingUnit()
        self.fwd_rs2  = ForwardingUnit()
        self.alu      = ALUUnit()
        self.compare  = CompareUnit()
        self.data_sel = DataFormat()
        self.gprf     = RegisterFile()
        self.dmem     = DataMemory(memory_data_depth, data)
        # ----------------------------------------------------------------------
        # status
        self.d_stall  = Signal()            # output
        self.x_flush  = Signal()            # output
        self.x_target = Signal(32)          # output
        self.m_fault  = Signal()            # output
        self.w_result = Signal(signed(32))  # output
        self.w_write  = Signal()            # output
        self.halted   = Signal()            # output
        # ----------------------------------------------------------------------
        # a load-use hazard holds the instruction in decode and sends a bubble
        # to execute. A taken jump/branch discards the instruction in decode.
        self.fd.add_stall_source(self.hazard.stall)
        self.dx.add_kill_source(self.hazard.stall)
        self.dx.add_kill_source(self.x_flush)

    @property
    def latches(self) -> List[PipelineLatch]:
        return [self.fd, self.dx, self.xm, self.mw]

    def elaborate(self, platform: Platform) -> Module:
        cpu = Module()
        # ----------------------------------------------------------------------
        cpu.submodules.fd       = self.fd
        cpu.submodules.dx       = self.dx
        cpu.submodules.xm       = self.xm
        cpu.submodules.mw       = self.mw
        cpu.submodules.fetch    = fetch    = self.fetch
        cpu.submodules.decoder  = decoder  = self.decoder
        cpu.submodules.hazard   = hazard   = self.hazard
        cpu.submodules.fwd_rs1  = fwd_rs1  = self.fwd_rs1
        cpu.submodules.fwd_rs2  = fwd_rs2  = self.fwd_rs2
        cpu.submodules.alu      = alu      = self.alu
        cpu.submodules.compare  = compare  = self.compare
        cpu.submodules.data_sel = data_sel = self.data_sel
        cpu.submodules.gprf     = gprf     = self.gprf
        cpu.submodules.dmem     = dmem     = self.dmem

        d = self.fd.sink
        x = self.dx.sink
        m = self.xm.sink
        w = self.mw.sink
        # ----------------------------------------------------------------------
        # Write Back Stage
        w_halt = w.valid & (w.op == Opcode.HALT)

        cpu.d.comb += [
            self.w_result.eq(Mux(w.ctrl.mem_to_reg, w.ld_result, w.result)),
            self.w_write.eq(w.valid & ~w_halt & w.ctrl.reg_write & w.rd.any())
        ]
        cpu.d.comb += [
            gprf.wp_addr.eq(w.rd),
            gprf.wp_data.eq(self.w_result),
            gprf.wp_en.eq(self.w_write)
        ]
        with cpu.If(w_halt):
            cpu.d.sync += self.halted.eq(1)
        # ----------------------------------------------------------------------
        # Memory Stage
        cpu.d.comb += [
            dmem.addr.eq(m.result),
            dmem.re.eq(m.valid & m.ctrl.mem_read),
            dmem.we.eq(m.valid & m.ctrl.mem_write),
            dmem.dat_w.eq(data_sel.merged),
            self.m_fault.eq(dmem.fault)
        ]
        cpu.d.comb += [
            data_sel.op.eq(m.op),
            data_sel.offset.eq(m.result[:2]),
            data_sel.word.eq(dmem.dat_r),
            data_sel.store_data.eq(m.store_data)
        ]
        cpu.d.comb += [
            self.mw.source.valid.eq(m.valid),
            self.mw.source.pc.eq(m.pc),
            self.mw.source.op.eq(m.op),
            self.mw.source.rd.eq(m.rd),
            self.mw.source.result.eq(m.result),
            self.mw.source.ld_result.eq(data_sel.load_data),
            self.mw.source.ctrl.eq(m.ctrl)
        ]
        # ----------------------------------------------------------------------
        # Execute Stage
        gprf_rp1, gprf_rp2 = gprf.read_ports
        cpu.d.comb += [
            gprf_rp1.addr.eq(x.rs1),
            gprf_rp2.addr.eq(x.rs2)
        ]

        # forwarding
        for fwd, port in ((fwd_rs1, gprf_rp1), (fwd_rs2, gprf_rp2)):
            cpu.d.comb += [
                fwd.rs.eq(port.addr),
                fwd.rf_data.eq(port.data),
                fwd.m_valid.eq(m.valid),
                fwd.m_reg_write.eq(m.ctrl.reg_write),
                fwd.m_rd.eq(m.rd),
                fwd.m_result.eq(m.result),
                fwd.w_valid.eq(w.valid),
                fwd.w_reg_write.eq(w.ctrl.reg_write),
                fwd.w_rd.eq(w.rd),
                fwd.w_result.eq(self.w_result)
            ]

        cpu.d.comb += [
            alu.op.eq(x.op),
            alu.dat1.eq(fwd_rs1.data),
            alu.dat2.eq(Mux(x.ctrl.alu_src, x.imm, fwd_rs2.data)),
            alu.imm.eq(x.imm),
            alu.pc.eq(x.pc)
        ]
        # branches always compare two registers
        cpu.d.comb += [
            compare.op.eq(x.op),
            compare.dat1.eq(fwd_rs1.data),
            compare.dat2.eq(fwd_rs2.data)
        ]

        # jump/branch
        cpu.d.comb += self.x_flush.eq(x.valid & (x.ctrl.jump | (x.ctrl.branch & compare.cmp_ok)))
        with cpu.If(x.op == Opcode.JALR):
            cpu.d.comb += self.x_target.eq((fwd_rs1.data + x.imm) & 0xFFFFFFFE)
        with cpu.Else():
            cpu.d.comb += self.x_target.eq(x.pc + x.imm)

        cpu.d.comb += [
            self.xm.source.valid.eq(x.valid),
            self.xm.source.pc.eq(x.pc),
            self.xm.source.op.eq(x.op),
            self.xm.source.rd.eq(x.rd),
            self.xm.source.result.eq(alu.result),
            self.xm.source.store_data.eq(fwd_rs2.data),
            self.xm.source.ctrl.eq(x.ctrl)
        ]
        # ----------------------------------------------------------------------
        # Decode Stage
        cpu.d.comb += decoder.op.eq(d.op)
        cpu.d.comb += [
            hazard.d_valid.eq(d.valid),
            hazard.d_rs1.eq(d.rs1),
            hazard.d_rs2.eq(d.rs2),
            hazard.x_valid.eq(x.valid),
            hazard.x_mem_read.eq(x.ctrl.mem_read),
            hazard.x_rd.eq(x.rd),
            self.d_stall.eq(hazard.stall)
        ]
        cpu.d.comb += [
            self.dx.source.valid.eq(d.valid),
            self.dx.source.pc.eq(d.pc),
            self.dx.source.op.eq(d.op),
            self.dx.source.rd.eq(d.rd),
            self.dx.source.rs1.eq(d.rs1),
            self.dx.source.rs2.eq(d.rs2),
            self.dx.source.imm.eq(d.imm),
            self.dx.source.ctrl.eq(decoder.ctrl)
        ]
        # ----------------------------------------------------------------------
        # Fetch Stage
        cpu.d.comb += [
            fetch.redirect.eq(self.x_flush),
            fetch.target.eq(self.x_target),
            fetch.stall.eq(hazard.stall),
            self.fd.source.eq(fetch.fetched)
        ]

        return cpu
