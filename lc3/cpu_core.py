import io
import logging
from enum import Enum, IntEnum
from typing import Optional

from .alu import ALU, condition_for, sign_extend
from .config import WORD_MASK
from .console import Console, StreamConsole
from .memory import Memory
from .registers import LINK_REG, Registers
from .traps import run_trap

log = logging.getLogger(__name__)


class Opcode(IntEnum):
    BR = 0b0000
    ADD = 0b0001
    LD = 0b0010
    ST = 0b0011
    JSR = 0b0100
    AND = 0b0101
    LDR = 0b0110
    STR = 0b0111
    RTI = 0b1000
    NOT = 0b1001
    LDI = 0b1010
    STI = 0b1011
    JMP = 0b1100
    RES = 0b1101
    LEA = 0b1110
    TRAP = 0b1111


class MachineState(Enum):
    RUNNING = "running"
    HALTED = "halted"
    ABORTED = "aborted"


class IllegalOpcode(RuntimeError):
    def __init__(self, opcode: Opcode, instr: int, addr: int):
        super().__init__(f"{opcode.name} (0x{instr:04X}) at x{addr:04X} is not implemented")
        self.opcode = opcode
        self.instr = instr
        self.addr = addr


class CPU:
    """
    LC-3 style 16-bit soft-CPU.
    ─────────────────────────────────────────────────────
    • fetch()  : read the word at PC into IR, PC += 1
    • decode_execute(): dispatch IR's top nibble to its handler
    • step()   : one fetch → decode/exec cycle while RUNNING
    • run()    : step until HALTED or ABORTED
    • reset()  : registers/memory/state back to power-on
    """

    def __init__(self, console: Optional[Console] = None):
        if console is None:
            console = StreamConsole(io.BytesIO(), io.BytesIO())  # no input, output discarded
        self.console = console
        self.reg = Registers()              # R0..R7, PC, IR, COND
        self.mem = Memory(keyboard=console) # 64K words + KBSR/KBDR hook
        self.state = MachineState.RUNNING

    # ───────────────────────────── fetch ─────────────────────────────
    def fetch(self):
        self.reg.ir = self.mem.read(self.reg.pc)
        self.reg.pc = (self.reg.pc + 1) & WORD_MASK  # 16-bit wrap-around

    # ───────────────────────────── flags ─────────────────────────────
    def update_flags(self, value: int):
        self.reg.cond = condition_for(value)

    def _set_dr(self, dr: int, value: int):
        self.reg[dr] = value
        self.update_flags(value)

    # ───────────────────────── decode / execute ──────────────────────
    def decode_execute(self):
        instr = self.reg.ir
        op = Opcode(instr >> 12)            # bits[15:12]
        if log.isEnabledFor(logging.DEBUG):
            log.debug("x%04X: %04X %s", (self.reg.pc - 1) & WORD_MASK, instr, op.name)
        self.HANDLERS[op](self, instr)

    # ───────────── ADD (0001) / AND (0101) ─────────────
    def _alu(self, name: str, instr: int):
        dr  = (instr >> 9) & 0x7
        sr1 = (instr >> 6) & 0x7
        if (instr >> 5) & 1:                # imm5
            operand = sign_extend(instr & 0x1F, 5)
        else:                               # register-register
            operand = self.reg[instr & 0x7]
        self._set_dr(dr, ALU.execute(name, self.reg[sr1], operand))

    def op_add(self, instr: int):
        self._alu("ADD", instr)

    def op_and(self, instr: int):
        self._alu("AND", instr)

    # ───────────── NOT (1001) ─────────────
    def op_not(self, instr: int):
        dr = (instr >> 9) & 0x7
        sr = (instr >> 6) & 0x7
        self._set_dr(dr, ALU.execute("NOT", self.reg[sr]))

    # ───────────── BR (0000) ──────────────
    def op_br(self, instr: int):
        cond_mask = (instr >> 9) & 0x7      # n z p
        if cond_mask & self.reg.cond:
            # incremented PC + SEXT(offset9)
            self.reg.pc = (self.reg.pc + sign_extend(instr & 0x1FF, 9)) & WORD_MASK

    # ───────────── JMP / RET (1100) ───────
    def op_jmp(self, instr: int):
        self.reg.pc = self.reg[(instr >> 6) & 0x7]

    # ───────────── JSR / JSRR (0100) ──────
    def op_jsr(self, instr: int):
        return_pc = self.reg.pc
        if (instr >> 11) & 1:               # JSR: PC + off11
            target = (self.reg.pc + sign_extend(instr & 0x7FF, 11)) & WORD_MASK
        else:                               # JSRR: BaseR
            target = self.reg[(instr >> 6) & 0x7]
        self.reg[LINK_REG] = return_pc      # JSRR R7 must still jump to the old R7
        self.reg.pc = target

    # ───────────── PC-relative addressing ─
    def _pc_offset9(self, instr: int) -> int:
        return (self.reg.pc + sign_extend(instr & 0x1FF, 9)) & WORD_MASK

    def _base_offset6(self, instr: int) -> int:
        base = (instr >> 6) & 0x7
        return (self.reg[base] + sign_extend(instr & 0x3F, 6)) & WORD_MASK

    # ───────────── LD (0010) ──────────────
    def op_ld(self, instr: int):
        self._set_dr((instr >> 9) & 0x7, self.mem.read(self._pc_offset9(instr)))

    # ───────────── LDI (1010) ─────────────
    def op_ldi(self, instr: int):
        ptr = self.mem.read(self._pc_offset9(instr))
        self._set_dr((instr >> 9) & 0x7, self.mem.read(ptr))

    # ───────────── LDR (0110) ─────────────
    def op_ldr(self, instr: int):
        self._set_dr((instr >> 9) & 0x7, self.mem.read(self._base_offset6(instr)))

    # ───────────── LEA (1110) ─────────────
    def op_lea(self, instr: int):
        self._set_dr((instr >> 9) & 0x7, self._pc_offset9(instr))

    # ───────────── ST (0011) ──────────────
    def op_st(self, instr: int):
        self.mem.write(self._pc_offset9(instr), self.reg[(instr >> 9) & 0x7])

    # ───────────── STI (1011) ─────────────
    def op_sti(self, instr: int):
        ptr = self.mem.read(self._pc_offset9(instr))
        self.mem.write(ptr, self.reg[(instr >> 9) & 0x7])

    # ───────────── STR (0111) ─────────────
    def op_str(self, instr: int):
        self.mem.write(self._base_offset6(instr), self.reg[(instr >> 9) & 0x7])

    # ───────────── TRAP (1111) ────────────
    def op_trap(self, instr: int):
        run_trap(self, instr & 0xFF)

    # ───────────── RTI (1000) / RES (1101) ─
    def op_illegal(self, instr: int):
        raise IllegalOpcode(Opcode(instr >> 12), instr, (self.reg.pc - 1) & WORD_MASK)

    HANDLERS = {
        Opcode.BR: op_br,
        Opcode.ADD: op_add,
        Opcode.LD: op_ld,
        Opcode.ST: op_st,
        Opcode.JSR: op_jsr,
        Opcode.AND: op_and,
        Opcode.LDR: op_ldr,
        Opcode.STR: op_str,
        Opcode.RTI: op_illegal,
        Opcode.NOT: op_not,
        Opcode.LDI: op_ldi,
        Opcode.STI: op_sti,
        Opcode.JMP: op_jmp,
        Opcode.RES: op_illegal,
        Opcode.LEA: op_lea,
        Opcode.TRAP: op_trap,
    }

    # ───────────────────────────── runner ─────────────────────────────
    def halt(self):
        self.state = MachineState.HALTED

    def step(self):
        """One instruction cycle (fetch-decode-exec); no-op unless RUNNING."""
        if self.state is not MachineState.RUNNING:
            return
        self.fetch()
        try:
            self.decode_execute()
        except IllegalOpcode as e:
            self.state = MachineState.ABORTED
            log.error("aborting: %s", e)
            raise

    def run(self) -> MachineState:
        log.info("running from x%04X", self.reg.pc)
        while self.state is MachineState.RUNNING:
            self.step()
        log.info("stopped: %s", self.state.value)
        return self.state

    def reset(self):
        """Registers, memory and state back to power-on; the console stays."""
        self.__init__(self.console)
