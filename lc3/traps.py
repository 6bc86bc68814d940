"""
Built-in TRAP service routines.

Each routine takes the CPU and works on R0 and the attached console. The
table is keyed by the 8-bit trap vector; a vector with no routine does
nothing.
"""
import logging
from enum import IntEnum

from .config import EOF_WORD, HALT_MESSAGE, IN_PROMPT, WORD_MASK

log = logging.getLogger(__name__)


class TrapVector(IntEnum):
    GETC = 0x20   # read a char, no echo
    OUT = 0x21    # write the char in R0
    PUTS = 0x22   # write a one-char-per-word string
    IN = 0x23     # prompt, read a char, echo it
    PUTSP = 0x24  # write a two-chars-per-word string
    HALT = 0x25


def trap_getc(cpu):
    cpu.reg[0] = cpu.console.read_key()


def trap_out(cpu):
    cpu.console.write(bytes([cpu.reg[0] & 0xFF]))
    cpu.console.flush()


def trap_puts(cpu):
    addr = cpu.reg[0]
    out = bytearray()
    word = cpu.mem.read(addr)
    while word:
        out.append(word & 0xFF)
        addr = (addr + 1) & WORD_MASK
        word = cpu.mem.read(addr)
    cpu.console.write(bytes(out))
    cpu.console.flush()


def trap_in(cpu):
    console = cpu.console
    console.write(IN_PROMPT.encode("ascii"))
    console.flush()
    key = console.read_key()
    if key != EOF_WORD:
        console.write(bytes([key & 0xFF]))
    console.flush()
    cpu.reg[0] = key


def trap_putsp(cpu):
    addr = cpu.reg[0]
    out = bytearray()
    word = cpu.mem.read(addr)
    while word:
        out.append(word & 0xFF)
        high = word >> 8
        if high:
            out.append(high)
        addr = (addr + 1) & WORD_MASK
        word = cpu.mem.read(addr)
    cpu.console.write(bytes(out))
    cpu.console.flush()


def trap_halt(cpu):
    cpu.console.write(f"{HALT_MESSAGE}\n".encode("ascii"))
    cpu.console.flush()
    cpu.halt()


TRAP_ROUTINES = {
    TrapVector.GETC: trap_getc,
    TrapVector.OUT: trap_out,
    TrapVector.PUTS: trap_puts,
    TrapVector.IN: trap_in,
    TrapVector.PUTSP: trap_putsp,
    TrapVector.HALT: trap_halt,
}


def run_trap(cpu, vector: int):
    routine = TRAP_ROUTINES.get(vector)
    if routine is None:
        log.debug("trap x%02X has no routine; ignored", vector)
        return
    log.debug("trap x%02X %s", vector, routine.__name__)
    routine(cpu)
