import logging
from typing import Iterable, Optional

from .config import KBSR_READY, MEMORY_SIZE, MR_KBDR, MR_KBSR, WORD_MASK

log = logging.getLogger(__name__)


class Memory:
    """
    Flat 64K-word store with a memory-mapped keyboard at KBSR/KBDR.

    read() is NOT side-effect free: every read of MR_KBSR polls the keyboard
    and, when a key is waiting, latches it into MR_KBDR before the status word
    is returned. This holds for any read, including operand fetches made by
    LD/LDI/LDR, not just for explicit polling loops.
    """

    def __init__(self, keyboard: Optional["Keyboard"] = None):
        self.mem = [0]*MEMORY_SIZE
        self.keyboard = keyboard

    def read(self, addr: int) -> int:
        """Read a 16-bit word from memory"""
        addr &= WORD_MASK
        if addr == MR_KBSR:
            self._poll_keyboard()
        return self.mem[addr]

    def write(self, addr: int, value: int):
        """Write a 16-bit word to memory"""
        self.mem[addr & WORD_MASK] = value & WORD_MASK

    def load(self, origin: int, words: Iterable[int]) -> int:
        """Copy words in starting at origin; stops at the top of memory."""
        addr = origin & WORD_MASK
        count = 0
        for word in words:
            if addr >= MEMORY_SIZE:
                break
            self.mem[addr] = word & WORD_MASK
            addr += 1
            count += 1
        return count

    def _poll_keyboard(self):
        if self.keyboard is not None and self.keyboard.key_ready():
            self.mem[MR_KBSR] = KBSR_READY
            self.mem[MR_KBDR] = self.keyboard.read_key() & WORD_MASK
            log.debug("keyboard latched 0x%04X", self.mem[MR_KBDR])
        else:
            self.mem[MR_KBSR] = 0


class Keyboard:
    """What Memory needs from an input device. Console implements it."""

    def key_ready(self) -> bool:
        raise NotImplementedError

    def read_key(self) -> int:
        raise NotImplementedError
