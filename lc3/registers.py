from dataclasses import dataclass, field
from enum import IntEnum
from typing import List

from .config import WORD_MASK

GENERAL_REGS = 8          # R0–R7
SPECIAL_REGS = ["PC", "IR", "COND"]
LINK_REG = 7              # R7 holds the return address for JSR/JSRR


class CondFlag(IntEnum):
    """NZP condition codes, laid out so a BR mask can be AND-ed straight in."""
    POS = 1 << 0
    ZRO = 1 << 1
    NEG = 1 << 2


@dataclass
class Registers:
    gpr: List[int] = field(default_factory=lambda: [0]*GENERAL_REGS)
    pc: int = 0
    ir: int = 0
    cond: CondFlag = CondFlag.ZRO

    def __getitem__(self, idx: int) -> int:
        if 0 <= idx < GENERAL_REGS:
            return self.gpr[idx]
        raise IndexError("Invalid register index")

    def __setitem__(self, idx: int, value: int) -> None:
        if 0 <= idx < GENERAL_REGS:
            self.gpr[idx] = value & WORD_MASK
        else:
            raise IndexError("Invalid register index")
