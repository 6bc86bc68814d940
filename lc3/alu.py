import operator

from .config import WORD_MASK
from .registers import CondFlag


def sign_extend(value: int, bit_count: int) -> int:
    """
    Widen a bit_count-bit two's-complement field to a 16-bit word.
    e.g. sign_extend(0b11111, 5) == 0xFFFF, sign_extend(0b01111, 5) == 0x000F
    """
    value &= (1 << bit_count) - 1
    if (value >> (bit_count - 1)) & 1:
        value |= (WORD_MASK << bit_count) & WORD_MASK
    return value


def condition_for(value: int) -> CondFlag:
    """NZP code for a 16-bit word, judged on its signed reading."""
    value &= WORD_MASK
    if value == 0:
        return CondFlag.ZRO
    if value >> 15:
        return CondFlag.NEG
    return CondFlag.POS


class ALU:
    OPS = {
        "ADD": operator.add,
        "AND": operator.and_,
        "NOT": lambda a, _b: ~a,    # unary; second operand ignored
    }

    @classmethod
    def execute(cls, op: str, a: int, b: int = 0) -> int:
        try:
            return cls.OPS[op](a, b) & WORD_MASK
        except KeyError as e:
            raise ValueError(f"Unsupported ALU op {op}") from e
