"""
bfvm Runtime Policies

Three independent axes decide what happens at the edges of execution:

    cell overflow      a cell would leave [0, 2**width - 1]
    pointer overflow   the data pointer would leave [0, tape_length - 1]
    end of input       a read finds the input stream exhausted

Both overflow axes share the same modes and the same arithmetic (`shift`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_TAPE_LENGTH = 1_000_000
DEFAULT_CELL_WIDTH = 8


class Overflow(Enum):
    WRAP = "wrap"           # reduce modulo the bound
    SATURATE = "saturate"   # clamp to the nearest edge
    CHECK = "check"         # unrecoverable error

    def __str__(self) -> str:
        return self.value


class EofMode(Enum):
    NOOP = "noop"   # leave the cell unchanged
    SET0 = "set0"   # set the cell to 0
    CHECK = "check"  # unrecoverable error

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PolicyConfig:
    """Policy choices and tape geometry for one execution."""
    cell_overflow: Overflow = Overflow.WRAP
    pointer_overflow: Overflow = Overflow.CHECK
    eof: EofMode = EofMode.NOOP
    tape_length: int = DEFAULT_TAPE_LENGTH
    cell_width: int = DEFAULT_CELL_WIDTH

    def __post_init__(self) -> None:
        if self.tape_length < 1:
            raise ValueError(f"tape_length must be at least 1, got {self.tape_length}")
        if self.cell_width < 1:
            raise ValueError(f"cell_width must be at least 1, got {self.cell_width}")
        # Accept plain mode names as well as enum members
        object.__setattr__(self, "cell_overflow", Overflow(self.cell_overflow))
        object.__setattr__(self, "pointer_overflow", Overflow(self.pointer_overflow))
        object.__setattr__(self, "eof", EofMode(self.eof))

    @property
    def cell_modulus(self) -> int:
        return 1 << self.cell_width

    @property
    def cell_max(self) -> int:
        return (1 << self.cell_width) - 1

    def describe(self) -> str:
        return (f"cell={self.cell_overflow} ({self.cell_width}-bit) "
                f"ptr={self.pointer_overflow} (tape {self.tape_length}) "
                f"eof={self.eof}")


def shift(value: int, delta: int, bound: int, mode: Overflow) -> Optional[int]:
    """Move `value` by `delta` inside [0, bound - 1] under `mode`.

    Returns the new value, or None when `mode` is CHECK and the result
    would leave the range.
    """
    result = value + delta
    if 0 <= result < bound:
        return result
    if mode is Overflow.WRAP:
        return result % bound
    if mode is Overflow.SATURATE:
        return 0 if result < 0 else bound - 1
    return None
