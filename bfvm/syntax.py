"""
bfvm Syntax

The eight instructions of the language and the tokenizer that finds them
in raw source bytes. Every other byte is a comment.

    >   move the data pointer right
    <   move the data pointer left
    +   increment the current cell
    -   decrement the current cell
    .   write the current cell to output
    ,   read one byte of input into the current cell
    [   jump past the matching ] if the current cell is 0
    ]   jump back past the matching [ if the current cell is nonzero
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union


class Instruction(Enum):
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INCREMENT = "+"
    DECREMENT = "-"
    WRITE = "."
    READ = ","
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"

    def __str__(self) -> str:
        return self.value


# byte value -> Instruction
INSTRUCTIONS = {ord(i.value): i for i in Instruction}


@dataclass(frozen=True)
class Token:
    instruction: Instruction
    offset: int
    line: int
    col: int

    def __repr__(self) -> str:
        return f"<{self.instruction.name}@{self.line}:{self.col}>"


def tokenize(source: Union[bytes, str]) -> Iterator[Token]:
    """Yield a Token for every instruction byte in `source`."""
    if isinstance(source, str):
        source = source.encode("utf-8")

    line = 1
    line_start = 0
    for offset, byte in enumerate(source):
        if byte == 0x0A:
            line += 1
            line_start = offset + 1
            continue
        instruction = INSTRUCTIONS.get(byte)
        if instruction is not None:
            yield Token(instruction, offset, line, offset - line_start + 1)
