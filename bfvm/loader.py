"""
bfvm Program Loader

Turns raw source into an executable Program:

1. Tokenize → instruction sequence (comments dropped)
2. Match brackets with a stack → bidirectional jump table
3. Fail fast on an unmatched '[' or ']'

Example:
    program = load(b"++[>+<-] copy a cell")
    program.instructions   # (INCREMENT, INCREMENT, LOOP_OPEN, ...)
    program.jumps[2]       # 7, the index of the matching ']'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from bfvm.errors import UnmatchedLoopClose, UnmatchedLoopOpen
from bfvm.syntax import Instruction, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Program:
    """A loaded program. Read-only for the lifetime of execution."""
    instructions: tuple[Instruction, ...]
    # Matching bracket index for LOOP_OPEN / LOOP_CLOSE, None elsewhere
    jumps: tuple[Optional[int], ...]
    # Source byte offset of each instruction
    offsets: tuple[int, ...]
    source: bytes = b""

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    @property
    def loop_count(self) -> int:
        return sum(1 for i in self.instructions if i is Instruction.LOOP_OPEN)

    @property
    def max_depth(self) -> int:
        """Deepest bracket nesting in the program."""
        depth = deepest = 0
        for i in self.instructions:
            if i is Instruction.LOOP_OPEN:
                depth += 1
                deepest = max(deepest, depth)
            elif i is Instruction.LOOP_CLOSE:
                depth -= 1
        return deepest

    def __str__(self) -> str:
        return "".join(i.value for i in self.instructions)

    def __repr__(self) -> str:
        return f"<Program: {len(self)} instructions, {self.loop_count} loops>"


def load(source: Union[bytes, str]) -> Program:
    """Load program source, raising LoadError on unbalanced brackets."""
    if isinstance(source, str):
        source = source.encode("utf-8")

    instructions: list[Instruction] = []
    offsets: list[int] = []
    jumps: list[Optional[int]] = []
    stack: list[int] = []

    for token in tokenize(source):
        index = len(instructions)
        instructions.append(token.instruction)
        offsets.append(token.offset)
        jumps.append(None)

        if token.instruction is Instruction.LOOP_OPEN:
            stack.append(index)
        elif token.instruction is Instruction.LOOP_CLOSE:
            if not stack:
                raise UnmatchedLoopClose(source, token.offset, index)
            start = stack.pop()
            jumps[start] = index
            jumps[index] = start

    if stack:
        first = stack[0]
        raise UnmatchedLoopOpen(
            source, offsets[first], first,
            positions=[offsets[i] for i in stack],
        )

    program = Program(
        instructions=tuple(instructions),
        jumps=tuple(jumps),
        offsets=tuple(offsets),
        source=source,
    )
    logger.debug("loaded %d instructions (%d loops) from %d source bytes",
                 len(program), program.loop_count, len(source))
    return program
