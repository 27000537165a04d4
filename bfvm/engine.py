"""
bfvm Execution Engine

Executes a loaded Program against a Tape under a PolicyConfig.

The Interpreter:
1. Takes a Program, a PolicyConfig and a pair of byte streams
2. Dispatches one instruction per step through a handler table
3. Applies the overflow and end-of-input policies at the edges
4. Stops when the instruction pointer runs off the end of the program

Usage:
    program = load(source)
    interp = Interpreter(program, PolicyConfig(), sys.stdin.buffer, sys.stdout.buffer)
    interp.run()

    # Or without exceptions:
    result = interp.execute()
    print(result.summary())
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from bfvm.errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    EndOfInput,
    ExecutionError,
    IOFailure,
    PointerOverflow,
    PointerUnderflow,
    StepLimitExceeded,
)
from bfvm.loader import Program
from bfvm.policy import EofMode, PolicyConfig, shift
from bfvm.syntax import Instruction
from bfvm.tape import Tape

logger = logging.getLogger(__name__)


@dataclass
class ExecutionState:
    """Mutable machine state owned by one Interpreter."""
    tape: Tape
    # Instruction pointer
    ip: int = 0
    # Data pointer
    dp: int = 0
    steps: int = 0
    reached_eof: bool = False
    bytes_read: int = 0
    bytes_written: int = 0

    @property
    def cell(self) -> int:
        return self.tape[self.dp]


@dataclass
class ExecutionResult:
    """Outcome of one execution."""
    success: bool
    state: ExecutionState
    error: Optional[ExecutionError] = None

    def summary(self) -> str:
        lines = [
            f"bfvm execution {'SUCCESS' if self.success else 'FAILED'}",
            f"  Steps: {self.state.steps}",
            f"  Data pointer: {self.state.dp}",
            f"  Bytes read: {self.state.bytes_read}",
            f"  Bytes written: {self.state.bytes_written}",
            f"  Cells allocated: {self.state.tape.allocated}",
        ]
        if self.error is not None:
            lines.append(f"  Error: {self.error}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<ExecutionResult: {'OK' if self.success else 'FAIL'} steps={self.state.steps}>"


class Interpreter:
    """Steps a Program to completion.

    Each Interpreter owns its tape and pointers; independent interpreters
    share nothing.
    """

    def __init__(
        self,
        program: Program,
        config: Optional[PolicyConfig] = None,
        input: Optional[BinaryIO] = None,
        output: Optional[BinaryIO] = None,
    ) -> None:
        self.program = program
        self.config = config or PolicyConfig()
        self.input = input if input is not None else io.BytesIO()
        self.output = output if output is not None else io.BytesIO()
        self.state = ExecutionState(tape=Tape(self.config.tape_length, self.config.cell_width))

        self._handlers: dict[Instruction, Callable[[ExecutionState], int]] = {
            Instruction.MOVE_RIGHT: self._exec_move_right,
            Instruction.MOVE_LEFT: self._exec_move_left,
            Instruction.INCREMENT: self._exec_increment,
            Instruction.DECREMENT: self._exec_decrement,
            Instruction.WRITE: self._exec_write,
            Instruction.READ: self._exec_read,
            Instruction.LOOP_OPEN: self._exec_loop_open,
            Instruction.LOOP_CLOSE: self._exec_loop_close,
        }

    @property
    def finished(self) -> bool:
        return self.state.ip >= len(self.program)

    def step(self) -> bool:
        """Execute one instruction. Returns False once the program has ended."""
        state = self.state
        if state.ip >= len(self.program):
            return False
        state.ip = self._handlers[self.program.instructions[state.ip]](state)
        state.steps += 1
        return state.ip < len(self.program)

    def run(self, max_steps: Optional[int] = None) -> None:
        """Run to completion, raising ExecutionError on failure.

        With `max_steps`, StepLimitExceeded is raised if the program is
        still running after that many steps.
        """
        logger.debug("running %r with %s", self.program, self.config.describe())
        try:
            if max_steps is None:
                while self.step():
                    pass
            else:
                while self.state.steps < max_steps:
                    if not self.step():
                        break
                else:
                    if not self.finished:
                        raise StepLimitExceeded(self.state.ip, self.state.dp, max_steps)
        except ExecutionError as e:
            logger.debug("execution failed after %d steps: %s", self.state.steps, e)
            raise
        logger.debug("execution finished after %d steps", self.state.steps)

    def execute(self, max_steps: Optional[int] = None) -> ExecutionResult:
        """Run to completion and report the outcome instead of raising."""
        try:
            self.run(max_steps)
        except ExecutionError as e:
            return ExecutionResult(success=False, state=self.state, error=e)
        return ExecutionResult(success=True, state=self.state)

    # ------------------------------------------------------------------
    # Instruction handlers: each returns the next instruction pointer
    # ------------------------------------------------------------------

    def _exec_move_right(self, state: ExecutionState) -> int:
        dp = shift(state.dp, 1, self.config.tape_length, self.config.pointer_overflow)
        if dp is None:
            raise PointerOverflow(state.ip, state.dp, self.config.tape_length)
        state.dp = dp
        return state.ip + 1

    def _exec_move_left(self, state: ExecutionState) -> int:
        dp = shift(state.dp, -1, self.config.tape_length, self.config.pointer_overflow)
        if dp is None:
            raise PointerUnderflow(state.ip, state.dp)
        state.dp = dp
        return state.ip + 1

    def _exec_increment(self, state: ExecutionState) -> int:
        value = state.tape[state.dp]
        new = shift(value, 1, self.config.cell_modulus, self.config.cell_overflow)
        if new is None:
            raise ArithmeticOverflow(state.ip, state.dp, value)
        state.tape[state.dp] = new
        return state.ip + 1

    def _exec_decrement(self, state: ExecutionState) -> int:
        value = state.tape[state.dp]
        new = shift(value, -1, self.config.cell_modulus, self.config.cell_overflow)
        if new is None:
            raise ArithmeticUnderflow(state.ip, state.dp, value)
        state.tape[state.dp] = new
        return state.ip + 1

    def _exec_write(self, state: ExecutionState) -> int:
        try:
            self.output.write(bytes((state.tape[state.dp] & 0xFF,)))
        except OSError as e:
            raise IOFailure(state.ip, state.dp, e) from e
        state.bytes_written += 1
        return state.ip + 1

    def _exec_read(self, state: ExecutionState) -> int:
        data = b""
        if not state.reached_eof:
            try:
                data = self.input.read(1)
            except OSError as e:
                raise IOFailure(state.ip, state.dp, e) from e

        if data:
            state.tape[state.dp] = data[0] % self.config.cell_modulus
            state.bytes_read += 1
            return state.ip + 1

        state.reached_eof = True
        if self.config.eof is EofMode.SET0:
            state.tape[state.dp] = 0
        elif self.config.eof is EofMode.CHECK:
            raise EndOfInput(state.ip, state.dp)
        return state.ip + 1

    def _exec_loop_open(self, state: ExecutionState) -> int:
        if state.tape[state.dp] == 0:
            return self.program.jumps[state.ip] + 1
        return state.ip + 1

    def _exec_loop_close(self, state: ExecutionState) -> int:
        if state.tape[state.dp] != 0:
            return self.program.jumps[state.ip] + 1
        return state.ip + 1


def run(
    program: Program,
    config: Optional[PolicyConfig] = None,
    input: Optional[BinaryIO] = None,
    output: Optional[BinaryIO] = None,
) -> ExecutionState:
    """Run `program` to completion and return its final state.

    Raises ExecutionError on failure.
    """
    interp = Interpreter(program, config, input, output)
    interp.run()
    return interp.state
