"""
bfvm - a policy-configurable interpreter for the eight-instruction tape language

Loader: source bytes → Program (instructions + bidirectional jump table)
Engine: Program + PolicyConfig + byte streams → execution outcome
"""

__version__ = "0.1.0"

from bfvm.syntax import Instruction, Token, tokenize
from bfvm.loader import Program, load
from bfvm.policy import EofMode, Overflow, PolicyConfig
from bfvm.tape import Tape
from bfvm.engine import ExecutionResult, ExecutionState, Interpreter, run
from bfvm.errors import (
    BfvmError,
    LoadError,
    UnmatchedLoopOpen,
    UnmatchedLoopClose,
    ExecutionError,
    ArithmeticOverflow,
    ArithmeticUnderflow,
    PointerOverflow,
    PointerUnderflow,
    EndOfInput,
    StepLimitExceeded,
    IOFailure,
)

__all__ = [
    "Instruction",
    "Token",
    "tokenize",
    "Program",
    "load",
    "EofMode",
    "Overflow",
    "PolicyConfig",
    "Tape",
    "ExecutionResult",
    "ExecutionState",
    "Interpreter",
    "run",
    "BfvmError",
    "LoadError",
    "UnmatchedLoopOpen",
    "UnmatchedLoopClose",
    "ExecutionError",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "PointerOverflow",
    "PointerUnderflow",
    "EndOfInput",
    "StepLimitExceeded",
    "IOFailure",
]
