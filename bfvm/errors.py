"""
bfvm Errors

Two disjoint families share one base class:

    LoadError       structural problems found before execution
    ExecutionError  policy violations and stream faults during execution

Every error is fatal to the load or run that raised it.
"""

from __future__ import annotations

from typing import Optional


class BfvmError(Exception):
    """Base class for all bfvm errors."""


# ============================================================================
# Load-time errors
# ============================================================================

class LoadError(BfvmError):
    """A structural error in program source.

    Carries the source byte offset, the instruction index, the 1-based
    line/column and a caret diagnostic pointing at the offending bracket.
    """

    detail = "syntax error"

    def __init__(self, source: bytes, offset: int, index: int) -> None:
        self.offset = offset
        self.index = index
        self.line, self.col = _line_col(source, offset)
        self.excerpt, self.arrow = _excerpt(source, offset)
        super().__init__(
            f"syntax error at line {self.line}, column {self.col}: {self.detail}"
        )

    def diagnostic(self) -> str:
        """The error message followed by the source line and a caret arrow."""
        marker = "-" * self.arrow + "^" + "-" * max(len(self.excerpt) - self.arrow - 1, 0)
        return f"{self}\n\t{self.excerpt}\n\t{marker}"


class UnmatchedLoopOpen(LoadError):
    """A '[' with no matching ']'."""

    detail = "missing closing bracket ']'"

    def __init__(self, source: bytes, offset: int, index: int,
                 positions: Optional[list[int]] = None) -> None:
        super().__init__(source, offset, index)
        # Offsets of every unmatched '[', outermost first
        self.positions = positions if positions is not None else [offset]


class UnmatchedLoopClose(LoadError):
    """A ']' with no open loop to close."""

    detail = "unexpected closing bracket ']'"


def _line_col(source: bytes, offset: int) -> tuple[int, int]:
    line = source.count(b"\n", 0, offset) + 1
    col = offset - (source.rfind(b"\n", 0, offset) + 1) + 1
    return line, col


def _excerpt(source: bytes, offset: int) -> tuple[str, int]:
    """Return the source line holding `offset` and the caret column in it.

    Tabs expand to four spaces; surrounding whitespace is trimmed.
    """
    start = source.rfind(b"\n", 0, offset) + 1
    end = source.find(b"\n", offset)
    if end < 0:
        end = len(source)
    raw = source[start:end]

    lead = len(raw) - len(raw.lstrip())
    buf = bytearray()
    arrow = 0
    for i, c in enumerate(raw[lead:], start + lead):
        if i == offset:
            arrow = len(buf)
        buf.extend(b"    " if c == 0x09 else bytes([c]))

    return buf.rstrip().decode("utf-8", errors="replace"), arrow


# ============================================================================
# Run-time errors
# ============================================================================

class ExecutionError(BfvmError):
    """A fatal error raised while a program runs.

    `ip` is the instruction pointer and `dp` the data pointer at the moment
    of failure; `value` is the offending cell or pointer value, if any.
    """

    def __init__(self, message: str, ip: int, dp: int, value: Optional[int] = None) -> None:
        super().__init__(f"runtime error: {message} (at instruction {ip})")
        self.ip = ip
        self.dp = dp
        self.value = value


class ArithmeticOverflow(ExecutionError):
    def __init__(self, ip: int, dp: int, value: int) -> None:
        super().__init__(f"attempt to add with overflow: {value} + 1", ip, dp, value)


class ArithmeticUnderflow(ExecutionError):
    def __init__(self, ip: int, dp: int, value: int) -> None:
        super().__init__(f"attempt to subtract with overflow: {value} - 1", ip, dp, value)


class PointerOverflow(ExecutionError):
    def __init__(self, ip: int, dp: int, length: int) -> None:
        super().__init__(
            f"data pointer exceeded the tape: {dp} + 1 (tape length {length})",
            ip, dp, dp,
        )


class PointerUnderflow(ExecutionError):
    def __init__(self, ip: int, dp: int) -> None:
        super().__init__(f"data pointer moved below 0: {dp} - 1", ip, dp, dp)


class EndOfInput(ExecutionError):
    def __init__(self, ip: int, dp: int) -> None:
        super().__init__("reached end of input but a read command was executed", ip, dp)


class StepLimitExceeded(ExecutionError):
    def __init__(self, ip: int, dp: int, limit: int) -> None:
        super().__init__(f"step limit of {limit} reached", ip, dp, limit)


class IOFailure(ExecutionError):
    """The input or output stream raised an OSError."""

    def __init__(self, ip: int, dp: int, error: OSError) -> None:
        super().__init__(f"io error: {error}", ip, dp)
        self.error = error
