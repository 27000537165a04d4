"""
bfvm Loader Test Suite

Tests the path from source bytes to Program:
1. Tokenizer (instruction bytes, comments, positions)
2. Instruction sequence
3. Jump table (nesting, involution)
4. Structural errors and diagnostics
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from bfvm import Instruction, load, tokenize
from bfvm.errors import LoadError, UnmatchedLoopClose, UnmatchedLoopOpen


# --- Test 1: Tokenizer ---

def test_tokenize_skips_comments():
    tokens = list(tokenize(b"a+b-c"))
    assert [t.instruction for t in tokens] == [Instruction.INCREMENT, Instruction.DECREMENT]
    assert [t.offset for t in tokens] == [1, 3]


def test_tokenize_tracks_line_and_column():
    tokens = list(tokenize("+\n  [\n]"))
    assert [(t.line, t.col) for t in tokens] == [(1, 1), (2, 3), (3, 1)]


def test_tokenize_accepts_str():
    assert [t.instruction for t in tokenize("><")] == [Instruction.MOVE_RIGHT, Instruction.MOVE_LEFT]


# --- Test 2: Instruction sequence ---

def test_all_eight_instructions():
    program = load(b"><+-.,[]")
    assert program.instructions == (
        Instruction.MOVE_RIGHT,
        Instruction.MOVE_LEFT,
        Instruction.INCREMENT,
        Instruction.DECREMENT,
        Instruction.WRITE,
        Instruction.READ,
        Instruction.LOOP_OPEN,
        Instruction.LOOP_CLOSE,
    )
    assert str(program) == "><+-.,[]"


@pytest.mark.parametrize("source", [b"", b"hello world", bytes(range(0, 43)), b"\xff\xfe\n\t"])
def test_comment_only_source_is_empty(source):
    program = load(source)
    assert len(program) == 0
    assert program.jumps == ()


def test_comments_do_not_shift_indices():
    program = load(b"x [ y + z ] w")
    assert len(program) == 3
    assert program.jumps[0] == 2
    assert program.offsets == (2, 6, 10)


def test_program_keeps_source():
    program = load("+ comment")
    assert program.source == b"+ comment"
    assert program[0] is Instruction.INCREMENT


# --- Test 3: Jump table ---

def test_simple_loop_jumps():
    program = load(b"+[-]")
    assert program.jumps == (None, 3, None, 1)


def test_nested_loop_jumps():
    program = load(b"[[][]]")
    assert program.jumps == (5, 2, 1, 4, 3, 0)
    assert program.loop_count == 3
    assert program.max_depth == 2


@pytest.mark.parametrize("source", [
    b"[]",
    b"+[>+[-]<-]>.",
    b"[[[[]]]][][[]]",
    b"++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.",
])
def test_jump_table_is_involution(source):
    program = load(source)
    for i, instruction in enumerate(program.instructions):
        target = program.jumps[i]
        if instruction is Instruction.LOOP_OPEN:
            assert target > i
            assert program[target] is Instruction.LOOP_CLOSE
            assert program.jumps[target] == i
        elif instruction is Instruction.LOOP_CLOSE:
            assert target < i
            assert program[target] is Instruction.LOOP_OPEN
            assert program.jumps[target] == i
        else:
            assert target is None


# --- Test 4: Structural errors ---

def test_unmatched_close():
    with pytest.raises(UnmatchedLoopClose) as exc:
        load(b"+]")
    assert exc.value.offset == 1
    assert exc.value.index == 1
    assert (exc.value.line, exc.value.col) == (1, 2)


def test_close_before_open_is_not_balanced():
    # Equal counts are not enough: nesting must be correct
    with pytest.raises(UnmatchedLoopClose):
        load(b"][")


def test_unmatched_open_reports_first():
    with pytest.raises(UnmatchedLoopOpen) as exc:
        load(b"[ [ [ ]")
    assert exc.value.offset == 0
    assert exc.value.positions == [0, 2]


def test_load_errors_share_base():
    with pytest.raises(LoadError):
        load(b"[")


def test_error_message_and_diagnostic():
    with pytest.raises(UnmatchedLoopClose) as exc:
        load(b"+++\n\t+-] trailing  \n")
    e = exc.value
    assert str(e) == "syntax error at line 2, column 4: unexpected closing bracket ']'"
    assert e.line == 2
    assert e.excerpt == "+-] trailing"
    assert e.arrow == 2
    assert e.diagnostic().splitlines()[-1] == "\t--^---------"


def test_diagnostic_expands_tabs():
    with pytest.raises(UnmatchedLoopOpen) as exc:
        load(b"+\t[")
    assert exc.value.excerpt == "+    ["
    assert exc.value.arrow == 5
