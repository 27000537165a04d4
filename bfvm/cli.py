#!/usr/bin/env python3
"""
bfvm - command-line front end

Usage:
    bfvm run <program.b>      Execute a program
    bfvm check <program.b>    Validate a program without running it

Program output goes to stdout (or -o FILE); diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional

from bfvm import __version__
from bfvm.engine import ExecutionResult, Interpreter
from bfvm.errors import IOFailure, LoadError
from bfvm.loader import Program, load
from bfvm.policy import DEFAULT_CELL_WIDTH, DEFAULT_TAPE_LENGTH, EofMode, Overflow, PolicyConfig


# ============================================================================
# Formatting helpers
# ============================================================================

class C:
    """ANSI colors."""
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    RESET = "\033[0m"

    @staticmethod
    def off():
        C.BOLD = C.DIM = C.RED = C.GREEN = C.YELLOW = C.CYAN = C.RESET = ""


def header(text: str) -> str:
    return f"\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}\n{C.BOLD}  {text}{C.RESET}\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}"


def ok(text: str) -> str:
    return f"  {C.GREEN}✓{C.RESET} {text}"


def fail(text: str) -> str:
    return f"  {C.RED}✗{C.RESET} {text}"


def dim(text: str) -> str:
    return f"{C.DIM}{text}{C.RESET}"


def err(text: str) -> None:
    print(text, file=sys.stderr)


def load_file(path: str) -> Program:
    """Read and load a program, exiting with a diagnostic on a syntax error."""
    source = Path(path).read_bytes()
    try:
        return load(source)
    except LoadError as e:
        err(fail(f"{path}: {e.diagnostic()}"))
        sys.exit(1)


# ============================================================================
# Commands
# ============================================================================

def cmd_run(args):
    """Execute a program."""
    program = load_file(args.program)
    config = PolicyConfig(
        cell_overflow=Overflow(args.overflow),
        pointer_overflow=Overflow(args.ptr_overflow),
        eof=EofMode(args.eof_mode),
        tape_length=args.max_memory,
        cell_width=args.cell_width,
    )

    interp = None
    try:
        with contextlib.ExitStack() as stack:
            if args.input == "-":
                input_stream = sys.stdin.buffer
            else:
                input_stream = stack.enter_context(open(args.input, "rb"))
            if args.output == "-":
                output_stream = sys.stdout.buffer
            else:
                output_stream = stack.enter_context(open(args.output, "wb"))

            interp = Interpreter(program, config, input_stream, output_stream)
            try:
                result = interp.execute(max_steps=args.max_steps)
            finally:
                output_stream.flush()
    except OSError as e:
        # Buffered output faults surface at flush or close, after the run
        if interp is None:
            raise
        state = interp.state
        result = ExecutionResult(success=False, state=state, error=IOFailure(state.ip, state.dp, e))

    if args.stats:
        err(header(f"RUN: {args.program}"))
        err(dim(f"  {config.describe()}"))
        err(textwrap.indent(result.summary(), "  "))

    if not result.success:
        err(fail(str(result.error)))
        sys.exit(1)


def cmd_check(args):
    """Validate a program without running it."""
    program = load_file(args.program)

    print(header(f"CHECK: {args.program}"))
    print(ok("Brackets balanced"))
    print(f"    Source bytes:  {len(program.source)}")
    print(f"    Instructions:  {len(program)}")
    print(f"    Loops:         {program.loop_count}")
    print(f"    Max nesting:   {program.max_depth}")


# ============================================================================
# CLI setup
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfvm",
        description="bfvm - interpreter for the eight-instruction tape language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        examples:
          bfvm run hello.b
          bfvm run rot13.b -i message.txt -o encoded.txt
          bfvm run counter.b -w saturate -W wrap -e set0
          bfvm run suspicious.b --max-steps 1000000 --stats
          bfvm check program.b
        """),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    modes = [m.value for m in Overflow]

    # run
    p = sub.add_parser("run", help="Execute a program")
    p.add_argument("program", help="Path to the program source")
    p.add_argument("-i", "--input", default="-", help='Input file ("-" for stdin)')
    p.add_argument("-o", "--output", default="-", help='Output file ("-" for stdout)')
    p.add_argument("-w", "--overflow", default=Overflow.WRAP.value, choices=modes,
                   help="Cell overflow mode")
    p.add_argument("-W", "--ptr-overflow", default=Overflow.CHECK.value, choices=modes,
                   help="Data pointer overflow mode")
    p.add_argument("-e", "--eof-mode", default=EofMode.NOOP.value,
                   choices=[m.value for m in EofMode], help="Behaviour on reading input after EOF")
    p.add_argument("-m", "--max-memory", type=int, default=DEFAULT_TAPE_LENGTH,
                   help="Tape length in cells")
    p.add_argument("--cell-width", type=int, default=DEFAULT_CELL_WIDTH, help="Cell width in bits")
    p.add_argument("--max-steps", type=int, help="Abort after this many instructions")
    p.add_argument("-s", "--stats", action="store_true", help="Print an execution summary to stderr")

    # check
    p = sub.add_parser("check", help="Validate a program without running it")
    p.add_argument("program", help="Path to the program source")

    return parser


def main(argv: Optional[list[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        C.off()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return

    commands = {
        "run": cmd_run,
        "check": cmd_check,
    }

    handler = commands[args.command]
    try:
        handler(args)
    except FileNotFoundError as e:
        err(fail(f"File not found: {e.filename}"))
        sys.exit(1)
    except OSError as e:
        err(fail(f"io error: {e}"))
        sys.exit(1)
    except ValueError as e:
        err(fail(f"Error: {e}"))
        sys.exit(1)
    except KeyboardInterrupt:
        err(fail("Interrupted"))
        sys.exit(130)


if __name__ == "__main__":
    main()
