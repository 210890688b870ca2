#!/usr/bin/env python3
"""
CLI for the V12 evaluator.

Usage:
    python -m v12 [--config FILE] run FILE [--debug] [--trace] [--no-color]
    python -m v12 check FILE
    python -m v12 version

FILE is a program serialized as a YAML or JSON AST document (see
v12.loader). Program output goes to the terminal: console.log to stdout,
console.warn and console.error to stderr.

Examples:
    # Run the conformance script
    python -m v12 run examples/all.yaml

    # Run with engine messages and a statement trace
    python -m v12 run examples/all.yaml --debug --trace

    # Report scope and mutability errors without running
    python -m v12 check examples/all.yaml
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import RuntimeConfig, load_config
from .errors import V12Error
from .runtime.sink import ConsoleSink, BOLD, RED, RESET


def _log(message: str) -> None:
    print(f"[V12]: {message}", file=sys.stderr)


def _report_error(message: str, color: bool) -> None:
    text = f"[V12]: Error: {message}"
    if color:
        text = f"{BOLD}{RED}{text}{RESET}"
    print(text, file=sys.stderr)


def _load(path: str, config: RuntimeConfig):
    """Load a program, reporting problems; returns None on failure."""
    from .loader import load_program

    try:
        return load_program(path)
    except FileNotFoundError as e:
        _report_error(str(e), config.color)
    except OSError as e:
        _report_error(f"cannot read {path}: {e.strerror or e}", config.color)
    except V12Error as e:
        _report_error(e.diagnostic.format(), config.color)
    return None


def _trace(stmt, ctx) -> None:
    _log(f"trace: {stmt.span.start} {type(stmt).__name__} (scope depth {ctx.current_scope.depth})")


def cmd_run(args, config: RuntimeConfig) -> int:
    """Run a program."""
    from .runtime import Interpreter
    from .errors import EvaluationError

    program = _load(args.file, config)
    if program is None:
        return 1

    interpreter = Interpreter(
        sink=ConsoleSink(color=config.color),
        trace=_trace if config.trace else None,
    )
    if config.debug:
        _log("Engine has started successfully.")

    try:
        interpreter.run(program)
    except EvaluationError as e:
        _report_error(e.diagnostic.format(), config.color)
        return 1

    if config.debug:
        _log(f"Finished {program.name} ({len(program.statements)} statement(s)).")
    return 0


def cmd_check(args, config: RuntimeConfig) -> int:
    """Statically check a program."""
    from .checker import check

    program = _load(args.file, config)
    if program is None:
        return 1

    result = check(program)
    for diag in result.diagnostics:
        print(diag.format())

    if result.has_errors:
        print(f"{program.name}: {len(result.errors)} error(s)")
        return 1
    print(f"OK: {program.name} - {len(program.statements)} statement(s), no errors")
    return 0


def cmd_version(args, config: RuntimeConfig) -> int:
    """Print the version."""
    print(f"V12 {__version__}")
    print("Evaluator core with arbitrary-precision integers")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m v12',
        description='V12 program runner',
    )
    parser.add_argument('--config', metavar='FILE', help='YAML config file')

    subparsers = parser.add_subparsers(dest='action', required=True)

    run_parser = subparsers.add_parser('run', help='Run a program')
    run_parser.add_argument('file', help='Program document (.yaml, .yml or .json)')
    run_parser.add_argument('--debug', action='store_true', default=None,
                            help='Print engine status messages')
    run_parser.add_argument('--trace', action='store_true', default=None,
                            help='Print each statement before it executes')
    run_parser.add_argument('--no-color', dest='color', action='store_false', default=None,
                            help='Disable colored warn/error output')

    check_parser = subparsers.add_parser('check', help='Check a program for errors')
    check_parser.add_argument('file', help='Program document (.yaml, .yml or .json)')

    subparsers.add_parser('version', help='Show version information')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        _report_error(str(e), color=False)
        return 1
    config = config.with_overrides(
        debug=getattr(args, 'debug', None),
        trace=getattr(args, 'trace', None),
        color=getattr(args, 'color', None),
    )

    if args.action == 'run':
        return cmd_run(args, config)
    elif args.action == 'check':
        return cmd_check(args, config)
    elif args.action == 'version':
        return cmd_version(args, config)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
