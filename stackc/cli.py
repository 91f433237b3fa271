"""Command-line entry points: stackc-compile, stackc-vm and stackc-run."""

from __future__ import annotations

import argparse
import logging
import sys

from .api import dump_listing, load_listing
from .errors import StackcError
from .run import execute_program, run
from .run_types import VMConfig
from . import constants


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )


def _format_stack(stack: list[int]) -> str:
    return f"[{', '.join(str(v) for v in stack)}]"


def _read_source(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


def _add_execution_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--max-steps", "-n", type=int, default=constants.DEFAULT_MAX_STEPS,
        help=f"Maximum execution steps, 0 for unlimited (default: {constants.DEFAULT_MAX_STEPS})",
    )
    parser.add_argument(
        "--no-halt-on-return", action="store_true",
        help="Treat 'ret' in the top-level frame as a no-op instead of halting",
    )


def _vm_config(args: argparse.Namespace, verbose: bool) -> VMConfig:
    return VMConfig(
        max_steps=args.max_steps or None,
        verbose=verbose,
        halt_on_toplevel_return=not args.no_halt_on_return,
    )


def compile_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compile a program into a stack-machine listing on stdout")
    parser.add_argument("source", help="Program source file")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log pipeline stage summaries to stderr")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        sys.stdout.write(dump_listing(_read_source(args.source)))
    except (StackcError, OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def vm_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Execute a stack-machine listing read from stdin")
    parser.add_argument("--file", "-f", default=None,
                        help="Read the listing from a file instead of stdin")
    parser.add_argument("--trace", "-t", action="store_true",
                        help="Print pc, bp, argc, instruction and stack before every step")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log pipeline stage summaries to stderr")
    _add_execution_arguments(parser)
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        text = _read_source(args.file) if args.file else sys.stdin.read()
        vm, _ = execute_program(load_listing(text), _vm_config(args, args.trace))
    except (StackcError, OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(_format_stack(vm.stack))
    return 0


def run_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compile and execute a program in one step")
    parser.add_argument("source", help="Program source file")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Print the listing, step trace and pipeline statistics")
    _add_execution_arguments(parser)
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        vm = run(_read_source(args.source), _vm_config(args, args.verbose))
    except (StackcError, OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(_format_stack(vm.stack))
    return 0


if __name__ == "__main__":
    sys.exit(run_main())
