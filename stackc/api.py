"""Composable API functions for the compiler and stack machine.

Each function corresponds to a CLI workflow (compile to listing, execute a
listing, trace a listing) but is callable programmatically without
argparse.
"""

from __future__ import annotations

import logging

from .ast_types import ASTNode
from .codegen import generate
from .ir import Instruction, format_listing, parse_listing
from .ir_stats import count_opcodes
from .lexer import Token, tokenize
from .parser import parse
from .run import execute_program, execute_program_traced
from .run_types import ExecutionStats, VMConfig
from .trace_types import ExecutionTrace
from .vm_types import VMState

logger = logging.getLogger(__name__)


def tokenize_source(source: str) -> list[Token]:
    return tokenize(source)


def parse_source(source: str) -> ASTNode:
    return parse(tokenize(source))


def compile_source(source: str) -> list[Instruction]:
    """Lex, parse and generate code for a program.

    Args:
        source: The program text.

    Returns:
        The address-indexed instruction list.
    """
    logger.info("Compiling %d bytes of source", len(source))
    return generate(parse_source(source))


def dump_listing(source: str) -> str:
    """Compile source and return the text hand-off format, sentinel line included."""
    return format_listing(compile_source(source))


def load_listing(text: str) -> list[Instruction]:
    """Parse text hand-off format back into instructions."""
    return parse_listing(text)


def listing_stats(source: str) -> dict[str, int]:
    """Compile source and count how often each mnemonic is emitted."""
    return count_opcodes(compile_source(source))


def execute_listing(
    text: str, config: VMConfig = VMConfig()
) -> tuple[VMState, ExecutionStats]:
    """Parse a listing and execute it.

    Args:
        text: Listing text, as produced by dump_listing().
        config: Execution configuration.

    Returns:
        Tuple of (final VMState, ExecutionStats).
    """
    return execute_program(load_listing(text), config)


def trace_listing(
    text: str, config: VMConfig = VMConfig()
) -> tuple[VMState, ExecutionTrace]:
    """Parse a listing and execute it, recording the state before every step."""
    return execute_program_traced(load_listing(text), config)
