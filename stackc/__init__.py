"""Compiler and stack machine for a small integer-only imperative language."""

from .run import run, execute_program, execute_program_traced  # noqa: F401
from .api import (  # noqa: F401
    tokenize_source,
    parse_source,
    compile_source,
    dump_listing,
    load_listing,
    listing_stats,
    execute_listing,
    trace_listing,
)
