"""Named constants: eliminates magic strings and numbers across the codebase."""

from __future__ import annotations

RESERVED_WORDS: tuple[str, ...] = ("if", "else", "while", "function", "return")

MAIN_FUNCTION_NAME = "main"
TOPLEVEL_SCOPE = ""

# Value pushed for a slot or cell whose real content is written later.
PLACEHOLDER_VALUE = -1
# Operand of an instruction whose target is backpatched later.
PLACEHOLDER_TARGET = -1
# Initial content of the top-level return-value cell.
TOPLEVEL_RETURN_CELL_VALUE = 0
TOPLEVEL_BASE_POINTER = 0

LISTING_SENTINEL = "stack"

DEFAULT_MAX_STEPS = 100_000

TRACE_SEPARATOR = "-" * 63
