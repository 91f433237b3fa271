"""Error kinds and the exception hierarchy shared by every pipeline stage.

Each stage raises its own subclass of :class:`StackcError`; the error
carries a machine-readable :class:`ErrorKind` next to the human-readable
message, so callers and tests can tell failures apart without matching on
message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    # Lexical
    UNRECOGNIZED_CHARACTER = "Unrecognized character"

    # Syntax
    UNEXPECTED_TOKEN = "Unexpected token"
    EXPECTED_FACTOR = "Expected number, identifier or '('"
    MISSING_RPAREN = "Missing ')'"
    EXPECTED_IDENTIFIER = "Expected identifier"
    EXPECTED_ASSIGN = "Expected '='"
    MISSING_SEMICOLON = "Missing ';'"
    EXPECTED_LPAREN = "Expected '('"
    EXPECTED_LBRACE = "Expected '{'"
    MISSING_RBRACE = "Missing '}'"
    INVALID_STATEMENT = "Invalid start of statement"
    INVALID_TOPLEVEL = "Only assignments and function declarations allowed at top level"
    NESTED_FUNCTION = "Nested function declaration"
    RETURN_OUTSIDE_FUNCTION = "Return outside function"

    # Code generation
    UNDECLARED_VARIABLE = "Undeclared variable"
    DUPLICATE_FUNCTION = "Duplicate function definition"
    UNDEFINED_FUNCTION = "Call to undefined function"
    ARGUMENT_COUNT_MISMATCH = "Argument count mismatch"
    MISSING_MAIN = "No 'main' function"
    UNKNOWN_NODE = "Unknown AST node"

    # Execution
    UNKNOWN_OPCODE = "Unknown opcode"
    STACK_UNDERFLOW = "Stack underflow"
    SLOT_OUT_OF_RANGE = "Stack slot out of range"
    DIVISION_BY_ZERO = "Division by zero"
    INVALID_JUMP_TARGET = "Invalid jump target"
    STEP_LIMIT_EXCEEDED = "Step limit exceeded"

    # Text hand-off format
    MALFORMED_LISTING = "Malformed instruction listing"


class StackcError(Exception):
    """Base class for every error raised by the compiler or the VM."""

    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        self.detail = message
        text = f"{kind.value}: {message}" if message else kind.value
        super().__init__(f"{self.__class__.__name__}: {text}")


class LexError(StackcError):
    pass


class ParseError(StackcError):
    pass


class CodeGenError(StackcError):
    pass


class VMError(StackcError):
    pass


class ListingError(StackcError):
    """Raised when instruction text cannot be parsed into instructions."""

    pass
