"""Stack-machine instruction set and its line-oriented text format."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel

from .errors import ErrorKind, ListingError
from . import constants

logger = logging.getLogger(__name__)


class Opcode(str, Enum):
    # Literals and arithmetic
    PUSH = "push"
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    GT = "gt"
    LT = "lt"
    # Control flow
    BEQ0 = "beq0"
    JMP = "jmp"
    RET = "ret"
    # Frame slots
    LOADL = "loadl"
    STOREL = "storel"
    LOADA = "loada"
    STOREA = "storea"
    # Registers
    LDBP = "ldbp"
    STRBP = "strbp"
    LDSP = "ldsp"
    STRSP = "strsp"
    LDPC = "ldpc"
    STRPC = "strpc"
    LDARGC = "ldargc"
    STRARGC = "strargc"
    # Output, only used by hand-written listings
    PRINT = "print"


OPERAND_OPCODES: frozenset[Opcode] = frozenset(
    {
        Opcode.PUSH,
        Opcode.BEQ0,
        Opcode.JMP,
        Opcode.LOADL,
        Opcode.STOREL,
        Opcode.LOADA,
        Opcode.STOREA,
        Opcode.LDPC,
    }
)

BRANCH_OPCODES: frozenset[Opcode] = frozenset({Opcode.BEQ0, Opcode.JMP})


class Instruction(BaseModel):
    opcode: Opcode
    operand: int = 0

    def __str__(self) -> str:
        if self.opcode in OPERAND_OPCODES:
            return f"{self.opcode.value} {self.operand}"
        return self.opcode.value


def format_listing(instructions: list[Instruction], sentinel: bool = True) -> str:
    """Serialize instructions one per line, optionally ending with the sentinel line."""
    lines = [str(inst) for inst in instructions]
    if sentinel:
        lines.append(constants.LISTING_SENTINEL)
    return "\n".join(lines) + "\n" if lines else ""


def parse_instruction(line: str, line_number: int = 0) -> Instruction:
    """Parse one ``mnemonic [operand]`` line."""
    parts = line.split()
    if not parts or len(parts) > 2:
        raise ListingError(
            ErrorKind.MALFORMED_LISTING, f"line {line_number}: expected 'mnemonic [operand]', got {line!r}"
        )
    try:
        opcode = Opcode(parts[0])
    except ValueError as exc:
        raise ListingError(
            ErrorKind.UNKNOWN_OPCODE, f"line {line_number}: unknown mnemonic {parts[0]!r}"
        ) from exc
    if len(parts) == 1:
        return Instruction(opcode=opcode)
    try:
        operand = int(parts[1])
    except ValueError as exc:
        raise ListingError(
            ErrorKind.MALFORMED_LISTING, f"line {line_number}: operand {parts[1]!r} is not an integer"
        ) from exc
    return Instruction(opcode=opcode, operand=operand)


def parse_listing(text: str) -> list[Instruction]:
    """Parse listing text; blank lines are skipped and the sentinel line ends the program."""
    instructions: list[Instruction] = []
    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        if line == constants.LISTING_SENTINEL:
            break
        instructions.append(parse_instruction(line, line_number))
    logger.info("Parsed listing with %d instructions", len(instructions))
    return instructions
