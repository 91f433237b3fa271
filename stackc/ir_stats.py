"""Static statistics over stack-machine programs."""

from __future__ import annotations

from collections import Counter

from .ir import BRANCH_OPCODES, Instruction, Opcode


def count_opcodes(instructions: list[Instruction]) -> dict[str, int]:
    """Map each mnemonic to how many times it occurs (empty input gives ``{}``)."""
    return dict(Counter(inst.opcode.value for inst in instructions))


def branch_targets(instructions: list[Instruction]) -> list[int]:
    """Sorted, de-duplicated addresses named by ``beq0`` and ``jmp`` operands."""
    return sorted({inst.operand for inst in instructions if inst.opcode in BRANCH_OPCODES})


def call_site_count(instructions: list[Instruction]) -> int:
    # Every compiled call site saves its return address with exactly one ldpc.
    return sum(1 for inst in instructions if inst.opcode == Opcode.LDPC)
