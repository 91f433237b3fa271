"""Shared helpers for the compiler and stack machine test suite."""

import logging

from stackc.api import compile_source
from stackc.ir import Instruction, Opcode
from stackc.run import execute_program
from stackc.run_types import VMConfig
from stackc.vm_types import VMState

logger = logging.getLogger(__name__)


def make_instructions(*specs) -> list[Instruction]:
    """Build an instruction list from (opcode,) or (opcode, operand) tuples."""
    return [
        Instruction(opcode=spec[0], operand=spec[1] if len(spec) > 1 else 0)
        for spec in specs
    ]


def mnemonics(instructions: list[Instruction]) -> list[str]:
    return [str(inst) for inst in instructions]


def find_all(instructions: list[Instruction], opcode: Opcode) -> list[int]:
    """Return the addresses of every instruction matching *opcode*."""
    return [addr for addr, inst in enumerate(instructions) if inst.opcode == opcode]


def run_source(source: str, max_steps: int = 10_000) -> VMState:
    """Compile and execute *source*, returning the final machine state."""
    instructions = compile_source(source)
    vm, stats = execute_program(instructions, VMConfig(max_steps=max_steps))
    logger.info("Program finished after %d steps", stats.steps)
    return vm


def main_result(source: str) -> int:
    """Return the value ``main`` stored in the top-level return-value cell."""
    vm = run_source(source)
    assert vm.halted, "program ended without returning from main"
    return vm.stack[0]
