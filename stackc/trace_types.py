"""Trace data types for step-by-step execution replay."""

from __future__ import annotations

from dataclasses import dataclass, field

from .ir import Instruction
from .run_types import ExecutionStats
from . import constants


@dataclass(frozen=True)
class TraceStep:
    """Machine state observed immediately before one instruction executes."""

    step_index: int
    pc: int
    bp: int
    argc: int
    instruction: Instruction
    stack: tuple[int, ...]

    def render(self) -> str:
        """Format as the debugger prints it: registers, stack, separator rule."""
        return "\n".join(
            [
                f"pc = {self.pc}, bp = {self.bp}, argc = {self.argc}, "
                f"code = {self.instruction.opcode.value}, {self.instruction.operand}",
                f"[{', '.join(str(v) for v in self.stack)}]",
                constants.TRACE_SEPARATOR,
            ]
        )


@dataclass(frozen=True)
class ExecutionTrace:
    """Complete trace of an execution run.

    ``steps`` holds one snapshot per executed instruction, in order;
    ``final_stack`` is the stack once execution stopped.
    """

    steps: list[TraceStep] = field(default_factory=list)
    stats: ExecutionStats = field(default_factory=ExecutionStats)
    final_stack: tuple[int, ...] = ()
