"""Stack machine state (pure data plus bounds-checked stack access).

One growable integer stack serves as operand stack, parameter/local
storage and call-frame bookkeeping. For a call with ``argc`` arguments,
addresses relative to ``bp`` are::

    bp - argc - 2   return-value cell
    bp - argc - 1   return address
    bp - n - 1      parameter slot n   (0 <= n < argc)
    bp              saved caller bp
    bp + n + 1      local slot n

The top-level frame has ``bp == 0`` with its return-value cell at index 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ErrorKind, VMError
from . import constants


@dataclass
class VMState:
    stack: list[int] = field(default_factory=list)
    pc: int = 0
    bp: int = constants.TOPLEVEL_BASE_POINTER
    argc: int = 0
    halted: bool = False

    # ── frame addressing ─────────────────────────────────────────

    def local_index(self, slot: int) -> int:
        return self.bp + slot + 1

    def param_index(self, slot: int) -> int:
        return self.bp - slot - 1

    def return_cell_index(self) -> int:
        return self.bp - self.argc - 2

    def return_address_index(self) -> int:
        return self.bp - self.argc - 1

    @property
    def in_toplevel_frame(self) -> bool:
        return self.bp == constants.TOPLEVEL_BASE_POINTER

    # ── stack access ─────────────────────────────────────────────

    def push(self, value: int):
        self.stack.append(value)

    def pop(self) -> int:
        if not self.stack:
            raise VMError(ErrorKind.STACK_UNDERFLOW, f"pop from empty stack at pc={self.pc}")
        return self.stack.pop()

    @property
    def top_index(self) -> int:
        return len(self.stack) - 1

    def read(self, index: int) -> int:
        if not 0 <= index < len(self.stack):
            raise VMError(
                ErrorKind.SLOT_OUT_OF_RANGE,
                f"read of index {index} with stack size {len(self.stack)} at pc={self.pc}",
            )
        return self.stack[index]

    def write(self, index: int, value: int):
        """Store into ``index``; writing above the top grows the stack with placeholders."""
        if index < 0:
            raise VMError(
                ErrorKind.SLOT_OUT_OF_RANGE,
                f"write to index {index} at pc={self.pc}",
            )
        if index >= len(self.stack):
            self.stack.extend([constants.PLACEHOLDER_VALUE] * (index - len(self.stack) + 1))
        self.stack[index] = value

    def truncate(self, top_index: int):
        """Discard everything above ``top_index``."""
        if not -1 <= top_index < len(self.stack):
            raise VMError(
                ErrorKind.SLOT_OUT_OF_RANGE,
                f"cannot set stack top to {top_index} with stack size {len(self.stack)}",
            )
        del self.stack[top_index + 1 :]

    def to_dict(self) -> dict:
        return {
            "pc": self.pc,
            "bp": self.bp,
            "argc": self.argc,
            "halted": self.halted,
            "stack": list(self.stack),
        }
