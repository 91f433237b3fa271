"""Stack machine: single-instruction semantics.

:func:`execute_instruction` performs exactly one fetch-execute
step against a :class:`VMState`; the loop that drives it lives in
``run.py``.
"""

from __future__ import annotations

import logging
from typing import Callable

from .errors import ErrorKind, VMError
from .ir import Instruction, Opcode
from .run_types import VMConfig
from .vm_types import VMState
from . import constants

logger = logging.getLogger(__name__)

OutputFn = Callable[[int], None]


def _floor_div(a: int, b: int) -> int:
    if b == 0:
        raise VMError(ErrorKind.DIVISION_BY_ZERO, f"{a} / {b}")
    return a // b


def _floor_mod(a: int, b: int) -> int:
    if b == 0:
        raise VMError(ErrorKind.DIVISION_BY_ZERO, f"{a} % {b}")
    return a % b


class Operators:
    """Binary operators; the first popped value is the left operand."""

    BINOP_TABLE: dict[Opcode, Callable[[int, int], int]] = {
        Opcode.ADD: lambda a, b: a + b,
        Opcode.SUB: lambda a, b: a - b,
        Opcode.MUL: lambda a, b: a * b,
        Opcode.DIV: _floor_div,
        Opcode.MOD: _floor_mod,
        Opcode.GT: lambda a, b: 1 if a > b else 0,
        Opcode.LT: lambda a, b: 1 if a < b else 0,
    }

    @classmethod
    def eval_binop(cls, opcode: Opcode, vm: VMState) -> int:
        left = vm.pop()
        right = vm.pop()
        return cls.BINOP_TABLE[opcode](left, right)


def _return(vm: VMState, config: VMConfig) -> int | None:
    if vm.in_toplevel_frame:
        if config.halt_on_toplevel_return:
            value = vm.pop()
            vm.write(constants.TOPLEVEL_BASE_POINTER, value)
            vm.halted = True
            logger.debug("Top-level return of %d at pc=%d, halting", value, vm.pc)
        return None
    value = vm.pop()
    cell = vm.return_cell_index()
    vm.write(cell, value)
    target = vm.read(vm.return_address_index())
    vm.bp = vm.read(vm.bp)
    vm.truncate(cell)
    return target


def _branch_if_zero(vm: VMState, operand: int) -> int | None:
    return operand if vm.pop() == 0 else None


def _store_stack_pointer(vm: VMState) -> None:
    vm.truncate(vm.pop())


def execute_instruction(
    vm: VMState,
    instruction: Instruction,
    program_size: int,
    config: VMConfig = VMConfig(),
    output: OutputFn = print,
) -> None:
    """Execute one instruction and advance ``vm.pc``.

    Raises:
        VMError: on an unknown opcode, stack underflow, an out-of-range
            slot, division by zero, or a jump outside the program.
    """
    opcode = instruction.opcode
    n = instruction.operand
    target: int | None = None

    if opcode in Operators.BINOP_TABLE:
        vm.push(Operators.eval_binop(opcode, vm))
    elif opcode == Opcode.PUSH:
        vm.push(n)
    elif opcode == Opcode.BEQ0:
        target = _branch_if_zero(vm, n)
    elif opcode == Opcode.JMP:
        target = n
    elif opcode == Opcode.LOADL:
        vm.push(vm.read(vm.local_index(n)))
    elif opcode == Opcode.STOREL:
        vm.write(vm.local_index(n), vm.pop())
    elif opcode == Opcode.LOADA:
        vm.push(vm.read(vm.param_index(n)))
    elif opcode == Opcode.STOREA:
        vm.write(vm.param_index(n), vm.pop())
    elif opcode == Opcode.LDBP:
        vm.push(vm.bp)
    elif opcode == Opcode.STRBP:
        vm.bp = vm.pop()
    elif opcode == Opcode.LDSP:
        vm.push(vm.top_index)
    elif opcode == Opcode.STRSP:
        _store_stack_pointer(vm)
    elif opcode == Opcode.LDPC:
        vm.push(vm.pc + n)
    elif opcode == Opcode.STRPC:
        target = vm.pop()
    elif opcode == Opcode.LDARGC:
        vm.push(vm.argc)
    elif opcode == Opcode.STRARGC:
        vm.argc = vm.pop()
    elif opcode == Opcode.RET:
        target = _return(vm, config)
    elif opcode == Opcode.PRINT:
        output(vm.pop())
    else:
        raise VMError(ErrorKind.UNKNOWN_OPCODE, f"{opcode!r} at pc={vm.pc}")

    if target is None:
        vm.pc += 1
        return
    if not 0 <= target <= program_size:
        raise VMError(
            ErrorKind.INVALID_JUMP_TARGET,
            f"{opcode.value} to {target} from pc={vm.pc} (program size {program_size})",
        )
    vm.pc = target
