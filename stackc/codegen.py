"""CodeGenerator: single-pass AST → stack-machine instruction lowering.

The generator object is the compiler context: it owns the instruction
buffer, the per-function symbol tables, the function table and the
current-function marker. Forward references (branch targets, the return
address of a call site, the bootstrap jump to ``main``) are emitted as
placeholders and overwritten in place once the target address is known.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .ast_types import BINARY_NODE_KINDS, ASTNode, NodeKind
from .errors import CodeGenError, ErrorKind
from .ir import Instruction, Opcode
from . import constants

logger = logging.getLogger(__name__)

BINARY_OPCODES: dict[NodeKind, Opcode] = {
    NodeKind.ADD: Opcode.ADD,
    NodeKind.SUB: Opcode.SUB,
    NodeKind.MUL: Opcode.MUL,
    NodeKind.DIV: Opcode.DIV,
    NodeKind.MOD: Opcode.MOD,
    NodeKind.GT: Opcode.GT,
    NodeKind.LT: Opcode.LT,
}


@dataclass(frozen=True)
class FunctionInfo:
    address: int
    param_count: int


class CodeGenerator:
    def __init__(self):
        self._code: list[Instruction] = []
        self._locals: dict[str, dict[str, int]] = {}
        self._params: dict[str, dict[str, int]] = {}
        self._functions: dict[str, FunctionInfo] = {}
        self._current_function: str = constants.TOPLEVEL_SCOPE
        self._DISPATCH: dict[NodeKind, Callable[[ASTNode], None]] = {
            NodeKind.NUMBER: self._gen_number,
            NodeKind.IDENTIFIER: self._gen_identifier,
            NodeKind.CALL: self._gen_call,
            NodeKind.ASSIGNMENT: self._gen_assignment,
            NodeKind.NOOP: self._gen_noop,
            NodeKind.IF: self._gen_if,
            NodeKind.WHILE: self._gen_while,
            NodeKind.FUNCTION_DECL: self._gen_function_decl,
            NodeKind.RETURN: self._gen_return,
            NodeKind.BLOCK: self._gen_block,
            NodeKind.TOPLEVEL: self._gen_toplevel,
        }
        for kind in BINARY_NODE_KINDS:
            self._DISPATCH[kind] = self._gen_binary

    # ── symbol table views ───────────────────────────────────────

    @property
    def functions(self) -> dict[str, FunctionInfo]:
        return dict(self._functions)

    def local_slots(self, function_name: str) -> dict[str, int]:
        return dict(self._locals.get(function_name, {}))

    def parameter_slots(self, function_name: str) -> dict[str, int]:
        return dict(self._params.get(function_name, {}))

    # ── helpers ──────────────────────────────────────────────────

    @property
    def _next_address(self) -> int:
        return len(self._code)

    def _emit(self, opcode: Opcode, operand: int = 0) -> int:
        """Append an instruction and return its address."""
        self._code.append(Instruction(opcode=opcode, operand=operand))
        return len(self._code) - 1

    def _patch(self, address: int, operand: int):
        previous = self._code[address]
        self._code[address] = Instruction(opcode=previous.opcode, operand=operand)

    def _enter_scope(self, function_name: str):
        self._current_function = function_name
        self._locals[function_name] = {}
        self._params[function_name] = {}

    def _caller_param_count(self) -> int:
        info = self._functions.get(self._current_function)
        return info.param_count if info else 0

    # ── entry point ──────────────────────────────────────────────

    def generate(self, tree: ASTNode) -> list[Instruction]:
        self._code = []
        self._locals = {}
        self._params = {}
        self._functions = {}
        self._enter_scope(constants.TOPLEVEL_SCOPE)
        self._gen(tree)
        logger.info(
            "Generated %d instructions for %d functions",
            len(self._code),
            len(self._functions),
        )
        return list(self._code)

    def _gen(self, node: ASTNode):
        handler = self._DISPATCH.get(node.kind)
        if handler is None:
            raise CodeGenError(ErrorKind.UNKNOWN_NODE, str(node.kind))
        handler(node)

    # ── expressions ──────────────────────────────────────────────

    def _gen_number(self, node: ASTNode):
        self._emit(Opcode.PUSH, node.value)

    def _gen_binary(self, node: ASTNode):
        # The VM pops the left operand first, so it must end up on top.
        left, right = node.children
        self._gen(right)
        self._gen(left)
        self._emit(BINARY_OPCODES[node.kind])

    def _gen_identifier(self, node: ASTNode):
        name = node.value
        local_slots = self._locals[self._current_function]
        if name in local_slots:
            self._emit(Opcode.LOADL, local_slots[name])
            return
        param_slots = self._params[self._current_function]
        if name in param_slots:
            self._emit(Opcode.LOADA, param_slots[name])
            return
        scope = self._current_function or "<toplevel>"
        raise CodeGenError(ErrorKind.UNDECLARED_VARIABLE, f"'{name}' in {scope}")

    def _gen_call(self, node: ASTNode):
        name = node.value
        info = self._functions.get(name)
        if info is None:
            raise CodeGenError(ErrorKind.UNDEFINED_FUNCTION, f"'{name}'")
        argc = len(node.children)
        if argc != info.param_count:
            raise CodeGenError(
                ErrorKind.ARGUMENT_COUNT_MISMATCH,
                f"'{name}' takes {info.param_count} arguments, {argc} given",
            )
        self._emit(Opcode.PUSH, constants.PLACEHOLDER_VALUE)
        return_address_at = self._emit(Opcode.LDPC, constants.PLACEHOLDER_TARGET)
        for argument in node.children:
            self._gen(argument)
        self._emit(Opcode.PUSH, argc)
        self._emit(Opcode.STRARGC)
        self._emit(Opcode.LDBP)
        self._emit(Opcode.LDSP)
        self._emit(Opcode.STRBP)
        jump_at = self._emit(Opcode.JMP, info.address)
        # Return lands on the epilogue, which restores the caller's argc.
        self._patch(return_address_at, jump_at - return_address_at + 1)
        self._emit(Opcode.PUSH, self._caller_param_count())
        self._emit(Opcode.STRARGC)

    # ── statements ───────────────────────────────────────────────

    def _gen_noop(self, node: ASTNode):
        pass

    def _gen_block(self, node: ASTNode):
        for child in node.children:
            self._gen(child)

    def _gen_assignment(self, node: ASTNode):
        target, value = node.children
        local_slots = self._locals[self._current_function]
        if target.value not in local_slots:
            local_slots[target.value] = len(local_slots)
            self._emit(Opcode.PUSH, constants.PLACEHOLDER_VALUE)
        self._gen(value)
        self._emit(Opcode.STOREL, local_slots[target.value])

    def _gen_if(self, node: ASTNode):
        condition, then_branch = node.children[0], node.children[1]
        self._gen(condition)
        branch_at = self._emit(Opcode.BEQ0, constants.PLACEHOLDER_TARGET)
        self._gen(then_branch)
        if len(node.children) < 3:
            self._patch(branch_at, self._next_address)
            return
        skip_at = self._emit(Opcode.JMP, constants.PLACEHOLDER_TARGET)
        self._patch(branch_at, self._next_address)
        self._gen(node.children[2])
        self._patch(skip_at, self._next_address)

    def _gen_while(self, node: ASTNode):
        condition, body = node.children
        condition_at = self._next_address
        self._gen(condition)
        branch_at = self._emit(Opcode.BEQ0, constants.PLACEHOLDER_TARGET)
        self._gen(body)
        self._emit(Opcode.JMP, condition_at)
        self._patch(branch_at, self._next_address)

    def _gen_return(self, node: ASTNode):
        self._gen(node.children[0])
        self._emit(Opcode.RET)

    def _gen_function_decl(self, node: ASTNode):
        name = node.value
        if name in self._functions:
            raise CodeGenError(ErrorKind.DUPLICATE_FUNCTION, f"'{name}'")
        body, parameters = node.children[0], node.children[1:]
        self._functions[name] = FunctionInfo(
            address=self._next_address, param_count=len(parameters)
        )
        self._enter_scope(name)
        # Arguments are pushed in source order, so the last one sits nearest bp.
        param_slots = self._params[name]
        for slot, parameter in enumerate(reversed(parameters)):
            param_slots[parameter.value] = slot
        logger.debug("Function '%s' at address %d", name, self._functions[name].address)
        self._gen(body)
        self._current_function = constants.TOPLEVEL_SCOPE

    def _gen_toplevel(self, node: ASTNode):
        self._emit(Opcode.PUSH, constants.TOPLEVEL_RETURN_CELL_VALUE)
        bootstrap_at = self._emit(Opcode.JMP, constants.PLACEHOLDER_TARGET)
        for child in node.children:
            if child.kind == NodeKind.ASSIGNMENT:
                logger.warning(
                    "Top-level assignment to '%s' at address %d is skipped by the jump to '%s'",
                    child.children[0].value,
                    self._next_address,
                    constants.MAIN_FUNCTION_NAME,
                )
            self._gen(child)
        main = self._functions.get(constants.MAIN_FUNCTION_NAME)
        if main is None:
            raise CodeGenError(
                ErrorKind.MISSING_MAIN, "declare 'function main() { ... }' as the entry point"
            )
        self._patch(bootstrap_at, main.address)


def generate(tree: ASTNode) -> list[Instruction]:
    """Lower a ``toplevel`` AST into an instruction list."""
    return CodeGenerator().generate(tree)
