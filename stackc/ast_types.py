"""AST data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeKind(str, Enum):
    # Expressions
    NUMBER = "number"
    IDENTIFIER = "identifier"
    CALL = "call"
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    LT = "lt"
    GT = "gt"
    # Statements
    ASSIGNMENT = "assignment"
    NOOP = "noop"
    IF = "if"
    WHILE = "while"
    FUNCTION_DECL = "function_decl"
    PARAMETER = "parameter"
    RETURN = "return"
    BLOCK = "block"
    TOPLEVEL = "toplevel"


BINARY_NODE_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.ADD,
        NodeKind.SUB,
        NodeKind.MUL,
        NodeKind.DIV,
        NodeKind.MOD,
        NodeKind.LT,
        NodeKind.GT,
    }
)


@dataclass
class ASTNode:
    """A tagged tree node.

    Children are owned exclusively by their parent. Layout per kind:

    - ``call``: value = callee name, children = argument expressions
    - binary kinds: children = [left, right]
    - ``assignment``: children = [identifier, expression]
    - ``if``: children = [condition, then] or [condition, then, else]
    - ``while``: children = [condition, body]
    - ``function_decl``: value = name, children = [body, parameter...]
    - ``return``: children = [expression]
    """

    kind: NodeKind
    value: Any = None
    children: list[ASTNode] = field(default_factory=list)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"kind": self.kind.value}
        if self.value is not None:
            d["value"] = self.value
        if self.children:
            d["children"] = [child.to_dict() for child in self.children]
        return d

    def __str__(self) -> str:
        head = self.kind.value if self.value is None else f"{self.kind.value}:{self.value}"
        if not self.children:
            return head
        return f"({head} {' '.join(str(c) for c in self.children)})"
