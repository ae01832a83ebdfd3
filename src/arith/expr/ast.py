"""
Abstract Syntax Tree (AST) node types for the expression language.

The AST is produced by the parser, validated by the checker and consumed by
the evaluator. Nodes are immutable; the source position of a node is kept
for error reporting but does not take part in equality.
"""

import math
from abc import ABC
from dataclasses import dataclass, field
from decimal import Decimal
from typing import (
    TYPE_CHECKING,
    ClassVar,
    List,
    Literal,
    Mapping,
    Optional,
    Set,
    Tuple,
    Union,
)

if TYPE_CHECKING:
    from .builtins import FunctionRegistry

# ============================================================
# Operator Types
# ============================================================

BinaryOperator = Literal["+", "-", "*", "/"]

# Variable bindings supplied at evaluation time.
Environment = Mapping[str, float]


# ============================================================
# AST Node Types
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: int = field(default=0, compare=False, kw_only=True)
    """Position in source expression (for error reporting)."""

    def children(self) -> Tuple["AstNode", ...]:
        """Returns the direct sub-expressions, left to right."""
        return ()

    def check(
        self,
        variables: Set[str],
        functions: Optional["FunctionRegistry"] = None,
    ) -> None:
        """
        Validates the subtree and records every referenced variable.

        Raises:
            CheckError: On an unknown function or a wrong argument count
        """
        from .checker import check

        check(self, variables, functions)  # type: ignore[arg-type]

    def eval(
        self,
        env: Environment,
        functions: Optional["FunctionRegistry"] = None,
    ) -> float:
        """
        Computes the value of the subtree. Unbound variables read as 0.0.

        The tree must have passed check() first; a call to an unknown
        function raises EvaluationError.
        """
        from .evaluator import Evaluator

        return Evaluator(env, functions).evaluate(self)  # type: ignore[arg-type]


@dataclass(frozen=True)
class NumberLiteralNode(AstNodeBase):
    """Number literal node."""

    value: float

    @property
    def type(self) -> Literal["NumberLiteral"]:
        return "NumberLiteral"


@dataclass(frozen=True)
class VariableNode(AstNodeBase):
    """Variable reference node."""

    name: str

    @property
    def type(self) -> Literal["Variable"]:
        return "Variable"


@dataclass(frozen=True)
class NegateNode(AstNodeBase):
    """Unary minus node."""

    operand: "AstNode"

    @property
    def type(self) -> Literal["Negate"]:
        return "Negate"

    def children(self) -> Tuple["AstNode", ...]:
        return (self.operand,)


@dataclass(frozen=True)
class BinaryOpNode(AstNodeBase):
    """Base class for the four arithmetic operator nodes."""

    left: "AstNode"
    right: "AstNode"

    operator: ClassVar[BinaryOperator]

    def children(self) -> Tuple["AstNode", ...]:
        return (self.left, self.right)


@dataclass(frozen=True)
class AddNode(BinaryOpNode):
    """Addition node."""

    operator: ClassVar[BinaryOperator] = "+"

    @property
    def type(self) -> Literal["Add"]:
        return "Add"


@dataclass(frozen=True)
class SubtractNode(BinaryOpNode):
    """Subtraction node."""

    operator: ClassVar[BinaryOperator] = "-"

    @property
    def type(self) -> Literal["Subtract"]:
        return "Subtract"


@dataclass(frozen=True)
class MultiplyNode(BinaryOpNode):
    """Multiplication node."""

    operator: ClassVar[BinaryOperator] = "*"

    @property
    def type(self) -> Literal["Multiply"]:
        return "Multiply"


@dataclass(frozen=True)
class DivideNode(BinaryOpNode):
    """Division node."""

    operator: ClassVar[BinaryOperator] = "/"

    @property
    def type(self) -> Literal["Divide"]:
        return "Divide"


@dataclass(frozen=True)
class FunctionCallNode(AstNodeBase):
    """Function call node."""

    name: str
    args: Tuple["AstNode", ...]

    @property
    def type(self) -> Literal["FunctionCall"]:
        return "FunctionCall"

    def children(self) -> Tuple["AstNode", ...]:
        return tuple(self.args)


# Union type for all AST nodes
AstNode = Union[
    NumberLiteralNode,
    VariableNode,
    NegateNode,
    AddNode,
    SubtractNode,
    MultiplyNode,
    DivideNode,
    FunctionCallNode,
]

BINARY_NODE_TYPES = ("Add", "Subtract", "Multiply", "Divide")


def unwind_left_chain(node: AstNode) -> Tuple[AstNode, List[BinaryOpNode]]:
    """
    Splits a left-associative chain such as ``a + b - c * d``.

    Returns the leftmost non-binary operand and the binary nodes along the
    left edge, innermost first. Folding the operands from that list in
    order visits the chain left to right without recursing per level.
    """
    spine: List[BinaryOpNode] = []
    while node.type in BINARY_NODE_TYPES:
        spine.append(node)
        node = node.left
    spine.reverse()
    return node, spine


# ============================================================
# AST Utilities
# ============================================================


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    count = 0
    stack = [node]

    while stack:
        current = stack.pop()
        count += 1
        stack.extend(current.children())

    return count


def calculate_ast_depth(node: AstNode) -> int:
    """Calculates the maximum depth of an AST."""
    depth = 0
    stack = [(node, 1)]

    while stack:
        current, level = stack.pop()
        depth = max(depth, level)
        stack.extend((child, level + 1) for child in current.children())

    return depth


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    lines: List[str] = []
    stack = [(node, indent)]

    while stack:
        current, level = stack.pop()
        prefix = "  " * level

        if current.type == "NumberLiteral":
            lines.append(f"{prefix}Number: {current.value}")
        elif current.type == "Variable":
            lines.append(f"{prefix}Variable: {current.name}")
        elif current.type == "Negate":
            lines.append(f"{prefix}Negate")
        elif current.type in BINARY_NODE_TYPES:
            lines.append(f"{prefix}{current.type}: {current.operator}")
        elif current.type == "FunctionCall":
            lines.append(f"{prefix}FunctionCall: {current.name}")
        else:
            lines.append(f"{prefix}Unknown: {current}")
            continue

        stack.extend((child, level + 1) for child in reversed(current.children()))

    return "\n".join(lines)


def to_source(node: AstNode) -> str:
    """
    Returns the canonical source text of an AST.

    Parsing the result yields a tree equal to ``node``. Binary operations
    are fully parenthesised and negation is written ``(-x)`` so that the
    term-level binding of unary minus cannot regroup it.

    Raises:
        ValueError: If a number literal is negative or not finite
        TypeError: If the tree holds an unknown node type
    """
    if node.type == "NumberLiteral":
        return _format_number(node.value)

    if node.type == "Variable":
        return node.name

    if node.type == "Negate":
        return f"(-{to_source(node.operand)})"

    if node.type in BINARY_NODE_TYPES:
        operand, spine = unwind_left_chain(node)
        text = to_source(operand)
        for binary in spine:
            text = f"({text} {binary.operator} {to_source(binary.right)})"
        return text

    if node.type == "FunctionCall":
        args_str = ", ".join(to_source(a) for a in node.args)
        return f"{node.name}({args_str})"

    raise TypeError(f"Unknown AST node type: {type(node).__name__}")


def _format_number(value: float) -> str:
    """Formats a literal in positional notation (the lexer has no exponents)."""
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Number literal {value!r} has no source form")
    return format(Decimal(repr(value)), "f")
