"""
Static checks over a parsed expression.

The check phase walks the tree once, records every variable name it
references and validates each function call against the function registry.
It must run before evaluation; the one-shot evaluate() always runs it.
"""

import logging
from typing import Optional, Set

from .ast import BINARY_NODE_TYPES, AstNode, FunctionCallNode, unwind_left_chain
from .builtins import BUILTIN_FUNCTIONS, FunctionRegistry
from .errors import ArityError, CheckError, UnknownFunctionError

logger = logging.getLogger("arith.expr.checker")


class Checker:
    """Validates an AST and accumulates the variables it references."""

    def __init__(
        self,
        variables: Set[str],
        functions: Optional[FunctionRegistry] = None,
        source: Optional[str] = None,
    ):
        self._variables = variables
        self._functions = BUILTIN_FUNCTIONS if functions is None else functions
        self._source = source

    def check(self, node: AstNode) -> None:
        """Checks a node and its subtree."""
        node_type = node.type

        if node_type == "NumberLiteral":
            return

        if node_type == "Variable":
            self._variables.add(node.name)
            return

        if node_type == "Negate":
            self.check(node.operand)
            return

        if node_type in BINARY_NODE_TYPES:
            operand, spine = unwind_left_chain(node)
            self.check(operand)
            for binary in spine:
                self.check(binary.right)
            return

        if node_type == "FunctionCall":
            self._check_call(node)
            return

        raise TypeError(f"Unknown AST node type: {type(node).__name__}")

    def _check_call(self, node: FunctionCallNode) -> None:
        fn = self._functions.get(node.name)
        if fn is None:
            raise UnknownFunctionError(node.name, node.position, self._source)

        if len(node.args) != fn.arity:
            raise ArityError(
                node.name, fn.arity, len(node.args), node.position, self._source
            )

        for arg in node.args:
            self.check(arg)


def check(
    node: AstNode,
    variables: Optional[Set[str]] = None,
    functions: Optional[FunctionRegistry] = None,
    source: Optional[str] = None,
) -> Set[str]:
    """
    Checks an AST and collects the variables it references.

    Args:
        node: The AST to check
        variables: Set that receives the variable names (a new set if omitted)
        functions: Optional function registry (defaults to BUILTIN_FUNCTIONS)
        source: Source expression for error reporting

    Returns:
        The variable set

    Raises:
        UnknownFunctionError: If a call names an unknown function
        ArityError: If a call has the wrong number of arguments
    """
    if variables is None:
        variables = set()

    try:
        Checker(variables, functions, source).check(node)
    except CheckError as error:
        logger.debug(
            "expression_check_failed",
            extra={"error": error.message, "position": error.position},
        )
        raise

    return variables
