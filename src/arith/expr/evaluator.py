"""
Expression evaluator.

Evaluates an AST against an environment of variable bindings and returns a
float. Arithmetic follows IEEE-754 double precision: division by zero
yields an infinity or NaN and is never trapped.

Variable handling semantics:
- Evaluator (and AstNode.eval) reads unbound variables as 0.0.
- The one-shot evaluate() is strict and rejects unbound variables.
"""

import logging
import math
import operator
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .ast import BINARY_NODE_TYPES, AstNode, Environment, unwind_left_chain
from .builtins import BUILTIN_FUNCTIONS, BuiltinContext, FunctionRegistry, call_builtin
from .checker import check
from .errors import ExpressionError, MissingVariableError
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits
from .parser import parse

logger = logging.getLogger("arith.expr.evaluator")


@dataclass
class EvaluationResult:
    """Result of a non-raising evaluation."""

    value: Optional[float]
    """The evaluated value."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[str] = None
    """Error message if evaluation failed."""


def _divide(left: float, right: float) -> float:
    """IEEE-754 division; Python raises on a zero divisor."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


_BINARY_OPERATIONS: Dict[str, Callable[[float, float], float]] = {
    "Add": operator.add,
    "Subtract": operator.sub,
    "Multiply": operator.mul,
    "Divide": _divide,
}


class Evaluator:
    """Evaluates an AST node and returns the result."""

    def __init__(
        self,
        env: Optional[Environment] = None,
        functions: Optional[FunctionRegistry] = None,
        source: Optional[str] = None,
    ):
        self._env = env if env is not None else {}
        self._functions = BUILTIN_FUNCTIONS if functions is None else functions
        self._source = source or ""

    def evaluate(self, node: AstNode) -> float:
        """Evaluates an AST node and returns the value."""
        node_type = node.type

        if node_type == "NumberLiteral":
            return float(node.value)

        if node_type == "Variable":
            return float(self._env.get(node.name, 0.0))

        if node_type == "Negate":
            return -self.evaluate(node.operand)

        if node_type in BINARY_NODE_TYPES:
            operand, spine = unwind_left_chain(node)
            value = self.evaluate(operand)
            for binary in spine:
                operation = _BINARY_OPERATIONS[binary.type]
                value = operation(value, self.evaluate(binary.right))
            return value

        if node_type == "FunctionCall":
            args = [self.evaluate(arg) for arg in node.args]
            context = BuiltinContext(position=node.position, source=self._source)
            return call_builtin(node.name, args, context, self._functions)

        raise TypeError(f"Unknown AST node type: {type(node).__name__}")


def evaluate(
    source: str,
    env: Optional[Environment] = None,
    *,
    functions: Optional[FunctionRegistry] = None,
    limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
) -> float:
    """
    Parses, checks and evaluates an expression in the given environment.

    Every variable in the expression must be bound in ``env``. For repeated
    evaluation of one expression, parse it once and call ``eval`` on the
    tree instead.

    Args:
        source: The expression string
        env: Variable bindings (empty if omitted)
        functions: Optional function registry (defaults to BUILTIN_FUNCTIONS)
        limits: Optional expression limits

    Returns:
        The value of the expression

    Raises:
        ParseError: If the expression is malformed
        CheckError: If a call is invalid
        MissingVariableError: If a variable is not bound in ``env``
        LimitExceededError: If the expression exceeds a limit
    """
    env = env if env is not None else {}

    ast = parse(source, limits)
    variables = check(ast, functions=functions, source=source)

    for name in sorted(variables):
        if name not in env:
            logger.debug("missing_variable", extra={"variable": name})
            raise MissingVariableError(name)

    value = Evaluator(env, functions, source).evaluate(ast)
    logger.debug(
        "expression_evaluated",
        extra={"variable_count": len(variables), "value": value},
    )
    return value


def try_evaluate(
    source: str,
    env: Optional[Environment] = None,
    *,
    functions: Optional[FunctionRegistry] = None,
    limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
) -> EvaluationResult:
    """
    Like evaluate(), but reports failure in the result instead of raising.

    Returns:
        The evaluation result with value and success status
    """
    try:
        value = evaluate(source, env, functions=functions, limits=limits)
        return EvaluationResult(value=value, success=True)
    except ExpressionError as error:
        logger.warning(
            "expression_evaluation_failed",
            extra={"error": error.message, "position": error.position},
        )
        return EvaluationResult(value=None, success=False, error=str(error))
