"""
Built-in functions for the expression language.

All built-in functions are pure and deterministic, and follow IEEE-754
rather than Python's math module when a result is out of range:

- Domain errors (sin of infinity, negative base with a fractional
  exponent) produce NaN instead of raising ValueError.
- Overflow produces a signed infinity instead of raising OverflowError.
- pow(0, y) for negative y produces an infinity.

The default registry is read-only and built once at import time.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from .errors import BuiltinError, EvaluationError


class BuiltinContext:
    """Context passed to built-in functions."""

    def __init__(
        self,
        position: int,
        source: str,
    ):
        self.position = position
        self.source = source


# Signature of a built-in implementation.
BuiltinImpl = Callable[[Sequence[float], BuiltinContext], float]


@dataclass(frozen=True)
class BuiltinFunction:
    """A named function with a fixed argument count."""

    name: str
    arity: int
    impl: BuiltinImpl

    def __call__(self, args: Sequence[float], ctx: BuiltinContext) -> float:
        _assert_arg_count(args, self.arity, self.name, ctx)
        return self.impl(args, ctx)


# Function registry for built-in and injected functions.
FunctionRegistry = Mapping[str, BuiltinFunction]


def _assert_arg_count(
    args: Sequence[float], expected: int, function_name: str, ctx: BuiltinContext
) -> None:
    """Asserts argument count."""
    if len(args) != expected:
        raise BuiltinError(
            function_name,
            f"expected {expected} argument(s), got {len(args)}",
            ctx.position,
            ctx.source,
        )


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and value == int(value) and int(value) % 2 == 1


# ============================================================
# Trigonometry
# ============================================================


def _sin(args: Sequence[float], ctx: BuiltinContext) -> float:
    """sin(x) -> number - Sine of x radians; NaN for infinite x."""
    x = args[0]
    if math.isinf(x):
        return math.nan
    return math.sin(x)


def _cos(args: Sequence[float], ctx: BuiltinContext) -> float:
    """cos(x) -> number - Cosine of x radians; NaN for infinite x."""
    x = args[0]
    if math.isinf(x):
        return math.nan
    return math.cos(x)


# ============================================================
# Powers
# ============================================================


def _pow(args: Sequence[float], ctx: BuiltinContext) -> float:
    """
    pow(x, y) -> number

    Returns x raised to the power y.
    """
    x, y = args
    try:
        return math.pow(x, y)
    except OverflowError:
        # Only a negative base with an odd integer exponent stays negative
        if x < 0 and _is_odd_integer(y):
            return -math.inf
        return math.inf
    except ValueError:
        if x == 0:
            # pow(+-0, y) for y < 0
            if _is_odd_integer(y):
                return math.copysign(math.inf, x)
            return math.inf
        # Negative base with a fractional exponent
        return math.nan


# ============================================================
# Registry
# ============================================================

# Registry of all built-in functions.
BUILTIN_FUNCTIONS: FunctionRegistry = MappingProxyType(
    {
        "sin": BuiltinFunction("sin", 1, _sin),
        "cos": BuiltinFunction("cos", 1, _cos),
        "pow": BuiltinFunction("pow", 2, _pow),
    }
)


def call_builtin(
    name: str,
    args: Sequence[float],
    context: BuiltinContext,
    functions: Optional[FunctionRegistry] = None,
) -> float:
    """
    Calls a built-in function by name.

    Args:
        name: The function name
        args: The evaluated function arguments
        context: The call site
        functions: Optional function registry (defaults to BUILTIN_FUNCTIONS)

    Returns:
        The function result

    Raises:
        EvaluationError: If the function doesn't exist
        BuiltinError: If the argument count is wrong
    """
    if functions is None:
        functions = BUILTIN_FUNCTIONS
    fn = functions.get(name)
    if fn is None:
        raise EvaluationError(
            f"unknown function call: {name}", context.position, context.source
        )
    return fn(args, context)
