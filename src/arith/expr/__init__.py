"""
Arithmetic expression engine.

Tokenizes, parses, checks and evaluates arithmetic expressions over float
variables, with a small fixed set of built-in functions (sin, cos, pow).

Usage:
    from arith.expr import evaluate, parse

    evaluate("2 + 3 * x", {"x": 4})  # 14.0

    ast = parse("pow(x, 2) - 1")
    variables = set()
    ast.check(variables)  # variables == {"x"}
    ast.eval({"x": 3})  # 8.0
"""

# Core types and utilities
from .ast import (
    AddNode,
    AstNode,
    AstNodeBase,
    BinaryOperator,
    BinaryOpNode,
    DivideNode,
    Environment,
    FunctionCallNode,
    MultiplyNode,
    NegateNode,
    NumberLiteralNode,
    SubtractNode,
    VariableNode,
    ast_to_string,
    calculate_ast_depth,
    count_ast_nodes,
    to_source,
)

# Builtins
from .builtins import (
    BUILTIN_FUNCTIONS,
    BuiltinContext,
    BuiltinFunction,
    FunctionRegistry,
    call_builtin,
)

# Checker
from .checker import Checker, check
from .config import ExpressionLimitsConfig, limits_from_env, load_limits
from .errors import (
    ArityError,
    BuiltinError,
    CheckError,
    EvaluationError,
    ExpressionError,
    LexError,
    LimitExceededError,
    MissingVariableError,
    ParseError,
    UnknownFunctionError,
)

# Evaluator
from .evaluator import (
    EvaluationResult,
    Evaluator,
    evaluate,
    try_evaluate,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
)

# Parser
from .parser import (
    Parser,
    parse,
)

# Tokenizer
from .tokenizer import (
    Token,
    Tokenizer,
    TokenType,
    tokenize,
)

__all__ = [
    # AST types
    "AstNode",
    "AstNodeBase",
    "NumberLiteralNode",
    "VariableNode",
    "NegateNode",
    "BinaryOpNode",
    "AddNode",
    "SubtractNode",
    "MultiplyNode",
    "DivideNode",
    "FunctionCallNode",
    "BinaryOperator",
    "Environment",
    "count_ast_nodes",
    "calculate_ast_depth",
    "ast_to_string",
    "to_source",
    # Errors
    "ExpressionError",
    "ParseError",
    "LexError",
    "CheckError",
    "UnknownFunctionError",
    "ArityError",
    "EvaluationError",
    "MissingVariableError",
    "BuiltinError",
    "LimitExceededError",
    # Limits and configuration
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    "ExpressionLimitsConfig",
    "load_limits",
    "limits_from_env",
    # Tokenizer
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    # Checker
    "Checker",
    "check",
    # Evaluator
    "EvaluationResult",
    "Evaluator",
    "evaluate",
    "try_evaluate",
    # Builtins
    "BuiltinFunction",
    "BuiltinContext",
    "FunctionRegistry",
    "BUILTIN_FUNCTIONS",
    "call_builtin",
]
