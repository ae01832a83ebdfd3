"""
Error types for the arithmetic expression engine.

All expression errors extend ExpressionError for consistent handling.
"""

from typing import Optional


class ExpressionError(Exception):
    """
    Base error class for all expression-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class ParseError(ExpressionError):
    """
    Error thrown during parsing (syntax analysis).
    """

    pass


class LexError(ParseError):
    """
    Error surfaced by the parser when the token stream ends in an error token.
    """

    pass


class CheckError(ExpressionError):
    """
    Error thrown by the check phase (static validation of a parsed tree).
    """

    pass


class UnknownFunctionError(CheckError):
    """
    A call names a function that is not in the function registry.
    """

    def __init__(
        self,
        function_name: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(
            f"unknown function call: {function_name}", position, expression
        )
        self.function_name = function_name


class ArityError(CheckError):
    """
    A call passes the wrong number of arguments to a known function.
    """

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        message = f"call to {function_name} has {actual} args, expected {expected}"
        super().__init__(message, position, expression)
        self.function_name = function_name
        self.expected = expected
        self.actual = actual


class EvaluationError(ExpressionError):
    """
    Error thrown during evaluation (runtime error).
    """

    pass


class MissingVariableError(EvaluationError):
    """
    The one-shot evaluate found a variable that the environment does not bind.
    """

    def __init__(self, name: str):
        super().__init__(f"missing var {name} in environment")
        self.name = name


class BuiltinError(EvaluationError):
    """
    Error thrown when a built-in function encounters an error.
    """

    def __init__(
        self,
        function_name: str,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        full_message = f"{function_name}: {message}"
        super().__init__(full_message, position, expression)
        self.function_name = function_name


class LimitExceededError(ExpressionError):
    """
    Error thrown when expression limits are exceeded.
    """

    def __init__(
        self,
        limit_name: str,
        limit: int,
        actual: int,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message, position, expression)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual
