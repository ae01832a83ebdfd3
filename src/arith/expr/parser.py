"""
Parser for the expression language.

Pulls tokens from the tokenizer one at a time and builds an Abstract Syntax
Tree (AST) by recursive descent.

Grammar (precedence lowest to highest, binary operators left-associative):

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := NUMBER
                | IDENT '(' expression (',' expression)* ')'
                | IDENT
                | '(' expression ')'
                | '-' term

Unary minus re-enters at the term level, so ``-a * b`` parses as
``-(a * b)`` while ``-a - b`` parses as ``(-a) - b``.
"""

import logging
import math
from typing import Iterable, List, Optional

from .ast import (
    AddNode,
    AstNode,
    DivideNode,
    FunctionCallNode,
    MultiplyNode,
    NegateNode,
    NumberLiteralNode,
    SubtractNode,
    VariableNode,
    calculate_ast_depth,
    count_ast_nodes,
)
from .errors import LexError, ParseError
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_expression_length,
    check_function_arg_count,
    check_nesting_depth,
)
from .tokenizer import Token, TokenType, quote, tokenize

logger = logging.getLogger("arith.expr.parser")


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return f"token {quote(token.value)}"


class Parser:
    """Parser over a token stream with a two-token window."""

    def __init__(
        self,
        tokens: Iterable[Token],
        source: str,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
    ):
        self._tokens = iter(tokens)
        self._source = source
        self._limits = limits
        self._terminal: Optional[Token] = None
        self._nesting = 0
        self._current = self._pull()
        self._next = self._pull()

    def parse(self) -> AstNode:
        """Parses the token stream into an AST."""
        ast = self._parse_expression()

        token = self._current
        if token.type == TokenType.ERROR:
            raise LexError(token.value, token.position, self._source)
        if token.type != TokenType.EOF:
            raise ParseError(
                f"invalid expression: unexpected {_describe(token)}",
                token.position,
                self._source,
            )

        # Validate AST limits
        node_count = count_ast_nodes(ast)
        check_ast_node_count(node_count, self._limits)

        depth = calculate_ast_depth(ast)
        check_ast_depth(depth, self._limits)

        logger.debug(
            "expression_parsed",
            extra={"node_count": node_count, "depth": depth},
        )
        return ast

    # ============================================================
    # Token Helpers
    # ============================================================

    def _pull(self) -> Token:
        # The stream ends after EOF or ERROR; keep reporting that token.
        if self._terminal is not None:
            return self._terminal
        token = next(self._tokens, None)
        if token is None:
            token = Token(TokenType.EOF, "", len(self._source))
        if token.type in (TokenType.EOF, TokenType.ERROR):
            self._terminal = token
        return token

    def _advance(self) -> Token:
        token = self._current
        self._current = self._next
        self._next = self._pull()
        return token

    def _expect_close_paren(self) -> None:
        token = self._current
        if token.type == TokenType.ERROR:
            raise LexError(token.value, token.position, self._source)
        if token.type != TokenType.RPAREN:
            raise ParseError("missing )", token.position, self._source)
        self._advance()

    def _enter(self, token: Token) -> None:
        self._nesting += 1
        check_nesting_depth(self._nesting, self._limits, token.position, self._source)

    def _leave(self) -> None:
        self._nesting -= 1

    # ============================================================
    # Expression Parsing (by precedence, lowest to highest)
    # ============================================================

    def _parse_expression(self) -> AstNode:
        """Parses additive: +, -"""
        node = self._parse_term()

        while self._current.type in (TokenType.PLUS, TokenType.MINUS):
            token = self._advance()
            right = self._parse_term()
            if token.type == TokenType.PLUS:
                node = AddNode(node, right, position=token.position)
            else:
                node = SubtractNode(node, right, position=token.position)

        return node

    def _parse_term(self) -> AstNode:
        """Parses multiplicative: *, /"""
        node = self._parse_factor()

        while self._current.type in (TokenType.STAR, TokenType.SLASH):
            token = self._advance()
            right = self._parse_factor()
            if token.type == TokenType.STAR:
                node = MultiplyNode(node, right, position=token.position)
            else:
                node = DivideNode(node, right, position=token.position)

        return node

    def _parse_factor(self) -> AstNode:
        """Parses numbers, calls, variables, parentheses and unary minus."""
        token = self._current

        if token.type == TokenType.NUMBER:
            self._advance()
            value = float(token.value)
            if math.isinf(value):
                raise ParseError(
                    f"number out of range: {quote(token.value)}",
                    token.position,
                    self._source,
                )
            return NumberLiteralNode(value, position=token.position)

        if token.type == TokenType.IDENTIFIER:
            if self._next.type == TokenType.LPAREN:
                return self._parse_call()
            self._advance()
            return VariableNode(token.value, position=token.position)

        if token.type == TokenType.LPAREN:
            self._enter(token)
            try:
                self._advance()
                inner = self._parse_expression()
                self._expect_close_paren()
            finally:
                self._leave()
            return inner

        if token.type == TokenType.MINUS:
            self._enter(token)
            try:
                self._advance()
                operand = self._parse_term()
            finally:
                self._leave()
            return NegateNode(operand, position=token.position)

        if token.type == TokenType.ERROR:
            raise LexError(token.value, token.position, self._source)

        raise ParseError(
            f"unexpected {_describe(token)}", token.position, self._source
        )

    def _parse_call(self) -> FunctionCallNode:
        """Parses IDENT '(' expression (',' expression)* ')'"""
        name_token = self._advance()
        paren_token = self._advance()

        self._enter(paren_token)
        try:
            args: List[AstNode] = [self._parse_expression()]
            while self._current.type == TokenType.COMMA:
                self._advance()
                args.append(self._parse_expression())
            self._expect_close_paren()
        finally:
            self._leave()

        check_function_arg_count(
            len(args), self._limits, name_token.position, self._source
        )
        return FunctionCallNode(
            name_token.value, tuple(args), position=name_token.position
        )


def parse(
    source: str, limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS
) -> AstNode:
    """
    Parses an expression string into an AST.

    Args:
        source: The expression string to parse
        limits: Optional expression limits

    Returns:
        The parsed AST

    Raises:
        LexError: If the expression holds an invalid character
        ParseError: If parsing fails
        LimitExceededError: If the expression exceeds a limit
    """
    check_expression_length(source, limits)
    parser = Parser(tokenize(source), source, limits)
    return parser.parse()
