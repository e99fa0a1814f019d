"""Parser for the exprforge expression language.

Converts a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent parsing with operator precedence.

Operator Precedence (lowest to highest):
1. ? : (conditional, right associative)
2. || (or)
3. && (and)
4. == != < <= > >=
5. + -
6. * / %
7. ! (not) - + (unary)
8. () (function call, grouping)

Left-associative operator chains (``a + b + c + ...``) are built with loops
and do not count as nesting; only parentheses, conditionals, call arguments
and unary operators do.
"""

from dataclasses import dataclass, field
from typing import Callable

from exprforge.config import DEFAULT_MAX_DEPTH
from exprforge.errors import LimitExceededError, ParseError
from exprforge.expressions.lexer import Lexer, Token, TokenType


# -----------------------------------------------------------------------------
# AST Node Types
# -----------------------------------------------------------------------------


@dataclass
class ASTNode:
    """Base class for AST nodes."""
    pass


@dataclass
class Literal(ASTNode):
    """A literal value.

    Number literals keep their source text (``"1.5"``); booleans are bools.
    """
    value: str | bool
    position: int = field(default=0, compare=False)

    @property
    def is_number(self) -> bool:
        return not isinstance(self.value, bool)


@dataclass
class Identifier(ASTNode):
    """A variable or constant reference."""
    name: str
    position: int = field(default=0, compare=False)


@dataclass
class BinaryOp(ASTNode):
    """Binary operation (e.g., a + b, x == y)."""
    operator: str
    left: ASTNode
    right: ASTNode


@dataclass
class UnaryOp(ASTNode):
    """Unary operation (e.g., !x, -y)."""
    operator: str
    operand: ASTNode


@dataclass
class Conditional(ASTNode):
    """Conditional expression (e.g., x > 0 ? x : -x)."""
    condition: ASTNode
    if_true: ASTNode
    if_false: ASTNode


@dataclass
class FunctionCall(ASTNode):
    """Function call (e.g., sqrt(x), max(a, b, c))."""
    name: str
    arguments: list[ASTNode]
    position: int = field(default=0, compare=False)


# -----------------------------------------------------------------------------
# Parser
# -----------------------------------------------------------------------------

# Binary operator levels, loosest first; every level is left associative
BINARY_LEVELS: tuple[frozenset[TokenType], ...] = (
    frozenset({TokenType.OR}),
    frozenset({TokenType.AND}),
    frozenset({
        TokenType.EQ,
        TokenType.NEQ,
        TokenType.LT,
        TokenType.LTE,
        TokenType.GT,
        TokenType.GTE,
    }),
    frozenset({TokenType.PLUS, TokenType.MINUS}),
    frozenset({TokenType.MULTIPLY, TokenType.DIVIDE, TokenType.MODULO}),
)

UNARY_OPERATORS = frozenset({TokenType.NOT, TokenType.MINUS, TokenType.PLUS})


class Parser:
    """Recursive descent parser for the expression language.

    Nesting (parentheses, conditionals, call arguments and unary chains) is
    counted while parsing and may not exceed ``max_depth``.

    Usage:
        parser = Parser("a + b * 2")
        ast = parser.parse()
    """

    def __init__(self, source: str, max_depth: int = DEFAULT_MAX_DEPTH):
        self.source = source
        self.max_depth = max_depth
        self.tokens = Lexer(source).tokenize()
        self.index = 0
        self._nesting = 0

    def parse(self) -> ASTNode:
        """Parse the whole source and return the AST root."""
        if self._peek().type == TokenType.EOF:
            raise self._error("Empty expression", self._peek())

        ast = self._parse_expression()

        trailing = self._peek()
        if trailing.type != TokenType.EOF:
            raise self._error(f"Unexpected token '{trailing.value}'", trailing)

        return ast

    # -------------------------------------------------------------------------
    # Token access
    # -------------------------------------------------------------------------

    def _peek(self) -> Token:
        return self.tokens[min(self.index, len(self.tokens) - 1)]

    def _next(self) -> Token:
        token = self._peek()
        self.index += 1
        return token

    def _accept(self, *types: TokenType) -> Token | None:
        """Consume the current token if it has one of ``types``."""
        if self._peek().type in types:
            return self._next()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        token = self._accept(token_type)
        if token is None:
            raise self._error(message, self._peek())
        return token

    def _error(self, message: str, token: Token) -> ParseError:
        if token.type == TokenType.EOF and message.startswith("Unexpected token"):
            message = "Unexpected end of expression"
        return ParseError(message, token.position, token.line, token.column)

    def _nested(self, parse_fn: Callable[[], ASTNode]) -> ASTNode:
        """Run ``parse_fn`` one nesting level deeper."""
        self._nesting += 1
        if self._nesting > self.max_depth:
            raise LimitExceededError(self.max_depth, self._nesting)
        try:
            return parse_fn()
        finally:
            self._nesting -= 1

    # -------------------------------------------------------------------------
    # Grammar
    # -------------------------------------------------------------------------

    def _parse_expression(self) -> ASTNode:
        return self._nested(self._parse_conditional)

    def _parse_conditional(self) -> ASTNode:
        """condition ? if_true : if_false, right associative."""
        condition = self._parse_binary(0)

        if self._accept(TokenType.QUESTION) is None:
            return condition

        if_true = self._parse_expression()
        self._expect(TokenType.COLON, "Expected ':' in conditional expression")
        if_false = self._parse_expression()
        return Conditional(condition, if_true, if_false)

    def _parse_binary(self, level: int) -> ASTNode:
        if level == len(BINARY_LEVELS):
            return self._parse_unary()

        operators = BINARY_LEVELS[level]
        left = self._parse_binary(level + 1)

        while self._peek().type in operators:
            op = self._next().type.value
            right = self._parse_binary(level + 1)
            left = BinaryOp(op, left, right)

        return left

    def _parse_unary(self) -> ASTNode:
        token = self._accept(*UNARY_OPERATORS)
        if token is None:
            return self._parse_primary()

        operand = self._nested(self._parse_unary)
        return UnaryOp(token.type.value, operand)

    def _parse_primary(self) -> ASTNode:
        """Literals, identifiers, calls and parenthesised groups."""
        token = self._next()

        if token.type in (TokenType.NUMBER, TokenType.BOOLEAN):
            return Literal(token.value, token.position)

        if token.type == TokenType.IDENTIFIER:
            if self._accept(TokenType.LPAREN):
                return FunctionCall(str(token.value), self._parse_arguments(), token.position)
            return Identifier(str(token.value), token.position)

        if token.type == TokenType.LPAREN:
            inner = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return inner

        raise self._error(f"Unexpected token '{token.value}'", token)

    def _parse_arguments(self) -> list[ASTNode]:
        """Comma separated call arguments, after the opening parenthesis."""
        arguments: list[ASTNode] = []

        if self._accept(TokenType.RPAREN):
            return arguments

        arguments.append(self._parse_expression())
        while self._accept(TokenType.COMMA):
            arguments.append(self._parse_expression())

        self._expect(TokenType.RPAREN, "Expected ')' after arguments")
        return arguments


def parse(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> ASTNode:
    """Convenience function to parse an expression string.

    Args:
        source: The expression string
        max_depth: Maximum nesting depth before LimitExceededError

    Returns:
        The AST root node
    """
    return Parser(source, max_depth).parse()
