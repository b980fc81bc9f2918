"""Parser for tinysh scripts.

Statements are parsed by recursive descent; expressions by precedence
climbing (Pratt style) over the token stream produced by the lexer.

Juxtaposition is the call operator: in ``echo 5 6`` the string ``echo`` is
followed by tokens that have no infix meaning, so they become the argument
list of a ``FunctionApplication``.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from enum import IntEnum
from typing import Callable, Iterator, Optional

from ..ast.types import (
    ArithmeticExpression,
    ArrayAccess,
    ArrayLiteral,
    Assignment,
    Condition,
    Expression,
    ExpressionStatement,
    FunctionApplication,
    Identifier,
    InfixExpression,
    NumberConstant,
    PrefixExpression,
    Program,
    Statement,
    StringConstant,
    WholeArray,
)
from .lexer import Lexer, Token, TokenKind


class ParseException(Exception):
    """Raised when the token stream does not match the grammar."""

    def __init__(self, message: str, token: Optional[Token] = None):
        if token is not None:
            message = f"{message} (line {token.line}, column {token.column})"
        super().__init__(message)
        self.token = token


class Precedence(IntEnum):
    LOWEST = 0
    EQUALS = 1  # = !=
    LESS_GREATER = 2
    SUM = 3  # + -
    PRODUCT = 4  # * / % and dash tests
    PREFIX = 5  # -z, -x
    CALL = 6  # echo a b
    INDEX = 7  # name[i]
    HIGHEST = 8


_DASH_OPERATOR = re.compile(r"^-[A-Za-z]{1,2}$")

_INFIX_PRECEDENCE = {
    "=": Precedence.EQUALS,
    "!=": Precedence.EQUALS,
    "+": Precedence.SUM,
    "-": Precedence.SUM,
    "*": Precedence.PRODUCT,
    "/": Precedence.PRODUCT,
    "%": Precedence.PRODUCT,
    "[": Precedence.INDEX,
}

# Token kinds that continue a function application when found in infix
# position.
_ARGUMENT_KINDS = (
    TokenKind.STRING,
    TokenKind.NUMBER,
    TokenKind.ARITHMETIC_OPEN,
    TokenKind.KEYWORD,
)

PrefixParseFunction = Callable[[], Expression]
InfixParseFunction = Callable[[Expression], Expression]


def _describe(token: Optional[Token]) -> str:
    if token is None:
        return "end of input"
    return f"'{token.text}' ({token.kind.name})"


class Parser:
    """Builds a ``Program`` from a token stream.

    Holds a two-token lookahead (``current`` and ``peek``) and a mode flag
    that tells whether expressions are currently read under arithmetic
    rules, where ``(`` groups instead of opening an array literal.
    """

    def __init__(self, lexer: Lexer):
        self._lexer = lexer
        self._current: Optional[Token] = self._lexer.next()
        self._peek: Optional[Token] = self._lexer.next()
        self._arithmetic = False

    # =========================================================================
    # Statements
    # =========================================================================

    def parse(self) -> Program:
        """Parse the whole token stream."""
        statements: list[Statement] = []

        self._skip_newlines()
        while self._current is not None:
            statements.append(self._parse_statement())
            self._skip_semicolon()
            self._skip_newlines()

        return Program(tuple(statements))

    def _parse_statement(self) -> Statement:
        current = self._current
        if self._peek_is(TokenKind.OP, "="):
            return self._parse_assignment()
        if (
            current is not None
            and current.kind is TokenKind.STRING
            and self._peek_is(TokenKind.OP, "[")
        ):
            return self._parse_index_assignment()
        if self._current_is(TokenKind.KEYWORD, "if"):
            return self._parse_condition()
        return ExpressionStatement(self._parse_expression(Precedence.LOWEST))

    def _parse_assignment(self) -> Assignment:
        name = self._advance()
        lhs = Identifier(name.value)
        self._consume(TokenKind.OP, "=")
        return Assignment(lhs, self._parse_assignment_value())

    def _parse_index_assignment(self) -> Assignment:
        name = self._advance()
        lhs = self._parse_array_access(Identifier(name.value))
        self._consume(TokenKind.OP, "=")
        return Assignment(lhs, self._parse_assignment_value())

    def _parse_assignment_value(self) -> Expression:
        # ``a=`` assigns the empty string.
        if self._at_statement_end():
            return StringConstant("")
        return self._parse_expression(Precedence.LOWEST)

    def _parse_condition(self) -> Condition:
        self._consume(TokenKind.KEYWORD, "if")
        self._consume(TokenKind.CONDITIONAL_OPEN, "[")
        test = self._parse_expression(Precedence.LOWEST)
        self._consume(TokenKind.OP, "]")
        if not (self._current is not None and self._current.kind is TokenKind.NEWLINE):
            self._consume(TokenKind.KEYWORD, ";")
        self._skip_newlines()
        self._consume(TokenKind.KEYWORD, "then")
        self._skip_newlines()
        consequence = self._parse_statement()
        self._skip_semicolon()
        self._skip_newlines()

        if self._current_is(TokenKind.KEYWORD, "fi"):
            self._advance()
            return Condition(test, consequence)

        if self._current_is(TokenKind.KEYWORD, "else"):
            self._advance()
            self._skip_newlines()
            alternative = self._parse_statement()
            self._skip_semicolon()
            self._skip_newlines()
            self._consume(TokenKind.KEYWORD, "fi")
            return Condition(test, consequence, alternative)

        raise ParseException(
            f"unexpected {_describe(self._current)} after condition, expected 'fi' or 'else'",
            self._current,
        )

    # =========================================================================
    # Expressions
    # =========================================================================

    def parse_expression(self) -> Expression:
        """Parse a single expression that must span the whole input."""
        expression = self._parse_expression(Precedence.LOWEST)
        if self._current is not None:
            raise ParseException(f"unexpected {_describe(self._current)}", self._current)
        return expression

    def _parse_expression(self, precedence: Precedence) -> Expression:
        token = self._current
        if token is None:
            raise ParseException("unexpected end of input, expected an expression")

        prefix = self._prefix_parse_function(token)
        if prefix is None:
            raise ParseException(f"no prefix parse function for {_describe(token)}", token)
        left = prefix()

        while (
            self._current is not None
            and not self._at_statement_end()
            and precedence < self._precedence(self._current)
        ):
            infix = self._infix_parse_function(self._current)
            if infix is None:
                return left
            left = infix(left)

        return left

    def _prefix_parse_function(self, token: Token) -> Optional[PrefixParseFunction]:
        kind, value = token.kind, token.value

        if kind is TokenKind.NUMBER:
            return self._parse_number
        if kind is TokenKind.STRING:
            return self._parse_string
        if kind is TokenKind.IDENTIFIER:
            return self._parse_identifier
        if kind is TokenKind.ARITHMETIC_OPEN:
            return self._parse_arithmetic_expression
        if kind is TokenKind.KEYWORD:
            if value == "if":
                return self._parse_condition
            if value != ";":
                return self._parse_string
            return None
        if kind is TokenKind.OP:
            if _DASH_OPERATOR.match(value):
                return self._parse_prefix_expression
            if value == "-" and self._arithmetic:
                return self._parse_prefix_expression
            if value == "(":
                if self._arithmetic:
                    return self._parse_grouped_expression
                return self._parse_array_literal
            if value == "${":
                return self._parse_parameter_expansion
        return None

    def _infix_parse_function(self, token: Token) -> Optional[InfixParseFunction]:
        kind, value = token.kind, token.value

        if kind is TokenKind.OP:
            if value == "[":
                return self._parse_index
            if value in _INFIX_PRECEDENCE or _DASH_OPERATOR.match(value):
                return self._parse_infix_expression
            if value == "${":
                return self._parse_function_application
            return None

        if kind in _ARGUMENT_KINDS:
            return self._parse_function_application
        return None

    def _precedence(self, token: Token) -> Precedence:
        kind, value = token.kind, token.value

        if kind is TokenKind.OP:
            if value in _INFIX_PRECEDENCE:
                return _INFIX_PRECEDENCE[value]
            if _DASH_OPERATOR.match(value):
                # Arbitrary: dash tests never combine with arithmetic.
                return Precedence.PRODUCT
            if value == "${":
                return Precedence.CALL
            return Precedence.LOWEST

        if kind in _ARGUMENT_KINDS:
            return Precedence.CALL
        return Precedence.LOWEST

    # -------------------------------------------------------------------------
    # Prefix parse functions
    # -------------------------------------------------------------------------

    def _parse_number(self) -> NumberConstant:
        token = self._advance()
        return NumberConstant(int(token.value))

    def _parse_string(self) -> StringConstant:
        token = self._advance()
        return StringConstant(token.value, token.single_quoted)

    def _parse_identifier(self) -> Identifier:
        token = self._advance()
        return Identifier(token.value)

    def _parse_prefix_expression(self) -> PrefixExpression:
        operator = self._advance()
        operand = self._parse_expression(Precedence.PREFIX)
        return PrefixExpression(operator.value, operand)

    def _parse_grouped_expression(self) -> Expression:
        self._consume(TokenKind.OP, "(")
        expression = self._parse_expression(Precedence.LOWEST)
        self._consume(TokenKind.OP, ")")
        return expression

    def _parse_array_literal(self) -> ArrayLiteral:
        self._consume(TokenKind.OP, "(")
        elements: list[StringConstant] = []
        while not self._current_is(TokenKind.OP, ")"):
            token = self._current
            if token is None:
                raise ParseException("unterminated array literal, expected ')'")
            if token.kind is TokenKind.NEWLINE:
                self._advance()
                continue
            if token.kind not in (TokenKind.STRING, TokenKind.NUMBER, TokenKind.KEYWORD):
                raise ParseException(
                    f"unexpected {_describe(token)} in array literal", token
                )
            self._advance()
            elements.append(StringConstant(token.value, token.single_quoted))
        self._consume(TokenKind.OP, ")")
        return ArrayLiteral(tuple(elements))

    def _parse_arithmetic_expression(self) -> ArithmeticExpression:
        self._consume(TokenKind.ARITHMETIC_OPEN, "$((")
        with self._arithmetic_mode():
            expression = self._parse_expression(Precedence.LOWEST)
            self._consume(TokenKind.OP, ")")
            self._consume(TokenKind.OP, ")")
        return ArithmeticExpression(expression)

    def _parse_parameter_expansion(self) -> Expression:
        """``${name}``, ``${name[i]}``, ``${name[@]}``, ``${#name}``..."""
        self._consume(TokenKind.OP, "${")
        if self._current_is(TokenKind.OP, "#"):
            self._advance()
            expression: Expression = PrefixExpression("#", self._parse_parameter_reference())
        else:
            expression = self._parse_parameter_reference()
        self._consume(TokenKind.OP, "}")
        return expression

    def _parse_parameter_reference(self) -> Expression:
        name = self._consume(TokenKind.IDENTIFIER)
        if self._current_is(TokenKind.OP, "["):
            return self._parse_array_access(Identifier(name.value))
        return Identifier("$" + name.value)

    # -------------------------------------------------------------------------
    # Infix parse functions
    # -------------------------------------------------------------------------

    def _parse_infix_expression(self, lhs: Expression) -> InfixExpression:
        operator = self._current
        assert operator is not None
        precedence = self._precedence(operator)
        self._advance()
        rhs = self._parse_expression(precedence)
        return InfixExpression(lhs, rhs, operator.value)

    def _parse_index(self, lhs: Expression) -> ArrayAccess:
        if isinstance(lhs, (StringConstant, Identifier)):
            name = lhs.s if isinstance(lhs, StringConstant) else lhs.name
            return self._parse_array_access(Identifier(name.lstrip("$")))
        raise ParseException(f"cannot index {lhs}", self._current)

    def _parse_array_access(self, name: Identifier) -> ArrayAccess:
        self._consume(TokenKind.OP, "[")
        index: Expression | WholeArray
        if self._current_is(TokenKind.OP, "@") or (
            self._current_is(TokenKind.OP, "*") and self._peek_is(TokenKind.OP, "]")
        ):
            index = WholeArray(self._advance().value)
        else:
            with self._arithmetic_mode():
                index = self._parse_expression(Precedence.LOWEST)
        self._consume(TokenKind.OP, "]")
        return ArrayAccess(name, index)

    def _parse_function_application(self, name: Expression) -> FunctionApplication:
        if not isinstance(name, StringConstant):
            raise ParseException(
                f"expected a command name before {_describe(self._current)}, got {name}",
                self._current,
            )

        args: list[Expression] = []
        while self._current is not None and not self._at_statement_end():
            # Highest precedence keeps arguments from combining with each other.
            args.append(self._parse_expression(Precedence.HIGHEST))

        return FunctionApplication(name, tuple(args))

    # =========================================================================
    # Token helpers
    # =========================================================================

    @contextmanager
    def _arithmetic_mode(self) -> Iterator[None]:
        previous = self._arithmetic
        self._arithmetic = True
        try:
            yield
        finally:
            self._arithmetic = previous

    def _advance(self) -> Token:
        token = self._current
        if token is None:
            raise ParseException("unexpected end of input")
        self._current = self._peek
        self._peek = self._lexer.next()
        return token

    def _consume(self, kind: TokenKind, value: Optional[str] = None) -> Token:
        token = self._current
        if token is None or token.kind is not kind or (value is not None and token.value != value):
            expected = f"'{value}' ({kind.name})" if value is not None else kind.name
            raise ParseException(f"expected {expected} but got {_describe(token)}", token)
        return self._advance()

    def _current_is(self, kind: TokenKind, value: str) -> bool:
        token = self._current
        return token is not None and token.kind is kind and token.value == value

    def _peek_is(self, kind: TokenKind, value: str) -> bool:
        token = self._peek
        return token is not None and token.kind is kind and token.value == value

    def _at_statement_end(self) -> bool:
        token = self._current
        return (
            token is None
            or token.kind is TokenKind.NEWLINE
            or (token.kind is TokenKind.KEYWORD and token.value == ";")
        )

    def _skip_semicolon(self) -> None:
        if self._current_is(TokenKind.KEYWORD, ";"):
            self._advance()

    def _skip_newlines(self) -> None:
        while self._current is not None and self._current.kind is TokenKind.NEWLINE:
            self._advance()


def parse(source: str) -> Program:
    """Parse a script into a ``Program``."""
    return Parser(Lexer(source)).parse()


def parse_expansion(source: str) -> Expression:
    """Parse a single ``${...}`` or ``$((...))`` expansion found inside a string."""
    return Parser(Lexer(source)).parse_expression()
