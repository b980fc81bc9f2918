"""Arithmetic on Number values.

Supports the binary operators ``+ - * / %`` and unary minus. Division
truncates toward zero and the remainder takes the sign of the dividend,
as in shell arithmetic.
"""

from __future__ import annotations

from .errors import EvaluationError, UnhandledOperatorError
from .values import Array, Number, String, Value, parse_integer

ARITHMETIC_OPERATORS = frozenset({"+", "-", "*", "/", "%"})


def apply_arithmetic(op: str, lhs: Value, rhs: Value) -> Number:
    """Apply a binary arithmetic operator to two numbers."""
    if not isinstance(lhs, Number) or not isinstance(rhs, Number):
        raise UnhandledOperatorError(op, lhs, rhs)

    a, b = lhs.n, rhs.n
    if op == "+":
        return Number(a + b)
    if op == "-":
        return Number(a - b)
    if op == "*":
        return Number(a * b)
    if op == "/":
        return Number(_divide(a, b))
    if op == "%":
        return Number(a - b * _divide(a, b))
    raise UnhandledOperatorError(op, lhs, rhs)


def negate(operand: Value) -> Number:
    if not isinstance(operand, Number):
        raise UnhandledOperatorError("-", operand)
    return Number(-operand.n)


def _divide(a: int, b: int) -> int:
    if b == 0:
        raise EvaluationError("division by 0")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def to_arithmetic(value: Value) -> Value:
    """Read a variable's value the way arithmetic context sees it.

    Integer text becomes a Number and the empty string is 0. An array
    stands for its first element. Anything else is returned unchanged and
    left for the operator to reject.
    """
    if isinstance(value, Array):
        value = value.get(0)
    if isinstance(value, String):
        if value.s == "":
            return Number(0)
        n = parse_integer(value.s)
        if n is not None:
            return Number(n)
    return value
