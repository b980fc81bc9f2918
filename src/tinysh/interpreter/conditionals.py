"""Test expression operators for ``[ ... ]``.

String operators:
  S1 = S2     True if the strings are equal
  S1 != S2    True if the strings differ
  -z STRING   True if STRING is empty
  -n STRING   True if STRING is not empty

Numeric operators (operands may be numbers or integer text):
  N1 -eq N2, -ne, -lt, -le, -gt, -ge
"""

from __future__ import annotations

import operator
from typing import Callable

from .errors import EvaluationError, UnhandledOperatorError
from .values import Boolean, Number, String, Value, boolean, parse_integer

STRING_OPERATORS = frozenset({"=", "!="})

NUMERIC_OPERATORS: dict[str, Callable[[Number, Number], bool]] = {
    "-eq": operator.eq,
    "-ne": operator.ne,
    "-lt": operator.lt,
    "-le": operator.le,
    "-gt": operator.gt,
    "-ge": operator.ge,
}

UNARY_OPERATORS = frozenset({"-z", "-n"})


def compare_strings(op: str, lhs: Value, rhs: Value) -> Boolean:
    """``=`` / ``!=`` on the text of strings or numbers."""
    if not isinstance(lhs, (String, Number)) or not isinstance(rhs, (String, Number)):
        raise UnhandledOperatorError(op, lhs, rhs)
    equal = lhs.show() == rhs.show()
    if op == "=":
        return boolean(equal)
    if op == "!=":
        return boolean(not equal)
    raise UnhandledOperatorError(op, lhs, rhs)


def compare_numbers(op: str, lhs: Value, rhs: Value) -> Boolean:
    """Numeric dash tests such as ``-eq`` and ``-lt``."""
    compare = NUMERIC_OPERATORS.get(op)
    if compare is None:
        raise UnhandledOperatorError(op, lhs, rhs)
    return boolean(compare(to_number(lhs), to_number(rhs)))


def unary_test(op: str, operand: Value) -> Boolean:
    """``-z`` and ``-n``."""
    if not isinstance(operand, (String, Number)):
        raise UnhandledOperatorError(op, operand)
    empty = operand.show() == ""
    if op == "-z":
        return boolean(empty)
    if op == "-n":
        return boolean(not empty)
    raise UnhandledOperatorError(op, operand)


def to_number(value: Value) -> Number:
    if isinstance(value, Number):
        return value
    if isinstance(value, String):
        n = parse_integer(value.s)
        if n is not None:
            return Number(n)
    text = value.show() or '""'
    raise EvaluationError(f"{text}: integer expression expected")
