"""Interpreter error types.

All of these abort the run. Output written before the failure is kept.
"""

from __future__ import annotations

from typing import Optional


class EvaluationError(Exception):
    """A value reached an operator or consumer with the wrong tag."""

    def __init__(self, message: str, node: Optional[object] = None):
        super().__init__(message)
        self.node = node


class UnhandledOperatorError(EvaluationError):
    """No rule exists for an operator applied to the given operand types."""

    def __init__(self, op: str, *operands: object):
        described = ", ".join(type(operand).__name__.lower() for operand in operands)
        super().__init__(f"unhandled operator '{op}' for {described}")
        self.op = op


class BadSubstitutionError(EvaluationError):
    """A ``${...}`` or ``$((...))`` inside a string could not be parsed."""

    def __init__(self, text: str, reason: str = ""):
        message = f"{text}: bad substitution"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.text = text
