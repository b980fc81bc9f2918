"""Interpreter module for tinysh."""

from .builtins import BUILTIN_NAMES, SinkBuiltins
from .errors import BadSubstitutionError, EvaluationError, UnhandledOperatorError
from .interpreter import EvalMode, Evaluator
from .types import Environment, InterpreterState, ShellOptions
from .values import Array, Boolean, Number, String, Value, Void

__all__ = [
    # Evaluator
    "EvalMode",
    "Evaluator",
    # State
    "Environment",
    "InterpreterState",
    "ShellOptions",
    # Values
    "Array",
    "Boolean",
    "Number",
    "String",
    "Value",
    "Void",
    # Builtins
    "BUILTIN_NAMES",
    "SinkBuiltins",
    # Errors
    "BadSubstitutionError",
    "EvaluationError",
    "UnhandledOperatorError",
]
