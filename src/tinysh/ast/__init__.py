"""AST module for tinysh."""

from .types import (
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

__all__ = [
    # Expressions
    "ArithmeticExpression",
    "ArrayAccess",
    "ArrayLiteral",
    "Expression",
    "FunctionApplication",
    "Identifier",
    "InfixExpression",
    "NumberConstant",
    "PrefixExpression",
    "StringConstant",
    "WholeArray",
    # Statements
    "Assignment",
    "Condition",
    "ExpressionStatement",
    "Program",
    "Statement",
]
