"""AST node types for tinysh.

Nodes are frozen dataclasses: once the parser builds a tree, nothing
mutates it. ``Expression`` and ``Statement`` are closed unions so that
consumers can dispatch on them exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


# =============================================================================
# Expressions
# =============================================================================


@dataclass(frozen=True)
class NumberConstant:
    """An integer literal."""

    n: int

    def __str__(self) -> str:
        return str(self.n)


@dataclass(frozen=True)
class StringConstant:
    """A string literal, possibly containing ``$name`` substitutions."""

    s: str
    single_quoted: bool = False
    """Single-quoted text is never interpolated."""

    def __str__(self) -> str:
        quote = "'" if self.single_quoted else '"'
        return f"{quote}{self.s}{quote}"


@dataclass(frozen=True)
class Identifier:
    """A name, with or without the ``$`` sigil."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class InfixExpression:
    lhs: "Expression"
    rhs: "Expression"
    op: str

    def __str__(self) -> str:
        return f"{self.lhs} {self.op} {self.rhs}"


@dataclass(frozen=True)
class PrefixExpression:
    op: str
    operand: "Expression"

    def __str__(self) -> str:
        return f"{self.op} {self.operand}"


@dataclass(frozen=True)
class ArithmeticExpression:
    """Marks a subtree that is evaluated under arithmetic rules."""

    inner: "Expression"

    def __str__(self) -> str:
        return f"$(({self.inner}))"


@dataclass(frozen=True)
class FunctionApplication:
    """A command invocation: ``name arg1 arg2 ...``."""

    name: StringConstant
    args: tuple["Expression", ...] = ()

    def __str__(self) -> str:
        return " ".join([self.name.s, *(str(arg) for arg in self.args)])


@dataclass(frozen=True)
class ArrayLiteral:
    """``(a b c)``"""

    elements: tuple[StringConstant, ...] = ()

    def __str__(self) -> str:
        return "(" + " ".join(str(element) for element in self.elements) + ")"


@dataclass(frozen=True)
class WholeArray:
    """The ``@`` / ``*`` subscript selecting every element of an array."""

    symbol: str = "@"

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class ArrayAccess:
    name: Identifier
    index: Union["Expression", WholeArray]

    def __str__(self) -> str:
        return f"{self.name}[{self.index}]"


Expression = Union[
    NumberConstant,
    StringConstant,
    Identifier,
    InfixExpression,
    PrefixExpression,
    ArithmeticExpression,
    FunctionApplication,
    ArrayLiteral,
    ArrayAccess,
    "Condition",
]
"""Every node that can appear in expression position.

A ``Condition`` is structurally allowed as an expression (``if`` in an
argument position), although scripts rarely do this.
"""


# =============================================================================
# Statements
# =============================================================================


@dataclass(frozen=True)
class Assignment:
    """``name=value`` or ``name[index]=value``."""

    lhs: Union[Identifier, ArrayAccess]
    rhs: Expression


@dataclass(frozen=True)
class Condition:
    """``if [ test ]; then ...; else ...; fi``"""

    test: Expression
    then: "Statement"
    otherwise: Optional["Statement"] = None


@dataclass(frozen=True)
class ExpressionStatement:
    expression: Expression


Statement = Union[Assignment, Condition, ExpressionStatement]


@dataclass(frozen=True)
class Program:
    """An ordered sequence of statements; order is execution order."""

    statements: tuple[Statement, ...] = field(default_factory=tuple)
