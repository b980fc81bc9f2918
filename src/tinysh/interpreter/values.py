"""Runtime values produced by the evaluator.

A closed set of immutable tagged values:

- Void:     the result of a command invocation
- Number:   an integer
- Boolean:  the outcome of a test expression
- String:   text
- Array:    an ordered sequence of values

Every value has a display form (``show``) used for output and
concatenation, and a structural, type-sensitive ``equals``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Void:
    def show(self) -> str:
        return ""

    def equals(self, other: Value) -> bool:
        return isinstance(other, Void)


@dataclass(frozen=True, order=True)
class Number:
    """An integer. Ordering is used by the numeric test operators."""

    n: int

    def show(self) -> str:
        return str(self.n)

    def equals(self, other: Value) -> bool:
        return isinstance(other, Number) and other.n == self.n


@dataclass(frozen=True)
class Boolean:
    b: bool

    def show(self) -> str:
        return "true" if self.b else "false"

    def equals(self, other: Value) -> bool:
        return isinstance(other, Boolean) and other.b == self.b


@dataclass(frozen=True)
class String:
    s: str

    def show(self) -> str:
        return self.s

    def equals(self, other: Value) -> bool:
        return isinstance(other, String) and other.s == self.s


@dataclass(frozen=True)
class Array:
    """An indexed array. Displayed as its elements joined by spaces."""

    elements: tuple[Value, ...] = ()

    def show(self) -> str:
        return " ".join(element.show() for element in self.elements)

    def equals(self, other: Value) -> bool:
        return (
            isinstance(other, Array)
            and len(other.elements) == len(self.elements)
            and all(a.equals(b) for a, b in zip(self.elements, other.elements))
        )

    def get(self, index: int) -> Value:
        """Element at ``index``, or the empty string when out of range."""
        if 0 <= index < len(self.elements):
            return self.elements[index]
        return EMPTY

    def with_element(self, index: int, value: Value) -> Array:
        """Copy of the array with ``index`` set, padding holes with empty strings."""
        elements = list(self.elements)
        if index >= len(elements):
            elements.extend([EMPTY] * (index + 1 - len(elements)))
        elements[index] = value
        return Array(tuple(elements))


Value = Union[Void, Number, Boolean, String, Array]

EMPTY = String("")
VOID = Void()
TRUE = Boolean(True)
FALSE = Boolean(False)


def boolean(b: bool) -> Boolean:
    return TRUE if b else FALSE


def type_name(value: Value) -> str:
    """Lower-case tag name used in error messages."""
    return type(value).__name__.lower()


_INTEGER_RE = re.compile(r"\s*-?[0-9]+\s*")


def parse_integer(text: str) -> Optional[int]:
    """The integer spelled by ``text``, or None when it is not one."""
    if _INTEGER_RE.fullmatch(text):
        return int(text)
    return None
