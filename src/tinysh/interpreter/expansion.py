"""Parameter expansion inside strings.

Handles, for every non-single-quoted string constant:
- backslash escapes (``\\x`` stands for ``x``)
- ``$name`` and ``${name}``
- ``${name[i]}``, ``${name[@]}``, ``${#name}``, ``${#name[@]}``
- ``$(( ... ))``

A substitution that spans the whole string yields the variable's value
itself, so ``b=$a`` keeps ``a``'s type. Any other substitution is spliced
into the surrounding text via its display form.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

from ..ast.types import StringConstant
from ..parser import LexerError, ParseException, parse_expansion
from .errors import BadSubstitutionError, UnhandledOperatorError
from .values import Array, Number, String, Value

if TYPE_CHECKING:
    from .interpreter import Evaluator


_SIMPLE_PARAMETER_RE = re.compile(r"\$(?:([A-Za-z0-9_]+|#)|\{([A-Za-z0-9_]+|#)\})")


async def expand_string(evaluator: "Evaluator", constant: StringConstant) -> Value:
    """Evaluate a string constant, interpolating unless it is single-quoted."""
    if constant.single_quoted:
        return String(constant.s)

    s = constant.s
    parts: list[str] = []
    i = 0
    while i < len(s):
        char = s[i]
        if char == "\\" and i + 1 < len(s):
            parts.append(s[i + 1])
            i += 2
            continue
        if char != "$":
            parts.append(char)
            i += 1
            continue

        end, value = await _expand_parameter(evaluator, s, i)
        if value is None:
            # Not followed by a name: a literal dollar sign.
            parts.append("$")
            i += 1
            continue
        if i == 0 and end == len(s):
            return value
        parts.append(value.show())
        i = end

    return String("".join(parts))


async def _expand_parameter(
    evaluator: "Evaluator", s: str, start: int
) -> tuple[int, Optional[Value]]:
    """Expand the substitution at ``s[start]`` (a ``$``).

    Returns the offset just past it and its value, or None when the
    dollar sign does not start a substitution.
    """
    match = _SIMPLE_PARAMETER_RE.match(s, start)
    if match:
        name = match.group(1) or match.group(2)
        return match.end(), evaluator.lookup(name)

    if s.startswith("$((", start) or s.startswith("${", start):
        opener = s[start + 1]
        end = _find_closing(s, start + 1, opener, ")" if opener == "(" else "}")
        text = s[start:end] if end > 0 else s[start:]
        if end < 0:
            raise BadSubstitutionError(text, "unterminated")
        try:
            expression = parse_expansion(text)
        except (LexerError, ParseException) as e:
            raise BadSubstitutionError(text, str(e)) from e
        return end, await evaluator.evaluate(expression)

    return start + 1, None


def _find_closing(s: str, start: int, opener: str, closer: str) -> int:
    """Offset just past the bracket matching ``s[start]``, or -1."""
    depth = 0
    for i in range(start, len(s)):
        if s[i] == opener:
            depth += 1
        elif s[i] == closer:
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def parameter_length(value: Value) -> Number:
    """``${#name}``: character count of a string, element count of an array."""
    if isinstance(value, Array):
        return Number(len(value.elements))
    if isinstance(value, (String, Number)):
        return Number(len(value.show()))
    raise UnhandledOperatorError("#", value)
