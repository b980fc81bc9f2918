"""Core types for tinysh.

Defines the result type returned by the ``Shell`` facade and the narrow
collaborator contracts the evaluator talks to:

- Builtins:        in-process commands (``echo``)
- CommandInvoker:  external OS commands
- OutputSink:      where text output goes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, TextIO

if TYPE_CHECKING:
    from .interpreter.values import Value


@dataclass
class ExecResult:
    """Result of running a script."""

    stdout: str
    stderr: str
    exit_code: int
    env: Optional[dict[str, Value]] = None


class OutputSink(Protocol):
    """Anything text output can be written to."""

    def write(self, text: str) -> None:
        ...


class Builtins(Protocol):
    """Commands implemented inside the interpreter."""

    def echo(self, args: Sequence[str]) -> int:
        """Print the arguments; returns the exit status."""
        ...


class CommandInvoker(Protocol):
    """Runs commands that are not builtins."""

    async def exec(self, name: str, args: Sequence[str]) -> int:
        """Run ``name`` with ``args`` and wait for it; returns the exit status."""
        ...


@dataclass
class StringSink:
    """Collects output in memory."""

    parts: list[str] = field(default_factory=list)

    def write(self, text: str) -> None:
        self.parts.append(text)

    def getvalue(self) -> str:
        return "".join(self.parts)


class StreamSink:
    """Writes straight through to a text stream, flushing each write."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()
