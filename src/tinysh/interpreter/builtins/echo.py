"""Echo builtin implementation.

Usage: echo [arg ...]

Writes the arguments separated by single spaces, followed by a newline.
No options are recognised: ``-n`` and ``-e`` are printed as given.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ...types import OutputSink


class SinkBuiltins:
    """Builtins that write their output to an ``OutputSink``."""

    def __init__(self, sink: "OutputSink"):
        self.sink = sink

    def echo(self, args: Sequence[str]) -> int:
        self.sink.write(" ".join(args) + "\n")
        return 0
