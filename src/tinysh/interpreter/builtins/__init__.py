"""Builtin commands.

``echo`` is the only builtin; every other command name is handed to the
command invoker.
"""

from .echo import SinkBuiltins

BUILTIN_NAMES = frozenset({"echo"})

__all__ = ["BUILTIN_NAMES", "SinkBuiltins"]
