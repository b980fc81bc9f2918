"""Interpreter types for tinysh."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .values import String, Value


class Environment(dict[str, Value]):
    """Flat variable namespace for one run.

    Keys are variable names without the ``$`` sigil. There is no scoping:
    every assignment in the script writes to this one mapping.
    """

    @classmethod
    def for_script(cls, script_name: str, args: Sequence[str] = ()) -> Environment:
        """Build an environment with ``$0``, ``$1``..``$N`` and ``$#`` set."""
        env = cls()
        env.set_positional(script_name, args)
        return env

    def set_positional(self, script_name: str, args: Sequence[str]) -> None:
        self["0"] = String(script_name)
        for i, arg in enumerate(args, start=1):
            self[str(i)] = String(arg)
        self["#"] = String(str(len(args)))


@dataclass
class ShellOptions:
    """Shell options set via CLI flags or constructor arguments."""

    xtrace: bool = False
    """Print each command and its arguments to stderr before running it."""


@dataclass
class InterpreterState:
    """Mutable state owned by one evaluator for one run."""

    env: Environment = field(default_factory=Environment)
    options: ShellOptions = field(default_factory=ShellOptions)
