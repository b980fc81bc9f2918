"""Main Shell class - the primary API for tinysh.

Example usage:
    from tinysh import Shell

    # Synchronous usage (for REPL, scripts)
    shell = Shell()
    result = shell.run("echo hello world")
    print(result.stdout)  # "hello world\\n"

    # Async usage (for async applications)
    shell = Shell()
    result = await shell.exec("echo hello world")
    print(result.stdout)  # "hello world\\n"

    # With positional parameters
    result = shell.run('echo "$0 got $1"', script_name="greet.sh", args=["hi"])

    # With custom collaborators
    shell = Shell(builtins=my_builtins, invoker=my_invoker)
"""

import asyncio
from typing import Optional, Sequence

import nest_asyncio  # type: ignore[import-untyped]

from .ast import Program
from .commands import SubprocessInvoker
from .interpreter import (
    Environment,
    EvaluationError,
    Evaluator,
    InterpreterState,
    ShellOptions,
    SinkBuiltins,
    Value,
)
from .parser import LexerError, ParseException
from .parser import parse as parse_script
from .types import Builtins, CommandInvoker, ExecResult, OutputSink, StringSink


class Shell:
    """Main tinysh interpreter class.

    Each call to ``exec``/``run`` parses the script and evaluates it
    against a fresh environment, so runs never see each other's variables.
    """

    def __init__(
        self,
        *,
        builtins: Optional[Builtins] = None,
        invoker: Optional[CommandInvoker] = None,
        stdout: Optional[OutputSink] = None,
        stderr: Optional[OutputSink] = None,
        env: Optional[dict[str, Value]] = None,
        xtrace: bool = False,
    ):
        """Initialize the shell.

        Args:
            builtins: Builtins collaborator. Defaults to one writing to stdout.
            invoker: Command invoker. Defaults to running OS processes whose
                output is captured into stdout/stderr.
            stdout: Sink for standard output. When given, ``ExecResult.stdout``
                is empty and output goes here as it is produced.
            stderr: Sink for standard error, treated the same way.
            env: Variables defined before every run.
            xtrace: Enable xtrace (set -x) mode.
        """
        self._builtins = builtins
        self._invoker = invoker
        self._stdout = stdout
        self._stderr = stderr
        self._env = dict(env or {})
        self._options = ShellOptions(xtrace=xtrace)

    @property
    def options(self) -> ShellOptions:
        return self._options

    def parse(self, script: str) -> Program:
        """Parse a script without running it."""
        return parse_script(script)

    async def exec(
        self,
        script: str,
        *,
        script_name: str = "tinysh",
        args: Sequence[str] = (),
    ) -> ExecResult:
        """Execute a script.

        Args:
            script: The script source.
            script_name: Value of ``$0``.
            args: Positional parameters ``$1``..``$N``.

        Returns:
            ExecResult with stdout, stderr, exit_code, and final env.
        """
        stdout = self._stdout if self._stdout is not None else StringSink()
        stderr = self._stderr if self._stderr is not None else StringSink()

        env = Environment.for_script(script_name, args)
        env.update(self._env)

        # Parse the script
        try:
            program = parse_script(script)
        except (LexerError, ParseException) as e:
            stderr.write(f"tinysh: {e}\n")
            return self._result(stdout, stderr, 2, env)

        state = InterpreterState(
            env=env,
            options=ShellOptions(xtrace=self._options.xtrace),
        )
        evaluator = Evaluator(
            builtins=self._builtins or SinkBuiltins(stdout),
            invoker=self._invoker or SubprocessInvoker(stdout, stderr),
            state=state,
            trace=stderr,
        )

        # Execute
        try:
            await evaluator.run(program)
        except EvaluationError as e:
            stderr.write(f"tinysh: {e}\n")
            return self._result(stdout, stderr, 1, env)
        return self._result(stdout, stderr, 0, env)

    def run(
        self,
        script: str,
        *,
        script_name: str = "tinysh",
        args: Sequence[str] = (),
    ) -> ExecResult:
        """Execute a script synchronously.

        This is a convenience wrapper around exec() that works in any context,
        including Jupyter notebooks and async frameworks.

        Example:
            >>> shell = Shell()
            >>> result = shell.run('echo "Hello, World!"')
            >>> print(result.stdout)
            Hello, World!
        """
        try:
            asyncio.get_running_loop()
            # Already inside an event loop (Jupyter, async framework, etc.)
            nest_asyncio.apply()
        except RuntimeError:
            # No running event loop, asyncio.run() will work fine
            pass
        return asyncio.run(self.exec(script, script_name=script_name, args=args))

    @staticmethod
    def _result(
        stdout: OutputSink, stderr: OutputSink, exit_code: int, env: Environment
    ) -> ExecResult:
        return ExecResult(
            stdout=stdout.getvalue() if isinstance(stdout, StringSink) else "",
            stderr=stderr.getvalue() if isinstance(stderr, StringSink) else "",
            exit_code=exit_code,
            env=dict(env),
        )
