"""External command invocation.

Every command that is not a builtin runs as an OS process. The evaluator
waits for it to finish; its exit status is returned but never drives
control flow.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional, Sequence

from ..types import OutputSink, StreamSink

COMMAND_NOT_FOUND = 127
PERMISSION_DENIED = 126


class SubprocessInvoker:
    """Runs commands with ``asyncio.create_subprocess_exec``.

    A stream with a sink is captured and written to it once the child
    exits; a stream without one is inherited from this process. The child
    inherits this process's environment; shell variables are not exported.
    """

    def __init__(
        self,
        stdout: Optional[OutputSink] = None,
        stderr: Optional[OutputSink] = None,
    ):
        self.stdout = stdout
        self.stderr = stderr

    async def exec(self, name: str, args: Sequence[str]) -> int:
        pipe = asyncio.subprocess.PIPE
        try:
            process = await asyncio.create_subprocess_exec(
                name,
                *args,
                stdout=pipe if self.stdout is not None else None,
                stderr=pipe if self.stderr is not None else None,
            )
        except FileNotFoundError:
            self._error(f"tinysh: {name}: command not found\n")
            return COMMAND_NOT_FOUND
        except PermissionError:
            self._error(f"tinysh: {name}: permission denied\n")
            return PERMISSION_DENIED

        out, err = await process.communicate()
        if self.stdout is not None and out:
            self.stdout.write(out.decode("utf-8", errors="replace"))
        if self.stderr is not None and err:
            self.stderr.write(err.decode("utf-8", errors="replace"))
        return process.returncode if process.returncode is not None else 0

    def _error(self, message: str) -> None:
        sink = self.stderr if self.stderr is not None else StreamSink(sys.stderr)
        sink.write(message)
