"""Command-line entry point.

Usage: tinysh [-x] SCRIPT_FILE [ARGUMENTS...]
       tinysh [-x] -c COMMAND [NAME [ARGUMENTS...]]

Output streams straight to the terminal. Exit status is 0 on success,
1 on an evaluation error, 2 on a syntax error and 127 when the script
file does not exist.
"""

from __future__ import annotations

import sys
from argparse import REMAINDER, ArgumentParser
from pathlib import Path
from typing import Optional, Sequence

from .commands import SubprocessInvoker
from .shell import Shell
from .types import StreamSink


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="tinysh",
        description="Run a script written in a small POSIX-style shell subset.",
    )
    parser.add_argument(
        "-x",
        dest="xtrace",
        action="store_true",
        help="print each command and its arguments before running it",
    )
    parser.add_argument(
        "-c",
        dest="command",
        metavar="COMMAND",
        help="execute COMMAND instead of reading a script file",
    )
    parser.add_argument("script", nargs="?", help="script file to execute")
    parser.add_argument("args", nargs=REMAINDER, help="positional parameters")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    options = parser.parse_args(argv)

    if options.command is not None:
        # With -c, the first operand names $0 and the rest are $1..$N.
        script = options.command
        script_name = options.script or "tinysh"
    elif options.script is not None:
        script_name = options.script
        try:
            script = Path(script_name).read_text(encoding="utf-8")
        except FileNotFoundError:
            sys.stderr.write(f"tinysh: {script_name}: No such file or directory\n")
            return 127
        except (OSError, UnicodeDecodeError) as e:
            sys.stderr.write(f"tinysh: {script_name}: {e}\n")
            return 2
    else:
        parser.print_usage(sys.stderr)
        return 2

    shell = Shell(
        stdout=StreamSink(sys.stdout),
        stderr=StreamSink(sys.stderr),
        # External commands inherit the terminal.
        invoker=SubprocessInvoker(),
        xtrace=options.xtrace,
    )
    result = shell.run(script, script_name=script_name, args=options.args)
    return result.exit_code
