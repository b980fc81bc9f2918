"""tinysh - a small interpreter for a POSIX-style shell subset.

Example:
    from tinysh import Shell

    shell = Shell()
    result = shell.run("a=4; if [ 5 -gt $a ]; then echo yes; else echo no; fi")
    print(result.stdout)  # "yes\\n"
"""

from .shell import Shell
from .types import ExecResult, StreamSink, StringSink

__version__ = "0.1.0"

__all__ = [
    "ExecResult",
    "Shell",
    "StreamSink",
    "StringSink",
    "__version__",
]
