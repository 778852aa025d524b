"""External command execution.

Every tool the pipeline drives (``jlink``, ``strip``, ``makeself``) goes through a
:class:`CommandRunner`. The production runner is :class:`ProcessRunner`; tests
swap in a recording runner.
"""

import logging
import shlex
import subprocess
from typing import Protocol

from jploot.errors import IOFailure, ToolFailure
from jploot.log import verbose_log


class CommandRunner(Protocol):
    """Something that can run an external command to completion."""

    def run(self, command: list[str]) -> None:
        """Run ``command`` and return once it has exited successfully.

        :param command: Executable followed by its arguments.
        :raises ToolFailure: If the command exits with a non-zero status.
        """


def escape(unescaped: str) -> str:
    """Quote a string as one POSIX shell word.

    The string is wrapped in single quotes; embedded single quotes become
    ``'"'"'`` (close quote, double-quoted quote, reopen quote).

    :param unescaped: Raw string.
    :returns: Shell-safe single-quoted word.
    """

    return "'" + unescaped.replace("'", "'\"'\"'") + "'"


def unescape(escaped: str) -> str:
    """Parse one shell word back into the string it denotes.

    :param escaped: A single shell word, e.g. the output of :func:`escape`.
    :returns: The raw string.
    :raises ValueError: If ``escaped`` is not exactly one shell word.
    """

    words: list[str] = shlex.split(escaped, posix=True)
    if len(words) != 1:
        raise ValueError(f"Expected a single shell word, got {len(words)}: {escaped!r}")
    return words[0]


def command_as_string(command: list[str]) -> str:
    """Render a command as a copy-pasteable shell line.

    :param command: Executable followed by its arguments.
    :returns: Every argument escaped and joined with a single space.
    """

    return " ".join(escape(arg) for arg in command)


class ProcessRunner:
    """Runs commands with :mod:`subprocess`, blocking until they exit.

    No timeout is applied: a hung tool hangs the caller.

    :ivar verbose: Forward the child's stdout/stderr instead of discarding them.
    :ivar logger: Logger for the command line and failures.
    """

    def __init__(self, *, verbose: bool, logger: logging.Logger) -> None:
        self.verbose: bool = verbose
        self.logger: logging.Logger = logger

    def run(self, command: list[str]) -> None:
        """Run ``command`` synchronously.

        :param command: Executable followed by its arguments.
        :raises ToolFailure: If the command exits with a non-zero status.
        :raises IOFailure: If the executable cannot be started.
        """

        command_string: str = command_as_string(command)
        verbose_log(self.logger, self.verbose, f"Executing {command_string}")

        if self.verbose is True:
            stdout = None
            stderr = None
        else:
            stdout = subprocess.DEVNULL
            stderr = subprocess.DEVNULL

        try:
            proc = subprocess.run(command, stdout=stdout, stderr=stderr, check=False)
        except OSError as e:
            message: str = f"Command {command_string} could not be started: {e}"
            self.logger.error(f"jploot: {message}")
            raise IOFailure(message) from e

        if proc.returncode != 0:
            message = f"Command {command_string} failed with status {proc.returncode}"
            self.logger.error(f"jploot: {message}")
            raise ToolFailure(message, command=command, exit_code=proc.returncode)
