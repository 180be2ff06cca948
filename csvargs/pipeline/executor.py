"""Run rendered command text through the platform shell.

The command is handed to the interpreter as one shell-evaluated string, so
templates may use pipes, ``&&`` and redirection. The interpreter is ``sh -c``
on POSIX and ``cmd /C`` on Windows (``csvargs.config.SHELL_ARGS``).

Standard output of the command is inherited and passes straight through,
bytes unchanged. Error output is captured, kept on the result for the
failure report and relayed to this process's stderr once the command has
finished.

Error & Result Branches
-----------------------
- A non-zero exit status is returned, not raised; the driver decides.
- Failure to start the interpreter raises
  :class:`csvargs.exceptions.LaunchError`.
- There is no timeout; a hung command blocks the run.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import IO, Any, TextIO

from csvargs.config import SHELL_ARGS
from csvargs.exceptions import LaunchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Exit status and captured error text of one command."""

    exit_code: int
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def execute_command(
    command: str,
    *,
    shell_args: Sequence[str] = SHELL_ARGS,
    stdout: int | IO[Any] | None = None,
    stderr: TextIO | None = None,
) -> ExecutionResult:
    """Execute ``command`` through the shell and wait for it to finish.

    Parameters
    ----------
    command : str
        Rendered command text.
    shell_args : Sequence[str], optional
        Interpreter argument vector the command is appended to.
    stdout : int | IO | None, optional
        Standard output of the command, as accepted by ``subprocess.run``.
        ``None`` inherits this process's standard output.
    stderr : TextIO | None, optional
        Stream the captured error output is relayed to. Defaults to
        ``sys.stderr`` at call time.

    Returns
    -------
    ExecutionResult
        Exit status and captured stderr.

    Raises
    ------
    LaunchError
        If the interpreter could not be started, or the command text cannot
        be passed to it (for example because it contains a NUL character).

    Examples
    --------
    >>> execute_command("exit 3").exit_code
    3
    """
    argv = [*shell_args, command]
    logger.debug("Launching %s", argv)
    sys.stdout.flush()
    try:
        result = subprocess.run(
            argv,
            check=False,
            stdout=stdout,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        raise LaunchError(
            f"Failed to execute command: {exc.strerror or exc}",
            context={"shell": shell_args[0] if shell_args else ""},
        ) from exc
    except ValueError as exc:
        raise LaunchError(
            f"Failed to execute command: {exc}",
            context={"shell": shell_args[0] if shell_args else ""},
        ) from exc

    if result.stderr:
        err = stderr if stderr is not None else sys.stderr
        err.write(result.stderr)
        err.flush()
    return ExecutionResult(result.returncode, result.stderr or "")
