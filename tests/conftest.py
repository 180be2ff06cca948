"""Pytest configuration for the csvargs test suite.

- Ensures the project root is available on ``sys.path`` for imports.
- Removes the stderr handler the CLI installs on the root logger, since
  it is bound to the captured stderr of the test that created it.
"""

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from csvargs.pipeline.executor import ExecutionResult  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    """Drop the stderr handler installed by ``configure_logging``."""
    level = logging.root.level
    yield
    for handler in logging.root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            logging.root.removeHandler(handler)
    logging.root.setLevel(level)


@pytest.fixture
def write_csv(tmp_path: Path):
    """Return a helper writing ``text`` to ``tmp_path / name``.

    Returns
    -------
    Callable[[str, str], Path]
        ``write_csv(name, text)`` creates the file and returns its path.
    """

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


class RecordingExecutor:
    """Executor double that records commands and returns fixed exit codes."""

    def __init__(self, exit_code: int = 0, stderr: str = "") -> None:
        self.commands: list[str] = []
        self.exit_code = exit_code
        self.stderr = stderr

    def __call__(self, command: str):
        self.commands.append(command)
        return ExecutionResult(self.exit_code, self.stderr)


@pytest.fixture
def recording_executor():
    """Provide a fresh :class:`RecordingExecutor`."""
    return RecordingExecutor()
