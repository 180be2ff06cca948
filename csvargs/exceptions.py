"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and one
subclass per failure kind of the row pipeline. Each subclass also fixes the
blast radius of the failure:

- run-scoped: ``TemplateError`` aborts the run before any file is opened;
- file-scoped: ``FileError`` aborts the remaining rows of one file;
- row-scoped: ``RowShapeError``, ``RecordParseError``, ``RenderError``,
  ``CommandFailure`` and ``LaunchError`` are recorded and the next row runs.

Using a centralized hierarchy makes error handling and testing consistent.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'ROW_SHAPE_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.

    Attributes
    ----------
    code : str
        Stable machine-readable error code.
    message : str
        Human-readable message.
    context : dict
        Structured, non-sensitive context for logging.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'})
    >>> e.code
    'CODE'
    """

    __slots__ = ("code", "message", "context")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
        }


class TemplateError(AppError):
    """Raised when the user template does not compile."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("TEMPLATE_ERROR", message, context=context)


class FileError(AppError):
    """Raised when a CSV file cannot be opened, decoded or read."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("FILE_ERROR", message, context=context)


class RowShapeError(AppError):
    """Raised for a record whose cell count differs from the expected width."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("ROW_SHAPE_ERROR", message, context=context)


class RecordParseError(AppError):
    """Raised for a record the CSV tokenizer rejected (e.g. bad quoting)."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("RECORD_PARSE_ERROR", message, context=context)


class RenderError(AppError):
    """Raised when the template fails to render for one row."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("RENDER_ERROR", message, context=context)


class CommandFailure(AppError):
    """Raised when a rendered command exits with a non-zero status.

    Parameters
    ----------
    exit_code : int
        Exit status reported by the shell.
    stderr : str
        Error output captured from the command.
    """

    __slots__ = ("exit_code", "stderr")

    def __init__(
        self,
        exit_code: int,
        stderr: str = "",
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        message = f"Command failed with status {exit_code}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__("COMMAND_FAILURE", message, context=context)
        self.exit_code = exit_code
        self.stderr = stderr


class LaunchError(AppError):
    """Raised when the shell interpreter itself could not be started."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("LAUNCH_ERROR", message, context=context)
