"""Global configuration constants for csvargs.

Defines the template binding name, CSV input settings, logging format, exit
codes and the shell invocation used across the pipeline and the CLI.
"""

from __future__ import annotations

import os

# Template binding
ROW_VARIABLE_NAME: str = "row"

# CSV input
CSV_ENCODING: str = "utf-8-sig"
CSV_DELIMITER: str = ","
CSV_QUOTECHAR: str = '"'

# Shell used to evaluate rendered commands
POSIX_SHELL_ARGS: tuple[str, ...] = ("sh", "-c")
WINDOWS_SHELL_ARGS: tuple[str, ...] = ("cmd", "/C")
SHELL_ARGS: tuple[str, ...] = WINDOWS_SHELL_ARGS if os.name == "nt" else POSIX_SHELL_ARGS

# Exit codes
EXIT_OK: int = 0
EXIT_ROWS_FAILED: int = 1
EXIT_FATAL: int = 2

# CLI defaults and logging
PROGRAM_NAME: str = "csvargs"
DEFAULT_LOG_LEVEL: str = "WARNING"
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
