"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes across CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    PARSE_ERROR = 1      # One or more constructs failed to parse
    INVALID_ARGS = 2     # Invalid arguments or unreadable input
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for CLI tools.

    Formats the error message, optionally prints a traceback in verbose
    mode, and exits with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Parse")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from kaleidoscope.frontend.errors import FrontendError
    from kaleidoscope.errors import KaleidoscopeError

    if isinstance(error, FrontendError):
        # Front-end errors already carry "error:" and a location
        click.echo(str(error), err=True)
        sys.exit(ExitCode.PARSE_ERROR)

    elif isinstance(error, KaleidoscopeError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.PARSE_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
