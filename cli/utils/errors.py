"""Exit codes and error handling for the CLI."""

import sys
from enum import IntEnum
from typing import NoReturn, Optional

import click

from core.capture import SessionNotFound
from core.edit_plan import PlanError
from core.export_job import ExportError
from core.preview import PreviewError
from core.probe import ProbeError


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    FILE_NOT_FOUND = 3
    DEPENDENCY_MISSING = 4
    EXPORT_FAILED = 5
    PERMISSION_ERROR = 6
    VALIDATION_ERROR = 7


def exit_with(code: ExitCode, message: Optional[str] = None) -> NoReturn:
    """Exit with a specific code and optional error message.

    Args:
        code: Exit code from ExitCode enum
        message: Optional error message to display on stderr
    """
    if message:
        click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(code)


def handle_error(error: Exception) -> NoReturn:
    """Map an exception to an exit code and exit.

    Args:
        error: The exception to handle
    """
    if isinstance(error, PlanError):
        exit_with(ExitCode.VALIDATION_ERROR, f"Invalid project: {error}")
    elif isinstance(error, ExportError):
        exit_with(ExitCode.EXPORT_FAILED, f"Export failed during {error.phase}: {error}")
    elif isinstance(error, (ProbeError, PreviewError, SessionNotFound)):
        exit_with(ExitCode.GENERAL_ERROR, str(error))
    elif isinstance(error, FileNotFoundError):
        exit_with(ExitCode.FILE_NOT_FOUND, str(error))
    elif isinstance(error, PermissionError):
        exit_with(ExitCode.PERMISSION_ERROR, str(error))
    elif isinstance(error, ValueError):
        exit_with(ExitCode.VALIDATION_ERROR, str(error))
    else:
        exit_with(ExitCode.GENERAL_ERROR, str(error))
