"""Error types and formatting utilities for AgentX.

Every failure the install pipeline can surface is an AgentxError subclass,
so callers doing bulk work can catch one type per unit and keep going.
"""

import json
import subprocess
from pathlib import Path

import yaml
from pydantic import ValidationError

from agentx import cli_logger, exit_codes


class AgentxError(Exception):
    """Base class for all pipeline errors."""

    exit_code = exit_codes.GENERAL_ERROR


class InvalidSourceError(AgentxError):
    """Raised when a source string is not a local path or a git remote."""

    exit_code = exit_codes.INVALID_SOURCE

    def __init__(self, source: str, reason: str | None = None) -> None:
        self.source = source
        message = f"Cannot determine source type for '{source}'"
        if reason:
            message = f"Invalid source '{source}': {reason}"
        super().__init__(message)


class CloneFailedError(AgentxError):
    """Raised when git clone fails. Carries git's combined output."""

    exit_code = exit_codes.GIT_ERROR

    def __init__(self, url: str, output: str) -> None:
        self.url = url
        self.output = output.strip()
        message = f"git clone failed for {url}"
        if self.output:
            message += f"\n{self.output}"
        super().__init__(message)


class UnitNotFoundError(AgentxError):
    """Raised when no installable unit was found where one was expected."""

    exit_code = exit_codes.UNIT_NOT_FOUND


class InvalidManifestError(AgentxError):
    """Raised when a unit's manifest exists but cannot be parsed."""

    exit_code = exit_codes.UNIT_INVALID

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest '{path}': {reason}")


class AlreadyExistsError(AgentxError):
    """Raised when the install target is already occupied."""

    exit_code = exit_codes.ALREADY_EXISTS

    def __init__(self, kind: str, name: str, path: Path) -> None:
        self.kind = kind
        self.name = name
        self.path = path
        super().__init__(f"{kind.capitalize()} already exists: {name} ({path})")


class CopyFailedError(AgentxError):
    """Raised when copying a unit into its store fails part way."""

    def __init__(self, source: Path, target: Path, reason: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Failed to copy {source} to {target}: {reason}")


class UnsupportedUnitError(AgentxError):
    """Raised when an agent cannot hold the requested unit kind."""

    exit_code = exit_codes.UNIT_INVALID


class RegistryFetchError(AgentxError):
    """Raised when no registry tier produced a catalog."""

    exit_code = exit_codes.REGISTRY_ERROR


def format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic ValidationError into clean, user-friendly message.

    Removes Pydantic-specific URLs and technical jargon, producing a message
    suitable for CLI output.

    Args:
        error: The Pydantic ValidationError to format.

    Returns:
        A clean, human-readable error message.
    """
    messages = []

    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        error_type = err["type"]

        if error_type == "missing":
            messages.append(f"'{loc}': field is required")
        elif error_type == "string_type":
            messages.append(f"'{loc}': expected string")
        elif error_type == "list_type":
            messages.append(f"'{loc}': expected list")
        elif error_type in ("dict_type", "model_type"):
            messages.append(f"'{loc}': expected object")
        else:
            messages.append(f"'{loc}': {err['msg'].lower()}")

    return "; ".join(messages)


def handle_cli_error(error: Exception) -> int:
    """Handle an unhandled exception at the CLI boundary.

    Formats the error into a clean user-friendly message and returns
    an appropriate exit code. Raw tracebacks never reach the user.

    Args:
        error: The exception to handle.

    Returns:
        An exit code from exit_codes.
    """
    if isinstance(error, AgentxError):
        cli_logger.error(str(error))
        return error.exit_code

    if isinstance(error, ValidationError):
        cli_logger.error(f"Invalid data: {format_validation_errors(error)}")
        return exit_codes.UNIT_INVALID

    if isinstance(error, subprocess.CalledProcessError):
        cmd_str = " ".join(str(c) for c in error.cmd) if isinstance(error.cmd, list) else str(error.cmd)
        cli_logger.error(f"Command failed (exit code {error.returncode}): {cmd_str}")
        return exit_codes.GENERAL_ERROR

    if isinstance(error, OSError):
        if error.filename:
            cli_logger.error(f"{error.strerror}: {error.filename}")
        else:
            cli_logger.error(str(error))
        return exit_codes.GENERAL_ERROR

    if isinstance(error, (yaml.YAMLError, json.JSONDecodeError)):
        cli_logger.error(f"Invalid document: {error}")
        return exit_codes.GENERAL_ERROR

    cli_logger.error(f"Unexpected error: {error}")
    return exit_codes.GENERAL_ERROR
