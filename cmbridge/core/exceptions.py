"""
Custom exception hierarchy for cmbridge.

Provides a structured exception hierarchy so that launch failures, timeouts,
parse failures and operation failures can be told apart by callers instead
of being folded into a single boolean.
"""

from __future__ import annotations


class CmBridgeException(Exception):
    """
    Base exception for all cmbridge errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (command, file paths, etc.)
        exit_code: Suggested exit code for CLI (default: 1)
        recoverable: Whether retry/recovery may be possible
    """

    exit_code: int = 1
    recoverable: bool = True

    def __init__(
        self,
        message: str,
        *,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class CmBridgeConfigError(CmBridgeException):
    """Base class for configuration-related errors."""

    pass


class ConfigFileError(CmBridgeConfigError):
    """
    Error reading or parsing a configuration file.

    Raised for TOML parsing errors, file not found, permission errors, etc.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class ConfigValidationError(CmBridgeConfigError, ValueError):
    """Invalid or missing configuration value."""

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        value: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if value is not None:
            ctx["value"] = value
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Command Errors
# =============================================================================


class CommandError(CmBridgeException):
    """Base class for errors running the cm executable."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if command:
            ctx["command"] = command
        self.command = command
        super().__init__(message, context=ctx, cause=cause)


class CommandLaunchError(CommandError):
    """
    The cm process could not be started.

    Raised when the executable is missing or the spawn itself fails.
    """

    exit_code = 127
    recoverable = False


class CommandTimeoutError(CommandError):
    """The cm process did not finish within the configured timeout."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        timeout: float | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if timeout is not None:
            ctx["timeout"] = timeout
        super().__init__(message, command=command, context=ctx, cause=cause)


class CommandFailedError(CommandError):
    """The cm process exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        returncode: int | None = None,
        errors: list[str] | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if returncode is not None:
            ctx["returncode"] = returncode
        self.returncode = returncode
        self.errors = errors or []
        super().__init__(message, command=command, context=ctx, cause=cause)


# =============================================================================
# Parse Errors
# =============================================================================


class ParseError(CmBridgeException):
    """
    Output of the cm executable could not be interpreted.

    Raised for malformed text, missing expected fields and missing or
    malformed temporary XML reports. Callers keep their previous state.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if source:
            ctx["source"] = source
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(CmBridgeException):
    """Base class for errors raised while executing an operation."""

    pass


class UnsupportedOperationError(OperationError):
    """No worker is registered for the requested operation kind."""

    recoverable = False


class WorkspaceError(OperationError):
    """
    The session is not connected to a cm workspace.

    Raised when a path is not inside a workspace or when workspace
    information could not be read.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message, context=ctx, cause=cause)


class SessionClosedError(OperationError):
    """An operation was submitted to a session that has been shut down."""

    recoverable = False
