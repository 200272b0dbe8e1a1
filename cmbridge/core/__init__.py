"""
Core infrastructure for cmbridge.

This module provides:
- ServiceContainer: DI container using dependency-injector
- Application bootstrap for initialization
- Interface definitions for the runner, logger and VCS facade
- Custom exception hierarchy
"""

from .bootstrap import bootstrap, is_initialized, reset
from .container import ServiceContainer, get_container, resolve
from .exceptions import (
    CmBridgeConfigError,
    CmBridgeException,
    CommandError,
    CommandFailedError,
    CommandLaunchError,
    CommandTimeoutError,
    ConfigFileError,
    ConfigValidationError,
    OperationError,
    ParseError,
    SessionClosedError,
    UnsupportedOperationError,
    WorkspaceError,
)

__all__ = [
    "CmBridgeConfigError",
    "CmBridgeException",
    "CommandError",
    "CommandFailedError",
    "CommandLaunchError",
    "CommandTimeoutError",
    "ConfigFileError",
    "ConfigValidationError",
    "OperationError",
    "ParseError",
    "ServiceContainer",
    "SessionClosedError",
    "UnsupportedOperationError",
    "WorkspaceError",
    "bootstrap",
    "get_container",
    "is_initialized",
    "reset",
    "resolve",
]
