"""
Application bootstrap for cmbridge.

Registers the logger, settings and VCS provider in the DI container. Called once by the
CLI at startup; library users may call it or construct services directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .container import ServiceContainer, get_container
from .interfaces.logger import ILogger

if TYPE_CHECKING:
    from .settings import CmBridgeSettings

_initialized = False


def bootstrap(settings: CmBridgeSettings | None = None) -> ServiceContainer:
    """
    Bootstrap the cmbridge application.

    Args:
        settings: Loaded settings; loaded from disk and environment if None

    Returns:
        Initialized ServiceContainer
    """
    global _initialized

    container = get_container()

    if _initialized:
        return container

    from .settings import CmBridgeSettings, load_settings

    if settings is None:
        settings = load_settings()
    container.register_singleton(CmBridgeSettings, implementation=settings)
    _register_logger(container, settings)
    _register_vcs_provider(container, settings)

    _initialized = True
    return container


def _register_logger(container: ServiceContainer, settings: CmBridgeSettings) -> None:
    """Register the logger configured from the logging section."""
    from ..services.logging import CmBridgeLogger

    def create_logger() -> ILogger:
        return CmBridgeLogger(
            level=settings.logging.level,
            console_enabled=settings.logging.console,
            file_enabled=settings.logging.file,
            output_enabled=settings.logging.command_output,
        )

    container.register_singleton(ILogger, factory=create_logger)  # type: ignore[type-abstract]


def _register_vcs_provider(container: ServiceContainer, settings: CmBridgeSettings) -> None:
    """Register the cm provider used by the CLI."""
    from ..plugins.vcs import CmVCSProvider
    from .interfaces.vcs import IVCSProvider

    def create_provider() -> IVCSProvider:
        return CmVCSProvider(settings=settings, logger=container.resolve(ILogger))  # type: ignore[type-abstract]

    container.register_singleton(IVCSProvider, factory=create_provider)  # type: ignore[type-abstract]


def reset() -> None:
    """
    Reset the application state.

    Useful for testing to ensure clean state between tests.
    """
    global _initialized
    ServiceContainer.reset()
    _initialized = False


def is_initialized() -> bool:
    """Check if the application has been bootstrapped."""
    return _initialized
