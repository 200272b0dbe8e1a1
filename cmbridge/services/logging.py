"""
Diagnostics logging for cmbridge.

Two stdlib loggers share one formatter:

- ``cmbridge``: command lines and timings, parser warnings, filtered
  server messages; written to stderr and/or ``~/.cmbridge/cmbridge.log``.
- ``cmbridge.output``: the full stdout of commands whose output is too long
  for the command log line; written to ``~/.cmbridge/cm-output.log`` only.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from ..core.interfaces.logger import ILogger

LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_FORMATTER = logging.Formatter(
    "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def parse_level(level: str) -> int:
    """Level name to stdlib level; unknown names mean warning."""
    return LEVELS.get(level.lower(), logging.WARNING)


def _detached_logger(name: str) -> logging.Logger:
    # Handlers filter; nothing reaches the root logger
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False
    return logger


class CmBridgeLogger(ILogger):
    """
    Logger of the cm integration.

    Both channels follow the same level, so command output only lands in
    its file when diagnostics are at debug level.
    """

    LOG_DIR = Path.home() / ".cmbridge"
    LOG_FILE_NAME = "cmbridge.log"
    OUTPUT_FILE_NAME = "cm-output.log"
    MAX_FILE_SIZE = 10 * 1024 * 1024
    BACKUP_COUNT = 3

    def __init__(
        self,
        name: str = "cmbridge",
        level: str = "warning",
        console_enabled: bool = False,
        file_enabled: bool = True,
        output_enabled: bool = True,
        log_dir: Path | None = None,
    ) -> None:
        """
        Args:
            name: Name of the diagnostics logger; the output channel is
                its ``.output`` child
            level: Initial level (debug, info, warning, error)
            console_enabled: Also write diagnostics to stderr
            file_enabled: Write diagnostics to the log file
            output_enabled: Write full command output to its own file,
                requires file_enabled
            log_dir: Directory of both files, ``~/.cmbridge`` by default
        """
        self._logger = _detached_logger(name)
        self._output = _detached_logger(f"{name}.output")
        self._log_dir = Path(log_dir) if log_dir is not None else self.LOG_DIR
        self._handlers: list[logging.Handler] = []

        log_level = parse_level(level)
        if console_enabled:
            console = logging.StreamHandler(sys.stderr)
            self._attach(self._logger, console, log_level)
        if file_enabled:
            self._attach(self._logger, self._rotating(self.log_file), log_level)
            if output_enabled:
                self._attach(self._output, self._rotating(self.output_file), log_level)

    @property
    def log_file(self) -> Path:
        return self._log_dir / self.LOG_FILE_NAME

    @property
    def output_file(self) -> Path:
        return self._log_dir / self.OUTPUT_FILE_NAME

    def _rotating(self, path: Path) -> logging.Handler:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=self.MAX_FILE_SIZE,
            backupCount=self.BACKUP_COUNT,
            encoding="utf-8",
        )

    def _attach(self, logger: logging.Logger, handler: logging.Handler, level: int) -> None:
        handler.setLevel(level)
        handler.setFormatter(_FORMATTER)
        logger.addHandler(handler)
        self._handlers.append(handler)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **kwargs)

    def command_output(self, command_line: str, output: str) -> None:
        self._output.debug("'%s' output (%d chars):\n%s", command_line, len(output), output)

    def set_level(self, level: str) -> None:
        log_level = parse_level(level)
        for handler in self._handlers:
            handler.setLevel(log_level)


class NullLogger(ILogger):
    """Discards everything; the default when nothing is registered."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def command_output(self, command_line: str, output: str) -> None:
        pass

    def set_level(self, level: str) -> None:
        pass
