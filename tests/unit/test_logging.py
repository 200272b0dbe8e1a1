"""
Unit tests for the logger.
"""

import logging

from cmbridge.core.bootstrap import bootstrap
from cmbridge.core.di import resolve_or_default
from cmbridge.core.interfaces.logger import ILogger
from cmbridge.core.models.config import LoggingConfig
from cmbridge.core.settings import CmBridgeSettings
from cmbridge.services.logging import CmBridgeLogger, NullLogger


class TestCmBridgeLogger:
    """Tests for CmBridgeLogger."""

    def test_file_output(self, tmp_path):
        """Diagnostics at or above the level are written to cmbridge.log."""
        logger = CmBridgeLogger(name="cmbridge.test.file", level="info", log_dir=tmp_path / "logs")

        logger.info("Connected to %s", "MyWorkspace")
        logger.debug("not written")

        content = (tmp_path / "logs" / "cmbridge.log").read_text(encoding="utf-8")
        assert "Connected to MyWorkspace" in content
        assert "not written" not in content

    def test_set_level(self, tmp_path):
        """set_level applies to the handlers already attached."""
        logger = CmBridgeLogger(name="cmbridge.test.level", level="warning", log_dir=tmp_path)

        logger.set_level("debug")
        logger.debug("now visible")

        assert "now visible" in logger.log_file.read_text(encoding="utf-8")

    def test_command_output_has_its_own_file(self, tmp_path):
        """Command output goes to cm-output.log and stays out of the diagnostics log."""
        logger = CmBridgeLogger(name="cmbridge.test.output", level="debug", log_dir=tmp_path)

        logger.command_output("cm status --machinereadable", "CH;c:/ws/a.txt;False;NO_MERGES")
        logger.debug("RunCommand: 'cm status'")

        output = logger.output_file.read_text(encoding="utf-8")
        diagnostics = logger.log_file.read_text(encoding="utf-8")
        assert "'cm status --machinereadable' output (30 chars):" in output
        assert "CH;c:/ws/a.txt" in output
        assert "CH;c:/ws/a.txt" not in diagnostics
        assert "RunCommand" not in output

    def test_command_output_follows_level(self, tmp_path):
        """Below debug level, command output is not written."""
        logger = CmBridgeLogger(name="cmbridge.test.quiet", level="warning", log_dir=tmp_path)

        logger.command_output("cm status", "CH;c:/ws/a.txt;False;NO_MERGES")

        assert logger.output_file.read_text(encoding="utf-8") == ""

    def test_command_output_disabled(self, tmp_path):
        """With output_enabled off, no output file is created."""
        logger = CmBridgeLogger(
            name="cmbridge.test.nooutput", level="debug", output_enabled=False, log_dir=tmp_path
        )

        logger.command_output("cm status", "CH;c:/ws/a.txt;False;NO_MERGES")

        assert not logger.output_file.exists()
        assert logger.log_file.exists()

    def test_no_handlers_when_disabled(self):
        """Without file or console output, neither channel has handlers."""
        CmBridgeLogger(name="cmbridge.test.off", file_enabled=False)
        assert logging.getLogger("cmbridge.test.off").handlers == []
        assert logging.getLogger("cmbridge.test.off.output").handlers == []


class TestLoggerResolution:
    """Tests for the container-provided logger."""

    def test_default_is_null_logger(self):
        """Without bootstrap, components fall back to NullLogger."""
        assert isinstance(resolve_or_default(ILogger, NullLogger), NullLogger)

    def test_bootstrap_registers_logger(self):
        """bootstrap registers a CmBridgeLogger from the logging section."""
        bootstrap(CmBridgeSettings(logging=LoggingConfig(file=False)))
        assert isinstance(resolve_or_default(ILogger, NullLogger), CmBridgeLogger)
