"""
Shared pytest fixtures for cmbridge tests.

This module provides fixtures for testing without a cm installation:
- fake_runner: Scripted command runner recording every call
- workspace: Temporary directory laid out as a cm workspace
- session: Started and connected ProviderSession on the fake runner
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import pytest

from cmbridge.core.bootstrap import reset
from cmbridge.core.interfaces.runner import ICommandRunner
from cmbridge.core.models.command import CommandOutcome, CommandResult
from cmbridge.core.models.config import LoggingConfig
from cmbridge.core.settings import CmBridgeSettings


@dataclass
class ScriptedResponse:
    """Canned answer for every call of a command whose arguments contain ``match``."""

    command: str
    stdout: str = ""
    errors: tuple[str, ...] = ()
    returncode: int = 0
    xml: str | None = None
    match: tuple[str, ...] = ()
    gate: threading.Event | None = None
    outcome: CommandOutcome | None = None


class FakeRunner(ICommandRunner):
    """
    Command runner answering from a script.

    Responses are matched in the order they were added; the first whose
    command and ``match`` substrings fit the call wins. A response with
    ``xml`` writes it to the path given by ``--xml=`` or ``--file=``. A
    response with a ``gate`` blocks until the gate or the cancel event is
    set.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[str, ...], tuple[str, ...]]] = []
        self._responses: list[ScriptedResponse] = []
        self._lock = threading.Lock()

    def add(self, command: str, stdout: str = "", *, match: Sequence[str] = (), **kwargs) -> ScriptedResponse:
        response = ScriptedResponse(command=command, stdout=stdout, match=tuple(match), **kwargs)
        self._responses.append(response)
        return response

    def count(self, command: str, *match: str) -> int:
        with self._lock:
            return sum(
                1
                for cmd, params, files in self.calls
                if cmd == command and all(m in " ".join((*params, *files)) for m in match)
            )

    def run(
        self,
        command: str,
        parameters: Sequence[str] = (),
        files: Sequence[str] = (),
        *,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        parameters, files = tuple(parameters), tuple(files)
        with self._lock:
            self.calls.append((command, parameters, files))
        arguments = " ".join((*parameters, *files))
        response = next(
            (
                r
                for r in self._responses
                if r.command == command and all(m in arguments for m in r.match)
            ),
            None,
        )
        if response is None:
            return CommandResult(
                command=command,
                arguments=(*parameters, *files),
                errors=(f"unexpected command: cm {command} {arguments}",),
                returncode=1,
                outcome=CommandOutcome.FAILED,
            )

        if response.gate is not None:
            while not response.gate.wait(0.01):
                if cancel_event is not None and cancel_event.is_set():
                    return CommandResult(
                        command=command,
                        arguments=(*parameters, *files),
                        outcome=CommandOutcome.CANCELLED,
                    )

        if response.xml is not None:
            for parameter in parameters:
                for prefix in ("--xml=", "--file="):
                    if parameter.startswith(prefix):
                        Path(parameter[len(prefix) :]).write_text(response.xml, encoding="utf-8")

        outcome = response.outcome
        if outcome is None:
            outcome = CommandOutcome.SUCCEEDED if response.returncode == 0 else CommandOutcome.FAILED
        return CommandResult(
            command=command,
            arguments=(*parameters, *files),
            stdout=response.stdout,
            errors=tuple(response.errors),
            returncode=response.returncode,
            outcome=outcome,
        )


def script_connect(runner: FakeRunner) -> FakeRunner:
    """Answers for the commands run when connecting."""
    runner.add("version", "11.0.16.8101\n")
    runner.add("workspaceinfo", "Branch /main@MyProject@localhost:8087\n")
    runner.add("getworkspacefrompath", "MyWorkspace\n")
    runner.add("profile", "localhost:8087;jane\n")
    runner.add("status", "STATUS;41;MyProject;localhost:8087\n", match=["--header"])
    return runner


@pytest.fixture(autouse=True)
def reset_container():
    """Start and end each test with an empty DI container."""
    reset()
    yield
    reset()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings() -> CmBridgeSettings:
    """Default settings, without writing a log file."""
    return CmBridgeSettings(logging=LoggingConfig(file=False))


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A directory with the .plastic metadata directory of a workspace."""
    (tmp_path / ".plastic").mkdir()
    return tmp_path


@pytest.fixture
def session(workspace, fake_runner, settings):
    """A connected ProviderSession answering from fake_runner."""
    from cmbridge.services.session import ProviderSession

    script_connect(fake_runner)
    provider_session = ProviderSession(str(workspace), settings=settings, runner=fake_runner)
    provider_session.start()
    provider_session.connect(timeout=5)
    yield provider_session
    provider_session.shutdown()


@pytest.fixture
def connected_runner(fake_runner) -> FakeRunner:
    """fake_runner with the answers needed to connect a session."""
    return script_connect(fake_runner)
