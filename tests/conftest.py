"""
Shared pytest fixtures for Run Command Service tests.

This module provides common fixtures including:
- FakeRunner: In-memory stand-in for ShellRunner with controllable completion
- Config file and ServiceConfig builders
- Output sinks for the real ShellRunner
"""

import asyncio
import io
import os
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from runcommand.modules.config import CommandConfig, ServiceConfig
from runcommand.modules.executor import ShellRunner

TEST_SECRET = "test-secret"


# =============================================================================
# Runner Mocking Infrastructure
# =============================================================================


class FakeRunning:
    """Spawned process stand-in that finishes when its runner is released."""

    pid = 4242

    def __init__(self, release: asyncio.Event, exit_code: int):
        self._release = release
        self._exit_code = exit_code

    async def wait(self) -> int:
        await self._release.wait()
        return self._exit_code


class FakeRunner:
    """
    Records every command it is asked to execute.

    Foreground runs sleep briefly so overlapping calls would be visible
    in max_active; background jobs stay in flight until release() is called.
    """

    def __init__(self, exit_code: int = 0):
        self.exit_code = exit_code
        self.commands: List[str] = []
        self.active = 0
        self.max_active = 0
        self._release = asyncio.Event()

    def release(self) -> None:
        self._release.set()

    async def spawn(self, command: str) -> FakeRunning:
        self.commands.append(command)
        return FakeRunning(self._release, self.exit_code)

    async def run(self, command: str) -> int:
        self.commands.append(command)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0.01)
        finally:
            self.active -= 1
        return self.exit_code


@pytest.fixture
def fake_runner():
    """Runner double that never starts a process."""
    return FakeRunner()


# =============================================================================
# Shell Runner Fixtures
# =============================================================================


@pytest.fixture
def sinks():
    """Separate stdout/stderr buffers for a real ShellRunner."""
    return io.StringIO(), io.StringIO()


@pytest.fixture
def shell_runner(sinks):
    """ShellRunner using /bin/sh and writing into in-memory sinks."""
    stdout, stderr = sinks
    return ShellRunner("/bin/sh", stdout=stdout, stderr=stderr)


def gate_command(gate: Path) -> str:
    """Shell command that keeps running until the gate file exists."""
    return f'while [ ! -f "{gate}" ]; do sleep 0.05; done'


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML command config and return its path."""

    def _write(content: str, name: str = "config.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


def make_service_config(
    command: str,
    run_in_background: bool = False,
    shell_path: str = "/bin/sh",
    secret: Optional[str] = TEST_SECRET,
) -> ServiceConfig:
    """Build a ServiceConfig without touching the environment."""
    return ServiceConfig(
        command=CommandConfig(command=command, run_in_background=run_in_background),
        execute_secret=secret,
        shell_path=shell_path,
        host="127.0.0.1",
        port=8080,
    )
