"""
Shell runner for the configured command.

Starts the configured shell with ``-c <command>`` and relays the child's
stdout and stderr to the host's own streams while it runs. The caller
gets the exit code back once the shell process has terminated, even if
processes it left behind still hold the output pipes open.
"""

import asyncio
import codecs
import logging
import os
import re
import sys
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

# Exit code reported when the child yields none (killed by a signal)
GENERIC_FAILURE_CODE = 1

# Time allowed after exit for the relays to forward buffered output
RELAY_DRAIN_TIMEOUT = 0.5

_CHUNK_SIZE = 4096
_EXIT_POLL_INTERVAL = 0.02

# $NAME, ${NAME}, single-character special names, or a dangling "${"
_ENV_REFERENCE = re.compile(r"\$(?:\{([^}]*)\}|([*#$@!?\-0-9])|([A-Za-z0-9_]+)|\{)")


class SpawnError(Exception):
    """The shell process could not be started."""


def expand_command(template: str) -> str:
    """
    Expand environment references against the current environment.

    ``$NAME``, ``${NAME}`` and special names such as ``$1`` or ``$?`` are
    replaced by their value, or by an empty string when unset. ``${}``
    and an unterminated ``${`` are dropped. A ``$`` not followed by a
    name, as in ``$(date)``, is kept.

    Called right before every invocation so that environment changes
    between triggers are picked up.
    """

    def _substitute(match: re.Match) -> str:
        name = match.group(1) or match.group(2) or match.group(3)
        if not name:
            return ""
        return os.environ.get(name, "")

    return _ENV_REFERENCE.sub(_substitute, template)


def normalize_exit_code(returncode: Optional[int]) -> int:
    """Map a subprocess return code to the exit code reported to callers."""
    if returncode is None or returncode < 0:
        return GENERIC_FAILURE_CODE
    return returncode


async def _relay(reader: asyncio.StreamReader, sink: TextIO) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await reader.read(_CHUNK_SIZE)
        if not chunk:
            break
        sink.write(decoder.decode(chunk))
        sink.flush()
    tail = decoder.decode(b"", final=True)
    if tail:
        sink.write(tail)
        sink.flush()


class RunningCommand:
    """Handle on a spawned shell process and its output relays."""

    def __init__(self, process: asyncio.subprocess.Process, relays: list):
        self.process = process
        self._relays = relays

    @property
    def pid(self) -> int:
        return self.process.pid

    async def wait(self) -> int:
        """
        Wait for the shell process to exit, then drain its output relays.

        Relays still open after RELAY_DRAIN_TIMEOUT belong to processes
        the command left running; they are cancelled.

        Returns:
            Normalized exit code
        """
        try:
            await self._wait_for_exit()
        except asyncio.CancelledError:
            self._cancel_relays()
            raise

        _, pending = await asyncio.wait(self._relays, timeout=RELAY_DRAIN_TIMEOUT)
        if pending:
            logger.debug(f"Output pipes of pid {self.pid} still open after exit, relay stopped")
            self._cancel_relays()
        return normalize_exit_code(self.process.returncode)

    async def _wait_for_exit(self) -> None:
        # Process.wait() can also wait for the pipes to close; returncode is set on exit
        while self.process.returncode is None:
            await asyncio.sleep(_EXIT_POLL_INTERVAL)

    def _cancel_relays(self) -> None:
        for relay in self._relays:
            if not relay.done():
                relay.cancel()


class ShellRunner:
    """Runs command strings through a configured shell interpreter."""

    def __init__(
        self,
        shell_path: str,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        """
        Initialize shell runner.

        Args:
            shell_path: Shell executable invoked as ``<shell_path> -c <command>``
            stdout: Sink for the child's stdout (host stdout when None)
            stderr: Sink for the child's stderr (host stderr when None)
        """
        self.shell_path = shell_path
        self._stdout = stdout
        self._stderr = stderr

    async def spawn(self, command: str) -> RunningCommand:
        """
        Start the shell and begin relaying its output.

        Args:
            command: Fully expanded command string

        Returns:
            RunningCommand handle

        Raises:
            SpawnError: If the process cannot be started
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.shell_path,
                "-c",
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnError(f"Error starting command: {e}") from e

        # Host streams are looked up per call so redirected streams are honoured
        stdout_sink = self._stdout or sys.stdout
        stderr_sink = self._stderr or sys.stderr
        relays = [
            asyncio.create_task(_relay(process.stdout, stdout_sink)),
            asyncio.create_task(_relay(process.stderr, stderr_sink)),
        ]
        logger.debug(f"Spawned {self.shell_path} (pid {process.pid})")
        return RunningCommand(process, relays)

    async def run(self, command: str) -> int:
        """Run a command to completion and return its exit code."""
        running = await self.spawn(command)
        return await running.wait()
