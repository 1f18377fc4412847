"""
Execution mode controller.

Decides for each trigger whether the command runs in the foreground,
is spawned in the background, or is rejected because a background job
is still in flight. All bookkeeping happens under a single asyncio lock
owned by the controller instance.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from runcommand.modules.config import CommandConfig

from .shell_runner import RunningCommand, ShellRunner, SpawnError, expand_command

logger = logging.getLogger(__name__)

# Seconds a running background job is awaited when the service stops
SHUTDOWN_GRACE_PERIOD = 5.0


class TriggerOutcome(str, Enum):
    """Result of handling one trigger."""

    COMPLETED = "completed"
    SPAWNED = "spawned"
    CONFLICT = "conflict"


@dataclass
class TriggerResult:
    """Outcome of a trigger; exit_code is set only for COMPLETED."""

    outcome: TriggerOutcome
    exit_code: Optional[int] = None

    @property
    def success(self) -> bool:
        if self.outcome == TriggerOutcome.COMPLETED:
            return self.exit_code == 0
        return self.outcome == TriggerOutcome.SPAWNED


class ExecutionController:
    """
    Execution mode state machine (Idle / BackgroundRunning).

    The lock is held for the whole of a foreground run, so every trigger
    is serialized with every other one. A background job sets is_running
    until its completion task observes the process exit; there is no
    timeout, a hung job blocks further background triggers until restart.
    """

    def __init__(
        self,
        config: CommandConfig,
        runner: ShellRunner,
        shutdown_grace_period: float = SHUTDOWN_GRACE_PERIOD,
    ):
        """
        Initialize controller.

        Args:
            config: Validated command configuration
            runner: Shell runner used for every invocation
            shutdown_grace_period: Seconds shutdown() waits for a background job
        """
        self.config = config
        self.runner = runner
        self.shutdown_grace_period = shutdown_grace_period
        self._lock = asyncio.Lock()
        self._is_running = False
        self._background_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        """True while a background job is in flight."""
        return self._is_running

    async def run_once(self) -> int:
        """
        Execute the command a single time and return its exit code.

        Raises:
            SpawnError: If the shell cannot be started
        """
        command = expand_command(self.config.command)
        logger.info("Running command once")
        exit_code = await self.runner.run(command)
        logger.info(f"Command finished with exit code {exit_code}")
        return exit_code

    async def trigger(self) -> TriggerResult:
        """
        Handle one trigger according to the configured mode.

        Raises:
            SpawnError: If the shell cannot be started
        """
        async with self._lock:
            if self.config.run_in_background:
                return await self._start_background()
            return await self._run_foreground()

    async def _run_foreground(self) -> TriggerResult:
        command = expand_command(self.config.command)
        exit_code = await self.runner.run(command)
        if exit_code != 0:
            logger.warning(f"Command exited with code {exit_code}")
        else:
            logger.info("Command completed successfully")
        return TriggerResult(outcome=TriggerOutcome.COMPLETED, exit_code=exit_code)

    async def _start_background(self) -> TriggerResult:
        if self._is_running:
            logger.info("Rejecting trigger, background job still running")
            return TriggerResult(outcome=TriggerOutcome.CONFLICT)

        command = expand_command(self.config.command)
        self._is_running = True
        try:
            running = await self.runner.spawn(command)
        except SpawnError:
            self._is_running = False
            raise

        logger.info(f"Background job spawned (pid {running.pid})")
        self._background_task = asyncio.create_task(self._finish_background(running))
        return TriggerResult(outcome=TriggerOutcome.SPAWNED)

    async def _finish_background(self, running: RunningCommand) -> None:
        """Wait for the background process, then clear the running flag."""
        try:
            exit_code = await running.wait()
            logger.info(f"Background job finished with exit code {exit_code}")
        finally:
            async with self._lock:
                self._is_running = False

    async def wait_for_background(self) -> None:
        """Block until the current background job, if any, has completed."""
        task = self._background_task
        if task is not None:
            await task

    async def shutdown(self) -> None:
        """
        Give a running background job shutdown_grace_period seconds to finish.

        The process itself is never killed. If it outlives the grace period,
        its completion task is cancelled and its output stops being relayed.
        """
        task = self._background_task
        if task is None or task.done():
            return

        done, _ = await asyncio.wait({task}, timeout=self.shutdown_grace_period)
        if done:
            return

        logger.warning(
            "Background job still running at shutdown; the process is left running "
            "and its output is no longer relayed"
        )
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Stopped monitoring background job")
