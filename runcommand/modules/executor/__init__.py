"""
Executor Module - Black Box Interface

Purpose: Run the configured shell command in the configured execution mode
Interface: ShellRunner.run()/spawn(), ExecutionController.trigger()/run_once()
Hidden: Subprocess handling, output relaying, background single-flight bookkeeping

Output of the command goes to the service's own stdout/stderr, never back
to the caller.
"""

from .controller import ExecutionController, TriggerOutcome, TriggerResult
from .shell_runner import (
    GENERIC_FAILURE_CODE,
    RunningCommand,
    ShellRunner,
    SpawnError,
    expand_command,
)

__all__ = [
    "ExecutionController",
    "GENERIC_FAILURE_CODE",
    "RunningCommand",
    "ShellRunner",
    "SpawnError",
    "TriggerOutcome",
    "TriggerResult",
    "expand_command",
]
