"""Agent subprocess lifecycle.

Each agent call spawns one subprocess and drives it through an explicit state
machine:

  PENDING
    -> SPAWNED    (process created)
    -> RUNNING    (stdin written / closed, output being read)
    -> EXITED     (process ended on its own)
    -> TIMED_OUT  (deadline passed first)
    -> KILLED     (timed-out process terminated and reaped)
  PENDING -> FAILED when the executable cannot be spawned.

Only listed transitions are taken and terminal states never change, so a
timeout and a natural exit arriving together resolve to exactly one outcome.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from promptcheck.config.constants import DEFAULT_TIMEOUT_SECONDS
from promptcheck.errors import AgentProcessError, AgentTimeoutError, truncate

logger = logging.getLogger(__name__)


class ProcessState(str, Enum):
    """Lifecycle state of an agent subprocess."""

    PENDING = "pending"
    SPAWNED = "spawned"
    RUNNING = "running"
    EXITED = "exited"
    TIMED_OUT = "timed_out"
    KILLED = "killed"
    FAILED = "failed"


_TRANSITIONS: dict[ProcessState, frozenset[ProcessState]] = {
    ProcessState.PENDING: frozenset({ProcessState.SPAWNED, ProcessState.FAILED}),
    ProcessState.SPAWNED: frozenset({ProcessState.RUNNING}),
    ProcessState.RUNNING: frozenset({ProcessState.EXITED, ProcessState.TIMED_OUT}),
    ProcessState.TIMED_OUT: frozenset({ProcessState.KILLED}),
}

TERMINAL_STATES: frozenset[ProcessState] = frozenset(
    {ProcessState.EXITED, ProcessState.KILLED, ProcessState.FAILED}
)


@dataclass
class AgentInvocation:
    """One agent call: what to spawn, what to feed it and how long to wait.

    Attributes:
        command: Executable to spawn.
        arguments: Arguments passed to the executable.
        input_text: Text written to stdin, or None to close stdin immediately.
        timeout: Deadline in seconds.

    """

    command: str
    arguments: list[str] = field(default_factory=list)
    input_text: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def display_command(self) -> str:
        """Command line shortened for logs and error context."""
        return truncate(" ".join([self.command, *self.arguments]), 200)


@dataclass
class ProcessResult:
    """Output of an agent process that exited with status 0."""

    exit_code: int
    stdout: str
    stderr: str
    duration_seconds: float


class AgentProcess:
    """Runs one AgentInvocation and tracks its lifecycle state."""

    def __init__(self, invocation: AgentInvocation) -> None:
        """Initialize the process wrapper.

        Args:
            invocation: The call to execute.

        """
        self.invocation = invocation
        self.state = ProcessState.PENDING
        self.history: list[ProcessState] = [ProcessState.PENDING]
        self._proc: asyncio.subprocess.Process | None = None

    def advance(self, to_state: ProcessState) -> bool:
        """Move to a new state if the transition is allowed.

        Returns:
            True if the transition happened, False if it was rejected.

        """
        if to_state not in _TRANSITIONS.get(self.state, frozenset()):
            logger.debug(f"Ignoring transition {self.state.value} -> {to_state.value}")
            return False
        self.state = to_state
        self.history.append(to_state)
        return True

    async def run(self) -> ProcessResult:
        """Spawn the process, wait for it and collect its output.

        Returns:
            ProcessResult for a zero exit status.

        Raises:
            AgentProcessError: If the process cannot be spawned or exits non-zero.
            AgentTimeoutError: If the deadline passes first; the process is killed.

        """
        invocation = self.invocation
        command = invocation.display_command
        start = time.monotonic()

        try:
            self._proc = await asyncio.create_subprocess_exec(
                invocation.command,
                *invocation.arguments,
                stdin=(
                    asyncio.subprocess.PIPE
                    if invocation.input_text is not None
                    else asyncio.subprocess.DEVNULL
                ),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self.advance(ProcessState.FAILED)
            raise AgentProcessError(
                f"Failed to spawn agent process: {e}",
                code="AGENT_SPAWN_FAILURE",
                command=command,
            ) from e

        self.advance(ProcessState.SPAWNED)
        logger.debug(f"Spawned agent process {self._proc.pid}: {command}")

        stdin_bytes = (
            invocation.input_text.encode("utf-8") if invocation.input_text is not None else None
        )
        self.advance(ProcessState.RUNNING)
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                self._proc.communicate(stdin_bytes), timeout=invocation.timeout
            )
        except asyncio.TimeoutError:
            if self.advance(ProcessState.TIMED_OUT):
                await self._kill()
            raise AgentTimeoutError(
                f"Agent process timed out after {invocation.timeout} seconds",
                command=command,
                timeout=invocation.timeout,
            ) from None
        except asyncio.CancelledError:
            if self.advance(ProcessState.TIMED_OUT):
                await self._kill()
            raise

        self.advance(ProcessState.EXITED)
        duration = time.monotonic() - start
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        exit_code = self._proc.returncode if self._proc.returncode is not None else -1

        logger.debug(
            f"Agent process exited with code {exit_code} after {duration:.1f}s "
            f"(stdout {len(stdout)} chars, stderr {len(stderr)} chars)"
        )

        if exit_code != 0:
            raise AgentProcessError(
                f"Agent process exited with code {exit_code}",
                command=command,
                exit_code=exit_code,
                stderr=truncate(stderr),
                stdout_preview=truncate(stdout),
            )

        return ProcessResult(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_seconds=duration,
        )

    async def _kill(self) -> None:
        if self._proc is None:
            return
        try:
            self._proc.kill()
        except ProcessLookupError:
            # Exited between the deadline and the kill.
            pass
        await self._proc.wait()
        self.advance(ProcessState.KILLED)
        logger.warning(f"Killed agent process {self._proc.pid}")


async def run_agent_process(invocation: AgentInvocation) -> ProcessResult:
    """Execute one agent invocation. See AgentProcess.run."""
    return await AgentProcess(invocation).run()
