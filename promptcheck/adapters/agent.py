"""CLI adapter that turns an agent configuration into an invoker.

The pipeline never spawns processes itself. It calls an ``AgentInvoker``:
an async callable taking a prompt, an output mode and a timeout. The adapter
here is the production invoker; tests substitute any async callable.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from promptcheck.adapters.process import AgentInvocation, ProcessResult, run_agent_process
from promptcheck.config.constants import DEFAULT_TIMEOUT_SECONDS
from promptcheck.config.models import AgentConfig
from promptcheck.judge.unwrap import OutputMode, parse_event_stream, unwrap_output

logger = logging.getLogger(__name__)

ProcessRunner = Callable[[AgentInvocation], Awaitable[ProcessResult]]


class AgentInvoker(Protocol):
    """Callable that sends one prompt to an agent and returns its unwrapped reply."""

    async def __call__(self, prompt: str, *, mode: OutputMode, timeout: float) -> Any:
        """Invoke the agent.

        Raises:
            AgentTimeoutError: If the agent exceeds the timeout.
            AgentProcessError: If the agent exits non-zero or cannot be spawned.
            ParseError: If an event stream holds no text.

        """
        ...


class CliAgentAdapter:
    """Invoke an agent CLI described by an AgentConfig.

    Example:
        >>> adapter = CliAgentAdapter(get_agent_config("claude"))
        >>> reply = await adapter("Say hi", mode=OutputMode.RAW, timeout=60)

    """

    def __init__(
        self,
        config: AgentConfig,
        run_process: ProcessRunner = run_agent_process,
    ) -> None:
        """Initialize the adapter.

        Args:
            config: Agent command, arguments and output format.
            run_process: Coroutine executing an AgentInvocation.

        """
        self.config = config
        self._run_process = run_process

    def build_invocation(self, prompt: str, timeout: float) -> AgentInvocation:
        """Build the subprocess call for a prompt."""
        if self.config.prompt_transport == "stdin":
            return AgentInvocation(
                command=self.config.command,
                arguments=list(self.config.args),
                input_text=prompt,
                timeout=timeout,
            )
        return AgentInvocation(
            command=self.config.command,
            arguments=[*self.config.args, prompt],
            timeout=timeout,
        )

    async def __call__(
        self,
        prompt: str,
        *,
        mode: OutputMode = OutputMode.STRUCTURED,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> Any:
        """Send a prompt to the agent and unwrap its reply.

        Args:
            prompt: Instruction text.
            mode: Structured or raw unwrapping.
            timeout: Deadline in seconds.

        Returns:
            Structured data or text, depending on mode.

        """
        logger.debug(f"Invoking {self.config.command} with {len(prompt)} character prompt")
        result = await self._run_process(self.build_invocation(prompt, timeout))

        output = result.stdout
        if self.config.output_format == "ndjson":
            output = parse_event_stream(output)

        return unwrap_output(output, mode)
