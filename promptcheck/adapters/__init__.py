"""Adapters module for agent CLIs.

This module bridges the pipeline and the agent processes it delegates to.
"""

from promptcheck.adapters.agent import AgentInvoker, CliAgentAdapter
from promptcheck.adapters.process import (
    AgentInvocation,
    AgentProcess,
    ProcessResult,
    ProcessState,
    run_agent_process,
)

__all__ = [
    "AgentInvocation",
    "AgentInvoker",
    "AgentProcess",
    "CliAgentAdapter",
    "ProcessResult",
    "ProcessState",
    "run_agent_process",
]
