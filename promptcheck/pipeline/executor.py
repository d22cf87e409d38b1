"""Subject execution: run the prompt under test once."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from promptcheck.core.models import TestSpecification
from promptcheck.errors import ParseError, truncate
from promptcheck.judge.prompts import build_subject_prompt
from promptcheck.judge.unwrap import OutputMode

if TYPE_CHECKING:
    from promptcheck.adapters.agent import AgentInvoker

logger = logging.getLogger(__name__)


async def execute_subject(
    spec: TestSpecification,
    *,
    run_index: int,
    invoker: AgentInvoker,
    timeout: float,
) -> str:
    """Execute the subject prompt and return the agent's text verbatim.

    Args:
        spec: Test specification holding the context and subject prompt.
        run_index: Zero-based run index, used for logging and error context.
        invoker: Agent invoker.
        timeout: Deadline in seconds.

    Returns:
        Raw run output.

    Raises:
        ParseError: If the agent reply is not text.
        AgentTimeoutError: If the call times out.
        AgentProcessError: If the process fails.

    """
    logger.debug(f"Executing subject prompt for run {run_index + 1}")
    output = await invoker(build_subject_prompt(spec), mode=OutputMode.RAW, timeout=timeout)
    if not isinstance(output, str):
        raise ParseError(
            "Subject run returned non-text output",
            code="SUBJECT_INVALID_OUTPUT",
            run_index=run_index,
            raw_output=truncate(repr(output)),
        )
    logger.debug(f"Run {run_index + 1} produced {len(output)} characters")
    return output
