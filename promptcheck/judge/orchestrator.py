"""Judge orchestration for one run.

Every requirement of a run is judged by its own agent call and all calls of a
run are in flight together. Cross-run concurrency is bounded by the caller, so
nothing extra is limited here.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from promptcheck.core.models import Requirement, TestSpecification, Verdict
from promptcheck.errors import ABSORBABLE_ERRORS, ParseError, PromptCheckError, truncate
from promptcheck.judge.diagnostic import normalize_verdict, parse_diagnostic_block
from promptcheck.judge.prompts import build_judge_prompt
from promptcheck.judge.unwrap import OutputMode

if TYPE_CHECKING:
    from promptcheck.adapters.agent import AgentInvoker

logger = logging.getLogger(__name__)


def failed_verdict(error: PromptCheckError) -> Verdict:
    """Non-passing verdict standing in for a failed agent call."""
    return Verdict(
        passed=False,
        actual=f"No result: {error.message}",
        expected="A successful agent response",
        score=0.0,
        error=f"{error.code}: {error.message}",
    )


async def judge_requirement(
    spec: TestSpecification,
    run_output: str,
    requirement: Requirement,
    *,
    run_index: int,
    invoker: AgentInvoker,
    timeout: float,
) -> Verdict:
    """Judge one run's output against one requirement.

    Args:
        spec: Test specification the run came from.
        run_output: Raw text produced by the run.
        requirement: Requirement to evaluate.
        run_index: Zero-based run index.
        invoker: Agent invoker.
        timeout: Deadline for the judge call in seconds.

    Returns:
        Normalized verdict.

    Raises:
        ParseError: If the reply holds no diagnostic block.
        AgentTimeoutError: If the judge call times out.
        AgentProcessError: If the judge process fails.

    """
    prompt = build_judge_prompt(spec, run_output, requirement.requirement)
    reply = await invoker(prompt, mode=OutputMode.RAW, timeout=timeout)

    if not isinstance(reply, str):
        raise ParseError(
            "Judge returned non-text response",
            code="JUDGE_INVALID_RESPONSE",
            requirement=requirement.requirement,
            run_index=run_index,
            raw_output=truncate(repr(reply)),
        )

    try:
        fields = parse_diagnostic_block(reply)
    except ParseError as e:
        raise ParseError(
            f"Judge output for requirement {requirement.id} has no diagnostic block",
            code=e.code,
            requirement=requirement.requirement,
            run_index=run_index,
            raw_output=truncate(reply),
        ) from e

    return normalize_verdict(fields, requirement=requirement.requirement, run_index=run_index)


async def judge_run(
    spec: TestSpecification,
    run_output: str,
    *,
    run_index: int,
    invoker: AgentInvoker,
    timeout: float,
) -> list[Verdict]:
    """Judge one run against every requirement in parallel.

    Agent failures of a single judge call become a failed verdict for that
    requirement only. Any other exception propagates once all calls settle.

    Returns:
        One verdict per requirement, in requirement order.

    """
    outcomes = await asyncio.gather(
        *(
            judge_requirement(
                spec,
                run_output,
                requirement,
                run_index=run_index,
                invoker=invoker,
                timeout=timeout,
            )
            for requirement in spec.requirements
        ),
        return_exceptions=True,
    )

    verdicts: list[Verdict] = []
    for requirement, outcome in zip(spec.requirements, outcomes):
        if isinstance(outcome, ABSORBABLE_ERRORS):
            logger.warning(
                f"Judge failed for requirement {requirement.id} run {run_index + 1}: "
                f"[{outcome.code}] {outcome.message}"
            )
            verdicts.append(failed_verdict(outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            verdicts.append(outcome)
    return verdicts
