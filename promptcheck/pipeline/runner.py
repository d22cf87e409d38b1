"""End-to-end prompt test pipeline.

Extract once, then for every run execute the subject prompt and judge the
output against each requirement, and finally aggregate:

    validate runs/threshold -> guard path -> read file -> extract
      -> runs (bounded) [execute -> judge requirements (parallel)]
      -> aggregate

Extraction failures abort before any run is spent. Agent failures during a
run are recorded as failed verdicts and the remaining runs continue.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from promptcheck.adapters.agent import CliAgentAdapter
from promptcheck.config.constants import DEFAULT_AGENT
from promptcheck.config.loader import get_agent_config
from promptcheck.config.models import RunnerConfig
from promptcheck.core.models import MediaAttachment, PipelineResult, TestSpecification, Verdict
from promptcheck.errors import ABSORBABLE_ERRORS, ValidationError
from promptcheck.fileio import PathResolver, TextReader, read_text_file, resolve_path
from promptcheck.judge.orchestrator import failed_verdict, judge_run
from promptcheck.pipeline.aggregation import aggregate_results, calculate_required_passes
from promptcheck.pipeline.executor import execute_subject
from promptcheck.pipeline.extractor import extract_specification
from promptcheck.pipeline.scheduler import limit_concurrency
from promptcheck.validation import validate_file_path

if TYPE_CHECKING:
    from promptcheck.adapters.agent import AgentInvoker

logger = logging.getLogger(__name__)


async def run_single(
    spec: TestSpecification,
    *,
    run_index: int,
    invoker: AgentInvoker,
    timeout: float,
) -> list[Verdict]:
    """Execute and judge one run.

    A failed subject execution yields a failed verdict for every requirement.

    Returns:
        One verdict per requirement, in requirement order.

    """
    try:
        output = await execute_subject(spec, run_index=run_index, invoker=invoker, timeout=timeout)
    except ABSORBABLE_ERRORS as e:
        logger.warning(f"Run {run_index + 1} failed: [{e.code}] {e.message}")
        verdict = failed_verdict(e)
        return [verdict for _ in spec.requirements]

    return await judge_run(spec, output, run_index=run_index, invoker=invoker, timeout=timeout)


async def _read_test_file(path: Path, read_text: TextReader) -> str:
    try:
        return await read_text(path)
    except OSError as e:
        raise ValidationError(
            f"Failed to read test file: {path}",
            code="TEST_FILE_READ_FAILED",
            path=str(path),
        ) from e


async def run_prompt_tests(
    file_path: str | Path,
    *,
    project_root: str | Path,
    config: RunnerConfig | None = None,
    invoker: AgentInvoker | None = None,
    media: Mapping[int, Sequence[MediaAttachment]] | None = None,
    read_text: TextReader = read_text_file,
    resolve: PathResolver = resolve_path,
) -> PipelineResult:
    """Run a prompt test file and aggregate the verdicts.

    Args:
        file_path: Test file path, relative to project_root or absolute inside it.
        project_root: Directory the test file must live in; imports resolve
            against it.
        config: Runs, threshold, concurrency, timeout and agent. Defaults apply
            when omitted.
        invoker: Agent invoker. Built from config.agent, or the default preset,
            when omitted.
        media: Optional media attachments keyed by requirement id.
        read_text: Reader for the test file and its imports. Reads the local
            filesystem when omitted.
        resolve: Path resolver for the root, the test file and imports.

    Returns:
        Aggregated pipeline result.

    Raises:
        ValidationError: For invalid runs, threshold, an unreadable test file or
            a failed extraction.
        SecurityError: If file_path escapes project_root.
        ParseError: If the extraction reply is not structured data.
        AgentTimeoutError: If the extraction call times out.
        AgentProcessError: If the extraction process fails.

    """
    config = config or RunnerConfig()
    required = calculate_required_passes(config.runs, config.threshold)

    root = resolve(Path(project_root))
    test_path = validate_file_path(file_path, root, resolve=resolve)
    test_content = await _read_test_file(test_path, read_text)

    if invoker is None:
        invoker = CliAgentAdapter(config.agent or get_agent_config(DEFAULT_AGENT))

    spec = await extract_specification(
        test_content,
        project_root=root,
        invoker=invoker,
        timeout=config.timeout_seconds,
        read_text=read_text,
        resolve=resolve,
    )

    logger.info(
        f"Running {test_path.name}: {config.runs} run(s), {len(spec.requirements)} "
        f"requirement(s), {required} pass(es) required, concurrency {config.concurrency}"
    )

    run_verdicts = await limit_concurrency(
        [
            partial(
                run_single,
                spec,
                run_index=index,
                invoker=invoker,
                timeout=config.timeout_seconds,
            )
            for index in range(config.runs)
        ],
        config.concurrency,
    )

    return aggregate_results(
        spec,
        run_verdicts,
        runs=config.runs,
        threshold=config.threshold,
        media=media,
    )
