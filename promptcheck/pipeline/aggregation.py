"""Aggregation of per-run verdicts into requirement and pipeline results."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from promptcheck.core.models import (
    MediaAttachment,
    PipelineResult,
    RequirementResult,
    TestSpecification,
    Verdict,
)
from promptcheck.errors import ValidationError

logger = logging.getLogger(__name__)


def validate_runs(runs: object) -> int:
    """Check that runs is a positive integer.

    Raises:
        ValidationError: With code INVALID_RUNS otherwise.

    """
    if isinstance(runs, bool) or not isinstance(runs, int) or runs <= 0:
        raise ValidationError(
            f"runs must be a positive integer, got {runs!r}",
            code="INVALID_RUNS",
            runs=runs,
        )
    return runs


def validate_threshold(threshold: object) -> float:
    """Check that threshold is a finite number between 0 and 100.

    Raises:
        ValidationError: With code INVALID_THRESHOLD otherwise.

    """
    if (
        isinstance(threshold, bool)
        or not isinstance(threshold, (int, float))
        or not math.isfinite(threshold)
        or not 0 <= threshold <= 100
    ):
        raise ValidationError(
            f"threshold must be a number between 0 and 100, got {threshold!r}",
            code="INVALID_THRESHOLD",
            threshold=threshold,
        )
    return float(threshold)


def calculate_required_passes(runs: int, threshold: float) -> int:
    """Minimum passing runs for a requirement to pass.

    Example:
        >>> calculate_required_passes(4, 75)
        3
        >>> calculate_required_passes(5, 75)
        4

    Raises:
        ValidationError: If runs or threshold are invalid.

    """
    validate_runs(runs)
    validate_threshold(threshold)
    return math.ceil(runs * threshold / 100)


def average_score(verdicts: Sequence[Verdict]) -> float:
    """Mean verdict score rounded to two decimals, 0 when there are none."""
    if not verdicts:
        return 0.0
    return round(sum(v.score for v in verdicts) / len(verdicts), 2)


def aggregate_requirement(
    requirement: str,
    verdicts: Sequence[Verdict],
    *,
    runs: int,
    threshold: float,
    media: Sequence[MediaAttachment] = (),
) -> RequirementResult:
    """Aggregate one requirement's verdicts across all runs."""
    required = calculate_required_passes(runs, threshold)
    pass_count = sum(1 for v in verdicts if v.passed)
    return RequirementResult(
        requirement=requirement,
        passed=pass_count >= required,
        pass_count=pass_count,
        total_runs=runs,
        average_score=average_score(verdicts),
        run_results=tuple(verdicts),
        media=tuple(media),
    )


def aggregate_results(
    spec: TestSpecification,
    run_verdicts: Sequence[Sequence[Verdict]],
    *,
    runs: int,
    threshold: float,
    media: Mapping[int, Sequence[MediaAttachment]] | None = None,
) -> PipelineResult:
    """Aggregate all verdicts of a pipeline.

    Args:
        spec: Specification the verdicts were produced for.
        run_verdicts: Per run, one verdict per requirement in requirement order.
        runs: Number of runs requested.
        threshold: Pass threshold percentage.
        media: Optional media attachments keyed by requirement id.

    Returns:
        The pipeline result; it passes only if every requirement passes.

    Raises:
        ValidationError: If runs or threshold are invalid, or a run does not
            hold one verdict per requirement.

    """
    media = media or {}
    requirement_count = len(spec.requirements)
    for index, verdicts in enumerate(run_verdicts):
        if len(verdicts) != requirement_count:
            raise ValidationError(
                f"Run {index + 1} has {len(verdicts)} verdict(s) for "
                f"{requirement_count} requirement(s)",
                code="VERDICT_COUNT_MISMATCH",
                run_index=index,
            )

    results = tuple(
        aggregate_requirement(
            requirement.requirement,
            [verdicts[position] for verdicts in run_verdicts],
            runs=runs,
            threshold=threshold,
            media=media.get(requirement.id, ()),
        )
        for position, requirement in enumerate(spec.requirements)
    )

    passed = all(r.passed for r in results)
    logger.info(
        f"Aggregated {len(results)} requirement(s) over {runs} run(s): "
        f"{'PASS' if passed else 'FAIL'}"
    )
    return PipelineResult(passed=passed, requirements=results)
