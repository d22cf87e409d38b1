"""Prompt test pipeline: extraction, execution, scheduling and aggregation."""

from promptcheck.pipeline.aggregation import (
    aggregate_requirement,
    aggregate_results,
    average_score,
    calculate_required_passes,
)
from promptcheck.pipeline.executor import execute_subject
from promptcheck.pipeline.extractor import extract_specification, resolve_imports
from promptcheck.pipeline.runner import run_prompt_tests, run_single
from promptcheck.pipeline.scheduler import limit_concurrency

__all__ = [
    "aggregate_requirement",
    "aggregate_results",
    "average_score",
    "calculate_required_passes",
    "execute_subject",
    "extract_specification",
    "limit_concurrency",
    "resolve_imports",
    "run_prompt_tests",
    "run_single",
]
