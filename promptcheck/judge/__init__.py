"""Judge module for parsing agent replies and scoring runs.

This module provides output unwrapping, diagnostic block parsing, instruction
templates and the per-run judge fan-out.
"""

from promptcheck.judge.diagnostic import (
    format_diagnostic_block,
    normalize_verdict,
    parse_diagnostic_block,
)
from promptcheck.judge.orchestrator import failed_verdict, judge_requirement, judge_run
from promptcheck.judge.prompts import (
    build_extraction_prompt,
    build_judge_prompt,
    build_subject_prompt,
)
from promptcheck.judge.unwrap import (
    OutputMode,
    parse_event_stream,
    parse_string_result,
    unwrap_output,
    unwrap_raw,
    unwrap_structured,
)

__all__ = [
    # Diagnostic
    "format_diagnostic_block",
    "normalize_verdict",
    "parse_diagnostic_block",
    # Orchestrator
    "failed_verdict",
    "judge_requirement",
    "judge_run",
    # Prompts
    "build_extraction_prompt",
    "build_judge_prompt",
    "build_subject_prompt",
    # Unwrap
    "OutputMode",
    "parse_event_stream",
    "parse_string_result",
    "unwrap_output",
    "unwrap_raw",
    "unwrap_structured",
]
