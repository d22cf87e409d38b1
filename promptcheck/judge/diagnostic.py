"""Diagnostic block parsing for judge output.

Judges answer with a YAML-like diagnostic block:

    ---
    passed: true
    actual: "summary of what was produced"
    expected: "what was expected"
    score: 85
    ---

The block is anchored on ``---`` lines at line boundaries and must carry a
verdict key, so that prose around it, dashes inside it, or a markdown rule
before it cannot be mistaken for the block.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from promptcheck.core.models import Verdict
from promptcheck.errors import ParseError

logger = logging.getLogger(__name__)

_DELIMITER_RE = re.compile(r"^---[ \t]*$")
_KEY_VALUE_RE = re.compile(r"^(\w+):\s*(.+)$")

_KNOWN_KEYS = frozenset({"passed", "actual", "expected", "score"})
_VERDICT_KEYS = frozenset({"passed", "score"})

DEFAULT_ACTUAL = "No actual provided"
DEFAULT_EXPECTED = "No expected provided"


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if value[:1] in ("'", '"'):
        value = value[1:]
    if value[-1:] in ("'", '"'):
        value = value[:-1]
    return value.strip()


def _parse_number(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return math.nan


def _parse_fields(lines: list[str]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for line in lines:
        kv = _KEY_VALUE_RE.match(line.strip())
        if kv is None:
            continue
        key, raw_value = kv.groups()
        value = _strip_quotes(raw_value)
        if key == "passed":
            fields[key] = value == "true"
        elif key == "score":
            fields[key] = _parse_number(value)
        else:
            fields[key] = value
    return fields


def parse_diagnostic_block(output: str) -> dict[str, Any]:
    """Parse the first diagnostic block in judge output.

    Every pair of consecutive ``---`` lines is a candidate. The first
    candidate holding a ``passed`` or ``score`` key is the block; sections
    of prose or markdown rules between ``---`` lines are skipped.

    Args:
        output: Raw judge output.

    Returns:
        Dict with ``passed`` (bool), ``score`` (float, NaN when unparseable) and
        every other key as a string. Keys absent from the block are absent here.

    Raises:
        ParseError: If no candidate carries a verdict.

    """
    lines = output.replace("\r\n", "\n").split("\n")
    delimiters = [index for index, line in enumerate(lines) if _DELIMITER_RE.match(line)]

    for start, end in zip(delimiters, delimiters[1:]):
        fields = _parse_fields(lines[start + 1 : end])
        if _VERDICT_KEYS & fields.keys():
            return fields

    raise ParseError(
        "Judge output does not contain a valid diagnostic block (--- delimited)",
        code="JUDGE_INVALID_DIAGNOSTIC_BLOCK",
        raw_output=output,
    )


def normalize_verdict(raw: Any, *, requirement: str, run_index: int) -> Verdict:
    """Normalize a parsed diagnostic block into a Verdict with safe defaults.

    Args:
        raw: Output of parse_diagnostic_block.
        requirement: Requirement that was judged, for diagnostics.
        run_index: Zero-based run index, for diagnostics.

    Returns:
        Verdict with defaults applied and the score clamped to [0, 100].

    Raises:
        ParseError: If raw is not a mapping.

    """
    if not isinstance(raw, dict):
        raise ParseError(
            "Judge returned non-object response",
            code="JUDGE_INVALID_RESPONSE",
            requirement=requirement,
            run_index=run_index,
            raw_response=repr(raw),
        )

    if raw.get("actual") is None or raw.get("expected") is None:
        logger.warning(f'Judge response missing fields for "{requirement}" run {run_index + 1}')

    score = raw.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool) and math.isfinite(score):
        score = max(0.0, min(100.0, float(score)))
    else:
        score = 0.0

    actual = raw.get("actual")
    expected = raw.get("expected")
    return Verdict(
        passed=raw.get("passed") is True,
        actual=DEFAULT_ACTUAL if actual is None else str(actual),
        expected=DEFAULT_EXPECTED if expected is None else str(expected),
        score=score,
        extras={str(k): str(v) for k, v in raw.items() if k not in _KNOWN_KEYS},
    )


def normalize_block_value(value: str) -> str:
    """Collapse whitespace the way format_diagnostic_block writes text values."""
    return " ".join(value.split())


def _format_value(value: str) -> str:
    return f'"{normalize_block_value(value)}"'


def format_diagnostic_block(verdict: Verdict) -> str:
    """Render a verdict as a diagnostic block that parse_diagnostic_block accepts.

    Block values are single-line, so text values are whitespace-normalized:
    newlines and runs of whitespace collapse to one space and the ends are
    trimmed. Parsing the block back yields the verdict with its text fields
    normalized that way; ``passed``, ``score`` and keys are preserved exactly.

    Args:
        verdict: Verdict to render.

    Returns:
        The block, delimiter lines included.

    """
    score = int(verdict.score) if verdict.score.is_integer() else verdict.score
    lines = [
        "---",
        f"passed: {'true' if verdict.passed else 'false'}",
        f"actual: {_format_value(verdict.actual)}",
        f"expected: {_format_value(verdict.expected)}",
        f"score: {score}",
    ]
    lines.extend(f"{key}: {_format_value(value)}" for key, value in verdict.extras.items())
    lines.append("---")
    return "\n".join(lines)
