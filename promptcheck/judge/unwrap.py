"""Output unwrapping for agent replies.

Agent CLIs answer in several shapes: bare JSON, JSON inside a markdown fence,
a JSON envelope whose ``result`` field holds the real answer (sometimes as a
JSON string of its own), newline-delimited event streams, or plain prose.
This module turns raw stdout into either usable text or structured data by
applying an ordered chain of small, pure strategies.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any

from promptcheck.errors import ParseError

logger = logging.getLogger(__name__)

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*\n([\s\S]*?)\n```")


class OutputMode(str, Enum):
    """How an agent reply should be unwrapped."""

    STRUCTURED = "structured"
    RAW = "raw"


def parse_string_result(result: str) -> Any:
    r"""Parse a string reply, attempting multiple strategies in order.

    1. Direct JSON parse when the text starts with ``{`` or ``[``
    2. JSON inside a markdown code fence (```json or ```)
    3. Plain text, returned unchanged

    Args:
        result: Text to parse.

    Returns:
        Parsed JSON value, or the original string.

    Examples:
        >>> parse_string_result('{"score": 5}')
        {'score': 5}

        >>> parse_string_result('```json\n{"score": 5}\n```')
        {'score': 5}

        >>> parse_string_result('Just prose')
        'Just prose'

    """
    trimmed = result.strip()

    if trimmed.startswith(("{", "[")):
        try:
            return json.loads(trimmed)
        except json.JSONDecodeError:
            logger.debug("Direct JSON parse failed, trying fenced block")

    match = _FENCED_JSON_RE.search(result)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            logger.debug("Fenced block is not valid JSON, keeping plain text")

    return result


def unwrap_structured(output: str) -> Any:
    """Unwrap a reply that is expected to carry structured data.

    Envelopes of the form ``{"result": ...}`` are unwrapped exactly one level.
    When the unwrapped value is itself a string it is parsed once more.

    Args:
        output: Agent stdout.

    Returns:
        Parsed value. A string return means nothing parsed; callers that
        require structure must treat that as a parse failure.

    """
    parsed = parse_string_result(output)

    if isinstance(parsed, dict) and "result" in parsed:
        unwrapped = parsed["result"]
        logger.debug(f"Unwrapped result envelope, inner type: {type(unwrapped).__name__}")
        if isinstance(unwrapped, str):
            return parse_string_result(unwrapped)
        return unwrapped

    return parsed


def unwrap_raw(output: str) -> str:
    """Unwrap a reply that is expected to be prose.

    Only a ``{"result": ...}`` envelope is removed. Fences and nested JSON are
    left alone because subject output is evidence, not an envelope.
    """
    if not output.lstrip().startswith("{"):
        return output

    try:
        parsed = json.loads(output)
    except json.JSONDecodeError:
        return output

    if isinstance(parsed, dict) and "result" in parsed:
        result = parsed["result"]
        return result if isinstance(result, str) else json.dumps(result)

    return output


def parse_event_stream(stream: str) -> str:
    """Concatenate the text fragments of a newline-delimited JSON event stream.

    Records with ``type == "text"`` contribute ``part.text``. Malformed lines
    are skipped with a warning.

    Args:
        stream: Raw newline-delimited JSON output.

    Returns:
        The text fragments joined in stream order.

    Raises:
        ParseError: If the stream holds no text fragments.

    """
    lines = [line for line in stream.strip().splitlines() if line.strip()]
    fragments: list[str] = []

    for line in lines:
        try:
            event = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping malformed event stream line: {e}")
            continue

        if not isinstance(event, dict) or event.get("type") != "text":
            continue

        part = event.get("part")
        text = part.get("text") if isinstance(part, dict) else None
        if isinstance(text, str) and text:
            fragments.append(text)

    if not fragments:
        raise ParseError(
            "No text events found in agent event stream",
            code="NO_TEXT_EVENTS",
            stream_length=len(stream),
            lines_processed=len(lines),
        )

    logger.debug(f"Combined {len(fragments)} text event(s)")
    return "".join(fragments)


def unwrap_output(output: str, mode: OutputMode) -> Any:
    """Dispatch to the unwrapping strategy for a mode."""
    if mode is OutputMode.RAW:
        return unwrap_raw(output)
    return unwrap_structured(output)
