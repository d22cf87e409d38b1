"""Text and TAP renderers for pipeline results.

Both renderers are pure: they take a PipelineResult and return a string,
keeping requirement order. Persisting the output is up to the caller.
"""

from __future__ import annotations

from promptcheck.core.models import MediaAttachment, PipelineResult, RequirementResult

GREEN = "\x1b[32m"
RED = "\x1b[31m"
RESET = "\x1b[0m"


def _colorize(text: str, passed: bool, color: bool) -> str:
    if not color:
        return text
    return f"{GREEN if passed else RED}{text}{RESET}"


def escape_markdown(text: str) -> str:
    """Escape characters that would break a markdown image reference."""
    for char in ("\\", "[", "]", "(", ")"):
        text = text.replace(char, f"\\{char}")
    return text


def format_media(media: MediaAttachment) -> str:
    """Render a media attachment as a markdown image reference."""
    return f"![{escape_markdown(media.caption)}]({escape_markdown(media.path)})"


def format_requirement_line(result: RequirementResult, *, color: bool = False) -> str:
    """Render one requirement as a single status line.

    Example:
        ``  [PASS] Given a greeting, should reply politely (3/4 runs, avg score 85.00)``

    Args:
        result: Aggregated requirement result.
        color: Wrap the status token in ANSI green or red.

    Returns:
        The line, with media references appended when present.

    """
    status = _colorize("[PASS]" if result.passed else "[FAIL]", result.passed, color)
    line = (
        f"  {status} {result.requirement} "
        f"({result.pass_count}/{result.total_runs} runs, avg score {result.average_score:.2f})"
    )
    if result.media:
        line += " " + " ".join(format_media(m) for m in result.media)
    return line


def render_summary(result: PipelineResult, *, color: bool = False) -> str:
    """Render every requirement line followed by the passed/failed counts."""
    lines = [format_requirement_line(r, color=color) for r in result.requirements]
    lines.append(f"Requirements: {result.passed_count} passed, {result.failed_count} failed")
    return "\n".join(lines)


def format_tap(result: PipelineResult, *, color: bool = False) -> str:
    """Render a pipeline result as TAP version 13.

    Each requirement becomes one test point followed by its pass rate, average
    score and media as diagnostics. The plan and totals come last.

    Args:
        result: Pipeline result to render.
        color: Color ``ok`` / ``not ok`` with ANSI codes.

    Returns:
        TAP document ending with a newline.

    """
    lines = ["TAP version 13"]
    for number, requirement in enumerate(result.requirements, start=1):
        prefix = _colorize("ok" if requirement.passed else "not ok", requirement.passed, color)
        lines.append(f"{prefix} {number} - {requirement.requirement}")
        lines.append(f"  # pass rate: {requirement.pass_count}/{requirement.total_runs}")
        lines.append(f"  # avg score: {requirement.average_score:.2f}")
        for media in requirement.media:
            lines.append(f"  # {format_media(media)}")

    total = len(result.requirements)
    lines.append(f"1..{total}")
    lines.append(f"# tests {total}")
    lines.append(f"# pass  {result.passed_count}")
    if result.failed_count > 0:
        lines.append(f"# fail  {result.failed_count}")
    return "\n".join(lines) + "\n"
