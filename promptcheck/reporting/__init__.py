"""Reporting for promptcheck results."""

from promptcheck.reporting.tap import (
    escape_markdown,
    format_media,
    format_requirement_line,
    format_tap,
    render_summary,
)

__all__ = [
    "escape_markdown",
    "format_media",
    "format_requirement_line",
    "format_tap",
    "render_summary",
]
