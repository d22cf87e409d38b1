"""Filesystem capabilities used by the pipeline.

The pipeline reads the test file and its imports through a ``TextReader`` and
resolves paths through a ``PathResolver``. Callers may supply their own, for
example an in-memory store in tests or a sandboxed file system. Readers
signal a missing or unreadable file by raising ``OSError``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

TextReader = Callable[[Path], Awaitable[str]]
PathResolver = Callable[[Path], Path]


async def read_text_file(path: Path) -> str:
    """Read a UTF-8 file without blocking the event loop."""
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


def resolve_path(path: Path) -> Path:
    """Make a path absolute, normalizing ``..`` and symlinks."""
    return path.resolve()
