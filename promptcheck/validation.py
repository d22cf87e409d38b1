"""Path validation for user-supplied test file paths."""

from __future__ import annotations

from pathlib import Path

from promptcheck.errors import SecurityError
from promptcheck.fileio import PathResolver, resolve_path


def validate_file_path(
    file_path: str | Path,
    base_dir: str | Path,
    *,
    resolve: PathResolver = resolve_path,
) -> Path:
    """Resolve a path against a base directory and keep it inside that directory.

    Args:
        file_path: Relative or absolute path supplied by the caller.
        base_dir: Directory the path must stay within.
        resolve: Path resolver; the filesystem's by default.

    Returns:
        The resolved absolute path.

    Raises:
        SecurityError: If the resolved path lies outside base_dir (PATH_TRAVERSAL).

    """
    base = resolve(Path(base_dir))
    resolved = resolve(base / file_path)
    if not resolved.is_relative_to(base):
        raise SecurityError(
            "File path escapes base directory",
            code="PATH_TRAVERSAL",
            file_path=str(file_path),
            base_dir=str(base),
        )
    return resolved
