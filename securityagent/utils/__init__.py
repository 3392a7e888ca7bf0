"""
Utility functions for the security agent.
"""

import os
from typing import Iterator, Sequence


IGNORED_DIRS = {
    "node_modules",
    "vendor",
    "dist",
    "build",
    "__pycache__",
}


def iter_source_files(
    root: str,
    extensions: Sequence[str],
    exclude_paths: Sequence[str] = (),
) -> Iterator[str]:
    """
    Walk a directory tree and yield source file paths relative to root.

    Skips dependency and build directories, hidden entries and anything
    under an excluded path prefix. Paths use forward slashes.
    """
    extensions = tuple(extensions)

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in IGNORED_DIRS and not d.startswith(".")
        )

        for filename in sorted(filenames):
            if filename.startswith(".") or not filename.endswith(extensions):
                continue
            rel_path = os.path.relpath(os.path.join(dirpath, filename), root).replace(os.sep, "/")
            if any(rel_path.startswith(prefix) for prefix in exclude_paths):
                continue
            yield rel_path


def truncate_string(s: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate a string to a maximum length."""
    if len(s) <= max_length:
        return s
    return s[:max_length - len(suffix)] + suffix
