"""
File utility functions for EPUB Narrator.

Directory creation, markup file discovery and UTF-8 JSON writing.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List


def ensure_directories(paths: Dict[str, str]) -> None:
    """Create directories from paths dict if they don't exist.

    Idempotent operation - safe to call multiple times.

    Args:
        paths: Dictionary mapping names to directory paths.

    Examples:
        >>> ensure_directories({"output": "/tmp/output", "jobs": "/tmp/jobs"})
    """
    for path in paths.values():
        os.makedirs(path, exist_ok=True)


def list_markup_under(root: str, extensions: Iterable[str] = (".xhtml", ".html")) -> List[str]:
    """List markup files under root directory, sorted by relative path.

    Args:
        root: Root directory to search recursively.
        extensions: File extensions to include (compared case-insensitively).

    Returns:
        List of absolute file paths. Empty if root does not exist.

    Examples:
        >>> files = list_markup_under("tmp/xhtml")
    """
    if not os.path.exists(root):
        return []

    wanted = tuple(ext.lower() for ext in extensions)
    markup_files = []
    for dirpath, _, filenames in os.walk(root):
        for filename in filenames:
            if filename.lower().endswith(wanted):
                markup_files.append(os.path.abspath(os.path.join(dirpath, filename)))

    return sorted(markup_files, key=lambda p: os.path.relpath(p, root))


def write_json(path: Path, data: Any) -> Path:
    """Write data as indented UTF-8 JSON, keeping non-ASCII text readable."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path
