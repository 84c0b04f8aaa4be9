"""Shared helper utilities for analyzer implementations."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterator, List, Set

from ..logging import get_logger

logger = get_logger("analyzers")

# Dependency caches and build outputs skipped by name during the walk.
EXCLUDED_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        "bower_components",
        "__pycache__",
        "venv",
        ".venv",
        "vendor",
        "dist",
        "build",
        "target",
    }
)


def iter_files(root: Path) -> Iterator[Path]:
    """Yield regular files under root, depth-first in sorted order.

    Uses an explicit stack instead of recursion. Symbolic links are never
    followed, and hidden or dependency-cache directories are pruned by name.
    Directories that cannot be listed are skipped.
    """
    if not root.is_dir():
        return
    stack: List[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            entries = sorted(current.iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", current, exc)
            continue

        subdirs: List[Path] = []
        for entry in entries:
            if entry.is_symlink():
                continue
            if entry.is_dir():
                if _is_excluded_dir(entry.name):
                    continue
                subdirs.append(entry)
            elif entry.is_file():
                yield entry
        # Push in reverse so the lexicographically first directory is visited next.
        stack.extend(reversed(subdirs))


def _is_excluded_dir(name: str) -> bool:
    return name.startswith(".") or name in EXCLUDED_DIRS


def safe_read(path: Path, *, max_chars: int) -> str:
    """Return up to max_chars of text, or "" when the file cannot be read."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Unable to read %s: %s", path, exc)
        return ""
    return text[:max_chars]


def load_package_json(root: Path) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    package_json = root / "package.json"
    if not package_json.is_file():
        return {}
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring malformed package.json at %s: %s", package_json, exc)
        return {}
    if isinstance(data, dict):
        return data
    return {}


def load_node_dependencies(root: Path) -> Set[str]:
    """Return the union of runtime and development dependency names."""
    data = load_package_json(root)
    names: Set[str] = set()
    for key in ("dependencies", "devDependencies"):
        deps = data.get(key, {})
        if isinstance(deps, dict):
            names.update(str(name) for name in deps)
    return names


__all__ = [
    "EXCLUDED_DIRS",
    "iter_files",
    "load_node_dependencies",
    "load_package_json",
    "safe_read",
]
