"""Framework and browser-application heuristics."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from .utils import load_node_dependencies

# Priority order: the first package present in the manifest wins.
FRAMEWORK_PACKAGES: Sequence[Tuple[str, str]] = (
    ("next", "Next.js"),
    ("react", "React"),
    ("vue", "Vue"),
    ("angular", "Angular"),
    ("express", "Express"),
    ("fastify", "Fastify"),
    ("koa", "Koa"),
    ("nestjs", "NestJS"),
    ("svelte", "Svelte"),
    ("nuxt", "Nuxt"),
)

WEB_MARKER_PATHS: Sequence[str] = (
    "public/index.html",
    "index.html",
    "src/index.html",
    "pages",
    "components",
    "src/components",
)

BROWSER_FRAMEWORKS: frozenset[str] = frozenset(
    {"React", "Vue", "Angular", "Next.js", "Nuxt", "Svelte"}
)


def detect_framework(root: Path) -> Optional[str]:
    """Return the first known framework found among manifest dependencies."""
    return match_framework(load_node_dependencies(root))


def match_framework(dependencies: Iterable[str]) -> Optional[str]:
    names = set(dependencies)
    for package, label in FRAMEWORK_PACKAGES:
        if package in names or f"@{package}/core" in names:
            return label
    return None


def is_web_app(root: Path, framework: Optional[str]) -> bool:
    if any((root / marker).exists() for marker in WEB_MARKER_PATHS):
        return True
    return framework in BROWSER_FRAMEWORKS


__all__ = [
    "BROWSER_FRAMEWORKS",
    "FRAMEWORK_PACKAGES",
    "WEB_MARKER_PATHS",
    "detect_framework",
    "is_web_app",
    "match_framework",
]
