"""Combines the individual analyzers into a single CodebaseInfo."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from ..logging import get_logger
from ..models import CodebaseInfo
from .entrypoints import EntryPointAnalyzer
from .frameworks import detect_framework, is_web_app
from .language import LanguageAnalyzer
from .utils import safe_read

ENTRY_POINT_CONTEXT_LIMIT = 2
ENTRY_POINT_CONTEXT_CHARS = 2000
MANIFEST_CONTEXT_CHARS = 1000


class CodebaseAnalyzer:
    """Classifies a working copy: language, framework, entry points, web flag."""

    def __init__(
        self,
        language_analyzer: LanguageAnalyzer | None = None,
        entrypoint_analyzer: EntryPointAnalyzer | None = None,
    ) -> None:
        self.language_analyzer = language_analyzer or LanguageAnalyzer()
        self.entrypoint_analyzer = entrypoint_analyzer or EntryPointAnalyzer()
        self.logger = get_logger("analyzer")

    def analyze(self, root: Path | str, *, framework_override: Optional[str] = None) -> CodebaseInfo:
        """Return the classification for root.

        Missing directories and files are treated as absent signals; a
        malformed package.json yields no framework rather than an error.
        """
        root_path = Path(root)
        profile = self.language_analyzer.analyze(root_path)
        entry_points = self.entrypoint_analyzer.analyze(root_path, profile.primary)

        if framework_override and framework_override.lower() != "auto":
            framework: Optional[str] = framework_override
            self.logger.info("Using specified framework: %s", framework_override)
        else:
            framework = detect_framework(root_path)

        info = CodebaseInfo(
            language=profile.primary,
            framework=framework,
            entry_points=tuple(entry_points),
            is_web_app=is_web_app(root_path, framework),
            has_static_typing=profile.has_static_typing,
        )
        self.logger.debug("Analysis of %s produced %s (counts=%s)", root_path, info, profile.counts)
        return info


def load_context_snippets(root: Path | str, info: CodebaseInfo) -> Dict[str, str]:
    """Collect truncated excerpts of entry points and manifests for generation."""
    root_path = Path(root)
    context: Dict[str, str] = {}

    for entry in info.entry_points[:ENTRY_POINT_CONTEXT_LIMIT]:
        text = safe_read(root_path / entry, max_chars=ENTRY_POINT_CONTEXT_CHARS)
        if text:
            context[entry] = text

    manifests = ["package.json"]
    if info.has_static_typing:
        manifests.append("tsconfig.json")
    for name in manifests:
        text = safe_read(root_path / name, max_chars=MANIFEST_CONTEXT_CHARS)
        if text:
            context[name] = text

    return context


__all__ = ["CodebaseAnalyzer", "load_context_snippets"]
