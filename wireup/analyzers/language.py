"""Dominant-language detection from file extension counts."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .utils import iter_files

STATIC_VARIANT = "typescript"
DYNAMIC_VARIANT = "javascript"

LANGUAGE_BY_SUFFIX: Dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
}


@dataclass(frozen=True)
class LanguageProfile:
    """Per-language file counts and the selected primary language."""

    primary: Optional[str]
    has_static_typing: bool
    counts: Dict[str, int] = field(default_factory=dict)


class LanguageAnalyzer:
    """Counts source files by extension and picks the dominant language."""

    def analyze(self, root: Path) -> LanguageProfile:
        counts: Counter[str] = Counter()
        for path in iter_files(root):
            language = LANGUAGE_BY_SUFFIX.get(path.suffix.lower())
            if language is not None:
                counts[language] += 1

        if counts[STATIC_VARIANT]:
            return LanguageProfile(STATIC_VARIANT, True, dict(counts))
        if counts[DYNAMIC_VARIANT]:
            return LanguageProfile(DYNAMIC_VARIANT, False, dict(counts))
        populated = {language: count for language, count in counts.items() if count}
        if not populated:
            return LanguageProfile(None, False, {})
        # Highest count wins; equal counts resolve lexicographically by name.
        primary = min(populated, key=lambda language: (-populated[language], language))
        return LanguageProfile(primary, False, populated)


__all__ = ["LANGUAGE_BY_SUFFIX", "LanguageAnalyzer", "LanguageProfile"]
