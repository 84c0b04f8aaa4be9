"""Repository analyzers producing a coarse CodebaseInfo classification."""

from .codebase import CodebaseAnalyzer, load_context_snippets
from .entrypoints import EntryPointAnalyzer
from .language import LanguageAnalyzer, LanguageProfile

__all__ = [
    "CodebaseAnalyzer",
    "EntryPointAnalyzer",
    "LanguageAnalyzer",
    "LanguageProfile",
    "load_context_snippets",
]
