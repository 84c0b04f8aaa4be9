"""Analyzer to detect conventional entrypoint files for the primary language."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

COMMON_ENTRY_POINTS: Dict[str, Sequence[str]] = {
    "javascript": ("index.js", "app.js", "server.js", "main.js", "src/index.js"),
    "typescript": ("index.ts", "app.ts", "server.ts", "main.ts", "src/index.ts"),
    "python": ("app.py", "main.py", "run.py", "server.py", "__main__.py"),
}


class EntryPointAnalyzer:
    """Lists every conventional entrypoint that exists, in table order."""

    def analyze(self, root: Path, language: Optional[str]) -> List[str]:
        if not language:
            return []
        candidates = COMMON_ENTRY_POINTS.get(language, ())
        return [entry for entry in candidates if (root / entry).exists()]


__all__ = ["COMMON_ENTRY_POINTS", "EntryPointAnalyzer"]
