"""Tests for the entrypoint analyzer."""

from __future__ import annotations

from pathlib import Path

from wireup.analyzers.entrypoints import EntryPointAnalyzer


def _write(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_entrypoints_listed_in_table_order(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "index.js")
    _write(tmp_path / "server.js")
    _write(tmp_path / "index.js")

    assert EntryPointAnalyzer().analyze(tmp_path, "javascript") == [
        "index.js",
        "server.js",
        "src/index.js",
    ]


def test_python_entrypoints(tmp_path: Path) -> None:
    _write(tmp_path / "__main__.py")
    _write(tmp_path / "main.py")

    assert EntryPointAnalyzer().analyze(tmp_path, "python") == ["main.py", "__main__.py"]


def test_unknown_or_missing_language_has_no_entrypoints(tmp_path: Path) -> None:
    _write(tmp_path / "main.go")

    assert EntryPointAnalyzer().analyze(tmp_path, "go") == []
    assert EntryPointAnalyzer().analyze(tmp_path, None) == []
